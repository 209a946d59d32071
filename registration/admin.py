# registration/admin.py
from django.contrib import admin
from .models import Runner

@admin.register(Runner)
class RunnerAdmin(admin.ModelAdmin):
    list_display = ('bib_number', 'name', 'gender', 'birth_year', 'payment_status', 'start_time', 'finish_time', 'auto_finish_time')
    list_filter = ('gender', 'payment_status')
    search_fields = ('bib_number', 'name', 'affiliation')
