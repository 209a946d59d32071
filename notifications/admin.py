# notifications/admin.py
from django.contrib import admin
from .models import Notification

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('bib_number', 'runner', 'lat', 'lng', 'created_at', 'sent')
    list_filter = ('sent',)
