# core/admin.py
from django.contrib import admin
from .config import race_config
from .models import RaceSetting

@admin.register(RaceSetting)
class RaceSettingAdmin(admin.ModelAdmin):
    list_display = ('season', 'goal_radius', 'rank_limit', 'senior_year', 'start_time', 'finish_time')
    readonly_fields = ('start_time', 'finish_time', 'is_counting_down', 'updated_at')

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        # settings edited here bypass race_config.update(); drop the cached copy
        race_config.invalidate()
