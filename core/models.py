from django.db import models


class RaceSetting(models.Model):
    """Race-wide settings and the authoritative race clock, one row per season."""

    season = models.PositiveIntegerField(unique=True)
    goal_radius = models.FloatField(help_text="Auto-finish radius around the finish line, in meters")
    rank_limit = models.PositiveIntegerField(help_text="Top-N shown per category")
    senior_year = models.PositiveIntegerField(help_text="Birth years up to and including this are senior")
    finish_lat = models.FloatField()
    finish_lng = models.FloatField()

    start_time = models.DateTimeField(null=True, blank=True)
    finish_time = models.DateTimeField(null=True, blank=True)
    is_counting_down = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Race {self.season}"
