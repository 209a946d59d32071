from django.db import models
from registration.models import Runner


class Notification(models.Model):
    runner = models.ForeignKey(Runner, on_delete=models.SET_NULL, null=True, blank=True)
    bib_number = models.CharField(max_length=20)
    lat = models.FloatField()
    lng = models.FloatField()
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    sent = models.BooleanField(default=False)

    def __str__(self):
        return f"Notification: {self.message[:50]}"
