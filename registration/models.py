from django.db import models
from django.utils import timezone


class Gender(models.TextChoices):
    MALE = "M", "Male"
    FEMALE = "F", "Female"


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"
    FREE = "free", "Free"


class RunnerQuerySet(models.QuerySet):
    def in_season(self, season: int):
        """Runners registered during `season` (the calendar year of creation)."""
        return self.filter(created_at__year=season)

    def started(self):
        return self.filter(start_time__isnull=False)

    def finished(self):
        return self.filter(finish_time__isnull=False)

    def unfinished(self):
        return self.started().filter(finish_time__isnull=True)


class Runner(models.Model):
    # bibs are strings even when numeric ("007" and "7" are different bibs)
    bib_number = models.CharField(max_length=20, db_index=True)
    name = models.CharField(max_length=100)
    gender = models.CharField(max_length=1, choices=Gender.choices)
    birth_year = models.PositiveIntegerField()
    affiliation = models.CharField(max_length=200, blank=True, default="")
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)

    start_time = models.DateTimeField(null=True, blank=True)
    # official finish; auto_finish_time is the geofence observation and never overwrites it
    finish_time = models.DateTimeField(null=True, blank=True, db_index=True)
    auto_finish_time = models.DateTimeField(null=True, blank=True)

    print_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = RunnerQuerySet.as_manager()

    class Meta:
        ordering = ['bib_number']

    def __str__(self):
        return f"{self.bib_number} - {self.name}"

    @property
    def season(self) -> int:
        return timezone.localtime(self.created_at).year
