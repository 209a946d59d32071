# registration/serializers.py
from rest_framework import serializers

from core.config import current_season
from .models import Gender, PaymentStatus, Runner


class RunnerSerializer(serializers.ModelSerializer):
    """Runner record in the camelCase shape dashboards consume."""

    bibNumber = serializers.CharField(source="bib_number", max_length=20)
    birthYear = serializers.IntegerField(source="birth_year", min_value=1900, max_value=2100)
    paymentStatus = serializers.ChoiceField(
        source="payment_status", choices=PaymentStatus.choices, required=False
    )
    startTime = serializers.DateTimeField(source="start_time", allow_null=True, required=False)
    finishTime = serializers.DateTimeField(source="finish_time", allow_null=True, required=False)
    autoFinishTime = serializers.DateTimeField(source="auto_finish_time", allow_null=True, required=False)
    printCount = serializers.IntegerField(source="print_count", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Runner
        fields = [
            "id", "bibNumber", "name", "gender", "birthYear", "affiliation", "paymentStatus",
            "startTime", "finishTime", "autoFinishTime", "printCount", "createdAt",
        ]

    def validate_bibNumber(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Bib number may not be blank.")
        season = self.instance.season if self.instance else current_season()
        clash = Runner.objects.in_season(season).filter(bib_number=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError(f"Bib {value} is already registered for {season}.")
        return value

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        finish = attrs.get("finish_time", getattr(self.instance, "finish_time", None))
        if finish is not None:
            if start is None:
                raise serializers.ValidationError({"finishTime": "A finish time requires a start time."})
            if finish < start:
                raise serializers.ValidationError({"finishTime": "Finish time is before start time."})
        return attrs


class BulkRunnerSerializer(serializers.Serializer):
    """One row of a bulk registration upload; upserted by bib."""

    bibNumber = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100)
    gender = serializers.ChoiceField(choices=Gender.choices)
    birthYear = serializers.IntegerField(min_value=1900, max_value=2100)
    affiliation = serializers.CharField(max_length=200, allow_blank=True, default="")
    paymentStatus = serializers.ChoiceField(choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)

    def validate_bibNumber(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Bib number may not be blank.")
        return value


def bulk_row_fields(data: dict) -> dict:
    return {
        "name": data["name"],
        "gender": data["gender"],
        "birth_year": data["birthYear"],
        "affiliation": data["affiliation"],
        "payment_status": data["paymentStatus"],
    }


def runner_payload(runner: Runner) -> dict:
    return dict(RunnerSerializer(runner).data)


def runner_payloads(runners) -> list:
    return [dict(row) for row in RunnerSerializer(runners, many=True).data]
