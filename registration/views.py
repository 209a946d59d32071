# registration/views.py
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from core.config import current_season
from tracking.broadcast import publish_standings_sync
from .models import Runner
from .serializers import BulkRunnerSerializer, RunnerSerializer, bulk_row_fields, runner_payload

log = logging.getLogger(__name__)


def _season(request) -> int:
    raw = request.query_params.get("season")
    if raw in (None, ""):
        return current_season()
    try:
        return int(raw)
    except ValueError:
        raise ValidationError({"season": "Season must be a year."})


class RunnerListView(generics.ListCreateAPIView):
    serializer_class = RunnerSerializer

    def get_queryset(self):
        return Runner.objects.in_season(_season(self.request)).order_by("bib_number", "id")

    def perform_create(self, serializer):
        serializer.save()
        publish_standings_sync()


class RunnerDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = RunnerSerializer
    queryset = Runner.objects.all()

    def perform_update(self, serializer):
        serializer.save()
        publish_standings_sync()

    def perform_destroy(self, instance):
        log.info("Deleting runner %s", instance)
        instance.delete()
        publish_standings_sync()


@api_view(["POST"])
def bulk_upsert(request):
    """
    Register or update many runners at once, matched by bib within the season.
    Body: a list of runner rows, or {"runners": [...]}.
    """
    rows = request.data.get("runners") if isinstance(request.data, dict) else request.data
    if not isinstance(rows, list):
        raise ValidationError({"runners": "Expected a list of runners."})
    serializer = BulkRunnerSerializer(data=rows, many=True)
    serializer.is_valid(raise_exception=True)

    season = current_season()
    created = updated = 0
    with transaction.atomic():
        for row in serializer.validated_data:
            fields = bulk_row_fields(row)
            existing = Runner.objects.in_season(season).filter(bib_number=row["bibNumber"]).order_by("id").first()
            if existing is None:
                Runner.objects.create(bib_number=row["bibNumber"], created_at=timezone.now(), **fields)
                created += 1
            else:
                Runner.objects.filter(pk=existing.pk).update(**fields)
                updated += 1
    log.info("Bulk upsert for season %s: %d created, %d updated", season, created, updated)
    publish_standings_sync()
    return Response({"created": created, "updated": updated}, status=status.HTTP_200_OK)


@api_view(["POST"])
def reset_records(request):
    """Clear finish and auto-finish times and print counts; start stamps stay."""
    cleared = Runner.objects.in_season(current_season()).update(
        finish_time=None, auto_finish_time=None, print_count=0
    )
    log.info("Reset records of %d runners", cleared)
    publish_standings_sync()
    return Response({"cleared": cleared})


@api_view(["POST"])
def increment_print(request, pk):
    """Count one more printed certificate for runner `pk`."""
    if not Runner.objects.filter(pk=pk).update(print_count=F("print_count") + 1):
        raise NotFound("Runner not found.")
    return Response(runner_payload(Runner.objects.get(pk=pk)))
