# timing/arrivals.py
"""
Finish-line arrivals reported by volunteers (by voice or keypad).

record_arrival() is the only writer of a runner's official finish_time
outside the race-wide sweep in RaceClock.finish_race(). Both operations are
synchronous ORM code; call them through sync_to_async from consumers.
"""
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from core.config import current_season
from registration.models import Runner
from .exceptions import AlreadyFinished, NoFinishRecorded, RaceNotStarted, UnknownBib

log = logging.getLogger(__name__)


def normalize_bib(bib) -> str:
    return str(bib).strip() if bib is not None else ""


def find_runner(bib, season: Optional[int] = None) -> Runner:
    bib = normalize_bib(bib)
    season = season or current_season()
    runner = Runner.objects.in_season(season).filter(bib_number=bib).order_by("id").first()
    if runner is None:
        raise UnknownBib(bib or None)
    return runner


def record_arrival(bib, season: Optional[int] = None, now=None) -> Runner:
    """
    Stamp the official finish time for `bib`.

    Raises UnknownBib, RaceNotStarted or AlreadyFinished without touching the
    record. A repeated report for a finished runner is always AlreadyFinished,
    so callers can resend safely.
    """
    now = now or timezone.now()
    with transaction.atomic():
        runner = find_runner(bib, season)
        if runner.start_time is None:
            raise RaceNotStarted(runner.bib_number)
        # conditional update: a concurrent report that won the race leaves 0 rows here
        updated = Runner.objects.filter(pk=runner.pk, finish_time__isnull=True).update(finish_time=now)
        if not updated:
            raise AlreadyFinished(runner.bib_number)
    runner.finish_time = now
    log.info("Bib %s finished at %s", runner.bib_number, now.isoformat())
    return runner


def cancel_arrival(bib, season: Optional[int] = None) -> Runner:
    """Clear a mistaken finish time. Raises UnknownBib or NoFinishRecorded."""
    with transaction.atomic():
        runner = find_runner(bib, season)
        updated = Runner.objects.filter(pk=runner.pk, finish_time__isnull=False).update(finish_time=None)
        if not updated:
            raise NoFinishRecorded(runner.bib_number)
    runner.finish_time = None
    log.info("Bib %s finish time cancelled", runner.bib_number)
    return runner


def get_runner_info(bib, season: Optional[int] = None) -> Optional[Runner]:
    try:
        return find_runner(bib, season)
    except UnknownBib:
        return None
