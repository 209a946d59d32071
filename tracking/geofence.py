# tracking/geofence.py
"""
Finish-line geofence.

evaluate() is pure: it takes the runner's start, the current time, a GPS
fix and the finish line, and reports the great-circle distance plus whether
the fix qualifies for an auto-finish or an "approaching" heads-up.

process_location_update() applies it to a stored runner. The only write it
makes is the auto_finish_time latch, which is set at most once per runner
and never touches the official finish_time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from django.conf import settings
from django.utils import timezone
from geopy.distance import great_circle

from registration.models import Runner
from timing.arrivals import find_runner
from timing.exceptions import InvalidPayload
from .broadcast import broadcast_all

log = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeofenceResult:
    distance_m: float
    elapsed_minutes: Optional[float]
    eligible: bool
    approaching: bool


def distance_m(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Great-circle distance in meters between two (lat, lng) pairs on a 6,371 km sphere."""
    return great_circle(a, b, radius=EARTH_RADIUS_KM).meters


def evaluate(runner_start: Optional[datetime], now: datetime, lat: float, lng: float,
             finish_line: Tuple[float, float], radius_m: float,
             min_minutes: Optional[float] = None,
             approach_m: Optional[float] = None) -> GeofenceResult:
    if min_minutes is None:
        min_minutes = settings.RACE_AUTO_FINISH_MIN_MINUTES
    if approach_m is None:
        approach_m = settings.RACE_APPROACH_RADIUS_M

    meters = distance_m((lat, lng), finish_line)
    if runner_start is None:
        return GeofenceResult(meters, None, False, False)

    elapsed = (now - runner_start).total_seconds() / 60.0
    # nothing counts before min_minutes on course
    late_enough = elapsed >= min_minutes
    return GeofenceResult(
        distance_m=meters,
        elapsed_minutes=elapsed,
        eligible=late_enough and meters <= radius_m,
        approaching=late_enough and meters <= approach_m,
    )


@dataclass
class LocationOutcome:
    runner: Runner
    lat: float
    lng: float
    result: GeofenceResult
    auto_finished: bool = False

    @property
    def approaching(self) -> bool:
        # only a heads-up while the official finish is still open
        return self.result.approaching and self.runner.finish_time is None


def parse_position(data) -> Tuple[str, float, float]:
    """(bib, lat, lng) from a {bib, lat, lng} payload; InvalidPayload on anything else."""
    if not isinstance(data, dict):
        raise InvalidPayload(message="Location must be an object with bib, lat and lng.")
    try:
        bib = str(data["bib"]).strip()
        lat = float(data["lat"])
        lng = float(data["lng"])
    except (KeyError, TypeError, ValueError):
        raise InvalidPayload(message="Location must be an object with bib, lat and lng.")
    if not bib or not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
        raise InvalidPayload(message="Location is out of range.")
    return bib, lat, lng


def process_location_update(bib, lat: float, lng: float, config, now=None) -> LocationOutcome:
    """
    Evaluate a GPS fix for `bib` against `config` (a RaceConfig) and latch
    auto_finish_time when eligible. Synchronous; raises UnknownBib.
    """
    now = now or timezone.now()
    runner = find_runner(bib, config.season)
    result = evaluate(runner.start_time, now, lat, lng, config.finish_line, config.goal_radius)
    outcome = LocationOutcome(runner=runner, lat=lat, lng=lng, result=result)

    if result.eligible and runner.auto_finish_time is None:
        latched = Runner.objects.filter(pk=runner.pk, auto_finish_time__isnull=True).update(auto_finish_time=now)
        if latched:
            runner.auto_finish_time = now
            outcome.auto_finished = True
            log.info("Bib %s auto-finished %.1fm from the line", runner.bib_number, result.distance_m)
    return outcome


async def announce_location(outcome: LocationOutcome, exclude: Optional[str] = None):
    """Relay the fix to the live map and raise the approaching / auto-finish alerts."""
    runner = outcome.runner
    distance = round(outcome.result.distance_m, 1)
    await broadcast_all(
        "update_runner_map",
        {"bib": runner.bib_number, "name": runner.name, "lat": outcome.lat, "lng": outcome.lng},
        exclude=exclude,
    )
    if outcome.approaching:
        await broadcast_all("runner_approaching", {"bib": runner.bib_number, "name": runner.name, "distance": distance})
    if outcome.auto_finished:
        await broadcast_all("auto_goal_success", {"name": runner.name})
