"""
Shared fixtures for the race console tests.

The race clock and the settings cache are process-wide singletons, so every
test starts from a forgotten clock, an empty cache and a fresh in-memory
channel layer. Countdown ticks are zero-length.
"""
import math
from datetime import timedelta

import pytest
from channels.layers import channel_layers
from django.utils import timezone

from core.config import race_config
from registration.models import Runner
from timing.clock import race_clock

FINISH_LAT = 37.5665
FINISH_LNG = 126.9780
EARTH_RADIUS_M = 6371000.0


def north_of(lat: float, meters: float) -> float:
    """Latitude `meters` due north of `lat` on the 6,371 km sphere."""
    return lat + math.degrees(meters / EARTH_RADIUS_M)


@pytest.fixture(autouse=True)
def fresh_race_state(settings):
    settings.RACE_SEASON = None
    settings.RACE_COUNTDOWN_TICK_SECONDS = 0
    settings.RACE_DEFAULTS = {
        "goal_radius": 50.0,
        "rank_limit": 3,
        "senior_year": 1975,
        "finish_lat": FINISH_LAT,
        "finish_lng": FINISH_LNG,
    }
    channel_layers.backends = {}
    race_config.invalidate()
    race_clock.forget()
    yield
    race_config.invalidate()
    race_clock.forget()


@pytest.fixture
def make_runner(db):
    """Factory: make_runner("101", gender="F", started_minutes_ago=40, ...)."""
    def _make(bib, started_minutes_ago=None, finished_minutes_ago=None, **fields):
        now = timezone.now()
        defaults = {
            "name": f"Runner {bib}",
            "gender": "M",
            "birth_year": 1985,
        }
        defaults.update(fields)
        if started_minutes_ago is not None:
            defaults["start_time"] = now - timedelta(minutes=started_minutes_ago)
        if finished_minutes_ago is not None:
            defaults["finish_time"] = now - timedelta(minutes=finished_minutes_ago)
        return Runner.objects.create(bib_number=str(bib), **defaults)
    return _make
