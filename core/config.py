# core/config.py
"""
In-process cache of the persisted RaceSetting.

Handlers read goal radius, rank limit, senior year and finish line from
`race_config.current` instead of querying the store on every GPS ping.
Writes go through `race_config.update()`, which persists first and only
then swaps the cached value, so the cache never runs ahead of the store.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import RaceSetting

log = logging.getLogger(__name__)

CONFIG_FIELDS = ("goal_radius", "rank_limit", "senior_year", "finish_lat", "finish_lng")


def current_season() -> int:
    return settings.RACE_SEASON or timezone.localdate().year


@dataclass(frozen=True)
class RaceConfig:
    season: int
    goal_radius: float
    rank_limit: int
    senior_year: int
    finish_lat: float
    finish_lng: float

    @property
    def finish_line(self) -> tuple[float, float]:
        return (self.finish_lat, self.finish_lng)

    @classmethod
    def from_setting(cls, setting: RaceSetting) -> "RaceConfig":
        return cls(season=setting.season, **{f: getattr(setting, f) for f in CONFIG_FIELDS})

    def as_payload(self) -> dict:
        return {
            "goalRadius": self.goal_radius,
            "rankLimit": self.rank_limit,
            "seniorYear": self.senior_year,
            "finishLine": {"lat": self.finish_lat, "lng": self.finish_lng},
        }


def get_or_create_setting(season: int) -> RaceSetting:
    setting, created = RaceSetting.objects.get_or_create(
        season=season, defaults=dict(settings.RACE_DEFAULTS)
    )
    if created:
        log.info("Created default race settings for season %s", season)
    return setting


class RaceConfigStore:
    """Holds the current season's RaceConfig. All methods are synchronous (ORM)."""

    def __init__(self):
        self._config: Optional[RaceConfig] = None
        self._lock = threading.Lock()

    def load(self, season: Optional[int] = None) -> RaceConfig:
        season = season or current_season()
        config = RaceConfig.from_setting(get_or_create_setting(season))
        with self._lock:
            self._config = config
        return config

    @property
    def current(self) -> RaceConfig:
        config = self._config
        if config is None or config.season != current_season():
            config = self.load()
        return config

    def update(self, **changes) -> RaceConfig:
        unknown = set(changes) - set(CONFIG_FIELDS)
        if unknown:
            raise ValueError(f"Unknown race setting(s): {', '.join(sorted(unknown))}")
        base = self.current
        with transaction.atomic():
            get_or_create_setting(base.season)
            RaceSetting.objects.filter(season=base.season).update(**changes)
        config = replace(base, **changes)
        with self._lock:
            self._config = config
        log.info("Race settings updated for season %s: %s", config.season, changes)
        return config

    def invalidate(self):
        with self._lock:
            self._config = None


race_config = RaceConfigStore()
