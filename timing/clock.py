# timing/clock.py
"""
The authoritative race clock.

Phase is explicit (RacePhase) and only changes through _transition(), which
rejects moves outside TRANSITIONS:

    NOT_STARTED -> COUNTDOWN -> RUNNING -> FINISHED
    any phase   -> NOT_STARTED            (reset, or countdown cancelled)

The countdown runs as an asyncio.Task. Once the phase flips to COUNTDOWN,
further start requests are ignored, as are starts that arrive while a
finish or reset holds the lock. The checks and the flip happen without an
await in between, so two handlers can never both pass them.

A countdown that fails for any reason returns the phase to NOT_STARTED,
clears the stored countdown flag and tells only the requester.

Race-wide stamps (start, straggler sweep, reset) are single UPDATE
statements inside one transaction: either every runner gets the stamp or
none does, and nothing is broadcast on failure.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.config import current_season, get_or_create_setting
from core.models import RaceSetting
from registration.models import Runner
from tracking.broadcast import broadcast_all, publish_standings, respond_to
from .exceptions import AlreadyStarted, InvalidTransition, PersistenceFailure, RaceNotStarted

log = logging.getLogger(__name__)


class RacePhase(str, Enum):
    NOT_STARTED = "not_started"
    COUNTDOWN = "countdown"
    RUNNING = "running"
    FINISHED = "finished"


TRANSITIONS = {
    RacePhase.NOT_STARTED: {RacePhase.COUNTDOWN, RacePhase.NOT_STARTED},
    RacePhase.COUNTDOWN: {RacePhase.RUNNING, RacePhase.NOT_STARTED},
    RacePhase.RUNNING: {RacePhase.FINISHED, RacePhase.NOT_STARTED},
    RacePhase.FINISHED: {RacePhase.NOT_STARTED},
}


def phase_of(setting: RaceSetting) -> RacePhase:
    if setting.finish_time is not None:
        return RacePhase.FINISHED
    if setting.start_time is not None:
        return RacePhase.RUNNING
    return RacePhase.NOT_STARTED


# ----------------------------- store operations (sync) -----------------------------

def _load_setting(season: int) -> RaceSetting:
    setting = get_or_create_setting(season)
    if setting.is_counting_down:
        # a countdown never survives a restart
        RaceSetting.objects.filter(pk=setting.pk).update(is_counting_down=False)
        setting.is_counting_down = False
        log.warning("Cleared stale countdown flag for season %s", season)
    return setting


def _mark_counting_down(season: int, flag: bool):
    RaceSetting.objects.filter(season=season).update(is_counting_down=flag)


def _stamp_start(season: int, now) -> int:
    with transaction.atomic():
        RaceSetting.objects.filter(season=season).update(
            start_time=now, finish_time=None, is_counting_down=False
        )
        return Runner.objects.in_season(season).update(start_time=now)


def _stamp_finish(season: int, now) -> int:
    with transaction.atomic():
        RaceSetting.objects.filter(season=season).update(finish_time=now)
        return Runner.objects.in_season(season).unfinished().update(finish_time=now)


def _clear_race(season: int) -> int:
    with transaction.atomic():
        RaceSetting.objects.filter(season=season).update(
            start_time=None, finish_time=None, is_counting_down=False
        )
        return Runner.objects.in_season(season).update(
            start_time=None, finish_time=None, auto_finish_time=None, print_count=0
        )


# ----------------------------- Race Clock -----------------------------

class RaceClock:
    def __init__(self, countdown_ticks: Optional[int] = None, tick_seconds: Optional[float] = None):
        self._countdown_ticks = countdown_ticks
        self._tick_seconds = tick_seconds
        self._countdown: Optional[asyncio.Task] = None
        self.forget()

    def forget(self):
        """Drop in-memory state (and any running countdown); the next call reloads from the store."""
        if self._countdown is not None and not self._countdown.done():
            self._countdown.cancel()
        self._countdown = None
        self._lock = asyncio.Lock()
        self._loaded = False
        self.season: Optional[int] = None
        self.phase = RacePhase.NOT_STARTED
        self.start_time = None
        self.finish_time = None

    @property
    def countdown_ticks(self) -> int:
        if self._countdown_ticks is not None:
            return self._countdown_ticks
        return settings.RACE_COUNTDOWN_TICKS

    @property
    def tick_seconds(self) -> float:
        if self._tick_seconds is not None:
            return self._tick_seconds
        return settings.RACE_COUNTDOWN_TICK_SECONDS

    @property
    def is_counting_down(self) -> bool:
        return self.phase is RacePhase.COUNTDOWN

    @property
    def countdown_task(self) -> Optional[asyncio.Task]:
        return self._countdown

    def _transition(self, to: RacePhase):
        if to not in TRANSITIONS[self.phase]:
            raise InvalidTransition(message=f"Race cannot go from {self.phase.value} to {to.value}.")
        if to is not self.phase:
            log.info("Race phase %s -> %s", self.phase.value, to.value)
        self.phase = to

    # ---------- loading ----------
    def load(self, season: Optional[int] = None):
        season = season or current_season()
        setting = _load_setting(season)
        if self._loaded and self.season == season:
            # another handler loaded first and may already have moved the phase
            return
        self.season = season
        self.start_time = setting.start_time
        self.finish_time = setting.finish_time
        self.phase = phase_of(setting)
        self._loaded = True

    async def ensure_loaded(self):
        if not self._loaded or self.season != current_season():
            await sync_to_async(self.load)()

    def status(self) -> dict:
        return {
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "finishTime": self.finish_time.isoformat() if self.finish_time else None,
            "isStarted": self.phase in (RacePhase.RUNNING, RacePhase.FINISHED),
            "isFinished": self.phase is RacePhase.FINISHED,
        }

    # ---------- start ----------
    def _begin_countdown(self):
        if self.phase is not RacePhase.NOT_STARTED:
            raise AlreadyStarted(message=f"Start ignored, race is {self.phase.value}.")
        self._transition(RacePhase.COUNTDOWN)

    async def start_race(self, requester: Optional[str] = None) -> Optional[asyncio.Task]:
        """
        Begin the countdown unless a start is recorded or a countdown is running.
        Returns the countdown task, or None when the request was dropped.
        `requester` is the channel that asked; it alone hears about a failed start.
        """
        await self.ensure_loaded()
        # no await between these checks and the flip to COUNTDOWN
        if self._lock.locked():
            log.info("Start ignored, a finish or reset is in progress")
            return None
        try:
            self._begin_countdown()
        except AlreadyStarted as exc:
            log.info(exc.message)
            return None
        self._countdown = asyncio.get_running_loop().create_task(self._run_countdown(requester))
        return self._countdown

    async def _run_countdown(self, requester: Optional[str]):
        season = self.season
        try:
            await sync_to_async(_mark_counting_down)(season, True)
            for remaining in range(self.countdown_ticks, 0, -1):
                await broadcast_all("countdown", remaining)
                await asyncio.sleep(self.tick_seconds)
            now = timezone.now()
            stamped = await sync_to_async(_stamp_start)(season, now)
        except asyncio.CancelledError:
            log.info("Countdown cancelled")
            if self.phase is RacePhase.COUNTDOWN:
                self._transition(RacePhase.NOT_STARTED)
            raise
        except Exception:
            log.exception("Race start failed")
            await self._abort_countdown(season, requester)
            return

        self.start_time = now
        self.finish_time = None
        self._transition(RacePhase.RUNNING)
        log.info("Race started at %s (%d runners stamped)", now.isoformat(), stamped)
        await broadcast_all("race_status", self.status())
        await publish_standings()

    async def _abort_countdown(self, season: int, requester: Optional[str]):
        if self.phase is RacePhase.COUNTDOWN:
            self._transition(RacePhase.NOT_STARTED)
        try:
            await sync_to_async(_mark_counting_down)(season, False)
            if requester:
                await respond_to(requester, "error_msg", PersistenceFailure.message)
        except Exception:
            log.exception("Could not clean up after the failed start")

    async def cancel_countdown(self) -> bool:
        task = self._countdown
        if task is None or task.done():
            return False
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        await sync_to_async(_mark_counting_down)(self.season, False)
        return True

    # ---------- finish ----------
    async def finish_race(self) -> bool:
        """
        Stamp the race finish and sweep every runner still on course.
        Returns False when the race had already finished.
        """
        await self.ensure_loaded()
        async with self._lock:
            if self.phase is RacePhase.FINISHED:
                log.info("Finish ignored, race already finished")
                return False
            if self.phase is not RacePhase.RUNNING:
                raise RaceNotStarted()
            now = timezone.now()
            swept = await sync_to_async(_stamp_finish)(self.season, now)
            self.finish_time = now
            self._transition(RacePhase.FINISHED)
        log.info("Race finished at %s (%d runners swept)", now.isoformat(), swept)
        await broadcast_all("race_status", self.status())
        await publish_standings()
        return True

    # ---------- reset ----------
    async def reset_race(self):
        """Back to NOT_STARTED from any phase, wiping every runner's times and print counts."""
        await self.ensure_loaded()
        async with self._lock:
            await self.cancel_countdown()
            cleared = await sync_to_async(_clear_race)(self.season)
            await self.cancel_countdown()
            self.start_time = None
            self.finish_time = None
            self._transition(RacePhase.NOT_STARTED)
        log.info("Race reset (%d runners cleared)", cleared)
        await broadcast_all("race_reset_complete")
        await broadcast_all("race_status", self.status())
        await publish_standings()


race_clock = RaceClock()
