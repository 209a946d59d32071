# tracking/consumers.py
import json
import logging
import math

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.db import DatabaseError

from core.config import race_config
from notifications.alerts import raise_sos
from registration.serializers import runner_payload
from results.standings import current_standings
from timing.arrivals import cancel_arrival, get_runner_info, record_arrival
from timing.clock import race_clock
from timing.exceptions import InvalidPayload, PersistenceFailure, RaceError
from .access import daily_access_code
from .broadcast import RACE_GROUP, broadcast_all, publish_standings, respond_to
from .geofence import announce_location, parse_position, process_location_update

log = logging.getLogger(__name__)

INBOUND_EVENTS = (
    "runner_arrived",
    "cancel_runner_finish",
    "player_location",
    "sos_signal",
    "start_race",
    "reset_race",
    "finish_race",
    "update_radius",
    "update_finish_line",
    "update_race_settings",
    "get_runner_info",
)


def _current_config():
    return race_config.current


def _positive_number(value, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidPayload(message=f"{what} must be a number.")
    if not math.isfinite(number) or number <= 0:
        raise InvalidPayload(message=f"{what} must be greater than zero.")
    return number


def _whole_number(value, what: str, minimum: int) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidPayload(message=f"{what} must be a whole number.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidPayload(message=f"{what} must be a whole number.")
    if number < minimum:
        raise InvalidPayload(message=f"{what} must be at least {minimum}.")
    return number


def _coordinates(data) -> tuple:
    if not isinstance(data, dict):
        raise InvalidPayload(message="Finish line must be an object with lat and lng.")
    try:
        lat, lng = float(data["lat"]), float(data["lng"])
    except (KeyError, TypeError, ValueError):
        raise InvalidPayload(message="Finish line must be an object with lat and lng.")
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
        raise InvalidPayload(message="Finish line coordinates are out of range.")
    return lat, lng


class RaceConsoleConsumer(AsyncJsonWebsocketConsumer):
    """
    One operator dashboard, volunteer phone or runner GPS reporter.

    Frames are {"event": name, "data": payload} both ways. Each handler
    answers through respond_to() (this connection only) or broadcast_all()
    (every connection); failures only ever reach the sender.
    """

    async def connect(self):
        await self.channel_layer.group_add(RACE_GROUP, self.channel_name)
        await self.accept()
        log.info("Console connected: %s", self.channel_name)
        await self.send_initial_sync()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(RACE_GROUP, self.channel_name)
        log.info("Console disconnected: %s (%s)", self.channel_name, close_code)

    async def send_initial_sync(self):
        await race_clock.ensure_loaded()
        config = await sync_to_async(_current_config)()
        standings = await sync_to_async(current_standings)()
        await respond_to(self.channel_name, "receive_password", daily_access_code())
        await respond_to(self.channel_name, "current_settings", config.as_payload())
        status = race_clock.status()
        if status["isStarted"]:
            await respond_to(self.channel_name, "race_status", status)
        await respond_to(self.channel_name, "update_ui", standings)

    # Channels maps "type": "race_update" -> method name "race_update"
    async def race_update(self, event):
        if event.get("exclude") == self.channel_name:
            return
        await self.send_json(event["message"])

    @classmethod
    async def decode_json(cls, text_data):
        try:
            return json.loads(text_data)
        except ValueError:
            return None

    async def receive_json(self, content, **kwargs):
        event = content.get("event") if isinstance(content, dict) else None
        if event not in INBOUND_EVENTS:
            await self.error(InvalidPayload(message=f"Unknown event: {event}"))
            return
        handler = getattr(self, f"on_{event}")
        try:
            await handler(content.get("data"))
        except RaceError as exc:
            await self.error(exc)
        except DatabaseError:
            log.exception("Store failure while handling %s", event)
            await self.error(PersistenceFailure())

    async def error(self, exc: RaceError):
        log.warning("Rejected for %s: %s", self.channel_name, exc.message)
        await respond_to(self.channel_name, "error_msg", exc.message)

    # ---------- finish line ----------
    async def on_runner_arrived(self, bib):
        runner = await sync_to_async(record_arrival)(bib)
        await broadcast_all("runner_finished", runner_payload(runner))
        await publish_standings()

    async def on_cancel_runner_finish(self, bib):
        await sync_to_async(cancel_arrival)(bib)
        await publish_standings()

    async def on_get_runner_info(self, bib):
        runner = await sync_to_async(get_runner_info)(bib)
        await respond_to(self.channel_name, "runner_info_res", runner_payload(runner) if runner else None)

    # ---------- GPS ----------
    async def on_player_location(self, data):
        bib, lat, lng = parse_position(data)
        config = await sync_to_async(_current_config)()
        outcome = await sync_to_async(process_location_update)(bib, lat, lng, config)
        await respond_to(self.channel_name, "distance_update", {"distance": round(outcome.result.distance_m, 1)})
        await announce_location(outcome, exclude=self.channel_name)

    async def on_sos_signal(self, data):
        bib, lat, lng = parse_position(data)
        runner = await sync_to_async(get_runner_info)(bib)
        name = runner.name if runner else None
        log.warning("SOS from bib %s at %.6f,%.6f", bib, lat, lng)
        await broadcast_all("sos_alert", {"bib": bib, "name": name, "lat": lat, "lng": lng})
        await sync_to_async(raise_sos)(bib, lat, lng, runner)

    # ---------- race clock ----------
    async def on_start_race(self, _data):
        await race_clock.start_race(requester=self.channel_name)

    async def on_finish_race(self, _data):
        await race_clock.finish_race()

    async def on_reset_race(self, _data):
        await race_clock.reset_race()

    # ---------- settings ----------
    async def on_update_radius(self, meters):
        radius = _positive_number(meters, "Radius")
        await sync_to_async(race_config.update)(goal_radius=radius)
        await broadcast_all("radius_changed", radius)

    async def on_update_finish_line(self, data):
        lat, lng = _coordinates(data)
        await sync_to_async(race_config.update)(finish_lat=lat, finish_lng=lng)
        await broadcast_all("finish_line_changed", {"lat": lat, "lng": lng})

    async def on_update_race_settings(self, data):
        if not isinstance(data, dict):
            raise InvalidPayload(message="Settings must be an object.")
        changes = {}
        if data.get("rankLimit") is not None:
            changes["rank_limit"] = _whole_number(data["rankLimit"], "Rank limit", 1)
        if data.get("seniorYear") is not None:
            changes["senior_year"] = _whole_number(data["seniorYear"], "Senior year", 1900)
        if not changes:
            raise InvalidPayload(message="Nothing to update: send rankLimit and/or seniorYear.")
        config = await sync_to_async(race_config.update)(**changes)
        await broadcast_all("settings_changed", {"rankLimit": config.rank_limit, "seniorYear": config.senior_year})
        await publish_standings()
