# tracking/broadcast.py
"""
The two delivery primitives of the console.

broadcast_all() fans an event out to every connected dashboard through the
channel-layer group; respond_to() targets one connection by channel name.
Both deliver a {"event": ..., "data": ...} frame through the consumer's
race_update handler.
"""
from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer

from results.standings import current_standings

RACE_GROUP = "race_console"


def _message(event: str, data=None, exclude: str = None) -> dict:
    return {
        "type": "race_update",
        "message": {"event": event, "data": data},
        "exclude": exclude,
    }


async def broadcast_all(event: str, data=None, exclude: str = None):
    """
    Async helper: deliver to every connection, optionally skipping one
    channel (the reporter of a relayed position, for instance).
    """
    layer = get_channel_layer()
    await layer.group_send(RACE_GROUP, _message(event, data, exclude))


async def respond_to(channel_name: str, event: str, data=None):
    """
    Async helper: deliver to a single connection.
    """
    layer = get_channel_layer()
    await layer.send(channel_name, _message(event, data))


def broadcast_all_sync(event: str, data=None):
    """
    Synchronous helper (for HTTP views and Celery tasks).
    """
    layer = get_channel_layer()
    async_to_sync(layer.group_send)(RACE_GROUP, _message(event, data))


async def publish_standings():
    standings = await sync_to_async(current_standings)()
    await broadcast_all("update_ui", standings)


def publish_standings_sync():
    broadcast_all_sync("update_ui", current_standings())
