# tracking/views.py
import json
import logging

from asgiref.sync import sync_to_async
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from core.config import race_config
from timing.exceptions import InvalidPayload, UnknownBib
from .geofence import announce_location, parse_position, process_location_update

log = logging.getLogger(__name__)


def _current_config():
    return race_config.current


@csrf_exempt
async def post_location(request):
    """
    Async POST endpoint for GPS reporters that cannot hold a websocket:
    JSON: { "bib": "101", "lat": 37.56, "lng": 126.97 }
    Same geofence path as the player_location event; the distance comes
    back in the response instead of a distance_update frame.
    """
    if request.method != "POST":
        return JsonResponse({"error": "POST only"}, status=405)

    try:
        data = json.loads(request.body.decode())
    except (UnicodeDecodeError, ValueError):
        return JsonResponse({"error": "Invalid JSON"}, status=400)

    try:
        bib, lat, lng = parse_position(data)
    except InvalidPayload as exc:
        return JsonResponse({"error": exc.message}, status=400)

    config = await sync_to_async(_current_config)()
    try:
        outcome = await sync_to_async(process_location_update)(bib, lat, lng, config)
    except UnknownBib as exc:
        log.info("Location posted for unknown bib %s", bib)
        return JsonResponse({"error": exc.message}, status=404)

    await announce_location(outcome)

    result = outcome.result
    return JsonResponse({
        "status": "ok",
        "data": {
            "bib": outcome.runner.bib_number,
            "distance": round(result.distance_m, 1),
            "eligible": result.eligible,
            "autoFinished": outcome.auto_finished,
        },
    })
