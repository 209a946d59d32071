# notifications/alerts.py
import logging

from django.db import transaction
from kombu.exceptions import OperationalError

from .models import Notification
from .tasks import send_sos_notification

log = logging.getLogger(__name__)


def sos_message(bib, lat, lng, runner=None) -> str:
    who = f"{runner.name} (bib {bib})" if runner else f"bib {bib}"
    return (
        f"SOS from {who}.\n"
        f"Position: {lat:.6f}, {lng:.6f}\n"
        f"Map: https://maps.google.com/?q={lat:.6f},{lng:.6f}"
    )


def _enqueue(notification_id):
    try:
        send_sos_notification.delay(notification_id)
    except OperationalError:
        # row stays sent=False
        log.exception("Could not queue SOS e-mail for notification %s", notification_id)


def raise_sos(bib, lat, lng, runner=None) -> Notification:
    """Record an SOS and queue the staff e-mail once the row is committed."""
    notification = Notification.objects.create(
        runner=runner, bib_number=str(bib), lat=lat, lng=lng,
        message=sos_message(bib, lat, lng, runner),
    )
    transaction.on_commit(lambda: _enqueue(notification.pk))
    return notification
