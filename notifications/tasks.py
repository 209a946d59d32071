import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from .models import Notification

log = logging.getLogger(__name__)


@shared_task
def send_sos_notification(notification_id):
    notification = Notification.objects.filter(pk=notification_id, sent=False).first()
    if notification is None:
        return False
    if not settings.RACE_STAFF_EMAILS:
        log.warning("SOS for bib %s not e-mailed: RACE_STAFF_EMAILS is empty", notification.bib_number)
        return False
    send_mail(
        f"SOS: bib {notification.bib_number}",
        notification.message,
        settings.DEFAULT_FROM_EMAIL,
        settings.RACE_STAFF_EMAILS,
    )
    Notification.objects.filter(pk=notification.pk).update(sent=True)
    return True
