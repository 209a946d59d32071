# tracking/access.py
import hashlib
from datetime import date
from typing import Optional

from django.conf import settings
from django.utils import timezone


def daily_access_code(day: Optional[date] = None) -> str:
    """
    Four-digit code shared with volunteers for the day. Derived from the date
    and SECRET_KEY so it rotates at midnight; it keeps strangers out of the
    console, nothing more.
    """
    day = day or timezone.localdate()
    digest = hashlib.sha256(f"{settings.SECRET_KEY}:{day.isoformat()}".encode()).hexdigest()
    return f"{int(digest[:8], 16) % 10000:04d}"
