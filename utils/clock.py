from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def utcnow() -> datetime:
    """Naive UTC timestamp, used for created_at/updated_at style columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def venue_now() -> datetime:
    """
    Naive wall-clock time at the venue.

    Booking dates and HH:MM times carry no zone, so "now" is converted into
    the configured VENUE_TIMEZONE before it is compared with them.
    """
    tz_name = current_app.config.get("VENUE_TIMEZONE") or "UTC"
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
