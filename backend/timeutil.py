"""
Timestamp helpers shared by the extractor, the filter and the aggregator.

Apple Health writes timestamps as ``2024-11-11 17:57:08 -0500``. The
embedded offset is the device's zone at recording time, so parsed values
are always timezone-aware. "Local" calendar fields are taken in the zone
passed by the caller, or in the host's zone when none is given.
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional

HEALTH_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def localize(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach a zone to a naive datetime; aware values are returned unchanged."""
    if dt.tzinfo is not None:
        return dt
    if tz is not None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone()


def to_local(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware datetime to the local zone (host zone if `tz` is None)."""
    if tz is not None:
        return dt.astimezone(tz)
    return dt.astimezone()


def parse_health_date(date_str: Optional[str], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse an export timestamp into an aware datetime, or None when unusable.

    ISO-8601 is accepted as a fallback. A bare date means UTC midnight; a
    naive date-time is read as local time.
    """
    if not date_str:
        return None
    s = date_str.strip()
    try:
        return datetime.strptime(s, HEALTH_DATE_FORMAT)
    except ValueError:
        pass
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        return dt
    if len(s) == 10:
        return dt.replace(tzinfo=timezone.utc)
    return localize(dt, tz)
