"""Time utilities pinned to the business timezone."""

from datetime import date, datetime
from zoneinfo import ZoneInfo
from typing import Optional

from hotel_billing.config import BUSINESS_TIMEZONE

try:
    BUSINESS_TZ = ZoneInfo(BUSINESS_TIMEZONE)
except Exception:
    # Fallback to system local timezone when tzdata is unavailable (Windows)
    BUSINESS_TZ = datetime.now().astimezone().tzinfo


def now_local() -> datetime:
    """Return timezone-aware datetime in the business timezone."""
    return datetime.now(BUSINESS_TZ)


def now_local_naive() -> datetime:
    """Return naive datetime representing business-local time."""
    return now_local().replace(tzinfo=None)


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to the business timezone (assumes local if naive)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=BUSINESS_TZ)
    return dt.astimezone(BUSINESS_TZ)


def business_date(dt: Optional[datetime] = None) -> date:
    """Calendar day that bill numbering is scoped to."""
    return to_local(dt or now_local()).date()
