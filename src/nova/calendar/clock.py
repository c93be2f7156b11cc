"""
Tenant clock.

The pipeline never reads the system time directly: it is handed a clock
(a zero-argument callable returning an aware datetime) so that relative
dates are reproducible in tests.
"""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime) -> Clock:
    """
    Clock frozen at the given moment. Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return lambda: moment


def get_timezone(name: str, default: str = "UTC") -> tzinfo:
    """Resolve an IANA timezone name, falling back to default on unknown names."""
    for candidate in (name, default):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("Unknown timezone", extra={"timezone": candidate})
    return timezone.utc


def tenant_now(clock: Clock, timezone_name: str, default: str = "UTC") -> datetime:
    """Current time in the tenant's timezone."""
    now = clock()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(get_timezone(timezone_name, default))
