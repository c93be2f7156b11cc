"""
Business hours lookup for a tenant.
"""
from datetime import date, datetime, time
from typing import Dict, List, Mapping, Optional, Sequence

from ..data_types import BusinessHours, TenantInfo

# Keys of TenantInfo.business_hours, indexed by date.weekday()
DAY_KEYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def default_business_hours(open_at: str = "08:00", close_at: str = "18:00") -> Dict[str, BusinessHours]:
    """Monday to Friday with the same hours every day."""
    return {day: BusinessHours(open=open_at, close=close_at) for day in DAY_KEYS[:5]}


def resolve_business_hours(
    tenant: TenantInfo,
    open_at: str = "08:00",
    close_at: str = "18:00"
) -> Dict[str, BusinessHours]:
    """The tenant's declared hours, or the default week when it declares none."""
    if tenant.business_hours:
        return dict(tenant.business_hours)
    return default_business_hours(open_at, close_at)


def parse_hhmm(value: str) -> Optional[time]:
    """Parse 'HH:MM'; None when malformed."""
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (ValueError, AttributeError):
        return None


def hours_on(hours: Mapping[str, BusinessHours], day: date) -> Optional[BusinessHours]:
    return hours.get(DAY_KEYS[day.weekday()])


def is_open_at(hours: Mapping[str, BusinessHours], moment: datetime) -> bool:
    """
    True when moment falls within that day's opening hours (open <= t < close).
    Days without hours, or with malformed hours, are closed.
    """
    day_hours = hours_on(hours, moment.date())
    if day_hours is None:
        return False
    opens, closes = parse_hhmm(day_hours.open), parse_hhmm(day_hours.close)
    if opens is None or closes is None:
        return False
    return opens <= moment.time().replace(tzinfo=None) < closes


def format_hours_fr(hours: Mapping[str, BusinessHours], weekday_names: Sequence[str]) -> str:
    """One bullet line per day of the week, Monday first."""
    lines: List[str] = []
    for key, name in zip(DAY_KEYS, weekday_names):
        day_hours = hours.get(key)
        if day_hours is None:
            lines.append(f"  - {name.capitalize()} : fermé")
        else:
            lines.append(f"  - {name.capitalize()} : {day_hours.open} - {day_hours.close}")
    return "\n".join(lines)
