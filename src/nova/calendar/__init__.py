"""
Calendar helpers: tenant clock, business hours and date arithmetic.
"""

from .business_hours import (
    DAY_KEYS,
    default_business_hours,
    format_hours_fr,
    is_open_at,
    resolve_business_hours,
)
from .clock import Clock, fixed_clock, get_timezone, system_clock, tenant_now
from .dates import (
    add_days,
    first_of_next_month,
    format_date_fr,
    format_time_fr,
    next_weekday,
    resolve_day_month,
    start_of_next_week,
)

__all__ = [
    "Clock",
    "DAY_KEYS",
    "add_days",
    "default_business_hours",
    "first_of_next_month",
    "fixed_clock",
    "format_date_fr",
    "format_hours_fr",
    "format_time_fr",
    "get_timezone",
    "is_open_at",
    "next_weekday",
    "resolve_business_hours",
    "resolve_day_month",
    "start_of_next_week",
    "system_clock",
    "tenant_now",
]
