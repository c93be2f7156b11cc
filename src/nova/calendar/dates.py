"""
Date arithmetic and French date formatting.

All helpers take and return immutable date values; nothing is mutated in
place.
"""
from datetime import date, timedelta
from typing import Optional, Sequence


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def next_weekday(today: date, weekday: int, include_today: bool) -> date:
    """
    Next occurrence of weekday (0 = Monday).

    When today is that weekday, it is returned only if include_today is set;
    otherwise the same weekday of the following week.
    """
    days_ahead = (weekday - today.weekday()) % 7
    if days_ahead == 0 and not include_today:
        days_ahead = 7
    return add_days(today, days_ahead)


def start_of_next_week(today: date) -> date:
    """Monday of the following week."""
    return add_days(today, 7 - today.weekday())


def first_of_next_month(today: date) -> date:
    if today.month == 12:
        return date(today.year + 1, 1, 1)
    return date(today.year, today.month + 1, 1)


def resolve_day_month(day: int, month: int, year: Optional[int], today: date) -> Optional[date]:
    """
    Build a date from day/month and an optional year.

    Without a year the current year is used, or the next one if that date
    has already passed. Returns None for impossible dates (31/02).
    """
    if year is not None:
        try:
            return date(year, month, day)
        except ValueError:
            return None

    try:
        candidate = date(today.year, month, day)
        if candidate >= today:
            return candidate
    except ValueError:
        pass
    try:
        return date(today.year + 1, month, day)
    except ValueError:
        return None


def parse_iso_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def format_date_fr(value: str, weekday_names: Sequence[str], month_names: Sequence[str]) -> str:
    """
    '2026-10-20' -> 'mardi 20 octobre 2026'. Non-ISO values are returned as is.
    """
    day = parse_iso_date(value)
    if day is None:
        return value
    day_number = "1er" if day.day == 1 else str(day.day)
    return f"{weekday_names[day.weekday()]} {day_number} {month_names[day.month - 1]} {day.year}"


_WINDOW_LABELS = {
    "morning": "le matin",
    "afternoon": "l'après-midi",
    "evening": "en soirée",
}


def format_time_fr(value: str) -> str:
    """'14:30' -> '14h30', '09:00' -> '9h', 'morning' -> 'le matin'."""
    if value in _WINDOW_LABELS:
        return _WINDOW_LABELS[value]
    hours, sep, minutes = value.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        return value
    if minutes == "00":
        return f"{int(hours)}h"
    return f"{int(hours)}h{minutes}"
