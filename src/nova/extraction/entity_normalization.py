"""
Entity normalization: raw matched text -> canonical value.

Canonical forms:
- date: ISO YYYY-MM-DD
- time: zero-padded HH:MM, or one of morning / afternoon / evening
- service_type: canonical category from the service synonym table
- email: lowercased
- phone: +213 international form for Algerian numbers
- practitioner: title-cased name without its title
- urgency: emergency / urgent / routine

Normalization never raises. A value that cannot be reduced to canonical
form keeps its raw matched text.
"""
import logging
import re
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, List, Mapping, Optional

from ..calendar.business_hours import is_open_at
from ..calendar.dates import (
    add_days,
    first_of_next_month,
    next_weekday,
    resolve_day_month,
    start_of_next_week,
)
from ..config.tables import Vocabularies
from ..data_types import BusinessHours, EntityMatch, EntityType
from .normalization import normalize_text

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_FULL_DATE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})$")
_DAY_MONTH = re.compile(r"^(\d{1,2})/(\d{1,2})$")
_DAY_MONTH_NAME = re.compile(r"^(1er|\d{1,2}) ([a-z]+)(?: (\d{4}))?$")
_IN_N_DAYS = re.compile(r"^dans (\d{1,4}) jours?$")
_CLOCK_TIME = re.compile(r"^(?:vers )?(\d{1,2})(?: ?(?:h|:|heures?) ?(\d{2})?)?$")
_PRACTITIONER_TITLE = re.compile(r"^(?:(?:avec|chez) )?(?:(?:le|la) )?(?:docteur|dr|dentiste) ")

NEXT_WEEK = "la semaine prochaine"
NEXT_MONTH = "le mois prochain"


def _reverse_map(table: Mapping[str, tuple]) -> Dict[str, str]:
    """
    Normalized synonym -> canonical key.

    Canonical keys map to themselves unless another entry lists the same
    word as a synonym ("urgent" is an emergency synonym and a level).
    """
    result: Dict[str, str] = {}
    for canonical, synonyms in table.items():
        for synonym in synonyms:
            result.setdefault(normalize_text(synonym), canonical)
    for canonical in table:
        result.setdefault(normalize_text(canonical), canonical)
    return result


class EntityNormalizer:
    """
    Converts entity candidates to canonical values using the vocabularies.

    Dates that depend on "today" are resolved against the tenant-local time
    passed in by the caller, never against the system clock.
    """

    def __init__(self, vocabularies: Vocabularies):
        self.services = _reverse_map(vocabularies.services)
        self.time_windows = _reverse_map(vocabularies.time_windows)
        self.urgency_levels = _reverse_map(vocabularies.urgency_levels)
        self.noon = {normalize_text(w) for w in vocabularies.noon}
        self.relative_days = {normalize_text(k): v for k, v in vocabularies.relative_days.items()}
        self.weekdays = {normalize_text(name): i for i, name in enumerate(vocabularies.weekdays)}
        self.months = {normalize_text(name): i + 1 for i, name in enumerate(vocabularies.months)}

        # Dates also need the current time and are dispatched separately
        self._handlers: Dict[EntityType, Callable[[str], Optional[str]]] = {
            EntityType.TIME: self.normalize_time,
            EntityType.SERVICE_TYPE: self.normalize_service,
            EntityType.EMAIL: self.normalize_email,
            EntityType.PHONE: self.normalize_phone,
            EntityType.PRACTITIONER: self.normalize_practitioner,
            EntityType.URGENCY: self.normalize_urgency,
        }

    def normalize_all(
        self,
        entities: List[EntityMatch],
        now: datetime,
        business_hours: Mapping[str, BusinessHours]
    ) -> List[EntityMatch]:
        return [self.normalize(e, now, business_hours) for e in entities]

    def normalize(
        self,
        entity: EntityMatch,
        now: datetime,
        business_hours: Mapping[str, BusinessHours]
    ) -> EntityMatch:
        """Return a copy of entity with its canonical value filled in."""
        return replace(entity, normalized=self.normalize_value(entity.type, entity.value, now, business_hours))

    def normalize_value(
        self,
        entity_type: EntityType,
        raw: str,
        now: datetime,
        business_hours: Mapping[str, BusinessHours]
    ) -> str:
        text = normalize_text(raw)
        try:
            if entity_type == EntityType.DATE:
                value = self.normalize_date(text, now, business_hours)
            else:
                value = self._handlers[entity_type](text)
        except (ValueError, OverflowError):
            value = None

        if value is None:
            logger.debug("Unparsable entity kept raw",
                         extra={"entity_type": entity_type.value, "raw": raw})
            return raw
        return value

    # ------------------------------------------------------------------
    # Per-type handlers. Each takes normalized text and returns the
    # canonical value, or None when the text cannot be reduced.
    # ------------------------------------------------------------------

    def normalize_date(
        self,
        text: str,
        now: datetime,
        business_hours: Mapping[str, BusinessHours]
    ) -> Optional[str]:
        today = now.date()

        m = _ISO_DATE.match(text)
        if m:
            date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
            return text

        m = _FULL_DATE.match(text)
        if m:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1))).isoformat()

        m = _DAY_MONTH.match(text)
        if m:
            resolved = resolve_day_month(int(m.group(1)), int(m.group(2)), None, today)
            return resolved.isoformat() if resolved else None

        m = _DAY_MONTH_NAME.match(text)
        if m and m.group(2) in self.months:
            day = 1 if m.group(1) == "1er" else int(m.group(1))
            year = int(m.group(3)) if m.group(3) else None
            resolved = resolve_day_month(day, self.months[m.group(2)], year, today)
            return resolved.isoformat() if resolved else None

        if text in self.relative_days:
            return add_days(today, self.relative_days[text]).isoformat()

        if text in self.weekdays:
            include_today = is_open_at(business_hours, now)
            return next_weekday(today, self.weekdays[text], include_today).isoformat()

        m = _IN_N_DAYS.match(text)
        if m:
            return add_days(today, int(m.group(1))).isoformat()

        if text == NEXT_WEEK:
            return start_of_next_week(today).isoformat()
        if text == NEXT_MONTH:
            return first_of_next_month(today).isoformat()

        return None

    def normalize_time(self, text: str) -> Optional[str]:
        if text in self.time_windows:
            return self.time_windows[text]
        if text in self.noon:
            return "12:00"

        m = _CLOCK_TIME.match(text)
        if not m:
            return None
        hours = int(m.group(1))
        minutes = int(m.group(2)) if m.group(2) else 0
        if hours > 23 or minutes > 59:
            return None
        return f"{hours:02d}:{minutes:02d}"

    def normalize_service(self, text: str) -> Optional[str]:
        return self.services.get(text)

    def normalize_email(self, text: str) -> Optional[str]:
        return text.strip().lower() or None

    def normalize_phone(self, text: str) -> Optional[str]:
        digits = re.sub(r"\s", "", text)
        if digits.startswith("00213"):
            return "+213" + digits[5:]
        if digits.startswith("+") or digits.startswith("00"):
            return digits
        if digits.startswith("0"):
            return "+213" + digits[1:]
        return digits or None

    def normalize_practitioner(self, text: str) -> Optional[str]:
        name = _PRACTITIONER_TITLE.sub("", text).strip()
        return name.title() if name else None

    def normalize_urgency(self, text: str) -> Optional[str]:
        return self.urgency_levels.get(text)
