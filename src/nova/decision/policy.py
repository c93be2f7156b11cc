"""
Required-slot policy.

Pure functions deciding whether the slots collected so far are enough to
act on an intent, and if not, which clarification to ask for next.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from ..clarification.reasons import ClarificationReason
from ..data_types import Intent

# Logical slots; "time" is satisfied by time or timeWindow, "contact" by
# patientEmail or patientPhone
REQUIRED_SLOTS: Dict[Intent, Tuple[str, ...]] = {
    Intent.BOOK_APPOINTMENT: ("date", "time", "serviceType"),
    Intent.RESCHEDULE_APPOINTMENT: ("date", "time", "serviceType"),
    Intent.CANCEL_APPOINTMENT: ("contact",),
    Intent.CHECK_AVAILABILITY: ("date",),
}

ALTERNATIVES: Dict[str, Tuple[str, ...]] = {
    "time": ("time", "timeWindow"),
    "contact": ("patientEmail", "patientPhone"),
}

MISSING_REASON: Dict[str, ClarificationReason] = {
    "date": ClarificationReason.MISSING_DATE,
    "time": ClarificationReason.MISSING_TIME,
    "serviceType": ClarificationReason.MISSING_SERVICE,
    "contact": ClarificationReason.MISSING_CONTACT,
}


@dataclass
class SlotDecision:
    """
    Attributes:
        status: "COMPLETE" or "NEEDS_CLARIFICATION"
        reason: Clarification for the first missing slot, None when complete
        missing: Every missing logical slot, in asking order
    """
    status: Literal["COMPLETE", "NEEDS_CLARIFICATION"]
    reason: Optional[ClarificationReason] = None
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.status == "COMPLETE"


def _present(slots: Mapping[str, Any], slot: str) -> bool:
    return any(slots.get(name) not in (None, "") for name in ALTERNATIVES.get(slot, (slot,)))


def missing_slots(intent: Intent, slots: Mapping[str, Any]) -> List[str]:
    return [slot for slot in REQUIRED_SLOTS.get(intent, ()) if not _present(slots, slot)]


def decide_slots(intent: Intent, slots: Mapping[str, Any]) -> SlotDecision:
    missing = missing_slots(intent, slots)
    if not missing:
        return SlotDecision(status="COMPLETE")
    return SlotDecision(status="NEEDS_CLARIFICATION", reason=MISSING_REASON[missing[0]], missing=missing)


def contact_of(slots: Mapping[str, Any]) -> Optional[str]:
    """The patient's email, else phone."""
    return slots.get("patientEmail") or slots.get("patientPhone")
