"""
Clarification Reasons

Why the assistant needs something more from the patient. Each reason has a
template of the same name in templates/responses.json.
"""
from enum import Enum


class ClarificationReason(str, Enum):
    MISSING_DATE = "MISSING_DATE"
    MISSING_TIME = "MISSING_TIME"
    MISSING_SERVICE = "MISSING_SERVICE"
    MISSING_CONTACT = "MISSING_CONTACT"
    CONFIRM_BOOKING = "CONFIRM_BOOKING"
    CONFIRM_RESCHEDULE = "CONFIRM_RESCHEDULE"
    CONFIRM_CANCELLATION = "CONFIRM_CANCELLATION"
    CONFIRMATION_WITHDRAWN = "CONFIRMATION_WITHDRAWN"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
