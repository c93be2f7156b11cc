from .collaborators import AppointmentService, CabinetDirectory
from .dialogue import DialogueOrchestrator
from .policy import REQUIRED_SLOTS, SlotDecision, contact_of, decide_slots, missing_slots

__all__ = [
    "AppointmentService",
    "CabinetDirectory",
    "DialogueOrchestrator",
    "REQUIRED_SLOTS",
    "SlotDecision",
    "contact_of",
    "decide_slots",
    "missing_slots",
]
