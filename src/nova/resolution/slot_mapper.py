"""
Slot mapping: resolved entities (+ context) -> named slots.
"""
from typing import Any, Dict, Iterable, Optional

from ..data_types import TIME_WINDOWS, ConversationContext, EntityMatch, EntityType

SLOT_BY_ENTITY = {
    EntityType.DATE: "date",
    EntityType.EMAIL: "patientEmail",
    EntityType.PHONE: "patientPhone",
    EntityType.SERVICE_TYPE: "serviceType",
    EntityType.PRACTITIONER: "practitionerName",
    EntityType.URGENCY: "urgency",
}


def slot_name_for(entity: EntityMatch) -> str:
    if entity.type == EntityType.TIME:
        return "timeWindow" if entity.normalized in TIME_WINDOWS else "time"
    return SLOT_BY_ENTITY[entity.type]


def map_slots(
    entities: Iterable[EntityMatch],
    context: Optional[ConversationContext] = None
) -> Dict[str, Any]:
    """
    Build the slot mapping for one message.

    The first entity of a given slot wins. Slots with no supporting entity
    are absent (never None). cabinetId and userId come from the context.
    """
    slots: Dict[str, Any] = {}
    for entity in entities:
        slots.setdefault(slot_name_for(entity), entity.normalized)

    if context is not None:
        if context.tenant and context.tenant.id:
            slots["cabinetId"] = context.tenant.id
        if context.user and context.user.id:
            slots["userId"] = context.user.id
    return slots
