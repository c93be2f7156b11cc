"""
Slot resolution: turns resolved entities into the named slots consumed by
the dialogue layer.
"""

from nova.resolution.slot_mapper import map_slots, slot_name_for

__all__ = [
    "map_slots",
    "slot_name_for",
]
