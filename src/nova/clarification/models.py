"""
Clarification Model

Structured clarification data without message text.
Data must be serializable.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..data_types import InputType
from .reasons import ClarificationReason


@dataclass
class Clarification:
    """
    What to ask and which widget the answer needs.

    No message text allowed in this object; the renderer produces it.
    """
    reason: ClarificationReason
    data: Dict[str, Any] = field(default_factory=dict)
    input_type: Optional[InputType] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason": self.reason.value,
            "data": self.data,
            "inputType": self.input_type.value if self.input_type else None,
        }
