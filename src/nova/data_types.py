"""
Data structures for the NLU pipeline and the dialogue layer.

This module defines the contracts between pipeline stages and the
conversation state owned by the caller, using dataclasses for type safety
and validation. Serialized forms use the camelCase keys of the external API.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Intent(str, Enum):
    """Communicative goals recognized by the classifier."""
    GREETING = "greeting"
    CHECK_AVAILABILITY = "check_availability"
    BOOK_APPOINTMENT = "book_appointment"
    RESCHEDULE_APPOINTMENT = "reschedule_appointment"
    CANCEL_APPOINTMENT = "cancel_appointment"
    LIST_PRACTITIONERS = "list_practitioners"
    CLINIC_INFO = "clinic_info"
    EMERGENCY = "emergency"
    HELP = "help"
    GOODBYE = "goodbye"
    FALLBACK = "fallback"

    @classmethod
    def parse(cls, value: Any) -> Optional["Intent"]:
        """Return the matching Intent, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class EntityType(str, Enum):
    """Typed spans the extractor can recognize."""
    DATE = "date"
    TIME = "time"
    EMAIL = "email"
    PHONE = "phone"
    SERVICE_TYPE = "service_type"
    PRACTITIONER = "practitioner"
    URGENCY = "urgency"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationState(str, Enum):
    """Dialogue states. COMPLETED and ESCALATED are terminal."""
    ACTIVE = "active"
    WAITING_FOR_INPUT = "waiting_for_input"
    COMPLETED = "completed"
    ESCALATED = "escalated"

    @property
    def is_terminal(self) -> bool:
        return self in (ConversationState.COMPLETED, ConversationState.ESCALATED)


class InputType(str, Enum):
    """Hint telling the UI which widget to show for the next answer."""
    TEXT = "text"
    DATE = "date"
    TIME = "time"
    SELECT = "select"
    CONFIRMATION = "confirmation"


# Day-part literals produced by time normalization
TIME_WINDOWS = ("morning", "afternoon", "evening")


@dataclass(frozen=True)
class EntityMatch:
    """
    A typed span found in normalized text.

    Attributes:
        type: Entity type
        value: Matched text (as it appears in the normalized message)
        normalized: Canonical value, or the raw value when unparsable
        confidence: Confidence score (0.0 to 1.0)
        start: Start offset in the normalized message
        end: End offset (exclusive)
    """
    type: EntityType
    value: str
    normalized: str
    confidence: float
    start: int
    end: int

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0 and 1, got {self.confidence}")
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    def overlaps(self, other: "EntityMatch") -> bool:
        """Check whether two spans share at least one offset."""
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "value": self.value,
            "normalized": self.normalized,
            "confidence": self.confidence,
            "start": self.start,
            "end": self.end,
        }


@dataclass(frozen=True)
class NLUResult:
    """
    Final output of the NLU pipeline for one message.

    Produced fresh per invocation and never mutated afterwards.
    """
    intent: Intent
    confidence: float
    slots: Dict[str, Any] = field(default_factory=dict)
    entities: Tuple[EntityMatch, ...] = ()
    raw_text: str = ""

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0 and 1, got {self.confidence}")

    def entities_of(self, entity_type: EntityType) -> List[EntityMatch]:
        return [e for e in self.entities if e.type == entity_type]

    def has_entity(self, entity_type: EntityType) -> bool:
        return any(e.type == entity_type for e in self.entities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent.value,
            "confidence": self.confidence,
            "slots": dict(self.slots),
            "entities": [e.to_dict() for e in self.entities],
            "rawText": self.raw_text,
        }


@dataclass
class Message:
    """One entry of the conversation history."""
    role: MessageRole
    content: str
    timestamp: datetime
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            role=MessageRole(data["role"]),
            content=data["content"],
            timestamp=timestamp,
            metadata=data.get("metadata"),
        )


@dataclass
class UserInfo:
    id: str
    role: str = "patient"
    email: Optional[str] = None


@dataclass(frozen=True)
class BusinessHours:
    """Opening hours for one day, as zero-padded HH:MM strings."""
    open: str
    close: str


@dataclass
class TenantInfo:
    """
    The cabinet the conversation belongs to.

    business_hours is keyed by lowercase English day name ("monday", ...);
    days missing from the mapping are closed.
    """
    id: str
    timezone: str
    business_hours: Dict[str, BusinessHours] = field(default_factory=dict)
    name: str = "cabinet"


@dataclass
class Conversation:
    """
    Mutable dialogue state. Only the dialogue orchestrator changes it.

    current_intent is kept as the stored string so that a reloaded session
    referencing an unknown intent does not fail to load.
    """
    messages: List[Message] = field(default_factory=list)
    state: ConversationState = ConversationState.ACTIVE
    current_intent: Optional[str] = None
    collected_slots: Dict[str, Any] = field(default_factory=dict)
    confirmation_pending: bool = False

    def add_message(
        self,
        role: MessageRole,
        content: str,
        timestamp: datetime,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Message:
        """Append to the history (the history is append-only)."""
        message = Message(role=role, content=content, timestamp=timestamp, metadata=metadata)
        self.messages.append(message)
        return message


@dataclass
class ConversationContext:
    """
    Per-session context, created by the caller at session start and passed
    by reference each turn. The caller persists it between turns.
    """
    session_id: str
    user: UserInfo
    tenant: TenantInfo
    conversation: Conversation = field(default_factory=Conversation)

    def to_dict(self) -> Dict[str, Any]:
        conv = self.conversation
        return {
            "sessionId": self.session_id,
            "user": {"id": self.user.id, "role": self.user.role, "email": self.user.email},
            "tenant": {
                "id": self.tenant.id,
                "name": self.tenant.name,
                "timezone": self.tenant.timezone,
                "businessHours": {
                    day: {"open": hours.open, "close": hours.close}
                    for day, hours in self.tenant.business_hours.items()
                },
            },
            "conversation": {
                "messages": [m.to_dict() for m in conv.messages],
                "state": conv.state.value,
                "currentIntent": conv.current_intent,
                "collectedSlots": dict(conv.collected_slots),
                "confirmationPending": conv.confirmation_pending,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationContext":
        user = data.get("user") or {}
        tenant = data.get("tenant") or {}
        conv = data.get("conversation") or {}
        return cls(
            session_id=data["sessionId"],
            user=UserInfo(id=user["id"], role=user.get("role", "patient"), email=user.get("email")),
            tenant=TenantInfo(
                id=tenant["id"],
                timezone=tenant.get("timezone", "UTC"),
                business_hours={
                    day: BusinessHours(open=h["open"], close=h["close"])
                    for day, h in (tenant.get("businessHours") or {}).items()
                },
                name=tenant.get("name", "cabinet"),
            ),
            conversation=Conversation(
                messages=[Message.from_dict(m) for m in conv.get("messages") or []],
                state=ConversationState(conv.get("state", ConversationState.ACTIVE.value)),
                current_intent=conv.get("currentIntent"),
                collected_slots=dict(conv.get("collectedSlots") or {}),
                confirmation_pending=bool(conv.get("confirmationPending", False)),
            ),
        )


@dataclass(frozen=True)
class ChatResponse:
    """
    Response contract produced once per turn by the dialogue orchestrator.
    """
    message: str
    suggested_replies: Optional[List[str]] = None
    requires_input: bool = False
    input_type: Optional[InputType] = None
    options: Optional[List[Dict[str, str]]] = None
    completed: bool = False
    escalate: bool = False
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, leaving out unset optional fields."""
        result: Dict[str, Any] = {
            "message": self.message,
            "requiresInput": self.requires_input,
            "completed": self.completed,
            "escalate": self.escalate,
        }
        if self.suggested_replies is not None:
            result["suggestedReplies"] = list(self.suggested_replies)
        if self.input_type is not None:
            result["inputType"] = self.input_type.value
        if self.options is not None:
            result["options"] = list(self.options)
        if self.data is not None:
            result["data"] = self.data
        return result
