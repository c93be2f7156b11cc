"""
Boundary contracts.

Pydantic models validating what the calling API layer hands to nova: the
message and the serialized session context. Validation happens here, once,
and the core only ever sees the dataclasses from nova.data_types.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .calendar.business_hours import DAY_KEYS
from .data_types import (
    BusinessHours,
    Conversation,
    ConversationContext,
    ConversationState,
    Message,
    MessageRole,
    TenantInfo,
    UserInfo,
)
from .errors import InputTooLong

MAX_MESSAGE_LENGTH = 2000


def check_message_length(message: str, limit: int = MAX_MESSAGE_LENGTH) -> None:
    """
    Raises:
        InputTooLong: If message is longer than limit characters
    """
    if len(message) > limit:
        raise InputTooLong(len(message), limit)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _MessageBase(_CamelModel):
    content: str
    timestamp: datetime
    metadata: Optional[Dict[str, Any]] = None

    def to_message(self) -> Message:
        return Message(
            role=MessageRole(self.role),
            content=self.content,
            timestamp=self.timestamp,
            metadata=self.metadata,
        )


class UserMessage(_MessageBase):
    role: Literal["user"]


class AssistantMessage(_MessageBase):
    role: Literal["assistant"]


class SystemMessage(_MessageBase):
    role: Literal["system"]


MessagePayload = Annotated[
    Union[UserMessage, AssistantMessage, SystemMessage],
    Field(discriminator="role"),
]


class BusinessHoursPayload(_CamelModel):
    open: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    close: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class UserPayload(_CamelModel):
    id: str = Field(min_length=1)
    role: str = "patient"
    email: Optional[str] = None


class TenantPayload(_CamelModel):
    id: str = Field(min_length=1)
    name: str = "cabinet"
    timezone: str = "Africa/Algiers"
    business_hours: Dict[str, BusinessHoursPayload] = Field(default_factory=dict)

    @field_validator("business_hours")
    @classmethod
    def _known_days(cls, value: Dict[str, BusinessHoursPayload]) -> Dict[str, BusinessHoursPayload]:
        unknown = [day for day in value if day not in DAY_KEYS]
        if unknown:
            raise ValueError(f"Unknown business day(s): {unknown}")
        return value


class ConversationPayload(_CamelModel):
    messages: List[MessagePayload] = Field(default_factory=list)
    state: Literal["active", "waiting_for_input", "completed", "escalated"] = "active"
    current_intent: Optional[str] = None
    collected_slots: Dict[str, Any] = Field(default_factory=dict)
    confirmation_pending: bool = False


class ContextPayload(_CamelModel):
    session_id: str = Field(min_length=1)
    user: UserPayload
    tenant: TenantPayload
    conversation: ConversationPayload = Field(default_factory=ConversationPayload)

    def to_context(self) -> ConversationContext:
        """Convert to the mutable context the dialogue layer works on."""
        conv = self.conversation
        return ConversationContext(
            session_id=self.session_id,
            user=UserInfo(id=self.user.id, role=self.user.role, email=self.user.email),
            tenant=TenantInfo(
                id=self.tenant.id,
                name=self.tenant.name,
                timezone=self.tenant.timezone,
                business_hours={
                    day: BusinessHours(open=h.open, close=h.close)
                    for day, h in self.tenant.business_hours.items()
                },
            ),
            conversation=Conversation(
                messages=[m.to_message() for m in conv.messages],
                state=ConversationState(conv.state),
                current_intent=conv.current_intent,
                collected_slots=dict(conv.collected_slots),
                confirmation_pending=conv.confirmation_pending,
            ),
        )


class ChatRequest(_CamelModel):
    """One turn as received from the API layer."""
    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    context: ContextPayload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], max_length: int = MAX_MESSAGE_LENGTH) -> "ChatRequest":
        """
        Validate a raw request body.

        Raises:
            InputTooLong: If the message exceeds max_length (checked first)
            pydantic.ValidationError: If the payload is otherwise malformed
        """
        message = payload.get("message")
        if isinstance(message, str):
            check_message_length(message, max_length)
        return cls.model_validate(payload)
