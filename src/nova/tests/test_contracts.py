"""
Tests for the pydantic boundary models and context serialization.
"""
import pytest
from pydantic import ValidationError

from nova.contracts import ChatRequest, ContextPayload, check_message_length
from nova.data_types import ConversationContext, ConversationState, MessageRole
from nova.errors import InputTooLong


def _payload(**overrides):
    payload = {
        "message": "Bonjour",
        "context": {
            "sessionId": "sess-1",
            "user": {"id": "user-1", "email": "patient@exemple.dz"},
            "tenant": {
                "id": "cab-1",
                "name": "Cabinet du Parc",
                "timezone": "Africa/Algiers",
                "businessHours": {"monday": {"open": "08:00", "close": "17:00"}},
            },
            "conversation": {
                "messages": [
                    {"role": "user", "content": "Bonjour", "timestamp": "2026-10-19T10:00:00+01:00"},
                    {"role": "assistant", "content": "Bonjour !", "timestamp": "2026-10-19T10:00:01+01:00"},
                ],
                "state": "waiting_for_input",
                "currentIntent": "book_appointment",
                "collectedSlots": {"date": "2026-10-20"},
                "confirmationPending": False,
            },
        },
    }
    payload.update(overrides)
    return payload


class TestCheckMessageLength:

    def test_within_limit(self):
        check_message_length("a" * 2000)

    def test_over_limit(self):
        with pytest.raises(InputTooLong) as excinfo:
            check_message_length("a" * 11, limit=10)
        assert excinfo.value.length == 11
        assert excinfo.value.limit == 10

    def test_input_too_long_is_value_error(self):
        with pytest.raises(ValueError):
            check_message_length("abc", limit=2)


class TestChatRequest:
    """Tests for ChatRequest validation."""

    def test_valid_payload(self):
        request = ChatRequest.from_payload(_payload())
        assert request.message == "Bonjour"
        assert request.context.session_id == "sess-1"
        assert request.context.tenant.business_hours["monday"].close == "17:00"

    def test_too_long_message_rejected_first(self):
        with pytest.raises(InputTooLong):
            ChatRequest.from_payload(_payload(message="a" * 2001, context={}))

    def test_empty_message_rejected(self):
        with pytest.raises(ValidationError):
            ChatRequest.from_payload(_payload(message=""))

    def test_unknown_role_rejected(self):
        payload = _payload()
        payload["context"]["conversation"]["messages"][0]["role"] = "robot"
        with pytest.raises(ValidationError):
            ChatRequest.from_payload(payload)

    def test_unknown_state_rejected(self):
        payload = _payload()
        payload["context"]["conversation"]["state"] = "paused"
        with pytest.raises(ValidationError):
            ChatRequest.from_payload(payload)

    def test_bad_business_hours_rejected(self):
        payload = _payload()
        payload["context"]["tenant"]["businessHours"] = {"monday": {"open": "8h", "close": "17:00"}}
        with pytest.raises(ValidationError):
            ChatRequest.from_payload(payload)

    def test_unknown_day_rejected(self):
        payload = _payload()
        payload["context"]["tenant"]["businessHours"] = {"lundi": {"open": "08:00", "close": "17:00"}}
        with pytest.raises(ValidationError):
            ChatRequest.from_payload(payload)


class TestContextConversion:

    def test_to_context(self):
        context = ChatRequest.from_payload(_payload()).context.to_context()
        assert isinstance(context, ConversationContext)
        assert context.user.email == "patient@exemple.dz"
        assert context.tenant.business_hours["monday"].open == "08:00"
        assert context.conversation.state == ConversationState.WAITING_FOR_INPUT
        assert [m.role for m in context.conversation.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert context.conversation.collected_slots == {"date": "2026-10-20"}

    def test_minimal_context_defaults(self):
        payload = ContextPayload.model_validate({
            "sessionId": "s", "user": {"id": "u"}, "tenant": {"id": "t"},
        })
        context = payload.to_context()
        assert context.conversation.state == ConversationState.ACTIVE
        assert context.conversation.messages == []
        assert context.tenant.timezone == "Africa/Algiers"

    def test_dict_round_trip_through_dataclasses(self):
        context = ChatRequest.from_payload(_payload()).context.to_context()
        restored = ConversationContext.from_dict(context.to_dict())
        assert restored == context
