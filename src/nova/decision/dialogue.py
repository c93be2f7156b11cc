"""
Dialogue State Machine

Drives one session turn by turn: runs the NLU pipeline, merges slots into
the caller-owned ConversationContext, decides what to ask next, when the
request is complete and when to hand off to a human.

States: active (initial), waiting_for_input, completed, escalated.
completed and escalated are terminal; a terminal session never changes
again and gets a "start a new conversation" answer.

The orchestrator holds no session state of its own. The caller persists
the context between turns and serializes turns of the same session.
"""

import logging
from typing import Any, Dict, Optional

from ..calendar.business_hours import resolve_business_hours
from ..calendar.clock import tenant_now
from ..clarification.reasons import ClarificationReason
from ..clarification.renderer import TemplateRenderer, load_templates
from ..config.config import NovaConfig
from ..contracts import check_message_length
from ..core.pipeline import NLUPipeline
from ..data_types import (
    ChatResponse,
    ConversationContext,
    ConversationState,
    Intent,
    MessageRole,
    NLUResult,
)
from ..errors import ContractViolation, UpstreamError
from ..extraction.normalization import contains_any, normalize_text
from ..logging_config import generate_request_id, log_with_context
from ..response.builder import ResponseBuilder
from ..trace.analytics import AnalyticsSink, LoggingAnalyticsSink, TurnSummary
from .collaborators import AppointmentService, CabinetDirectory
from .policy import contact_of, decide_slots

logger = logging.getLogger(__name__)

SLOT_FILLING_INTENTS = {
    Intent.BOOK_APPOINTMENT,
    Intent.RESCHEDULE_APPOINTMENT,
    Intent.CANCEL_APPOINTMENT,
    Intent.CHECK_AVAILABILITY,
}

# Slots injected from the context rather than said by the patient
CONTEXT_SLOTS = {"cabinetId", "userId"}

# Slots forwarded to the appointment service
REQUEST_SLOTS = (
    "date", "time", "timeWindow", "serviceType", "practitionerName",
    "patientEmail", "patientPhone", "urgency",
)

EVENING_HOUR = 18


class DialogueOrchestrator:
    """
    Slot-filling dialogue over the NLU pipeline.

    Example:
        >>> orchestrator = DialogueOrchestrator(pipeline, appointments, directory)
        >>> response = orchestrator.handle_message("Je voudrais un rendez-vous demain", context)
        >>> context.conversation.state
        <ConversationState.WAITING_FOR_INPUT: 'waiting_for_input'>
    """

    def __init__(
        self,
        pipeline: NLUPipeline,
        appointments: AppointmentService,
        directory: CabinetDirectory,
        analytics: Optional[AnalyticsSink] = None,
        config: Optional[NovaConfig] = None,
        renderer: Optional[TemplateRenderer] = None
    ):
        self.pipeline = pipeline
        self.appointments = appointments
        self.directory = directory
        self.analytics = analytics or LoggingAnalyticsSink()
        self.config = config or pipeline.config
        self.vocabularies = pipeline.vocabularies
        renderer = renderer or TemplateRenderer(load_templates(self.config.STORE_DIR))
        self.responses = ResponseBuilder(renderer, self.vocabularies)

    # ------------------------------------------------------------------
    # Turn handling
    # ------------------------------------------------------------------

    def handle_message(self, message: str, context: ConversationContext) -> ChatResponse:
        """
        Process one user turn and mutate context accordingly.

        Args:
            message: Raw user text
            context: Session context, owned and persisted by the caller

        Returns:
            The response for this turn

        Raises:
            InputTooLong: If the message exceeds the configured bound
        """
        check_message_length(message, self.config.MAX_MESSAGE_LENGTH)
        request_id = generate_request_id()
        conversation = context.conversation

        if conversation.state.is_terminal:
            log_with_context(logger, logging.INFO, "Turn on a closed session ignored",
                             request_id=request_id, session_id=context.session_id,
                             state=conversation.state.value)
            return self.responses.session_closed()

        if self._is_injection(message):
            self._record_security_event(context, request_id)
            return self.responses.injection_blocked()

        result = self.pipeline.analyze(message, context)
        normalized = normalize_text(message)
        turn_intent = self._turn_intent(result, normalized, context)

        metadata: Dict[str, Any] = {"intent": result.intent.value, "confidence": result.confidence}
        if turn_intent is None:
            metadata["fallback"] = True
        conversation.add_message(MessageRole.USER, message, self._now(context), metadata)

        previous_state = conversation.state
        try:
            response = self._decide(result, turn_intent, normalized, context)
        except (UpstreamError, ContractViolation) as e:
            log_with_context(logger, logging.ERROR, f"Collaborator failure: {e}",
                             request_id=request_id, session_id=context.session_id,
                             error_type=type(e).__name__)
            self._escalate(context)
            response = self.responses.escalation("upstream_failure", "upstream_failure")

        conversation.add_message(MessageRole.ASSISTANT, response.message, self._now(context))

        if conversation.state != previous_state:
            log_with_context(logger, logging.INFO, "State transition",
                             request_id=request_id, session_id=context.session_id,
                             previous_state=previous_state.value, state=conversation.state.value,
                             intent=conversation.current_intent, escalate=response.escalate)

        self._record_turn(context, result, turn_intent, response, request_id)
        return response

    def _decide(
        self,
        result: NLUResult,
        turn_intent: Optional[Intent],
        normalized: str,
        context: ConversationContext
    ) -> ChatResponse:
        conversation = context.conversation

        if turn_intent == Intent.EMERGENCY:
            self._escalate(context)
            return self.responses.emergency(self.config.EMERGENCY_PHONE)

        if contains_any(normalized, self.vocabularies.human_request_keywords):
            self._escalate(context)
            return self.responses.escalation("human_handoff", "human_request")

        if turn_intent is None:
            return self._not_understood(context)

        new_slots = self._merge_slots(result, context)
        if conversation.current_intent != turn_intent.value:
            conversation.confirmation_pending = False
        conversation.current_intent = turn_intent.value

        if turn_intent in (Intent.BOOK_APPOINTMENT, Intent.RESCHEDULE_APPOINTMENT):
            return self._appointment_flow(turn_intent, normalized, new_slots, context)
        if turn_intent == Intent.CANCEL_APPOINTMENT:
            return self._cancellation_flow(normalized, new_slots, context)
        if turn_intent == Intent.CHECK_AVAILABILITY:
            return self._availability_flow(context)

        conversation.state = ConversationState.ACTIVE
        if turn_intent == Intent.GREETING:
            hour = self._now(context).hour
            salutation = "Bonsoir" if hour >= EVENING_HOUR else "Bonjour"
            return self.responses.greeting(salutation, context.tenant.name)
        if turn_intent == Intent.LIST_PRACTITIONERS:
            practitioners = self.directory.get_practitioners(
                context.tenant.id, result.slots.get("serviceType"))
            return self.responses.practitioners(practitioners)
        if turn_intent == Intent.CLINIC_INFO:
            info = self.directory.get_cabinet_info(context.tenant.id)
            return self.responses.clinic_info(info, self._business_hours(context))
        if turn_intent == Intent.GOODBYE:
            conversation.state = ConversationState.COMPLETED
            return self.responses.goodbye()
        return self.responses.help()

    def _turn_intent(
        self,
        result: NLUResult,
        normalized: str,
        context: ConversationContext
    ) -> Optional[Intent]:
        """
        Intent this turn acts on, or None when the turn was not understood.

        While the session is waiting for input (or has a confirmation
        pending) on a slot-filling intent, a turn that brings new slots or
        a yes/no answer continues that intent. Only emergency and another
        slot-filling intent recognized above the threshold take over; a
        fallback, a low-confidence result or an informational intent
        ("Un détartrage, merci" reads as goodbye) does not.
        """
        understood = (result.intent != Intent.FALLBACK
                      and result.confidence >= self.config.CONFIDENCE_THRESHOLD)
        if understood and result.intent == Intent.EMERGENCY:
            return result.intent

        conversation = context.conversation
        current = Intent.parse(conversation.current_intent) if conversation.current_intent else None
        waiting = (conversation.state == ConversationState.WAITING_FOR_INPUT
                   or conversation.confirmation_pending)
        if current not in SLOT_FILLING_INTENTS or not waiting:
            return result.intent if understood else None
        if understood and result.intent in SLOT_FILLING_INTENTS:
            return result.intent

        said = {k for k in result.slots if k not in CONTEXT_SLOTS}
        answered = conversation.confirmation_pending and (
            contains_any(normalized, self.vocabularies.affirmative_tokens)
            or contains_any(normalized, self.vocabularies.negative_tokens)
        )
        if not said and not answered:
            return result.intent if understood else None

        # Picking a time among offered slots turns a lookup into a booking
        if current == Intent.CHECK_AVAILABILITY and said & {"time", "timeWindow"}:
            return Intent.BOOK_APPOINTMENT
        return current

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def _appointment_flow(
        self,
        intent: Intent,
        normalized: str,
        new_slots: Dict[str, Any],
        context: ConversationContext
    ) -> ChatResponse:
        conversation = context.conversation
        slots = conversation.collected_slots
        confirm_reason = (ClarificationReason.CONFIRM_BOOKING if intent == Intent.BOOK_APPOINTMENT
                          else ClarificationReason.CONFIRM_RESCHEDULE)

        if conversation.confirmation_pending and not new_slots:
            answer = self._confirmation_answer(normalized)
            if answer is True:
                request = self._appointment_request(context)
                if intent == Intent.BOOK_APPOINTMENT:
                    appointment = self.appointments.book_appointment(request)
                    response = self.responses.booking_confirmed(slots, context.tenant.name, appointment)
                else:
                    appointment = self.appointments.reschedule_appointment(request)
                    response = self.responses.reschedule_confirmed(slots, appointment)
                conversation.confirmation_pending = False
                conversation.state = ConversationState.COMPLETED
                return response
            if answer is False:
                conversation.confirmation_pending = False
                conversation.state = ConversationState.WAITING_FOR_INPUT
                return self.responses.confirmation_withdrawn()

        decision = decide_slots(intent, slots)
        if not decision.complete:
            conversation.confirmation_pending = False
            conversation.state = ConversationState.WAITING_FOR_INPUT
            return self.responses.missing_slot(decision.reason)

        conversation.confirmation_pending = True
        conversation.state = ConversationState.ACTIVE
        return self.responses.confirm_appointment(confirm_reason, slots)

    def _cancellation_flow(
        self,
        normalized: str,
        new_slots: Dict[str, Any],
        context: ConversationContext
    ) -> ChatResponse:
        conversation = context.conversation
        slots = conversation.collected_slots

        decision = decide_slots(Intent.CANCEL_APPOINTMENT, slots)
        if not decision.complete:
            conversation.confirmation_pending = False
            conversation.state = ConversationState.WAITING_FOR_INPUT
            return self.responses.missing_slot(decision.reason)

        contact = contact_of(slots)
        if conversation.confirmation_pending and not new_slots:
            answer = self._confirmation_answer(normalized)
            if answer is True:
                result = self.appointments.cancel_appointment(self._appointment_request(context))
                conversation.confirmation_pending = False
                if not result.get("cancelled"):
                    conversation.state = ConversationState.WAITING_FOR_INPUT
                    return self.responses.cancellation_not_found(contact)
                conversation.state = ConversationState.COMPLETED
                return self.responses.cancellation_confirmed(result)
            if answer is False:
                conversation.confirmation_pending = False
                conversation.state = ConversationState.ACTIVE
                return self.responses.cancellation_aborted()

        conversation.confirmation_pending = True
        conversation.state = ConversationState.ACTIVE
        return self.responses.confirm_cancellation(contact)

    def _availability_flow(self, context: ConversationContext) -> ChatResponse:
        conversation = context.conversation
        slots = conversation.collected_slots

        decision = decide_slots(Intent.CHECK_AVAILABILITY, slots)
        if not decision.complete:
            conversation.state = ConversationState.WAITING_FOR_INPUT
            return self.responses.missing_slot(decision.reason)

        free_slots = self.appointments.check_availability(
            context.tenant.id,
            slots["date"],
            service_type=slots.get("serviceType"),
            time_window=slots.get("timeWindow"),
        )
        conversation.state = ConversationState.WAITING_FOR_INPUT
        return self.responses.availability(slots["date"], free_slots)

    def _not_understood(self, context: ConversationContext) -> ChatResponse:
        conversation = context.conversation
        misses = sum(
            1 for m in conversation.messages
            if m.role == MessageRole.USER and m.metadata and m.metadata.get("fallback")
        )
        if misses > self.config.MAX_FALLBACK_RETRIES:
            self._escalate(context)
            return self.responses.escalation("fallback_escalation", "repeated_fallback")

        conversation.state = ConversationState.WAITING_FOR_INPUT
        return self.responses.low_confidence()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _merge_slots(self, result: NLUResult, context: ConversationContext) -> Dict[str, Any]:
        """Merge this turn's slots into the session; return those that changed."""
        collected = context.conversation.collected_slots
        changed = {
            k: v for k, v in result.slots.items()
            if k not in CONTEXT_SLOTS and collected.get(k) != v
        }
        # An exact time and a day-part are alternatives; the newest one wins
        if "time" in changed:
            collected.pop("timeWindow", None)
        if "timeWindow" in changed:
            collected.pop("time", None)
        collected.update(result.slots)
        return changed

    def _confirmation_answer(self, normalized: str) -> Optional[bool]:
        """True for yes, False for no, None when absent or contradictory."""
        yes = contains_any(normalized, self.vocabularies.affirmative_tokens)
        no = contains_any(normalized, self.vocabularies.negative_tokens)
        if yes and not no:
            return True
        if no and not yes:
            return False
        return None

    def _appointment_request(self, context: ConversationContext) -> Dict[str, Any]:
        slots = context.conversation.collected_slots
        request: Dict[str, Any] = {"cabinetId": context.tenant.id, "userId": context.user.id}
        request.update({k: slots[k] for k in REQUEST_SLOTS if k in slots})
        if "patientEmail" not in request and context.user.email:
            request["patientEmail"] = context.user.email
        return request

    def _escalate(self, context: ConversationContext) -> None:
        context.conversation.state = ConversationState.ESCALATED
        context.conversation.confirmation_pending = False

    def _is_injection(self, message: str) -> bool:
        return any(p.search(message) for p in self.vocabularies.injection_patterns)

    def _now(self, context: ConversationContext):
        return tenant_now(self.pipeline.clock, context.tenant.timezone or self.config.DEFAULT_TIMEZONE,
                          self.config.DEFAULT_TIMEZONE)

    def _business_hours(self, context: ConversationContext):
        return resolve_business_hours(context.tenant, self.config.DEFAULT_OPEN, self.config.DEFAULT_CLOSE)

    def _record_turn(
        self,
        context: ConversationContext,
        result: NLUResult,
        turn_intent: Optional[Intent],
        response: ChatResponse,
        request_id: str
    ) -> None:
        summary = TurnSummary(
            session_id=context.session_id,
            tenant_id=context.tenant.id,
            intent=(turn_intent or result.intent).value,
            confidence=result.confidence,
            state=context.conversation.state.value,
            escalate=response.escalate,
            completed=response.completed,
            request_id=request_id,
        )
        try:
            self.analytics.record_turn(summary)
        except Exception as e:
            logger.warning(f"Analytics sink failed: {e}", extra={"request_id": request_id})

    def _record_security_event(self, context: ConversationContext, request_id: str) -> None:
        log_with_context(logger, logging.WARNING, "Prompt injection attempt blocked",
                         request_id=request_id, session_id=context.session_id)
        try:
            self.analytics.record_security_event(context.session_id, context.tenant.id, "prompt_injection")
        except Exception as e:
            logger.warning(f"Analytics sink failed: {e}", extra={"request_id": request_id})
