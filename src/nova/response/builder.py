"""
Response Builder

Builds the ChatResponse returned for each turn. All message text comes
from the template renderer; this module only decides which template,
which flags and which options go with it.

Response construction is kept separate from the dialogue state machine.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..calendar.business_hours import format_hours_fr
from ..calendar.dates import format_date_fr, format_time_fr
from ..clarification.models import Clarification
from ..clarification.reasons import ClarificationReason
from ..clarification.renderer import TemplateRenderer, render_clarification
from ..config.tables import Vocabularies
from ..data_types import BusinessHours, ChatResponse, InputType

MAX_AVAILABILITY_OPTIONS = 5

CONFIRMATION_REPLIES = ["Oui, je confirme", "Non, je veux modifier"]

LOW_CONFIDENCE_OPTIONS = [
    {"value": "Prendre un rendez-vous", "label": "Prendre un rendez-vous"},
    {"value": "Modifier un rendez-vous", "label": "Modifier un rendez-vous"},
    {"value": "Voir les disponibilités", "label": "Voir les disponibilités"},
    {"value": "Parler à un conseiller", "label": "Parler à un conseiller"},
]

TIME_WINDOW_OPTIONS = [
    {"value": "le matin", "label": "Le matin"},
    {"value": "l'après-midi", "label": "L'après-midi"},
    {"value": "le soir", "label": "En soirée"},
]

HELP_REPLIES = ["Prendre rendez-vous", "Voir les disponibilités", "Infos du cabinet"]


class ResponseBuilder:
    """
    Turns dialogue decisions into ChatResponse values.

    Example:
        >>> builder = ResponseBuilder(renderer, tables.vocabularies)
        >>> builder.emergency("15").escalate
        True
    """

    def __init__(self, renderer: TemplateRenderer, vocabularies: Vocabularies):
        self.renderer = renderer
        self.vocabularies = vocabularies

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    def describe_date(self, value: str) -> str:
        return format_date_fr(value, self.vocabularies.weekdays, self.vocabularies.months)

    def describe_time(self, slots: Mapping[str, Any]) -> str:
        value = slots.get("time") or slots.get("timeWindow") or ""
        return format_time_fr(str(value))

    def service_options(self) -> List[Dict[str, str]]:
        return [
            {"value": service, "label": service.capitalize()}
            for service in self.vocabularies.services
        ]

    # ------------------------------------------------------------------
    # Clarifications
    # ------------------------------------------------------------------

    def clarification(
        self,
        clarification: Clarification,
        options: Optional[List[Dict[str, str]]] = None,
        suggested_replies: Optional[List[str]] = None
    ) -> ChatResponse:
        return ChatResponse(
            message=render_clarification(clarification, self.renderer),
            requires_input=True,
            input_type=clarification.input_type or InputType.TEXT,
            options=options,
            suggested_replies=suggested_replies,
        )

    def missing_slot(self, reason: ClarificationReason) -> ChatResponse:
        """Ask for the next missing slot with the matching input widget."""
        if reason == ClarificationReason.MISSING_DATE:
            return self.clarification(Clarification(reason, input_type=InputType.DATE))
        if reason == ClarificationReason.MISSING_TIME:
            return self.clarification(
                Clarification(reason, input_type=InputType.TIME),
                options=list(TIME_WINDOW_OPTIONS),
            )
        if reason == ClarificationReason.MISSING_SERVICE:
            options = self.service_options()
            return self.clarification(
                Clarification(reason, {"services": ", ".join(o["value"] for o in options)},
                              input_type=InputType.SELECT),
                options=options,
            )
        return self.clarification(Clarification(reason, input_type=InputType.TEXT))

    def confirm_appointment(self, reason: ClarificationReason, slots: Mapping[str, Any]) -> ChatResponse:
        """Recap of a booking or reschedule awaiting a yes/no."""
        data = {
            "date": self.describe_date(str(slots.get("date", ""))),
            "time": self.describe_time(slots),
            "service": slots.get("serviceType", ""),
        }
        return self.clarification(
            Clarification(reason, data, input_type=InputType.CONFIRMATION),
            suggested_replies=list(CONFIRMATION_REPLIES),
        )

    def confirm_cancellation(self, contact: str) -> ChatResponse:
        return self.clarification(
            Clarification(ClarificationReason.CONFIRM_CANCELLATION, {"contact": contact},
                          input_type=InputType.CONFIRMATION),
            suggested_replies=["Oui, annuler", "Non, garder mon rendez-vous"],
        )

    def confirmation_withdrawn(self) -> ChatResponse:
        return self.clarification(
            Clarification(ClarificationReason.CONFIRMATION_WITHDRAWN, input_type=InputType.TEXT),
            suggested_replies=["La date", "L'heure", "Le soin"],
        )

    def low_confidence(self) -> ChatResponse:
        return self.clarification(
            Clarification(ClarificationReason.LOW_CONFIDENCE, input_type=InputType.SELECT),
            options=[dict(o) for o in LOW_CONFIDENCE_OPTIONS],
        )

    # ------------------------------------------------------------------
    # Informational responses
    # ------------------------------------------------------------------

    def greeting(self, salutation: str, cabinet: str) -> ChatResponse:
        return ChatResponse(
            message=self.renderer.render("greeting", {"salutation": salutation, "cabinet": cabinet}),
            suggested_replies=list(HELP_REPLIES),
        )

    def availability(self, date_value: str, free_slots: Sequence[Mapping[str, Any]]) -> ChatResponse:
        """
        List up to five free slots as selectable options.

        Each slot needs a "time" (HH:MM); "practitioner" is optional.
        """
        date_label = self.describe_date(date_value)
        if not free_slots:
            return ChatResponse(
                message=self.renderer.render("availability_none", {"date": date_label}),
                requires_input=True,
                input_type=InputType.DATE,
            )

        options = []
        for slot in list(free_slots)[:MAX_AVAILABILITY_OPTIONS]:
            label = format_time_fr(str(slot["time"]))
            if slot.get("practitioner"):
                label = f"{label} avec {slot['practitioner']}"
            options.append({"value": f"{date_value} {slot['time']}", "label": label})

        lines = "\n".join(f"• {o['label']}" for o in options)
        return ChatResponse(
            message=self.renderer.render("availability_list", {"date": date_label, "slots": lines}),
            requires_input=True,
            input_type=InputType.SELECT,
            options=options,
            data={"date": date_value, "slots": [dict(s) for s in list(free_slots)[:MAX_AVAILABILITY_OPTIONS]]},
        )

    def practitioners(self, practitioners: Sequence[Mapping[str, Any]]) -> ChatResponse:
        if not practitioners:
            return ChatResponse(message=self.renderer.render("practitioners_none"))

        lines = []
        for p in practitioners:
            line = f"• {p['name']}"
            if p.get("specialty"):
                line += f" ({p['specialty']})"
            lines.append(line)
        return ChatResponse(
            message=self.renderer.render("practitioners_list", {"practitioners": "\n".join(lines)}),
            suggested_replies=["Prendre rendez-vous"],
            data={"practitioners": [dict(p) for p in practitioners]},
        )

    def clinic_info(self, info: Mapping[str, Any], hours: Mapping[str, BusinessHours]) -> ChatResponse:
        data = {
            "cabinet": info["name"],
            "address": info.get("address") or "non communiquée",
            "phone": info.get("phone") or "non communiqué",
            "hours": format_hours_fr(hours, self.vocabularies.weekdays),
        }
        return ChatResponse(
            message=self.renderer.render("clinic_info", data),
            suggested_replies=["Prendre rendez-vous", "Voir les disponibilités"],
        )

    def help(self) -> ChatResponse:
        return ChatResponse(message=self.renderer.render("help"), suggested_replies=list(HELP_REPLIES))

    # ------------------------------------------------------------------
    # Completion and escalation
    # ------------------------------------------------------------------

    def booking_confirmed(self, slots: Mapping[str, Any], cabinet: str, appointment: Dict[str, Any]) -> ChatResponse:
        data = {
            "date": self.describe_date(str(slots.get("date", ""))),
            "time": self.describe_time(slots),
            "cabinet": cabinet,
        }
        return ChatResponse(
            message=self.renderer.render("booking_confirmed", data),
            completed=True,
            data={"appointment": appointment},
        )

    def reschedule_confirmed(self, slots: Mapping[str, Any], appointment: Dict[str, Any]) -> ChatResponse:
        data = {
            "date": self.describe_date(str(slots.get("date", ""))),
            "time": self.describe_time(slots),
        }
        return ChatResponse(
            message=self.renderer.render("reschedule_confirmed", data),
            completed=True,
            data={"appointment": appointment},
        )

    def cancellation_confirmed(self, result: Dict[str, Any]) -> ChatResponse:
        return ChatResponse(
            message=self.renderer.render("cancellation_confirmed"),
            completed=True,
            data={"cancellation": result},
        )

    def cancellation_aborted(self) -> ChatResponse:
        return ChatResponse(message=self.renderer.render("cancellation_aborted"), suggested_replies=list(HELP_REPLIES))

    def cancellation_not_found(self, contact: str) -> ChatResponse:
        return ChatResponse(
            message=self.renderer.render("cancellation_not_found", {"contact": contact}),
            requires_input=True,
            input_type=InputType.TEXT,
        )

    def goodbye(self) -> ChatResponse:
        return ChatResponse(message=self.renderer.render("goodbye"), completed=True)

    def session_closed(self) -> ChatResponse:
        return ChatResponse(message=self.renderer.render("session_closed"), completed=True)

    def injection_blocked(self) -> ChatResponse:
        return ChatResponse(
            message=self.renderer.render("injection_blocked"),
            requires_input=True,
            input_type=InputType.TEXT,
        )

    def emergency(self, emergency_phone: str) -> ChatResponse:
        return ChatResponse(
            message=self.renderer.render("emergency", {"emergency_phone": emergency_phone}),
            escalate=True,
            data={"reason": "emergency"},
        )

    def escalation(self, key: str, reason: str) -> ChatResponse:
        """Human handoff: key is human_handoff, fallback_escalation or upstream_failure."""
        return ChatResponse(
            message=self.renderer.render(key),
            escalate=True,
            data={"reason": reason},
        )
