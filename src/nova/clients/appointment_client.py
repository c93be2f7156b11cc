"""
Appointment Service Client

Thin HTTP client for the appointment backend: availability lookups,
booking, rescheduling and cancellation. Called only after the dialogue
layer has collected and confirmed every required slot.
"""

from typing import Any, Dict, List, Optional

import httpx

from ..decision.collaborators import AppointmentService
from ..errors import ContractViolation
from .base_client import BaseClient


def _require(body: Dict[str, Any], field: str, operation: str) -> Any:
    if field not in body:
        raise ContractViolation(f"Contract violation: {operation} response is missing '{field}'")
    return body[field]


class AppointmentClient(BaseClient, AppointmentService):
    """HTTP client for the appointment service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)

    def check_availability(
        self,
        cabinet_id: str,
        date: str,
        service_type: Optional[str] = None,
        time_window: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Free slots on a day.

        Returns:
            List of {"time": "HH:MM", "practitioner": optional name}

        Raises:
            UpstreamError: On network failures or HTTP errors
            ContractViolation: If the slots list is missing or malformed
        """
        body = self._request(
            "GET",
            f"/api/cabinets/{cabinet_id}/availability",
            params={"date": date, "serviceType": service_type, "timeWindow": time_window},
        )
        slots = _require(body, "slots", "availability")
        if not isinstance(slots, list) or not all(isinstance(s, dict) and "time" in s for s in slots):
            raise ContractViolation("Contract violation: every availability slot needs a 'time'")
        return slots

    def book_appointment(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an appointment from confirmed slots.

        Args:
            request: cabinetId, userId, date, time or timeWindow, serviceType,
                     and the optional practitionerName / patientEmail / patientPhone

        Returns:
            Created appointment (has at least an "id")
        """
        body = self._request("POST", "/api/appointments", json=request)
        _require(body, "id", "booking")
        return body

    def reschedule_appointment(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Move the patient's appointment to the confirmed date and time."""
        body = self._request("POST", "/api/appointments/reschedule", json=request)
        _require(body, "id", "reschedule")
        return body

    def cancel_appointment(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Cancel the appointment identified by the patient's email or phone.

        Returns:
            Cancellation result (has a boolean "cancelled")
        """
        body = self._request("POST", "/api/appointments/cancel", json=request)
        _require(body, "cancelled", "cancellation")
        return body
