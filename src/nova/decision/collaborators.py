"""
Collaborator interfaces used by the dialogue state machine.

The orchestrator only talks to these abstractions; the HTTP clients in
nova.clients implement them, and tests substitute fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class AppointmentService(ABC):
    """
    Appointment backend.

    Implementations must provide:
    - check_availability(cabinet_id, date, service_type, time_window) -> list of slots
    - book_appointment(request) -> appointment dict
    - reschedule_appointment(request) -> appointment dict
    - cancel_appointment(request) -> {"cancelled": bool, ...}

    Failures are reported as UpstreamError or ContractViolation.
    """

    @abstractmethod
    def check_availability(
        self,
        cabinet_id: str,
        date: str,
        service_type: Optional[str] = None,
        time_window: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def book_appointment(self, request: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def reschedule_appointment(self, request: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def cancel_appointment(self, request: Dict[str, Any]) -> Dict[str, Any]:
        pass


class CabinetDirectory(ABC):
    """
    Cabinet and practitioner directory.

    Implementations must provide:
    - get_practitioners(cabinet_id, specialty) -> list of {"name", "specialty"?}
    - get_cabinet_info(cabinet_id) -> {"name", "address"?, "phone"?}
    """

    @abstractmethod
    def get_practitioners(self, cabinet_id: str, specialty: Optional[str] = None) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_cabinet_info(self, cabinet_id: str) -> Dict[str, Any]:
        pass
