"""
Collaborator Clients

HTTP clients for the services the dialogue layer delegates to. They are
called only with fully collected, confirmed inputs and never perform
clarification logic.
"""

from .appointment_client import AppointmentClient
from .base_client import BaseClient
from .directory_client import CabinetDirectoryClient

__all__ = [
    "AppointmentClient",
    "BaseClient",
    "CabinetDirectoryClient",
]
