"""
Cabinet Directory Client

Thin HTTP client for cabinet details and the practitioner list.
"""

from typing import Any, Dict, List, Optional

import httpx

from ..decision.collaborators import CabinetDirectory
from ..errors import ContractViolation
from .base_client import BaseClient


class CabinetDirectoryClient(BaseClient, CabinetDirectory):
    """HTTP client for the cabinet/practitioner directory."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)

    def get_practitioners(self, cabinet_id: str, specialty: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Practitioners of a cabinet, optionally filtered by specialty.

        Returns:
            List of {"name": ..., "specialty": optional}

        Raises:
            UpstreamError: On network failures or HTTP errors
            ContractViolation: If the list is missing or an entry has no name
        """
        body = self._request(
            "GET",
            f"/api/cabinets/{cabinet_id}/practitioners",
            params={"specialty": specialty},
        )
        practitioners = body.get("practitioners")
        if not isinstance(practitioners, list):
            raise ContractViolation("Contract violation: practitioners list is missing")
        for entry in practitioners:
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ContractViolation("Contract violation: practitioner entry without a name")
        return practitioners

    def get_cabinet_info(self, cabinet_id: str) -> Dict[str, Any]:
        """
        Cabinet details: name (required), address, phone.
        """
        body = self._request("GET", f"/api/cabinets/{cabinet_id}")
        if not body.get("name"):
            raise ContractViolation("Contract violation: cabinet info is missing 'name'")
        return body
