"""
Base HTTP Client

Shared base class for the thin HTTP clients the dialogue layer uses to
reach its collaborators (appointment service, cabinet directory).
"""

import os
from typing import Any, Dict, Optional

import httpx

from ..errors import ContractViolation, UpstreamError


class BaseClient:
    """Base HTTP client with common error handling."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        env_var: str = "NOVA_API_BASE_URL",
        default_url: Optional[str] = "http://localhost:3000",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize base client.

        Args:
            base_url: API base URL (overrides env var)
            env_var: Environment variable name for base URL
            default_url: Default base URL if not provided and env var is not set
            timeout: Request timeout in seconds
            transport: Optional httpx transport (httpx.MockTransport in tests)

        Raises:
            ValueError: If no base URL can be determined
        """
        resolved = base_url or os.getenv(env_var) or default_url
        if not resolved:
            raise ValueError(
                f"Base URL is required. Either provide 'base_url' parameter "
                f"or set environment variable '{env_var}'"
            )

        self.base_url = resolved.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make HTTP request and return parsed JSON.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (appended to base_url)
            json: JSON payload for POST/PUT requests
            params: Query parameters; None values are dropped

        Returns:
            Parsed JSON object

        Raises:
            UpstreamError: On network failures, HTTP errors or invalid JSON
            ContractViolation: If the body is valid JSON but not an object
        """
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self._client.request(method=method, url=url, json=json, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            error_text = e.response.text[:500] if e.response.text else ""
            raise UpstreamError(f"API returned error {status_code}: {error_text}") from e
        except httpx.RequestError as e:
            raise UpstreamError(f"API request failed: {str(e)}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(f"API returned invalid JSON for {method} {path}") from e

        if not isinstance(body, dict):
            raise ContractViolation(f"Response for {method} {path} must be an object, got {type(body).__name__}")
        return body

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
