"""
Nova Configuration

Centralized configuration for the NLU pipeline and the dialogue layer.
All settings can be overridden via environment variables.
"""
import os
from pathlib import Path
from typing import Optional


def _default_store_dir() -> str:
    return str(Path(__file__).resolve().parent.parent / "store")


class NovaConfig:
    """
    Central configuration for nova.

    Values are read from the environment when the instance is created, so a
    fresh instance picks up overrides:

    Example:
        >>> os.environ["NOVA_CONFIDENCE_THRESHOLD"] = "0.6"
        >>> NovaConfig().CONFIDENCE_THRESHOLD
        0.6
    """

    def __init__(self):
        # ====================================================================
        # Logging Settings
        # ====================================================================

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        """Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"""

        self.LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")
        """Log format: 'json' (structured) or 'pretty' (readable)"""

        self.LOG_FILE: Optional[str] = os.getenv("LOG_FILE")
        """Optional: also write JSON logs to this file"""

        # ====================================================================
        # Dialogue Settings
        # ====================================================================

        self.MAX_MESSAGE_LENGTH: int = int(
            os.getenv("NOVA_MAX_MESSAGE_LENGTH", "2000"))
        """Longest message accepted at the boundary"""

        self.CONFIDENCE_THRESHOLD: float = float(
            os.getenv("NOVA_CONFIDENCE_THRESHOLD", "0.55"))
        """Operating threshold below which a turn is treated as not understood"""

        self.MAX_FALLBACK_RETRIES: int = int(
            os.getenv("NOVA_MAX_FALLBACK_RETRIES", "2"))
        """Misunderstood turns tolerated before handing off to a human"""

        self.EMERGENCY_PHONE: str = os.getenv("NOVA_EMERGENCY_PHONE", "15")
        """Number given to patients reporting an emergency"""

        # ====================================================================
        # Tenant Defaults
        # ====================================================================

        self.DEFAULT_TIMEZONE: str = os.getenv(
            "NOVA_DEFAULT_TIMEZONE", "Africa/Algiers")
        """Timezone used when the tenant does not declare one"""

        self.DEFAULT_OPEN: str = os.getenv("NOVA_DEFAULT_OPEN", "08:00")
        self.DEFAULT_CLOSE: str = os.getenv("NOVA_DEFAULT_CLOSE", "18:00")
        """Business hours used when the tenant declares none (Mon-Fri)"""

        # ====================================================================
        # Pattern Tables
        # ====================================================================

        self.STORE_DIR: str = os.getenv("NOVA_STORE_DIR", _default_store_dir())
        """Directory holding intents.yaml, entities.yaml, vocabularies.yaml"""

        # ====================================================================
        # Collaborator API Settings
        # ====================================================================

        self.API_BASE_URL: str = os.getenv(
            "NOVA_API_BASE_URL", "http://localhost:3000")
        """Base URL of the appointment service and cabinet directory"""

        self.API_TIMEOUT: float = float(os.getenv("NOVA_API_TIMEOUT", "10"))
        """Request timeout in seconds for collaborator calls"""

    @classmethod
    def from_env(cls) -> "NovaConfig":
        """Create config from the current environment."""
        return cls()

    def summary(self) -> str:
        """
        Get configuration summary as formatted string.

        Returns:
            Multi-line string with all config values
        """
        lines = [
            "=" * 60,
            "Nova Configuration",
            "=" * 60,
            "",
            "Dialogue:",
            f"  Max Message Length: {self.MAX_MESSAGE_LENGTH}",
            f"  Confidence Thresh.: {self.CONFIDENCE_THRESHOLD}",
            f"  Fallback Retries:   {self.MAX_FALLBACK_RETRIES}",
            f"  Emergency Phone:    {self.EMERGENCY_PHONE}",
            "",
            "Tenant Defaults:",
            f"  Timezone:           {self.DEFAULT_TIMEZONE}",
            f"  Business Hours:     {self.DEFAULT_OPEN}-{self.DEFAULT_CLOSE}",
            "",
            "Pattern Tables:",
            f"  Store Dir:          {self.STORE_DIR}",
            "",
            "API:",
            f"  Base URL:           {self.API_BASE_URL}",
            f"  Timeout:            {self.API_TIMEOUT}s",
            "",
            "Logging:",
            f"  Level:              {self.LOG_LEVEL}",
            f"  Format:             {self.LOG_FORMAT}",
            f"  File:               {self.LOG_FILE or 'None'}",
            "",
            "=" * 60,
        ]
        return "\n".join(lines)

    def __repr__(self):
        return (
            f"<NovaConfig threshold={self.CONFIDENCE_THRESHOLD} "
            f"tz={self.DEFAULT_TIMEZONE}>"
        )
