"""
Analytics / audit sink.

The dialogue layer hands one TurnSummary per turn to the sink, and one
security event per blocked message. Delivery is fire-and-forget: the
orchestrator logs sink failures and carries on.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..logging_config import log_with_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnSummary:
    """What the sink learns about one turn. No message text is included."""
    session_id: str
    tenant_id: str
    intent: str
    confidence: float
    state: str
    escalate: bool
    completed: bool
    request_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AnalyticsSink(ABC):
    """
    Receives per-turn summaries.

    Implementations must provide:
    - record_turn(summary) -> None
    - record_security_event(session_id, tenant_id, kind) -> None
    """

    @abstractmethod
    def record_turn(self, summary: TurnSummary) -> None:
        pass

    @abstractmethod
    def record_security_event(self, session_id: str, tenant_id: str, kind: str) -> None:
        pass


class LoggingAnalyticsSink(AnalyticsSink):
    """Default sink: writes summaries as structured log records."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.logger = log or logger

    def record_turn(self, summary: TurnSummary) -> None:
        log_with_context(self.logger, logging.INFO, "Turn recorded", **summary.to_dict())

    def record_security_event(self, session_id: str, tenant_id: str, kind: str) -> None:
        log_with_context(
            self.logger, logging.WARNING, "Security event",
            session_id=session_id, tenant_id=tenant_id, event=kind,
        )
