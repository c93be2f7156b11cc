"""Per-turn analytics and audit trail."""

from nova.trace.analytics import AnalyticsSink, LoggingAnalyticsSink, TurnSummary

__all__ = ["AnalyticsSink", "LoggingAnalyticsSink", "TurnSummary"]
