"""
Tests for nova.logging_config and the analytics sink.
"""
import json
import logging

import pytest

from nova.logging_config import (
    JSONFormatter,
    PrettyFormatter,
    generate_request_id,
    log_function_call,
    log_with_context,
    setup_logging,
)
from nova.trace.analytics import LoggingAnalyticsSink, TurnSummary


@pytest.fixture
def nova_logger():
    """Restore the nova logger after setup_logging reconfigures it."""
    logger = logging.getLogger("nova")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield logger
    logger.handlers, logger.level, logger.propagate = saved[0], saved[1], saved[2]


def _record(message="Turn handled", **extra):
    record = logging.LogRecord("nova.decision.dialogue", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:

    def test_json_formatter_includes_extra_fields(self):
        line = JSONFormatter().format(_record(session_id="sess-1", confidence=0.9, escalate=False))
        data = json.loads(line)
        assert data["message"] == "Turn handled"
        assert data["level"] == "INFO"
        assert data["logger"] == "nova.decision.dialogue"
        assert data["session_id"] == "sess-1"
        assert data["confidence"] == 0.9
        assert data["escalate"] is False
        assert data["timestamp"].endswith("Z")

    def test_json_formatter_skips_unserializable_extras(self):
        data = json.loads(JSONFormatter().format(_record(client=object())))
        assert "client" not in data

    def test_pretty_formatter_shows_context(self):
        line = PrettyFormatter().format(_record(session_id="sess-1", intent="greeting"))
        assert "Turn handled" in line
        assert "session_id=sess-1" in line
        assert "intent=greeting" in line


class TestSetupLogging:

    def test_configures_app_logger(self, nova_logger):
        logger = setup_logging("nova", "DEBUG", "json")
        assert logger is nova_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_file_handler(self, nova_logger, tmp_path):
        log_file = tmp_path / "logs" / "nova.log"
        logger = setup_logging("nova", "INFO", "pretty", str(log_file))
        logger.info("hello", extra={"session_id": "s"})
        for handler in logger.handlers:
            handler.flush()
        data = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert data["session_id"] == "s"


class TestHelpers:

    def test_request_id(self):
        first, second = generate_request_id(), generate_request_id()
        assert len(first) == 8
        assert first != second

    def test_log_with_context(self, caplog):
        logger = logging.getLogger("nova.tests.context")
        with caplog.at_level(logging.INFO, logger="nova.tests.context"):
            log_with_context(logger, logging.INFO, "State transition", request_id="abc12345", state="escalated")
        (record,) = caplog.records
        assert record.request_id == "abc12345"
        assert record.state == "escalated"

    def test_log_function_call_logs_and_returns(self, caplog):
        @log_function_call(level="DEBUG")
        def double(value):
            return value * 2

        with caplog.at_level(logging.DEBUG, logger=__name__):
            assert double(21) == 42
        messages = [r.getMessage() for r in caplog.records]
        assert any("called" in m for m in messages)
        assert any("completed" in m for m in messages)

    def test_log_function_call_reraises(self, caplog):
        @log_function_call()
        def boom():
            raise RuntimeError("nope")

        with caplog.at_level(logging.DEBUG, logger=__name__):
            with pytest.raises(RuntimeError):
                boom()
        assert any(r.levelno == logging.ERROR for r in caplog.records)


class TestLoggingAnalyticsSink:

    def test_record_turn(self, caplog):
        sink = LoggingAnalyticsSink(logging.getLogger("nova.tests.analytics"))
        summary = TurnSummary("sess-1", "cab-1", "greeting", 0.6, "active", False, False, "req-1")
        with caplog.at_level(logging.INFO, logger="nova.tests.analytics"):
            sink.record_turn(summary)
        (record,) = caplog.records
        assert record.intent == "greeting"
        assert record.request_id == "req-1"

    def test_record_security_event(self, caplog):
        sink = LoggingAnalyticsSink(logging.getLogger("nova.tests.analytics"))
        with caplog.at_level(logging.WARNING, logger="nova.tests.analytics"):
            sink.record_security_event("sess-1", "cab-1", "prompt_injection")
        assert caplog.records[0].event == "prompt_injection"
