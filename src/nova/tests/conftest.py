"""
Shared fixtures for nova tests.

All tests run against a clock frozen at Monday 2026-10-19, 10:00 in
Africa/Algiers (UTC+1, no daylight saving), inside default business hours.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from nova.calendar.clock import fixed_clock
from nova.clarification.renderer import TemplateRenderer, load_templates
from nova.config import NovaConfig, load_pattern_tables
from nova.core.pipeline import NLUPipeline
from nova.data_types import Conversation, ConversationContext, TenantInfo, UserInfo
from nova.decision import AppointmentService, CabinetDirectory, DialogueOrchestrator
from nova.trace.analytics import AnalyticsSink

MONDAY_10AM_UTC = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
TODAY = "2026-10-19"
TOMORROW = "2026-10-20"


class FakeAppointmentService(AppointmentService):
    """Records calls and returns canned answers."""

    def __init__(self, slots: Optional[List[Dict[str, Any]]] = None, cancelled: bool = True):
        self.slots = slots if slots is not None else [{"time": "09:00"}, {"time": "14:30", "practitioner": "Dr Benali"}]
        self.cancelled = cancelled
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if self.error is not None:
            raise self.error

    def check_availability(self, cabinet_id, date, service_type=None, time_window=None):
        self._record("check_availability", cabinet_id, date, service_type, time_window)
        return list(self.slots)

    def book_appointment(self, request):
        self._record("book_appointment", request)
        return {"id": "apt-1", **request}

    def reschedule_appointment(self, request):
        self._record("reschedule_appointment", request)
        return {"id": "apt-1", **request}

    def cancel_appointment(self, request):
        self._record("cancel_appointment", request)
        return {"cancelled": self.cancelled}

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


class FakeDirectory(CabinetDirectory):
    def __init__(self):
        self.calls: List[tuple] = []

    def get_practitioners(self, cabinet_id, specialty=None):
        self.calls.append(("get_practitioners", cabinet_id, specialty))
        return [{"name": "Dr Benali", "specialty": "orthodontie"}, {"name": "Dr Haddad"}]

    def get_cabinet_info(self, cabinet_id):
        self.calls.append(("get_cabinet_info", cabinet_id))
        return {"name": "Cabinet du Parc", "address": "12 rue Didouche Mourad, Alger", "phone": "+213 21 00 00 00"}


class RecordingSink(AnalyticsSink):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.turns = []
        self.security_events = []

    def record_turn(self, summary):
        if self.fail:
            raise RuntimeError("sink down")
        self.turns.append(summary)

    def record_security_event(self, session_id, tenant_id, kind):
        if self.fail:
            raise RuntimeError("sink down")
        self.security_events.append((session_id, tenant_id, kind))


@pytest.fixture(scope="session")
def tables():
    return load_pattern_tables()


@pytest.fixture
def config(monkeypatch):
    for name in ("NOVA_CONFIDENCE_THRESHOLD", "NOVA_MAX_FALLBACK_RETRIES", "NOVA_MAX_MESSAGE_LENGTH",
                 "NOVA_DEFAULT_TIMEZONE", "NOVA_DEFAULT_OPEN", "NOVA_DEFAULT_CLOSE", "NOVA_STORE_DIR"):
        monkeypatch.delenv(name, raising=False)
    return NovaConfig()


@pytest.fixture
def clock():
    return fixed_clock(MONDAY_10AM_UTC)


@pytest.fixture
def pipeline(tables, config, clock):
    return NLUPipeline(tables=tables, config=config, clock=clock)


@pytest.fixture
def renderer(config):
    return TemplateRenderer(load_templates(config.STORE_DIR))


@pytest.fixture
def make_context():
    def _make(**conversation):
        return ConversationContext(
            session_id="sess-1",
            user=UserInfo(id="user-1"),
            tenant=TenantInfo(id="cab-1", timezone="Africa/Algiers", name="Cabinet du Parc"),
            conversation=Conversation(**conversation),
        )
    return _make


@pytest.fixture
def context(make_context):
    return make_context()


@pytest.fixture
def appointments():
    return FakeAppointmentService()


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def orchestrator(pipeline, appointments, directory, sink, config):
    return DialogueOrchestrator(pipeline, appointments, directory, analytics=sink, config=config)
