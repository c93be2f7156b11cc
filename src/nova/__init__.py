"""
Nova - French dental-appointment assistant

Rule-based NLU for patient messages (intent, entities, slots) and a
slot-filling dialogue state machine on top of it.

This package provides:
- Type-safe data structures (data_types.py)
- NLU pipeline (core/): normalization, extraction, classification, slots
- Dialogue state machine (decision/) with template responses (response/)
- HTTP clients for the appointment and directory services (clients/)
- Interactive REPL (cli/)
"""

from nova.config import NovaConfig, PatternTables, load_pattern_tables

from nova.data_types import (
    # Enums
    Intent,
    EntityType,
    MessageRole,
    ConversationState,
    InputType,

    # Data structures
    EntityMatch,
    NLUResult,
    Message,
    UserInfo,
    BusinessHours,
    TenantInfo,
    Conversation,
    ConversationContext,
    ChatResponse,
)

from nova.errors import (
    NovaError,
    InputTooLong,
    PatternTableError,
    UpstreamError,
    ContractViolation,
)

from nova.core.pipeline import NLUPipeline
from nova.decision import AppointmentService, CabinetDirectory, DialogueOrchestrator
from nova.contracts import ChatRequest

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "NovaConfig",
    "PatternTables",
    "load_pattern_tables",

    # Main API
    "NLUPipeline",
    "DialogueOrchestrator",
    "ChatRequest",

    # Collaborator interfaces
    "AppointmentService",
    "CabinetDirectory",

    # Enums
    "Intent",
    "EntityType",
    "MessageRole",
    "ConversationState",
    "InputType",

    # Core types
    "EntityMatch",
    "NLUResult",
    "Message",
    "UserInfo",
    "BusinessHours",
    "TenantInfo",
    "Conversation",
    "ConversationContext",
    "ChatResponse",

    # Errors
    "NovaError",
    "InputTooLong",
    "PatternTableError",
    "UpstreamError",
    "ContractViolation",
]
