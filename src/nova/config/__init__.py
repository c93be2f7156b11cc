"""
Nova configuration: environment settings and pattern tables.
"""
from .config import NovaConfig
from .tables import (
    EntityRule,
    IntentRule,
    PatternTables,
    Vocabularies,
    load_pattern_tables,
)

__all__ = [
    "NovaConfig",
    "EntityRule",
    "IntentRule",
    "PatternTables",
    "Vocabularies",
    "load_pattern_tables",
]
