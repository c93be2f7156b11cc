"""
Pattern table loading.

Reads the declarative intent, entity and vocabulary tables from the store
directory (intents.yaml, entities.yaml, vocabularies.yaml) and compiles
them into an immutable PatternTables value. Tables are loaded once at
startup and handed to the pipeline; nothing here is cached globally.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Pattern, Tuple, Union

import yaml

from ..data_types import EntityType, Intent
from ..errors import PatternTableError

INTENTS_FILE = "intents.yaml"
ENTITIES_FILE = "entities.yaml"
VOCABULARIES_FILE = "vocabularies.yaml"


@dataclass(frozen=True)
class IntentRule:
    """Ordered patterns owned by one intent, with its tie-break priority."""
    intent: Intent
    priority: int
    patterns: Tuple[Pattern, ...]


@dataclass(frozen=True)
class EntityRule:
    """A single (entity type, pattern) row."""
    entity_type: EntityType
    pattern: Pattern
    confidence: float


@dataclass(frozen=True)
class Vocabularies:
    """
    Word lists consumed by normalization and by the dialogue layer.

    Synonym tables map a canonical value to its surface forms. Surface
    forms are stored as written in the YAML file (accents included).
    """
    services: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    time_windows: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    noon: Tuple[str, ...] = ()
    urgency_levels: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    relative_days: Dict[str, int] = field(default_factory=dict)
    weekdays: Tuple[str, ...] = ()
    months: Tuple[str, ...] = ()
    affirmative_tokens: Tuple[str, ...] = ()
    negative_tokens: Tuple[str, ...] = ()
    emergency_keywords: Tuple[str, ...] = ()
    human_request_keywords: Tuple[str, ...] = ()
    injection_patterns: Tuple[Pattern, ...] = ()


@dataclass(frozen=True)
class PatternTables:
    """Everything the pipeline needs to match text, compiled once."""
    intent_rules: Tuple[IntentRule, ...]
    entity_rules: Tuple[EntityRule, ...]
    vocabularies: Vocabularies

    def priority_of(self, intent: Intent) -> int:
        for rule in self.intent_rules:
            if rule.intent == intent:
                return rule.priority
        return len(self.intent_rules) + 1


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise PatternTableError(f"Pattern table not found: {path}")
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise PatternTableError(f"{path.name} must contain a mapping at top level")
    return raw


def _compile(pattern: str, source: str) -> Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise PatternTableError(f"Invalid pattern in {source}: {pattern!r} ({e})") from e


def _load_intent_rules(raw: Dict[str, Any]) -> Tuple[IntentRule, ...]:
    intents_cfg = raw.get("intents")
    if not isinstance(intents_cfg, dict) or not intents_cfg:
        raise PatternTableError(f"{INTENTS_FILE} must define a non-empty 'intents' mapping")

    rules = []
    for name, cfg in intents_cfg.items():
        try:
            intent = Intent(name)
        except ValueError:
            raise PatternTableError(f"Unknown intent in {INTENTS_FILE}: {name}") from None
        if intent == Intent.FALLBACK:
            raise PatternTableError("fallback cannot own patterns")
        patterns = tuple(
            _compile(p, f"{INTENTS_FILE}:{name}") for p in (cfg.get("patterns") or [])
        )
        if not patterns:
            raise PatternTableError(f"Intent {name} has no patterns")
        rules.append(IntentRule(intent=intent, priority=int(cfg.get("priority", 99)), patterns=patterns))

    rules.sort(key=lambda r: r.priority)
    return tuple(rules)


def _load_entity_rules(raw: Dict[str, Any]) -> Tuple[EntityRule, ...]:
    base_confidence = float(raw.get("base_confidence", 0.8))
    entities_cfg = raw.get("entities")
    if not isinstance(entities_cfg, dict) or not entities_cfg:
        raise PatternTableError(f"{ENTITIES_FILE} must define a non-empty 'entities' mapping")

    rules = []
    for name, rows in entities_cfg.items():
        try:
            entity_type = EntityType(name)
        except ValueError:
            raise PatternTableError(f"Unknown entity type in {ENTITIES_FILE}: {name}") from None
        for row in rows or []:
            # A row is either a bare pattern or {pattern, confidence}
            if isinstance(row, dict):
                pattern = row.get("pattern", "")
                confidence = float(row.get("confidence", base_confidence))
            else:
                pattern, confidence = str(row), base_confidence
            rules.append(EntityRule(
                entity_type=entity_type,
                pattern=_compile(pattern, f"{ENTITIES_FILE}:{name}"),
                confidence=confidence,
            ))
    return tuple(rules)


def _synonyms(value: Any) -> Dict[str, Tuple[str, ...]]:
    return {str(k): tuple(str(s) for s in (v or [])) for k, v in (value or {}).items()}


def _words(value: Any) -> Tuple[str, ...]:
    return tuple(str(v) for v in (value or []))


def _load_vocabularies(raw: Dict[str, Any]) -> Vocabularies:
    weekdays = _words(raw.get("weekdays"))
    months = _words(raw.get("months"))
    if len(weekdays) != 7 or len(months) != 12:
        raise PatternTableError(f"{VOCABULARIES_FILE} needs 7 weekdays and 12 months")

    return Vocabularies(
        services=_synonyms(raw.get("services")),
        time_windows=_synonyms(raw.get("time_windows")),
        noon=_words(raw.get("noon")),
        urgency_levels=_synonyms(raw.get("urgency_levels")),
        relative_days={str(k): int(v) for k, v in (raw.get("relative_days") or {}).items()},
        weekdays=weekdays,
        months=months,
        affirmative_tokens=_words(raw.get("affirmative_tokens")),
        negative_tokens=_words(raw.get("negative_tokens")),
        emergency_keywords=_words(raw.get("emergency_keywords")),
        human_request_keywords=_words(raw.get("human_request_keywords")),
        injection_patterns=tuple(
            _compile(p, VOCABULARIES_FILE) for p in _words(raw.get("injection_patterns"))
        ),
    )


def load_pattern_tables(store_dir: Optional[Union[str, Path]] = None) -> PatternTables:
    """
    Load and compile the pattern tables.

    Args:
        store_dir: Directory holding the YAML tables. Defaults to the
                   packaged store directory.

    Returns:
        PatternTables with compiled intent and entity rules

    Raises:
        PatternTableError: If a table is missing or malformed
    """
    if store_dir is None:
        from .config import NovaConfig
        store_dir = NovaConfig().STORE_DIR
    base = Path(store_dir)

    return PatternTables(
        intent_rules=_load_intent_rules(_read_yaml(base / INTENTS_FILE)),
        entity_rules=_load_entity_rules(_read_yaml(base / ENTITIES_FILE)),
        vocabularies=_load_vocabularies(_read_yaml(base / VOCABULARIES_FILE)),
    )
