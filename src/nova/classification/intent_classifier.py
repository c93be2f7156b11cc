"""
Rule-based intent classification.

Every intent owns an ordered list of patterns (intents.yaml). An intent
with at least one matching pattern scores a base confidence, then
entity-driven boosts apply. The highest score wins; equal scores are
broken by the priority declared in the table. No match at all yields
fallback with confidence 0.0.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Set

from ..config.tables import IntentRule, PatternTables
from ..data_types import EntityMatch, EntityType, Intent

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.6
MAX_CLASSIFIER_CONFIDENCE = 0.95
EMERGENCY_FLOOR = 0.7
EMERGENCY_BOOST = 0.3

SCHEDULING_BOOSTS = {
    EntityType.DATE: 0.2,
    EntityType.SERVICE_TYPE: 0.15,
    EntityType.TIME: 0.1,
}
CONTACT_BOOST = 0.2

SCHEDULING_INTENTS = {Intent.BOOK_APPOINTMENT, Intent.CHECK_AVAILABILITY}
CONTACT_INTENTS = {Intent.RESCHEDULE_APPOINTMENT, Intent.CANCEL_APPOINTMENT}


@dataclass(frozen=True)
class IntentScore:
    intent: Intent
    confidence: float


def _boosted(intent: Intent, present: Set[EntityType]) -> float:
    confidence = BASE_CONFIDENCE

    if intent in SCHEDULING_INTENTS:
        confidence += sum(boost for etype, boost in SCHEDULING_BOOSTS.items() if etype in present)
    elif intent in CONTACT_INTENTS:
        if EntityType.EMAIL in present or EntityType.PHONE in present:
            confidence += CONTACT_BOOST
    elif intent == Intent.EMERGENCY:
        confidence = max(EMERGENCY_FLOOR, confidence + EMERGENCY_BOOST)

    return round(min(MAX_CLASSIFIER_CONFIDENCE, confidence), 2)


class IntentClassifier:
    """
    Scores the intent table against one normalized message.

    Example:
        >>> classifier = IntentClassifier(load_pattern_tables())
        >>> classifier.classify("qui sont vos dentistes", []).intent
        <Intent.LIST_PRACTITIONERS: 'list_practitioners'>
    """

    def __init__(self, tables: PatternTables):
        self.rules: List[IntentRule] = list(tables.intent_rules)

    def score_all(self, normalized: str, entities: Iterable[EntityMatch]) -> Dict[Intent, float]:
        """Post-boost confidence of every intent with a matching pattern."""
        present = {e.type for e in entities}
        scores: Dict[Intent, float] = {}
        for rule in self.rules:
            if any(p.search(normalized) for p in rule.patterns):
                scores[rule.intent] = _boosted(rule.intent, present)
        return scores

    def classify(self, normalized: str, entities: Iterable[EntityMatch]) -> IntentScore:
        scores = self.score_all(normalized, entities)
        if not scores:
            logger.debug("No intent pattern matched")
            return IntentScore(Intent.FALLBACK, 0.0)

        # Rules are sorted by priority, and max() keeps the first maximum
        best = max(
            (rule.intent for rule in self.rules if rule.intent in scores),
            key=lambda intent: scores[intent],
        )
        logger.debug("Intent scored", extra={"intent": best.value, "scores": {
            i.value: s for i, s in scores.items()
        }})
        return IntentScore(best, scores[best])
