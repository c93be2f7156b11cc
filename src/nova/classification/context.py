"""
Context-aware confidence adjustment.

Re-scores the classifier output using the intent of the previous turn and
the emergency vocabulary. Runs after classification, before slot mapping.
"""
import logging
from typing import Optional

from ..config.tables import Vocabularies
from ..data_types import Intent
from ..extraction.normalization import contains_any, count_phrases
from .intent_classifier import IntentScore

logger = logging.getLogger(__name__)

FOLLOW_UP_BOOST = 0.2
FOLLOW_UP_CAP = 0.95
CONFIRMATION_CONFIDENCE = 0.9
EMERGENCY_BASE = 0.7
EMERGENCY_PER_KEYWORD = 0.1
MAX_CONFIDENCE = 0.98


class ContextAdjuster:
    """
    Applies the previous-turn heuristics:

    - check_availability followed by book_appointment: +0.2 (capped at 0.95)
    - book_appointment followed by an affirmative answer: forced to
      book_appointment at 0.9
    - emergency: 0.7 + 0.1 per distinct emergency keyword (capped at 0.98)

    A previous intent that is not a known Intent skips the first two rules.
    """

    def __init__(self, vocabularies: Vocabularies):
        self.affirmative_tokens = vocabularies.affirmative_tokens
        self.emergency_keywords = vocabularies.emergency_keywords

    def adjust(self, score: IntentScore, normalized: str, previous_intent: Optional[str] = None) -> IntentScore:
        intent, confidence = score.intent, score.confidence

        previous = Intent.parse(previous_intent) if previous_intent else None
        if previous_intent and previous is None:
            logger.debug("Unknown previous intent, context rules skipped",
                         extra={"previous_intent": str(previous_intent)})

        if previous == Intent.CHECK_AVAILABILITY and intent == Intent.BOOK_APPOINTMENT:
            confidence = min(FOLLOW_UP_CAP, confidence + FOLLOW_UP_BOOST)

        if previous == Intent.BOOK_APPOINTMENT and contains_any(normalized, self.affirmative_tokens):
            intent, confidence = Intent.BOOK_APPOINTMENT, CONFIRMATION_CONFIDENCE

        if intent == Intent.EMERGENCY:
            hits = count_phrases(normalized, self.emergency_keywords)
            confidence = min(MAX_CONFIDENCE, EMERGENCY_BASE + EMERGENCY_PER_KEYWORD * hits)

        confidence = round(max(0.0, min(MAX_CONFIDENCE, confidence)), 2)
        return IntentScore(intent, confidence)
