"""
NLU pipeline.

Composes the stages into one stateless service:

    raw text + context
      -> normalize_text
      -> EntityExtractor      (candidate spans)
      -> EntityNormalizer     (canonical values)
      -> resolve_overlaps     (non-overlapping survivors)
      -> IntentClassifier     (pattern scores + entity boosts)
      -> ContextAdjuster      (previous-turn heuristics)
      -> map_slots
      -> NLUResult

The pipeline is built once at process start and shared. It holds no
per-session state, performs no I/O per call and never raises on user text.
"""
import logging
from typing import Optional

from ..calendar.business_hours import resolve_business_hours
from ..calendar.clock import Clock, system_clock, tenant_now
from ..classification.context import ContextAdjuster
from ..classification.intent_classifier import IntentClassifier
from ..config.config import NovaConfig
from ..config.tables import PatternTables, load_pattern_tables
from ..data_types import ConversationContext, Intent, NLUResult, TenantInfo
from ..extraction.entity_normalization import EntityNormalizer
from ..extraction.matcher import EntityExtractor
from ..extraction.normalization import normalize_text
from ..extraction.overlap import resolve_overlaps
from ..logging_config import log_function_call
from ..resolution.slot_mapper import map_slots

logger = logging.getLogger(__name__)

HEALTH_CHECK_MESSAGE = "Bonjour, je voudrais prendre rendez-vous demain matin"


class NLUPipeline:
    """
    French dental-appointment NLU.

    Example:
        >>> pipeline = NLUPipeline()
        >>> result = pipeline.analyze("Je voudrais un rendez-vous demain matin")
        >>> result.intent, result.slots["timeWindow"]
        (<Intent.BOOK_APPOINTMENT: 'book_appointment'>, 'morning')
    """

    def __init__(
        self,
        tables: Optional[PatternTables] = None,
        config: Optional[NovaConfig] = None,
        clock: Clock = system_clock
    ):
        """
        Args:
            tables: Compiled pattern tables. Loaded from config.STORE_DIR
                    when omitted.
            config: Configuration (defaults from environment)
            clock: Source of the current time, used for relative dates
        """
        self.config = config or NovaConfig()
        self.tables = tables or load_pattern_tables(self.config.STORE_DIR)
        self.clock = clock

        self.extractor = EntityExtractor(self.tables.entity_rules)
        self.entity_normalizer = EntityNormalizer(self.tables.vocabularies)
        self.classifier = IntentClassifier(self.tables)
        self.adjuster = ContextAdjuster(self.tables.vocabularies)

    @property
    def vocabularies(self):
        return self.tables.vocabularies

    def _tenant(self, context: Optional[ConversationContext]) -> TenantInfo:
        if context is not None and context.tenant is not None:
            return context.tenant
        return TenantInfo(id="", timezone=self.config.DEFAULT_TIMEZONE)

    @log_function_call(level='DEBUG')
    def analyze(self, message: str, context: Optional[ConversationContext] = None) -> NLUResult:
        """
        Analyze one message.

        Args:
            message: Raw user text (length bounded by the caller)
            context: Session context; supplies the tenant timezone and
                     business hours, the previous intent and the ids
                     injected into slots

        Returns:
            A fresh NLUResult
        """
        normalized = normalize_text(message)
        tenant = self._tenant(context)
        now = tenant_now(self.clock, tenant.timezone or self.config.DEFAULT_TIMEZONE,
                         self.config.DEFAULT_TIMEZONE)
        hours = resolve_business_hours(tenant, self.config.DEFAULT_OPEN, self.config.DEFAULT_CLOSE)

        candidates = self.extractor.extract(normalized)
        candidates = self.entity_normalizer.normalize_all(candidates, now, hours)
        entities = resolve_overlaps(candidates)

        score = self.classifier.classify(normalized, entities)
        previous_intent = context.conversation.current_intent if context is not None else None
        score = self.adjuster.adjust(score, normalized, previous_intent)

        return NLUResult(
            intent=score.intent,
            confidence=score.confidence,
            slots=map_slots(entities, context),
            entities=tuple(entities),
            raw_text=message,
        )

    def health_check(self) -> bool:
        """True when a reference booking request is understood."""
        try:
            result = self.analyze(HEALTH_CHECK_MESSAGE)
        except Exception:
            logger.exception("NLU health check failed")
            return False
        healthy = result.intent == Intent.BOOK_APPOINTMENT and result.confidence > 0.5
        logger.debug("NLU health check", extra={"healthy": healthy, "confidence": result.confidence})
        return healthy
