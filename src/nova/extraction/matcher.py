"""
Entity extraction.

Scans normalized text with the entity table and returns every match as a
candidate EntityMatch. Candidates may overlap, within a type and across
types; the overlap resolver picks the survivors.
"""
import logging
from typing import List, Sequence

from ..config.tables import EntityRule
from ..data_types import EntityMatch

logger = logging.getLogger(__name__)


class EntityExtractor:
    """
    Runs the (entity type, pattern) rows, in table order, over one message.

    The extractor is stateless once built and can be shared across sessions.
    """

    def __init__(self, rules: Sequence[EntityRule]):
        self.rules = tuple(rules)

    def extract(self, normalized: str) -> List[EntityMatch]:
        """
        Find candidate entities in already-normalized text.

        Candidates carry their matched text as both value and normalized
        value; the entity normalizer fills in canonical forms afterwards.
        """
        candidates: List[EntityMatch] = []
        for rule in self.rules:
            for match in rule.pattern.finditer(normalized):
                if match.start() == match.end():
                    continue
                candidates.append(EntityMatch(
                    type=rule.entity_type,
                    value=match.group(0),
                    normalized=match.group(0),
                    confidence=rule.confidence,
                    start=match.start(),
                    end=match.end(),
                ))

        logger.debug(
            "Entity candidates extracted",
            extra={"candidates_count": len(candidates)}
        )
        return candidates
