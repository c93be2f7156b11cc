"""
Entity extraction stages.

- normalization.py: text normalizer and whole-word phrase helpers
- matcher.py: EntityExtractor (candidate spans from the entity table)
- entity_normalization.py: EntityNormalizer (canonical values)
- overlap.py: resolve_overlaps (non-overlapping survivors)
"""

from .entity_normalization import EntityNormalizer
from .matcher import EntityExtractor
from .normalization import contains_any, contains_phrase, count_phrases, normalize_text
from .overlap import resolve_overlaps

__all__ = [
    "EntityExtractor",
    "EntityNormalizer",
    "contains_any",
    "contains_phrase",
    "count_phrases",
    "normalize_text",
    "resolve_overlaps",
]
