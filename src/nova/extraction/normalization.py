"""
Text normalization for pattern matching.

Pattern tables are written against normalized text: lowercase, French
accents stripped, apostrophes and sentence punctuation replaced by spaces,
single spaces. Hyphens, colons and slashes are kept ("apres-demain",
"14:30", "15/12/2026"), and so are dots between two alphanumerics so that
email addresses and dotted dates survive.
"""
import re
import unicodedata
from typing import Iterable

_ACCENTS = str.maketrans({
    "à": "a", "á": "a", "â": "a", "ä": "a", "ã": "a", "å": "a", "æ": "a",
    "è": "e", "é": "e", "ê": "e", "ë": "e",
    "ì": "i", "í": "i", "î": "i", "ï": "i",
    "ò": "o", "ó": "o", "ô": "o", "ö": "o", "õ": "o", "œ": "o",
    "ù": "u", "ú": "u", "û": "u", "ü": "u",
    "ý": "y", "ÿ": "y",
    "ç": "c", "ñ": "n",
})

_PUNCTUATION = re.compile(r"[,;!?'\"‘’“”«»`]")

# A dot survives only between two alphanumerics (marie@test.com, 15.12.2026)
_LOOSE_DOT = re.compile(r"(?<![^\W_])\.|\.(?![^\W_])")

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Canonicalize raw input for pattern matching.

    Deterministic and idempotent: normalize_text(normalize_text(x)) equals
    normalize_text(x).

    Example:
        >>> normalize_text("Bonjour, je voudrais un RDV après-demain !")
        'bonjour je voudrais un rdv apres-demain'
    """
    # 1. Compose combining accents so the table below sees single code points
    text = unicodedata.normalize("NFC", text)

    # 2. Lowercase, strip accents
    text = text.lower().translate(_ACCENTS)

    # 3. Punctuation and quotes become spaces (j'ai -> j ai)
    text = _PUNCTUATION.sub(" ", text)
    text = _LOOSE_DOT.sub(" ", text)

    # 4. Collapse whitespace and trim
    return _WHITESPACE.sub(" ", text).strip()


def phrase_pattern(phrase: str) -> "re.Pattern[str]":
    """
    Whole-word pattern for a vocabulary phrase, compared in normalized form.

    Hyphens count as part of a word, so "moi" is not found in "aidez-moi".
    """
    return re.compile(rf"(?<![\w-]){re.escape(normalize_text(phrase))}(?![\w-])")


def contains_phrase(normalized: str, phrase: str) -> bool:
    """True when phrase occurs as whole words in already-normalized text."""
    if not phrase:
        return False
    return phrase_pattern(phrase).search(normalized) is not None


def count_phrases(normalized: str, phrases: Iterable[str]) -> int:
    """Number of distinct phrases present in already-normalized text."""
    seen = {normalize_text(p) for p in phrases if p}
    return sum(1 for p in seen if contains_phrase(normalized, p))


def contains_any(normalized: str, phrases: Iterable[str]) -> bool:
    return any(contains_phrase(normalized, p) for p in phrases)
