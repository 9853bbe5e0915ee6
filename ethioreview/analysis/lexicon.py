"""
Domain vocabulary used to recognise expected content.

The scanned corpus is dominated by Ethiopian Orthodox religious texts, so
the built-in lexicon covers that register. Absence of any known term is a
hint (not proof) that the OCR engine ran with the wrong language setup.
"""

from __future__ import annotations

import re
import unicodedata

from ethioreview.script import contains_ethiopic, ethiopic_ratio

# =============================================================================
# CONSTANTS
# =============================================================================

# Minimum share of Ethiopic characters for a token to count as an Amharic word
MIN_ETHIOPIC_RATIO = 0.7

RELIGIOUS_TERMS = frozenset(
    {
        "ጸሎት",
        "ቤተክርስቲያን",
        "እግዚአብሔር",
        "የሱስ",
        "ክርስቶስ",
        "ማርያም",
        "መድኃኔዓለም",
        "ቫቲካን",
        "ምዕራፍ",
        "ክፍል",
        "በዓል",
        "ጾም",
        "ንዋሓ",
        "ድንግል",
        "እናት",
        "ቅዱስ",
        "ቅድስት",
    }
)

# Multi-word phrases that may be split or spaced differently by OCR
RELIGIOUS_PATTERNS = (
    re.compile(r"ቤተ.{0,5}ክርስቲያን"),  # church
    re.compile(r"እግዚአብሔር"),  # God
    re.compile(r"የሱስ.{0,5}ክርስቶስ"),  # Jesus Christ
    re.compile(r"ድንግል.{0,5}ማርያም"),  # Virgin Mary
    re.compile(r"መድኃኔ.{0,5}ዓለም"),  # Saviour of the world
)

# Common Amharic affixes, used when matching inflected vocabulary
PREFIXES = ("በ", "ከ", "ለ", "ወ", "የ", "ስ", "ህ", "ም", "እ")
SUFFIXES = ("ት", "ን", "ላ", "ወች", "ኝ", "ህ", "ሽ", "አል", "ዋል")


# =============================================================================
# LEXICON
# =============================================================================


class DomainLexicon:
    """
    Known domain vocabulary with affix-tolerant lookup.

    Attributes:
        terms: Built-in terms plus any additional vocabulary.

    Example:
        >>> lexicon = DomainLexicon()
        >>> lexicon.detect("የእግዚአብሔር ቃል")
        True
        >>> lexicon.detect("hello world")
        False
    """

    def __init__(self, additional_vocab: set[str] | None = None):
        self.terms = RELIGIOUS_TERMS
        if additional_vocab:
            self.terms = self.terms | {self._normalize(t) for t in additional_vocab}

    @staticmethod
    def _normalize(word: str) -> str:
        return unicodedata.normalize("NFC", word.strip())

    def is_known(self, word: str) -> bool:
        """Check a single token, stripping one common prefix and/or suffix."""
        word = self._normalize(word)
        if word in self.terms:
            return True
        stems = {word}
        for prefix in PREFIXES:
            if word.startswith(prefix) and len(word) > len(prefix):
                stems.add(word[len(prefix) :])
        for stem in list(stems):
            for suffix in SUFFIXES:
                if stem.endswith(suffix) and len(stem) > len(suffix):
                    stems.add(stem[: -len(suffix)])
        return not stems.isdisjoint(self.terms)

    def detect(self, text: str) -> bool:
        """Return True if any domain term or phrase occurs in the text."""
        if any(term in text for term in self.terms):
            return True
        return any(pattern.search(text) for pattern in RELIGIOUS_PATTERNS)

    def __len__(self) -> int:
        return len(self.terms)


def is_ethiopic_word(word: str) -> bool:
    """
    Check whether a token is predominantly Ethiopic.

    Example:
        >>> is_ethiopic_word("ሰላም")
        True
        >>> is_ethiopic_word("ሰA57")
        False
    """
    clean = word.strip()
    if not contains_ethiopic(clean):
        return False
    return ethiopic_ratio(clean) >= MIN_ETHIOPIC_RATIO
