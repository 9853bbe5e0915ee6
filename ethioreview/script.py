"""
Ethiopic script helpers shared by the analysis and diff layers.

Character classes are exposed both as raw class bodies (for building
larger patterns) and as compiled regexes.
"""

from __future__ import annotations

import re
import unicodedata

from ethioreview.models import ScriptClass, Token

# =============================================================================
# CHARACTER CLASSES
# =============================================================================

# Ethiopic, Ethiopic Supplement, Ethiopic Extended
ETHIOPIC_RANGE = "\u1200-\u137F\u1380-\u139F\u2D80-\u2DDF"

# Letters and combining marks only (no Ethiopic punctuation or numerals)
ETHIOPIC_LETTER_RANGE = "\u1200-\u135A\u135D-\u135F\u1380-\u138F\u2D80-\u2DDE"

# ASCII characters OCR engines emit as noise inside Ethiopic text
NOISE_CHARS = "#;:/\\|`~^*_=+"
NOISE_CLASS = re.escape(NOISE_CHARS)

ZERO_WIDTH_RANGE = "\u200B-\u200D\uFEFF"

ETHIOPIC_PUNCTUATION = "።፤፡፣፦፧፨"

ETHIOPIC_PATTERN = re.compile(f"[{ETHIOPIC_RANGE}]")
LATIN_PATTERN = re.compile(r"[a-zA-Z]")
DIGIT_PATTERN = re.compile(r"[0-9]")
NOISE_PATTERN = re.compile(f"[{NOISE_CLASS}]")
ZERO_WIDTH_PATTERN = re.compile(f"[{ZERO_WIDTH_RANGE}]")
NON_SPACE_PATTERN = re.compile(r"\S+")


# =============================================================================
# PREDICATES
# =============================================================================


def contains_ethiopic(text: str) -> bool:
    return ETHIOPIC_PATTERN.search(text) is not None


def count_ethiopic(text: str) -> int:
    return len(ETHIOPIC_PATTERN.findall(text))


def ethiopic_ratio(text: str) -> float:
    """Share of characters in `text` that are Ethiopic (0.0 for empty text)."""
    if not text:
        return 0.0
    return count_ethiopic(text) / len(text)


def classify_script(text: str) -> ScriptClass:
    """
    Classify the script composition of a token.

    Punctuation does not make a token mixed: "ሰላም።" is Ethiopic and
    "hello," is Latin. Ethiopic, Latin-or-other letters and digits
    together make it MIXED.
    """
    if text and text.isspace():
        return ScriptClass.WHITESPACE

    scripts: set[ScriptClass] = set()
    for ch in text:
        if ETHIOPIC_PATTERN.match(ch):
            scripts.add(ScriptClass.ETHIOPIC)
        elif ch.isdigit():
            scripts.add(ScriptClass.DIGIT)
        elif ch.isalpha():
            scripts.add(ScriptClass.LATIN)

    if not scripts:
        return ScriptClass.PUNCTUATION
    if len(scripts) == 1:
        return scripts.pop()
    return ScriptClass.MIXED


def normalize_text(text: str) -> str:
    """Unify line endings, drop zero-width characters and apply NFC."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = ZERO_WIDTH_PATTERN.sub("", text)
    return unicodedata.normalize("NFC", text)


# =============================================================================
# TOKENIZATION
# =============================================================================


def split_words(text: str) -> list[Token]:
    """
    Split text on whitespace, keeping character offsets.

    Example:
        >>> [t.text for t in split_words("ሰላም  ዓለም")]
        ['ሰላም', 'ዓለም']
        >>> split_words("ሰላም  ዓለም")[1].start
        5
    """
    return [
        Token(text=m.group(), start=m.start(), end=m.end(), script=classify_script(m.group()))
        for m in NON_SPACE_PATTERN.finditer(text)
    ]
