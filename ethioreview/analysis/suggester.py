"""
Correction suggestions for corrupted Ethiopic text.

Each rule category scans the text independently and proposes
original -> corrected spans. Rules do NOT deduplicate or merge
overlapping spans; BulkCorrectionApplier is responsible for applying
them safely.

The confidences are fixed per rule. They rank suggestions against each
other and gate bulk application; they are not calibrated probabilities.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from ethioreview.models import (
    CorrectionSuggestion,
    IssueKind,
    Position,
    TextSnapshot,
    WordValidation,
)
from ethioreview.script import (
    DIGIT_PATTERN,
    ETHIOPIC_LETTER_RANGE,
    ETHIOPIC_RANGE,
    NOISE_CLASS,
    NOISE_PATTERN,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

NOISE_CONFIDENCE = 0.8
DIGIT_CONFIDENCE = 0.75
UPPERCASE_CONFIDENCE = 0.8
VARIANT_CONFIDENCE = 0.6

_L = ETHIOPIC_LETTER_RANGE

NOISE_SPAN_PATTERN = re.compile(f"(?P<left>[{_L}]*)[{NOISE_CLASS}]+(?P<right>[{_L}]*)")
DIGIT_SPAN_PATTERN = re.compile(f"(?P<left>[{_L}]+)[0-9]+(?P<right>[{_L}]*)")
UPPERCASE_SPAN_PATTERN = re.compile(f"(?P<left>[{_L}]+)[A-Z]+(?P<right>[{_L}]*)")
ETHIOPIC_RUN_PATTERN = re.compile(f"[{ETHIOPIC_RANGE}]+")

# Orthographic variants OCR engines pick for the more common letter
CHARACTER_VARIANTS = (
    ("ሥ", "ስ"),
    ("ኅ", "ህ"),
    ("ፀ", "ጸ"),
)
VARIANT_REASON = "Common character variant"


def _strip_middle(match: re.Match[str]) -> str:
    return match.group("left") + match.group("right")


@dataclass(frozen=True)
class SuggestionRule:
    """A span rule: every match becomes one suggestion."""

    name: str
    pattern: re.Pattern[str]
    confidence: float
    reason: str
    rewrite: Callable[[re.Match[str]], str] = _strip_middle


SPAN_RULES: tuple[SuggestionRule, ...] = (
    SuggestionRule(
        "noise_characters",
        NOISE_SPAN_PATTERN,
        NOISE_CONFIDENCE,
        "Remove ASCII noise characters",
    ),
    SuggestionRule(
        "embedded_digits",
        DIGIT_SPAN_PATTERN,
        DIGIT_CONFIDENCE,
        "Remove embedded numbers",
    ),
    SuggestionRule(
        "embedded_uppercase",
        UPPERCASE_SPAN_PATTERN,
        UPPERCASE_CONFIDENCE,
        "Remove embedded uppercase letters",
    ),
)


# =============================================================================
# CORRECTION SUGGESTER
# =============================================================================


class CorrectionSuggester:
    """
    Proposes corrections for OCR noise in Ethiopic text.

    Example:
        >>> suggester = CorrectionSuggester()
        >>> [(s.original, s.corrected) for s in suggester.suggest("ሥ:ጋ")]
        [('ሥ:ጋ', 'ሥጋ'), ('ሥ:ጋ', 'ስ:ጋ')]
    """

    def __init__(
        self,
        span_rules: tuple[SuggestionRule, ...] = SPAN_RULES,
        variants: tuple[tuple[str, str], ...] = CHARACTER_VARIANTS,
    ):
        self.span_rules = span_rules
        self.variants = variants

    def suggest(
        self,
        text: str,
        document_id: str = "",
        file_name: str = "",
        snapshot_version: int | None = None,
    ) -> list[CorrectionSuggestion]:
        """
        Scan a text with every rule.

        Args:
            text: Text to scan; positions refer to this exact string.
            document_id: Owning document, copied into each suggestion.
            file_name: Display name, copied into each suggestion.
            snapshot_version: Version of the snapshot `text` came from.

        Returns:
            Suggestions grouped by rule, in match order within a rule.
        """
        if text is None:
            raise ValueError("Input text cannot be None")

        suggestions: list[CorrectionSuggestion] = []

        for rule in self.span_rules:
            for match in rule.pattern.finditer(text):
                original = match.group(0)
                corrected = rule.rewrite(match)
                # A noise run with no Ethiopic on either side is not ours to fix
                if not corrected or corrected == original:
                    continue
                suggestions.append(
                    CorrectionSuggestion(
                        document_id=document_id,
                        file_name=file_name,
                        original=original,
                        corrected=corrected,
                        confidence=rule.confidence,
                        reason=rule.reason,
                        position=Position(match.start(), match.end()),
                        snapshot_version=snapshot_version,
                    )
                )

        for variant, replacement in self.variants:
            if variant in text:
                suggestions.append(
                    CorrectionSuggestion(
                        document_id=document_id,
                        file_name=file_name,
                        original=text,
                        corrected=text.replace(variant, replacement),
                        confidence=VARIANT_CONFIDENCE,
                        reason=VARIANT_REASON,
                        position=Position(0, len(text)),
                        snapshot_version=snapshot_version,
                    )
                )

        logger.debug("Generated %d suggestions for document %r", len(suggestions), document_id)
        return suggestions

    def suggest_snapshot(
        self,
        snapshot: TextSnapshot,
        document_id: str = "",
        file_name: str = "",
    ) -> list[CorrectionSuggestion]:
        """Like `suggest`, stamping every suggestion with the snapshot version."""
        return self.suggest(
            snapshot.text,
            document_id=document_id,
            file_name=file_name,
            snapshot_version=snapshot.version,
        )


def suggest_for_word(word: str, validation: WordValidation) -> list[str]:
    """
    Cleaned alternatives for one problematic word.

    Example:
        >>> from ethioreview.analysis.validator import WordValidator
        >>> word = "ያ2ድሃ"
        >>> suggest_for_word(word, WordValidator().validate(word))
        ['ያድሃ']
    """
    alternatives: list[str] = []

    if IssueKind.MIXED_SCRIPT in validation.issues:
        run = ETHIOPIC_RUN_PATTERN.search(word)
        if run and run.group() != word:
            alternatives.append(run.group())

    if IssueKind.NOISE_CHARACTERS in validation.issues:
        cleaned = NOISE_PATTERN.sub("", word)
        if cleaned and cleaned != word:
            alternatives.append(cleaned)

    if IssueKind.EMBEDDED_DIGITS in validation.issues:
        cleaned = DIGIT_PATTERN.sub("", word)
        if cleaned and cleaned != word:
            alternatives.append(cleaned)

    return alternatives
