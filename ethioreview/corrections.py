"""
Safe application of correction suggestions.

Suggestion positions are only meaningful against the exact text they were
computed from. The applier therefore:
- Applies spans from the end of the text towards the start
- Re-checks every span against its recorded original before replacing
- Skips (and reports) anything stale, out of range or overlapping

Nothing is ever forced into the text.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ethioreview.config import BatchConfig
from ethioreview.exceptions import StaleSnapshotError
from ethioreview.models import CorrectionSuggestion, OCRDocument, TextSnapshot
from ethioreview.script import ETHIOPIC_LETTER_RANGE, NOISE_CLASS, ZERO_WIDTH_PATTERN

logger = logging.getLogger(__name__)


# =============================================================================
# LOCAL CLEANING
# =============================================================================

_L = ETHIOPIC_LETTER_RANGE
_PUNCT = "።፤፡፣"

# (pattern, replacement); applied in order, each match counts as one change
CLEANING_STEPS: tuple[tuple[re.Pattern[str], str], ...] = (
    (ZERO_WIDTH_PATTERN, ""),
    (re.compile(f"(?<=[{_L}])[{NOISE_CLASS}]+(?=[{_L}])"), " "),
    (re.compile(f"(?<=[{_L}])[a-zA-Z]+(?=[{_L}])"), ""),
    (re.compile(f"[ \\t]+(?=[{_PUNCT}])"), ""),
    (re.compile(f"(?<=[{_PUNCT}])(?=[^\\s{_PUNCT}])"), " "),
    (re.compile(r" {2,}"), " "),
    (re.compile(r" +$", re.MULTILINE), ""),
)

# Letters, digits and combining marks; a whole-token match may not touch these
_WORD_CHAR = "\\w\u0300-\u036F\u135D-\u135F"


def clean_text_locally(text: str) -> tuple[str, int]:
    """
    Rule-based cleanup that needs no suggestion list.

    Removes zero-width characters, turns noise between Ethiopic letters
    into a space, drops Latin letters inside Ethiopic words, normalizes
    spacing around Ethiopic punctuation and collapses runs of spaces.

    Returns:
        (cleaned text, number of individual fixes)

    Example:
        >>> clean_text_locally("ሰላም#ዓለም  ነው።")
        ('ሰላም ዓለም ነው።', 2)
    """
    changes = 0
    for pattern, replacement in CLEANING_STEPS:
        text, count = pattern.subn(replacement, text)
        changes += count
    return text, changes


# =============================================================================
# RESULT TYPES
# =============================================================================


class SkipReason(Enum):
    LOW_CONFIDENCE = "confidence below threshold"
    OUT_OF_RANGE = "position outside text"
    STALE = "text at position no longer matches original"
    OVERLAP = "overlaps an applied correction"
    VERSION_MISMATCH = "computed against a different snapshot version"


@dataclass(frozen=True)
class SkippedCorrection:
    suggestion: CorrectionSuggestion
    reason: SkipReason


@dataclass
class ApplyResult:
    """Outcome of one `apply()` call."""

    text: str
    applied: list[CorrectionSuggestion] = field(default_factory=list)
    skipped: list[SkippedCorrection] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


# =============================================================================
# BULK CORRECTION APPLIER
# =============================================================================


class BulkCorrectionApplier:
    """
    Applies suggestion lists to texts without corrupting offsets.

    Example:
        >>> applier = BulkCorrectionApplier()
        >>> suggestions = CorrectionSuggester().suggest("ሰላም#ታ ዓለ2ም")
        >>> applier.apply("ሰላም#ታ ዓለ2ም", suggestions).text
        'ሰላምታ ዓለም'
    """

    def __init__(self, config: BatchConfig | None = None):
        self.config = config or BatchConfig()

    def apply(
        self,
        text: str,
        suggestions: Iterable[CorrectionSuggestion],
        min_confidence: float = 0.0,
    ) -> ApplyResult:
        """
        Apply suggestions in descending start order.

        Input order does not matter: the list is re-sorted by start
        (then end) descending, so replacing a later span never shifts the
        offsets of a span still pending.
        """
        result = ApplyResult(text=text)
        ordered = sorted(
            suggestions,
            key=lambda s: (s.position.start, s.position.end),
            reverse=True,
        )

        # Start of the lowest span applied so far
        floor: int | None = None
        for suggestion in ordered:
            start, end = suggestion.position.start, suggestion.position.end
            reason = None
            if suggestion.confidence < min_confidence:
                reason = SkipReason.LOW_CONFIDENCE
            elif end > len(result.text):
                reason = SkipReason.OUT_OF_RANGE
            elif floor is not None and end > floor:
                reason = SkipReason.OVERLAP
            elif result.text[start:end] != suggestion.original:
                reason = SkipReason.STALE

            if reason is not None:
                result.skipped.append(SkippedCorrection(suggestion, reason))
                continue

            result.text = result.text[:start] + suggestion.corrected + result.text[end:]
            result.applied.append(suggestion)
            floor = start

        if result.skipped:
            logger.debug(
                "Applied %d corrections, skipped %d", len(result.applied), len(result.skipped)
            )
        return result

    def fix_all_similar(self, text: str, original: str, corrected: str) -> tuple[str, int]:
        """
        Replace every whole-token occurrence of `original`, ignoring positions.

        Longer words that merely contain `original` are left alone, so
        "ሥላሴ" does not rewrite the inflected "ሥላሴዎች".
        """
        if not original:
            raise ValueError("original must be a non-empty string")
        pattern = re.compile(f"(?<![{_WORD_CHAR}]){re.escape(original)}(?![{_WORD_CHAR}])")
        return pattern.subn(lambda _: corrected, text)

    @staticmethod
    def require_version(snapshot: TextSnapshot, version: int | None) -> None:
        """Raise StaleSnapshotError unless `version` matches the snapshot."""
        if version != snapshot.version:
            raise StaleSnapshotError(expected=version, actual=snapshot.version)

    def apply_to_snapshot(
        self,
        snapshot: TextSnapshot,
        suggestions: Iterable[CorrectionSuggestion],
        min_confidence: float = 0.0,
    ) -> tuple[TextSnapshot, ApplyResult]:
        """
        Apply suggestions computed against `snapshot`.

        Suggestions stamped with another version are skipped. If anything
        changed, the returned snapshot is the next version.
        """
        current: list[CorrectionSuggestion] = []
        mismatched: list[SkippedCorrection] = []
        for suggestion in suggestions:
            if suggestion.snapshot_version != snapshot.version:
                mismatched.append(SkippedCorrection(suggestion, SkipReason.VERSION_MISMATCH))
            else:
                current.append(suggestion)

        result = self.apply(snapshot.text, current, min_confidence=min_confidence)
        result.skipped = mismatched + result.skipped

        if result.text == snapshot.text:
            return snapshot, result
        return snapshot.revise(result.text), result

    def apply_bulk_corrections(
        self,
        documents: Iterable[OCRDocument],
        suggestions: Iterable[CorrectionSuggestion],
        min_confidence: float | None = None,
        clean: bool = True,
    ) -> dict[str, str]:
        """
        Apply high-confidence suggestions to many documents.

        Args:
            documents: Documents whose text the suggestions were computed on.
            suggestions: Suggestions for any of the documents.
            min_confidence: Threshold; defaults to `auto_apply_confidence`.
            clean: Run `clean_text_locally` after applying.

        Returns:
            Mapping of document_id to corrected text.
        """
        if min_confidence is None:
            min_confidence = self.config.auto_apply_confidence

        by_document: dict[str, list[CorrectionSuggestion]] = defaultdict(list)
        for suggestion in suggestions:
            by_document[suggestion.document_id].append(suggestion)

        corrected: dict[str, str] = {}
        for document in documents:
            result = self.apply(
                document.text, by_document.get(document.document_id, []), min_confidence
            )
            text = result.text
            if clean:
                text, changes = clean_text_locally(text)
            else:
                changes = 0
            corrected[document.document_id] = text
            logger.debug(
                "Document %r: %d corrections applied, %d local fixes",
                document.document_id,
                len(result.applied),
                changes,
            )
        return corrected
