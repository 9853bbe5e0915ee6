"""
Whole-text corruption detection.

The detector combines two signals:
- The share of problematic words (from WordValidator)
- Document-wide pattern checks that each add a fixed increment

The resulting score is bucketed into low/medium/high WITHOUT clamping
first, so a text that triggers several pattern checks is always "high".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ethioreview.analysis.validator import WordValidator
from ethioreview.config import DetectionConfig, ValidationConfig
from ethioreview.models import CorruptionAssessment, CorruptionLevel
from ethioreview.script import ETHIOPIC_RANGE, NOISE_CLASS

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

NOISE_RUN_PATTERN = re.compile(f"[{NOISE_CLASS}]{{2,}}")
UPPERCASE_DIGIT_PATTERN = re.compile(r"[A-Z0-9]{2,}|[0-9]{3,}")
MIXED_SCRIPT_PATTERN = re.compile(f"[{ETHIOPIC_RANGE}]+[a-zA-Z]+")

LEVEL_SUGGESTIONS = {
    CorruptionLevel.HIGH: [
        "Consider re-scanning the document with higher quality settings",
        "Try using a different OCR engine",
    ],
    CorruptionLevel.MEDIUM: ["Manual review and correction recommended"],
    CorruptionLevel.LOW: [],
}


@dataclass(frozen=True)
class PatternCheck:
    """A whole-text check; `increment` names a DetectionConfig attribute."""

    name: str
    pattern: re.Pattern[str]
    increment: str
    issue: str
    suggestion: str


PATTERN_CHECKS: tuple[PatternCheck, ...] = (
    PatternCheck(
        "noise_run",
        NOISE_RUN_PATTERN,
        "noise_run_increment",
        "Multiple ASCII noise characters detected",
        "Remove noise characters (#, ;, :, /, \\, |, etc.)",
    ),
    PatternCheck(
        "uppercase_digit_run",
        UPPERCASE_DIGIT_PATTERN,
        "uppercase_digit_increment",
        "Suspicious uppercase letters or number sequences",
        "Verify if letter/number sequences belong in text",
    ),
    PatternCheck(
        "mixed_script",
        MIXED_SCRIPT_PATTERN,
        "mixed_script_increment",
        "Mixed scripts within words",
        "Separate Amharic and Latin text properly",
    ),
)


# =============================================================================
# CORRUPTION DETECTOR
# =============================================================================


class CorruptionDetector:
    """
    Produces a corruption verdict for a whole text.

    Attributes:
        validator: WordValidator used for per-word scores.
        config: DetectionConfig with thresholds and increments.

    Example:
        >>> detector = CorruptionDetector()
        >>> result = detector.detect("ያመድኃኔቋም A957 #ታፖ")
        >>> result.corruption_level.value
        'medium'
        >>> detector.detect("").is_corrupted
        False
    """

    def __init__(
        self,
        config: DetectionConfig | None = None,
        validator: WordValidator | None = None,
        validation_config: ValidationConfig | None = None,
    ):
        self.config = config or DetectionConfig()
        self.validator = validator or WordValidator(validation_config)

    def level_for(self, score: float) -> CorruptionLevel:
        """Bucket an (unclamped) corruption score."""
        if score < self.config.medium_threshold:
            return CorruptionLevel.LOW
        if score < self.config.high_threshold:
            return CorruptionLevel.MEDIUM
        return CorruptionLevel.HIGH

    def detect(self, text: str) -> CorruptionAssessment:
        """
        Assess corruption in a text.

        Args:
            text: Raw OCR text.

        Returns:
            CorruptionAssessment. Blank text yields a neutral low result.
        """
        if text is None:
            raise ValueError("Input text cannot be None")

        if not text.strip():
            return CorruptionAssessment(
                corruption_score=0.0,
                corruption_level=CorruptionLevel.LOW,
                is_corrupted=False,
            )

        issues: list[str] = []
        suggestions: list[str] = []

        validations = [v for _, v in self.validator.validate_text(text)]
        problematic = 0
        for validation in validations:
            if validation.is_problematic:
                problematic += 1
                if validation.issues:
                    issues.append(f'"{validation.word}": {", ".join(validation.issue_labels)}')

        total = len(validations)
        score = problematic / total if total else 0.0
        confidence = sum(v.confidence for v in validations) / total if total else 0.0

        for check in PATTERN_CHECKS:
            if check.pattern.search(text):
                score += getattr(self.config, check.increment)
                issues.append(check.issue)
                suggestions.append(check.suggestion)
                logger.debug("Pattern check %s triggered", check.name)

        level = self.level_for(score)
        suggestions.extend(LEVEL_SUGGESTIONS[level])

        return CorruptionAssessment(
            corruption_score=score,
            corruption_level=level,
            is_corrupted=score > self.config.medium_threshold,
            issues=issues,
            suggestions=suggestions,
            confidence=confidence,
            total_words=total,
            problematic_words=problematic,
            word_validations=validations,
        )

    def is_corrupted(self, text: str) -> bool:
        """Shortcut for `detect(text).is_corrupted`."""
        return self.detect(text).is_corrupted
