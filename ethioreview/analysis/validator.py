"""
Word-level validation for Ethiopic OCR output.

Each word is scored by an ordered list of rules. Every rule that fires
subtracts its penalty from a starting confidence of 1.0 and records its
issue; penalties add up, they do not multiply. New heuristics are added
as data (a Rule), not as code paths.

Words without any Ethiopic character are outside the target script and
are accepted at a fixed confidence without further analysis.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ethioreview.config import ValidationConfig
from ethioreview.models import IssueKind, Token, WordValidation
from ethioreview.script import (
    DIGIT_PATTERN,
    LATIN_PATTERN,
    NOISE_PATTERN,
    contains_ethiopic,
    count_ethiopic,
    split_words,
)

logger = logging.getLogger(__name__)


# =============================================================================
# RULES
# =============================================================================

# Same character 5+ times in a row
REPETITION_PATTERN = re.compile(r"(.)\1{4,}")

# Runs from the ዘ/ዠ and ጰ consonant families that do not occur in real words
INVALID_COMBINATION_PATTERN = re.compile(r"[ዘዟዠዡዢዣዤዥዦዧ]{3,}|[ጰጱጲጳጴጵጶጷ]{3,}")


@dataclass(frozen=True)
class Rule:
    """A single validation heuristic."""

    name: str
    predicate: Callable[[str], bool]
    penalty: float
    issue: IssueKind


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule(
        "mixed_script",
        lambda w: LATIN_PATTERN.search(w) is not None,
        0.4,
        IssueKind.MIXED_SCRIPT,
    ),
    Rule(
        "embedded_digits",
        lambda w: DIGIT_PATTERN.search(w) is not None,
        0.3,
        IssueKind.EMBEDDED_DIGITS,
    ),
    Rule(
        "noise_characters",
        lambda w: NOISE_PATTERN.search(w) is not None,
        0.5,
        IssueKind.NOISE_CHARACTERS,
    ),
    Rule(
        "excessive_repetition",
        lambda w: REPETITION_PATTERN.search(w) is not None,
        0.4,
        IssueKind.EXCESSIVE_REPETITION,
    ),
    Rule(
        "isolated_character",
        lambda w: count_ethiopic(w) == 1 and len(w) > 3,
        0.3,
        IssueKind.ISOLATED_CHARACTER,
    ),
    Rule(
        "invalid_combination",
        lambda w: INVALID_COMBINATION_PATTERN.search(w) is not None,
        0.4,
        IssueKind.INVALID_COMBINATION,
    ),
)


# =============================================================================
# WORD VALIDATOR
# =============================================================================


class WordValidator:
    """
    Scores single tokens for OCR corruption likelihood.

    Attributes:
        config: ValidationConfig with thresholds and length adjustments.
        rules: Ordered rules applied to Ethiopic-bearing words.

    Example:
        >>> validator = WordValidator()
        >>> validator.validate("ሰላም").is_valid
        True
        >>> result = validator.validate("#ታፖ")
        >>> result.confidence, [i.label for i in result.issues]
        (0.5, ['Contains ASCII noise characters'])
    """

    def __init__(
        self,
        config: ValidationConfig | None = None,
        rules: Iterable[Rule] | None = None,
    ):
        self.config = config or ValidationConfig()
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def validate(self, word: str) -> WordValidation:
        """
        Validate one word.

        Args:
            word: Token text; surrounding whitespace is ignored.

        Returns:
            WordValidation with confidence clamped to [0, 1].
        """
        if word is None:
            raise ValueError("Input word cannot be None")

        clean = word.strip()
        if not clean:
            return WordValidation(word=word, confidence=0.0, issues=(IssueKind.EMPTY,), is_valid=False)

        if not contains_ethiopic(clean):
            return WordValidation(
                word=word,
                confidence=self.config.non_ethiopic_confidence,
                issues=(),
                is_valid=True,
            )

        confidence = 1.0
        issues: list[IssueKind] = []
        for rule in self.rules:
            if rule.predicate(clean):
                confidence -= rule.penalty
                if rule.issue not in issues:
                    issues.append(rule.issue)

        if len(clean) < self.config.min_length:
            confidence -= self.config.short_word_penalty
        elif len(clean) > self.config.max_length:
            confidence -= self.config.long_word_penalty

        confidence = max(0.0, min(1.0, confidence))
        is_valid = not issues and confidence > self.config.valid_threshold

        return WordValidation(
            word=word,
            confidence=confidence,
            issues=tuple(issues),
            is_valid=is_valid,
        )

    def validate_text(self, text: str) -> list[tuple[Token, WordValidation]]:
        """Validate every whitespace-separated token, keeping offsets."""
        if text is None:
            raise ValueError("Input text cannot be None")

        results = [(token, self.validate(token.text)) for token in split_words(text)]
        logger.debug(
            "Validated %d words, %d problematic",
            len(results),
            sum(1 for _, v in results if v.is_problematic),
        )
        return results
