"""
Data models for ethioreview.

These models carry analysis results between the validator, detector,
suggester, batch analyzer and the export layer. Every record that leaves
the engine has a `to_dict()` for JSON-style serialization.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# ENUMS
# =============================================================================


class ScriptClass(Enum):
    """Script composition of a token."""

    ETHIOPIC = "ethiopic"
    LATIN = "latin"
    DIGIT = "digit"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"
    MIXED = "mixed"


class IssueKind(Enum):
    """Word-level problems; the value is the reviewer-facing label."""

    EMPTY = "Empty word"
    MIXED_SCRIPT = "Mixed Amharic and Latin scripts"
    EMBEDDED_DIGITS = "Numbers mixed with Amharic text"
    NOISE_CHARACTERS = "Contains ASCII noise characters"
    EXCESSIVE_REPETITION = "Excessive character repetition"
    ISOLATED_CHARACTER = "Single Amharic character with noise"
    INVALID_COMBINATION = "Invalid character combinations"

    @property
    def label(self) -> str:
        return self.value


class CorruptionLevel(Enum):
    """Corruption bucket for a whole text."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting: least corrupted ranks highest."""
        return {"low": 3, "medium": 2, "high": 1}[self.value]


class Grade(Enum):
    """Letter grade derived from a quality score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @classmethod
    def from_score(cls, score: float) -> Grade:
        if score >= 0.9:
            return cls.A
        if score >= 0.8:
            return cls.B
        if score >= 0.7:
            return cls.C
        if score >= 0.6:
            return cls.D
        return cls.F


class QualityLevel(Enum):
    """Coarse quality bucket from mean word confidence."""

    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"

    @classmethod
    def from_confidence(cls, confidence: float) -> QualityLevel:
        if confidence >= 0.9:
            return cls.EXCELLENT
        if confidence >= 0.75:
            return cls.GOOD
        if confidence >= 0.5:
            return cls.FAIR
        return cls.POOR


# =============================================================================
# TOKENS AND WORD VALIDATION
# =============================================================================


@dataclass(frozen=True)
class Token:
    """A span of text with its script classification."""

    text: str
    start: int
    end: int
    script: ScriptClass

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class WordValidation:
    """
    Result of validating one word.

    `issues` holds each IssueKind at most once, in rule order.
    """

    word: str
    confidence: float
    issues: tuple[IssueKind, ...] = ()
    is_valid: bool = True

    @property
    def is_problematic(self) -> bool:
        """Counted as a corrupted word by the detector and reports."""
        return not self.is_valid

    @property
    def issue_labels(self) -> list[str]:
        return [issue.label for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "confidence": round(self.confidence, 4),
            "issues": self.issue_labels,
            "is_valid": self.is_valid,
        }


@dataclass
class CorruptionAssessment:
    """
    Corruption verdict for a whole text.

    `corruption_score` is not clamped: stacked pattern checks can push it
    above 1.0.
    """

    corruption_score: float
    corruption_level: CorruptionLevel
    is_corrupted: bool
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    # Mean word confidence (0.0 for texts without words)
    confidence: float = 0.0
    total_words: int = 0
    problematic_words: int = 0
    word_validations: list[WordValidation] = field(default_factory=list)

    @property
    def problematic_ratio(self) -> float:
        if self.total_words == 0:
            return 0.0
        return self.problematic_words / self.total_words

    def to_dict(self) -> dict[str, Any]:
        return {
            "corruption_score": round(self.corruption_score, 4),
            "corruption_level": self.corruption_level.value,
            "is_corrupted": self.is_corrupted,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
            "confidence": round(self.confidence, 4),
            "total_words": self.total_words,
            "problematic_words": self.problematic_words,
        }


# =============================================================================
# CORRECTIONS
# =============================================================================


@dataclass(frozen=True)
class Position:
    """Half-open character span [start, end) in a specific text snapshot."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end must be >= start, got {self.end} < {self.start}")

    def overlaps(self, other: Position) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class CorrectionSuggestion:
    """A proposed replacement of `original` by `corrected` at `position`."""

    document_id: str
    file_name: str
    original: str
    corrected: str
    confidence: float
    reason: str
    position: Position
    snapshot_version: int | None = None

    @property
    def key(self) -> tuple[str, int, int]:
        """Identity of a suggestion within one analysis pass."""
        return (self.document_id, self.position.start, self.position.end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "file_name": self.file_name,
            "original": self.original,
            "corrected": self.corrected,
            "confidence": self.confidence,
            "reason": self.reason,
            "position": {"start": self.position.start, "end": self.position.end},
            "snapshot_version": self.snapshot_version,
        }


@dataclass(frozen=True)
class TextSnapshot:
    """
    An immutable, versioned text buffer.

    Every mutation produces a new snapshot with the next version, which
    invalidates offsets computed against earlier versions.
    """

    text: str
    version: int = 0

    def revise(self, text: str) -> TextSnapshot:
        return TextSnapshot(text=text, version=self.version + 1)


# =============================================================================
# DOCUMENTS AND BATCHES
# =============================================================================


@dataclass
class OCRDocument:
    """
    One document as delivered by the OCR collaborator.

    `engine_confidence` is a soft prior only; the text-derived quality
    score always decides ranking.
    """

    document_id: str
    file_name: str
    text: str
    image_ref: str | None = None
    engine_confidence: float | None = None


@dataclass
class ProblematicSection:
    """A sentence or paragraph flagged as poor or corrupted."""

    section: str
    start: int
    end: int
    severity: CorruptionLevel
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "section": self.section,
            "start": self.start,
            "end": self.end,
            "severity": self.severity.value,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class QualityReport:
    """Quality summary for one text."""

    overall_score: float
    grade: Grade
    quality_level: QualityLevel
    word_count: int
    ethiopic_word_count: int
    problematic_word_count: int
    assessment: CorruptionAssessment
    domain_content_detected: bool = False
    recommendations: list[str] = field(default_factory=list)
    problematic_sections: list[ProblematicSection] = field(default_factory=list)
    suggestions: list[CorrectionSuggestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "overall_score": round(self.overall_score, 4),
                "grade": self.grade.value,
                "quality_level": self.quality_level.value,
                "word_count": self.word_count,
                "ethiopic_word_count": self.ethiopic_word_count,
                "problematic_word_count": self.problematic_word_count,
                "domain_content_detected": self.domain_content_detected,
            },
            "assessment": self.assessment.to_dict(),
            "problematic_sections": [s.to_dict() for s in self.problematic_sections],
            "suggestions": [s.to_dict() for s in self.suggestions],
            "recommendations": list(self.recommendations),
        }


@dataclass
class DocumentAnalysis:
    """Per-document result inside a batch."""

    document_id: str
    file_name: str
    quality_score: float
    grade: Grade
    corruption_level: CorruptionLevel
    total_words: int
    corrupted_words: int
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    processing_time_ms: float = 0.0
    engine_confidence: float | None = None

    @property
    def problematic_ratio(self) -> float:
        if self.total_words == 0:
            return 0.0
        return self.corrupted_words / self.total_words

    def is_finite(self) -> bool:
        return math.isfinite(self.quality_score) and math.isfinite(self.processing_time_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "file_name": self.file_name,
            "quality_score": round(self.quality_score, 4),
            "grade": self.grade.value,
            "corruption_level": self.corruption_level.value,
            "total_words": self.total_words,
            "corrupted_words": self.corrupted_words,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "processing_time_ms": round(self.processing_time_ms, 3),
            "engine_confidence": self.engine_confidence,
        }


@dataclass
class DocumentFailure:
    """A document whose analysis failed; kept visible in batch output."""

    document_id: str
    file_name: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"document_id": self.document_id, "file_name": self.file_name, "error": self.error}


@dataclass
class BatchSummary:
    """Aggregate counters for one batch run."""

    total_documents: int = 0
    successfully_processed: int = 0
    failed: int = 0
    average_quality: float = 0.0
    total_corrupted_words: int = 0
    processing_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_documents": self.total_documents,
            "successfully_processed": self.successfully_processed,
            "failed": self.failed,
            "average_quality": round(self.average_quality, 4),
            "total_corrupted_words": self.total_corrupted_words,
            "processing_time_ms": round(self.processing_time_ms, 3),
        }


@dataclass(frozen=True)
class IssueFrequency:
    issue: str
    frequency: int


@dataclass
class BatchResult:
    """Output of BatchAnalyzer.analyze_batch."""

    summary: BatchSummary
    documents: list[DocumentAnalysis] = field(default_factory=list)
    common_issues: list[IssueFrequency] = field(default_factory=list)
    overall_recommendations: list[str] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "documents": [d.to_dict() for d in self.documents],
            "common_issues": [
                {"issue": c.issue, "frequency": c.frequency} for c in self.common_issues
            ],
            "overall_recommendations": list(self.overall_recommendations),
            "failures": [f.to_dict() for f in self.failures],
        }
