"""
Batch analysis of OCR documents.

Each document is analyzed independently (optionally on a thread pool)
and the results are folded into one BatchResult. A document that fails
is recorded as a DocumentFailure and the batch carries on; nothing
raised by a single document escapes `analyze_batch()`.
"""

from __future__ import annotations

import logging
import re
import time
from collections import Counter
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from ethioreview.analysis.quality import QualityReportGenerator
from ethioreview.analysis.suggester import CorrectionSuggester
from ethioreview.config import AnalysisConfig
from ethioreview.exceptions import AnalysisError
from ethioreview.models import (
    BatchResult,
    BatchSummary,
    CorrectionSuggestion,
    CorruptionLevel,
    DocumentAnalysis,
    DocumentFailure,
    Grade,
    IssueFrequency,
    OCRDocument,
)
from ethioreview.script import ETHIOPIC_RANGE, NOISE_CLASS

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

LOW_AVERAGE_QUALITY = 0.6
HIGH_CORRUPTION_SHARE = 0.3
PROBLEMATIC_RATIO_LIMIT = 0.3
POOR_GRADE_SHARE = 0.4
POOR_GRADES = (Grade.D, Grade.F)

RECOMMEND_RESCAN = "Overall document quality is poor - consider re-scanning with higher DPI settings"
RECOMMEND_ENGINE = "High corruption rate detected - verify OCR engine configuration"
RECOMMEND_ENGINE_WORDS = (
    "Most documents have a high share of problematic words - "
    "review OCR engine configuration and language settings"
)
RECOMMEND_MANUAL = "Many documents require manual review - prioritize highest quality documents first"
RECOMMEND_NOISE = "ASCII noise is a common issue - implement preprocessing to remove special characters"
RECOMMEND_SCRIPTS = "Mixed script detection needed - separate Amharic and Latin text during processing"

MAX_PATTERN_EXAMPLES = 3

CORRUPTION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("ASCII_NOISE", re.compile(f"[{NOISE_CLASS}]")),
    ("MIXED_SCRIPTS", re.compile(f"[{ETHIOPIC_RANGE}]+[a-zA-Z]+[{ETHIOPIC_RANGE}]*")),
    ("NUMBERS_IN_AMHARIC", re.compile(f"[{ETHIOPIC_RANGE}]+[0-9]+[{ETHIOPIC_RANGE}]*")),
    ("UPPERCASE_NOISE", re.compile(r"[A-Z]{2,}")),
    ("REPEATED_PUNCTUATION", re.compile(r"[።፤፣፡]{2,}")),
)

# pattern -> (frequency above which it is reported, recommendation)
PATTERN_RECOMMENDATIONS = {
    "ASCII_NOISE": (10, "High frequency of ASCII noise detected - consider OCR preprocessing"),
    "MIXED_SCRIPTS": (5, "Mixed script issues common - verify language detection settings"),
    "NUMBERS_IN_AMHARIC": (3, "Numbers embedded in Amharic text - check digit recognition settings"),
}


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class CorruptionPattern:
    pattern: str
    frequency: int
    examples: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"pattern": self.pattern, "frequency": self.frequency, "examples": list(self.examples)}


@dataclass
class CorruptionPatternReport:
    """Cross-document pattern counts, most frequent first."""

    patterns: list[CorruptionPattern] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "patterns": [p.to_dict() for p in self.patterns],
            "recommendations": list(self.recommendations),
        }


@dataclass
class DocumentComparison:
    """Side-by-side summary of analyzed documents."""

    best: DocumentAnalysis | None
    worst: DocumentAnalysis | None
    grade_distribution: dict[str, int]
    total_words: int
    total_corrupted_words: int
    average_quality: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "best": self.best.document_id if self.best else None,
            "worst": self.worst.document_id if self.worst else None,
            "grade_distribution": dict(self.grade_distribution),
            "total_words": self.total_words,
            "total_corrupted_words": self.total_corrupted_words,
            "average_quality": round(self.average_quality, 4),
        }


def rank_key(analysis: DocumentAnalysis) -> tuple[float, int, int, str]:
    """Sort key: best quality, least corruption, fewest issues, then id."""
    return (
        -analysis.quality_score,
        -analysis.corruption_level.rank,
        len(analysis.issues),
        analysis.document_id,
    )


# =============================================================================
# BATCH ANALYZER
# =============================================================================


class BatchAnalyzer:
    """
    Analyzes many documents and aggregates the results.

    Attributes:
        config: AnalysisConfig; `config.batch` controls parallelism.
        quality: QualityReportGenerator used per document.

    Example:
        >>> analyzer = BatchAnalyzer()
        >>> result = analyzer.analyze_batch([OCRDocument("d1", "a.png", "ሰላም ዓለም")])
        >>> result.summary.successfully_processed
        1
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        quality: QualityReportGenerator | None = None,
        suggester: CorrectionSuggester | None = None,
    ):
        self.config = config or AnalysisConfig()
        self.suggester = suggester or CorrectionSuggester()
        self.quality = quality or QualityReportGenerator(self.config, suggester=self.suggester)

    def analyze_document(self, document: OCRDocument) -> DocumentAnalysis:
        """
        Analyze one document.

        Raises:
            AnalysisError: If the analysis produced non-finite numbers.
        """
        start = time.perf_counter()
        report = self.quality.generate(
            document.text, document_id=document.document_id, file_name=document.file_name
        )
        elapsed_ms = (time.perf_counter() - start) * 1000

        analysis = DocumentAnalysis(
            document_id=document.document_id,
            file_name=document.file_name,
            quality_score=report.overall_score,
            grade=report.grade,
            corruption_level=report.assessment.corruption_level,
            total_words=report.word_count,
            corrupted_words=report.problematic_word_count,
            issues=list(report.assessment.issues),
            recommendations=list(report.recommendations),
            processing_time_ms=elapsed_ms,
            engine_confidence=document.engine_confidence,
        )
        if not analysis.is_finite():
            raise AnalysisError(f"Non-finite quality score for document {document.document_id!r}")
        return analysis

    def _analyze_isolated(self, document: OCRDocument) -> DocumentAnalysis | DocumentFailure:
        try:
            return self.analyze_document(document)
        except Exception as e:
            # Items that are not OCRDocuments still become failures
            document_id = getattr(document, "document_id", repr(document))
            logger.warning("Analysis failed for document %r: %s", document_id, e)
            return DocumentFailure(
                document_id=document_id,
                file_name=getattr(document, "file_name", ""),
                error=f"{type(e).__name__}: {e}",
            )

    def analyze_batch(self, documents: Sequence[OCRDocument]) -> BatchResult:
        """
        Analyze all documents and aggregate.

        Output order matches input order, also when running in parallel.
        """
        start = time.perf_counter()
        batch = self.config.batch

        if batch.parallel and len(documents) > 1:
            with ThreadPoolExecutor(max_workers=batch.max_workers) as executor:
                outcomes = list(executor.map(self._analyze_isolated, documents))
        else:
            outcomes = [self._analyze_isolated(doc) for doc in documents]

        analyses = [o for o in outcomes if isinstance(o, DocumentAnalysis)]
        failures = [o for o in outcomes if isinstance(o, DocumentFailure)]

        counts = Counter(issue for a in analyses for issue in a.issues)
        common_issues = [
            IssueFrequency(issue, frequency)
            for issue, frequency in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        ][: batch.top_issues]

        summary = BatchSummary(
            total_documents=len(documents),
            successfully_processed=len(analyses),
            failed=len(failures),
            average_quality=(
                sum(a.quality_score for a in analyses) / len(analyses) if analyses else 0.0
            ),
            total_corrupted_words=sum(a.corrupted_words for a in analyses),
            processing_time_ms=(time.perf_counter() - start) * 1000,
        )

        logger.info(
            "Analyzed %d documents (%d failed), average quality %.3f",
            summary.total_documents,
            summary.failed,
            summary.average_quality,
        )

        return BatchResult(
            summary=summary,
            documents=analyses,
            common_issues=common_issues,
            overall_recommendations=self.overall_recommendations(analyses, common_issues),
            failures=failures,
        )

    @staticmethod
    def overall_recommendations(
        analyses: Sequence[DocumentAnalysis],
        common_issues: Sequence[IssueFrequency],
    ) -> list[str]:
        """Batch-level advice from aggregate thresholds."""
        if not analyses:
            return []

        total = len(analyses)
        average = sum(a.quality_score for a in analyses) / total
        high = sum(1 for a in analyses if a.corruption_level is CorruptionLevel.HIGH)
        wordy = sum(1 for a in analyses if a.problematic_ratio > PROBLEMATIC_RATIO_LIMIT)
        poor = sum(1 for a in analyses if a.grade in POOR_GRADES)

        recommendations = []
        if average < LOW_AVERAGE_QUALITY:
            recommendations.append(RECOMMEND_RESCAN)
        if high > total * HIGH_CORRUPTION_SHARE:
            recommendations.append(RECOMMEND_ENGINE)
        if wordy > total / 2:
            recommendations.append(RECOMMEND_ENGINE_WORDS)
        if poor > total * POOR_GRADE_SHARE:
            recommendations.append(RECOMMEND_MANUAL)
        if any("ASCII noise" in c.issue for c in common_issues):
            recommendations.append(RECOMMEND_NOISE)
        if any("Mixed scripts" in c.issue for c in common_issues):
            recommendations.append(RECOMMEND_SCRIPTS)
        return recommendations

    # -------------------------------------------------------------------------
    # Ranking and comparison
    # -------------------------------------------------------------------------

    @staticmethod
    def rank_documents(analyses: Iterable[DocumentAnalysis]) -> list[DocumentAnalysis]:
        """
        Order documents for display.

        Engine-reported confidence is not part of the key; the
        text-derived quality score decides.
        """
        return sorted(analyses, key=rank_key)

    def compare_documents(self, analyses: Sequence[DocumentAnalysis]) -> DocumentComparison:
        ranked = self.rank_documents(analyses)
        distribution = {grade.value: 0 for grade in Grade}
        for analysis in ranked:
            distribution[analysis.grade.value] += 1
        return DocumentComparison(
            best=ranked[0] if ranked else None,
            worst=ranked[-1] if ranked else None,
            grade_distribution=distribution,
            total_words=sum(a.total_words for a in ranked),
            total_corrupted_words=sum(a.corrupted_words for a in ranked),
            average_quality=(
                sum(a.quality_score for a in ranked) / len(ranked) if ranked else 0.0
            ),
        )

    # -------------------------------------------------------------------------
    # Cross-document corrections and patterns
    # -------------------------------------------------------------------------

    def generate_corrections(self, documents: Iterable[OCRDocument]) -> list[CorrectionSuggestion]:
        """Suggestions for every document, highest confidence first."""
        suggestions: list[CorrectionSuggestion] = []
        for document in documents:
            suggestions.extend(
                self.suggester.suggest(
                    document.text,
                    document_id=document.document_id,
                    file_name=document.file_name,
                )
            )
        return sorted(suggestions, key=lambda s: -s.confidence)

    @staticmethod
    def identify_corruption_patterns(documents: Iterable[OCRDocument]) -> CorruptionPatternReport:
        frequencies: Counter[str] = Counter()
        examples: dict[str, list[str]] = {}

        for document in documents:
            for name, pattern in CORRUPTION_PATTERNS:
                matches = [m.group() for m in pattern.finditer(document.text)]
                if not matches:
                    continue
                frequencies[name] += len(matches)
                kept = examples.setdefault(name, [])
                for match in matches:
                    if len(kept) >= MAX_PATTERN_EXAMPLES:
                        break
                    if match not in kept:
                        kept.append(match)

        patterns = [
            CorruptionPattern(name, frequency, examples[name])
            for name, frequency in sorted(frequencies.items(), key=lambda kv: (-kv[1], kv[0]))
        ]

        recommendations = [
            message
            for name, (limit, message) in PATTERN_RECOMMENDATIONS.items()
            if frequencies[name] > limit
        ]
        return CorruptionPatternReport(patterns=patterns, recommendations=recommendations)
