"""
Per-document quality reports.

A report folds the corruption assessment into one score and letter grade,
lists rule-triggered recommendations, and points at the sentences or
paragraphs that need a reviewer's attention first.
"""

from __future__ import annotations

import logging
import re

from ethioreview.analysis.detector import CorruptionDetector
from ethioreview.analysis.lexicon import DomainLexicon, is_ethiopic_word
from ethioreview.analysis.suggester import CorrectionSuggester
from ethioreview.config import AnalysisConfig
from ethioreview.models import (
    CorruptionLevel,
    Grade,
    ProblematicSection,
    QualityLevel,
    QualityReport,
)
from ethioreview.script import split_words

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

CORRUPTION_PENALTY = 0.3
RESCAN_BELOW = 0.7
PROBLEMATIC_RATIO_LIMIT = 0.3

RECOMMEND_RESCAN = "Consider re-scanning the document with higher quality settings"
RECOMMEND_MANUAL_REVIEW = "Manual review and correction required for corrupted sections"
RECOMMEND_ENGINE_SETTINGS = "High number of problematic words detected - verify OCR engine settings"
RECOMMEND_LANGUAGE = "Consider using Amharic-specific OCR language settings for this document"

# Sentence ends (full stop, semicolon) and paragraph breaks
SECTION_BREAK_PATTERN = re.compile(r"[።፤]|\n[ \t]*\n")


def split_sections(text: str) -> list[tuple[str, int, int]]:
    """
    Split text into trimmed sentences/paragraphs with their offsets.

    Example:
        >>> split_sections("ሰላም። ዓለም")
        [('ሰላም', 0, 3), ('ዓለም', 5, 8)]
    """
    sections = []
    cursor = 0
    for boundary in [*SECTION_BREAK_PATTERN.finditer(text), None]:
        end = boundary.start() if boundary else len(text)
        chunk = text[cursor:end]
        stripped = chunk.strip()
        if stripped:
            start = cursor + chunk.index(stripped)
            sections.append((stripped, start, start + len(stripped)))
        if boundary:
            cursor = boundary.end()
    return sections


# =============================================================================
# QUALITY REPORT GENERATOR
# =============================================================================


class QualityReportGenerator:
    """
    Builds a QualityReport for one text.

    Example:
        >>> report = QualityReportGenerator().generate("ቅዱስ ጸሎት")
        >>> report.grade.value, report.recommendations
        ('A', [])
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        detector: CorruptionDetector | None = None,
        suggester: CorrectionSuggester | None = None,
        lexicon: DomainLexicon | None = None,
    ):
        self.config = config or AnalysisConfig()
        self.detector = detector or CorruptionDetector(
            self.config.detection, validation_config=self.config.validation
        )
        self.suggester = suggester or CorrectionSuggester()
        self.lexicon = lexicon or DomainLexicon(self.config.detection.additional_vocabulary)

    def generate(self, text: str, document_id: str = "", file_name: str = "") -> QualityReport:
        """
        Analyze a text and summarize its quality.

        Blank text has no word confidence to speak of, so it scores 0.0
        and grades F.
        """
        if text is None:
            raise ValueError("Input text cannot be None")

        assessment = self.detector.detect(text)
        penalty = CORRUPTION_PENALTY if assessment.is_corrupted else 0.0
        overall = max(0.0, assessment.confidence - penalty)

        words = split_words(text)
        domain = self.lexicon.detect(text) or any(self.lexicon.is_known(w.text) for w in words)

        recommendations = []
        if overall < RESCAN_BELOW:
            recommendations.append(RECOMMEND_RESCAN)
        if assessment.is_corrupted:
            recommendations.append(RECOMMEND_MANUAL_REVIEW)
        if assessment.problematic_ratio > PROBLEMATIC_RATIO_LIMIT:
            recommendations.append(RECOMMEND_ENGINE_SETTINGS)
        if not domain:
            recommendations.append(RECOMMEND_LANGUAGE)

        report = QualityReport(
            overall_score=overall,
            grade=Grade.from_score(overall),
            quality_level=QualityLevel.from_confidence(assessment.confidence),
            word_count=len(words),
            ethiopic_word_count=sum(1 for w in words if is_ethiopic_word(w.text)),
            problematic_word_count=assessment.problematic_words,
            assessment=assessment,
            domain_content_detected=domain,
            recommendations=recommendations,
            problematic_sections=self.problematic_sections(text),
            suggestions=self.suggester.suggest(text, document_id=document_id, file_name=file_name),
        )
        logger.debug(
            "Quality report for %r: score=%.3f grade=%s", document_id, overall, report.grade.value
        )
        return report

    def problematic_sections(self, text: str) -> list[ProblematicSection]:
        """Sections that are poor quality or corrupted, in text order."""
        flagged = []
        for section, start, end in split_sections(text):
            assessment = self.detector.detect(section)
            poor = QualityLevel.from_confidence(assessment.confidence) is QualityLevel.POOR
            if not (poor or assessment.is_corrupted):
                continue

            issues = []
            severity = CorruptionLevel.LOW
            if poor:
                issues.append("Poor OCR quality detected")
                severity = CorruptionLevel.HIGH
            if assessment.is_corrupted:
                issues.append(f"Text corruption: {assessment.corruption_level.value} level")
                severity = assessment.corruption_level

            flagged.append(
                ProblematicSection(
                    section=section,
                    start=start,
                    end=end,
                    severity=severity,
                    issues=issues,
                    suggestions=list(assessment.suggestions),
                )
            )
        return flagged
