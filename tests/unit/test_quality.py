"""
Unit tests for quality reports (ethioreview/analysis/quality.py).
"""

import pytest

from ethioreview.analysis.quality import (
    RECOMMEND_ENGINE_SETTINGS,
    RECOMMEND_LANGUAGE,
    RECOMMEND_MANUAL_REVIEW,
    RECOMMEND_RESCAN,
    QualityReportGenerator,
    split_sections,
)
from ethioreview.models import CorruptionLevel, Grade, QualityLevel


@pytest.fixture
def generator():
    return QualityReportGenerator()


class TestScoring:
    def test_clean_text_grades_a(self, generator, clean_text):
        report = generator.generate(clean_text)
        assert report.overall_score == pytest.approx(1.0)
        assert report.grade is Grade.A
        assert report.quality_level is QualityLevel.EXCELLENT
        assert report.domain_content_detected
        assert report.recommendations == []

    def test_corruption_penalty(self, generator):
        # Mean confidence (1.0 + 0.5) / 2, minus 0.3 for being corrupted
        report = generator.generate("ሰላም #ታፖ")
        assert report.assessment.is_corrupted
        assert report.overall_score == pytest.approx(0.45)
        assert report.grade is Grade.F

    def test_score_never_negative(self, generator):
        report = generator.generate("ሰa1# ጰa2; ዘb3/")
        assert report.overall_score == 0.0

    def test_empty_text_grades_f(self, generator):
        report = generator.generate("")
        assert report.overall_score == 0.0
        assert report.grade is Grade.F
        assert report.word_count == 0

    @pytest.mark.parametrize(
        "score,grade",
        [(0.95, Grade.A), (0.9, Grade.A), (0.85, Grade.B), (0.7, Grade.C), (0.6, Grade.D), (0.59, Grade.F)],
    )
    def test_grade_mapping(self, score, grade):
        assert Grade.from_score(score) is grade


class TestRecommendations:
    def test_corrupted_text_recommendations(self, generator):
        report = generator.generate("ሰላም #ታፖ")
        assert RECOMMEND_RESCAN in report.recommendations
        assert RECOMMEND_MANUAL_REVIEW in report.recommendations
        assert RECOMMEND_ENGINE_SETTINGS in report.recommendations
        assert RECOMMEND_LANGUAGE in report.recommendations

    def test_domain_vocabulary_suppresses_language_hint(self, generator):
        report = generator.generate("ጸሎት ሰላም")
        assert report.domain_content_detected
        assert RECOMMEND_LANGUAGE not in report.recommendations

    def test_inflected_domain_word_detected(self, generator):
        report = generator.generate("በጸሎትን ሰላም")
        assert report.domain_content_detected

    def test_additional_vocabulary(self):
        from ethioreview.config import AnalysisConfig, DetectionConfig

        config = AnalysisConfig(detection=DetectionConfig(additional_vocabulary={"ትምህርት"}))
        report = QualityReportGenerator(config).generate("ትምህርት ቤት")
        assert report.domain_content_detected


class TestCounts:
    def test_word_counts(self, generator):
        report = generator.generate("ሰላም hello ዓለም#ታፖ")
        assert report.word_count == 3
        assert report.ethiopic_word_count == 2
        assert report.problematic_word_count == 1

    def test_suggestions_included(self, generator):
        report = generator.generate("ሰላም#ታ", document_id="d1", file_name="p.png")
        assert [s.corrected for s in report.suggestions] == ["ሰላምታ"]
        assert report.suggestions[0].document_id == "d1"

    def test_to_dict_shape(self, generator, noisy_text):
        data = generator.generate(noisy_text).to_dict()
        assert set(data) == {
            "summary",
            "assessment",
            "problematic_sections",
            "suggestions",
            "recommendations",
        }
        assert data["summary"]["grade"] in {"A", "B", "C", "D", "F"}


class TestSections:
    def test_split_sections_offsets(self):
        text = "ሰላም። ዓለም፤ ቤት\n\nሌላ"
        sections = split_sections(text)
        assert [s for s, _, _ in sections] == ["ሰላም", "ዓለም", "ቤት", "ሌላ"]
        for section, start, end in sections:
            assert text[start:end] == section

    def test_only_bad_sections_flagged(self, generator):
        text = "ቅዱስ ጸሎት። ሰላም #ታፖ"
        [section] = generator.generate(text).problematic_sections
        assert section.section == "ሰላም #ታፖ"
        assert text[section.start : section.end] == section.section
        assert section.severity is CorruptionLevel.MEDIUM
        assert "Text corruption: medium level" in section.issues
