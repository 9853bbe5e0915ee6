"""
Unit tests for whole-text corruption detection (ethioreview/analysis/detector.py).
"""

import pytest

from ethioreview.analysis.detector import CorruptionDetector
from ethioreview.config import DetectionConfig
from ethioreview.models import CorruptionLevel


@pytest.fixture
def detector():
    return CorruptionDetector()


class TestEmptyInput:
    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_blank_text_is_neutral(self, detector, text):
        """Blank text is not an error and not corrupted."""
        result = detector.detect(text)
        assert result.is_corrupted is False
        assert result.corruption_level is CorruptionLevel.LOW
        assert result.corruption_score == 0.0
        assert result.issues == []

    def test_none_raises(self, detector):
        with pytest.raises(ValueError):
            detector.detect(None)


class TestDetection:
    def test_clean_text(self, detector, clean_text):
        result = detector.detect(clean_text)
        assert result.corruption_score == 0.0
        assert result.corruption_level is CorruptionLevel.LOW
        assert not result.is_corrupted
        assert result.confidence == pytest.approx(1.0)

    def test_noisy_scanner_output(self, detector, noisy_text):
        """Noise plus an uppercase/digit run is at least medium with 2+ issues."""
        result = detector.detect(noisy_text)
        assert result.corruption_level in (CorruptionLevel.MEDIUM, CorruptionLevel.HIGH)
        assert result.is_corrupted
        assert len(set(result.issues)) >= 2
        assert any("ASCII noise" in issue for issue in result.issues)
        assert any("number sequences" in issue for issue in result.issues)

    def test_word_issue_format(self, detector):
        result = detector.detect("ሰላም #ታፖ")
        assert '"#ታፖ": Contains ASCII noise characters' in result.issues
        assert result.problematic_words == 1
        assert result.total_words == 2
        assert result.problematic_ratio == pytest.approx(0.5)

    def test_score_starts_at_problematic_ratio(self, detector):
        result = detector.detect("ሰላም #ታፖ")
        assert result.corruption_score == pytest.approx(0.5)
        assert result.corruption_level is CorruptionLevel.MEDIUM

    def test_noise_run_increment(self, detector):
        # "##" alone is non-Ethiopic, so the only contribution is the run check
        result = detector.detect("ሰላም ##")
        assert result.corruption_score == pytest.approx(0.3)
        assert "Multiple ASCII noise characters detected" in result.issues
        # Exactly at the threshold: medium bucket, but not "corrupted"
        assert result.corruption_level is CorruptionLevel.MEDIUM
        assert not result.is_corrupted

    def test_mixed_script_increment(self, detector):
        result = detector.detect("ሰላምabc ዓለም")
        assert "Mixed scripts within words" in result.issues
        # 1/2 problematic + 0.3 mixed-script check
        assert result.corruption_score == pytest.approx(0.8)
        assert result.corruption_level is CorruptionLevel.HIGH

    def test_score_is_not_clamped(self, detector):
        """Stacked checks can exceed 1.0; the level is still high."""
        result = detector.detect("ሰላምAB ## 1234")
        assert result.corruption_score > 1.0
        assert result.corruption_level is CorruptionLevel.HIGH

    def test_level_suggestions(self, detector):
        high = detector.detect("ሰላምAB ## 1234")
        assert "Try using a different OCR engine" in high.suggestions
        medium = detector.detect("ሰላም #ታፖ")
        assert "Manual review and correction recommended" in medium.suggestions


class TestThresholds:
    def test_thresholds_configurable(self):
        lenient = CorruptionDetector(DetectionConfig(medium_threshold=0.6, high_threshold=0.9))
        result = lenient.detect("ሰላም #ታፖ")
        assert result.corruption_level is CorruptionLevel.LOW
        assert not result.is_corrupted

    @pytest.mark.parametrize(
        "score,level",
        [
            (0.0, CorruptionLevel.LOW),
            (0.29, CorruptionLevel.LOW),
            (0.3, CorruptionLevel.MEDIUM),
            (0.59, CorruptionLevel.MEDIUM),
            (0.6, CorruptionLevel.HIGH),
            (2.5, CorruptionLevel.HIGH),
        ],
    )
    def test_level_for(self, detector, score, level):
        assert detector.level_for(score) is level

    def test_is_corrupted_shortcut(self, detector, noisy_text, clean_text):
        assert detector.is_corrupted(noisy_text)
        assert not detector.is_corrupted(clean_text)
