"""
Pytest configuration and fixtures for ethioreview tests.
"""

import pytest

# Clean religious text: every word valid, domain vocabulary present
CLEAN_TEXT = "ቅዱስ ጸሎት በቤተክርስቲያን ይደረጋል።"

# Typical scanner output: noise, embedded digits, stray uppercase
NOISY_TEXT = "ያመድኃኔቋም A957 #ታፖ"

# Half of the words are problematic
HALF_BAD_TEXT = "ሰላም #ታፖ"


@pytest.fixture(scope="session")
def clean_text() -> str:
    return CLEAN_TEXT


@pytest.fixture(scope="session")
def noisy_text() -> str:
    return NOISY_TEXT


@pytest.fixture(scope="session")
def sample_config():
    """Return a default AnalysisConfig for testing."""
    from ethioreview import AnalysisConfig

    return AnalysisConfig()


@pytest.fixture
def make_document():
    """Factory for OCRDocument instances."""
    from ethioreview import OCRDocument

    def _make(document_id: str, text: str, file_name: str | None = None, **kwargs):
        return OCRDocument(
            document_id=document_id,
            file_name=file_name or f"{document_id}.png",
            text=text,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_analysis():
    """Factory for DocumentAnalysis instances with sensible defaults."""
    from ethioreview import CorruptionLevel, DocumentAnalysis, Grade

    def _make(document_id: str, quality_score: float = 0.9, **kwargs):
        values = {
            "document_id": document_id,
            "file_name": f"{document_id}.png",
            "quality_score": quality_score,
            "grade": Grade.from_score(quality_score),
            "corruption_level": CorruptionLevel.LOW,
            "total_words": 10,
            "corrupted_words": 0,
        }
        values.update(kwargs)
        return DocumentAnalysis(**values)

    return _make
