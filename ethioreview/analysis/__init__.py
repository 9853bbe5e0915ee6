"""
Text analysis for Ethiopic OCR output.

This package scores OCR text at three levels:
- Words: rule-based validation with additive penalties
- Texts: corruption score and low/medium/high bucket
- Documents: quality report with grade, recommendations and suggestions

Example:
    >>> from ethioreview.analysis import CorruptionDetector
    >>> CorruptionDetector().detect("ያመድኃኔቋም A957 #ታፖ").corruption_level.value
    'medium'
"""

from ethioreview.analysis.detector import CorruptionDetector, PatternCheck
from ethioreview.analysis.lexicon import DomainLexicon, is_ethiopic_word
from ethioreview.analysis.quality import QualityReportGenerator, split_sections
from ethioreview.analysis.suggester import (
    CorrectionSuggester,
    SuggestionRule,
    suggest_for_word,
)
from ethioreview.analysis.validator import Rule, WordValidator

__all__ = [
    # Words
    "WordValidator",
    "Rule",
    "is_ethiopic_word",
    # Texts
    "CorruptionDetector",
    "PatternCheck",
    "DomainLexicon",
    # Suggestions
    "CorrectionSuggester",
    "SuggestionRule",
    "suggest_for_word",
    # Reports
    "QualityReportGenerator",
    "split_sections",
]
