"""
ethioreview: Review OCR output of Ethiopic-script (Amharic) documents.

This library scores scanned-document text for OCR corruption, proposes
corrections, grades documents in batches and lets a reviewer accept or
reject changes through a token-level diff.

Example:
    >>> import ethioreview
    >>> docs = [ethioreview.OCRDocument("d1", "page1.png", "ያመድኃኔቋም A957 #ታፖ")]
    >>> result = ethioreview.BatchAnalyzer().analyze_batch(docs)
    >>> result.documents[0].corruption_level.value
    'medium'

    >>> # Review a correction
    >>> session = ethioreview.ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት")
    >>> session.accept_all()
    >>> session.base
    'ሰላም ዓለማት'
"""

from ethioreview.analysis import (
    CorrectionSuggester,
    CorruptionDetector,
    DomainLexicon,
    QualityReportGenerator,
    WordValidator,
    is_ethiopic_word,
    suggest_for_word,
)
from ethioreview.batch import BatchAnalyzer, CorruptionPatternReport, DocumentComparison
from ethioreview.config import (
    AnalysisConfig,
    BatchConfig,
    DetectionConfig,
    ReviewConfig,
    ValidationConfig,
    load_config,
)
from ethioreview.corrections import (
    ApplyResult,
    BulkCorrectionApplier,
    SkippedCorrection,
    SkipReason,
    clean_text_locally,
)
from ethioreview.diff import (
    BufferUpdate,
    Change,
    ChangeKey,
    DiffEngine,
    DiffOperation,
    DiffResult,
    LineRow,
    OpKind,
    Segment,
    tokenize,
)
from ethioreview.exceptions import (
    AnalysisError,
    ChangeNotFoundError,
    ConfigurationError,
    EthioReviewError,
    StaleSnapshotError,
)
from ethioreview.models import (
    # Documents and batches
    BatchResult,
    BatchSummary,
    # Corrections
    CorrectionSuggestion,
    # Analysis
    CorruptionAssessment,
    # Enums
    CorruptionLevel,
    DocumentAnalysis,
    DocumentFailure,
    Grade,
    IssueFrequency,
    IssueKind,
    OCRDocument,
    Position,
    ProblematicSection,
    QualityLevel,
    QualityReport,
    ScriptClass,
    TextSnapshot,
    Token,
    WordValidation,
)
from ethioreview.review import ReanalysisGate, ReviewSession

__version__ = "0.1.0"
__all__ = [
    # Analysis
    "WordValidator",
    "CorruptionDetector",
    "CorrectionSuggester",
    "QualityReportGenerator",
    "DomainLexicon",
    "is_ethiopic_word",
    "suggest_for_word",
    # Batch
    "BatchAnalyzer",
    "CorruptionPatternReport",
    "DocumentComparison",
    # Corrections
    "BulkCorrectionApplier",
    "ApplyResult",
    "SkippedCorrection",
    "SkipReason",
    "clean_text_locally",
    # Diff and review
    "DiffEngine",
    "DiffResult",
    "DiffOperation",
    "OpKind",
    "Change",
    "ChangeKey",
    "Segment",
    "BufferUpdate",
    "LineRow",
    "tokenize",
    "ReviewSession",
    "ReanalysisGate",
    # Configuration
    "AnalysisConfig",
    "ValidationConfig",
    "DetectionConfig",
    "BatchConfig",
    "ReviewConfig",
    "load_config",
    # Enums
    "ScriptClass",
    "IssueKind",
    "CorruptionLevel",
    "Grade",
    "QualityLevel",
    # Models
    "Token",
    "WordValidation",
    "CorruptionAssessment",
    "Position",
    "CorrectionSuggestion",
    "TextSnapshot",
    "OCRDocument",
    "ProblematicSection",
    "QualityReport",
    "DocumentAnalysis",
    "DocumentFailure",
    "BatchSummary",
    "IssueFrequency",
    "BatchResult",
    # Exceptions
    "EthioReviewError",
    "ConfigurationError",
    "StaleSnapshotError",
    "ChangeNotFoundError",
    "AnalysisError",
]
