"""
Exception classes for ethioreview.

All ethioreview exceptions inherit from EthioReviewError,
making it easy to catch all library errors.

Example:
    >>> try:
    ...     session.accept(key)
    ... except ethioreview.ChangeNotFoundError as e:
    ...     print(f"Change no longer exists: {e}")
    ... except ethioreview.EthioReviewError as e:
    ...     print(f"ethioreview error: {e}")
"""


class EthioReviewError(Exception):
    """
    Base exception for all ethioreview errors.

    Catch this to handle any ethioreview-specific error.
    """

    pass


class ConfigurationError(EthioReviewError, ValueError):
    """
    Raised for invalid configuration.

    Example:
        >>> DetectionConfig(medium_threshold=0.7, high_threshold=0.6)
        ConfigurationError: thresholds must satisfy 0 <= medium <= high, got 0.7 / 0.6
    """

    pass


class StaleSnapshotError(EthioReviewError):
    """
    Raised when an edit targets a text snapshot that has since changed.

    Offsets (suggestion positions, diff token indices) are only valid
    against the exact snapshot they were computed from.
    """

    def __init__(self, expected: int | None, actual: int):
        super().__init__(f"Snapshot version mismatch: expected {expected}, buffer is at {actual}")
        self.expected = expected
        self.actual = actual


class ChangeNotFoundError(EthioReviewError, KeyError):
    """
    Raised when a change key does not exist in the diff it is applied to.

    This usually means the diff was recomputed after the key was issued.
    """

    def __str__(self) -> str:
        return Exception.__str__(self)


class AnalysisError(EthioReviewError):
    """
    Raised when a document analysis produces unusable output.

    BatchAnalyzer catches this (and any other per-document failure) and
    records the document as failed instead of aborting the batch.
    """

    pass
