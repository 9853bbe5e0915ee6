"""
Configuration for ethioreview analysis.

All options have defaults matching the heuristics the engine was tuned
with. Create a config only if you need to customize behavior, or load
one from YAML with `load_config()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal

import yaml

from ethioreview.exceptions import ConfigurationError


@dataclass
class ValidationConfig:
    """
    Configuration for single-word validation.

    Example:
        >>> config = ValidationConfig(valid_threshold=0.7)
        >>> WordValidator(config).validate("ሰላም").is_valid
        True
    """

    # A word is valid only when it has no issues AND confidence exceeds this
    valid_threshold: float = 0.6

    # Confidence given to tokens without any Ethiopic character
    non_ethiopic_confidence: float = 0.9

    # Length adjustments (not reported as issues)
    min_length: int = 2
    short_word_penalty: float = 0.2
    max_length: int = 20
    long_word_penalty: float = 0.3

    def __post_init__(self):
        """Validate configuration."""
        for name in ("valid_threshold", "non_ethiopic_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be between 0.0 and 1.0, got {value}")
        if self.min_length < 1:
            raise ConfigurationError(f"min_length must be >= 1, got {self.min_length}")
        if self.max_length < self.min_length:
            raise ConfigurationError(
                f"max_length must be >= min_length, got {self.max_length} < {self.min_length}"
            )


@dataclass
class DetectionConfig:
    """
    Configuration for whole-text corruption detection.

    The corruption score is deliberately NOT clamped before it is bucketed,
    so several triggered pattern checks always land in "high".
    """

    medium_threshold: float = 0.3
    high_threshold: float = 0.6

    # Pattern-check increments
    noise_run_increment: float = 0.3
    uppercase_digit_increment: float = 0.2
    mixed_script_increment: float = 0.3

    # Extra vocabulary counted as domain content (supplements the built-in lexicon)
    additional_vocabulary: set[str] = field(default_factory=set)

    def __post_init__(self):
        """Validate configuration."""
        if not 0.0 <= self.medium_threshold <= self.high_threshold:
            raise ConfigurationError(
                f"thresholds must satisfy 0 <= medium <= high, "
                f"got {self.medium_threshold} / {self.high_threshold}"
            )
        self.additional_vocabulary = set(self.additional_vocabulary)


@dataclass
class BatchConfig:
    """Configuration for batch analysis and bulk correction."""

    parallel: bool = False
    max_workers: int = 4

    # Number of entries kept in BatchResult.common_issues
    top_issues: int = 10

    # Only suggestions at or above this confidence are auto-applied in bulk
    auto_apply_confidence: float = 0.8

    def __post_init__(self):
        """Validate configuration."""
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.top_issues < 1:
            raise ConfigurationError(f"top_issues must be >= 1, got {self.top_issues}")
        if not 0.0 <= self.auto_apply_confidence <= 1.0:
            raise ConfigurationError(
                f"auto_apply_confidence must be between 0.0 and 1.0, "
                f"got {self.auto_apply_confidence}"
            )


@dataclass
class ReviewConfig:
    """Configuration for the interactive diff review layer."""

    mode: Literal["word", "line"] = "word"

    # Seconds without edits before a re-analysis is due
    quiescence_delay: float = 0.5

    # LCS tables larger than this (rows * cols) are logged as oversized
    max_diff_cells: int = 4_000_000

    def __post_init__(self):
        """Validate configuration."""
        if self.mode not in ("word", "line"):
            raise ConfigurationError(f"mode must be one of ('word', 'line'), got {self.mode!r}")
        if self.quiescence_delay < 0:
            raise ConfigurationError(
                f"quiescence_delay must be >= 0, got {self.quiescence_delay}"
            )
        if self.max_diff_cells < 1:
            raise ConfigurationError(f"max_diff_cells must be >= 1, got {self.max_diff_cells}")


@dataclass
class AnalysisConfig:
    """
    Top-level configuration.

    Example:
        >>> config = AnalysisConfig(batch=BatchConfig(parallel=True))
        >>> result = BatchAnalyzer(config).analyze_batch(documents)
    """

    validation: ValidationConfig = field(default_factory=ValidationConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)

    @classmethod
    def strict(cls) -> AnalysisConfig:
        """Flag more words and bucket corruption earlier."""
        return cls(
            validation=ValidationConfig(valid_threshold=0.75),
            detection=DetectionConfig(medium_threshold=0.2, high_threshold=0.45),
            batch=BatchConfig(auto_apply_confidence=0.9),
        )

    @classmethod
    def lenient(cls) -> AnalysisConfig:
        """Tolerate noisier scans before flagging them."""
        return cls(
            validation=ValidationConfig(valid_threshold=0.5),
            detection=DetectionConfig(medium_threshold=0.4, high_threshold=0.75),
            batch=BatchConfig(auto_apply_confidence=0.75),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisConfig:
        """
        Build a config from nested mappings (e.g. parsed YAML).

        Unknown sections or keys raise ConfigurationError.
        """
        sections = {
            "validation": ValidationConfig,
            "detection": DetectionConfig,
            "batch": BatchConfig,
            "review": ReviewConfig,
        }
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for name, section_cls in sections.items():
            values = data.get(name) or {}
            allowed = {f.name for f in fields(section_cls)}
            bad = set(values) - allowed
            if bad:
                raise ConfigurationError(f"Unknown keys in '{name}': {sorted(bad)}")
            kwargs[name] = section_cls(**values)
        return cls(**kwargs)


def load_config(path: str | Path) -> AnalysisConfig:
    """
    Load an AnalysisConfig from a YAML file.

    Args:
        path: Path to YAML file with optional sections
            `validation`, `detection`, `batch`, `review`.

    Returns:
        Parsed and validated AnalysisConfig.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the YAML is malformed or has invalid values
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed YAML in {path}: {e}") from e

    if data is None:
        return AnalysisConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")
    return AnalysisConfig.from_dict(data)
