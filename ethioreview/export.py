"""Structured, tabular and terminal renderings of batch results."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from tabulate import tabulate

from ethioreview.models import BatchResult, CorrectionSuggestion, DocumentAnalysis

DOCUMENT_COLUMNS = (
    "document",
    "qualityScore",
    "grade",
    "corruptionLevel",
    "totalWords",
    "corruptedWords",
)
CORRECTION_COLUMNS = ("document", "original", "corrected", "confidence", "reason")

SUMMARY_ISSUES = 5


# =============================================================================
# STRUCTURED RECORDS
# =============================================================================


def to_record(result: BatchResult) -> dict[str, Any]:
    """Nested, JSON-serializable form of a batch result."""
    return {
        "version": "1.0.0",
        "timestamp": datetime.now().isoformat(),
        **result.to_dict(),
    }


def save_json(result: BatchResult, output_path: str | Path) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(to_record(result), f, indent=2, ensure_ascii=False)


# =============================================================================
# FLAT TABLES
# =============================================================================


def documents_table(documents: Iterable[DocumentAnalysis]) -> list[dict[str, Any]]:
    """One row per document with the fixed document-summary columns."""
    return [
        {
            "document": doc.file_name or doc.document_id,
            "qualityScore": round(doc.quality_score, 4),
            "grade": doc.grade.value,
            "corruptionLevel": doc.corruption_level.value,
            "totalWords": doc.total_words,
            "corruptedWords": doc.corrupted_words,
        }
        for doc in documents
    ]


def corrections_table(suggestions: Iterable[CorrectionSuggestion]) -> list[dict[str, Any]]:
    """One row per suggestion with the fixed correction columns."""
    return [
        {
            "document": s.file_name or s.document_id,
            "original": s.original,
            "corrected": s.corrected,
            "confidence": s.confidence,
            "reason": s.reason,
        }
        for s in suggestions
    ]


def _to_csv(rows: list[dict[str, Any]], columns: tuple[str, ...]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def documents_csv(documents: Iterable[DocumentAnalysis]) -> str:
    return _to_csv(documents_table(documents), DOCUMENT_COLUMNS)


def corrections_csv(suggestions: Iterable[CorrectionSuggestion]) -> str:
    return _to_csv(corrections_table(suggestions), CORRECTION_COLUMNS)


def save_csv(content: str, output_path: str | Path) -> None:
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


# =============================================================================
# TERMINAL SUMMARY
# =============================================================================


def format_summary(result: BatchResult, title: str = "Amharic Document Batch Summary") -> str:
    """Generate a CLI-friendly summary with tables.

    Args:
        result: Batch result to report
        title: Report title

    Returns:
        Formatted string for terminal output
    """
    summary = result.summary
    lines = []
    lines.append("=" * 60)
    lines.append(title)
    lines.append("=" * 60)
    lines.append("")

    lines.append(f"Total Documents: {summary.total_documents}")
    lines.append(f"Successfully Processed: {summary.successfully_processed}")
    lines.append(f"Failed: {summary.failed}")
    lines.append(f"Average Quality: {summary.average_quality * 100:.1f}%")
    lines.append(f"Total Corrupted Words: {summary.total_corrupted_words}")
    lines.append(f"Processing Time: {summary.processing_time_ms:.0f}ms")
    lines.append("")

    if result.documents:
        rows = [
            [
                doc.file_name or doc.document_id,
                doc.grade.value,
                f"{doc.quality_score * 100:.1f}%",
                doc.corruption_level.value,
                f"{doc.corrupted_words}/{doc.total_words}",
            ]
            for doc in result.documents
        ]
        headers = ["Document", "Grade", "Quality", "Corruption", "Corrupted Words"]
        lines.append(tabulate(rows, headers=headers, tablefmt="simple"))
        lines.append("")

    if result.failures:
        lines.append("-" * 40)
        lines.append("Failed Documents:")
        for failure in result.failures:
            lines.append(f"  {failure.file_name or failure.document_id}: {failure.error}")
        lines.append("")

    if result.common_issues:
        lines.append("-" * 40)
        lines.append("Common Issues:")
        rows = [[c.issue, c.frequency] for c in result.common_issues[:SUMMARY_ISSUES]]
        lines.append(tabulate(rows, headers=["Issue", "Occurrences"], tablefmt="simple"))
        lines.append("")

    if result.overall_recommendations:
        lines.append("-" * 40)
        lines.append("Recommendations:")
        for recommendation in result.overall_recommendations:
            lines.append(f"  - {recommendation}")
        lines.append("")

    return "\n".join(lines)
