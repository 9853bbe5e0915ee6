"""
Command-line interface for ethioreview.

Usage:
    # Analyze OCR text files and print a summary
    ethioreview analyze scans/*.txt

    # Parallel analysis with JSON and CSV exports
    ethioreview analyze scans/*.txt --parallel \\
        --json batch.json --csv documents.csv --corrections corrections.csv

    # Suggest corrections for one file and write the corrected text
    ethioreview suggest page1.txt --apply --output page1.fixed.txt

    # Token-level diff between the OCR text and a corrected version
    ethioreview diff page1.txt page1.fixed.txt --ignore ሥላሴ
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tabulate import tabulate

from ethioreview.batch import BatchAnalyzer
from ethioreview.config import AnalysisConfig, load_config
from ethioreview.corrections import BulkCorrectionApplier
from ethioreview.diff import DiffEngine, DiffResult, OpKind
from ethioreview.exceptions import EthioReviewError
from ethioreview.export import corrections_csv, documents_csv, format_summary, save_csv, save_json
from ethioreview.models import OCRDocument

logger = logging.getLogger(__name__)


def read_document(path: Path) -> OCRDocument:
    return OCRDocument(
        document_id=str(path),
        file_name=path.name,
        text=path.read_text(encoding="utf-8"),
    )


def _load_config(args: argparse.Namespace) -> AnalysisConfig:
    config = load_config(args.config) if args.config else AnalysisConfig()
    if getattr(args, "parallel", False):
        config.batch.parallel = True
    if getattr(args, "workers", None):
        config.batch.max_workers = args.workers
    return config


# =============================================================================
# COMMANDS
# =============================================================================


def cmd_analyze(args: argparse.Namespace) -> int:
    config = _load_config(args)
    documents = []
    for path in args.files:
        try:
            documents.append(read_document(path))
        except OSError as e:
            print(f"Error: Cannot read {path}: {e}", file=sys.stderr)
            return 1

    analyzer = BatchAnalyzer(config)
    result = analyzer.analyze_batch(documents)
    print(format_summary(result))

    if args.json:
        save_json(result, args.json)
        print(f"Results saved to: {args.json}")
    if args.csv:
        save_csv(documents_csv(analyzer.rank_documents(result.documents)), args.csv)
        print(f"Document table saved to: {args.csv}")
    if args.corrections:
        save_csv(corrections_csv(analyzer.generate_corrections(documents)), args.corrections)
        print(f"Corrections saved to: {args.corrections}")

    return 0 if result.summary.failed == 0 else 1


def cmd_suggest(args: argparse.Namespace) -> int:
    config = _load_config(args)
    document = read_document(args.file)
    suggestions = BatchAnalyzer(config).generate_corrections([document])

    rows = [
        [s.position.start, s.original, s.corrected, f"{s.confidence:.2f}", s.reason]
        for s in suggestions
        if s.confidence >= args.min_confidence
    ]
    if rows:
        print(tabulate(rows, headers=["Offset", "Original", "Corrected", "Confidence", "Reason"]))
    else:
        print("No suggestions.")

    if args.apply:
        applier = BulkCorrectionApplier(config.batch)
        corrected = applier.apply_bulk_corrections(
            [document], suggestions, min_confidence=args.min_confidence
        )[document.document_id]
        if args.output:
            args.output.write_text(corrected, encoding="utf-8")
            print(f"Corrected text saved to: {args.output}")
        else:
            print()
            print(corrected)
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    config = _load_config(args)
    original = args.original.read_text(encoding="utf-8")
    current = args.current.read_text(encoding="utf-8")

    engine = DiffEngine(config.review)
    result = engine.compare(original, current, args.mode or config.review.mode, args.ignore)

    if isinstance(result, DiffResult):
        rows = [
            [c.kind.value, c.key.i, c.key.j, c.original, c.corrected]
            for c in result.changes
        ]
        if rows:
            print(tabulate(rows, headers=["Kind", "Base", "Proposal", "Original", "Corrected"]))
        print(f"\nOutstanding changes: {result.outstanding_count}")
        print(f"Similarity: {result.similarity:.3f}")
        unflagged = sum(
            1 for s in result.segments if s.kind is not OpKind.EQ and s.key is None
        )
        if unflagged:
            print(f"Unflagged whitespace/punctuation edits: {unflagged}")
        return 0

    changed = [row for row in result if row.changed]
    for idx, row in enumerate(result, start=1):
        if row.changed:
            print(f"{idx:>5} - {row.original}")
            print(f"{idx:>5} + {row.current}")
    print(f"\nChanged lines: {len(changed)}")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ethioreview",
        description="Review OCR output of Ethiopic-script documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a batch of OCR text files")
    analyze.add_argument("files", type=Path, nargs="+", help="UTF-8 text files")
    analyze.add_argument("--parallel", action="store_true", help="Analyze on a thread pool")
    analyze.add_argument("--workers", type=int, help="Max parallel workers")
    analyze.add_argument("--json", type=Path, help="Write the full batch result as JSON")
    analyze.add_argument("--csv", type=Path, help="Write the document table as CSV")
    analyze.add_argument("--corrections", type=Path, help="Write all suggestions as CSV")
    analyze.set_defaults(func=cmd_analyze)

    suggest = sub.add_parser("suggest", help="Suggest corrections for one file")
    suggest.add_argument("file", type=Path)
    suggest.add_argument(
        "--min-confidence",
        type=float,
        default=0.0,
        help="Hide (and do not apply) suggestions below this confidence (default: 0.0)",
    )
    suggest.add_argument("--apply", action="store_true", help="Apply suggestions and clean text")
    suggest.add_argument("--output", "-o", type=Path, help="Where to write the corrected text")
    suggest.set_defaults(func=cmd_suggest)

    diff = sub.add_parser("diff", help="Diff an OCR text against a corrected version")
    diff.add_argument("original", type=Path)
    diff.add_argument("current", type=Path)
    diff.add_argument("--mode", choices=["word", "line"], help="Diff granularity")
    diff.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="WORD",
        help="Token never flagged as a change (repeatable)",
    )
    diff.set_defaults(func=cmd_diff)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except EthioReviewError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
