"""
Interactive review state.

A ReviewSession owns the two buffers a reviewer works on, "base" (the
original OCR text) and "proposal" (the current correction), plus the
set of ignored words and the display mode. It is single-writer: callers
serialize actions on one session.

Re-analysis after typing is debounced: `notify_edit()` records the edit
time and `poll()` only recomputes once no edit has arrived for
`quiescence_delay` seconds. Runs that are superseded before they finish
are discarded whole by the ReanalysisGate.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

from ethioreview.analysis.quality import QualityReportGenerator
from ethioreview.config import ReviewConfig
from ethioreview.diff import BufferUpdate, ChangeKey, DiffEngine, DiffResult, LineRow
from ethioreview.exceptions import StaleSnapshotError
from ethioreview.models import QualityReport

logger = logging.getLogger(__name__)


class ReanalysisGate:
    """
    Per-document run tokens with last-started-run-wins semantics.

    Each `begin()` supersedes every earlier run of the same document; a
    superseded run's result is dropped when it completes, even if it
    completes after the newer one.

    Example:
        >>> gate = ReanalysisGate()
        >>> first = gate.begin("doc")
        >>> second = gate.begin("doc")
        >>> gate.complete("doc", first, "stale")
        False
        >>> gate.complete("doc", second, "fresh"), gate.result("doc")
        (True, 'fresh')
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._latest: dict[str, int] = {}
        self._results: dict[str, Any] = {}
        self._lock = threading.Lock()

    def begin(self, document_id: str) -> int:
        with self._lock:
            run_id = next(self._ids)
            self._latest[document_id] = run_id
            return run_id

    def is_current(self, document_id: str, run_id: int) -> bool:
        with self._lock:
            return self._latest.get(document_id) == run_id

    def complete(self, document_id: str, run_id: int, result: Any) -> bool:
        """Publish a run's result; returns False if the run was superseded."""
        with self._lock:
            if self._latest.get(document_id) != run_id:
                logger.debug("Discarding superseded run %d for %r", run_id, document_id)
                return False
            self._results[document_id] = result
            return True

    def result(self, document_id: str) -> Any | None:
        with self._lock:
            return self._results.get(document_id)


class ReviewSession:
    """
    Holds base/proposal buffers and applies reviewer actions to them.

    Example:
        >>> session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት")
        >>> session.outstanding_count
        1
        >>> session.accept(session.result.changes[0].key)
        >>> session.base, session.outstanding_count
        ('ሰላም ዓለማት', 0)
    """

    def __init__(
        self,
        original: str,
        current: str,
        document_id: str = "",
        config: ReviewConfig | None = None,
        engine: DiffEngine | None = None,
        ignored_words: Iterable[str] = (),
        quality: QualityReportGenerator | None = None,
        gate: ReanalysisGate | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.document_id = document_id
        self.config = config or ReviewConfig()
        self.engine = engine or DiffEngine(self.config)
        self.quality = quality
        self.gate = gate or ReanalysisGate()
        self.clock = clock

        self.base = original
        self.proposal = current
        self.ignored_words: frozenset[str] = frozenset(ignored_words)
        self.mode = self.config.mode

        # Bumped on every buffer write; the diff is valid for _analyzed_version only
        self.version = 0
        self._analyzed_version = 0
        self._report: QualityReport | None = None
        self._last_edit: float | None = None
        self._dirty = False
        self.result: DiffResult | list[LineRow] = []
        self.reanalyze()

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def reanalyze(self) -> DiffResult | list[LineRow]:
        """Recompute the diff (and quality report, if configured) now."""
        run_id = self.gate.begin(self.document_id)
        version = self.version
        result = self.engine.compare(self.base, self.proposal, self.mode, self.ignored_words)
        report = self.quality.generate(self.proposal, self.document_id) if self.quality else None
        if self.gate.complete(self.document_id, run_id, (result, report)):
            self.result = result
            self._report = report
            self._analyzed_version = version
            self._dirty = self.version != version
        return self.result

    @property
    def report(self) -> QualityReport | None:
        return self._report

    @property
    def outstanding_count(self) -> int:
        if isinstance(self.result, DiffResult):
            return self.result.outstanding_count
        return sum(1 for row in self.result if row.changed)

    def set_mode(self, mode: str) -> None:
        if mode not in ("word", "line"):
            raise ValueError(f"mode must be 'word' or 'line', got {mode!r}")
        self.mode = mode
        self.reanalyze()

    # -------------------------------------------------------------------------
    # Debounced editing
    # -------------------------------------------------------------------------

    def notify_edit(self, proposal: str) -> None:
        """Record a keystroke-level edit of the proposal without re-diffing."""
        self.proposal = proposal
        self.version += 1
        self._last_edit = self.clock()
        self._dirty = True

    def reanalysis_due(self) -> bool:
        if not self._dirty or self._last_edit is None:
            return False
        return self.clock() - self._last_edit >= self.config.quiescence_delay

    def poll(self) -> bool:
        """Re-analyze if the quiescence delay has passed; returns True if it ran."""
        if not self.reanalysis_due():
            return False
        self.reanalyze()
        return True

    # -------------------------------------------------------------------------
    # Reviewer actions
    # -------------------------------------------------------------------------

    def _word_result(self) -> DiffResult:
        """
        The current word diff.

        Raises:
            StaleSnapshotError: If the proposal was edited after the last
                diff. The diff is recomputed first, so callers can retry
                with fresh keys; keys from the old diff are never applied
                to the edited text.
        """
        if self._dirty:
            stale = self._analyzed_version
            self.reanalyze()
            raise StaleSnapshotError(expected=stale, actual=self.version)
        if not isinstance(self.result, DiffResult):
            raise ValueError("Change actions are only available in word mode")
        return self.result

    def apply_update(self, update: BufferUpdate) -> None:
        """Write the buffers named in `update` and re-diff."""
        if update.base is not None:
            self.base = update.base
        if update.proposal is not None:
            self.proposal = update.proposal
        self.version += 1
        self.reanalyze()

    def accept(self, key: ChangeKey) -> None:
        self.apply_update(self.engine.accept(self._word_result(), key))

    def reject(self, key: ChangeKey) -> None:
        self.apply_update(self.engine.reject(self._word_result(), key))

    def accept_all(self) -> None:
        self.apply_update(self.engine.accept_all(self._word_result()))

    def reject_all(self) -> None:
        self.apply_update(self.engine.reject_all(self._word_result()))

    def fix_all_similar(self, key: ChangeKey) -> None:
        self.apply_update(self.engine.fix_all_similar(self._word_result(), key))

    def ignore(self, key: ChangeKey) -> None:
        self.ignored_words = self.engine.ignore(self._word_result(), key)
        self.reanalyze()
