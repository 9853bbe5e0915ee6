"""
Unit tests for review sessions and the re-analysis gate (ethioreview/review.py).
"""

import pytest

from ethioreview.analysis.quality import QualityReportGenerator
from ethioreview.config import ReviewConfig
from ethioreview.diff import DiffResult
from ethioreview.exceptions import StaleSnapshotError
from ethioreview.review import ReanalysisGate, ReviewSession


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestReanalysisGate:
    def test_latest_run_wins(self):
        gate = ReanalysisGate()
        first = gate.begin("doc")
        second = gate.begin("doc")
        assert gate.complete("doc", second, "fresh")
        # The older run finishes last but is discarded whole
        assert not gate.complete("doc", first, "stale")
        assert gate.result("doc") == "fresh"

    def test_documents_are_independent(self):
        gate = ReanalysisGate()
        a = gate.begin("a")
        b = gate.begin("b")
        assert gate.complete("a", a, 1)
        assert gate.complete("b", b, 2)
        assert (gate.result("a"), gate.result("b")) == (1, 2)

    def test_is_current(self):
        gate = ReanalysisGate()
        run = gate.begin("doc")
        assert gate.is_current("doc", run)
        gate.begin("doc")
        assert not gate.is_current("doc", run)

    def test_unknown_document(self):
        assert ReanalysisGate().result("missing") is None


class TestReviewSession:
    def test_initial_diff(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት")
        assert isinstance(session.result, DiffResult)
        assert session.outstanding_count == 1

    def test_accept(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት")
        session.accept(session.result.changes[0].key)
        assert session.base == "ሰላም ዓለማት"
        assert session.outstanding_count == 0

    def test_reject(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት")
        session.reject(session.result.changes[0].key)
        assert session.proposal == "ሰላም ዓለም"
        assert session.outstanding_count == 0

    def test_ignore_keeps_text(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት")
        session.ignore(session.result.changes[0].key)
        assert session.ignored_words == frozenset({"ዓለም"})
        assert (session.base, session.proposal) == ("ሰላም ዓለም", "ሰላም ዓለማት")
        assert session.outstanding_count == 0

    def test_fix_all_similar(self):
        session = ReviewSession("ሥላሴ ቤት ሥላሴ", "ስላሴ ቤት ሥላሴ")
        session.fix_all_similar(session.result.changes[0].key)
        assert session.base == "ስላሴ ቤት ስላሴ"

    def test_accept_all_converges(self):
        session = ReviewSession("ሰላም ዓለም ነው", "ሰላም ውብ ዓለም ናት")
        session.accept_all()
        assert session.base == session.proposal
        assert session.outstanding_count == 0

    def test_reject_all_converges(self):
        session = ReviewSession("ሰላም ዓለም ነው", "ሰላም ውብ ዓለም ናት")
        session.reject_all()
        assert session.proposal == session.base
        assert session.outstanding_count == 0

    def test_line_mode(self):
        session = ReviewSession("ሀ\nለ", "ሀ\nሉ", config=ReviewConfig(mode="line"))
        assert session.outstanding_count == 1
        with pytest.raises(ValueError):
            session.accept_all()

    def test_set_mode(self):
        session = ReviewSession("ሀ\nለ", "ሀ\nሉ")
        session.set_mode("line")
        assert isinstance(session.result, list)
        with pytest.raises(ValueError):
            session.set_mode("char")

    def test_quality_report_published(self):
        session = ReviewSession(
            "ሰላም #ታፖ", "ሰላም ታፖ", document_id="d1", quality=QualityReportGenerator()
        )
        assert session.report is not None
        assert not session.report.assessment.is_corrupted

    def test_reports_stay_per_session_on_shared_gate(self):
        gate = ReanalysisGate()
        quality = QualityReportGenerator()
        noisy = ReviewSession("ሰላም #ታፖ", "ሰላም #ታፖ", quality=quality, gate=gate)
        clean = ReviewSession("ሰላም", "ሰላም", quality=quality, gate=gate)
        assert noisy.report.assessment.is_corrupted
        assert not clean.report.assessment.is_corrupted


class TestEditsBeforeReanalysis:
    """Actions issued between an edit and the next re-diff."""

    def test_action_on_old_diff_is_refused(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት", clock=FakeClock())
        key = session.result.changes[0].key
        session.notify_edit("ሰላም ዓለማት ቤት ትልቅ")

        with pytest.raises(StaleSnapshotError) as exc_info:
            session.reject(key)

        assert (exc_info.value.expected, exc_info.value.actual) == (0, 1)
        # The typed text survives and the diff now reflects it
        assert session.proposal == "ሰላም ዓለማት ቤት ትልቅ"
        assert session.result.proposal == "ሰላም ዓለማት ቤት ትልቅ"
        assert session.outstanding_count == 3

    def test_fresh_keys_work_after_refusal(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለም", clock=FakeClock())
        session.notify_edit("ሰላም ዓለማት")
        with pytest.raises(StaleSnapshotError):
            session.accept_all()
        session.accept_all()
        assert session.base == "ሰላም ዓለማት"
        assert session.outstanding_count == 0

    def test_ignore_also_refused(self):
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለማት", clock=FakeClock())
        key = session.result.changes[0].key
        session.notify_edit("ሰላም ዓለማቱ")
        with pytest.raises(StaleSnapshotError):
            session.ignore(key)
        assert session.ignored_words == frozenset()


class TestDebounce:
    def test_reanalysis_waits_for_quiescence(self):
        clock = FakeClock()
        session = ReviewSession("ሰላም ዓለም", "ሰላም ዓለም", clock=clock)
        assert session.outstanding_count == 0

        session.notify_edit("ሰላም ዓለማት")
        clock.now = 0.2
        assert not session.reanalysis_due()
        assert not session.poll()
        assert session.outstanding_count == 0

        # Another keystroke restarts the delay
        session.notify_edit("ሰላም ዓለማቱ")
        clock.now = 0.6
        assert not session.poll()

        clock.now = 0.8
        assert session.poll()
        assert session.outstanding_count == 1
        assert session.result.changes[0].corrected == "ዓለማቱ"

    def test_nothing_due_without_edits(self):
        session = ReviewSession("ሰላም", "ሰላም", clock=FakeClock(100.0))
        assert not session.reanalysis_due()

    def test_delay_configurable(self):
        clock = FakeClock()
        session = ReviewSession(
            "ሰላም", "ሰላም", config=ReviewConfig(quiescence_delay=2.0), clock=clock
        )
        session.notify_edit("ሰላሞ")
        clock.now = 1.0
        assert not session.reanalysis_due()
        clock.now = 2.0
        assert session.reanalysis_due()
