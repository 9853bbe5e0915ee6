"""
Token-level diff between an original text and its proposed revision.

The engine is a pure computation: `diff()` aligns two token sequences
with a classic LCS table and turns the result into reviewable changes.
Acting on a change (accept, reject, ignore, fix-all-similar) never
mutates anything; it returns a BufferUpdate holding the rewritten
"base" (original) and/or "proposal" (current) text.

Only changes that involve a word are flagged for review. Whitespace or
punctuation churn travels with a flagged change: the one in its own run
of edits, or else the nearest one before (or after) it. Churn with no
flagged change anywhere is shown but not flagged; `accept_all()` and
`reject_all()` still carry it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from rapidfuzz import fuzz

from ethioreview.config import ReviewConfig
from ethioreview.exceptions import ChangeNotFoundError
from ethioreview.script import normalize_text

logger = logging.getLogger(__name__)


# =============================================================================
# TOKENIZATION
# =============================================================================

# Combining marks that may continue a word (Latin diacritics, Ethiopic marks)
_MARKS = "\u0300-\u036F\u135D-\u135F"
_WORD_BODY = f"[\\w{_MARKS}]"

TOKEN_PATTERN = re.compile(
    f"[^\\W\\d_]{_WORD_BODY}*(?:/{_WORD_BODY}+)?"  # word, optional x/y compound
    r"|\d+"  # digit run
    r"|\s+"  # whitespace run
    r"|(?:[^\w\s]|_)+"  # punctuation / symbol run
)


def tokenize(text: str) -> list[str]:
    """
    Split text into diff units. Joining the tokens gives back the text.

    Example:
        >>> tokenize("ሰላም, 12 ዓለም/ሀገር")
        ['ሰላም', ',', ' ', '12', ' ', 'ዓለም/ሀገር']
    """
    return TOKEN_PATTERN.findall(text)


def is_word(token: str) -> bool:
    """A token is a word if it holds any letter or digit."""
    return any(ch.isalnum() for ch in token)


# =============================================================================
# DATA STRUCTURES
# =============================================================================


class OpKind(Enum):
    EQ = "eq"
    DEL = "del"
    INS = "ins"
    SUB = "sub"


@dataclass(frozen=True)
class DiffOperation:
    """
    One step of the alignment.

    `i` and `j` are the base and proposal cursors when the step happens:
    for INS, `i` is where the token would go in the base; for DEL, `j` is
    where the token would go back into the proposal.
    """

    kind: OpKind
    i: int
    j: int
    before: str = ""
    after: str = ""


@dataclass(frozen=True)
class ChangeKey:
    """Stable identity of a flagged change within one diff."""

    kind: OpKind
    i: int
    j: int


@dataclass(frozen=True)
class Change:
    """
    A flagged change.

    `op_indices` are positions in `DiffResult.ops`: the word-bearing
    operation first, then any non-word churn attached to it.
    """

    key: ChangeKey
    original: str
    corrected: str
    op_indices: tuple[int, ...]

    @property
    def kind(self) -> OpKind:
        return self.key.kind


@dataclass(frozen=True)
class Segment:
    """A renderable piece of the diff; `key` is set on flagged pieces."""

    kind: OpKind
    before: str
    after: str
    key: ChangeKey | None = None


@dataclass(frozen=True)
class BufferUpdate:
    """New buffer contents; None means the buffer is unchanged."""

    base: str | None = None
    proposal: str | None = None


@dataclass(frozen=True)
class LineRow:
    original: str
    current: str
    changed: bool


@dataclass
class DiffResult:
    """Output of DiffEngine.diff."""

    base_tokens: list[str]
    proposal_tokens: list[str]
    ops: list[DiffOperation]
    changes: list[Change] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    ignored_words: frozenset[str] = frozenset()
    similarity: float = 1.0

    @property
    def outstanding_count(self) -> int:
        return len(self.changes)

    @property
    def base(self) -> str:
        return "".join(self.base_tokens)

    @property
    def proposal(self) -> str:
        return "".join(self.proposal_tokens)

    def change(self, key: ChangeKey) -> Change:
        for change in self.changes:
            if change.key == key:
                return change
        raise ChangeNotFoundError(f"No change {key} in this diff")


# =============================================================================
# ALIGNMENT
# =============================================================================


def align(base: list[str], proposal: list[str]) -> list[DiffOperation]:
    """
    LCS alignment into EQ/DEL/INS operations.

    The table is filled from the end; the forward backtrack prefers DEL
    over INS on ties, so deletions come before insertions in a run.
    """
    m, n = len(base), len(proposal)
    lcs = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        row, below = lcs[i], lcs[i + 1]
        for j in range(n - 1, -1, -1):
            if base[i] == proposal[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops: list[DiffOperation] = []
    i = j = 0
    while i < m and j < n:
        if base[i] == proposal[j]:
            ops.append(DiffOperation(OpKind.EQ, i, j, base[i], proposal[j]))
            i += 1
            j += 1
        elif lcs[i + 1][j] >= lcs[i][j + 1]:
            ops.append(DiffOperation(OpKind.DEL, i, j, before=base[i]))
            i += 1
        else:
            ops.append(DiffOperation(OpKind.INS, i, j, after=proposal[j]))
            j += 1
    while i < m:
        ops.append(DiffOperation(OpKind.DEL, i, j, before=base[i]))
        i += 1
    while j < n:
        ops.append(DiffOperation(OpKind.INS, i, j, after=proposal[j]))
        j += 1
    return ops


def merge_substitutions(ops: list[DiffOperation]) -> list[DiffOperation]:
    """Fold DEL immediately followed by INS into SUB when either side is a word."""
    merged: list[DiffOperation] = []
    k = 0
    while k < len(ops):
        op = ops[k]
        nxt = ops[k + 1] if k + 1 < len(ops) else None
        if (
            op.kind is OpKind.DEL
            and nxt is not None
            and nxt.kind is OpKind.INS
            and (is_word(op.before) or is_word(nxt.after))
        ):
            merged.append(DiffOperation(OpKind.SUB, op.i, nxt.j, op.before, nxt.after))
            k += 2
        else:
            merged.append(op)
            k += 1
    return merged


# =============================================================================
# DIFF ENGINE
# =============================================================================


class DiffEngine:
    """
    Computes diffs and the buffer rewrites for reviewer actions.

    Example:
        >>> engine = DiffEngine()
        >>> result = engine.diff("ሰላም ዓለም", "ሰላም ዓለማት")
        >>> [(c.original, c.corrected) for c in result.changes]
        [('ዓለም', 'ዓለማት')]
        >>> engine.accept(result, result.changes[0].key).base
        'ሰላም ዓለማት'
    """

    def __init__(self, config: ReviewConfig | None = None):
        self.config = config or ReviewConfig()

    def diff(
        self,
        original: str,
        current: str,
        ignored_words: Iterable[str] = (),
    ) -> DiffResult:
        """
        Diff two texts at token level.

        Args:
            original: Base text.
            current: Proposed text.
            ignored_words: Token values never flagged, wherever they occur.
        """
        ignored = frozenset(ignored_words)
        base_tokens = tokenize(normalize_text(original))
        proposal_tokens = tokenize(normalize_text(current))

        cells = (len(base_tokens) + 1) * (len(proposal_tokens) + 1)
        if cells > self.config.max_diff_cells:
            logger.warning(
                "Diffing %d x %d tokens (%d cells); consider diffing smaller chunks",
                len(base_tokens),
                len(proposal_tokens),
                cells,
            )

        ops = merge_substitutions(align(base_tokens, proposal_tokens))
        changes, segments = self._flag(ops, ignored)

        return DiffResult(
            base_tokens=base_tokens,
            proposal_tokens=proposal_tokens,
            ops=ops,
            changes=changes,
            segments=segments,
            ignored_words=ignored,
            similarity=fuzz.ratio(
                "".join(base_tokens), "".join(proposal_tokens)
            ) / 100.0,
        )

    @staticmethod
    def _flag(
        ops: list[DiffOperation], ignored: frozenset[str]
    ) -> tuple[list[Change], list[Segment]]:
        def flaggable(op: DiffOperation) -> bool:
            values = [v for v in (op.before, op.after) if v]
            return any(is_word(v) for v in values) and not any(v in ignored for v in values)

        def churn(op: DiffOperation) -> bool:
            return not is_word(op.before) and not is_word(op.after)

        owner: dict[int, int] = {}  # op index -> op index of its flagged change
        orphans: list[tuple[int, int]] = []  # runs with nothing to flag
        k = 0
        while k < len(ops):
            if ops[k].kind is OpKind.EQ:
                k += 1
                continue
            run_end = k
            while run_end < len(ops) and ops[run_end].kind is not OpKind.EQ:
                run_end += 1

            flagged = [x for x in range(k, run_end) if flaggable(ops[x])]
            if flagged:
                for x in flagged:
                    owner[x] = x
                for x in range(k, run_end):
                    if x in owner or not churn(ops[x]):
                        continue
                    preceding = [f for f in flagged if f < x]
                    owner[x] = preceding[-1] if preceding else flagged[0]
            else:
                orphans.append((k, run_end))
            k = run_end

        # Churn-only runs join the nearest flagged change before them, else after
        heads = sorted(x for x, h in owner.items() if x == h)
        for start, end in orphans:
            before = [h for h in heads if h < start]
            after = [h for h in heads if h >= end]
            target = before[-1] if before else (after[0] if after else None)
            if target is None:
                continue
            for x in range(start, end):
                if churn(ops[x]):
                    owner[x] = target

        members: dict[int, list[int]] = {}
        for x, head in sorted(owner.items()):
            if x != head:
                members.setdefault(head, []).append(x)

        keys: dict[int, ChangeKey] = {}
        changes: list[Change] = []
        for head in sorted(x for x, h in owner.items() if x == h):
            op = ops[head]
            key = ChangeKey(op.kind, op.i, op.j)
            keys[head] = key
            changes.append(Change(key, op.before, op.after, (head, *members.get(head, []))))

        segments = [
            Segment(op.kind, op.before, op.after, keys[owner[x]] if x in owner else None)
            for x, op in enumerate(ops)
        ]
        return changes, segments

    # -------------------------------------------------------------------------
    # Line mode
    # -------------------------------------------------------------------------

    @staticmethod
    def diff_lines(original: str, current: str) -> list[LineRow]:
        """Pair lines by index; the shorter side is padded with empty lines."""
        left = original.replace("\r\n", "\n").split("\n")
        right = current.replace("\r\n", "\n").split("\n")
        rows = []
        for idx in range(max(len(left), len(right))):
            o = left[idx] if idx < len(left) else ""
            c = right[idx] if idx < len(right) else ""
            rows.append(LineRow(o, c, o != c))
        return rows

    def compare(
        self,
        original: str,
        current: str,
        mode: str | None = None,
        ignored_words: Iterable[str] = (),
    ) -> DiffResult | list[LineRow]:
        """Dispatch to word or line mode (default from ReviewConfig.mode)."""
        mode = mode or self.config.mode
        if mode == "line":
            return self.diff_lines(original, current)
        if mode == "word":
            return self.diff(original, current, ignored_words)
        raise ValueError(f"mode must be 'word' or 'line', got {mode!r}")

    # -------------------------------------------------------------------------
    # Reviewer actions
    # -------------------------------------------------------------------------

    @staticmethod
    def _rebuild_base(result: DiffResult, accepted: set[int]) -> str:
        return "".join(
            op.after if x in accepted else op.before for x, op in enumerate(result.ops)
        )

    @staticmethod
    def _rebuild_proposal(result: DiffResult, rejected: set[int]) -> str:
        return "".join(
            op.before if x in rejected else op.after for x, op in enumerate(result.ops)
        )

    def accept(self, result: DiffResult, key: ChangeKey) -> BufferUpdate:
        """Take the proposal's side of one change into the base."""
        change = result.change(key)
        return BufferUpdate(base=self._rebuild_base(result, set(change.op_indices)))

    def reject(self, result: DiffResult, key: ChangeKey) -> BufferUpdate:
        """Restore the base's side of one change in the proposal."""
        change = result.change(key)
        return BufferUpdate(proposal=self._rebuild_proposal(result, set(change.op_indices)))

    @staticmethod
    def _unignored_edits(result: DiffResult) -> set[int]:
        """Every non-EQ op except those touching an ignored word."""
        return {
            x
            for x, op in enumerate(result.ops)
            if op.kind is not OpKind.EQ
            and not any(v in result.ignored_words for v in (op.before, op.after) if v)
        }

    def accept_all(self, result: DiffResult) -> BufferUpdate:
        """
        Take every edit into the base, unflagged churn included.

        Only edits of ignored words are left out, so afterwards the base
        equals the proposal up to those words.
        """
        return BufferUpdate(base=self._rebuild_base(result, self._unignored_edits(result)))

    def reject_all(self, result: DiffResult) -> BufferUpdate:
        return BufferUpdate(
            proposal=self._rebuild_proposal(result, self._unignored_edits(result))
        )

    def ignore(self, result: DiffResult, key: ChangeKey) -> frozenset[str]:
        """
        Return the ignore set extended with this change's token.

        Insertions ignore the inserted token; deletions and substitutions
        ignore the original token. Text is not touched.
        """
        change = result.change(key)
        token = change.corrected if change.kind is OpKind.INS else change.original
        return result.ignored_words | {token}

    def fix_all_similar(self, result: DiffResult, key: ChangeKey) -> BufferUpdate:
        """Replace every base token equal to a substitution's original."""
        change = result.change(key)
        if change.kind is not OpKind.SUB:
            raise ValueError(f"fix_all_similar applies to substitutions only, got {change.kind.value}")
        base = "".join(
            change.corrected if token == change.original else token
            for token in result.base_tokens
        )
        return BufferUpdate(base=base)
