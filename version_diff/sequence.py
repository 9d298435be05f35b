"""
Sequence Differ v1.0.0
======================
Minimal edit scripts over sequences of hashable tokens.

Two engines share one contract, SequenceDiffer.diff(old, new) -> List[Op]:

- MyersDiffer: Eugene W. Myers' O(ND) greedy search ("An O(ND) Difference
  Algorithm and Its Variations", 1986) with a recorded trace and
  back-tracking. Deletions are taken before insertions on ties, so within
  a change block the removed tokens come first and matches stay as early
  as possible.
- DmpDiffer: maps every distinct token onto a single code point and hands
  the resulting strings to diff-match-patch, the same trick the library
  uses for line mode.

Replaying EQUAL and DELETE ops yields the old sequence; EQUAL and INSERT
ops yield the new one. Both engines fall back to a coarse replace (all of
the differing middle deleted, then all of it inserted) once an input
exceeds the configured size or edit-distance cap.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

import diff_match_patch as dmp_module

from config_logging import (
    get_logger, InvalidInput, ProcessingError,
    DEFAULT_MAX_LINES, DEFAULT_MAX_EDIT_DISTANCE, DEFAULT_MAX_SEARCH_STEPS,
    KNOWN_ENGINES
)

logger = get_logger('version_diff.sequence')


class OpTag(Enum):
    """Edit operation kind."""
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass
class Op:
    """
    One step of an edit script.

    Attributes:
        tag: EQUAL, INSERT or DELETE
        value: The token (taken from old for EQUAL/DELETE, from new for INSERT)
        old_index: 0-based position in old (None for INSERT)
        new_index: 0-based position in new (None for DELETE)
    """
    tag: OpTag
    value: Any
    old_index: Optional[int] = None
    new_index: Optional[int] = None


class _EditLimitExceeded(Exception):
    """Internal signal that the Myers search went past max_edit_distance."""


def common_affix(old: Sequence[Hashable], new: Sequence[Hashable]) -> Tuple[int, int]:
    """Return the lengths of the common prefix and common suffix."""
    limit = min(len(old), len(new))
    prefix = 0
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    while (suffix < limit - prefix
           and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]):
        suffix += 1
    return prefix, suffix


def _equal_run(old: Sequence, old_start: int, new_start: int, count: int) -> List[Op]:
    return [
        Op(OpTag.EQUAL, old[old_start + i], old_start + i, new_start + i)
        for i in range(count)
    ]


class SequenceDiffer:
    """
    Base class for sequence differs.

    Subclasses implement _diff_middle(), which only ever sees the part of
    the inputs left over after the common prefix and suffix are stripped.
    """

    name = "base"

    def __init__(self, max_tokens: int = DEFAULT_MAX_LINES):
        if not isinstance(max_tokens, int) or max_tokens < 1:
            raise InvalidInput("max_tokens must be a positive integer", parameter='max_tokens')
        self.max_tokens = max_tokens

    def diff(self, old: Sequence[Hashable], new: Sequence[Hashable]) -> List[Op]:
        """
        Compute an edit script turning old into new.

        Args:
            old: Original token sequence
            new: New token sequence

        Returns:
            Ordered list of Op
        """
        old = list(old)
        new = list(new)

        if old == new:
            return _equal_run(old, 0, 0, len(old))

        prefix, suffix = common_affix(old, new)
        old_mid = old[prefix:len(old) - suffix]
        new_mid = new[prefix:len(new) - suffix]

        ops = _equal_run(old, 0, 0, prefix)

        if len(old) + len(new) > self.max_tokens:
            logger.warning(
                f"Input of {len(old)}+{len(new)} tokens exceeds cap of {self.max_tokens}; "
                f"using coarse replace",
                engine=self.name, old_tokens=len(old), new_tokens=len(new)
            )
            middle = self._coarse_replace(old_mid, new_mid)
        elif not set(old_mid).intersection(new_mid):
            # Nothing left to match: the replace is already minimal
            middle = self._coarse_replace(old_mid, new_mid)
        else:
            try:
                middle = self._diff_middle(old_mid, new_mid)
            except _EditLimitExceeded:
                logger.warning(
                    "Edit distance exceeds search limit; using coarse replace",
                    engine=self.name, old_tokens=len(old_mid), new_tokens=len(new_mid)
                )
                middle = self._coarse_replace(old_mid, new_mid)

        for op in middle:
            if op.old_index is not None:
                op.old_index += prefix
            if op.new_index is not None:
                op.new_index += prefix
            ops.append(op)

        ops.extend(_equal_run(old, len(old) - suffix, len(new) - suffix, suffix))
        return ops

    @staticmethod
    def _coarse_replace(old: Sequence, new: Sequence) -> List[Op]:
        ops = [Op(OpTag.DELETE, token, i, None) for i, token in enumerate(old)]
        ops.extend(Op(OpTag.INSERT, token, None, j) for j, token in enumerate(new))
        return ops

    def _diff_middle(self, old: Sequence, new: Sequence) -> List[Op]:
        raise NotImplementedError


class MyersDiffer(SequenceDiffer):
    """Pure-Python Myers differ with trace-back."""

    name = "myers"

    def __init__(self, max_tokens: int = DEFAULT_MAX_LINES,
                 max_edit_distance: int = DEFAULT_MAX_EDIT_DISTANCE,
                 max_search_steps: int = DEFAULT_MAX_SEARCH_STEPS):
        super().__init__(max_tokens)
        if not isinstance(max_edit_distance, int) or max_edit_distance < 1:
            raise InvalidInput("max_edit_distance must be a positive integer",
                               parameter='max_edit_distance')
        if not isinstance(max_search_steps, int) or max_search_steps < 1:
            raise InvalidInput("max_search_steps must be a positive integer",
                               parameter='max_search_steps')
        self.max_edit_distance = max_edit_distance
        self.max_search_steps = max_search_steps

    def _diff_middle(self, old: Sequence, new: Sequence) -> List[Op]:
        if not old:
            return [Op(OpTag.INSERT, token, None, j) for j, token in enumerate(new)]
        if not new:
            return [Op(OpTag.DELETE, token, i, None) for i, token in enumerate(old)]

        trace = self._shortest_edit(old, new)
        return self._backtrack(old, new, trace)

    def _shortest_edit(self, old: Sequence, new: Sequence) -> List[Dict[int, int]]:
        """
        Run the forward search and return, for each edit-distance step d,
        the V entries that step reads (diagonals -d+1 .. d-1).

        Raises _EditLimitExceeded once d passes max_edit_distance or the
        diagonal probes plus snake moves pass max_search_steps.
        """
        n, m = len(old), len(new)
        v: Dict[int, int] = {1: 0}
        trace: List[Dict[int, int]] = []
        budget = self.max_search_steps

        for d in range(n + m + 1):
            if d > self.max_edit_distance or budget < 0:
                raise _EditLimitExceeded()
            trace.append({k: v[k] for k in range(-d + 1, d, 2)} if d else dict(v))
            for k in range(-d, d + 1, 2):
                # Move down (insertion) only when it reaches further than moving right
                if k == -d or (k != d and v[k - 1] < v[k + 1]):
                    x = v[k + 1]
                else:
                    x = v[k - 1] + 1
                y = x - k
                start = x
                while x < n and y < m and old[x] == new[y]:
                    x += 1
                    y += 1
                budget -= 1 + x - start
                v[k] = x
                if x >= n and y >= m:
                    return trace

        # Unreachable: d = n + m always reaches the end
        raise ProcessingError("Myers search did not terminate", stage='shortest_edit')

    @staticmethod
    def _backtrack(old: Sequence, new: Sequence, trace: List[Dict[int, int]]) -> List[Op]:
        x, y = len(old), len(new)
        ops: List[Op] = []

        for d in range(len(trace) - 1, -1, -1):
            v = trace[d]
            k = x - y
            if k == -d or (k != d and v[k - 1] < v[k + 1]):
                prev_k = k + 1
            else:
                prev_k = k - 1
            prev_x = v[prev_k]
            prev_y = prev_x - prev_k

            while x > prev_x and y > prev_y:
                x -= 1
                y -= 1
                ops.append(Op(OpTag.EQUAL, old[x], x, y))

            if d > 0:
                if x == prev_x:
                    ops.append(Op(OpTag.INSERT, new[prev_y], None, prev_y))
                else:
                    ops.append(Op(OpTag.DELETE, old[prev_x], prev_x, None))

            x, y = prev_x, prev_y

        ops.reverse()
        return ops


# Code points usable as token stand-ins: skip NUL and the surrogate block
_SURROGATE_START = 0xD800
_SURROGATE_SIZE = 0x800
_MAX_DMP_TOKENS = 0x10FFFF - _SURROGATE_SIZE


def _token_char(index: int) -> str:
    code = index + 1
    if code >= _SURROGATE_START:
        code += _SURROGATE_SIZE
    return chr(code)


class DmpDiffer(SequenceDiffer):
    """Sequence differ backed by diff-match-patch."""

    name = "dmp"

    def __init__(self, max_tokens: int = DEFAULT_MAX_LINES):
        super().__init__(max_tokens)
        self.dmp = dmp_module.diff_match_patch()
        # Exact search only; a timeout enables the non-minimal half-match shortcut
        self.dmp.Diff_Timeout = 0

    def _encode(self, old: Sequence, new: Sequence) -> Tuple[str, str, List[Any]]:
        token_table: List[Any] = []
        token_index: Dict[Any, int] = {}

        def encode(tokens: Sequence) -> str:
            chars = []
            for token in tokens:
                index = token_index.get(token)
                if index is None:
                    index = len(token_table)
                    if index >= _MAX_DMP_TOKENS:
                        raise ProcessingError(
                            f"More than {_MAX_DMP_TOKENS} distinct tokens",
                            stage='dmp_encode'
                        )
                    token_index[token] = index
                    token_table.append(token)
                chars.append(_token_char(index))
            return ''.join(chars)

        return encode(old), encode(new), token_table

    def _diff_middle(self, old: Sequence, new: Sequence) -> List[Op]:
        old_chars, new_chars, _ = self._encode(old, new)
        diffs = self.dmp.diff_main(old_chars, new_chars, False)

        ops: List[Op] = []
        i = j = 0
        for operation, text in diffs:
            count = len(text)
            if operation == self.dmp.DIFF_EQUAL:
                ops.extend(Op(OpTag.EQUAL, old[i + n], i + n, j + n) for n in range(count))
                i += count
                j += count
            elif operation == self.dmp.DIFF_DELETE:
                ops.extend(Op(OpTag.DELETE, old[i + n], i + n, None) for n in range(count))
                i += count
            elif operation == self.dmp.DIFF_INSERT:
                ops.extend(Op(OpTag.INSERT, new[j + n], None, j + n) for n in range(count))
                j += count

        if i != len(old) or j != len(new):
            raise ProcessingError("diff-match-patch output does not cover both inputs",
                                  stage='dmp_expand')
        return ops


def get_differ(engine: str = "myers", max_tokens: int = DEFAULT_MAX_LINES,
               max_edit_distance: int = DEFAULT_MAX_EDIT_DISTANCE) -> SequenceDiffer:
    """
    Build a sequence differ by engine name.

    Args:
        engine: 'myers' or 'dmp'
        max_tokens: Combined old+new length above which a coarse replace is used
        max_edit_distance: Myers search depth limit

    Returns:
        SequenceDiffer instance
    """
    if engine == "myers":
        return MyersDiffer(max_tokens=max_tokens, max_edit_distance=max_edit_distance)
    if engine == "dmp":
        return DmpDiffer(max_tokens=max_tokens)
    raise InvalidInput(
        f"Unknown diff engine: {engine!r}. Must be one of {', '.join(KNOWN_ENGINES)}",
        parameter='engine'
    )
