"""
Block grouping and modification pairing.

A block is a maximal run of consecutive INSERT/DELETE ops between two
EQUAL regions. Within a block holding r deletions and a insertions, the
first min(r, a) deletions are paired position by position with the first
min(r, a) insertions and reported as modified; the surplus is reported as
plain removals or additions. Reordered lines therefore come out as a
removal block and an addition block, never as a move.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from .models import DiffLine, DiffStats, LineKind
from .sequence import Op, OpTag
from .words import WordDiffer


@dataclass
class EqualRun:
    """Consecutive EQUAL ops."""
    ops: List[Op] = field(default_factory=list)


@dataclass
class ChangeBlock:
    """Consecutive non-EQUAL ops, split by direction."""
    deleted: List[Op] = field(default_factory=list)
    inserted: List[Op] = field(default_factory=list)

    @property
    def modified_count(self) -> int:
        return min(len(self.deleted), len(self.inserted))

    @property
    def stats(self) -> DiffStats:
        r, a = len(self.deleted), len(self.inserted)
        return DiffStats(
            added=max(0, a - r),
            removed=max(0, r - a),
            modified=min(r, a)
        )

    def pairs(self) -> List[Tuple[Op, Op]]:
        """Deleted/inserted ops paired by position within the block."""
        count = self.modified_count
        return list(zip(self.deleted[:count], self.inserted[:count]))

    def unpaired_deleted(self) -> List[Op]:
        return self.deleted[self.modified_count:]

    def unpaired_inserted(self) -> List[Op]:
        return self.inserted[self.modified_count:]


Segment = Union[EqualRun, ChangeBlock]


def group_blocks(ops: List[Op]) -> Iterator[Segment]:
    """Split an op list into alternating EqualRun and ChangeBlock segments."""
    current: Optional[Segment] = None

    for op in ops:
        if op.tag == OpTag.EQUAL:
            if not isinstance(current, EqualRun):
                if current is not None:
                    yield current
                current = EqualRun()
            current.ops.append(op)
        else:
            if not isinstance(current, ChangeBlock):
                if current is not None:
                    yield current
                current = ChangeBlock()
            if op.tag == OpTag.DELETE:
                current.deleted.append(op)
            else:
                current.inserted.append(op)

    if current is not None:
        yield current


def _line_no(index: Optional[int]) -> Optional[int]:
    return None if index is None else index + 1


def build_lines(ops: List[Op], word_differ: WordDiffer) -> Tuple[List[DiffLine], DiffStats]:
    """
    Turn a line-level op list into unified diff rows and stats.

    Each modified pair is emitted as a REMOVED row followed by its ADDED
    row, both carrying word spans. Unpaired removals follow the pairs,
    then unpaired additions.

    Args:
        ops: Line-level edit script
        word_differ: Differ used for modified pairs

    Returns:
        Tuple of (lines, stats); no separators are inserted here
    """
    lines: List[DiffLine] = []
    stats = DiffStats()

    for segment in group_blocks(ops):
        if isinstance(segment, EqualRun):
            for op in segment.ops:
                lines.append(DiffLine(
                    kind=LineKind.UNCHANGED,
                    content=op.value,
                    old_line_no=_line_no(op.old_index),
                    new_line_no=_line_no(op.new_index)
                ))
            continue

        stats = stats + segment.stats

        for deleted, inserted in segment.pairs():
            removed_spans, added_spans = word_differ.spans(deleted.value, inserted.value)
            lines.append(DiffLine(
                kind=LineKind.REMOVED,
                content=deleted.value,
                old_line_no=_line_no(deleted.old_index),
                word_spans=removed_spans
            ))
            lines.append(DiffLine(
                kind=LineKind.ADDED,
                content=inserted.value,
                new_line_no=_line_no(inserted.new_index),
                word_spans=added_spans
            ))

        for op in segment.unpaired_deleted():
            lines.append(DiffLine(
                kind=LineKind.REMOVED,
                content=op.value,
                old_line_no=_line_no(op.old_index)
            ))

        for op in segment.unpaired_inserted():
            lines.append(DiffLine(
                kind=LineKind.ADDED,
                content=op.value,
                new_line_no=_line_no(op.new_index)
            ))

    return lines, stats
