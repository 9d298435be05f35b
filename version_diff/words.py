"""
Word-level sub-differ for modified line pairs.
"""

from typing import List, Tuple

from .models import SpanKind, WordSpan
from .sequence import OpTag, SequenceDiffer
from .tokenizers import tokenize_words


class WordDiffer:
    """
    Computes word spans for a (removed line, added line) pair.

    Every op becomes one span: equal tokens UNCHANGED spans on both sides,
    deleted tokens REMOVED spans on the old side, inserted tokens ADDED
    spans on the new side. Joining one side's span texts reproduces that
    side's line.
    """

    def __init__(self, differ: SequenceDiffer):
        self.differ = differ

    def spans(self, old_line: str, new_line: str) -> Tuple[List[WordSpan], List[WordSpan]]:
        """
        Word-diff two lines.

        Args:
            old_line: Text of the removed line
            new_line: Text of the added line

        Returns:
            Tuple of (removed_spans, added_spans)
        """
        removed_spans: List[WordSpan] = []
        added_spans: List[WordSpan] = []

        for op in self.differ.diff(tokenize_words(old_line), tokenize_words(new_line)):
            if op.tag == OpTag.EQUAL:
                removed_spans.append(WordSpan(SpanKind.UNCHANGED, op.value))
                added_spans.append(WordSpan(SpanKind.UNCHANGED, op.value))
            elif op.tag == OpTag.DELETE:
                removed_spans.append(WordSpan(SpanKind.REMOVED, op.value))
            else:
                added_spans.append(WordSpan(SpanKind.ADDED, op.value))

        return removed_spans, added_spans
