"""
Context collapsing for unified diff rows.

Runs of UNCHANGED rows longer than the threshold are cut down to the
context rows nearest the surrounding changes, with one SEPARATOR row in
place of the hidden part. A run at the very start keeps only its last
context rows, a run at the very end only its first. Runs at or below the
threshold are left alone.
"""

from typing import List

from config_logging import InvalidInput, DEFAULT_CONTEXT_LINES, DEFAULT_COLLAPSE_THRESHOLD

from .models import DiffLine, LineKind


def validate_context(context_lines: int, threshold: int):
    """Raise InvalidInput unless 0 <= 2 * context_lines <= threshold."""
    if not isinstance(context_lines, int) or isinstance(context_lines, bool) or context_lines < 0:
        raise InvalidInput("context_lines must be a non-negative integer",
                           parameter='context_lines', value=repr(context_lines))
    if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 0:
        raise InvalidInput("collapse_threshold must be a non-negative integer",
                           parameter='collapse_threshold', value=repr(threshold))
    if threshold < 2 * context_lines:
        raise InvalidInput(
            f"collapse_threshold ({threshold}) must be at least twice "
            f"context_lines ({context_lines})",
            parameter='collapse_threshold'
        )


def collapse_context(
    lines: List[DiffLine],
    context_lines: int = DEFAULT_CONTEXT_LINES,
    threshold: int = DEFAULT_COLLAPSE_THRESHOLD
) -> List[DiffLine]:
    """
    Collapse long unchanged runs into separator rows.

    Args:
        lines: Unified rows without separators
        context_lines: Unchanged rows kept next to each change
        threshold: Longest unchanged run left untouched

    Returns:
        New list of rows
    """
    validate_context(context_lines, threshold)

    result: List[DiffLine] = []
    total = len(lines)
    i = 0

    while i < total:
        if lines[i].kind != LineKind.UNCHANGED:
            result.append(lines[i])
            i += 1
            continue

        j = i
        while j < total and lines[j].kind == LineKind.UNCHANGED:
            j += 1
        run = lines[i:j]
        at_start = i == 0
        at_end = j == total

        if len(run) <= threshold or (at_start and at_end):
            result.extend(run)
        else:
            head = [] if at_start else run[:context_lines]
            tail = [] if at_end else run[len(run) - context_lines:]
            result.extend(head)
            result.append(DiffLine.separator(len(run) - len(head) - len(tail)))
            result.extend(tail)

        i = j

    return result


def longest_unchanged_run(lines: List[DiffLine]) -> int:
    """Length of the longest run of consecutive UNCHANGED rows."""
    longest = current = 0
    for line in lines:
        if line.kind == LineKind.UNCHANGED:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest
