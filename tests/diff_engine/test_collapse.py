"""
Tests for context collapsing.
"""

import pytest

from config_logging import InvalidInput
from version_diff.collapse import collapse_context, longest_unchanged_run, validate_context
from version_diff.models import DiffLine, LineKind


def U(n):
    return DiffLine(LineKind.UNCHANGED, f"u{n}", old_line_no=n, new_line_no=n)


def A(n):
    return DiffLine(LineKind.ADDED, f"a{n}", new_line_no=n)


def rows(spec):
    """Build rows from a compact string: 'u' unchanged, 'a' added."""
    return [U(i) if ch == 'u' else A(i) for i, ch in enumerate(spec, start=1)]


def kinds(lines):
    return ''.join({
        LineKind.UNCHANGED: 'u',
        LineKind.ADDED: 'a',
        LineKind.REMOVED: 'r',
        LineKind.SEPARATOR: 's',
    }[l.kind] for l in lines)


class TestCollapseBoundaries:
    """Threshold behavior with the default T=6, context=3."""

    def test_interior_run_at_threshold_untouched(self):
        lines = rows('a' + 'u' * 6 + 'a')
        assert collapse_context(lines) == lines

    def test_interior_run_above_threshold_collapses(self):
        lines = rows('a' + 'u' * 7 + 'a')
        result = collapse_context(lines)
        assert kinds(result) == 'auuusuuua'
        separator = result[4]
        assert separator.hidden_line_count == 1
        assert separator.content == '… 1 unchanged line …'

    def test_leading_run_keeps_trailing_context(self):
        result = collapse_context(rows('u' * 10 + 'a'))
        assert kinds(result) == 'suuua'
        assert result[0].hidden_line_count == 7
        assert [l.content for l in result[1:4]] == ['u8', 'u9', 'u10']

    def test_trailing_run_keeps_leading_context(self):
        result = collapse_context(rows('a' + 'u' * 10))
        assert kinds(result) == 'auuus'
        assert result[-1].hidden_line_count == 7
        assert result[-1].content == '… 7 unchanged lines …'

    def test_short_edge_runs_untouched(self):
        lines = rows('uuuuuu' + 'a' + 'uuuuuu')
        assert collapse_context(lines) == lines

    def test_all_unchanged_returned_as_is(self):
        lines = rows('u' * 20)
        assert collapse_context(lines) == lines

    def test_empty(self):
        assert collapse_context([]) == []

    def test_separator_carries_no_line_numbers(self):
        result = collapse_context(rows('u' * 10 + 'a'))
        separator = result[0]
        assert separator.kind == LineKind.SEPARATOR
        assert separator.old_line_no is None
        assert separator.new_line_no is None
        assert separator.word_spans is None

    def test_hidden_counts_add_up(self):
        lines = rows('u' * 12 + 'a' + 'u' * 15 + 'a' + 'u' * 9)
        result = collapse_context(lines)
        hidden = sum(l.hidden_line_count for l in result if l.kind == LineKind.SEPARATOR)
        shown = sum(1 for l in result if l.kind != LineKind.SEPARATOR)
        assert hidden + shown == len(lines)


class TestCollapseSettings:
    """Custom context sizes and validation."""

    def test_zero_context(self):
        result = collapse_context(rows('a' + 'u' * 3 + 'a'), context_lines=0, threshold=2)
        assert kinds(result) == 'asa'
        assert result[1].hidden_line_count == 3

    def test_wider_context(self):
        result = collapse_context(rows('a' + 'u' * 20 + 'a'), context_lines=5, threshold=10)
        assert kinds(result) == 'a' + 'u' * 5 + 's' + 'u' * 5 + 'a'

    @pytest.mark.parametrize('context_lines,threshold', [(-1, 6), (4, 6), (3, -2), ('3', 6)])
    def test_invalid_settings(self, context_lines, threshold):
        with pytest.raises(InvalidInput):
            validate_context(context_lines, threshold)


class TestLongestUnchangedRun:
    """Helper used for diagnostics."""

    def test_longest_run(self):
        assert longest_unchanged_run(rows('uuauuuua')) == 4
        assert longest_unchanged_run([]) == 0
