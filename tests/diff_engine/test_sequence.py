"""
Tests for the Sequence Differ
=============================
Myers and diff-match-patch engines behind the shared Op contract.
"""

import logging
import time

import pytest

from config_logging import InvalidInput
from version_diff.sequence import (
    Op, OpTag, MyersDiffer, DmpDiffer, SequenceDiffer, get_differ, common_affix
)


def replay_old(ops):
    return [op.value for op in ops if op.tag in (OpTag.EQUAL, OpTag.DELETE)]


def replay_new(ops):
    return [op.value for op in ops if op.tag in (OpTag.EQUAL, OpTag.INSERT)]


def edit_count(ops):
    return sum(1 for op in ops if op.tag != OpTag.EQUAL)


@pytest.fixture
def seq_differ(engine) -> SequenceDiffer:
    return get_differ(engine)


class TestDegenerateInputs:
    """Equal and empty inputs."""

    def test_both_empty(self, seq_differ):
        assert seq_differ.diff([], []) == []

    def test_identical_sequences_all_equal(self, seq_differ):
        ops = seq_differ.diff(['a', 'b', 'a'], ['a', 'b', 'a'])
        assert [op.tag for op in ops] == [OpTag.EQUAL] * 3
        assert [(op.old_index, op.new_index) for op in ops] == [(0, 0), (1, 1), (2, 2)]

    def test_old_empty_is_all_insert(self, seq_differ):
        ops = seq_differ.diff([], ['x', 'y'])
        assert [op.tag for op in ops] == [OpTag.INSERT, OpTag.INSERT]
        assert [op.new_index for op in ops] == [0, 1]
        assert all(op.old_index is None for op in ops)

    def test_new_empty_is_all_delete(self, seq_differ):
        ops = seq_differ.diff(['x', 'y'], [])
        assert [op.tag for op in ops] == [OpTag.DELETE, OpTag.DELETE]
        assert [op.old_index for op in ops] == [0, 1]


class TestAlignment:
    """Edit scripts reconstruct both inputs and stay minimal."""

    @pytest.mark.parametrize('old,new', [
        (list('ABCABBA'), list('CBABAC')),
        (['first', 'second', 'third'], ['third', 'first', 'second']),
        (['a', 'b', 'c', 'd', 'e'], ['a', 'c', 'e', 'f']),
    ])
    def test_replay_reconstructs_inputs(self, seq_differ, old, new):
        ops = seq_differ.diff(old, new)
        assert replay_old(ops) == old
        assert replay_new(ops) == new

    def test_minimal_edit_distance(self, seq_differ):
        # Myers' paper example: shortest edit script has length 5
        ops = seq_differ.diff(list('ABCABBA'), list('CBABAC'))
        assert edit_count(ops) == 5

    def test_duplicate_tokens_matched_by_position(self, seq_differ):
        ops = seq_differ.diff(['line A', 'line B', 'line A'], ['line A', 'line C', 'line A'])
        assert ops == [
            Op(OpTag.EQUAL, 'line A', 0, 0),
            Op(OpTag.DELETE, 'line B', 1, None),
            Op(OpTag.INSERT, 'line C', None, 1),
            Op(OpTag.EQUAL, 'line A', 2, 2),
        ]

    def test_indices_are_consistent(self, seq_differ):
        old = ['a', 'x', 'b', 'c', 'y']
        new = ['a', 'b', 'z', 'c']
        for op in seq_differ.diff(old, new):
            if op.old_index is not None:
                assert old[op.old_index] == op.value
            if op.new_index is not None:
                assert new[op.new_index] == op.value

    def test_reorder_is_delete_and_insert(self, seq_differ):
        ops = seq_differ.diff(['first', 'second', 'third'], ['third', 'first', 'second'])
        tags = {op.tag for op in ops}
        assert tags == {OpTag.EQUAL, OpTag.INSERT, OpTag.DELETE}
        assert edit_count(ops) == 2


class TestMyersTieBreak:
    """Deletions come before insertions within a block."""

    def test_single_replacement(self):
        ops = MyersDiffer().diff(['x'], ['y'])
        assert [op.tag for op in ops] == [OpTag.DELETE, OpTag.INSERT]

    def test_block_deletes_first(self):
        ops = MyersDiffer().diff(['k', 'a', 'b', 'k'], ['k', 'c', 'd', 'e', 'k'])
        middle = [op.tag for op in ops[1:-1]]
        assert middle == [OpTag.DELETE] * 2 + [OpTag.INSERT] * 3


class TestResourceGuard:
    """Coarse replace when inputs exceed the caps."""

    def test_token_cap_falls_back_to_coarse_replace(self, caplog):
        differ = MyersDiffer(max_tokens=4)
        old = ['a', 'b', 'c', 'd']
        new = ['a', 'x', 'c', 'y']

        with caplog.at_level(logging.WARNING):
            ops = differ.diff(old, new)

        assert replay_old(ops) == old
        assert replay_new(ops) == new
        # The shared 'c' is no longer matched
        assert not any(op.tag == OpTag.EQUAL and op.value == 'c' for op in ops)
        assert ops[0] == Op(OpTag.EQUAL, 'a', 0, 0)
        assert [op.tag for op in ops[1:]] == [OpTag.DELETE] * 3 + [OpTag.INSERT] * 3
        assert any('coarse replace' in r.getMessage() for r in caplog.records)

    def test_dmp_respects_token_cap(self):
        ops = DmpDiffer(max_tokens=4).diff(['a', 'b', 'c', 'd'], ['a', 'x', 'c', 'y'])
        assert not any(op.tag == OpTag.EQUAL and op.value == 'c' for op in ops)

    def test_edit_distance_cap_falls_back(self):
        differ = MyersDiffer(max_edit_distance=1)
        ops = differ.diff(['p', 'q', 'r'], ['s', 'q', 't'])
        assert replay_old(ops) == ['p', 'q', 'r']
        assert replay_new(ops) == ['s', 'q', 't']
        assert edit_count(ops) == 6

    def test_search_step_budget_falls_back(self, caplog):
        differ = MyersDiffer(max_search_steps=2)
        with caplog.at_level(logging.WARNING):
            ops = differ.diff(['p', 'q', 'r'], ['s', 'q', 't'])
        assert edit_count(ops) == 6
        assert any('search limit' in r.getMessage() for r in caplog.records)

    def test_under_cap_uses_alignment(self):
        ops = MyersDiffer(max_tokens=100).diff(['p', 'q', 'r'], ['s', 'q', 't'])
        assert edit_count(ops) == 4

    def test_disjoint_rewrite_skips_search(self, engine):
        old = [f"old {i}" for i in range(1999)]
        new = [f"new {i}" for i in range(1999)]

        start = time.perf_counter()
        ops = get_differ(engine).diff(old, new)
        elapsed = time.perf_counter() - start

        assert [op.tag for op in ops] == [OpTag.DELETE] * 1999 + [OpTag.INSERT] * 1999
        assert elapsed < 2.0

    def test_near_total_rewrite_is_bounded(self):
        old = [f"line {i}" for i in range(2000)]
        new = [f"line {i}" if i % 100 == 0 else f"new {i}" for i in range(2000)]

        start = time.perf_counter()
        ops = MyersDiffer().diff(old, new)
        elapsed = time.perf_counter() - start

        assert replay_old(ops) == old
        assert replay_new(ops) == new
        # Only the common prefix survives the coarse replace
        assert [op.tag for op in ops].count(OpTag.EQUAL) == 1
        assert elapsed < 5.0


class TestFactory:
    """get_differ and constructor validation."""

    def test_known_engines(self):
        assert isinstance(get_differ('myers'), MyersDiffer)
        assert isinstance(get_differ('dmp'), DmpDiffer)

    def test_unknown_engine_rejected(self):
        with pytest.raises(InvalidInput) as exc_info:
            get_differ('patience')
        assert exc_info.value.parameter == 'engine'

    @pytest.mark.parametrize('bad', [0, -5, 'many'])
    def test_invalid_cap_rejected(self, bad):
        with pytest.raises(InvalidInput):
            MyersDiffer(max_tokens=bad)

    def test_invalid_edit_distance_rejected(self):
        with pytest.raises(InvalidInput):
            MyersDiffer(max_edit_distance=0)

    def test_invalid_search_steps_rejected(self):
        with pytest.raises(InvalidInput) as exc_info:
            MyersDiffer(max_search_steps=0)
        assert exc_info.value.parameter == 'max_search_steps'


class TestCommonAffix:
    """Prefix/suffix stripping helper."""

    def test_overlapping_affixes_do_not_double_count(self):
        assert common_affix(['a', 'a'], ['a', 'a', 'a']) == (2, 0)

    def test_prefix_and_suffix(self):
        assert common_affix(['a', 'b', 'c'], ['a', 'x', 'c']) == (1, 1)
