"""
Tests for the base view and the list-like surface every view shares:
construction, indexing, iteration and the aggregate methods.
"""

import pytest

from commons import ImmutableWriteError, LiveArrayError
from live_array import AccessorArray, LiveArray

BASE = [2, 5, 10, 16, 200, 16]


def is_odd(n, _):
    return n % 2 == 1


def is_gt10(n, _):
    return n > 10


def doubles(base):
    def set(index, value):
        base[index] = value / 2
    return LiveArray.from_options({
        'get_length': lambda: len(base),
        'get': lambda index: base[index] * 2,
        'set': set,
    })


# =============================================================================
# from_sequence
# =============================================================================


def test_sequence_length():
    assert LiveArray.from_sequence(BASE).length == len(BASE)
    assert len(LiveArray.from_sequence(BASE)) == len(BASE)


@pytest.mark.parametrize("idx", [0, 1, 2, 3])
def test_sequence_indexed_values(idx):
    live = LiveArray.from_sequence(BASE)
    assert live[idx] == BASE[idx]


def test_sequence_read_past_end_is_none():
    live = LiveArray.from_sequence([1, 2])
    assert live[2] is None


def test_sequence_negative_bracket_read_is_none():
    live = LiveArray.from_sequence(BASE)
    assert live[-1] is None
    assert live.at(-1) == BASE[-1]


def test_sequence_changes_propagate_both_ways():
    base = [2, 5, 10]
    live = LiveArray.from_sequence(base)
    base[1] = 4
    assert live[1] == 4
    base.append(20)
    assert live.length == 4
    assert live[3] == 20
    live[0] = -10
    assert base[0] == -10


def test_sequence_mapped():
    base = list(BASE)
    live = LiveArray.from_sequence_mapped(base, lambda n: n * 2, lambda n: n / 2)
    assert live[3] == base[3] * 2
    live[1] = 100
    assert base[1] == 50


def test_sequence_mapped_without_backward_is_read_only():
    live = LiveArray.from_sequence_mapped([1, 2], lambda n: n * 2)
    assert live.to_list() == [2, 4]
    with pytest.raises(ImmutableWriteError):
        live[0] = 1


# =============================================================================
# from_options / AccessorArray
# =============================================================================


def test_options_length_and_get():
    live = doubles(list(BASE))
    assert live.length == len(BASE)
    assert live[3] == BASE[3] * 2


def test_options_set():
    base = [1, 3, 5, 6, 7]
    live = doubles(base)
    live[3] = 100
    assert base[3] == 50


def test_options_without_set_is_read_only():
    live = LiveArray.from_options({'get_length': lambda: 5, 'get': lambda i: i})
    with pytest.raises(ImmutableWriteError, match="read-only"):
        live[4] = 5


def test_immutable_write_is_a_live_array_error():
    live = AccessorArray(lambda: 1, lambda i: i)
    with pytest.raises(LiveArrayError):
        live.set(0, 1)


def test_accessor_errors_propagate_unchanged():
    def get(index):
        raise KeyError(index)
    live = AccessorArray(lambda: 3, get)
    with pytest.raises(KeyError):
        live.for_each(lambda item, i: None)


# =============================================================================
# Indexing and iteration
# =============================================================================


def test_at_wraps_negative_indices():
    live = LiveArray.from_sequence(BASE)
    assert live.at(-2) == BASE[-2]
    assert live.at(1) == BASE[1]


def test_negative_bracket_index_is_not_wrapped():
    seen = []
    def get(index):
        seen.append(index)
        return index
    live = AccessorArray(lambda: 5, get)
    assert live[-1] == -1
    assert live.at(-1) == 4
    assert seen == [-1, 4]


def test_bracket_slice_realizes_a_list():
    live = LiveArray.from_sequence(BASE)
    assert live[1:3] == BASE[1:3]
    assert live[::-1] == BASE[::-1]
    assert live[-2:] == BASE[-2:]


def test_iteration_is_restartable():
    base = [1, 2]
    live = LiveArray.from_sequence(base)
    assert [item for item in live] == [1, 2]
    base.append(3)
    assert [item for item in live] == [1, 2, 3]


def test_spreadable():
    live = LiveArray.from_sequence([3, -1])
    string = "abcdefghijklmnop"
    assert string[slice(*live)] == string[3:-1]


def test_contains():
    live = LiveArray.from_sequence(BASE)
    assert 10 in live
    assert 11 not in live


def test_repr_shows_elements():
    assert repr(LiveArray.from_sequence([1, 2])) == "AccessorArray([1, 2])"


# =============================================================================
# Aggregates
# =============================================================================


def test_reduce():
    live = LiveArray.from_sequence(BASE)
    reducer = lambda accum, value, idx: accum + value * idx
    weighted = sum(value * idx for idx, value in enumerate(BASE))
    assert live.reduce(reducer) == BASE[0] + weighted
    assert live.reduce(reducer, 5) == 5 + weighted


def test_reduce_empty_without_seed_reads_index_zero():
    assert LiveArray.from_sequence([]).reduce(lambda a, v, i: a + v) is None


def test_find_and_find_index():
    live = LiveArray.from_sequence([2, 4, 5, 6, 8, 9, 10])
    assert live.find(is_odd) == 5
    assert live.find_index(is_odd) == 2
    assert live.find(is_gt10) is None
    assert live.find_index(is_gt10) == -1


def test_some():
    assert not LiveArray.from_sequence([2, 4, 6]).some(is_odd)
    assert LiveArray.from_sequence([2, 4, 5, 6]).some(is_odd)


def test_every():
    assert not LiveArray.from_sequence([1, 3, 5, 6]).every(is_odd)
    assert LiveArray.from_sequence([1, 3, 5, 7]).every(is_odd)


@pytest.mark.parametrize("n", range(10))
def test_index_of_and_last_index_of(n):
    live = LiveArray.from_sequence(BASE)
    first = BASE.index(n) if n in BASE else -1
    last = max((i for i, v in enumerate(BASE) if v == n), default=-1)
    assert live.index_of(n) == first
    assert live.last_index_of(n) == last


def test_last_index_of_starts_at_length():
    seen = []
    def get(index):
        seen.append(index)
        return index
    AccessorArray(lambda: 3, get).last_index_of(-5)
    assert seen == [3, 2, 1, 0]


def test_last_index_of_from_index():
    live = LiveArray.from_sequence(BASE)
    assert live.last_index_of(16, 4) == 3


def test_join():
    base = ["hello", " ", "world"]
    assert LiveArray.from_sequence(base).join() == ",".join(base)
    assert LiveArray.from_sequence([1, 2, 3]).join("|") == "1|2|3"
    assert LiveArray.from_sequence([]).join() == ""


def test_includes():
    live = LiveArray.from_sequence(BASE)
    live_slice = live.slice(3, 6)
    live_slice_live = live.slice_live(3, 6)
    for c in range(len(BASE)):
        assert live.includes(c) == (c in BASE)
        assert (c in live_slice) == (c in BASE[3:6])
        assert live_slice_live.includes(c) == (c in BASE[3:6])


def test_slice():
    live = LiveArray.from_sequence(BASE)
    assert live.slice(2, 4) == BASE[2:4]
    assert live.slice(3, -2) == BASE[3:-2]
    assert live.slice(2) == BASE[2:]


def test_map():
    live = LiveArray.from_sequence(BASE)
    assert live.map(lambda n, i: n * i) == [n * i for i, n in enumerate(BASE)]


def test_filter():
    live = LiveArray.from_sequence(BASE)
    assert live.filter(is_odd) == [n for n in BASE if n % 2 == 1]


def test_for_each():
    live = LiveArray.from_sequence(["a", "b", "z"])
    parts = []
    live.for_each(lambda item, i: parts.append(f"{item}{i}"))
    assert "".join(parts) == "a0b1z2"


def test_length_read_once_per_method():
    length_reads = 0

    def get_length():
        nonlocal length_reads
        length_reads += 1
        return len(BASE)

    live = AccessorArray(get_length, lambda i: BASE[i] if i < len(BASE) else None)
    for _ in live:
        pass
    live.for_each(lambda item, i: None)
    live.map(lambda item, i: None)
    live.find(lambda item, i: False)
    live.find_index(lambda item, i: False)
    live.includes(0)
    live.index_of(0)
    live.reduce(lambda accum, item, i: 0)
    live.some(lambda item, i: False)
    live.every(lambda item, i: True)
    live.join()
    live.last_index_of(0)
    live.filter(lambda item, i: False)
    assert length_reads == 13


def test_to_list_reads_length_once():
    length_reads = 0

    def get_length():
        nonlocal length_reads
        length_reads += 1
        return 3

    live = AccessorArray(get_length, lambda i: i)
    assert live.to_list() == [0, 1, 2]
    assert length_reads == 1
