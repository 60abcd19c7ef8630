"""Tests for line/column conversion and the per-filename LRU cache."""

from __future__ import annotations

import pytest

from solengine.locations import DEFAULT_CACHE_SIZE, LineColumnFinder, LocationCache, make_cache

# ---------------------------------------------------------------------------
# LineColumnFinder
# ---------------------------------------------------------------------------


def test_to_index_first_line():
    finder = LineColumnFinder("abc\ndef")
    assert finder.to_index(1, 1) == 0
    assert finder.to_index(1, 3) == 2


def test_to_index_later_lines():
    finder = LineColumnFinder("abc\ndef\nghi")
    assert finder.to_index(2, 1) == 4
    assert finder.to_index(3, 2) == 9


def test_newline_position_is_addressable():
    """The newline closing a line is its last column."""
    finder = LineColumnFinder("ab\ncd")
    assert finder.to_index(1, 3) == 2


def test_carriage_return_is_an_ordinary_character():
    finder = LineColumnFinder("a\r\nb")
    assert finder.line_count == 2
    assert finder.to_index(2, 1) == 3


def test_empty_text_has_one_line():
    finder = LineColumnFinder("")
    assert finder.line_count == 1
    assert finder.to_index(1, 1) == 0


@pytest.mark.parametrize(("line", "column"), [(0, 1), (3, 1), (1, 0), (1, 5)])
def test_to_index_out_of_range(line, column):
    finder = LineColumnFinder("abc\nde")
    with pytest.raises(ValueError, match="out of range"):
        finder.to_index(line, column)


def test_from_index_inverts_to_index():
    text = "pragma solidity ^0.8.0;\ncontract C {\n}\n"
    finder = LineColumnFinder(text)
    for index in (0, 5, 24, 30, len(text) - 1):
        line, column = finder.from_index(index)
        assert finder.to_index(line, column) == index


def test_from_index_out_of_range():
    with pytest.raises(ValueError):
        LineColumnFinder("abc").from_index(10)


# ---------------------------------------------------------------------------
# LocationCache
# ---------------------------------------------------------------------------


def test_cache_reuses_finder():
    cache = LocationCache(2)
    first = cache.get("a.sol", "x")
    assert cache.get("a.sol", "x") is first
    assert len(cache) == 1


def test_cache_evicts_least_recently_used():
    cache = LocationCache(2)
    a = cache.get("a.sol", "a")
    cache.get("b.sol", "b")
    cache.get("a.sol", "a")  # touch: b becomes least recently used
    cache.get("c.sol", "c")

    assert "a.sol" in cache
    assert "b.sol" not in cache
    assert "c.sol" in cache
    assert cache.get("a.sol", "a") is a


def test_cache_rebuilds_evicted_entry():
    cache = LocationCache(1)
    a = cache.get("a.sol", "one\ntwo")
    cache.get("b.sol", "b")
    rebuilt = cache.get("a.sol", "one\ntwo")

    assert rebuilt is not a
    assert rebuilt.to_index(2, 1) == a.to_index(2, 1) == 4
    assert len(cache) == 1


def test_cache_lookups_are_idempotent():
    cache = LocationCache(3)
    results = {cache.get("a.sol", "ab\ncd").to_index(2, 2) for _ in range(5)}
    assert results == {4}


def test_cache_rejects_non_positive_capacity():
    with pytest.raises(ValueError, match="positive"):
        LocationCache(0)


def test_make_cache_default_size():
    assert make_cache().capacity == DEFAULT_CACHE_SIZE == 10
