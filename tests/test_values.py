"""
Tests for the value model, type guards and key patterns.
"""

from dataclasses import replace

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from kvsim import Entry, ValueType
from kvsim.exceptions import TypeMismatchError
from kvsim.store import compile_pattern
from kvsim.values import (
    as_float,
    as_integer,
    ensure_hash,
    ensure_list,
    ensure_primitive,
    stringify,
)


class TestValueType:
    """Test classification of stored values."""

    @pytest.mark.parametrize("value, kind", [
        ("text", ValueType.PRIMITIVE),
        (42, ValueType.PRIMITIVE),
        (1.5, ValueType.PRIMITIVE),
        ({"a": 1}, ValueType.HASH),
        (["a", 1], ValueType.LIST),
    ])
    def test_of(self, value, kind):
        assert ValueType.of(value) is kind

    @pytest.mark.parametrize("value", [None, True, {"a": [1]}, [["nested"]], {1: "a"}, (1, 2)])
    def test_of_rejects_unsupported_values(self, value):
        with pytest.raises(TypeMismatchError):
            ValueType.of(value)


class TestEntry:
    """Test the stored entry record."""

    def test_kind_is_set_when_built(self):
        entry = Entry("k", ["a", "b"], 0)

        assert entry.kind is ValueType.LIST
        assert vars(entry)["kind"] is ValueType.LIST

    def test_reading_kind_does_not_reclassify(self, monkeypatch):
        entry = Entry("k", {"f": 1}, 0)

        def fail(value):
            raise AssertionError("value classified again")

        monkeypatch.setattr(ValueType, "of", fail)

        assert entry.kind is ValueType.HASH
        assert ensure_hash(entry) == {"f": 1}

    def test_list_reads_do_not_reclassify(self, store, monkeypatch):
        store.rpush("numbers", list(range(100)))

        def fail(value):
            raise AssertionError("value classified again")

        monkeypatch.setattr(ValueType, "of", fail)

        assert store.llen("numbers") == 100
        assert store.lindex("numbers", -1) == 99
        assert store.get("total") == 1000

    def test_invalid_value_rejected_when_built(self):
        with pytest.raises(TypeMismatchError):
            Entry("k", [["nested"]], 0)

    def test_replace_updates_kind(self):
        entry = Entry("k", "v", 0)

        assert replace(entry, value=[1]).kind is ValueType.LIST


class TestGuards:
    """Test the per-kind accessors."""

    def test_ensure_primitive(self):
        assert ensure_primitive(Entry("k", "v", 0)) == "v"
        with pytest.raises(TypeMismatchError):
            ensure_primitive(Entry("k", ["v"], 0))

    def test_ensure_hash_reads_missing_entry_as_empty(self):
        assert ensure_hash(None) == {}
        assert ensure_hash(Entry("k", {"f": 1}, 0)) == {"f": 1}
        with pytest.raises(TypeMismatchError):
            ensure_hash(Entry("k", "v", 0))

    def test_ensure_list_requires_entry(self):
        assert ensure_list(Entry("k", [1], 0), "k") == [1]
        with pytest.raises(TypeMismatchError):
            ensure_list(None, "k")
        with pytest.raises(TypeMismatchError):
            ensure_list(Entry("k", {"f": 1}, 0), "k")


class TestNumbers:
    """Test numeric interpretation of primitives."""

    def test_as_integer(self):
        assert as_integer(5) == 5
        assert as_integer(5.0) == 5
        assert as_integer(" 12 ") == 12
        assert as_integer(5.5) is None
        assert as_integer("abc") is None
        assert as_integer(True) is None

    def test_as_float(self):
        assert as_float(5) == 5.0
        assert as_float("2.5") == 2.5
        assert as_float("nan") is None
        assert as_float("abc") is None

    def test_stringify(self):
        assert stringify(1000) == "1000"
        assert stringify(2.0) == "2"
        assert stringify(2.5) == "2.5"
        assert stringify("x") == "x"


class TestPatterns:
    """Test key pattern matching."""

    @pytest.mark.parametrize("pattern", [None, "", "*"])
    def test_match_all(self, pattern):
        assert compile_pattern(pattern) is None

    @pytest.mark.parametrize("pattern, key, matches", [
        ("site*", "site1", True),
        ("site*", "mysite", True),
        ("site*", "user1", False),
        ("ser", "user1", True),
        ("user?", "user1", True),
        ("user?", "user", False),
        ("site[12]", "site2", True),
        ("site[12]", "site3", False),
        ("site[!12]", "site3", True),
        ("a.b", "axb", False),
        ("a.b", "a.b", True),
        ("\\*", "a*b", True),
        ("\\*", "ab", False),
        ("[", "a[b", True),
        ("[z-a]", "z", False),
        ("[z-a]", "key[z-a]", True),
    ])
    def test_glob_search(self, pattern, key, matches):
        assert bool(compile_pattern(pattern).search(key)) is matches
