"""Tests for pair generation and the content store."""

import random

import pytest

from cheatcheck.core.models import FileRecord, Pair
from cheatcheck.core.pairs import generate_pairs, pair_count
from cheatcheck.core.store import ContentStore
from cheatcheck.errors import ConfigurationError, InsufficientInputError


class TestGeneratePairs:
    """Test canonical pair enumeration."""

    def test_pair_count_formula(self):
        """n files give n*(n-1)/2 pairs."""
        for n in range(2, 12):
            ids = [f"/f{i:02d}" for i in range(n)]
            pairs = generate_pairs(ids)
            assert len(pairs) == pair_count(n) == n * (n - 1) // 2

    def test_pairs_are_canonical_and_unique(self):
        """Every pair has a < b and appears once."""
        pairs = generate_pairs(["/c", "/a", "/b", "/d"])

        assert all(p.a < p.b for p in pairs)
        assert len(set(pairs)) == len(pairs)
        assert set(pairs) == {
            Pair("/a", "/b"), Pair("/a", "/c"), Pair("/a", "/d"),
            Pair("/b", "/c"), Pair("/b", "/d"), Pair("/c", "/d"),
        }

    def test_independent_of_input_order(self):
        """Shuffled or set input yields the same pairs."""
        ids = [f"/f{i}" for i in range(8)]
        expected = generate_pairs(ids)

        shuffled = list(ids)
        random.Random(7).shuffle(shuffled)
        assert generate_pairs(shuffled) == expected
        assert generate_pairs(set(ids)) == expected

    def test_duplicate_ids_collapsed(self):
        """The same id twice never produces a self pair."""
        assert generate_pairs(["/a", "/a", "/b"]) == [Pair("/a", "/b")]

    @pytest.mark.parametrize("ids", [[], ["/only"], ["/same", "/same"]])
    def test_insufficient_input(self, ids):
        """Fewer than two distinct files fails fast."""
        with pytest.raises(InsufficientInputError) as exc_info:
            generate_pairs(ids)

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.file_count == len(set(ids))

    def test_pair_count_small(self):
        """Zero and one file have no pairs."""
        assert pair_count(0) == 0
        assert pair_count(1) == 0


class TestContentStore:
    """Test the read-only content store."""

    def test_from_records(self):
        """Records are exposed by id, ids sorted."""
        store = ContentStore.from_records([
            FileRecord("/b", "bee"),
            FileRecord("/a", "ay"),
        ])

        assert store.ids() == ("/a", "/b")
        assert store.content("/a") == "ay"
        assert store["/b"] == "bee"
        assert len(store) == 2
        assert list(store) == ["/a", "/b"]
        assert [r.id for r in store.records()] == ["/a", "/b"]

    def test_duplicate_ids_rejected(self):
        """Two records with the same id are a programming error."""
        with pytest.raises(ValueError):
            ContentStore.from_records([FileRecord("/a", "1"), FileRecord("/a", "2")])

    def test_store_is_read_only(self):
        """The backing mapping cannot be modified."""
        store = ContentStore({"/a": "x"})

        with pytest.raises(TypeError):
            store["/a"] = "y"
        with pytest.raises(TypeError):
            store._contents["/a"] = "y"
