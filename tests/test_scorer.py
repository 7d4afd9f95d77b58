"""Tests for the similarity scorers."""

import pytest

from cheatcheck.core.scorer import (
    DamerauLevenshteinScorer,
    LevenshteinScorer,
    Metric,
    create_scorer,
)


@pytest.fixture(params=[LevenshteinScorer, DamerauLevenshteinScorer])
def scorer(request):
    return request.param()


class TestScorerProperties:
    """Properties every scorer must have."""

    def test_identical_is_one(self, scorer):
        """Identical contents score exactly 1.0."""
        assert scorer("hello world", "hello world") == 1.0
        assert scorer("", "") == 1.0

    def test_symmetric(self, scorer):
        """Argument order does not matter."""
        assert scorer("kitten", "sitting") == scorer("sitting", "kitten")
        assert scorer("abc", "") == scorer("", "abc")

    def test_bounded(self, scorer):
        """Scores stay in [0, 1]."""
        for a, b in [("abc", "xyz"), ("a", ""), ("short", "a much longer string")]:
            assert 0.0 <= scorer(a, b) <= 1.0

    def test_completely_different(self, scorer):
        """Nothing in common scores 0."""
        assert scorer("abc", "xyz") == 0.0
        assert scorer("abc", "") == 0.0


class TestLevenshtein:
    """Known distances for plain Levenshtein."""

    def test_kitten_sitting(self):
        """Three edits over seven characters."""
        assert LevenshteinScorer()("kitten", "sitting") == pytest.approx(4 / 7)

    def test_hello_goodbye(self):
        """Seven edits over thirteen characters."""
        assert LevenshteinScorer()("hello world", "goodbye world") == pytest.approx(6 / 13)

    def test_transposition_costs_two(self):
        """A swap is a delete plus an insert."""
        assert LevenshteinScorer()("ab", "ba") == 0.0


class TestDamerauLevenshtein:
    """Transpositions count as one edit."""

    def test_transposition_costs_one(self):
        assert DamerauLevenshteinScorer()("ab", "ba") == pytest.approx(0.5)

    def test_scores_at_least_levenshtein(self):
        """Damerau distance never exceeds Levenshtein distance."""
        lev, dam = LevenshteinScorer(), DamerauLevenshteinScorer()
        for a, b in [("abcdef", "badcfe"), ("kitten", "sitting"), ("teh cat", "the cat")]:
            assert dam(a, b) >= lev(a, b)


class TestCreateScorer:
    """Test scorer selection."""

    def test_from_metric(self):
        assert isinstance(create_scorer(Metric.LEVENSHTEIN), LevenshteinScorer)
        assert isinstance(create_scorer(Metric.DAMERAU_LEVENSHTEIN), DamerauLevenshteinScorer)

    def test_from_string(self):
        assert create_scorer("damerau-levenshtein").metric is Metric.DAMERAU_LEVENSHTEIN

    def test_default_is_levenshtein(self):
        assert create_scorer().metric is Metric.LEVENSHTEIN

    def test_unknown_metric(self):
        with pytest.raises(ValueError):
            create_scorer("jaro")

    def test_from_flag(self):
        assert Metric.from_flag(True) is Metric.DAMERAU_LEVENSHTEIN
        assert Metric.from_flag(False) is Metric.LEVENSHTEIN

    def test_damerau_is_more_expensive(self):
        assert DamerauLevenshteinScorer.relative_cost > LevenshteinScorer.relative_cost
