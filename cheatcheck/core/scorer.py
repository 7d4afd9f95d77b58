"""
Pairwise similarity scorers.

Both scorers return a normalized similarity in [0, 1]:

    similarity = 1 - distance / max(len(a), len(b))

so that 1.0 means identical content. Two empty strings are identical.
The scorer is chosen once per run and injected into the worker pool.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

from rapidfuzz.distance import DamerauLevenshtein, Levenshtein


class Metric(Enum):
    """Supported string-distance metrics."""

    LEVENSHTEIN = "levenshtein"
    DAMERAU_LEVENSHTEIN = "damerau-levenshtein"

    @classmethod
    def from_flag(cls, damerau: bool) -> "Metric":
        return cls.DAMERAU_LEVENSHTEIN if damerau else cls.LEVENSHTEIN


class Scorer(ABC):
    """
    Pure function from two contents to a similarity score.

    Implementations must be symmetric, return exactly 1.0 for identical
    inputs and be deterministic.
    """

    metric: Metric
    # Rough cost relative to plain Levenshtein
    relative_cost: float = 1.0

    @abstractmethod
    def score(self, a: str, b: str) -> float:
        """Return the normalized similarity of ``a`` and ``b``."""

    def __call__(self, a: str, b: str) -> float:
        return self.score(a, b)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LevenshteinScorer(Scorer):
    """Insertions, deletions and substitutions only. The cheap default."""

    metric = Metric.LEVENSHTEIN

    def score(self, a: str, b: str) -> float:
        return float(Levenshtein.normalized_similarity(a, b))


class DamerauLevenshteinScorer(Scorer):
    """
    Levenshtein plus adjacent transpositions as single edits.

    More robust against swapped characters left behind by copy-paste edits,
    at roughly 10-20x the cost of plain Levenshtein.
    """

    metric = Metric.DAMERAU_LEVENSHTEIN
    relative_cost = 15.0

    def score(self, a: str, b: str) -> float:
        return float(DamerauLevenshtein.normalized_similarity(a, b))


_SCORERS = {
    Metric.LEVENSHTEIN: LevenshteinScorer,
    Metric.DAMERAU_LEVENSHTEIN: DamerauLevenshteinScorer,
}


def create_scorer(metric: Union[Metric, str] = Metric.LEVENSHTEIN) -> Scorer:
    """
    Create the scorer for a metric.

    Args:
        metric: A Metric or its string value

    Returns:
        Scorer instance

    Raises:
        ValueError: If the metric is unknown
    """
    return _SCORERS[Metric(metric)]()
