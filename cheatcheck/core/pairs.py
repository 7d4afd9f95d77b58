"""Enumeration of the unique unordered file pairs to compare."""

from itertools import combinations
from typing import Iterable, List

from ..errors import InsufficientInputError
from .models import FileID, Pair


def pair_count(n: int) -> int:
    """Number of unordered pairs among ``n`` distinct files."""
    return n * (n - 1) // 2 if n > 1 else 0


def generate_pairs(file_ids: Iterable[FileID]) -> List[Pair]:
    """
    Produce every pair ``(a, b)`` with ``a < b`` exactly once.

    The ids are de-duplicated and sorted first, so the result does not depend
    on the iteration order of the input collection.

    Args:
        file_ids: Identifiers of the loaded files

    Returns:
        The ``n*(n-1)/2`` canonical pairs

    Raises:
        InsufficientInputError: If fewer than two distinct ids are given
    """
    ids = sorted(set(file_ids))
    if len(ids) < 2:
        raise InsufficientInputError(len(ids))

    # combinations() over a sorted sequence always yields a < b
    return [Pair(a, b) for a, b in combinations(ids, 2)]
