"""Core data structures shared by the comparison engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..errors import DuplicatePairError

# Canonical absolute path of a file. Plain string comparison gives the total
# order used for pair canonicalization and tie-breaking.
FileID = str

# Upper bound meaning "no upper bound"; scores never exceed 1.0.
UNBOUNDED = 2.0


@dataclass(frozen=True)
class FileRecord:
    """A loaded file: its identifier and normalized text content."""

    id: FileID
    content: str


@dataclass(frozen=True, order=True)
class Pair:
    """An unordered pair of files, stored with ``a < b``."""

    a: FileID
    b: FileID

    def __post_init__(self):
        if not self.a < self.b:
            raise ValueError(f"Pair requires a < b, got ({self.a!r}, {self.b!r})")

    @classmethod
    def of(cls, x: FileID, y: FileID) -> "Pair":
        """Build the canonical pair for two distinct file ids."""
        return cls(x, y) if x < y else cls(y, x)


@dataclass(frozen=True)
class ScoreRecord:
    """Similarity score of one pair, 1.0 meaning identical content."""

    pair: Pair
    score: float

    def __post_init__(self):
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Score must be within [0, 1], got {self.score}")

    def sort_key(self):
        """Descending score, then ascending pair."""
        return (-self.score, self.pair.a, self.pair.b)


@dataclass(frozen=True)
class ScoreFailure:
    """A pair whose scoring raised; the error is kept as text."""

    pair: Pair
    error: str


@dataclass(frozen=True)
class ScoreRange:
    """Inclusive range of scores that get reported live."""

    sensitivity: float
    max_sensitivity: float = UNBOUNDED

    def contains(self, score: float) -> bool:
        return self.sensitivity <= score <= self.max_sensitivity


class ScoreTable:
    """
    Mapping from pair to score record.

    Owned by a single writer (the aggregator). Grows monotonically while the
    run is in progress and is frozen once every worker has terminated.
    """

    def __init__(self):
        self._records: Dict[Pair, ScoreRecord] = {}
        self._frozen = False

    def insert(self, record: ScoreRecord) -> None:
        """
        Add a record to the table.

        Raises:
            RuntimeError: If the table is frozen
            DuplicatePairError: If the pair was already scored
        """
        if self._frozen:
            raise RuntimeError("Cannot insert into a frozen score table")
        if record.pair in self._records:
            raise DuplicatePairError(
                f"Pair scored twice: {record.pair.a} / {record.pair.b}",
                {"pair": (record.pair.a, record.pair.b)},
            )
        self._records[record.pair] = record

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, pair: Pair) -> Optional[ScoreRecord]:
        return self._records.get(pair)

    def scores(self) -> Dict[Pair, float]:
        """Plain ``pair -> score`` view, handy for comparing two runs."""
        return {pair: record.score for pair, record in self._records.items()}

    def records(self) -> List[ScoreRecord]:
        return list(self._records.values())

    def sorted_records(self) -> List[ScoreRecord]:
        """All records by descending score; equal scores ordered by pair."""
        return sorted(self._records.values(), key=ScoreRecord.sort_key)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, pair: object) -> bool:
        return pair in self._records

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._records)
