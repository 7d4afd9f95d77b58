"""Read-only store of loaded file contents."""

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Tuple

from .models import FileID, FileRecord


class ContentStore(Mapping[FileID, str]):
    """
    Immutable mapping from file id to text content.

    Populated once, before comparison starts, and shared read-only by every
    worker afterwards.
    """

    def __init__(self, contents: Mapping[FileID, str]):
        self._contents = MappingProxyType(dict(contents))
        self._ids: Tuple[FileID, ...] = tuple(sorted(self._contents))

    @classmethod
    def from_records(cls, records: Iterable[FileRecord]) -> "ContentStore":
        """
        Build a store from loaded records.

        Raises:
            ValueError: If two records share the same id
        """
        contents: Dict[FileID, str] = {}
        for record in records:
            if record.id in contents:
                raise ValueError(f"Duplicate file id: {record.id}")
            contents[record.id] = record.content
        return cls(contents)

    def ids(self) -> Tuple[FileID, ...]:
        """All file ids in ascending order."""
        return self._ids

    def content(self, file_id: FileID) -> str:
        return self._contents[file_id]

    def records(self) -> Iterator[FileRecord]:
        for file_id in self._ids:
            yield FileRecord(file_id, self._contents[file_id])

    def __getitem__(self, file_id: FileID) -> str:
        return self._contents[file_id]

    def __iter__(self) -> Iterator[FileID]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)
