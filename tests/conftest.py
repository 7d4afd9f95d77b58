"""Shared fixtures for cheatcheck tests."""

from pathlib import Path
from typing import Dict, List

import pytest

from cheatcheck.core.models import FileRecord
from cheatcheck.core.store import ContentStore
from cheatcheck.utils.logging_setup import reset_logging


@pytest.fixture
def make_files(tmp_path):
    """Write ``{name: content}`` into tmp_path and return the paths in order."""

    def _make(contents: Dict[str, str]) -> List[Path]:
        paths = []
        for name, content in contents.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            paths.append(path)
        return paths

    return _make


@pytest.fixture
def example_store():
    """The three-file example: two identical files and one variation."""
    return ContentStore.from_records([
        FileRecord("/subs/a.txt", "hello world"),
        FileRecord("/subs/b.txt", "hello world"),
        FileRecord("/subs/c.txt", "goodbye world"),
    ])


@pytest.fixture
def twenty_file_store():
    """Twenty files with overlapping but distinct contents."""
    base = "def solve(values):\n    total = 0\n    for v in values:\n        total += v\n    return total\n"
    records = []
    for i in range(20):
        content = base.replace("total", f"acc{i % 7}") + f"# submission {i}\n" + "x" * (i % 5)
        records.append(FileRecord(f"/subs/student_{i:02d}.py", content))
    return ContentStore.from_records(records)


@pytest.fixture(autouse=True)
def _reset_cheatcheck_logging():
    """Drop handlers installed by the CLI so tests stay independent."""
    yield
    reset_logging()
