"""File resolution and loading utilities."""

import codecs
import glob
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

import chardet

from ..errors import FileLoadError
from .models import FileRecord

logger = logging.getLogger(__name__)

Preprocessor = Callable[[str], str]


@dataclass
class LoadResult:
    """Files that loaded, and the errors for those that did not."""

    records: List[FileRecord] = field(default_factory=list)
    failures: List[FileLoadError] = field(default_factory=list)


def resolve_paths(patterns: Iterable[str]) -> List[str]:
    """Expand literal paths and glob patterns into canonical file paths.

    Patterns that match nothing, are invalid, or only match directories are
    skipped with a warning.

    Args:
        patterns: Paths or glob patterns (``**`` matches recursively)

    Returns:
        Sorted, de-duplicated absolute paths of regular files
    """
    files = set()

    for pattern in patterns:
        try:
            matches = glob.glob(os.path.expanduser(pattern), recursive=True)
        except (ValueError, OSError) as e:
            logger.warning(f"\"{pattern}\" is not a valid pattern, and will be ignored. ({e})")
            continue

        count = len(files)
        for match in matches:
            if os.path.isdir(match):
                logger.debug(f"Skipping directory {match}")
                continue
            if not os.path.isfile(match):
                continue
            files.add(os.path.realpath(match))

        if not matches:
            logger.warning(f"\"{pattern}\" didn't match any files.")
        elif len(files) == count:
            logger.warning(f"\"{pattern}\" didn't match any new regular files.")

    return sorted(files)


def decode_bytes(raw: bytes) -> str:
    """Decode file contents, detecting the encoding when it is not UTF-8.

    Args:
        raw: File contents

    Returns:
        Decoded text; undecodable bytes are replaced
    """
    if not raw:
        return ""

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    encoding = chardet.detect(raw).get("encoding") or "utf-8"
    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.debug(f"Unknown encoding {encoding!r}, falling back to utf-8")
        encoding = "utf-8"

    return raw.decode(encoding, errors="replace")


def load_file(path: Union[str, Path], preprocess: Optional[Preprocessor] = None) -> FileRecord:
    """Load a single file into memory.

    Args:
        path: Path to the file
        preprocess: Optional transformation applied to the decoded text

    Returns:
        FileRecord keyed by the canonical absolute path

    Raises:
        FileLoadError: If the file cannot be read
    """
    file_id = os.path.realpath(path)
    try:
        raw = Path(file_id).read_bytes()
    except OSError as e:
        raise FileLoadError(str(path), e.strerror or str(e)) from e

    content = decode_bytes(raw)
    if preprocess is not None:
        content = preprocess(content)
    return FileRecord(file_id, content)


def load_files(paths: Iterable[Union[str, Path]], preprocess: Optional[Preprocessor] = None) -> LoadResult:
    """Load many files; an unreadable file is excluded, not fatal.

    Args:
        paths: Paths to load
        preprocess: Optional transformation applied to every file

    Returns:
        LoadResult with the loaded records and the per-file failures
    """
    result = LoadResult()

    for path in paths:
        try:
            result.records.append(load_file(path, preprocess))
        except FileLoadError as e:
            logger.warning(f"{e.message}; excluding it from the comparison")
            result.failures.append(e)

    logger.debug(f"Loaded {len(result.records)} files, {len(result.failures)} failed")
    return result
