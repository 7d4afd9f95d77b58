"""
Error types for cheatcheck.

Setup-phase errors (configuration, input resolution) are raised before any
comparison work starts. Errors from the comparison phase carry whatever was
aggregated before the failure.
"""

from typing import Any, Dict, List, Optional


class CheatCheckError(Exception):
    """
    Base exception for all cheatcheck errors.

    Provides common functionality for error tracking and reporting.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize error.

        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CheatCheckError):
    """Raised when the run configuration is invalid."""


class InsufficientInputError(ConfigurationError):
    """Raised when fewer than two files are available for comparison."""

    def __init__(self, file_count: int, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Got {file_count} files to compare, need at least 2.",
            details,
        )
        self.file_count = file_count
        self.details["file_count"] = file_count


class FileLoadError(CheatCheckError):
    """Raised when a single input file cannot be read."""

    def __init__(self, path: str, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Could not load {path}: {reason}", details)
        self.path = path
        self.reason = reason
        self.details.update({"path": path, "reason": reason})


class DuplicatePairError(CheatCheckError):
    """Raised when a pair is inserted into a score table twice."""


class QueuePoisonedError(CheatCheckError):
    """
    Raised by the work queue after a fault inside its critical section.

    Once poisoned, every further ``pop()`` raises this error so that all
    workers stop claiming jobs.
    """

    def __init__(self, cause: BaseException):
        super().__init__(f"Work queue poisoned: {cause!r}", {"cause": repr(cause)})
        self.cause = cause


class WorkerPoolError(CheatCheckError):
    """
    Raised when the worker pool hit a fatal fault.

    The scores aggregated before the fault are preserved on the error.
    """

    def __init__(
        self,
        message: str,
        table: Any = None,
        failures: Optional[List[Any]] = None,
        faults: Optional[List[BaseException]] = None,
    ):
        """
        Initialize worker pool error.

        Args:
            message: Error message
            table: The (frozen) partial score table
            failures: Per-job failures collected before the fault
            faults: The fatal errors observed by the workers
        """
        super().__init__(message)
        self.table = table
        self.failures = failures or []
        self.faults = faults or []
        self.details.update({
            "scored_pairs": len(table) if table is not None else 0,
            "faults": [repr(fault) for fault in self.faults],
        })


class ReportWriteError(CheatCheckError):
    """Raised when the persisted score log cannot be created or written."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot write score log {path}: {reason}", {"path": path})
        self.path = path
        self.reason = reason
