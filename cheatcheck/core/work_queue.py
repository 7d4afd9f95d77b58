"""
Shared queue of pending pair comparisons.

The queue is filled completely and sealed before any worker starts. Workers
then drain it with ``pop()``; an empty queue is their only termination
signal, so no shutdown message is ever needed.
"""

import logging
import threading
from collections import deque
from typing import Deque, Iterable, Optional

from ..errors import QueuePoisonedError
from .models import Pair

logger = logging.getLogger(__name__)


class WorkQueue:
    """
    Concurrency-safe collection of jobs, each delivered to exactly one caller.

    Order within the queue carries no meaning; jobs are handed out LIFO.
    """

    def __init__(self, jobs: Optional[Iterable[Pair]] = None):
        self._jobs: Deque[Pair] = deque()
        self._lock = threading.Lock()
        self._sealed = False
        self._poison: Optional[BaseException] = None
        if jobs is not None:
            self.extend(jobs)

    def push(self, job: Pair) -> None:
        """Add a single job during setup."""
        with self._lock:
            self._check_open()
            self._jobs.append(job)

    def extend(self, jobs: Iterable[Pair]) -> None:
        """Add many jobs during setup."""
        with self._lock:
            self._check_open()
            self._jobs.extend(jobs)

    def seal(self) -> None:
        """Close the queue for new jobs; workers may start after this."""
        with self._lock:
            self._sealed = True
        logger.debug(f"Work queue sealed with {len(self._jobs)} jobs")

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def poisoned(self) -> bool:
        return self._poison is not None

    def pop(self) -> Optional[Pair]:
        """
        Claim the next job.

        Returns:
            A job, or None once the queue is empty

        Raises:
            QueuePoisonedError: If a previous ``pop()`` faulted while holding
                the lock
        """
        with self._lock:
            if self._poison is not None:
                raise QueuePoisonedError(self._poison)
            try:
                return self._take()
            except Exception as e:
                self._poison = e
                logger.error(f"Work queue fault, no further jobs will be handed out: {e!r}")
                raise QueuePoisonedError(e) from e

    def _take(self) -> Optional[Pair]:
        if not self._jobs:
            return None
        return self._jobs.pop()

    def _check_open(self) -> None:
        if self._sealed:
            raise RuntimeError("Cannot add jobs to a sealed work queue")

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
