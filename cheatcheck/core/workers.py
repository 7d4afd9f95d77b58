"""
Worker pool draining the work queue.

Each worker independently loops "pop job -> score -> emit result" until the
queue is empty. The content store is shared read-only; mutual exclusion on
the queue is enforced by the queue itself.
"""

import logging
import os
import threading
import time
from typing import List, Optional

from ..errors import QueuePoisonedError
from .channel import ResultChannel, Sender
from .models import ScoreFailure, ScoreRecord
from .scorer import Scorer
from .store import ContentStore
from .work_queue import WorkQueue

logger = logging.getLogger(__name__)


def resolve_worker_count(jobs: Optional[int] = None) -> int:
    """
    Number of workers to spawn.

    Args:
        jobs: Requested pool size; None or 0 means one per available CPU

    Returns:
        Pool size, at least 1
    """
    if jobs is None or jobs == 0:
        return os.cpu_count() or 1
    if jobs < 0:
        raise ValueError(f"jobs must be >= 0, got {jobs}")
    return jobs


class WorkerPool:
    """Fixed-size pool of comparison threads."""

    def __init__(
        self,
        work_queue: WorkQueue,
        store: ContentStore,
        scorer: Scorer,
        channel: ResultChannel,
        size: Optional[int] = None,
    ):
        """
        Initialize worker pool.

        Args:
            work_queue: Sealed queue of pairs to score
            store: Contents of every file referenced by the queue
            scorer: Similarity function applied to each pair
            channel: Channel the results are emitted on
            size: Number of workers (None/0 = autodetect)
        """
        self.work_queue = work_queue
        self.store = store
        self.scorer = scorer
        self.channel = channel
        self.size = resolve_worker_count(size)

        self.faults: List[BaseException] = []
        self._faults_lock = threading.Lock()
        self._threads: List[threading.Thread] = []
        self._started = False
        self._scored = [0] * self.size

    def start(self) -> None:
        """
        Spawn the workers. The queue must already be sealed.

        A worker that cannot be started is recorded in ``faults``; the
        workers already running keep draining the queue.
        """
        if self._started:
            raise RuntimeError("Worker pool already started")
        if not self.work_queue.sealed:
            raise RuntimeError("Work queue must be sealed before workers start")
        self._started = True

        # Every sender exists before any worker can release its own
        senders = [self.channel.sender() for _ in range(self.size)]

        logger.debug(f"Starting {self.size} workers")
        for index, sender in enumerate(senders):
            try:
                thread = self._spawn(index, sender)
            except Exception as e:
                logger.error(f"Could not start worker {index}: {e}")
                self._record_fault(e)
                # Workers that never ran must still release the channel
                for unused in senders[index:]:
                    unused.close()
                break
            self._threads.append(thread)

    def _spawn(self, index: int, sender: Sender) -> threading.Thread:
        thread = threading.Thread(
            target=self._worker,
            args=(index, sender),
            name=f"CompareWorker-{index}",
            daemon=True,
        )
        thread.start()
        return thread

    def join(self) -> None:
        """Wait until every worker has terminated."""
        for thread in self._threads:
            thread.join()

    @property
    def failed(self) -> bool:
        return bool(self.faults)

    @property
    def scored_per_worker(self) -> List[int]:
        return list(self._scored)

    def _worker(self, index: int, sender: Sender) -> None:
        """Worker thread function."""
        start_time = time.time()
        with sender:
            while True:
                try:
                    pair = self.work_queue.pop()
                except QueuePoisonedError as e:
                    self._record_fault(e)
                    break

                if pair is None:
                    break

                try:
                    score = self.scorer(self.store.content(pair.a), self.store.content(pair.b))
                    result = ScoreRecord(pair, score)
                except Exception as e:
                    logger.error(f"Scoring failed for {pair.a} / {pair.b}: {e}")
                    sender.send(ScoreFailure(pair, f"{type(e).__name__}: {e}"))
                    continue

                sender.send(result)
                self._scored[index] += 1

        logger.debug(
            f"Worker {index} finished: {self._scored[index]} pairs "
            f"in {time.time() - start_time:.2f}s"
        )

    def _record_fault(self, error: BaseException) -> None:
        with self._faults_lock:
            self.faults.append(error)
