"""
Concurrent pairwise-comparison engine.

Wires the pair generator, work queue, worker pool and result aggregator
together for a single run. All shared handles are created here and passed
explicitly to the components that use them.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import ReportWriteError, WorkerPoolError
from .aggregator import ReportCallback, ResultAggregator, ResultCallback
from .channel import ResultChannel
from .models import ScoreFailure, ScoreRange, ScoreRecord, ScoreTable
from .pairs import generate_pairs
from .scorer import Scorer
from .store import ContentStore
from .work_queue import WorkQueue
from .workers import WorkerPool, resolve_worker_count

logger = logging.getLogger(__name__)


@dataclass
class ComparisonResult:
    """Outcome of a completed run."""

    table: ScoreTable
    reported: List[ScoreRecord]
    failures: List[ScoreFailure]
    pair_count: int
    workers: int
    elapsed: float
    logged: int = 0
    scored_per_worker: List[int] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every generated pair has a score."""
        return len(self.table) == self.pair_count


class ComparisonEngine:
    """Scores every unordered pair of files in a content store."""

    def __init__(
        self,
        store: ContentStore,
        scorer: Scorer,
        score_range: ScoreRange,
        workers: Optional[int] = None,
        on_report: Optional[ReportCallback] = None,
        on_result: Optional[ResultCallback] = None,
        log_writer=None,
    ):
        """
        Initialize engine.

        Args:
            store: Loaded file contents
            scorer: Similarity function, fixed for the whole run
            score_range: Range of scores reported live
            workers: Worker pool size (None/0 = autodetect)
            on_report: Called on the aggregator thread for in-range pairs
            on_result: Called on the aggregator thread for every result
            log_writer: Optional writer receiving the sorted table at the end
        """
        self.store = store
        self.scorer = scorer
        self.score_range = score_range
        self.workers = resolve_worker_count(workers)
        self.on_report = on_report
        self.on_result = on_result
        self.log_writer = log_writer

    def run(self) -> ComparisonResult:
        """
        Compare all pairs.

        Returns:
            ComparisonResult with the frozen score table

        Raises:
            InsufficientInputError: If the store holds fewer than two files
            WorkerPoolError: If the pool or the aggregator hit a fatal fault;
                the partial table is attached to the error
        """
        start_time = time.time()

        # Setup errors surface here, before any thread exists
        pairs = generate_pairs(self.store.ids())
        work_queue = WorkQueue(pairs)
        work_queue.seal()

        logger.info(
            f"Comparing {len(self.store)} files: {len(pairs)} pairs "
            f"on {self.workers} workers ({self.scorer.metric.value})"
        )
        if self.scorer.relative_cost > 1.0:
            logger.info(
                f"{self.scorer.metric.value} costs about {self.scorer.relative_cost:g}x "
                f"a plain Levenshtein comparison"
            )

        channel = ResultChannel()
        aggregator = ResultAggregator(
            channel,
            self.score_range,
            on_report=self.on_report,
            on_result=self.on_result,
        )
        pool = WorkerPool(work_queue, self.store, self.scorer, channel, size=self.workers)

        aggregator.start()
        pool.start()
        pool.join()
        table = aggregator.join()

        faults: List[BaseException] = list(pool.faults)
        if aggregator.error is not None:
            faults.append(aggregator.error)
        if faults:
            raise WorkerPoolError(
                f"Comparison aborted after {len(table)} of {len(pairs)} pairs: {faults[0]}",
                table=table,
                failures=aggregator.failures,
                faults=faults,
            )

        if aggregator.failures:
            logger.warning(f"{len(aggregator.failures)} pairs could not be scored")

        logged = 0
        if self.log_writer is not None:
            try:
                logged = aggregator.finalize(self.log_writer)
            except ReportWriteError as e:
                logger.warning(f"{e.message}; continuing without a score log")

        elapsed = time.time() - start_time
        logger.info(f"Scored {len(table)} pairs in {elapsed:.2f}s")

        return ComparisonResult(
            table=table,
            reported=aggregator.reported,
            failures=aggregator.failures,
            pair_count=len(pairs),
            workers=self.workers,
            elapsed=elapsed,
            logged=logged,
            scored_per_worker=pool.scored_per_worker,
        )
