"""
Single-consumer aggregation of scoring results.

The aggregator is the only writer of the score table. It reports in-range
pairs as soon as they arrive and, once every worker is done, dumps the whole
table in a deterministic order.
"""

import logging
import threading
from typing import Callable, List, Optional, Union

from .channel import ResultChannel
from .models import ScoreFailure, ScoreRange, ScoreRecord, ScoreTable

logger = logging.getLogger(__name__)

ReportCallback = Callable[[ScoreRecord], None]
ResultCallback = Callable[[Union[ScoreRecord, ScoreFailure]], None]


class ResultAggregator:
    """
    Consumes the result channel until it closes.

    Callbacks run on the aggregator thread.
    """

    def __init__(
        self,
        channel: ResultChannel,
        score_range: ScoreRange,
        on_report: Optional[ReportCallback] = None,
        on_result: Optional[ResultCallback] = None,
    ):
        """
        Initialize aggregator.

        Args:
            channel: Channel the workers emit on
            score_range: Range of scores reported live
            on_report: Called for every in-range record
            on_result: Called for every record or failure, in range or not
        """
        self.channel = channel
        self.score_range = score_range
        self.on_report = on_report
        self.on_result = on_result

        self.table = ScoreTable()
        self.reported: List[ScoreRecord] = []
        self.failures: List[ScoreFailure] = []
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Run ``consume()`` on a dedicated thread."""
        if self._thread is not None:
            raise RuntimeError("Aggregator already started")
        self._thread = threading.Thread(target=self._run, name="ResultAggregator", daemon=True)
        self._thread.start()

    def join(self) -> ScoreTable:
        """Wait for the channel to close and return the frozen table."""
        if self._thread is not None:
            self._thread.join()
        return self.table

    def _run(self) -> None:
        try:
            self.consume()
        except Exception as e:
            self.error = e
            logger.error(f"Result aggregation failed: {e}")
            # Keep draining so that senders never block on an abandoned channel
            for _ in self.channel:
                pass
            self.table.freeze()

    def consume(self) -> ScoreTable:
        """Read results until the channel closes, then freeze the table."""
        for item in self.channel:
            if isinstance(item, ScoreFailure):
                self.failures.append(item)
                if self.on_result:
                    self.on_result(item)
            else:
                self.add(item)

        self.table.freeze()
        logger.debug(
            f"Aggregated {len(self.table)} scores, {len(self.reported)} reported, "
            f"{len(self.failures)} failed"
        )
        return self.table

    def add(self, record: ScoreRecord) -> None:
        """Insert one record and report it if it falls in range."""
        self.table.insert(record)
        if self.on_result:
            self.on_result(record)
        if self.score_range.contains(record.score):
            self.reported.append(record)
            if self.on_report:
                self.on_report(record)

    def sorted_records(self) -> List[ScoreRecord]:
        """Every aggregated record, unfiltered, by descending score."""
        return self.table.sorted_records()

    def finalize(self, writer) -> int:
        """
        Persist the complete table through ``writer``.

        Args:
            writer: Object with a ``write(records)`` method

        Returns:
            Number of records written
        """
        records = self.sorted_records()
        writer.write(records)
        return len(records)
