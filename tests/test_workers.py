"""Tests for the worker pool and the result aggregator."""

import os
import threading

import pytest

from cheatcheck.core.aggregator import ResultAggregator
from cheatcheck.core.channel import ResultChannel
from cheatcheck.core.models import Pair, ScoreFailure, ScoreRange, ScoreRecord
from cheatcheck.core.pairs import generate_pairs
from cheatcheck.core.scorer import LevenshteinScorer
from cheatcheck.core.work_queue import WorkQueue
from cheatcheck.core.workers import WorkerPool, resolve_worker_count
from cheatcheck.errors import DuplicatePairError


class TestResolveWorkerCount:
    """Test pool sizing."""

    def test_autodetect(self):
        expected = os.cpu_count() or 1
        assert resolve_worker_count(None) == expected
        assert resolve_worker_count(0) == expected

    def test_explicit(self):
        assert resolve_worker_count(3) == 3

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            resolve_worker_count(-1)


class TestWorkerPool:
    """Test draining the queue into the channel."""

    def test_requires_sealed_queue(self, example_store):
        """Workers may not start while the queue can still grow."""
        queue = WorkQueue(generate_pairs(example_store.ids()))
        pool = WorkerPool(queue, example_store, LevenshteinScorer(), ResultChannel(), size=2)

        with pytest.raises(RuntimeError):
            pool.start()

    def test_scores_every_pair(self, example_store):
        """Every pair is emitted once and the channel closes afterwards."""
        pairs = generate_pairs(example_store.ids())
        queue = WorkQueue(pairs)
        queue.seal()
        channel = ResultChannel()
        pool = WorkerPool(queue, example_store, LevenshteinScorer(), channel, size=4)

        pool.start()
        results = list(channel)
        pool.join()

        assert sorted(r.pair for r in results) == sorted(pairs)
        assert not pool.failed
        assert sum(pool.scored_per_worker) == len(pairs)
        with pytest.raises(RuntimeError):
            pool.start()

    def test_scoring_exception_becomes_failure(self, example_store):
        """One bad pair does not stop the others."""

        class PickyScorer(LevenshteinScorer):
            def score(self, a, b):
                if "goodbye" in a or "goodbye" in b:
                    raise MemoryError("too big")
                return super().score(a, b)

        queue = WorkQueue(generate_pairs(example_store.ids()))
        queue.seal()
        channel = ResultChannel()
        pool = WorkerPool(queue, example_store, PickyScorer(), channel, size=2)

        pool.start()
        results = list(channel)
        pool.join()

        failures = [r for r in results if isinstance(r, ScoreFailure)]
        records = [r for r in results if isinstance(r, ScoreRecord)]
        assert len(failures) == 2
        assert all("MemoryError" in f.error for f in failures)
        assert [r.pair for r in records] == [Pair("/subs/a.txt", "/subs/b.txt")]
        assert not pool.failed


class StartFailingPool(WorkerPool):
    """Pool whose threads cannot be started past the first one."""

    def _spawn(self, index, sender):
        if index >= 1:
            raise RuntimeError("can't start new thread")
        return super()._spawn(index, sender)


class TestWorkerStartFailure:
    """Test a pool that cannot start all of its threads."""

    def test_channel_still_closes(self, example_store):
        """Senders of workers that never ran are released."""
        pairs = generate_pairs(example_store.ids())
        queue = WorkQueue(pairs)
        queue.seal()
        channel = ResultChannel()
        pool = StartFailingPool(queue, example_store, LevenshteinScorer(), channel, size=4)

        pool.start()
        received = []
        consumer = threading.Thread(target=lambda: received.extend(channel))
        consumer.start()
        consumer.join(timeout=10)
        pool.join()

        assert not consumer.is_alive()
        assert channel.closed
        assert len(received) == len(pairs)
        assert pool.failed
        assert isinstance(pool.faults[0], RuntimeError)

    def test_start_only_once(self, example_store):
        queue = WorkQueue(generate_pairs(example_store.ids()))
        queue.seal()
        pool = StartFailingPool(queue, example_store, LevenshteinScorer(), ResultChannel(), size=2)

        pool.start()
        pool.join()
        with pytest.raises(RuntimeError):
            pool.start()


class TestResultAggregator:
    """Test single-consumer aggregation."""

    def _feed(self, channel, items):
        with channel.sender() as sender:
            for item in items:
                sender.send(item)

    def test_range_filtering(self):
        """Only in-range scores are reported, but all are kept."""
        channel = ResultChannel()
        reported = []
        aggregator = ResultAggregator(channel, ScoreRange(0.5, 0.9), on_report=reported.append)
        self._feed(channel, [
            ScoreRecord(Pair("/a", "/b"), 1.0),
            ScoreRecord(Pair("/a", "/c"), 0.5),
            ScoreRecord(Pair("/b", "/c"), 0.2),
            ScoreRecord(Pair("/a", "/d"), 0.9),
        ])

        table = aggregator.consume()

        assert table.frozen
        assert len(table) == 4
        assert [r.score for r in reported] == [0.5, 0.9]
        assert aggregator.reported == reported

    def test_on_result_sees_everything(self):
        """Progress callbacks see records and failures alike."""
        channel = ResultChannel()
        seen = []
        aggregator = ResultAggregator(channel, ScoreRange(0.0), on_result=seen.append)
        failure = ScoreFailure(Pair("/a", "/c"), "boom")
        self._feed(channel, [ScoreRecord(Pair("/a", "/b"), 0.3), failure])

        aggregator.consume()

        assert len(seen) == 2
        assert aggregator.failures == [failure]
        assert Pair("/a", "/c") not in aggregator.table

    def test_duplicate_result_is_an_error(self):
        """The same pair scored twice indicates a broken queue."""
        channel = ResultChannel()
        aggregator = ResultAggregator(channel, ScoreRange(0.0))
        self._feed(channel, [
            ScoreRecord(Pair("/a", "/b"), 0.3),
            ScoreRecord(Pair("/a", "/b"), 0.3),
        ])

        with pytest.raises(DuplicatePairError):
            aggregator.consume()

    def test_thread_captures_error(self):
        """Errors on the aggregator thread are kept for the engine."""
        channel = ResultChannel()
        aggregator = ResultAggregator(channel, ScoreRange(0.0))
        aggregator.start()
        self._feed(channel, [
            ScoreRecord(Pair("/a", "/b"), 0.3),
            ScoreRecord(Pair("/a", "/b"), 0.3),
            ScoreRecord(Pair("/a", "/c"), 0.3),
        ])

        table = aggregator.join()

        assert isinstance(aggregator.error, DuplicatePairError)
        assert table.frozen
        assert len(table) == 1

    def test_finalize_writes_sorted_table(self):
        """The writer receives every record, highest first."""

        class ListWriter:
            def __init__(self):
                self.rows = None

            def write(self, records):
                self.rows = list(records)

        channel = ResultChannel()
        aggregator = ResultAggregator(channel, ScoreRange(0.9))
        self._feed(channel, [
            ScoreRecord(Pair("/a", "/b"), 0.1),
            ScoreRecord(Pair("/a", "/c"), 0.8),
            ScoreRecord(Pair("/b", "/c"), 0.4),
        ])
        aggregator.consume()

        writer = ListWriter()
        assert aggregator.finalize(writer) == 3
        assert [r.score for r in writer.rows] == [0.8, 0.4, 0.1]
