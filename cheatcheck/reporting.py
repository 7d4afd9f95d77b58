"""
Report generation for comparison runs.

- live report: one block per suspicious pair, printed as soon as it is known
- score log: every pair as CSV, sorted by descending score
- summary: run statistics and score distribution
"""

import csv
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, Optional, Union

import numpy as np
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .core.engine import ComparisonResult
from .core.models import ScoreFailure, ScoreRecord, ScoreTable
from .errors import ReportWriteError

logger = logging.getLogger(__name__)


class LiveReporter:
    """Prints in-range pairs to stdout as they are aggregated."""

    def __init__(self, console: Optional[Console] = None, highlight: bool = True):
        self.console = console or Console()
        self.highlight = highlight
        self.count = 0

    def __call__(self, record: ScoreRecord) -> None:
        self.count += 1
        score = f"{record.score:.3f}"
        if self.highlight:
            score = f"[black on red]{score}[/black on red]"
        self.console.print(
            f"{escape(record.pair.a)}\n{escape(record.pair.b)}\n\t{score}",
            highlight=False,
            soft_wrap=True,
        )


class ScoreLogWriter:
    """
    Writes the persisted score log.

    One CSV row per pair: ``score,pathA,pathB``. ``open()`` creates a
    staging file next to the log at the start of a run, so an unwritable
    directory is known before any comparison work. The log itself is only
    replaced by ``write()``; closing an unwritten writer discards the staging
    file and leaves any previous log untouched.
    """

    def __init__(self, path: Union[str, Path], precision: int = 6):
        self.path = Path(path)
        self.precision = precision
        self._handle: Optional[IO[str]] = None
        self._staging: Optional[Path] = None

    def open(self) -> "ScoreLogWriter":
        """
        Create the staging file for the log.

        Raises:
            ReportWriteError: If no file can be created next to the log
        """
        try:
            self._handle = tempfile.NamedTemporaryFile(
                "w",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
                newline="",
                encoding="utf-8",
            )
        except OSError as e:
            raise ReportWriteError(str(self.path), e.strerror or str(e)) from e
        self._staging = Path(self._handle.name)
        return self

    def format_row(self, record: ScoreRecord) -> list:
        return [f"{record.score:.{self.precision}f}", record.pair.a, record.pair.b]

    def write(self, records: Iterable[ScoreRecord]) -> None:
        """Write every record in the given order, then move the file into place."""
        if self._handle is None:
            self.open()
        try:
            writer = csv.writer(self._handle, lineterminator="\n")
            for record in records:
                writer.writerow(self.format_row(record))
            self._handle.close()
            os.replace(self._staging, self.path)
            self._staging = None
        except OSError as e:
            raise ReportWriteError(str(self.path), e.strerror or str(e)) from e
        finally:
            self.close()
        logger.info(f"Wrote score log to {self.path}")

    def close(self) -> None:
        """Release the staging file; unwritten rows are discarded."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._staging is not None:
            try:
                self._staging.unlink()
            except FileNotFoundError:
                pass
            self._staging = None


class ProgressTracker:
    """Progress bar advanced from the aggregator thread."""

    def __init__(self, total: int, console: Optional[Console] = None, enabled: bool = True):
        self.console = console or Console()
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            disable=not (enabled and self.console.is_terminal),
            transient=True,
        )
        self.task = self.progress.add_task("[green]Comparing", total=total)

    def __call__(self, result: Union[ScoreRecord, ScoreFailure]) -> None:
        self.progress.advance(self.task)

    def __enter__(self) -> "ProgressTracker":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()


@dataclass
class ScoreSummary:
    """Distribution of the scores of a run."""

    count: int
    mean: float
    median: float
    p90: float
    maximum: float


def summarize_scores(table: ScoreTable) -> ScoreSummary:
    """Compute the score distribution of a table."""
    scores = np.fromiter((record.score for record in table.records()), dtype=float)
    if scores.size == 0:
        return ScoreSummary(0, 0.0, 0.0, 0.0, 0.0)
    return ScoreSummary(
        count=int(scores.size),
        mean=float(np.mean(scores)),
        median=float(np.median(scores)),
        p90=float(np.percentile(scores, 90)),
        maximum=float(np.max(scores)),
    )


def render_summary(
    result: ComparisonResult,
    file_count: int,
    metric: str,
    console: Optional[Console] = None,
) -> Table:
    """
    Print the run summary table.

    Returns:
        The rendered rich Table
    """
    console = console or Console(stderr=True)
    summary = summarize_scores(result.table)

    table = Table(title="Comparison Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Files compared", str(file_count))
    table.add_row("Pairs scored", f"{len(result.table)}/{result.pair_count}")
    table.add_row("Pairs reported", str(len(result.reported)))
    if result.failures:
        table.add_row("Pairs failed", f"[red]{len(result.failures)}[/red]")
    table.add_row("Metric", metric)
    table.add_row("Workers", str(result.workers))
    table.add_row("Elapsed", f"{result.elapsed:.2f}s")
    table.add_row("Mean score", f"{summary.mean:.3f}")
    table.add_row("Median score", f"{summary.median:.3f}")
    table.add_row("90th percentile", f"{summary.p90:.3f}")
    table.add_row("Max score", f"{summary.maximum:.3f}")
    if result.logged:
        table.add_row("Logged pairs", str(result.logged))

    console.print(table)
    return table
