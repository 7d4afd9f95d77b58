"""Command-line interface for cheatcheck."""

import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console

from . import __version__
from .config import CheckConfig, ConfigManager
from .core.engine import ComparisonEngine
from .core.loader import load_file, load_files, resolve_paths
from .core.models import ScoreRange
from .core.pairs import pair_count
from .core.preprocess import build_preprocessor, exclude_template_matches
from .core.scorer import create_scorer
from .core.store import ContentStore
from .errors import (
    ConfigurationError,
    FileLoadError,
    InsufficientInputError,
    ReportWriteError,
    WorkerPoolError,
)
from .reporting import LiveReporter, ProgressTracker, ScoreLogWriter, render_summary
from .utils.logging_setup import get_logger, log_operation, setup_logging

logger = get_logger(__name__)

EXIT_CONFIG_ERROR = 1
EXIT_POOL_FAULT = 2


@click.command(name="cheatcheck", context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("files", nargs=-1, metavar="FILE...")
@click.option(
    "-s", "--sensitivity",
    type=float,
    default=None,
    help="Lower bound for cheat detection, between 0 and 1 where 1 means identical files."
)
@click.option(
    "-m", "--max-sensitivity",
    type=float,
    default=None,
    help="Upper bound for reported pairs (default: unbounded)."
)
@click.option(
    "-j", "--jobs",
    type=click.IntRange(min=0),
    default=None,
    metavar="N",
    help="Number of comparisons to run in parallel (default: 0, autodetect)."
)
@click.option("-v", "--verbose", is_flag=True, help="Show additional debugging information.")
@click.option(
    "-l", "--log", "log_file",
    type=click.Path(dir_okay=False),
    default=None,
    metavar="FILE",
    help="Log all comparisons to this file, sorted by score."
)
@click.option(
    "-D", "--damerau",
    is_flag=True,
    help="Use Damerau-Levenshtein distance instead of Levenshtein distance (about 20x slower)."
)
@click.option("-t", "--trim", is_flag=True, help="Strip all whitespace before comparing.")
@click.option(
    "-f", "--formatter",
    default=None,
    metavar="PROGRAM",
    help="Program used to format every file (stdin to stdout) before comparing."
)
@click.option(
    "-T", "--template",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Files matching this template exactly are not checked."
)
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help=f"Configuration file (default: {ConfigManager.DEFAULT_CONFIG_FILE} if present)."
)
@click.option("--progress/--no-progress", default=None, help="Show a progress bar on terminals.")
@click.option("--show-config", is_flag=True, help="Display the effective configuration and exit.")
@click.version_option(__version__, prog_name="cheatcheck")
def cli(
    files,
    sensitivity,
    max_sensitivity,
    jobs,
    verbose,
    log_file,
    damerau,
    trim,
    formatter,
    template,
    config_path,
    progress,
    show_config,
):
    """Compare FILEs (paths or glob patterns) pairwise and report near-duplicates."""
    setup_logging(verbose)
    log_operation(logger, "cli_main", files=len(files))

    manager = ConfigManager(Path(config_path) if config_path else None)
    try:
        config = manager.load()
    except ConfigurationError as e:
        logger.error(e.message)
        sys.exit(EXIT_CONFIG_ERROR)

    # Flags can only switch features on
    config = config.merge(
        sensitivity=sensitivity,
        max_sensitivity=max_sensitivity,
        jobs=jobs,
        log_file=log_file,
        formatter=formatter,
        template=template,
        progress=progress,
        verbose=verbose or None,
        damerau=damerau or None,
        trim=trim or None,
    )

    if show_config:
        manager.display(config)
        return

    if not config.validate():
        sys.exit(EXIT_CONFIG_ERROR)

    if verbose != config.verbose:
        setup_logging(config.verbose)

    try:
        run(config, list(files))
    except ConfigurationError as e:
        logger.error(e.message)
        sys.exit(EXIT_CONFIG_ERROR)
    except WorkerPoolError as e:
        logger.error(e.message)
        logger.error(f"{len(e.table)} scores were aggregated before the fault; no log was written")
        sys.exit(EXIT_POOL_FAULT)


def run(config: CheckConfig, patterns: List[str], console: Optional[Console] = None):
    """
    Execute one comparison run.

    Args:
        config: Validated configuration
        patterns: File paths or glob patterns
        console: Console for the live report (default: stdout)

    Returns:
        ComparisonResult of the run

    Raises:
        InsufficientInputError: If fewer than two files can be compared
        ConfigurationError: If the template cannot be loaded
        WorkerPoolError: If the comparison phase hit a fatal fault
    """
    console = console or Console()

    paths = resolve_paths(patterns)
    if len(paths) < 2:
        raise InsufficientInputError(len(paths))
    logger.info(f"Got {len(paths)} files to compare.")

    preprocess = build_preprocessor(trim=config.trim, formatter=config.formatter)
    loaded = load_files(paths, preprocess)
    records = loaded.records

    if config.template:
        try:
            template = load_file(config.template, preprocess)
        except FileLoadError as e:
            raise ConfigurationError(e.message) from e
        records = exclude_template_matches(
            [record for record in records if record.id != template.id],
            template.content,
        )

    if len(records) < 2:
        raise InsufficientInputError(len(records))

    store = ContentStore.from_records(records)

    log_writer = None
    if config.log_file:
        try:
            log_writer = ScoreLogWriter(config.log_file, precision=config.precision).open()
        except ReportWriteError as e:
            logger.warning(f"{e.message}; continuing without a score log")

    reporter = LiveReporter(console)
    tracker = ProgressTracker(pair_count(len(store)), console=console, enabled=config.progress)
    engine = ComparisonEngine(
        store,
        create_scorer(config.metric),
        ScoreRange(config.sensitivity, config.max_sensitivity),
        workers=config.jobs,
        on_report=reporter,
        on_result=tracker,
        log_writer=log_writer,
    )

    try:
        with tracker:
            result = engine.run()
    finally:
        if log_writer is not None:
            log_writer.close()

    render_summary(result, len(store), config.metric.value)
    return result


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
