"""
Core comparison engine: content store, pair generation, work queue,
scorers, worker pool and result aggregation.
"""

from .aggregator import ResultAggregator
from .channel import ResultChannel, Sender
from .engine import ComparisonEngine, ComparisonResult
from .loader import LoadResult, decode_bytes, load_file, load_files, resolve_paths
from .models import FileID, FileRecord, Pair, ScoreFailure, ScoreRange, ScoreRecord, ScoreTable
from .pairs import generate_pairs, pair_count
from .preprocess import ExternalFormatter, build_preprocessor, exclude_template_matches, trim_whitespace
from .scorer import DamerauLevenshteinScorer, LevenshteinScorer, Metric, Scorer, create_scorer
from .store import ContentStore
from .work_queue import WorkQueue
from .workers import WorkerPool, resolve_worker_count

__all__ = [
    # Data model
    "FileID",
    "FileRecord",
    "Pair",
    "ScoreFailure",
    "ScoreRange",
    "ScoreRecord",
    "ScoreTable",
    # Components
    "ContentStore",
    "WorkQueue",
    "ResultChannel",
    "Sender",
    "WorkerPool",
    "ResultAggregator",
    "ComparisonEngine",
    "ComparisonResult",
    # Scoring
    "Metric",
    "Scorer",
    "LevenshteinScorer",
    "DamerauLevenshteinScorer",
    "create_scorer",
    # Functions
    "generate_pairs",
    "pair_count",
    "resolve_worker_count",
    "resolve_paths",
    "decode_bytes",
    "load_file",
    "load_files",
    "LoadResult",
    "trim_whitespace",
    "ExternalFormatter",
    "build_preprocessor",
    "exclude_template_matches",
]
