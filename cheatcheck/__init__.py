"""CheatCheck - Detect near-duplicate text files with pairwise similarity scoring."""

__version__ = "0.1.0"
__author__ = "Rohan Vinaik"
__email__ = "rohanpvinaik@gmail.com"

from .core.engine import ComparisonEngine, ComparisonResult
from .core.models import Pair, ScoreRange, ScoreRecord, ScoreTable
from .core.scorer import Metric, create_scorer
from .core.store import ContentStore

__all__ = [
    "ComparisonEngine",
    "ComparisonResult",
    "ContentStore",
    "Metric",
    "Pair",
    "ScoreRange",
    "ScoreRecord",
    "ScoreTable",
    "create_scorer",
    "__version__",
]
