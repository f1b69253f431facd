"""Signal scoring package root."""

from signalscore.exceptions import (
    ConfigError,
    DataSourceError,
    DataValidationError,
    SignalScoreError,
)
from signalscore.indicators import compute
from signalscore.scanner import Scanner, scan
from signalscore.scoring import CompositeScorer, score_series
from signalscore.types import OHLCVSeries, Score, ScoringWeights

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SignalScoreError",
    "ConfigError",
    "DataSourceError",
    "DataValidationError",
    "OHLCVSeries",
    "Score",
    "ScoringWeights",
    "compute",
    "CompositeScorer",
    "score_series",
    "Scanner",
    "scan",
]
