"""Universe scanning, ranking and position sizing."""

from signalscore.scanner.rate_limit import RateLimiter
from signalscore.scanner.scanner import Scanner, SeriesFetcher, scan
from signalscore.scanner.sizing import RISK_PERCENT_BY_LEVEL, PositionSizer, RiskPercentSizer
from signalscore.scanner.universe import DEFAULT_UNIVERSE, normalize_universe

__all__ = [
    "Scanner",
    "SeriesFetcher",
    "scan",
    "RateLimiter",
    "PositionSizer",
    "RiskPercentSizer",
    "RISK_PERCENT_BY_LEVEL",
    "DEFAULT_UNIVERSE",
    "normalize_universe",
]
