"""Core type definitions for the signal scoring engine.

All data models use Pydantic BaseModel for automatic validation, JSON
serialization, and better error messages. Every model here is immutable; an
indicator or scorer never mutates its input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, NewType

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Type aliases for domain-specific identifiers
Symbol = NewType("Symbol", str)


# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class FrozenModel(BaseModel):
    """Base model with frozen (immutable) configuration."""

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Date/Time Types
# ---------------------------------------------------------------------------


class DateRange(FrozenModel):
    """Inclusive start, exclusive end range for time-bounded queries.

    :param start: Start of the range (inclusive).
    :param end: End of the range (exclusive).
    """

    start: datetime
    end: datetime


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Market Data Types
# ---------------------------------------------------------------------------


class Bar(FrozenModel):
    """One OHLCV observation.

    Timestamps may be given as datetimes, ISO-8601 strings or epoch seconds;
    naive values are interpreted as UTC.

    :param symbol: Market symbol for this bar, if known.
    :param timestamp: Bar timestamp.
    :param open: Opening price.
    :param high: Highest price during the bar period.
    :param low: Lowest price during the bar period.
    :param close: Closing price.
    :param volume: Traded volume during the bar period.
    """

    symbol: Symbol | None = None
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return _ensure_utc(value)


class OHLCVSeries(FrozenModel):
    """Validated, chronologically ordered bars for a single symbol.

    Construction runs :func:`signalscore.data.series.validate_bars`, so every
    instance satisfies the OHLC ordering, non-negativity and strictly
    increasing timestamp rules.

    :param symbol: Symbol the series belongs to, if known.
    :param bars: Bars in ascending timestamp order.
    :raises DataValidationError: If any bar breaks the validation rules.
    """

    symbol: Symbol | None = None
    bars: tuple[Bar, ...] = ()

    @model_validator(mode="after")
    def _validate(self) -> OHLCVSeries:
        from signalscore.data.series import validate_bars

        validate_bars(self.bars)
        return self

    @classmethod
    def from_bars(cls, bars: Any, symbol: str | None = None) -> OHLCVSeries:
        """Build a validated series from bars or bar-like mappings.

        :param bars: Iterable of :class:`Bar` instances or dicts.
        :param symbol: Optional symbol for the series.
        :returns: Validated series.
        :raises DataValidationError: If the bars are invalid.
        """
        return cls(symbol=Symbol(symbol) if symbol else None, bars=tuple(bars))

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def is_empty(self) -> bool:
        return not self.bars

    def timestamps(self) -> list[datetime]:
        return [bar.timestamp for bar in self.bars]

    def opens(self) -> NDArray[np.float64]:
        return np.array([bar.open for bar in self.bars], dtype=np.float64)

    def highs(self) -> NDArray[np.float64]:
        return np.array([bar.high for bar in self.bars], dtype=np.float64)

    def lows(self) -> NDArray[np.float64]:
        return np.array([bar.low for bar in self.bars], dtype=np.float64)

    def closes(self) -> NDArray[np.float64]:
        return np.array([bar.close for bar in self.bars], dtype=np.float64)

    def volumes(self) -> NDArray[np.float64]:
        return np.array([bar.volume for bar in self.bars], dtype=np.float64)

    def last(self) -> Bar | None:
        """Most recent bar, or None for an empty series."""
        return self.bars[-1] if self.bars else None

    def tail(self, n: int) -> OHLCVSeries:
        """Series holding only the most recent ``n`` bars."""
        if n <= 0:
            return OHLCVSeries(symbol=self.symbol, bars=())
        return OHLCVSeries(symbol=self.symbol, bars=self.bars[-n:])


# ---------------------------------------------------------------------------
# Indicator Output Types
# ---------------------------------------------------------------------------


class Point(FrozenModel):
    """Single indicator value aligned to a bar timestamp.

    :param timestamp: Timestamp of the bar the value belongs to.
    :param value: Indicator value (always finite).
    """

    timestamp: datetime
    value: float


class PointSeries(FrozenModel):
    """Indicator output aligned to a suffix of the input bars.

    The first ``lookback - 1`` bars of the input have no point; an input
    shorter than the lookback produces an empty series.

    :param name: Indicator label (e.g. ``"rsi(14)"``).
    :param points: Points in ascending timestamp order.
    """

    name: str
    points: tuple[Point, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def values(self) -> NDArray[np.float64]:
        return np.array([p.value for p in self.points], dtype=np.float64)

    def timestamps(self) -> list[datetime]:
        return [p.timestamp for p in self.points]

    def last(self) -> float | None:
        """Most recent value, or None if the series is empty."""
        return self.points[-1].value if self.points else None

    def previous(self) -> float | None:
        """Second most recent value, or None if unavailable."""
        return self.points[-2].value if len(self.points) >= 2 else None

    def tail(self, n: int) -> PointSeries:
        if n <= 0:
            return PointSeries(name=self.name)
        return PointSeries(name=self.name, points=self.points[-n:])


class BandSeries(FrozenModel):
    """Upper/middle/lower envelope (Bollinger, Keltner, Donchian, Envelopes).

    All three members share identical timestamps.
    """

    upper: PointSeries
    middle: PointSeries
    lower: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.middle.is_empty


class MACDSeries(FrozenModel):
    """Line, signal and histogram of MACD, PPO or TSI.

    The line is trimmed to the span where the signal exists, so
    ``histogram == line - signal`` holds point by point.
    """

    line: PointSeries
    signal: PointSeries
    histogram: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.signal.is_empty


class StochasticSeries(FrozenModel):
    """%K and %D of the stochastic oscillator, aligned on %D."""

    k: PointSeries
    d: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.d.is_empty


class ADXSeries(FrozenModel):
    """ADX with the directional indicators, aligned on ADX."""

    adx: PointSeries
    plus_di: PointSeries
    minus_di: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.adx.is_empty


class AroonSeries(FrozenModel):
    """Aroon up/down and their difference."""

    up: PointSeries
    down: PointSeries
    oscillator: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.oscillator.is_empty


class IchimokuSeries(FrozenModel):
    """Ichimoku lines, aligned on the longest window.

    Spans are reported at the bar they are computed from rather than
    projected ahead, and ``chikou`` is the close of the same bar.
    """

    tenkan: PointSeries
    kijun: PointSeries
    span_a: PointSeries
    span_b: PointSeries
    chikou: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.span_b.is_empty


class VortexSeries(FrozenModel):
    """Positive and negative vortex indicators (VI+ / VI-)."""

    plus: PointSeries
    minus: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.plus.is_empty


class PivotSeries(FrozenModel):
    """Floor-trader pivot with three resistance and three support levels.

    Each point is derived from the previous bar's high, low and close.
    """

    pivot: PointSeries
    r1: PointSeries
    r2: PointSeries
    r3: PointSeries
    s1: PointSeries
    s2: PointSeries
    s3: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.pivot.is_empty


class FibonacciSeries(FrozenModel):
    """Retracement levels between the rolling window's low and high."""

    level_0: PointSeries
    level_236: PointSeries
    level_382: PointSeries
    level_500: PointSeries
    level_618: PointSeries
    level_786: PointSeries
    level_100: PointSeries

    @property
    def is_empty(self) -> bool:
        return self.level_0.is_empty


# ---------------------------------------------------------------------------
# Pattern Types
# ---------------------------------------------------------------------------


class PatternBias(str, Enum):
    """Directional bias implied by a detected pattern."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PatternKind(str, Enum):
    """Family a pattern belongs to."""

    CANDLESTICK = "candlestick"
    CHART = "chart"


class DetectedPattern(FrozenModel):
    """A candlestick or chart pattern found in recent bars.

    :param name: Human-readable pattern name.
    :param kind: Candlestick or chart pattern.
    :param bias: Directional bias of the pattern.
    :param confidence: Detector confidence, 0-100.
    :param price_level: Reference price (breakout or pattern close).
    :param target_price: Projected target, if the pattern implies one.
    :param stop_loss: Invalidation level, if the pattern implies one.
    """

    name: str
    kind: PatternKind
    bias: PatternBias
    confidence: float = Field(ge=0, le=100)
    price_level: float
    target_price: float | None = None
    stop_loss: float | None = None


class SupportResistanceLevel(FrozenModel):
    """Price level touched repeatedly by closes.

    :param price: Level price.
    :param kind: ``"support"`` if below the last close, else ``"resistance"``.
    :param touches: Number of closes clustered at this level.
    :param strength: ``20 * touches`` capped at 100.
    """

    price: float
    kind: str
    touches: int
    strength: float


# ---------------------------------------------------------------------------
# Score Types
# ---------------------------------------------------------------------------


class Recommendation(str, Enum):
    """Discrete action label derived from the composite score."""

    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


class ScoringWeights(FrozenModel):
    """Relative weight of each score component.

    :param technical: Weight of the oscillator/trend component.
    :param volume: Weight of the volume component.
    :param price_action: Weight of the momentum/volatility component.
    :param patterns: Weight of the pattern component.
    :raises ValueError: If weights are negative or do not sum to 1.
    """

    technical: float = Field(0.35, ge=0)
    volume: float = Field(0.25, ge=0)
    price_action: float = Field(0.25, ge=0)
    patterns: float = Field(0.15, ge=0)

    @model_validator(mode="after")
    def _sums_to_one(self) -> ScoringWeights:
        total = self.technical + self.volume + self.price_action + self.patterns
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Component weights must sum to 1.0, got {total:.6f}")
        return self

    def as_dict(self) -> dict[str, float]:
        return {
            "technical": self.technical,
            "volume": self.volume,
            "price_action": self.price_action,
            "patterns": self.patterns,
        }


class ComponentScore(FrozenModel):
    """Score of one component with the weight it contributed.

    :param score: Directional score in [-100, 100].
    :param weight: Effective (renormalized) weight; 0 when unavailable.
    :param signals: Human-readable reasons behind the score.
    :param available: False when the series was too short to evaluate it.
    """

    score: float = Field(ge=-100, le=100)
    weight: float = Field(ge=0, le=1)
    signals: list[str] = Field(default_factory=list)
    available: bool = True


class ScoreComponents(FrozenModel):
    """The four components of a composite score."""

    technical: ComponentScore
    volume: ComponentScore
    price_action: ComponentScore
    patterns: ComponentScore

    def items(self) -> list[tuple[str, ComponentScore]]:
        return [
            ("technical", self.technical),
            ("volume", self.volume),
            ("price_action", self.price_action),
            ("patterns", self.patterns),
        ]


class PriceTargets(FrozenModel):
    """ATR-based trade levels.

    :param entry: Suggested entry price.
    :param stop_loss: Stop below entry (entry - multiple * ATR).
    :param target_1: Take-profit at 2R.
    :param target_2: Take-profit at 3R.
    :param risk_reward: Reward-to-risk ratio of the first target.
    """

    entry: float
    stop_loss: float
    target_1: float
    target_2: float
    risk_reward: float


class Score(FrozenModel):
    """Composite directional score for one series.

    :param symbol: Symbol of the scored series, if known.
    :param timestamp: Timestamp of the last bar scored.
    :param score: Weighted score in [-100, 100].
    :param components: Per-component breakdown.
    :param confidence: Agreement of the components, 0-100.
    :param recommendation: Label derived from ``score``.
    :param signals: Flattened component signals.
    :param warnings: Risk warnings (volatility, extremes, liquidity).
    :param patterns: Patterns detected in the recent bars.
    :param targets: Price targets, when ATR and Bollinger are available.
    """

    symbol: Symbol | None = None
    timestamp: datetime | None = None
    score: float = Field(ge=-100, le=100)
    components: ScoreComponents
    confidence: float = Field(ge=0, le=100)
    recommendation: Recommendation
    signals: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    patterns: list[DetectedPattern] = Field(default_factory=list)
    targets: PriceTargets | None = None

    @property
    def composite(self) -> float:
        """Score on the [-10, 10] scale."""
        return self.score / 10.0


# ---------------------------------------------------------------------------
# Scanner Types
# ---------------------------------------------------------------------------


class RiskLevel(str, Enum):
    """Account risk appetite used for position sizing."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class ScanParams(FrozenModel):
    """Parameters for a scan over a symbol universe.

    :param min_price: Minimum last close to consider a symbol.
    :param max_price: Maximum last close, or None for no cap.
    :param min_volume: Minimum 20-bar average volume.
    :param account_size: Account size used for position suggestions.
    :param risk_level: Risk appetite for position suggestions.
    :param min_score: Minimum composite score to include a result.
    :param top_n: Maximum number of results returned.
    :param max_workers: Maximum number of concurrent fetches.
    :param fetch_timeout: Seconds to wait for a single fetch.
    :param calls_per_second: Sustained fetch rate, or None for unlimited.
    """

    min_price: float = Field(0.0, ge=0)
    max_price: float | None = Field(None, gt=0)
    min_volume: float = Field(0.0, ge=0)
    account_size: float = Field(10000.0, gt=0)
    risk_level: RiskLevel = RiskLevel.MODERATE
    min_score: float = Field(60.0, ge=-100, le=100)
    top_n: int = Field(10, ge=1)
    max_workers: int = Field(4, ge=1)
    fetch_timeout: float = Field(30.0, gt=0)
    calls_per_second: float | None = Field(None, gt=0)

    @model_validator(mode="after")
    def _price_bounds(self) -> ScanParams:
        if self.max_price is not None and self.max_price < self.min_price:
            raise ValueError("max_price must be greater than or equal to min_price")
        return self


class PositionSuggestion(FrozenModel):
    """Risk-based position size for a scan result.

    :param shares: Whole number of shares.
    :param position_value: ``shares * entry``.
    :param risk_amount: Dollar loss if the stop is hit.
    :param risk_percent: Fraction of the account at risk (0.02 = 2%).
    """

    shares: int
    position_value: float
    risk_amount: float
    risk_percent: float


class ScanResult(FrozenModel):
    """One ranked symbol from a scan.

    :param symbol: Scanned symbol.
    :param score: Composite score.
    :param recommendation: Label derived from the score.
    :param confidence: Component agreement, 0-100.
    :param price: Last close.
    :param signals: Signals behind the score.
    :param warnings: Risk warnings.
    :param targets: Price targets, if available.
    :param position: Position suggestion, if targets are available.
    """

    symbol: Symbol
    score: float
    recommendation: Recommendation
    confidence: float
    price: float
    signals: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    targets: PriceTargets | None = None
    position: PositionSuggestion | None = None


class ScanReport(FrozenModel):
    """Outcome of a scan.

    :param results: Ranked results, best first.
    :param scanned: Number of unique symbols attempted.
    :param skipped: Number of symbols whose fetch failed or timed out.
    :param skipped_symbols: The symbols counted in ``skipped``.
    :param filtered: Number of symbols dropped by price/volume filters.
    :param cancelled: True when the scan was cancelled before finishing.
    """

    results: list[ScanResult] = Field(default_factory=list)
    scanned: int = 0
    skipped: int = 0
    skipped_symbols: list[Symbol] = Field(default_factory=list)
    filtered: int = 0
    cancelled: bool = False


# ---------------------------------------------------------------------------
# Configuration Types
# ---------------------------------------------------------------------------


class ScanConfig(FrozenModel):
    """Configuration for the scan command.

    :param universe: Symbols to scan.
    :param data_source: Data source type ("yahoo" or "csv").
    :param source_params: Provider-specific parameters.
    :param granularity: Bar granularity (e.g., "1h", "1d").
    :param lookback_days: Calendar days of history fetched per symbol.
    :param scan: Filters, limits and sizing inputs.
    :param weights: Composite score weights.
    :param log_level: Root logging level name.
    """

    universe: list[Symbol]
    data_source: str = "yahoo"
    source_params: dict[str, Any] = Field(default_factory=dict)
    granularity: str = "1d"
    lookback_days: int = Field(365, gt=0)
    scan: ScanParams = Field(default_factory=ScanParams)
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    # Type aliases
    "Symbol",
    # Base models
    "FrozenModel",
    # Date/Time
    "DateRange",
    # Market data
    "Bar",
    "OHLCVSeries",
    # Indicator output
    "Point",
    "PointSeries",
    "BandSeries",
    "MACDSeries",
    "StochasticSeries",
    "ADXSeries",
    "AroonSeries",
    "IchimokuSeries",
    "VortexSeries",
    "PivotSeries",
    "FibonacciSeries",
    # Patterns
    "PatternBias",
    "PatternKind",
    "DetectedPattern",
    "SupportResistanceLevel",
    # Scores
    "Recommendation",
    "ScoringWeights",
    "ComponentScore",
    "ScoreComponents",
    "PriceTargets",
    "Score",
    # Scanner
    "RiskLevel",
    "ScanParams",
    "PositionSuggestion",
    "ScanResult",
    "ScanReport",
    # Configuration
    "ScanConfig",
]
