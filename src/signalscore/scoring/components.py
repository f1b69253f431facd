"""Rule sets turning indicator outputs into component scores.

Each rule that has enough history casts a vote in [-1, 1] with a fixed rule
weight and records a human-readable signal. A component's score is the
weighted mean vote scaled to [-100, 100]. When no rule could be evaluated the
component is reported unavailable so the composite can exclude it.
"""

from __future__ import annotations

from signalscore import indicators
from signalscore.indicators import core
from signalscore.indicators.params import (
    AtrParams,
    BbPercentBParams,
    CmfParams,
    MacdParams,
    MfiParams,
    RocParams,
    RsiParams,
    SmaParams,
    StochasticParams,
)
from signalscore.scoring.patterns import detect_patterns
from signalscore.types import (
    ComponentScore,
    DetectedPattern,
    OHLCVSeries,
    PatternBias,
    PointSeries,
)

RELATIVE_VOLUME_PERIOD = 20
OBV_SMA_PERIOD = 10
SWING_WINDOW = 10
PATTERNS_MIN_BARS = 3


class _Votes:
    """Accumulates weighted votes for one component."""

    def __init__(self) -> None:
        self.total = 0.0
        self.weight = 0.0
        self.signals: list[str] = []

    def add(self, vote: float, weight: float, signal: str | None = None) -> None:
        self.total += max(-1.0, min(1.0, vote)) * weight
        self.weight += weight
        if signal:
            self.signals.append(signal)

    def result(self) -> ComponentScore:
        if self.weight == 0:
            return ComponentScore(score=0.0, weight=0.0, signals=[], available=False)
        score = 100.0 * self.total / self.weight
        return ComponentScore(
            score=max(-100.0, min(100.0, score)),
            weight=0.0,
            signals=self.signals,
        )


def _cross(diff: PointSeries) -> int:
    """+1 if the last step crossed above zero, -1 if below, else 0."""
    last, prev = diff.last(), diff.previous()
    if last is None or prev is None:
        return 0
    if prev <= 0 < last:
        return 1
    if prev >= 0 > last:
        return -1
    return 0


def _difference(name: str, a: PointSeries, b: PointSeries) -> PointSeries:
    """``a - b`` over the timestamps both series share (b is the shorter)."""
    n = min(len(a), len(b))
    values = core.suffix(a.values(), n) - core.suffix(b.values(), n)
    return core.aligned(name, b.timestamps(), values)


# ---------------------------------------------------------------------------
# Technical
# ---------------------------------------------------------------------------


def technical_component(series: OHLCVSeries) -> ComponentScore:
    """Oscillator and trend rules: RSI, MACD, moving averages, stochastic, %B."""
    votes = _Votes()
    bar = series.last()

    rsi = indicators.rsi(series, RsiParams(period=14)).last()
    if rsi is not None:
        if rsi < 30:
            votes.add(1.0, 1.0, f"RSI oversold ({rsi:.1f})")
        elif rsi > 70:
            votes.add(-1.0, 1.0, f"RSI overbought ({rsi:.1f})")
        elif rsi > 50:
            votes.add(0.4, 1.0, f"RSI bullish ({rsi:.1f})")
        elif rsi < 50:
            votes.add(-0.4, 1.0, f"RSI bearish ({rsi:.1f})")
        else:
            votes.add(0.0, 1.0, "RSI neutral (50.0)")

    histogram = indicators.macd(series, MacdParams()).histogram
    if not histogram.is_empty:
        crossed = _cross(histogram)
        last = histogram.last()
        if crossed > 0:
            votes.add(1.0, 1.0, "MACD bullish crossover")
        elif crossed < 0:
            votes.add(-1.0, 1.0, "MACD bearish crossover")
        elif last > 0:
            votes.add(0.5, 1.0, "MACD histogram positive")
        elif last < 0:
            votes.add(-0.5, 1.0, "MACD histogram negative")
        else:
            votes.add(0.0, 1.0)

    averages = {
        period: indicators.sma(series, SmaParams(period=period))
        for period in (20, 50, 200)
    }
    known = {p: s.last() for p, s in averages.items() if not s.is_empty}
    if known and bar is not None:
        above = [p for p, value in known.items() if bar.close > value]
        below = [p for p, value in known.items() if bar.close < value]
        parts = []
        if above:
            parts.append("above " + ", ".join(f"SMA{p}" for p in above))
        if below:
            parts.append("below " + ", ".join(f"SMA{p}" for p in below))
        signal = "Price " + " and ".join(parts) if parts else "Price at moving averages"
        votes.add((len(above) - len(below)) / len(known), 1.0, signal)

    if 50 in known and 200 in known:
        spread = _difference("sma50-sma200", averages[50], averages[200])
        crossed = _cross(spread)
        if crossed > 0:
            votes.add(1.0, 0.75, "Golden cross (SMA50 crossed above SMA200)")
        elif crossed < 0:
            votes.add(-1.0, 0.75, "Death cross (SMA50 crossed below SMA200)")
        elif spread.last() > 0:
            votes.add(0.5, 0.75, "SMA50 above SMA200")
        else:
            votes.add(-0.5, 0.75, "SMA50 below SMA200")

    stoch = indicators.stochastic(series, StochasticParams(k_period=14, k_smoothing=3, d_period=3))
    if not stoch.is_empty:
        k, d = stoch.k.last(), stoch.d.last()
        if k < 20 and d < 20:
            votes.add(1.0, 0.5, f"Stochastic oversold ({k:.1f})")
        elif k > 80 and d > 80:
            votes.add(-1.0, 0.5, f"Stochastic overbought ({k:.1f})")
        else:
            votes.add(0.0, 0.5)

    percent_b = indicators.bb_percent_b(series, BbPercentBParams()).last()
    if percent_b is not None:
        if percent_b < 0:
            votes.add(1.0, 0.5, "Price below lower Bollinger Band")
        elif percent_b > 1:
            votes.add(-1.0, 0.5, "Price above upper Bollinger Band")
        elif percent_b < 0.2:
            votes.add(0.5, 0.5, "Price near lower Bollinger Band")
        elif percent_b > 0.8:
            votes.add(-0.5, 0.5, "Price near upper Bollinger Band")
        else:
            votes.add(0.0, 0.5)

    return votes.result()


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------


def relative_volume(series: OHLCVSeries, period: int = RELATIVE_VOLUME_PERIOD) -> float | None:
    """Last volume divided by the average of the last ``period`` volumes."""
    if len(series) < period:
        return None
    volumes = series.volumes()
    average = float(volumes[-period:].mean())
    if average == 0:
        return None
    return float(volumes[-1]) / average


def volume_component(series: OHLCVSeries) -> ComponentScore:
    """Volume rules: relative volume, OBV trend, Chaikin Money Flow, MFI."""
    votes = _Votes()

    ratio = relative_volume(series)
    if ratio is not None:
        closes = series.closes()
        change = closes[-1] - closes[-2] if len(closes) >= 2 else 0.0
        if ratio >= 1.5 and change > 0:
            votes.add(1.0, 1.0, f"High volume on up day ({ratio:.1f}x average)")
        elif ratio >= 1.5 and change < 0:
            votes.add(-1.0, 1.0, f"High volume on down day ({ratio:.1f}x average)")
        elif ratio < 0.5:
            votes.add(-0.3, 1.0, f"Low volume ({ratio:.1f}x average)")
        else:
            votes.add(0.0, 1.0)

    obv = indicators.obv(series)
    if len(obv) >= OBV_SMA_PERIOD:
        obv_values = obv.values()
        obv_average = float(obv_values[-OBV_SMA_PERIOD:].mean())
        if obv_values[-1] > obv_average:
            votes.add(0.6, 0.75, "OBV above its 10-bar average (accumulation)")
        elif obv_values[-1] < obv_average:
            votes.add(-0.6, 0.75, "OBV below its 10-bar average (distribution)")
        else:
            votes.add(0.0, 0.75)

    cmf = indicators.cmf(series, CmfParams(period=20)).last()
    if cmf is not None:
        if cmf > 0.05:
            votes.add(0.6, 0.75, f"Chaikin Money Flow positive ({cmf:.2f})")
        elif cmf < -0.05:
            votes.add(-0.6, 0.75, f"Chaikin Money Flow negative ({cmf:.2f})")
        else:
            votes.add(0.0, 0.75)

    mfi = indicators.mfi(series, MfiParams(period=14)).last()
    if mfi is not None:
        if mfi < 20:
            votes.add(1.0, 0.5, f"MFI oversold ({mfi:.1f})")
        elif mfi > 80:
            votes.add(-1.0, 0.5, f"MFI overbought ({mfi:.1f})")
        else:
            votes.add(0.0, 0.5)

    return votes.result()


# ---------------------------------------------------------------------------
# Price Action
# ---------------------------------------------------------------------------


def price_action_component(series: OHLCVSeries) -> ComponentScore:
    """Momentum, volatility, swing structure and Parabolic SAR position."""
    votes = _Votes()
    bar = series.last()

    roc = indicators.roc(series, RocParams(period=10)).last()
    if roc is not None:
        if roc > 5:
            votes.add(1.0, 1.0, f"Strong upward momentum ({roc:+.1f}% over 10 bars)")
        elif roc < -5:
            votes.add(-1.0, 1.0, f"Strong downward momentum ({roc:+.1f}% over 10 bars)")
        else:
            votes.add(roc / 5.0, 1.0)

    atr = indicators.atr(series, AtrParams(period=14)).last()
    if atr is not None and bar is not None and bar.close > 0:
        atr_percent = 100.0 * atr / bar.close
        if atr_percent > 3:
            votes.add(-0.3, 0.5, f"High volatility (ATR {atr_percent:.1f}% of price)")
        else:
            votes.add(0.0, 0.5)

    if len(series) >= 2 * SWING_WINDOW:
        highs = series.highs()
        lows = series.lows()
        higher_high = highs[-SWING_WINDOW:].max() > highs[-2 * SWING_WINDOW : -SWING_WINDOW].max()
        lower_low = lows[-SWING_WINDOW:].min() < lows[-2 * SWING_WINDOW : -SWING_WINDOW].min()
        vote = (0.8 if higher_high else 0.0) - (0.8 if lower_low else 0.0)
        votes.add(vote, 0.75)
        if higher_high:
            votes.signals.append("Higher highs (uptrend structure)")
        if lower_low:
            votes.signals.append("Lower lows (downtrend structure)")

    sar = indicators.parabolic_sar(series).last()
    if sar is not None and bar is not None:
        if bar.close > sar:
            votes.add(0.5, 0.5, "Price above Parabolic SAR")
        elif bar.close < sar:
            votes.add(-0.5, 0.5, "Price below Parabolic SAR")
        else:
            votes.add(0.0, 0.5)

    return votes.result()


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


_BIAS_SIGN = {
    PatternBias.BULLISH: 1.0,
    PatternBias.BEARISH: -1.0,
    PatternBias.NEUTRAL: 0.0,
}


def patterns_component(
    series: OHLCVSeries, patterns: list[DetectedPattern] | None = None
) -> ComponentScore:
    """Mean of ``bias * confidence`` over detected patterns.

    :param series: Input series.
    :param patterns: Pre-computed detections, to avoid running detectors twice.
    """
    if len(series) < PATTERNS_MIN_BARS:
        return _Votes().result()
    if patterns is None:
        patterns = detect_patterns(series)

    votes = _Votes()
    if not patterns:
        votes.add(0.0, 1.0, "No patterns detected")
        return votes.result()
    for pattern in patterns:
        sign = _BIAS_SIGN[pattern.bias]
        votes.add(
            sign * pattern.confidence / 100.0,
            1.0,
            f"{pattern.name} ({pattern.bias.value}, {pattern.confidence:.0f}%)",
        )
    return votes.result()


__all__ = [
    "technical_component",
    "volume_component",
    "price_action_component",
    "patterns_component",
    "relative_volume",
]
