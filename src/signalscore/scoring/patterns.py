"""Candlestick and chart pattern detection over the most recent bars.

Detectors are local heuristics with fixed confidences. Each returns a
:class:`~signalscore.types.DetectedPattern` or None; :func:`detect_patterns`
collects every hit for a series.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from signalscore.types import (
    Bar,
    DetectedPattern,
    OHLCVSeries,
    PatternBias,
    PatternKind,
    SupportResistanceLevel,
)

DOUBLE_WINDOW = 30
# Swing points this close to either end of the window are ignored
DOUBLE_EDGE = 2
TRIANGLE_WINDOW = 20
FLAG_WINDOW = 15
HEAD_SHOULDERS_WINDOW = 50
SUPPORT_RESISTANCE_MIN_BARS = 50
SUPPORT_RESISTANCE_MAX_BARS = 100

# Relative slope (fraction of mean price per bar) below which a trendline is flat
FLAT_SLOPE = 0.001
CONVERGING_SLOPE = 0.0005


def _candle(name: str, bias: PatternBias, confidence: float, bar: Bar, **levels) -> DetectedPattern:
    return DetectedPattern(
        name=name,
        kind=PatternKind.CANDLESTICK,
        bias=bias,
        confidence=confidence,
        price_level=bar.close,
        **levels,
    )


def _chart(name: str, bias: PatternBias, confidence: float, price: float, **levels) -> DetectedPattern:
    return DetectedPattern(
        name=name,
        kind=PatternKind.CHART,
        bias=bias,
        confidence=confidence,
        price_level=price,
        **levels,
    )


# ---------------------------------------------------------------------------
# Candlestick Patterns
# ---------------------------------------------------------------------------


def detect_doji(series: OHLCVSeries) -> DetectedPattern | None:
    """Body smaller than 10% of the bar's range."""
    bar = series.last()
    if bar is None:
        return None
    total_range = bar.high - bar.low
    if total_range > 0 and abs(bar.close - bar.open) / total_range < 0.1:
        return _candle("Doji", PatternBias.NEUTRAL, 75, bar)
    return None


def detect_hammer(series: OHLCVSeries) -> DetectedPattern | None:
    """Lower shadow over twice the body, upper shadow under half the body."""
    bar = series.last()
    if bar is None or bar.high == bar.low:
        return None
    body = abs(bar.close - bar.open)
    lower = min(bar.open, bar.close) - bar.low
    upper = bar.high - max(bar.open, bar.close)
    if lower > body * 2 and upper < body * 0.5:
        return _candle(
            "Hammer",
            PatternBias.BULLISH,
            80,
            bar,
            target_price=bar.close * 1.05,
            stop_loss=bar.low,
        )
    return None


def detect_shooting_star(series: OHLCVSeries) -> DetectedPattern | None:
    """Upper shadow over twice the body, lower shadow under half the body."""
    bar = series.last()
    if bar is None or bar.high == bar.low:
        return None
    body = abs(bar.close - bar.open)
    lower = min(bar.open, bar.close) - bar.low
    upper = bar.high - max(bar.open, bar.close)
    if upper > body * 2 and lower < body * 0.5:
        return _candle(
            "Shooting Star",
            PatternBias.BEARISH,
            80,
            bar,
            target_price=bar.close * 0.95,
            stop_loss=bar.high,
        )
    return None


def detect_engulfing(series: OHLCVSeries) -> DetectedPattern | None:
    """Opposite-colored body engulfing the previous body by at least 20%."""
    if len(series) < 2:
        return None
    prev, curr = series.bars[-2], series.bars[-1]
    curr_body = abs(curr.close - curr.open)
    prev_body = abs(prev.close - prev.open)
    if curr_body <= prev_body * 1.2:
        return None

    if (
        prev.close < prev.open
        and curr.close > curr.open
        and curr.open < prev.close
        and curr.close > prev.open
    ):
        return _candle(
            "Bullish Engulfing", PatternBias.BULLISH, 85, curr,
            target_price=curr.close * 1.08,
        )
    if (
        prev.close > prev.open
        and curr.close < curr.open
        and curr.open > prev.close
        and curr.close < prev.open
    ):
        return _candle(
            "Bearish Engulfing", PatternBias.BEARISH, 85, curr,
            target_price=curr.close * 0.92,
        )
    return None


def detect_star(series: OHLCVSeries) -> DetectedPattern | None:
    """Morning/Evening Star: long body, small body, reversal past the midpoint."""
    if len(series) < 3:
        return None
    first, second, third = series.bars[-3:]
    first_body = abs(first.close - first.open)
    second_body = abs(second.close - second.open)
    midpoint = (first.open + first.close) / 2
    if second_body >= first_body * 0.3:
        return None

    if first.close < first.open and third.close > third.open and third.close > midpoint:
        return _candle(
            "Morning Star", PatternBias.BULLISH, 90, third,
            target_price=third.close * 1.10,
        )
    if first.close > first.open and third.close < third.open and third.close < midpoint:
        return _candle(
            "Evening Star", PatternBias.BEARISH, 90, third,
            target_price=third.close * 0.90,
        )
    return None


# ---------------------------------------------------------------------------
# Chart Patterns
# ---------------------------------------------------------------------------


def _local_peaks(values: np.ndarray, reach: int, edge: int | None = None) -> list[int]:
    """Indices strictly above ``reach`` neighbors on each side.

    ``edge`` bars at each end are never candidates (default: ``reach``).
    """
    edge = reach if edge is None else max(edge, reach)
    peaks = []
    for i in range(edge, len(values) - edge):
        neighbors = np.concatenate((values[i - reach : i], values[i + 1 : i + 1 + reach]))
        if np.all(values[i] > neighbors):
            peaks.append(i)
    return peaks


def relative_slope(values: np.ndarray) -> float:
    """Least-squares slope per bar divided by the mean value."""
    mean = float(np.mean(values))
    if len(values) < 2 or mean == 0:
        return 0.0
    slope = np.polyfit(np.arange(len(values), dtype=np.float64), values, 1)[0]
    return float(slope) / mean


def detect_head_and_shoulders(series: OHLCVSeries) -> DetectedPattern | None:
    """Three peaks where the middle one clears two similar shoulders by 5%."""
    if len(series) < HEAD_SHOULDERS_WINDOW:
        return None
    window = series.tail(HEAD_SHOULDERS_WINDOW)
    highs = window.highs()
    peaks = _local_peaks(highs, reach=2)
    if len(peaks) < 3:
        return None

    head = max(peaks, key=lambda i: highs[i])
    left = [i for i in peaks if i < head]
    right = [i for i in peaks if i > head]
    if not left or not right:
        return None
    left_shoulder = highs[left[-1]]
    right_shoulder = highs[right[0]]

    if (
        abs(left_shoulder - right_shoulder) / left_shoulder < 0.05
        and highs[head] > left_shoulder * 1.05
    ):
        neckline = min(left_shoulder, right_shoulder)
        return _chart(
            "Head and Shoulders",
            PatternBias.BEARISH,
            85,
            window.bars[-1].close,
            target_price=neckline - (highs[head] - neckline),
            stop_loss=float(highs[head]),
        )
    return None


def detect_double_top_bottom(series: OHLCVSeries) -> DetectedPattern | None:
    """Two consecutive swing highs (or lows) within 2% of each other."""
    if len(series) < DOUBLE_WINDOW:
        return None
    window = series.tail(DOUBLE_WINDOW)
    current = window.bars[-1].close

    highs = window.highs()
    peaks = _local_peaks(highs, reach=1, edge=DOUBLE_EDGE)
    for a, b in zip(peaks, peaks[1:]):
        if abs(highs[a] - highs[b]) / highs[a] < 0.02:
            return _chart(
                "Double Top", PatternBias.BEARISH, 75, current,
                target_price=current * 0.92,
            )

    lows = window.lows()
    troughs = _local_peaks(-lows, reach=1, edge=DOUBLE_EDGE)
    for a, b in zip(troughs, troughs[1:]):
        if lows[a] > 0 and abs(lows[a] - lows[b]) / lows[a] < 0.02:
            return _chart(
                "Double Bottom", PatternBias.BULLISH, 75, current,
                target_price=current * 1.08,
            )
    return None


def detect_triangle(series: OHLCVSeries) -> DetectedPattern | None:
    """Ascending, descending or symmetrical triangle from trendline slopes."""
    if len(series) < TRIANGLE_WINDOW:
        return None
    window = series.tail(TRIANGLE_WINDOW)
    current = window.bars[-1].close
    high_slope = relative_slope(window.highs())
    low_slope = relative_slope(window.lows())

    if abs(high_slope) < FLAT_SLOPE and low_slope > FLAT_SLOPE:
        return _chart(
            "Ascending Triangle", PatternBias.BULLISH, 70, current,
            target_price=current * 1.08,
        )
    if abs(low_slope) < FLAT_SLOPE and high_slope < -FLAT_SLOPE:
        return _chart(
            "Descending Triangle", PatternBias.BEARISH, 70, current,
            target_price=current * 0.92,
        )
    if high_slope < -CONVERGING_SLOPE and low_slope > CONVERGING_SLOPE:
        return _chart("Symmetrical Triangle", PatternBias.NEUTRAL, 65, current)
    return None


def detect_flag(series: OHLCVSeries) -> DetectedPattern | None:
    """A move of more than 5% followed by a tight (under 3%) five-bar range."""
    if len(series) < FLAG_WINDOW:
        return None
    closes = series.tail(FLAG_WINDOW).closes()
    if closes[0] == 0:
        return None
    move = (closes[4] - closes[0]) / closes[0]
    recent = closes[-5:]
    average = float(recent.mean())
    if average == 0 or abs(move) <= 0.05:
        return None
    if (recent.max() - recent.min()) / average >= 0.03:
        return None

    current = float(closes[-1])
    if move > 0:
        return _chart(
            "Bull Flag", PatternBias.BULLISH, 75, current,
            target_price=current * (1 + abs(move)),
        )
    return _chart(
        "Bear Flag", PatternBias.BEARISH, 75, current,
        target_price=current * (1 - abs(move)),
    )


DETECTORS: tuple[Callable[[OHLCVSeries], DetectedPattern | None], ...] = (
    detect_doji,
    detect_hammer,
    detect_shooting_star,
    detect_engulfing,
    detect_star,
    detect_head_and_shoulders,
    detect_double_top_bottom,
    detect_triangle,
    detect_flag,
)


def detect_patterns(series: OHLCVSeries) -> list[DetectedPattern]:
    """Run every detector and return the patterns found, candlesticks first."""
    found = []
    for detector in DETECTORS:
        pattern = detector(series)
        if pattern is not None:
            found.append(pattern)
    return found


# ---------------------------------------------------------------------------
# Support & Resistance
# ---------------------------------------------------------------------------


def detect_support_resistance(
    series: OHLCVSeries,
    threshold: float = 0.02,
) -> list[SupportResistanceLevel]:
    """Cluster recent closes into levels touched at least twice.

    Walks the most recent 100 closes from newest to oldest; a close within
    ``threshold`` (relative) of an existing level counts as a touch of it,
    otherwise it opens a new level. Levels below the last close are support,
    the rest resistance.

    :param series: Input series; fewer than 50 bars yields no levels.
    :param threshold: Relative distance for a close to touch a level.
    :returns: Up to 10 levels, strongest first.
    """
    if len(series) < SUPPORT_RESISTANCE_MIN_BARS:
        return []
    closes = series.closes()[::-1][:SUPPORT_RESISTANCE_MAX_BARS]
    current = float(closes[0])

    levels: list[list[float]] = []  # [price, touches]
    for close in closes:
        for level in levels:
            if level[0] > 0 and abs(close - level[0]) / level[0] < threshold:
                level[1] += 1
                break
        else:
            levels.append([float(close), 1])

    result = [
        SupportResistanceLevel(
            price=price,
            kind="support" if price < current else "resistance",
            touches=int(touches),
            strength=min(100.0, touches * 20.0),
        )
        for price, touches in levels
        if touches >= 2
    ]
    result.sort(key=lambda level: level.strength, reverse=True)
    return result[:10]


__all__ = [
    "DETECTORS",
    "detect_patterns",
    "detect_doji",
    "detect_hammer",
    "detect_shooting_star",
    "detect_engulfing",
    "detect_star",
    "detect_head_and_shoulders",
    "detect_double_top_bottom",
    "detect_triangle",
    "detect_flag",
    "detect_support_resistance",
    "relative_slope",
]
