"""Array kernels shared by the indicator modules.

Kernels take numpy arrays and return only the valid suffix of the output:
a kernel with lookback ``p`` over ``n`` inputs returns ``n - p + 1`` values
(or an empty array when ``n < p``). Wrappers then pin the values to the last
timestamps of the input with :func:`aligned`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

from signalscore.indicators.params import PriceSource
from signalscore.types import OHLCVSeries, Point, PointSeries

FloatArray = NDArray[np.float64]

EMPTY: FloatArray = np.empty(0, dtype=np.float64)


# ---------------------------------------------------------------------------
# Input / Output
# ---------------------------------------------------------------------------


def price(series: OHLCVSeries, source: PriceSource = PriceSource.CLOSE) -> FloatArray:
    """Extract the requested price column or blend."""
    if source is PriceSource.CLOSE:
        return series.closes()
    if source is PriceSource.OPEN:
        return series.opens()
    if source is PriceSource.HIGH:
        return series.highs()
    if source is PriceSource.LOW:
        return series.lows()
    if source is PriceSource.HL2:
        return (series.highs() + series.lows()) / 2.0
    if source is PriceSource.HLC3:
        return typical_price(series)
    return (series.opens() + series.highs() + series.lows() + series.closes()) / 4.0


def typical_price(series: OHLCVSeries) -> FloatArray:
    return (series.highs() + series.lows() + series.closes()) / 3.0


def suffix(values: FloatArray, n: int) -> FloatArray:
    """Last ``n`` elements (``values[-0:]`` would return everything)."""
    if n <= 0:
        return EMPTY
    return values[len(values) - n :]


def aligned(name: str, timestamps: Sequence[datetime], values: FloatArray) -> PointSeries:
    """Pin ``values`` to the most recent ``len(values)`` timestamps."""
    count = len(values)
    if count == 0:
        return PointSeries(name=name)
    stamps = timestamps[len(timestamps) - count :]
    return PointSeries(
        name=name,
        points=tuple(
            Point(timestamp=ts, value=float(v)) for ts, v in zip(stamps, values)
        ),
    )


def safe_divide(num: FloatArray, den: FloatArray, fill: float) -> FloatArray:
    """Element-wise ``num / den`` with ``fill`` wherever ``den == 0``."""
    num = np.asarray(num, dtype=np.float64)
    den = np.asarray(den, dtype=np.float64)
    out = np.full(np.broadcast(num, den).shape, fill, dtype=np.float64)
    np.divide(num, den, out=out, where=den != 0)
    return out


# ---------------------------------------------------------------------------
# Rolling Windows
# ---------------------------------------------------------------------------


def windows(x: FloatArray, period: int) -> NDArray[np.float64]:
    return sliding_window_view(x, period)


def sma(x: FloatArray, period: int) -> FloatArray:
    if len(x) < period:
        return EMPTY
    return windows(x, period).mean(axis=1)


def rolling_sum(x: FloatArray, period: int) -> FloatArray:
    if len(x) < period:
        return EMPTY
    return windows(x, period).sum(axis=1)


def rolling_std(x: FloatArray, period: int) -> FloatArray:
    """Population standard deviation over each window."""
    if len(x) < period:
        return EMPTY
    return windows(x, period).std(axis=1)


def rolling_max(x: FloatArray, period: int) -> FloatArray:
    if len(x) < period:
        return EMPTY
    return windows(x, period).max(axis=1)


def rolling_min(x: FloatArray, period: int) -> FloatArray:
    if len(x) < period:
        return EMPTY
    return windows(x, period).min(axis=1)


def wma(x: FloatArray, period: int) -> FloatArray:
    """Linearly weighted average, newest value weighted ``period``."""
    if len(x) < period:
        return EMPTY
    weights = np.arange(1, period + 1, dtype=np.float64)
    return windows(x, period) @ weights / weights.sum()


# ---------------------------------------------------------------------------
# Recursive Smoothing
# ---------------------------------------------------------------------------


def ema(x: FloatArray, period: int) -> FloatArray:
    """Exponential average seeded with the SMA of the first ``period`` values."""
    if len(x) < period:
        return EMPTY
    alpha = 2.0 / (period + 1)
    out = np.empty(len(x) - period + 1, dtype=np.float64)
    out[0] = x[:period].mean()
    for i, value in enumerate(x[period:], start=1):
        out[i] = (value - out[i - 1]) * alpha + out[i - 1]
    return out


def wilder_average(x: FloatArray, period: int) -> FloatArray:
    """Wilder's running average: ``(prev * (p - 1) + x) / p`` after an SMA seed."""
    if len(x) < period:
        return EMPTY
    out = np.empty(len(x) - period + 1, dtype=np.float64)
    out[0] = x[:period].mean()
    for i, value in enumerate(x[period:], start=1):
        out[i] = (out[i - 1] * (period - 1) + value) / period
    return out


def wilder_sum(x: FloatArray, period: int) -> FloatArray:
    """Wilder's running sum: ``prev - prev / p + x`` after a plain-sum seed."""
    if len(x) < period:
        return EMPTY
    out = np.empty(len(x) - period + 1, dtype=np.float64)
    out[0] = x[:period].sum()
    for i, value in enumerate(x[period:], start=1):
        out[i] = out[i - 1] - out[i - 1] / period + value
    return out


# ---------------------------------------------------------------------------
# Bar Relationships
# ---------------------------------------------------------------------------


def true_range(high: FloatArray, low: FloatArray, close: FloatArray) -> FloatArray:
    """True range from the second bar on (needs a previous close)."""
    if len(close) < 2:
        return EMPTY
    prev_close = close[:-1]
    h = high[1:]
    l = low[1:]
    return np.maximum.reduce([h - l, np.abs(h - prev_close), np.abs(l - prev_close)])


def atr_values(high: FloatArray, low: FloatArray, close: FloatArray, period: int) -> FloatArray:
    return wilder_average(true_range(high, low, close), period)


def close_location_value(high: FloatArray, low: FloatArray, close: FloatArray) -> FloatArray:
    """``((c - l) - (h - c)) / (h - l)``; 0 for bars with no range."""
    return safe_divide((close - low) - (high - close), high - low, 0.0)


def rate_of_change(x: FloatArray, period: int) -> FloatArray:
    """Percent change over ``period`` bars; 0 where the base price is 0."""
    if len(x) <= period:
        return EMPTY
    base = x[:-period]
    return safe_divide(100.0 * (x[period:] - base), base, 0.0)
