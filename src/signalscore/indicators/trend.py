"""Trend and overlay indicators.

Moving averages, Parabolic SAR, VWAP, the Ichimoku lines and the Vortex
indicator.
"""

from __future__ import annotations

import math
from datetime import timezone

import numpy as np

from signalscore.indicators import core
from signalscore.indicators.params import (
    DemaParams,
    EmaParams,
    HmaParams,
    IchimokuParams,
    KamaParams,
    ParabolicSarParams,
    SmaParams,
    TemaParams,
    VortexParams,
    VwapParams,
    WmaParams,
    ZlemaParams,
)
from signalscore.types import IchimokuSeries, OHLCVSeries, PointSeries, VortexSeries


def sma(series: OHLCVSeries, params: SmaParams | None = None) -> PointSeries:
    """Simple moving average."""
    params = params or SmaParams()
    values = core.sma(core.price(series, params.source), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def ema(series: OHLCVSeries, params: EmaParams | None = None) -> PointSeries:
    """Exponential moving average with ``alpha = 2 / (period + 1)``.

    The first value is the SMA of the first ``period`` prices.
    """
    params = params or EmaParams()
    values = core.ema(core.price(series, params.source), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def wma(series: OHLCVSeries, params: WmaParams | None = None) -> PointSeries:
    """Linearly weighted moving average."""
    params = params or WmaParams()
    values = core.wma(core.price(series, params.source), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def dema(series: OHLCVSeries, params: DemaParams | None = None) -> PointSeries:
    """Double EMA: ``2 * EMA - EMA(EMA)``."""
    params = params or DemaParams()
    ema1 = core.ema(core.price(series, params.source), params.period)
    ema2 = core.ema(ema1, params.period)
    values = 2.0 * core.suffix(ema1, len(ema2)) - ema2
    return core.aligned(params.label, series.timestamps(), values)


def tema(series: OHLCVSeries, params: TemaParams | None = None) -> PointSeries:
    """Triple EMA: ``3 * EMA1 - 3 * EMA2 + EMA3``."""
    params = params or TemaParams()
    ema1 = core.ema(core.price(series, params.source), params.period)
    ema2 = core.ema(ema1, params.period)
    ema3 = core.ema(ema2, params.period)
    n = len(ema3)
    values = 3.0 * core.suffix(ema1, n) - 3.0 * core.suffix(ema2, n) + ema3
    return core.aligned(params.label, series.timestamps(), values)


def hma(series: OHLCVSeries, params: HmaParams | None = None) -> PointSeries:
    """Hull moving average: ``WMA(2 * WMA(p / 2) - WMA(p), sqrt(p))``."""
    params = params or HmaParams()
    x = core.price(series, params.source)
    half = core.wma(x, params.period // 2)
    full = core.wma(x, params.period)
    raw = 2.0 * core.suffix(half, len(full)) - full
    values = core.wma(raw, int(math.sqrt(params.period)))
    return core.aligned(params.label, series.timestamps(), values)


def kama(series: OHLCVSeries, params: KamaParams | None = None) -> PointSeries:
    """Kaufman adaptive moving average.

    Seeded with the price at bar ``period - 1``; the efficiency ratio is 0 when
    the window had no movement at all.
    """
    params = params or KamaParams()
    x = core.price(series, params.source)
    p = params.period
    if len(x) < params.lookback:
        return PointSeries(name=params.label)

    fast_sc = 2.0 / (params.fast + 1)
    slow_sc = 2.0 / (params.slow + 1)
    abs_diff = np.abs(np.diff(x))

    values = np.empty(len(x) - p, dtype=np.float64)
    current = x[p - 1]
    for out_idx, t in enumerate(range(p, len(x))):
        change = abs(x[t] - x[t - p])
        volatility = abs_diff[t - p : t].sum()
        er = change / volatility if volatility != 0 else 0.0
        sc = (er * (fast_sc - slow_sc) + slow_sc) ** 2
        current = current + sc * (x[t] - current)
        values[out_idx] = current
    return core.aligned(params.label, series.timestamps(), values)


def zlema(series: OHLCVSeries, params: ZlemaParams | None = None) -> PointSeries:
    """Zero-lag EMA: EMA of ``2 * x[t] - x[t - lag]`` with ``lag = (p - 1) // 2``."""
    params = params or ZlemaParams()
    x = core.price(series, params.source)
    lag = params.lag
    if len(x) < params.lookback:
        return PointSeries(name=params.label)
    delagged = 2.0 * x[lag:] - x[: len(x) - lag]
    values = core.ema(delagged, params.period)
    return core.aligned(params.label, series.timestamps(), values)


def parabolic_sar(
    series: OHLCVSeries, params: ParabolicSarParams | None = None
) -> PointSeries:
    """Wilder's Parabolic SAR.

    The initial trend is long when the second close is at or above the first.
    Each bar moves the SAR toward the extreme point by the acceleration factor;
    a long SAR may not rise above the previous two lows (a short SAR may not
    fall below the previous two highs). Penetration flips the trend, resets
    the SAR to the prior extreme point and the acceleration to ``step``.
    """
    params = params or ParabolicSarParams()
    high = series.highs()
    low = series.lows()
    close = series.closes()
    n = len(close)
    if n < params.lookback:
        return PointSeries(name=params.label)

    long = close[1] >= close[0]
    sar = low[0] if long else high[0]
    ep = high[0] if long else low[0]
    af = params.step

    values = np.empty(n - 1, dtype=np.float64)
    for i in range(1, n):
        sar = sar + af * (ep - sar)
        prior = max(i - 2, 0)
        if long:
            sar = min(sar, low[i - 1], low[prior])
            if low[i] < sar:
                long = False
                sar, ep, af = ep, low[i], params.step
            elif high[i] > ep:
                ep = high[i]
                af = min(af + params.step, params.max_step)
        else:
            sar = max(sar, high[i - 1], high[prior])
            if high[i] > sar:
                long = True
                sar, ep, af = ep, high[i], params.step
            elif low[i] < ep:
                ep = low[i]
                af = min(af + params.step, params.max_step)
        values[i - 1] = sar
    return core.aligned(params.label, series.timestamps(), values)


def vwap(series: OHLCVSeries, params: VwapParams | None = None) -> PointSeries:
    """Cumulative volume-weighted typical price.

    With ``anchor="day"`` the accumulation restarts at every UTC calendar day.
    While cumulative volume is zero the typical price itself is reported.
    """
    params = params or VwapParams()
    timestamps = series.timestamps()
    tp = core.typical_price(series)
    volume = series.volumes()

    values = np.empty(len(tp), dtype=np.float64)
    cum_pv = 0.0
    cum_vol = 0.0
    session = None
    for i, ts in enumerate(timestamps):
        if params.anchor == "day":
            day = ts.astimezone(timezone.utc).date()
            if day != session:
                session = day
                cum_pv = 0.0
                cum_vol = 0.0
        cum_pv += tp[i] * volume[i]
        cum_vol += volume[i]
        values[i] = cum_pv / cum_vol if cum_vol > 0 else tp[i]
    name = "vwap" if params.anchor == "series" else "vwap(day)"
    return core.aligned(name, timestamps, values)


def _midpoint(high, low, window: int):
    return (core.rolling_max(high, window) + core.rolling_min(low, window)) / 2.0


def ichimoku(series: OHLCVSeries, params: IchimokuParams | None = None) -> IchimokuSeries:
    """Ichimoku cloud lines.

    Tenkan, kijun and span B are high/low midpoints over their windows; span A
    is the mean of tenkan and kijun. No line is shifted forward or back, so
    every member ends at the last input bar.
    """
    params = params or IchimokuParams()
    high = series.highs()
    low = series.lows()
    timestamps = series.timestamps()
    count = len(high) - params.lookback + 1
    if count <= 0:
        tenkan = kijun = span_b = chikou = core.EMPTY
    else:
        tenkan = core.suffix(_midpoint(high, low, params.tenkan), count)
        kijun = core.suffix(_midpoint(high, low, params.kijun), count)
        span_b = core.suffix(_midpoint(high, low, params.senkou_b), count)
        chikou = core.suffix(series.closes(), count)
    name = params.label
    return IchimokuSeries(
        tenkan=core.aligned(f"{name}.tenkan", timestamps, tenkan),
        kijun=core.aligned(f"{name}.kijun", timestamps, kijun),
        span_a=core.aligned(f"{name}.span_a", timestamps, (tenkan + kijun) / 2.0),
        span_b=core.aligned(f"{name}.span_b", timestamps, span_b),
        chikou=core.aligned(f"{name}.chikou", timestamps, chikou),
    )


def vortex(series: OHLCVSeries, params: VortexParams | None = None) -> VortexSeries:
    """Vortex indicator: summed vortex movement over summed true range.

    Both lines are 0 over a window whose true-range sum is 0.
    """
    params = params or VortexParams()
    high = series.highs()
    low = series.lows()
    timestamps = series.timestamps()
    plus = minus = core.EMPTY
    if len(high) >= params.lookback:
        tr = core.rolling_sum(core.true_range(high, low, series.closes()), params.period)
        plus_vm = core.rolling_sum(np.abs(high[1:] - low[:-1]), params.period)
        minus_vm = core.rolling_sum(np.abs(low[1:] - high[:-1]), params.period)
        plus = core.safe_divide(plus_vm, tr, 0.0)
        minus = core.safe_divide(minus_vm, tr, 0.0)
    return VortexSeries(
        plus=core.aligned(f"{params.label}.plus", timestamps, plus),
        minus=core.aligned(f"{params.label}.minus", timestamps, minus),
    )


__all__ = [
    "sma",
    "ema",
    "wma",
    "dema",
    "tema",
    "hma",
    "kama",
    "zlema",
    "parabolic_sar",
    "vwap",
    "ichimoku",
    "vortex",
]
