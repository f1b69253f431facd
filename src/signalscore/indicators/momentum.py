"""Momentum oscillators.

Division-by-zero cases resolve to fixed sentinels rather than NaN:

* RSI: 100 when the average loss is 0 (including a flat series).
* Stochastic %K: 50 when the high/low range is 0.
* Williams %R: -50 when the high/low range is 0.
* CCI: 0 when the mean deviation is 0.
* ROC: 0 when the base price is 0.
* Ultimate Oscillator: a window average of 0.5 when its true-range sum is 0.
* PPO and TSI: 0 when the denominator is 0.
* Coppock: a 0 rate of change where the base price is 0.
"""

from __future__ import annotations

import numpy as np

from signalscore.indicators import core
from signalscore.indicators.params import (
    AroonParams,
    AwesomeOscillatorParams,
    CciParams,
    CoppockParams,
    DpoParams,
    KstParams,
    MacdParams,
    MomentumParams,
    PpoParams,
    RocParams,
    RsiParams,
    StochasticParams,
    TsiParams,
    UltimateOscillatorParams,
    WilliamsRParams,
)
from signalscore.types import (
    AroonSeries,
    MACDSeries,
    OHLCVSeries,
    PointSeries,
    StochasticSeries,
)


def rsi_values(x, period: int):
    """Wilder RSI array; the first value belongs to bar ``period``."""
    if len(x) < period + 1:
        return core.EMPTY
    delta = np.diff(x)
    gains = np.maximum(delta, 0.0)
    losses = np.maximum(-delta, 0.0)
    avg_gain = core.wilder_average(gains, period)
    avg_loss = core.wilder_average(losses, period)
    rs = core.safe_divide(avg_gain, avg_loss, 0.0)
    return np.where(avg_loss == 0, 100.0, 100.0 - 100.0 / (1.0 + rs))


def rsi(series: OHLCVSeries, params: RsiParams | None = None) -> PointSeries:
    """Relative Strength Index with Wilder smoothing."""
    params = params or RsiParams()
    values = rsi_values(core.price(series, params.source), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def stochastic(
    series: OHLCVSeries, params: StochasticParams | None = None
) -> StochasticSeries:
    """Stochastic oscillator %K (optionally smoothed) and %D."""
    params = params or StochasticParams()
    highest = core.rolling_max(series.highs(), params.k_period)
    lowest = core.rolling_min(series.lows(), params.k_period)
    close = core.suffix(series.closes(), len(highest))
    raw_k = core.safe_divide(100.0 * (close - lowest), highest - lowest, 50.0)
    k = core.sma(raw_k, params.k_smoothing)
    d = core.sma(k, params.d_period)
    timestamps = series.timestamps()
    return StochasticSeries(
        k=core.aligned(f"{params.label}.k", timestamps, core.suffix(k, len(d))),
        d=core.aligned(f"{params.label}.d", timestamps, d),
    )


def _signal_bundle(
    name: str, series: OHLCVSeries, line, signal_period: int
) -> MACDSeries:
    signal = core.ema(line, signal_period)
    line = core.suffix(line, len(signal))
    timestamps = series.timestamps()
    return MACDSeries(
        line=core.aligned(f"{name}.line", timestamps, line),
        signal=core.aligned(f"{name}.signal", timestamps, signal),
        histogram=core.aligned(f"{name}.histogram", timestamps, line - signal),
    )


def macd(series: OHLCVSeries, params: MacdParams | None = None) -> MACDSeries:
    """MACD line (fast EMA - slow EMA), its signal EMA and the histogram."""
    params = params or MacdParams()
    x = core.price(series, params.source)
    slow = core.ema(x, params.slow)
    fast = core.suffix(core.ema(x, params.fast), len(slow))
    return _signal_bundle(params.label, series, fast - slow, params.signal)


def ppo(series: OHLCVSeries, params: PpoParams | None = None) -> MACDSeries:
    """Percentage Price Oscillator: MACD expressed as percent of the slow EMA."""
    params = params or PpoParams()
    x = core.price(series, params.source)
    slow = core.ema(x, params.slow)
    fast = core.suffix(core.ema(x, params.fast), len(slow))
    line = core.safe_divide(100.0 * (fast - slow), slow, 0.0)
    return _signal_bundle(params.label, series, line, params.signal)


def cci(series: OHLCVSeries, params: CciParams | None = None) -> PointSeries:
    """Commodity Channel Index over the typical price."""
    params = params or CciParams()
    tp = core.typical_price(series)
    if len(tp) < params.period:
        return PointSeries(name=params.label)
    window = core.windows(tp, params.period)
    mean = window.mean(axis=1)
    mean_dev = np.abs(window - mean[:, None]).mean(axis=1)
    current = core.suffix(tp, len(mean))
    values = core.safe_divide(current - mean, 0.015 * mean_dev, 0.0)
    return core.aligned(params.label, series.timestamps(), values)


def williams_r(series: OHLCVSeries, params: WilliamsRParams | None = None) -> PointSeries:
    """Williams %R in [-100, 0]."""
    params = params or WilliamsRParams()
    highest = core.rolling_max(series.highs(), params.period)
    lowest = core.rolling_min(series.lows(), params.period)
    close = core.suffix(series.closes(), len(highest))
    values = core.safe_divide(-100.0 * (highest - close), highest - lowest, -50.0)
    return core.aligned(params.label, series.timestamps(), values)


def roc(series: OHLCVSeries, params: RocParams | None = None) -> PointSeries:
    """Rate of change in percent."""
    params = params or RocParams()
    values = core.rate_of_change(core.price(series, params.source), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def momentum(series: OHLCVSeries, params: MomentumParams | None = None) -> PointSeries:
    """Price difference over ``period`` bars."""
    params = params or MomentumParams()
    x = core.price(series, params.source)
    values = x[params.period :] - x[: -params.period] if len(x) > params.period else core.EMPTY
    return core.aligned(params.label, series.timestamps(), values)


def awesome_oscillator(
    series: OHLCVSeries, params: AwesomeOscillatorParams | None = None
) -> PointSeries:
    """Awesome Oscillator: fast SMA minus slow SMA of the median price."""
    params = params or AwesomeOscillatorParams()
    median = (series.highs() + series.lows()) / 2.0
    slow = core.sma(median, params.slow)
    fast = core.suffix(core.sma(median, params.fast), len(slow))
    return core.aligned(params.label, series.timestamps(), fast - slow)


def ultimate_oscillator(
    series: OHLCVSeries, params: UltimateOscillatorParams | None = None
) -> PointSeries:
    """Ultimate Oscillator with 4/2/1 weights over three windows."""
    params = params or UltimateOscillatorParams()
    high = series.highs()
    low = series.lows()
    close = series.closes()
    if len(close) < params.lookback:
        return PointSeries(name=params.label)

    prev_close = close[:-1]
    true_low = np.minimum(low[1:], prev_close)
    buying_pressure = close[1:] - true_low
    true_range = np.maximum(high[1:], prev_close) - true_low

    n = len(true_range) - params.long + 1
    averages = []
    for period in (params.short, params.medium, params.long):
        bp_sum = core.suffix(core.rolling_sum(buying_pressure, period), n)
        tr_sum = core.suffix(core.rolling_sum(true_range, period), n)
        averages.append(core.safe_divide(bp_sum, tr_sum, 0.5))
    values = 100.0 * (4.0 * averages[0] + 2.0 * averages[1] + averages[2]) / 7.0
    return core.aligned(params.label, series.timestamps(), values)


def tsi(series: OHLCVSeries, params: TsiParams | None = None) -> MACDSeries:
    """True Strength Index with its signal EMA.

    The line is double-smoothed momentum over double-smoothed absolute
    momentum, scaled to +/-100.
    """
    params = params or TsiParams()
    x = core.price(series, params.source)
    line = core.EMPTY
    if len(x) >= params.long + params.short:
        delta = np.diff(x)
        num = core.ema(core.ema(delta, params.long), params.short)
        den = core.ema(core.ema(np.abs(delta), params.long), params.short)
        line = core.safe_divide(100.0 * num, den, 0.0)
    return _signal_bundle(params.label, series, line, params.signal)


def kst(series: OHLCVSeries, params: KstParams | None = None) -> PointSeries:
    """Know Sure Thing: ``sum(i * SMA_i(ROC_i))`` for i = 1..4."""
    params = params or KstParams()
    x = core.price(series, params.source)
    if len(x) < params.lookback:
        return PointSeries(name=params.label)
    smoothed = [
        core.sma(core.rate_of_change(x, r), s)
        for r, s in zip(params.roc_periods, params.sma_periods)
    ]
    n = min(len(s) for s in smoothed)
    values = sum(
        weight * core.suffix(s, n) for weight, s in enumerate(smoothed, start=1)
    )
    return core.aligned(params.label, series.timestamps(), values)


def dpo(series: OHLCVSeries, params: DpoParams | None = None) -> PointSeries:
    """Detrended Price Oscillator: displaced price minus the current SMA."""
    params = params or DpoParams()
    x = core.price(series, params.source)
    n = len(x)
    if n < params.lookback:
        return PointSeries(name=params.label)
    shift = params.displacement
    first = params.lookback - 1
    average = core.suffix(core.sma(x, params.period), n - first)
    values = x[first - shift : n - shift] - average
    return core.aligned(params.label, series.timestamps(), values)


def coppock(series: OHLCVSeries, params: CoppockParams | None = None) -> PointSeries:
    """Coppock curve: WMA of the sum of a long and a short rate of change."""
    params = params or CoppockParams()
    x = core.price(series, params.source)
    long_roc = core.rate_of_change(x, params.long_roc)
    short_roc = core.rate_of_change(x, params.short_roc)
    n = min(len(long_roc), len(short_roc))
    combined = core.suffix(long_roc, n) + core.suffix(short_roc, n)
    values = core.wma(combined, params.wma_period)
    return core.aligned(params.label, series.timestamps(), values)


def aroon(series: OHLCVSeries, params: AroonParams | None = None) -> AroonSeries:
    """Aroon up/down: how recently the window's extreme high/low occurred."""
    params = params or AroonParams()
    p = params.period
    high = series.highs()
    low = series.lows()
    timestamps = series.timestamps()
    if len(high) < params.lookback:
        up = down = core.EMPTY
    else:
        # reversed windows so ties resolve to the most recent bar
        since_high = np.argmax(core.windows(high, p + 1)[:, ::-1], axis=1)
        since_low = np.argmin(core.windows(low, p + 1)[:, ::-1], axis=1)
        up = 100.0 * (p - since_high) / p
        down = 100.0 * (p - since_low) / p
    return AroonSeries(
        up=core.aligned(f"{params.label}.up", timestamps, up),
        down=core.aligned(f"{params.label}.down", timestamps, down),
        oscillator=core.aligned(f"{params.label}.oscillator", timestamps, up - down),
    )


__all__ = [
    "rsi",
    "rsi_values",
    "stochastic",
    "macd",
    "ppo",
    "cci",
    "williams_r",
    "roc",
    "momentum",
    "awesome_oscillator",
    "ultimate_oscillator",
    "tsi",
    "kst",
    "dpo",
    "coppock",
    "aroon",
]
