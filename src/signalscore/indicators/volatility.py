"""Volatility and trend-strength indicators."""

from __future__ import annotations

import math

import numpy as np

from signalscore.indicators import core
from signalscore.indicators.bands import bollinger_values
from signalscore.indicators.params import (
    AdxParams,
    AtrParams,
    BbPercentBParams,
    BbWidthParams,
    ChaikinVolatilityParams,
    HistoricalVolatilityParams,
    MassIndexParams,
    StdDevParams,
)
from signalscore.types import ADXSeries, OHLCVSeries, PointSeries


def atr(series: OHLCVSeries, params: AtrParams | None = None) -> PointSeries:
    """Average true range with Wilder smoothing.

    True range needs a previous close, so the first ATR belongs to bar
    ``period`` and averages the first ``period`` true ranges.
    """
    params = params or AtrParams()
    values = core.atr_values(
        series.highs(), series.lows(), series.closes(), params.period
    )
    return core.aligned(params.label, series.timestamps(), values)


def bb_width(series: OHLCVSeries, params: BbWidthParams | None = None) -> PointSeries:
    """Bollinger bandwidth ``(upper - lower) / middle``; 0 when middle is 0."""
    params = params or BbWidthParams()
    upper, middle, lower = bollinger_values(
        core.price(series, params.source), params.period, params.std_dev
    )
    values = core.safe_divide(upper - lower, middle, 0.0)
    return core.aligned(params.label, series.timestamps(), values)


def bb_percent_b(
    series: OHLCVSeries, params: BbPercentBParams | None = None
) -> PointSeries:
    """Position of price within the Bollinger Bands; 0.5 when the bands collapse."""
    params = params or BbPercentBParams()
    x = core.price(series, params.source)
    upper, middle, lower = bollinger_values(x, params.period, params.std_dev)
    current = core.suffix(x, len(middle))
    values = core.safe_divide(current - lower, upper - lower, 0.5)
    return core.aligned(params.label, series.timestamps(), values)


def stddev(series: OHLCVSeries, params: StdDevParams | None = None) -> PointSeries:
    """Rolling population standard deviation."""
    params = params or StdDevParams()
    values = core.rolling_std(core.price(series, params.source), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def historical_volatility(
    series: OHLCVSeries, params: HistoricalVolatilityParams | None = None
) -> PointSeries:
    """Annualized standard deviation of log returns, in percent."""
    params = params or HistoricalVolatilityParams()
    close = series.closes()
    if len(close) < params.lookback:
        return PointSeries(name=params.label)
    prev = close[:-1]
    curr = close[1:]
    valid = (prev > 0) & (curr > 0)
    ratio = np.where(valid, curr / np.where(valid, prev, 1.0), 1.0)
    returns = np.log(ratio)
    scale = 100.0 * math.sqrt(params.periods_per_year)
    values = core.rolling_std(returns, params.period) * scale
    return core.aligned(params.label, series.timestamps(), values)


def adx(series: OHLCVSeries, params: AdxParams | None = None) -> ADXSeries:
    """Average Directional Index with +DI and -DI.

    Uses Wilder running sums for TR and directional movement and a Wilder
    average of DX. DI and DX resolve to 0 when their denominators are 0.
    """
    params = params or AdxParams()
    p = params.period
    high = series.highs()
    low = series.lows()
    close = series.closes()
    timestamps = series.timestamps()
    name = params.label

    if len(close) < params.lookback:
        empty = core.EMPTY
        return ADXSeries(
            adx=core.aligned(name, timestamps, empty),
            plus_di=core.aligned(f"{name}.plus_di", timestamps, empty),
            minus_di=core.aligned(f"{name}.minus_di", timestamps, empty),
        )

    up_move = high[1:] - high[:-1]
    down_move = low[:-1] - low[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    smoothed_tr = core.wilder_sum(core.true_range(high, low, close), p)
    plus_di = core.safe_divide(100.0 * core.wilder_sum(plus_dm, p), smoothed_tr, 0.0)
    minus_di = core.safe_divide(100.0 * core.wilder_sum(minus_dm, p), smoothed_tr, 0.0)
    dx = core.safe_divide(
        100.0 * np.abs(plus_di - minus_di), plus_di + minus_di, 0.0
    )
    adx_values = core.wilder_average(dx, p)
    n = len(adx_values)
    return ADXSeries(
        adx=core.aligned(name, timestamps, adx_values),
        plus_di=core.aligned(f"{name}.plus_di", timestamps, core.suffix(plus_di, n)),
        minus_di=core.aligned(f"{name}.minus_di", timestamps, core.suffix(minus_di, n)),
    )


def mass_index(series: OHLCVSeries, params: MassIndexParams | None = None) -> PointSeries:
    """Mass Index: rolling sum of ``EMA(range) / EMA(EMA(range))``.

    A window with no range at all has a ratio of 1.
    """
    params = params or MassIndexParams()
    span = series.highs() - series.lows()
    single = core.ema(span, params.ema_period)
    double = core.ema(single, params.ema_period)
    ratio = core.safe_divide(core.suffix(single, len(double)), double, 1.0)
    values = core.rolling_sum(ratio, params.sum_period)
    return core.aligned(params.label, series.timestamps(), values)


def chaikin_volatility(
    series: OHLCVSeries, params: ChaikinVolatilityParams | None = None
) -> PointSeries:
    """Percent change of the EMA of the high/low range over ``roc_period`` bars."""
    params = params or ChaikinVolatilityParams()
    smoothed = core.ema(series.highs() - series.lows(), params.ema_period)
    values = core.rate_of_change(smoothed, params.roc_period)
    return core.aligned(params.label, series.timestamps(), values)


__all__ = [
    "atr",
    "bb_width",
    "bb_percent_b",
    "stddev",
    "historical_volatility",
    "adx",
    "mass_index",
    "chaikin_volatility",
]
