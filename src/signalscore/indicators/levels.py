"""Price levels: floor-trader pivots and Fibonacci retracements."""

from __future__ import annotations

from signalscore.indicators import core
from signalscore.indicators.params import FibonacciParams, PivotPointsParams
from signalscore.types import FibonacciSeries, OHLCVSeries, PivotSeries

FIBONACCI_RATIOS = {
    "level_0": 0.0,
    "level_236": 0.236,
    "level_382": 0.382,
    "level_500": 0.5,
    "level_618": 0.618,
    "level_786": 0.786,
    "level_100": 1.0,
}


def pivot_points(
    series: OHLCVSeries, params: PivotPointsParams | None = None
) -> PivotSeries:
    """Standard pivots for each bar from the prior bar's high, low and close.

    ``P = (h + l + c) / 3``; ``R1 = 2P - l``, ``S1 = 2P - h``,
    ``R2 = P + (h - l)``, ``S2 = P - (h - l)``, ``R3 = h + 2(P - l)``,
    ``S3 = l - 2(h - P)``.
    """
    params = params or PivotPointsParams()
    high = series.highs()[:-1]
    low = series.lows()[:-1]
    close = series.closes()[:-1]
    pivot = (high + low + close) / 3.0
    span = high - low
    levels = {
        "pivot": pivot,
        "r1": 2.0 * pivot - low,
        "r2": pivot + span,
        "r3": high + 2.0 * (pivot - low),
        "s1": 2.0 * pivot - high,
        "s2": pivot - span,
        "s3": low - 2.0 * (high - pivot),
    }
    timestamps = series.timestamps()
    return PivotSeries(
        **{
            key: core.aligned(f"{params.label}.{key}", timestamps, values)
            for key, values in levels.items()
        }
    )


def fibonacci(series: OHLCVSeries, params: FibonacciParams | None = None) -> FibonacciSeries:
    """Retracement levels ``low + ratio * (high - low)`` over a rolling window.

    ``level_0`` is the window low and ``level_100`` the window high.
    """
    params = params or FibonacciParams()
    high = core.rolling_max(series.highs(), params.period)
    low = core.rolling_min(series.lows(), params.period)
    timestamps = series.timestamps()
    return FibonacciSeries(
        **{
            key: core.aligned(f"{params.label}.{key}", timestamps, low + ratio * (high - low))
            for key, ratio in FIBONACCI_RATIOS.items()
        }
    )


__all__ = ["FIBONACCI_RATIOS", "pivot_points", "fibonacci"]
