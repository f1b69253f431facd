"""Volume-based indicators."""

from __future__ import annotations

import numpy as np

from signalscore.indicators import core
from signalscore.indicators.params import (
    AdLineParams,
    CmfParams,
    EmvParams,
    ForceIndexParams,
    MfiParams,
    NviParams,
    ObvParams,
    PviParams,
    VolumeOscillatorParams,
    VrocParams,
)
from signalscore.types import OHLCVSeries, PointSeries


def obv(series: OHLCVSeries, params: ObvParams | None = None) -> PointSeries:
    """On-balance volume, starting at 0 on the first bar."""
    params = params or ObvParams()
    close = series.closes()
    if len(close) == 0:
        return PointSeries(name=params.label)
    flow = np.sign(np.diff(close)) * series.volumes()[1:]
    values = np.concatenate(([0.0], np.cumsum(flow)))
    return core.aligned(params.label, series.timestamps(), values)


def mfi(series: OHLCVSeries, params: MfiParams | None = None) -> PointSeries:
    """Money Flow Index; 100 when a window has no negative money flow."""
    params = params or MfiParams()
    tp = core.typical_price(series)
    if len(tp) < params.lookback:
        return PointSeries(name=params.label)
    raw_flow = (tp * series.volumes())[1:]
    direction = np.diff(tp)
    positive = core.rolling_sum(np.where(direction > 0, raw_flow, 0.0), params.period)
    negative = core.rolling_sum(np.where(direction < 0, raw_flow, 0.0), params.period)
    ratio = core.safe_divide(positive, negative, 0.0)
    values = np.where(negative == 0, 100.0, 100.0 - 100.0 / (1.0 + ratio))
    return core.aligned(params.label, series.timestamps(), values)


def ad_line(series: OHLCVSeries, params: AdLineParams | None = None) -> PointSeries:
    """Accumulation/distribution line."""
    params = params or AdLineParams()
    clv = core.close_location_value(series.highs(), series.lows(), series.closes())
    values = np.cumsum(clv * series.volumes())
    return core.aligned(params.label, series.timestamps(), values)


def cmf(series: OHLCVSeries, params: CmfParams | None = None) -> PointSeries:
    """Chaikin Money Flow; 0 for windows without volume."""
    params = params or CmfParams()
    volume = series.volumes()
    clv = core.close_location_value(series.highs(), series.lows(), series.closes())
    flow = core.rolling_sum(clv * volume, params.period)
    total = core.rolling_sum(volume, params.period)
    values = core.safe_divide(flow, total, 0.0)
    return core.aligned(params.label, series.timestamps(), values)


def force_index(
    series: OHLCVSeries, params: ForceIndexParams | None = None
) -> PointSeries:
    """EMA of ``(close - previous close) * volume``."""
    params = params or ForceIndexParams()
    close = series.closes()
    if len(close) < params.lookback:
        return PointSeries(name=params.label)
    raw = np.diff(close) * series.volumes()[1:]
    values = core.ema(raw, params.period)
    return core.aligned(params.label, series.timestamps(), values)


def emv(series: OHLCVSeries, params: EmvParams | None = None) -> PointSeries:
    """Ease of Movement: SMA of midpoint move divided by the box ratio.

    The box ratio is ``(volume / volume_scale) / (high - low)``; a bar with
    no volume contributes 0.
    """
    params = params or EmvParams()
    high = series.highs()
    low = series.lows()
    if len(high) < params.lookback:
        return PointSeries(name=params.label)
    distance = np.diff((high + low) / 2.0)
    span = (high - low)[1:]
    raw = core.safe_divide(distance * span * params.volume_scale, series.volumes()[1:], 0.0)
    values = core.sma(raw, params.period)
    return core.aligned(params.label, series.timestamps(), values)


def _volume_index(series: OHLCVSeries, start: float, on_rise: bool):
    close = series.closes()
    volume = series.volumes()
    if len(close) < 2:
        return core.EMPTY
    change = core.safe_divide(np.diff(close), close[:-1], 0.0)
    active = volume[1:] > volume[:-1] if on_rise else volume[1:] < volume[:-1]
    return start * np.cumprod(np.where(active, 1.0 + change, 1.0))


def nvi(series: OHLCVSeries, params: NviParams | None = None) -> PointSeries:
    """Negative Volume Index: compounds price change only on falling volume."""
    params = params or NviParams()
    values = _volume_index(series, params.start, on_rise=False)
    return core.aligned(params.label, series.timestamps(), values)


def pvi(series: OHLCVSeries, params: PviParams | None = None) -> PointSeries:
    """Positive Volume Index: compounds price change only on rising volume."""
    params = params or PviParams()
    values = _volume_index(series, params.start, on_rise=True)
    return core.aligned(params.label, series.timestamps(), values)


def vroc(series: OHLCVSeries, params: VrocParams | None = None) -> PointSeries:
    """Volume rate of change in percent; 0 where the base volume is 0."""
    params = params or VrocParams()
    values = core.rate_of_change(series.volumes(), params.period)
    return core.aligned(params.label, series.timestamps(), values)


def volume_oscillator(
    series: OHLCVSeries, params: VolumeOscillatorParams | None = None
) -> PointSeries:
    """Percent gap between a fast and a slow volume EMA; 0 when the slow EMA is 0."""
    params = params or VolumeOscillatorParams()
    volume = series.volumes()
    slow = core.ema(volume, params.slow)
    fast = core.suffix(core.ema(volume, params.fast), len(slow))
    values = core.safe_divide(100.0 * (fast - slow), slow, 0.0)
    return core.aligned(params.label, series.timestamps(), values)


__all__ = [
    "obv",
    "mfi",
    "ad_line",
    "cmf",
    "force_index",
    "emv",
    "nvi",
    "pvi",
    "vroc",
    "volume_oscillator",
]
