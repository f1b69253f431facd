"""Envelope indicators returning upper/middle/lower bands."""

from __future__ import annotations

from signalscore.indicators import core
from signalscore.indicators.params import (
    BollingerParams,
    DonchianParams,
    EnvelopesParams,
    KeltnerParams,
)
from signalscore.types import BandSeries, OHLCVSeries


def _bands(name: str, series: OHLCVSeries, upper, middle, lower) -> BandSeries:
    timestamps = series.timestamps()
    return BandSeries(
        upper=core.aligned(f"{name}.upper", timestamps, upper),
        middle=core.aligned(f"{name}.middle", timestamps, middle),
        lower=core.aligned(f"{name}.lower", timestamps, lower),
    )


def bollinger_values(x, period: int, std_dev: float):
    """Return ``(upper, middle, lower)`` arrays for Bollinger Bands."""
    middle = core.sma(x, period)
    width = std_dev * core.rolling_std(x, period)
    return middle + width, middle, middle - width


def bollinger(series: OHLCVSeries, params: BollingerParams | None = None) -> BandSeries:
    """Bollinger Bands: SMA plus/minus ``std_dev`` population standard deviations."""
    params = params or BollingerParams()
    upper, middle, lower = bollinger_values(
        core.price(series, params.source), params.period, params.std_dev
    )
    return _bands(params.label, series, upper, middle, lower)


def keltner(series: OHLCVSeries, params: KeltnerParams | None = None) -> BandSeries:
    """Keltner Channels: EMA of close plus/minus ``multiplier * ATR``."""
    params = params or KeltnerParams()
    middle = core.ema(series.closes(), params.ema_period)
    atr = core.atr_values(
        series.highs(), series.lows(), series.closes(), params.atr_period
    )
    n = min(len(middle), len(atr))
    middle = core.suffix(middle, n)
    offset = params.multiplier * core.suffix(atr, n)
    return _bands(params.label, series, middle + offset, middle, middle - offset)


def donchian(series: OHLCVSeries, params: DonchianParams | None = None) -> BandSeries:
    """Donchian Channels: highest high, lowest low and their midpoint."""
    params = params or DonchianParams()
    upper = core.rolling_max(series.highs(), params.period)
    lower = core.rolling_min(series.lows(), params.period)
    return _bands(params.label, series, upper, (upper + lower) / 2.0, lower)


def envelopes(series: OHLCVSeries, params: EnvelopesParams | None = None) -> BandSeries:
    """Moving average envelopes at a fixed percentage above and below the SMA."""
    params = params or EnvelopesParams()
    middle = core.sma(core.price(series, params.source), params.period)
    ratio = params.percent / 100.0
    return _bands(
        params.label, series, middle * (1.0 + ratio), middle, middle * (1.0 - ratio)
    )


__all__ = ["bollinger", "bollinger_values", "keltner", "donchian", "envelopes"]
