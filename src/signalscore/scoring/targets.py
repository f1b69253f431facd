"""Price targets and risk warnings derived from the latest bars."""

from __future__ import annotations

from signalscore import indicators
from signalscore.indicators.params import AtrParams, BollingerParams, RsiParams
from signalscore.scoring.components import relative_volume
from signalscore.types import OHLCVSeries, PriceTargets

FIFTY_TWO_WEEK_BARS = 252


def calculate_price_targets(
    series: OHLCVSeries,
    atr_multiple: float = 1.5,
) -> PriceTargets | None:
    """Entry, stop and 2R/3R targets from ATR and the Bollinger middle band.

    The entry is the last close, or 1% below the middle band when price is
    trading under it (waiting for a bounce). The stop sits ``atr_multiple``
    ATRs below the entry. Values are rounded to cents.

    :param series: Input series.
    :param atr_multiple: Stop distance in ATRs.
    :returns: Targets, or None when ATR(14) or Bollinger(20) is unavailable.
    """
    bar = series.last()
    atr = indicators.atr(series, AtrParams(period=14)).last()
    middle = indicators.bollinger(series, BollingerParams()).middle.last()
    if bar is None or atr is None or middle is None or atr <= 0:
        return None

    entry = middle * 0.99 if bar.close < middle else bar.close
    risk = atr * atr_multiple
    stop_loss = entry - risk
    return PriceTargets(
        entry=round(entry, 2),
        stop_loss=round(stop_loss, 2),
        target_1=round(entry + 2 * risk, 2),
        target_2=round(entry + 3 * risk, 2),
        risk_reward=2.0,
    )


def fifty_two_week_position(series: OHLCVSeries) -> float | None:
    """Where the last close sits in the range of the last 252 bars (0 to 1)."""
    if series.is_empty:
        return None
    window = series.tail(FIFTY_TWO_WEEK_BARS)
    high = float(window.highs().max())
    low = float(window.lows().min())
    if high == low:
        return None
    return (window.bars[-1].close - low) / (high - low)


def generate_warnings(series: OHLCVSeries) -> list[str]:
    """Risk warnings for extreme volatility, RSI, liquidity and range position."""
    warnings: list[str] = []
    bar = series.last()
    if bar is None:
        return warnings

    atr = indicators.atr(series, AtrParams(period=14)).last()
    if atr is not None and bar.close > 0:
        atr_percent = 100.0 * atr / bar.close
        if atr_percent > 5:
            warnings.append(
                f"High volatility: {atr_percent:.2f}% ATR - increased risk"
            )

    rsi = indicators.rsi(series, RsiParams(period=14)).last()
    if rsi is not None:
        if rsi >= 80:
            warnings.append("Extremely overbought (RSI >= 80) - high reversal risk")
        elif rsi <= 20:
            warnings.append("Extremely oversold (RSI <= 20) - potential capitulation")

    ratio = relative_volume(series)
    if ratio is not None and ratio < 0.3:
        warnings.append("Very low volume - lack of liquidity")

    position = fifty_two_week_position(series)
    if position is not None:
        if position >= 0.95:
            warnings.append("At 52-week high - potential resistance")
        elif position <= 0.05:
            warnings.append("At 52-week low - extreme weakness or value opportunity")

    return warnings


__all__ = [
    "calculate_price_targets",
    "fifty_two_week_position",
    "generate_warnings",
]
