"""Validation of OHLCV input before any indicator sees it."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable, Sequence

from signalscore.exceptions import DataValidationError

if TYPE_CHECKING:
    from signalscore.types import Bar, OHLCVSeries


def validate_bars(bars: Sequence[Bar]) -> None:
    """Check OHLC ordering, sign, finiteness and timestamp order.

    :param bars: Bars in the order they will be used.
    :raises DataValidationError: On the first invalid bar, naming its index.
    """
    previous = None
    for i, bar in enumerate(bars):
        values = (bar.open, bar.high, bar.low, bar.close, bar.volume)
        if not all(math.isfinite(v) for v in values):
            raise DataValidationError(f"Bar {i} has a non-finite value")
        if min(bar.open, bar.high, bar.low, bar.close) < 0:
            raise DataValidationError(f"Bar {i} has a negative price")
        if bar.volume < 0:
            raise DataValidationError(f"Bar {i} has negative volume {bar.volume}")
        if bar.high < bar.low:
            raise DataValidationError(
                f"Bar {i} has high {bar.high} below low {bar.low}"
            )
        if not (bar.low <= bar.open <= bar.high):
            raise DataValidationError(f"Bar {i} open {bar.open} outside [low, high]")
        if not (bar.low <= bar.close <= bar.high):
            raise DataValidationError(
                f"Bar {i} close {bar.close} outside [low, high]"
            )
        if previous is not None and bar.timestamp <= previous:
            raise DataValidationError(
                f"Bar {i} timestamp {bar.timestamp.isoformat()} is not after "
                f"{previous.isoformat()}"
            )
        previous = bar.timestamp


def bars_to_series(bars: Iterable[Bar], symbol: str | None = None) -> OHLCVSeries:
    """Sort raw provider bars by timestamp and build a validated series.

    Bars belonging to other symbols are ignored when ``symbol`` is given.

    :param bars: Bars as returned by a data source.
    :param symbol: Symbol to keep.
    :returns: Validated series.
    :raises DataValidationError: If the bars are invalid after sorting.
    """
    from signalscore.types import OHLCVSeries

    selected = [
        bar for bar in bars if symbol is None or bar.symbol in (None, symbol)
    ]
    selected.sort(key=lambda bar: bar.timestamp)
    return OHLCVSeries.from_bars(selected, symbol=symbol)
