"""Shared fixtures and series builders for the test suite."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Sequence

import pytest

from signalscore.types import Bar, OHLCVSeries

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_bar(
    i: int,
    close: float,
    high: float | None = None,
    low: float | None = None,
    open: float | None = None,
    volume: float = 1000.0,
) -> Bar:
    """Bar on day ``i`` after START; OHLC default to ``close``."""
    return Bar(
        timestamp=START + timedelta(days=i),
        open=close if open is None else open,
        high=close if high is None else high,
        low=close if low is None else low,
        close=close,
        volume=volume,
    )


def series_from_closes(
    closes: Sequence[float],
    spread: float = 0.0,
    volumes: Sequence[float] | None = None,
    symbol: str | None = None,
) -> OHLCVSeries:
    """Series where high/low sit ``spread`` above/below each close."""
    bars = [
        make_bar(
            i,
            c,
            high=c + spread,
            low=c - spread,
            volume=1000.0 if volumes is None else volumes[i],
        )
        for i, c in enumerate(closes)
    ]
    return OHLCVSeries.from_bars(bars, symbol=symbol)


def wavy_series(n: int, symbol: str | None = None) -> OHLCVSeries:
    """Deterministic series with trend, oscillation and varying ranges."""
    bars = []
    for i in range(n):
        close = 100.0 + 10.0 * math.sin(i / 3.0) + 0.1 * i
        bars.append(
            make_bar(
                i,
                close,
                high=close + 1.0 + (i % 3) * 0.2,
                low=close - 1.0 - (i % 4) * 0.2,
                open=close - 0.5 * math.cos(i),
                volume=1000.0 + 100.0 * (i % 7),
            )
        )
    return OHLCVSeries.from_bars(bars, symbol=symbol)


@pytest.fixture
def flat_series() -> OHLCVSeries:
    """Thirty bars with every price at 100."""
    return series_from_closes([100.0] * 30)


@pytest.fixture
def rising_series() -> OHLCVSeries:
    """Sixty strictly rising closes with a one-point range."""
    return series_from_closes([50.0 + i for i in range(60)], spread=1.0)


@pytest.fixture
def falling_series() -> OHLCVSeries:
    """Sixty strictly falling closes with a one-point range."""
    return series_from_closes([200.0 - i for i in range(60)], spread=1.0)


@pytest.fixture
def long_series() -> OHLCVSeries:
    """Three hundred bars of wavy data, enough for every indicator."""
    return wavy_series(300, symbol="WAVE")
