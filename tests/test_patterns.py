"""Tests for candlestick, chart and support/resistance detection."""

import numpy as np
import pytest

from signalscore.scoring.patterns import (
    detect_doji,
    detect_double_top_bottom,
    detect_engulfing,
    detect_flag,
    detect_hammer,
    detect_head_and_shoulders,
    detect_patterns,
    detect_shooting_star,
    detect_star,
    detect_support_resistance,
    detect_triangle,
    _local_peaks,
    relative_slope,
)
from signalscore.types import OHLCVSeries, PatternBias, PatternKind

from conftest import make_bar, series_from_closes


def _series(*bars) -> OHLCVSeries:
    return OHLCVSeries.from_bars(list(bars))


def _peaked_series(n: int, peaks: dict[int, float]) -> OHLCVSeries:
    """Flat highs at 100 with spikes at the given indices; lows at 95."""
    bars = [
        make_bar(i, 97.0, high=peaks.get(i, 100.0), low=95.0, open=97.0)
        for i in range(n)
    ]
    return OHLCVSeries.from_bars(bars)


class TestCandlesticks:
    """Tests for single and multi-bar candlestick detectors."""

    def test_doji(self) -> None:
        pattern = detect_doji(_series(make_bar(0, 10.05, high=11.0, low=9.0, open=10.0)))
        assert pattern is not None
        assert pattern.name == "Doji"
        assert pattern.kind is PatternKind.CANDLESTICK
        assert pattern.bias is PatternBias.NEUTRAL
        assert pattern.confidence == 75

    def test_no_doji_without_range(self) -> None:
        assert detect_doji(_series(make_bar(0, 10.0))) is None

    def test_hammer(self) -> None:
        bar = make_bar(0, 10.5, high=10.55, low=8.0, open=10.0)
        pattern = detect_hammer(_series(bar))
        assert pattern is not None
        assert pattern.bias is PatternBias.BULLISH
        assert pattern.stop_loss == 8.0
        assert pattern.target_price == pytest.approx(10.5 * 1.05)

    def test_shooting_star(self) -> None:
        bar = make_bar(0, 10.0, high=12.0, low=9.98, open=10.5)
        pattern = detect_shooting_star(_series(bar))
        assert pattern is not None
        assert pattern.bias is PatternBias.BEARISH
        assert pattern.stop_loss == 12.0

    def test_bullish_engulfing(self) -> None:
        series = _series(
            make_bar(0, 9.5, high=10.1, low=9.4, open=10.0),
            make_bar(1, 10.2, high=10.3, low=9.3, open=9.4),
        )
        pattern = detect_engulfing(series)
        assert pattern is not None
        assert pattern.name == "Bullish Engulfing"
        assert pattern.confidence == 85

    def test_bearish_engulfing(self) -> None:
        series = _series(
            make_bar(0, 10.0, high=10.1, low=9.4, open=9.5),
            make_bar(1, 9.3, high=10.3, low=9.2, open=10.1),
        )
        pattern = detect_engulfing(series)
        assert pattern is not None
        assert pattern.name == "Bearish Engulfing"
        assert pattern.bias is PatternBias.BEARISH

    def test_engulfing_needs_larger_body(self) -> None:
        series = _series(
            make_bar(0, 9.5, high=10.1, low=9.4, open=10.0),
            make_bar(1, 10.1, high=10.1, low=9.4, open=9.6),
        )
        assert detect_engulfing(series) is None

    def test_morning_star(self) -> None:
        series = _series(
            make_bar(0, 10.0, high=11.1, low=9.9, open=11.0),
            make_bar(1, 9.95, high=10.0, low=9.8, open=9.9),
            make_bar(2, 10.8, high=10.9, low=9.9, open=10.0),
        )
        pattern = detect_star(series)
        assert pattern is not None
        assert pattern.name == "Morning Star"
        assert pattern.confidence == 90

    def test_evening_star(self) -> None:
        series = _series(
            make_bar(0, 11.0, high=11.1, low=9.9, open=10.0),
            make_bar(1, 11.05, high=11.2, low=11.0, open=11.1),
            make_bar(2, 10.2, high=11.0, low=10.1, open=11.0),
        )
        pattern = detect_star(series)
        assert pattern is not None
        assert pattern.name == "Evening Star"
        assert pattern.bias is PatternBias.BEARISH

    def test_short_series(self) -> None:
        series = _series(make_bar(0, 10.0))
        assert detect_engulfing(series) is None
        assert detect_star(series) is None
        assert detect_patterns(OHLCVSeries()) == []


class TestChartPatterns:
    """Tests for multi-bar chart pattern detectors."""

    def test_relative_slope(self) -> None:
        assert relative_slope(np.full(10, 5.0)) == pytest.approx(0.0, abs=1e-12)
        assert relative_slope(np.arange(1.0, 4.0)) == pytest.approx(0.5)

    def test_ascending_triangle(self) -> None:
        bars = []
        for i in range(20):
            low = 90.0 + 0.5 * i
            mid = (110.0 + low) / 2
            bars.append(make_bar(i, mid, high=110.0, low=low, open=mid))
        pattern = detect_triangle(OHLCVSeries.from_bars(bars))
        assert pattern is not None
        assert pattern.name == "Ascending Triangle"
        assert pattern.bias is PatternBias.BULLISH
        assert pattern.confidence == 70

    def test_descending_triangle(self) -> None:
        bars = []
        for i in range(20):
            high = 110.0 - 0.5 * i
            mid = (high + 90.0) / 2
            bars.append(make_bar(i, mid, high=high, low=90.0, open=mid))
        pattern = detect_triangle(OHLCVSeries.from_bars(bars))
        assert pattern is not None
        assert pattern.name == "Descending Triangle"

    def test_symmetrical_triangle(self) -> None:
        bars = []
        for i in range(20):
            high = 110.0 - 0.4 * i
            low = 90.0 + 0.4 * i
            bars.append(make_bar(i, 100.0, high=high, low=low, open=100.0))
        pattern = detect_triangle(OHLCVSeries.from_bars(bars))
        assert pattern is not None
        assert pattern.name == "Symmetrical Triangle"
        assert pattern.bias is PatternBias.NEUTRAL

    def test_no_triangle_when_short(self) -> None:
        assert detect_triangle(series_from_closes([100.0] * 19)) is None

    def test_bull_flag(self) -> None:
        closes = [100.0, 102.0, 104.0, 106.0, 108.0, 109.0, 110.0, 111.0, 110.0, 110.5,
                  110.0, 110.5, 110.2, 110.4, 110.1]
        pattern = detect_flag(series_from_closes(closes))
        assert pattern is not None
        assert pattern.name == "Bull Flag"
        assert pattern.target_price == pytest.approx(110.1 * 1.08)

    def test_bear_flag(self) -> None:
        closes = [100.0, 98.0, 96.0, 94.0, 92.0, 91.0, 90.0, 89.0, 90.0, 89.5,
                  90.0, 89.5, 89.8, 89.6, 89.9]
        pattern = detect_flag(series_from_closes(closes))
        assert pattern is not None
        assert pattern.name == "Bear Flag"

    def test_no_flag_without_consolidation(self) -> None:
        closes = [100.0 + 2.0 * i for i in range(15)]
        assert detect_flag(series_from_closes(closes)) is None

    def test_double_top(self) -> None:
        pattern = detect_double_top_bottom(_peaked_series(30, {10: 110.0, 20: 110.5}))
        assert pattern is not None
        assert pattern.name == "Double Top"
        assert pattern.confidence == 75

    def test_double_bottom(self) -> None:
        bars = [
            make_bar(i, 97.0, high=100.0, low={8: 90.0, 18: 90.5}.get(i, 95.0), open=97.0)
            for i in range(30)
        ]
        pattern = detect_double_top_bottom(OHLCVSeries.from_bars(bars))
        assert pattern is not None
        assert pattern.name == "Double Bottom"
        assert pattern.bias is PatternBias.BULLISH

    def test_head_and_shoulders(self) -> None:
        series = _peaked_series(50, {10: 110.0, 25: 120.0, 40: 110.5})
        pattern = detect_head_and_shoulders(series)
        assert pattern is not None
        assert pattern.bias is PatternBias.BEARISH
        assert pattern.stop_loss == 120.0
        assert pattern.target_price == pytest.approx(100.0)

    def test_head_and_shoulders_needs_three_peaks(self) -> None:
        series = _peaked_series(50, {10: 110.0, 25: 120.0})
        assert detect_head_and_shoulders(series) is None


class TestSupportResistance:
    """Tests for support/resistance clustering."""

    def test_requires_fifty_bars(self) -> None:
        assert detect_support_resistance(series_from_closes([100.0] * 49)) == []

    def test_two_levels(self) -> None:
        closes = [100.0 if i % 2 == 0 else 110.0 for i in range(60)]
        levels = detect_support_resistance(series_from_closes(closes, spread=1.0))
        assert len(levels) == 2
        by_price = {level.price: level for level in levels}
        assert by_price[100.0].kind == "support"
        assert by_price[110.0].kind == "resistance"
        assert by_price[100.0].touches == 30
        assert by_price[100.0].strength == 100.0

    def test_single_touch_ignored(self) -> None:
        closes = [100.0] * 59 + [150.0]
        levels = detect_support_resistance(series_from_closes(closes, spread=1.0))
        assert [level.price for level in levels] == [100.0]


class TestLocalPeaks:
    """Tests for swing-point detection."""

    def test_reach_one_considers_second_bar(self) -> None:
        values = np.array([1.0, 5.0, 2.0, 3.0, 2.0, 6.0, 1.0])
        assert _local_peaks(values, reach=1) == [1, 3, 5]

    def test_reach_two(self) -> None:
        values = np.array([1.0, 2.0, 5.0, 2.0, 1.0, 3.0, 1.0])
        assert _local_peaks(values, reach=2) == [2]

    def test_edge_excludes_outer_bars(self) -> None:
        values = np.array([1.0, 5.0, 2.0, 3.0, 2.0, 6.0, 1.0])
        assert _local_peaks(values, reach=1, edge=2) == [3]

    def test_double_top_ignores_peak_at_window_edge(self) -> None:
        assert detect_double_top_bottom(_peaked_series(30, {1: 110.0, 15: 110.5})) is None
