"""Tests for core types and OHLCV validation."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from signalscore.data.series import bars_to_series, validate_bars
from signalscore.exceptions import DataValidationError
from signalscore.types import (
    Bar,
    ComponentScore,
    OHLCVSeries,
    Point,
    PointSeries,
    Recommendation,
    RiskLevel,
    ScanParams,
    Score,
    ScoreComponents,
    ScoringWeights,
)

from conftest import START, make_bar, series_from_closes


class TestBar:
    """Tests for Bar construction."""

    def test_naive_timestamp_becomes_utc(self) -> None:
        bar = Bar(
            timestamp=datetime(2024, 1, 1, 9, 30),
            open=1.0, high=2.0, low=0.5, close=1.5, volume=10.0,
        )
        assert bar.timestamp.tzinfo == timezone.utc

    def test_bar_is_frozen(self) -> None:
        bar = make_bar(0, 10.0)
        with pytest.raises(ValidationError):
            bar.close = 11.0  # type: ignore[misc]

    def test_symbol_optional(self) -> None:
        assert make_bar(0, 10.0).symbol is None


class TestOHLCVSeriesValidation:
    """Invalid bars are rejected with the offending index."""

    def test_valid_series(self) -> None:
        series = series_from_closes([10.0, 11.0, 12.0], spread=0.5, symbol="ABC")
        assert len(series) == 3
        assert series.symbol == "ABC"
        assert series.closes().tolist() == [10.0, 11.0, 12.0]

    def test_empty_series_is_valid(self) -> None:
        series = OHLCVSeries()
        assert series.is_empty
        assert series.last() is None

    def test_high_below_low(self) -> None:
        bars = [make_bar(0, 10.0), make_bar(1, 10.0, high=9.0, low=11.0)]
        with pytest.raises(DataValidationError, match="Bar 1"):
            OHLCVSeries.from_bars(bars)

    def test_close_outside_range(self) -> None:
        bars = [make_bar(0, 12.0, high=11.0, low=9.0, open=10.0)]
        with pytest.raises(DataValidationError, match="close"):
            OHLCVSeries.from_bars(bars)

    def test_open_outside_range(self) -> None:
        bars = [make_bar(0, 10.0, high=11.0, low=9.0, open=8.0)]
        with pytest.raises(DataValidationError, match="open"):
            OHLCVSeries.from_bars(bars)

    def test_negative_volume(self) -> None:
        bars = [make_bar(0, 10.0, volume=-1.0)]
        with pytest.raises(DataValidationError, match="negative volume"):
            OHLCVSeries.from_bars(bars)

    def test_negative_price(self) -> None:
        bars = [make_bar(0, -1.0)]
        with pytest.raises(DataValidationError, match="negative price"):
            OHLCVSeries.from_bars(bars)

    def test_non_finite_value(self) -> None:
        bars = [make_bar(0, float("nan"))]
        with pytest.raises(DataValidationError, match="non-finite"):
            OHLCVSeries.from_bars(bars)

    def test_duplicate_timestamp(self) -> None:
        bars = [make_bar(0, 10.0), make_bar(0, 11.0)]
        with pytest.raises(DataValidationError, match="Bar 1 timestamp"):
            OHLCVSeries.from_bars(bars)

    def test_decreasing_timestamp(self) -> None:
        bars = [make_bar(1, 10.0), make_bar(0, 11.0)]
        with pytest.raises(DataValidationError):
            validate_bars(bars)


class TestBarsToSeries:
    """Tests for provider bar normalization."""

    def test_sorts_by_timestamp(self) -> None:
        bars = [make_bar(2, 12.0), make_bar(0, 10.0), make_bar(1, 11.0)]
        series = bars_to_series(bars)
        assert series.closes().tolist() == [10.0, 11.0, 12.0]

    def test_filters_other_symbols(self) -> None:
        bars = [
            make_bar(0, 10.0).model_copy(update={"symbol": "AAA"}),
            make_bar(1, 20.0).model_copy(update={"symbol": "BBB"}),
            make_bar(2, 11.0).model_copy(update={"symbol": "AAA"}),
        ]
        series = bars_to_series(bars, "AAA")
        assert series.symbol == "AAA"
        assert series.closes().tolist() == [10.0, 11.0]


class TestSeriesAccessors:
    """Tests for OHLCVSeries and PointSeries helpers."""

    def test_tail(self) -> None:
        series = series_from_closes([1.0, 2.0, 3.0, 4.0])
        assert series.tail(2).closes().tolist() == [3.0, 4.0]
        assert series.tail(0).is_empty
        assert len(series.tail(10)) == 4

    def test_point_series_last_previous(self) -> None:
        points = tuple(
            Point(timestamp=START + timedelta(days=i), value=float(i)) for i in range(3)
        )
        series = PointSeries(name="x", points=points)
        assert series.last() == 2.0
        assert series.previous() == 1.0
        assert series.values().tolist() == [0.0, 1.0, 2.0]
        assert PointSeries(name="x").last() is None
        assert PointSeries(name="x").previous() is None


class TestScoringWeights:
    """Tests for component weight validation."""

    def test_defaults(self) -> None:
        weights = ScoringWeights()
        assert weights.as_dict() == {
            "technical": 0.35,
            "volume": 0.25,
            "price_action": 0.25,
            "patterns": 0.15,
        }

    def test_must_sum_to_one(self) -> None:
        with pytest.raises(ValidationError, match="sum to 1.0"):
            ScoringWeights(technical=0.5)

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScoringWeights(technical=-0.1, volume=0.6, price_action=0.35, patterns=0.15)

    def test_custom_weights(self) -> None:
        weights = ScoringWeights(technical=0.25, volume=0.25, price_action=0.25, patterns=0.25)
        assert weights.technical == 0.25


class TestScore:
    """Tests for the Score model."""

    def test_composite_scale(self) -> None:
        component = ComponentScore(score=0.0, weight=0.25)
        score = Score(
            score=45.0,
            components=ScoreComponents(
                technical=component,
                volume=component,
                price_action=component,
                patterns=component,
            ),
            confidence=80.0,
            recommendation=Recommendation.BUY,
        )
        assert score.composite == pytest.approx(4.5)

    def test_score_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            ComponentScore(score=150.0, weight=0.5)


class TestScanParams:
    """Tests for scan parameter validation."""

    def test_defaults(self) -> None:
        params = ScanParams()
        assert params.min_score == 60.0
        assert params.top_n == 10
        assert params.account_size == 10000.0
        assert params.risk_level is RiskLevel.MODERATE
        assert params.calls_per_second is None

    def test_max_price_below_min_price(self) -> None:
        with pytest.raises(ValidationError, match="max_price"):
            ScanParams(min_price=50.0, max_price=10.0)

    def test_risk_level_from_string(self) -> None:
        assert ScanParams(risk_level="aggressive").risk_level is RiskLevel.AGGRESSIVE
