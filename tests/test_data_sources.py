"""Tests for data source implementations."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator
from unittest.mock import MagicMock, patch

import pytest

from signalscore.data.sources import (
    CSVDataSource,
    DataSource,
    SourceFetcher,
    YahooDataSource,
    resolve_data_source,
    trailing_date_range,
)
from signalscore.exceptions import DataSourceError, DataValidationError
from signalscore.types import Bar, DateRange, Symbol


@pytest.fixture
def date_range() -> DateRange:
    """Create a test date range."""
    return DateRange(
        start=datetime(2024, 1, 1, tzinfo=timezone.utc),
        end=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )


@pytest.fixture
def symbols() -> list[Symbol]:
    """Create test symbols."""
    return [Symbol("AAPL"), Symbol("GOOGL")]


@pytest.fixture
def csv_file() -> Iterator[Callable[[str], str]]:
    """Write CSV content to a temporary file and remove it afterwards."""
    paths: list[str] = []

    def write(content: str) -> str:
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
            f.write(content)
            paths.append(f.name)
        return f.name

    yield write
    for path in paths:
        Path(path).unlink()


class StaticSource(DataSource):
    """In-memory source returning a fixed list of bars."""

    def __init__(self, bars: list[Bar]) -> None:
        self.bars = bars
        self.requests: list[tuple[list[Symbol], DateRange, str]] = []

    def fetch_bars(
        self, symbols: list[Symbol], date_range: DateRange, granularity: str
    ) -> Iterator[Bar]:
        self.requests.append((symbols, date_range, granularity))
        return iter(self.bars)


def _bar(day: int, close: float, symbol: str | None = "AAPL", high: float | None = None) -> Bar:
    return Bar(
        symbol=symbol,
        timestamp=datetime(2024, 1, day, tzinfo=timezone.utc),
        open=close,
        high=close + 1.0 if high is None else high,
        low=close - 1.0,
        close=close,
        volume=1000.0,
    )


class TestDataSourceProtocol:
    """Tests for the DataSource abstract base class."""

    def test_datasource_is_abstract(self) -> None:
        """DataSource cannot be instantiated directly."""
        with pytest.raises(TypeError, match="abstract"):
            DataSource()  # type: ignore[abstract]

    def test_subclass_must_implement_fetch_bars(self) -> None:
        """Subclasses must implement fetch_bars."""

        class IncompleteSource(DataSource):
            pass

        with pytest.raises(TypeError, match="abstract"):
            IncompleteSource()  # type: ignore[abstract]


class TestYahooDataSource:
    """Tests for YahooDataSource."""

    def test_init_with_defaults(self) -> None:
        """YahooDataSource initializes with default parameters."""
        source = YahooDataSource()

        assert source.timeout == 30
        assert source.auto_adjust is True

    def test_init_with_custom_params(self) -> None:
        """YahooDataSource accepts custom parameters."""
        source = YahooDataSource({"timeout": 60, "auto_adjust": False})

        assert source.timeout == 60
        assert source.auto_adjust is False

    def test_unsupported_granularity_raises_error(
        self, symbols: list[Symbol], date_range: DateRange
    ) -> None:
        """Unsupported granularity should raise DataSourceError."""
        source = YahooDataSource()

        with pytest.raises(DataSourceError, match="Unsupported granularity"):
            list(source.fetch_bars(symbols, date_range, "invalid"))

    def test_fetch_bars_returns_bars(self, date_range: DateRange) -> None:
        """fetch_bars should return Bar objects from yfinance data."""
        import pandas as pd

        mock_df = pd.DataFrame(
            {
                "Open": [150.0],
                "High": [155.0],
                "Low": [148.0],
                "Close": [153.0],
                "Volume": [1000000],
            },
            index=pd.DatetimeIndex([pd.Timestamp("2024-01-01 10:00:00", tz="UTC")]),
        )

        mock_ticker = MagicMock()
        mock_ticker.history.return_value = mock_df

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            mock_yf = sys.modules["yfinance"]
            mock_yf.Ticker.return_value = mock_ticker

            source = YahooDataSource()
            bars = list(source.fetch_bars([Symbol("AAPL")], date_range, "1h"))

        assert len(bars) == 1
        assert bars[0].symbol == "AAPL"
        assert bars[0].open == 150.0
        assert bars[0].close == 153.0
        assert bars[0].volume == 1000000
        assert mock_ticker.history.call_args.kwargs["interval"] == "60m"

    def test_fetch_bars_skips_missing_rows(self, date_range: DateRange) -> None:
        """Rows with NaN prices should be dropped."""
        import pandas as pd

        mock_df = pd.DataFrame(
            {
                "Open": [150.0, float("nan")],
                "High": [155.0, float("nan")],
                "Low": [148.0, float("nan")],
                "Close": [153.0, float("nan")],
                "Volume": [1000, 0],
            },
            index=pd.DatetimeIndex(
                [pd.Timestamp("2024-01-01"), pd.Timestamp("2024-01-02")]
            ),
        )

        mock_ticker = MagicMock()
        mock_ticker.history.return_value = mock_df

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            sys.modules["yfinance"].Ticker.return_value = mock_ticker

            bars = list(YahooDataSource().fetch_bars([Symbol("AAPL")], date_range, "1d"))

        assert len(bars) == 1
        assert bars[0].timestamp.tzinfo is not None

    def test_fetch_bars_empty_data_continues(
        self,
        symbols: list[Symbol],
        date_range: DateRange,
    ) -> None:
        """Empty data for a symbol should not raise error."""
        import pandas as pd

        mock_ticker = MagicMock()
        mock_ticker.history.return_value = pd.DataFrame()

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            mock_yf = sys.modules["yfinance"]
            mock_yf.Ticker.return_value = mock_ticker

            source = YahooDataSource()
            bars = list(source.fetch_bars(symbols, date_range, "1d"))

        assert bars == []

    def test_fetch_failure_raises_error(self, date_range: DateRange) -> None:
        """Download errors should be wrapped in DataSourceError."""
        mock_ticker = MagicMock()
        mock_ticker.history.side_effect = RuntimeError("connection reset")

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            sys.modules["yfinance"].Ticker.return_value = mock_ticker

            with pytest.raises(DataSourceError, match="AAPL"):
                list(YahooDataSource().fetch_bars([Symbol("AAPL")], date_range, "1d"))


class TestCSVDataSource:
    """Tests for CSVDataSource."""

    def test_init_requires_file_path(self) -> None:
        """CSVDataSource requires file_path in source_params."""
        with pytest.raises(DataSourceError, match="requires 'file_path'"):
            CSVDataSource()

        with pytest.raises(DataSourceError, match="requires 'file_path'"):
            CSVDataSource({})

    def test_init_with_defaults(self) -> None:
        """CSVDataSource initializes with default column names."""
        source = CSVDataSource({"file_path": "test.csv"})

        assert source.columns["symbol"] == "symbol"
        assert source.columns["timestamp"] == "timestamp"
        assert source.columns["open"] == "open"
        assert source.delimiter == ","

    def test_init_with_custom_columns(self) -> None:
        """CSVDataSource accepts custom column mappings."""
        source = CSVDataSource(
            {
                "file_path": "test.csv",
                "symbol_col": "ticker",
                "timestamp_col": "datetime",
                "delimiter": ";",
            }
        )

        assert source.columns["symbol"] == "ticker"
        assert source.columns["timestamp"] == "datetime"
        assert source.delimiter == ";"

    def test_fetch_bars_from_csv(self, csv_file, date_range: DateRange) -> None:
        """fetch_bars should read data from CSV file."""
        path = csv_file(
            """symbol,timestamp,open,high,low,close,volume
AAPL,2024-01-01T10:00:00+00:00,150.0,155.0,148.0,153.0,1000
AAPL,2024-01-01T10:05:00+00:00,153.0,156.0,152.0,155.0,1200
"""
        )

        bars = list(CSVDataSource({"file_path": path}).fetch_bars([], date_range, "5m"))

        assert len(bars) == 2
        assert bars[0].symbol == "AAPL"
        assert bars[0].open == 150.0
        assert bars[1].close == 155.0

    def test_fetch_bars_filters_by_symbol(self, csv_file, date_range: DateRange) -> None:
        """fetch_bars should filter by symbols."""
        path = csv_file(
            """symbol,timestamp,open,high,low,close,volume
AAPL,2024-01-01T10:00:00+00:00,150.0,155.0,148.0,153.0,1000
GOOGL,2024-01-01T10:00:00+00:00,2800.0,2850.0,2780.0,2830.0,500
"""
        )

        source = CSVDataSource({"file_path": path})
        bars = list(source.fetch_bars([Symbol("GOOGL")], date_range, "5m"))

        assert len(bars) == 1
        assert bars[0].symbol == "GOOGL"

    def test_single_symbol_file_without_symbol_column(
        self, csv_file, date_range: DateRange
    ) -> None:
        """Rows without a symbol are attributed to the one requested symbol."""
        path = csv_file(
            """timestamp,open,high,low,close,volume
2024-01-01T10:00:00Z,150.0,155.0,148.0,153.0,1000
"""
        )

        source = CSVDataSource({"file_path": path})
        bars = list(source.fetch_bars([Symbol("AAPL")], date_range, "1d"))

        assert len(bars) == 1
        assert bars[0].symbol == "AAPL"

    def test_epoch_timestamps(self, csv_file, date_range: DateRange) -> None:
        """Numeric timestamps are read as epoch seconds."""
        epoch = int(datetime(2024, 1, 1, 12, tzinfo=timezone.utc).timestamp())
        path = csv_file(
            f"""symbol,timestamp,open,high,low,close,volume
AAPL,{epoch},150.0,155.0,148.0,153.0,1000
"""
        )

        bars = list(CSVDataSource({"file_path": path}).fetch_bars([], date_range, "1d"))

        assert bars[0].timestamp == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_fetch_bars_with_custom_timestamp_format(
        self, csv_file, date_range: DateRange
    ) -> None:
        """fetch_bars should parse custom timestamp formats."""
        path = csv_file(
            """symbol,timestamp,open,high,low,close,volume
AAPL,01/01/2024 10:00,150.0,155.0,148.0,153.0,1000
"""
        )

        source = CSVDataSource(
            {"file_path": path, "timestamp_format": "%m/%d/%Y %H:%M"}
        )
        bars = list(source.fetch_bars([], date_range, "5m"))

        assert len(bars) == 1
        assert bars[0].timestamp.tzinfo is not None

    def test_bad_timestamp_raises_error(self, csv_file, date_range: DateRange) -> None:
        """Unparseable timestamps should raise DataSourceError."""
        path = csv_file(
            """symbol,timestamp,open,high,low,close,volume
AAPL,yesterday,150.0,155.0,148.0,153.0,1000
"""
        )

        with pytest.raises(DataSourceError, match="timestamp"):
            list(CSVDataSource({"file_path": path}).fetch_bars([], date_range, "1d"))

    def test_bad_price_raises_error(self, csv_file, date_range: DateRange) -> None:
        """Non-numeric prices should raise DataSourceError."""
        path = csv_file(
            """symbol,timestamp,open,high,low,close,volume
AAPL,2024-01-01T10:00:00+00:00,abc,155.0,148.0,153.0,1000
"""
        )

        with pytest.raises(DataSourceError, match="Failed to parse row"):
            list(CSVDataSource({"file_path": path}).fetch_bars([], date_range, "1d"))

    def test_fetch_bars_file_not_found(self, date_range: DateRange) -> None:
        """fetch_bars should raise error if file not found."""
        source = CSVDataSource({"file_path": "/nonexistent/file.csv"})

        with pytest.raises(DataSourceError, match="not found"):
            list(source.fetch_bars([], date_range, "5m"))

    def test_fetch_bars_filters_by_date_range(self, csv_file) -> None:
        """fetch_bars should filter by date range."""
        path = csv_file(
            """symbol,timestamp,open,high,low,close,volume
AAPL,2024-01-01T10:00:00+00:00,150.0,155.0,148.0,153.0,1000
AAPL,2024-01-05T10:00:00+00:00,160.0,165.0,158.0,163.0,1100
"""
        )
        date_range = DateRange(
            start=datetime(2024, 1, 1, tzinfo=timezone.utc),
            end=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )

        bars = list(CSVDataSource({"file_path": path}).fetch_bars([], date_range, "5m"))

        assert len(bars) == 1
        assert bars[0].timestamp.day == 1


class TestResolveDataSource:
    """Tests for resolve_data_source function."""

    def test_resolve_yahoo(self) -> None:
        """resolve_data_source returns YahooDataSource for 'yahoo'."""
        assert isinstance(resolve_data_source("yahoo", {}), YahooDataSource)

    def test_resolve_csv(self) -> None:
        """resolve_data_source returns CSVDataSource for 'csv'."""
        source = resolve_data_source("csv", {"file_path": "test.csv"})

        assert isinstance(source, CSVDataSource)

    def test_resolve_case_insensitive(self) -> None:
        """resolve_data_source should be case-insensitive."""
        assert isinstance(resolve_data_source("YAHOO"), YahooDataSource)

    def test_resolve_unknown_raises_error(self) -> None:
        """resolve_data_source raises error for unknown source types."""
        with pytest.raises(DataSourceError, match="Unrecognized"):
            resolve_data_source("unknown", {})


class TestSourceFetcher:
    """Tests for adapting a data source to the scanner's fetch callable."""

    def test_returns_sorted_series(self, date_range: DateRange) -> None:
        """Bars are sorted by timestamp and tagged with the symbol."""
        source = StaticSource([_bar(3, 12.0), _bar(1, 10.0), _bar(2, 11.0)])
        fetch = SourceFetcher(source, date_range, "1d")

        series = fetch("AAPL")

        assert series.symbol == "AAPL"
        assert series.closes().tolist() == [10.0, 11.0, 12.0]
        assert source.requests == [([Symbol("AAPL")], date_range, "1d")]

    def test_no_bars_raises_error(self, date_range: DateRange) -> None:
        """An empty response is a data source failure."""
        fetch = SourceFetcher(StaticSource([]), date_range)

        with pytest.raises(DataSourceError, match="No data returned for AAPL"):
            fetch("AAPL")

    def test_invalid_bars_raise_validation_error(self, date_range: DateRange) -> None:
        """Malformed provider data is rejected before scoring."""
        fetch = SourceFetcher(StaticSource([_bar(1, 10.0, high=5.0)]), date_range)

        with pytest.raises(DataValidationError, match="Bar 0"):
            fetch("AAPL")


class TestTrailingDateRange:
    """Tests for trailing_date_range."""

    def test_window(self) -> None:
        end = datetime(2024, 6, 1, tzinfo=timezone.utc)
        date_range = trailing_date_range(30, end)

        assert date_range.end == end
        assert (date_range.end - date_range.start).days == 30
