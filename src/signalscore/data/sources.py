"""Market data sources feeding the scorer and scanner.

This module provides an abstract interface for data sources, implementations
for Yahoo Finance and CSV files, and :class:`SourceFetcher`, which adapts a
source into the one-symbol-at-a-time callable the scanner consumes.
"""

from __future__ import annotations

import csv
import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator

from signalscore.data.series import bars_to_series
from signalscore.exceptions import DataSourceError
from signalscore.types import Bar, DateRange, OHLCVSeries, Symbol

logger = logging.getLogger(__name__)

VALID_DATA_SOURCES = frozenset(["yahoo", "csv"])
CSV_FIELDS = ("symbol", "timestamp", "open", "high", "low", "close", "volume")


class DataSource(ABC):
    """Abstract base class for data sources.

    All data source implementations must inherit from this class and implement
    the `fetch_bars` method.
    """

    @abstractmethod
    def fetch_bars(
        self,
        symbols: list[Symbol],
        date_range: DateRange,
        granularity: str,
    ) -> Iterator[Bar]:
        """Fetch bar data for the given symbols and time range.

        :param symbols: List of symbols to fetch.
        :param date_range: Time range to fetch (inclusive start, exclusive end).
        :param granularity: Bar granularity (e.g., "1h", "1d").
        :returns: Iterator of Bar objects in chronological order per symbol.
        :raises DataSourceError: If fetching fails.
        """
        ...


class YahooDataSource(DataSource):
    """Data source that fetches data from Yahoo Finance via yfinance.

    :param source_params: Optional parameters for configuring the source.
        - timeout: Request timeout in seconds (default: 30)
        - auto_adjust: Adjust OHLC for splits and dividends (default: True)
    """

    # Map our granularity format to yfinance interval format
    GRANULARITY_MAP = {
        "1m": "1m",
        "5m": "5m",
        "15m": "15m",
        "30m": "30m",
        "1h": "60m",
        "60m": "60m",
        "1d": "1d",
        "1wk": "1wk",
        "1mo": "1mo",
    }
    FRAME_COLUMNS = ("Open", "High", "Low", "Close", "Volume")

    def __init__(self, source_params: dict[str, Any] | None = None) -> None:
        self.params = source_params or {}
        self.timeout = self.params.get("timeout", 30)
        self.auto_adjust = self.params.get("auto_adjust", True)

    def fetch_bars(
        self,
        symbols: list[Symbol],
        date_range: DateRange,
        granularity: str,
    ) -> Iterator[Bar]:
        """Fetch bar data from Yahoo Finance.

        Rows with missing prices (holidays, halted sessions) are dropped.

        :param symbols: List of symbols to fetch.
        :param date_range: Time range to fetch.
        :param granularity: Bar granularity.
        :returns: Iterator of Bar objects.
        :raises DataSourceError: If yfinance is missing or a download fails.
        """
        interval = self.GRANULARITY_MAP.get(granularity)
        if interval is None:
            raise DataSourceError(
                f"Unsupported granularity '{granularity}'. "
                f"Supported: {list(self.GRANULARITY_MAP.keys())}"
            )

        try:
            import yfinance as yf
        except ImportError as e:
            raise DataSourceError(
                "yfinance is not installed. Install it with: pip install yfinance"
            ) from e

        start_str = date_range.start.strftime("%Y-%m-%d")
        end_str = date_range.end.strftime("%Y-%m-%d")

        for symbol in symbols:
            try:
                df = yf.Ticker(str(symbol)).history(
                    start=start_str,
                    end=end_str,
                    interval=interval,
                    auto_adjust=self.auto_adjust,
                    timeout=self.timeout,
                )
            except Exception as e:
                raise DataSourceError(
                    f"Failed to fetch data for symbol '{symbol}': {e}"
                ) from e

            if df.empty:
                logger.warning("No data returned by Yahoo for %s", symbol)
                continue

            for stamp, row in df.iterrows():
                fields = {name.lower(): float(row[name]) for name in self.FRAME_COLUMNS}
                if any(math.isnan(v) for v in fields.values()):
                    continue
                ts = stamp.to_pydatetime()
                if ts.tzinfo is None:
                    ts = ts.replace(tzinfo=timezone.utc)
                yield Bar(symbol=symbol, timestamp=ts, **fields)


class CSVDataSource(DataSource):
    """Data source that reads bar data from CSV files.

    Expected CSV format (default columns):
    - symbol: Stock symbol (optional when the file holds one symbol)
    - timestamp: ISO format datetime string or epoch seconds
    - open, high, low, close: Prices
    - volume: Trading volume

    :param source_params: Required parameters:
        - file_path: Path to the CSV file.
        Optional parameters:
        - symbol_col, timestamp_col, open_col, high_col, low_col, close_col,
          volume_col: Column names (default: the lower-case field name)
        - delimiter: CSV delimiter (default: ",")
        - timestamp_format: strptime format for timestamps (default: ISO format)
    """

    def __init__(self, source_params: dict[str, Any] | None = None) -> None:
        self.params = source_params or {}
        self.file_path = self.params.get("file_path")
        if not self.file_path:
            raise DataSourceError("CSVDataSource requires 'file_path' in source_params")

        # field name -> header in the file
        self.columns = {
            field: self.params.get(f"{field}_col", field) for field in CSV_FIELDS
        }
        self.delimiter = self.params.get("delimiter", ",")
        self.timestamp_format = self.params.get("timestamp_format")

    def _parse_timestamp(self, value: str) -> datetime:
        try:
            if self.timestamp_format:
                ts = datetime.strptime(value, self.timestamp_format)
            elif value.replace(".", "", 1).isdigit():
                ts = datetime.fromtimestamp(float(value), tz=timezone.utc)
            else:
                ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise DataSourceError(f"Failed to parse timestamp '{value}': {e}") from e
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts

    def _row_to_bar(self, row: dict[str, str], symbol: str | None, ts: datetime) -> Bar:
        try:
            prices = {
                field: float(row[self.columns[field]])
                for field in ("open", "high", "low", "close", "volume")
            }
        except (KeyError, TypeError, ValueError) as e:
            raise DataSourceError(f"Failed to parse row {row}: {e}") from e
        return Bar(symbol=Symbol(symbol) if symbol else None, timestamp=ts, **prices)

    def fetch_bars(
        self,
        symbols: list[Symbol],
        date_range: DateRange,
        granularity: str,
    ) -> Iterator[Bar]:
        """Read bar data from the CSV file.

        Rows without a symbol column value are attributed to the requested
        symbol when exactly one symbol is requested.

        :param symbols: List of symbols to filter (empty = all symbols).
        :param date_range: Time range to filter.
        :param granularity: Ignored for CSV source.
        :returns: Iterator of Bar objects.
        :raises DataSourceError: If reading fails.
        """
        path = Path(self.file_path)
        if not path.exists():
            raise DataSourceError(f"CSV file not found: {self.file_path}")

        wanted = {str(s) for s in symbols}
        fallback = str(symbols[0]) if len(symbols) == 1 else None

        try:
            with open(path, newline="", encoding="utf-8") as f:
                for row in csv.DictReader(f, delimiter=self.delimiter):
                    symbol = row.get(self.columns["symbol"]) or fallback
                    if wanted and symbol not in wanted:
                        continue
                    raw_ts = row.get(self.columns["timestamp"])
                    if not raw_ts:
                        continue
                    ts = self._parse_timestamp(raw_ts)
                    if date_range.start <= ts < date_range.end:
                        yield self._row_to_bar(row, symbol, ts)
        except csv.Error as e:
            raise DataSourceError(f"CSV parsing error: {e}") from e
        except OSError as e:
            raise DataSourceError(f"Failed to read CSV file: {e}") from e


def resolve_data_source(
    data_source: str,
    source_params: dict[str, Any] | None = None,
) -> DataSource:
    """Construct a data source by name.

    :param data_source: Source type ("yahoo" or "csv").
    :param source_params: Source-specific parameters.
    :returns: DataSource instance for the specified type.
    :raises DataSourceError: If the source type is unrecognized.
    """
    source_type = data_source.lower()

    if source_type == "yahoo":
        return YahooDataSource(source_params)
    elif source_type == "csv":
        return CSVDataSource(source_params)
    else:
        raise DataSourceError(
            f"Unrecognized data source type: '{data_source}'. "
            f"Supported types: {', '.join(sorted(VALID_DATA_SOURCES))}"
        )


def trailing_date_range(days: int, end: datetime | None = None) -> DateRange:
    """Date range covering the ``days`` calendar days up to ``end`` (default: now)."""
    end = end or datetime.now(timezone.utc)
    return DateRange(start=end - timedelta(days=days), end=end)


class SourceFetcher:
    """Adapt a :class:`DataSource` into a ``symbol -> OHLCVSeries`` callable.

    :param source: Underlying data source.
    :param date_range: Range requested for every symbol.
    :param granularity: Bar granularity requested for every symbol.
    """

    def __init__(
        self,
        source: DataSource,
        date_range: DateRange,
        granularity: str = "1d",
    ) -> None:
        self.source = source
        self.date_range = date_range
        self.granularity = granularity

    def __call__(self, symbol: str) -> OHLCVSeries:
        """Fetch and validate the series for one symbol.

        :raises DataSourceError: If the fetch fails or returns no bars.
        :raises DataValidationError: If the returned bars are malformed.
        """
        bars = list(
            self.source.fetch_bars([Symbol(symbol)], self.date_range, self.granularity)
        )
        if not bars:
            raise DataSourceError(f"No data returned for {symbol}")
        return bars_to_series(bars, symbol)


__all__ = [
    "DataSource",
    "YahooDataSource",
    "CSVDataSource",
    "SourceFetcher",
    "VALID_DATA_SOURCES",
    "resolve_data_source",
    "trailing_date_range",
]
