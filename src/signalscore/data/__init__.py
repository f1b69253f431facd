"""Market data ingestion and series validation."""

from signalscore.data.series import bars_to_series, validate_bars
from signalscore.data.sources import (
    CSVDataSource,
    DataSource,
    SourceFetcher,
    YahooDataSource,
    resolve_data_source,
    trailing_date_range,
)

__all__ = [
    "DataSource",
    "YahooDataSource",
    "CSVDataSource",
    "SourceFetcher",
    "resolve_data_source",
    "trailing_date_range",
    "bars_to_series",
    "validate_bars",
]
