"""Configuration and execution for the scan command.

Example config file (scan.yaml):

    universe:            # Optional, defaults to DEFAULT_UNIVERSE
      - "AAPL"
      - "MSFT"
    data_source: "yahoo"
    source_params: {}
    granularity: "1d"
    lookback_days: 365
    scan:
      min_score: 60
      min_price: 5
      max_price: 300
      top_n: 10
      risk_level: "moderate"
    weights:
      technical: 0.35
      volume: 0.25
      price_action: 0.25
      patterns: 0.15
    logging:
      level: "INFO"
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from signalscore.data.sources import (
    VALID_DATA_SOURCES,
    SourceFetcher,
    YahooDataSource,
    resolve_data_source,
    trailing_date_range,
)
from signalscore.exceptions import ConfigError
from signalscore.scanner import DEFAULT_UNIVERSE, Scanner, normalize_universe
from signalscore.scoring import CompositeScorer
from signalscore.types import ScanConfig, ScanParams, ScanReport, ScoringWeights

# Valid granularities supported by data sources
VALID_GRANULARITIES = frozenset(YahooDataSource.GRANULARITY_MAP)

VALID_LOG_LEVELS = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


def _format_validation_error(section: str, error: ValidationError) -> str:
    """Flatten a pydantic error into ``section.field: message`` fragments."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(loc) for loc in detail["loc"])
        key = f"{section}.{location}" if location else section
        parts.append(f"{key}: {detail['msg']}")
    return "; ".join(parts)


def _mapping(raw_config: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw_config.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def load_scan_config(config_path: str | Path) -> ScanConfig:
    """Parse and validate a scan configuration file.

    :param config_path: Path to YAML configuration file.
    :returns: Validated ScanConfig object.
    :raises ConfigError: If file cannot be read or config is invalid.
    """
    config_path = Path(config_path)

    # Read and parse YAML
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    # Parse universe (optional)
    raw_universe = raw_config.get("universe")
    if raw_universe is None:
        universe = list(DEFAULT_UNIVERSE)
    else:
        if not isinstance(raw_universe, list) or len(raw_universe) == 0:
            raise ConfigError("'universe' must be a non-empty list")
        if not all(isinstance(s, str) for s in raw_universe):
            raise ConfigError("'universe' entries must be strings")
        universe = normalize_universe(raw_universe)
        if not universe:
            raise ConfigError("'universe' must contain at least one symbol")

    # Parse data_source
    data_source = raw_config.get("data_source", "yahoo")
    if data_source not in VALID_DATA_SOURCES:
        raise ConfigError(
            f"Invalid data_source '{data_source}'. "
            f"Valid options: {sorted(VALID_DATA_SOURCES)}"
        )

    # Parse source_params (optional)
    source_params = _mapping(raw_config, "source_params")

    # Parse granularity
    granularity = raw_config.get("granularity", "1d")
    if granularity not in VALID_GRANULARITIES:
        raise ConfigError(
            f"Invalid granularity '{granularity}'. "
            f"Valid options: {sorted(VALID_GRANULARITIES)}"
        )

    # Parse lookback_days
    lookback_days = raw_config.get("lookback_days", 365)
    if (
        not isinstance(lookback_days, int)
        or isinstance(lookback_days, bool)
        or lookback_days <= 0
    ):
        raise ConfigError("'lookback_days' must be a positive integer")

    # Parse scan and weights sections
    try:
        scan_params = ScanParams(**_mapping(raw_config, "scan"))
    except ValidationError as e:
        raise ConfigError(_format_validation_error("scan", e)) from e
    except TypeError as e:
        raise ConfigError(f"Invalid 'scan' section: {e}") from e

    try:
        weights = ScoringWeights(**_mapping(raw_config, "weights"))
    except ValidationError as e:
        raise ConfigError(_format_validation_error("weights", e)) from e
    except TypeError as e:
        raise ConfigError(f"Invalid 'weights' section: {e}") from e

    # Parse logging (optional)
    log_level = str(_mapping(raw_config, "logging").get("level", "INFO")).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"Invalid logging.level '{log_level}'. "
            f"Valid options: {sorted(VALID_LOG_LEVELS)}"
        )

    return ScanConfig(
        universe=universe,
        data_source=data_source,
        source_params=source_params,
        granularity=granularity,
        lookback_days=lookback_days,
        scan=scan_params,
        weights=weights,
        log_level=log_level,
    )


def run_scan(
    config: ScanConfig,
    cancel: threading.Event | None = None,
) -> ScanReport:
    """Run the scanner described by ``config``.

    :param config: Validated scan configuration.
    :param cancel: Optional event that aborts the scan when set.
    :returns: Ranked scan report.
    :raises DataSourceError: If the data source cannot be constructed.
    """
    source = resolve_data_source(config.data_source, config.source_params)
    fetch = SourceFetcher(
        source,
        trailing_date_range(config.lookback_days),
        config.granularity,
    )
    scanner = Scanner(fetch, scorer=CompositeScorer(config.weights))
    return scanner.scan(config.universe, config.scan, cancel)


__all__ = [
    "VALID_GRANULARITIES",
    "VALID_LOG_LEVELS",
    "load_scan_config",
    "run_scan",
]
