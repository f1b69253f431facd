"""Tests for the scan command configuration loader and runner."""

import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from signalscore.commands.scan import load_scan_config, run_scan
from signalscore.exceptions import ConfigError, DataSourceError
from signalscore.scanner import DEFAULT_UNIVERSE
from signalscore.types import RiskLevel, ScanConfig, ScanParams, Symbol

from conftest import wavy_series


def _write_config(tmp_path: Path, config: object) -> Path:
    config_file = tmp_path / "scan.yaml"
    config_file.write_text(yaml.dump(config))
    return config_file


def _write_csv(tmp_path: Path, symbols: list[str], n: int = 260) -> Path:
    """CSV of wavy daily bars ending yesterday for each symbol."""
    now = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    lines = ["symbol,timestamp,open,high,low,close,volume"]
    for offset, symbol in enumerate(symbols):
        series = wavy_series(n)
        for i, bar in enumerate(series.bars):
            ts = now - timedelta(days=n - i)
            lines.append(
                f"{symbol},{ts.isoformat()},{bar.open + offset},{bar.high + offset},"
                f"{bar.low + offset},{bar.close + offset},{bar.volume}"
            )
    path = tmp_path / "bars.csv"
    path.write_text("\n".join(lines) + "\n")
    return path


class TestLoadScanConfig:
    """Tests for scan config loading."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        """Load a valid configuration file."""
        config = {
            "universe": ["aapl", "MSFT", "AAPL"],
            "data_source": "yahoo",
            "granularity": "1d",
            "lookback_days": 200,
            "scan": {"min_score": 40, "top_n": 5, "risk_level": "aggressive"},
            "weights": {
                "technical": 0.4,
                "volume": 0.2,
                "price_action": 0.2,
                "patterns": 0.2,
            },
            "logging": {"level": "debug"},
        }

        result = load_scan_config(_write_config(tmp_path, config))

        assert result.universe == [Symbol("AAPL"), Symbol("MSFT")]
        assert result.lookback_days == 200
        assert result.scan.min_score == 40
        assert result.scan.top_n == 5
        assert result.scan.risk_level is RiskLevel.AGGRESSIVE
        assert result.weights.technical == 0.4
        assert result.log_level == "DEBUG"

    def test_defaults(self, tmp_path: Path) -> None:
        """An empty file yields the default configuration."""
        config_file = tmp_path / "scan.yaml"
        config_file.write_text("")

        result = load_scan_config(config_file)

        assert result.universe == list(DEFAULT_UNIVERSE)
        assert result.data_source == "yahoo"
        assert result.granularity == "1d"
        assert result.lookback_days == 365
        assert result.scan == ScanParams()
        assert result.weights.as_dict()["technical"] == 0.35
        assert result.log_level == "INFO"

    def test_load_with_source_params(self, tmp_path: Path) -> None:
        """Config with source_params parses them."""
        config = {
            "universe": ["SPY"],
            "data_source": "csv",
            "source_params": {"file_path": "/path/to/data.csv"},
        }

        result = load_scan_config(_write_config(tmp_path, config))

        assert result.source_params == {"file_path": "/path/to/data.csv"}

    def test_file_not_found_raises(self) -> None:
        """Non-existent file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_scan_config("/nonexistent/path.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Malformed YAML raises ConfigError."""
        config_file = tmp_path / "scan.yaml"
        config_file.write_text("universe: [AAPL\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_scan_config(config_file)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        """A top-level list is not a valid config."""
        with pytest.raises(ConfigError, match="mapping"):
            load_scan_config(_write_config(tmp_path, ["AAPL"]))

    @pytest.mark.parametrize("universe", [[], "AAPL", ["AAPL", 5], ["  "]])
    def test_invalid_universe_raises(self, tmp_path: Path, universe: object) -> None:
        """Universe must be a non-empty list of symbol strings."""
        with pytest.raises(ConfigError, match="'universe'"):
            load_scan_config(_write_config(tmp_path, {"universe": universe}))

    def test_invalid_data_source_raises(self, tmp_path: Path) -> None:
        """Invalid data_source raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid data_source"):
            load_scan_config(_write_config(tmp_path, {"data_source": "unknown"}))

    def test_invalid_granularity_raises(self, tmp_path: Path) -> None:
        """Invalid granularity raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid granularity"):
            load_scan_config(_write_config(tmp_path, {"granularity": "2d"}))

    @pytest.mark.parametrize("lookback_days", [0, -5, "many", True])
    def test_invalid_lookback_raises(self, tmp_path: Path, lookback_days: object) -> None:
        """lookback_days must be a positive integer."""
        with pytest.raises(ConfigError, match="lookback_days"):
            load_scan_config(_write_config(tmp_path, {"lookback_days": lookback_days}))

    def test_invalid_scan_section_raises(self, tmp_path: Path) -> None:
        """Field errors in the scan section name the field."""
        with pytest.raises(ConfigError, match="scan.top_n"):
            load_scan_config(_write_config(tmp_path, {"scan": {"top_n": 0}}))

    def test_scan_section_must_be_mapping(self, tmp_path: Path) -> None:
        """A scalar scan section raises ConfigError."""
        with pytest.raises(ConfigError, match="'scan' must be a mapping"):
            load_scan_config(_write_config(tmp_path, {"scan": 5}))

    def test_weights_must_sum_to_one(self, tmp_path: Path) -> None:
        """Weights that do not sum to 1 raise ConfigError."""
        config = {"weights": {"technical": 0.9, "volume": 0.5}}

        with pytest.raises(ConfigError, match="weights"):
            load_scan_config(_write_config(tmp_path, config))

    def test_invalid_log_level_raises(self, tmp_path: Path) -> None:
        """Unknown logging levels raise ConfigError."""
        with pytest.raises(ConfigError, match="logging.level"):
            load_scan_config(_write_config(tmp_path, {"logging": {"level": "loud"}}))


class TestRunScan:
    """End-to-end scans over a CSV data source."""

    def test_scan_csv_universe(self, tmp_path: Path) -> None:
        """Every symbol in the file is scored and ranked."""
        csv_path = _write_csv(tmp_path, ["AAA", "BBB"])
        config = ScanConfig(
            universe=[Symbol("AAA"), Symbol("BBB"), Symbol("MISSING")],
            data_source="csv",
            source_params={"file_path": str(csv_path)},
            lookback_days=300,
            scan=ScanParams(min_score=-100, max_workers=2),
        )

        report = run_scan(config)

        assert report.scanned == 3
        assert report.skipped_symbols == [Symbol("MISSING")]
        assert sorted(r.symbol for r in report.results) == ["AAA", "BBB"]
        scores = [r.score for r in report.results]
        assert scores == sorted(scores, reverse=True)
        assert all(r.targets is not None for r in report.results)

    def test_lookback_limits_history(self, tmp_path: Path) -> None:
        """Only bars inside the trailing window are scored."""
        csv_path = _write_csv(tmp_path, ["AAA"])
        config = ScanConfig(
            universe=[Symbol("AAA")],
            data_source="csv",
            source_params={"file_path": str(csv_path)},
            lookback_days=10,
            scan=ScanParams(min_score=-100),
        )

        report = run_scan(config)

        assert len(report.results) == 1
        assert report.results[0].targets is None

    def test_cancelled_scan(self, tmp_path: Path) -> None:
        """A pre-set cancel event returns an empty, cancelled report."""
        csv_path = _write_csv(tmp_path, ["AAA"])
        config = ScanConfig(
            universe=[Symbol("AAA")],
            data_source="csv",
            source_params={"file_path": str(csv_path)},
        )
        cancel = threading.Event()
        cancel.set()

        report = run_scan(config, cancel)

        assert report.cancelled
        assert report.results == []

    def test_missing_csv_path_raises(self) -> None:
        """A CSV source without file_path fails before scanning."""
        config = ScanConfig(universe=[Symbol("AAA")], data_source="csv")

        with pytest.raises(DataSourceError, match="file_path"):
            run_scan(config)
