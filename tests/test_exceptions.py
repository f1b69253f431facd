"""Tests for the signalscore exception hierarchy and where it is raised."""

from pathlib import Path

import pydantic
import pytest

from signalscore.commands.scan import load_scan_config
from signalscore.data import CSVDataSource, validate_bars
from signalscore.exceptions import (ConfigError, DataSourceError,
                                    DataValidationError, SignalScoreError)

from conftest import make_bar


@pytest.mark.parametrize("error", [ConfigError, DataSourceError, DataValidationError])
def test_package_errors_share_base(error: type[SignalScoreError]) -> None:
    assert issubclass(error, SignalScoreError)
    assert not issubclass(error, pydantic.ValidationError)


def test_invalid_bar_raises_catchable_validation_error() -> None:
    bad = make_bar(0, 100.0, high=99.0, low=101.0)

    with pytest.raises(SignalScoreError, match="Bar 0 has high 99.0 below low 101.0"):
        validate_bars([bad])


def test_missing_csv_path_is_data_source_error() -> None:
    with pytest.raises(DataSourceError, match="requires 'file_path'"):
        CSVDataSource({})


def test_config_error_chains_yaml_failure(tmp_path: Path) -> None:
    config_file = tmp_path / "scan.yaml"
    config_file.write_text("universe: [AAPL\n")

    with pytest.raises(ConfigError, match="Invalid YAML") as exc_info:
        load_scan_config(config_file)

    assert exc_info.value.__cause__ is not None
