#!/usr/bin/env python3
"""Command-line interface for the signal scoring engine."""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta, timezone

# Start of the default range for CSV input, which has no natural lookback
_CSV_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_date(date_str: str) -> datetime:
    """Parse date string to datetime."""
    return datetime.strptime(date_str, "%Y-%m-%d").replace(tzinfo=timezone.utc)


def _load_series(args: argparse.Namespace):
    """Fetch the series for ``args.symbol`` from Yahoo or ``args.csv``."""
    from signalscore.data.sources import CSVDataSource, SourceFetcher, YahooDataSource
    from signalscore.types import DateRange

    end = parse_date(args.end) if args.end else datetime.now(timezone.utc)
    if args.start:
        start = parse_date(args.start)
    elif args.csv:
        start = _CSV_EPOCH
    else:
        start = end - timedelta(days=args.days)

    if args.csv:
        source = CSVDataSource({"file_path": args.csv})
    else:
        source = YahooDataSource()

    fetch = SourceFetcher(source, DateRange(start=start, end=end), args.granularity)
    return fetch(args.symbol.strip().upper())


def _print_series(name: str, series, count: int) -> None:
    for point in series.tail(count).points:
        print(f"   {point.timestamp.date()}  {name:<12} {point.value:>14.4f}")


def cmd_indicator(args: argparse.Namespace) -> int:
    """Compute one indicator and print its most recent points."""
    from pydantic import ValidationError

    from signalscore.exceptions import DataSourceError, DataValidationError
    from signalscore.indicators import INDICATORS, compute, parse_params
    from signalscore.types import PointSeries

    if args.kind not in INDICATORS:
        print(f"Error: Unknown indicator '{args.kind}'")
        print(f"Available indicators: {', '.join(sorted(INDICATORS))}")
        return 1

    raw_params: dict = {"kind": args.kind}
    if args.period is not None:
        raw_params["period"] = args.period
    try:
        params = parse_params(raw_params)
    except ValidationError as e:
        print(f"Invalid parameters for {args.kind}: {e}")
        return 1

    print("=" * 60)
    print("INDICATOR")
    print("=" * 60)
    print(f"Symbol:    {args.symbol}")
    print(f"Indicator: {params.label}")
    print(f"Lookback:  {params.lookback} bars")

    print("\n📊 Fetching data...")
    try:
        series = _load_series(args)
    except (DataSourceError, DataValidationError) as e:
        print(f"Failed to fetch data: {e}")
        return 1
    print(f"   Fetched {len(series)} bars")

    result = compute(series, params)
    if result.is_empty:
        print(
            f"\nNot enough history: {params.label} needs {params.lookback} bars, "
            f"got {len(series)}"
        )
        return 0

    print("\n" + "=" * 60)
    print("VALUES")
    print("=" * 60)
    if isinstance(result, PointSeries):
        _print_series(result.name, result, args.last)
    else:
        for field_name in type(result).model_fields:
            _print_series(field_name, getattr(result, field_name), args.last)

    return 0


def _print_score(score) -> None:
    print(f"Score:          {score.score:+.1f}")
    print(f"Recommendation: {score.recommendation.value}")
    print(f"Confidence:     {score.confidence:.0f}%")

    print("\n📈 COMPONENTS")
    for name, component in score.components.items():
        if component.available:
            print(f"   {name:<13} {component.score:>+7.1f}  (weight {component.weight:.2f})")
        else:
            print(f"   {name:<13} {'n/a':>7}  (insufficient history)")

    if score.signals:
        print("\n📋 SIGNALS")
        for signal in score.signals:
            print(f"   - {signal}")

    if score.warnings:
        print("\n⚠️  WARNINGS")
        for warning in score.warnings:
            print(f"   - {warning}")

    if score.targets is not None:
        targets = score.targets
        print("\n🎯 TARGETS")
        print(f"   Entry:     ${targets.entry:,.2f}")
        print(f"   Stop:      ${targets.stop_loss:,.2f}")
        print(f"   Target 1:  ${targets.target_1:,.2f}")
        print(f"   Target 2:  ${targets.target_2:,.2f}")
        print(f"   R/R:       {targets.risk_reward:.2f}")


def cmd_score(args: argparse.Namespace) -> int:
    """Compute the composite score for one symbol."""
    from signalscore.exceptions import DataSourceError, DataValidationError
    from signalscore.scoring import CompositeScorer

    print("=" * 60)
    print("SCORE")
    print("=" * 60)
    print(f"Symbol:    {args.symbol}")

    print("\n📊 Fetching data...")
    try:
        series = _load_series(args)
    except (DataSourceError, DataValidationError) as e:
        print(f"Failed to fetch data: {e}")
        return 1
    print(f"   Fetched {len(series)} bars")

    score = CompositeScorer().score(series)

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    _print_score(score)

    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    """Scan a universe from configuration and print the ranked results."""
    from signalscore.commands.scan import load_scan_config, run_scan
    from signalscore.exceptions import ConfigError, DataSourceError
    from signalscore.utils.logging import configure_logging

    try:
        config = load_scan_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    configure_logging(args.log_level or config.log_level, args.json_logs)

    print("=" * 70)
    print("SCAN")
    print("=" * 70)
    print(f"Universe:   {len(config.universe)} symbols")
    print(f"Source:     {config.data_source} ({config.granularity}, {config.lookback_days}d)")
    print(f"Min Score:  {config.scan.min_score:.0f}")
    print(f"Top N:      {config.scan.top_n}")

    print("\n🔎 Scanning...")
    try:
        report = run_scan(config)
    except DataSourceError as e:
        print(f"Data source error: {e}")
        return 1

    print("\n" + "=" * 70)
    print("RESULTS")
    print("=" * 70)
    if not report.results:
        print("No symbols met the minimum score.")
    else:
        print(
            f"{'Symbol':<8} {'Score':>7} {'Signal':<12} {'Conf':>5} "
            f"{'Price':>10} {'Shares':>7}"
        )
        print("-" * 70)
        for result in report.results:
            shares = str(result.position.shares) if result.position else "-"
            print(
                f"{result.symbol:<8} {result.score:>+7.1f} "
                f"{result.recommendation.value:<12} {result.confidence:>4.0f}% "
                f"${result.price:>9,.2f} {shares:>7}"
            )

    print(
        f"\nScanned {report.scanned}, skipped {report.skipped}, "
        f"filtered {report.filtered}"
    )
    if report.skipped_symbols:
        print(f"Skipped: {', '.join(report.skipped_symbols)}")

    return 0


def _add_data_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("symbol", help="Stock symbol (e.g., AAPL)")
    parser.add_argument("--csv", help="Read bars from this CSV file instead of Yahoo")
    parser.add_argument("--start", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", help="End date (YYYY-MM-DD, default: today)")
    parser.add_argument(
        "--days", type=int, default=365, help="Days of history when --start is omitted"
    )
    parser.add_argument(
        "-g", "--granularity", default="1d", help="Data granularity (default: 1d)"
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from signalscore.utils.logging import configure_logging

    parser = argparse.ArgumentParser(
        description="Technical indicator and composite signal scoring CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", help="Logging level (default: WARNING, or config)")
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit log lines as JSON objects"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Indicator command
    indicator_parser = subparsers.add_parser(
        "indicator", help="Compute a single indicator"
    )
    _add_data_arguments(indicator_parser)
    indicator_parser.add_argument(
        "-k", "--kind", default="rsi", help="Indicator kind (default: rsi)"
    )
    indicator_parser.add_argument("-p", "--period", type=int, help="Indicator period")
    indicator_parser.add_argument(
        "-n", "--last", type=int, default=10, help="Points to print (default: 10)"
    )

    # Score command
    score_parser = subparsers.add_parser("score", help="Composite score for a symbol")
    _add_data_arguments(score_parser)

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Scan and rank a universe")
    scan_parser.add_argument(
        "-c", "--config", required=True, help="Path to YAML configuration file"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command != "scan":
        configure_logging(args.log_level or "WARNING", args.json_logs)

    if args.command == "indicator":
        return cmd_indicator(args)
    elif args.command == "score":
        return cmd_score(args)
    elif args.command == "scan":
        return cmd_scan(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
