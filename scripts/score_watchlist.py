#!/usr/bin/env python3
"""
Watchlist Scoring Demo
======================

This script demonstrates the scoring workflow end to end. It fetches a year
of daily bars from Yahoo Finance for a small watchlist, scores every symbol
with the composite scorer, and prints a component breakdown next to the
SPY benchmark score.

What This Script Does
---------------------
1. **Data Fetching**: Downloads ~1 year of daily bars per symbol from Yahoo Finance
2. **Scoring**: Runs the four-component composite scorer:
   - Technical (RSI, MACD, moving averages, stochastic, %B)
   - Volume (relative volume, OBV trend, Chaikin Money Flow, MFI)
   - Price action (ROC, ATR, swing structure, Parabolic SAR)
   - Patterns (candlestick and chart patterns)
3. **Reporting**: Prints a ranked table plus signals, warnings and targets for
   the top symbol

Usage
-----
    python scripts/score_watchlist.py
    python scripts/score_watchlist.py NVDA AMD INTC

Expected Output
---------------
The script prints:
- Fetch confirmation with bar count per symbol
- Ranked component table
- Signals, warnings and targets for the top symbol
"""

import sys

from signalscore.data import SourceFetcher, YahooDataSource, trailing_date_range
from signalscore.exceptions import DataSourceError, DataValidationError
from signalscore.scoring import CompositeScorer
from signalscore.types import Score

WATCHLIST = ["AAPL", "MSFT", "NVDA", "AMZN", "JPM", "XOM"]
BENCHMARK = "SPY"


def _fmt_component(score: Score, name: str) -> str:
    component = dict(score.components.items())[name]
    if not component.available:
        return f"{'n/a':>8}"
    return f"{component.score:>+8.1f}"


def main(symbols: list[str]) -> None:
    """Score ``symbols`` and the benchmark, then print the comparison."""
    print("=" * 70)
    print("Watchlist Composite Scores")
    print("=" * 70)
    print()

    # -------------------------------------------------------------------------
    # Step 1: Fetch one year of daily bars per symbol
    # -------------------------------------------------------------------------
    date_range = trailing_date_range(365)
    fetch = SourceFetcher(YahooDataSource(), date_range, "1d")

    print(f"📅 Date Range: {date_range.start.date()} to {date_range.end.date()}")
    print(f"📈 Symbols:    {', '.join(symbols)} (benchmark {BENCHMARK})")
    print()
    print("🔄 Fetching data from Yahoo Finance...")

    scorer = CompositeScorer()
    scores: dict[str, Score] = {}
    for symbol in [*symbols, BENCHMARK]:
        try:
            series = fetch(symbol)
        except (DataSourceError, DataValidationError) as e:
            print(f"   ❌ {symbol}: {e}")
            continue
        print(f"   ✅ {symbol}: {len(series)} bars")
        scores[symbol] = scorer.score(series)
    print()

    if not scores:
        print("No data fetched - nothing to score.")
        return

    # -------------------------------------------------------------------------
    # Step 2: Ranked comparison table
    # -------------------------------------------------------------------------
    print("=" * 70)
    print("📊 RANKED SCORES")
    print("=" * 70)
    print(
        f"\n{'Symbol':<8} {'Score':>7} {'Signal':<12} {'Conf':>5} "
        f"{'Tech':>8} {'Volume':>8} {'Action':>8} {'Pattern':>8}"
    )
    print("-" * 70)

    ranked = sorted(scores.items(), key=lambda item: (-item[1].score, item[0]))
    for symbol, score in ranked:
        marker = " *" if symbol == BENCHMARK else ""
        print(
            f"{symbol + marker:<8} {score.score:>+7.1f} "
            f"{score.recommendation.value:<12} {score.confidence:>4.0f}% "
            f"{_fmt_component(score, 'technical')}"
            f"{_fmt_component(score, 'volume')}"
            f"{_fmt_component(score, 'price_action')}"
            f"{_fmt_component(score, 'patterns')}"
        )
    print("-" * 70)
    print("* benchmark")

    benchmark = scores.get(BENCHMARK)
    if benchmark is not None:
        ahead = [s for s, score in scores.items() if s != BENCHMARK and score.score > benchmark.score]
        print(f"\n📈 {len(ahead)} of {len(scores) - 1} symbols score above {BENCHMARK}")

    # -------------------------------------------------------------------------
    # Step 3: Detail for the top symbol
    # -------------------------------------------------------------------------
    top_symbol, top = next(
        ((s, score) for s, score in ranked if s != BENCHMARK), ranked[0]
    )
    print()
    print("=" * 70)
    print(f"🏆 TOP PICK: {top_symbol}")
    print("=" * 70)

    print(f"\n📋 Signals:")
    for signal in top.signals[:8]:
        print(f"   - {signal}")
    if len(top.signals) > 8:
        print(f"   ... and {len(top.signals) - 8} more")

    if top.warnings:
        print(f"\n⚠️  Warnings:")
        for warning in top.warnings:
            print(f"   - {warning}")

    if top.targets is not None:
        targets = top.targets
        print(f"\n🎯 Targets:")
        print(f"   Entry:     ${targets.entry:>10,.2f}")
        print(f"   Stop:      ${targets.stop_loss:>10,.2f}")
        print(f"   Target 1:  ${targets.target_1:>10,.2f}")
        print(f"   Target 2:  ${targets.target_2:>10,.2f}")

    print()
    print("=" * 70)
    print("✅ Scoring complete!")
    print("=" * 70)


if __name__ == "__main__":
    main([s.upper() for s in sys.argv[1:]] or WATCHLIST)
