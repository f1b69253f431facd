"""Scan a universe of symbols and rank them by composite score.

Fetches run on a bounded thread pool; each one first takes a token from an
optional :class:`RateLimiter`. A fetch that fails or runs longer than the
per-call timeout skips its symbol without aborting the scan; fetches still
queued behind busy workers are not charged. Setting the ``cancel``
event stops the scan: pending fetches are dropped and whatever was scored so
far is returned with ``cancelled=True``.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from concurrent.futures import wait
from functools import partial
from typing import Callable, Iterable

from signalscore.exceptions import DataSourceError, DataValidationError
from signalscore.scanner.rate_limit import RateLimiter
from signalscore.scanner.sizing import PositionSizer, RiskPercentSizer
from signalscore.scanner.universe import normalize_universe
from signalscore.scoring.composite import CompositeScorer
from signalscore.types import (
    OHLCVSeries,
    ScanParams,
    ScanReport,
    ScanResult,
    Score,
    Symbol,
)

AVERAGE_VOLUME_BARS = 20

# How often a blocked wait re-checks the cancel event, in seconds
_POLL_INTERVAL = 0.1

SeriesFetcher = Callable[[Symbol], OHLCVSeries]
Scorer = Callable[[OHLCVSeries], Score]


class _Cancelled(Exception):
    """Internal signal that the scan was cancelled while waiting."""


class Scanner:
    """Apply a scorer across a symbol universe.

    :param fetch: Market-data adapter returning a validated series for a
        symbol; should raise :class:`DataSourceError` on failure.
    :param scorer: Callable producing a :class:`Score` (default: a
        :class:`CompositeScorer` with default weights).
    :param rate_limiter: Shared limiter for fetches; when None, one is built
        from ``ScanParams.calls_per_second`` if that is set.
    :param logger: Logger for skip/progress messages.
    """

    def __init__(
        self,
        fetch: SeriesFetcher,
        scorer: Scorer | None = None,
        rate_limiter: RateLimiter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetch = fetch
        self.scorer = scorer or CompositeScorer()
        self.rate_limiter = rate_limiter
        self.logger = logger or logging.getLogger(__name__)

    def scan(
        self,
        universe: Iterable[str],
        params: ScanParams | None = None,
        cancel: threading.Event | None = None,
    ) -> ScanReport:
        """Fetch, filter, score and rank every symbol in ``universe``.

        :param universe: Ticker strings; duplicates are scanned once.
        :param params: Filters, limits and sizing inputs.
        :param cancel: Event that aborts the remaining work when set.
        :returns: Ranked results with skip/filter counts.
        """
        params = params or ScanParams()
        cancel = cancel or threading.Event()
        symbols = normalize_universe(universe)
        limiter = self.rate_limiter
        if limiter is None and params.calls_per_second is not None:
            limiter = RateLimiter(
                params.calls_per_second, burst_size=params.max_workers, name="scan"
            )
        sizer = RiskPercentSizer.for_risk_level(params.risk_level)

        self.logger.info(
            "Scanning %d symbols (workers=%d, min_score=%.1f)",
            len(symbols),
            params.max_workers,
            params.min_score,
        )

        def task(symbol: Symbol) -> OHLCVSeries:
            if cancel.is_set():
                raise _Cancelled()
            if limiter is not None and not limiter.acquire(params.fetch_timeout, cancel):
                if cancel.is_set():
                    raise _Cancelled()
                raise DataSourceError(f"Rate limit wait exceeded for {symbol}")
            started[symbol] = time.monotonic()
            return self.fetch(symbol)

        # symbol -> monotonic time its fetch began; queued symbols are absent
        started: dict[Symbol, float] = {}
        results: list[ScanResult] = []
        skipped: list[Symbol] = []
        filtered = 0
        cancelled = False

        executor = ThreadPoolExecutor(
            max_workers=params.max_workers, thread_name_prefix="signalscore-scan"
        )
        try:
            futures = [(symbol, executor.submit(task, symbol)) for symbol in symbols]
            for symbol, future in futures:
                try:
                    series = self._await(
                        future, partial(started.get, symbol), params.fetch_timeout, cancel
                    )
                except _Cancelled:
                    cancelled = True
                    break
                except FuturesTimeoutError:
                    self.logger.warning(
                        "Skipping %s: fetch timed out after %.1fs",
                        symbol,
                        params.fetch_timeout,
                        extra={"symbol": symbol, "reason": "timeout"},
                    )
                    skipped.append(symbol)
                    continue
                except (DataSourceError, DataValidationError) as e:
                    self.logger.warning(
                        "Skipping %s: %s", symbol, e, extra={"symbol": symbol, "reason": "data"}
                    )
                    skipped.append(symbol)
                    continue
                except Exception as e:
                    self.logger.warning(
                        "Skipping %s: unexpected fetch error: %s",
                        symbol,
                        e,
                        exc_info=True,
                        extra={"symbol": symbol, "reason": "error"},
                    )
                    skipped.append(symbol)
                    continue

                if series.is_empty:
                    self.logger.warning(
                        "Skipping %s: no bars returned",
                        symbol,
                        extra={"symbol": symbol, "reason": "data"},
                    )
                    skipped.append(symbol)
                    continue

                if not self._passes_filters(series, params):
                    self.logger.debug("Filtered %s by price/volume", symbol)
                    filtered += 1
                    continue

                result = self._score(symbol, series, params, sizer)
                if result is not None:
                    results.append(result)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        results.sort(key=lambda r: (-r.score, r.symbol))
        report = ScanReport(
            results=results[: params.top_n],
            scanned=len(symbols),
            skipped=len(skipped),
            skipped_symbols=skipped,
            filtered=filtered,
            cancelled=cancelled,
        )
        self.logger.info(
            "Scan finished: %d results, %d skipped, %d filtered%s",
            len(report.results),
            report.skipped,
            report.filtered,
            " (cancelled)" if cancelled else "",
        )
        return report

    @staticmethod
    def _await(
        future: Future[OHLCVSeries],
        started_at: Callable[[], float | None],
        timeout: float,
        cancel: threading.Event,
    ) -> OHLCVSeries:
        """Wait for ``future``, watching ``cancel``.

        The ``timeout`` is charged from the moment the fetch began running, as
        reported by ``started_at``. A fetch still queued behind busy workers
        is never timed out.
        """
        while not future.done():
            if cancel.is_set():
                raise _Cancelled()
            step = _POLL_INTERVAL
            start = started_at()
            if start is not None:
                remaining = start + timeout - time.monotonic()
                if remaining <= 0:
                    raise FuturesTimeoutError()
                step = min(step, remaining)
            wait([future], timeout=step)
        if cancel.is_set():
            raise _Cancelled()
        return future.result()

    @staticmethod
    def _passes_filters(series: OHLCVSeries, params: ScanParams) -> bool:
        price = series.bars[-1].close
        if price < params.min_price:
            return False
        if params.max_price is not None and price > params.max_price:
            return False
        if params.min_volume > 0:
            average_volume = float(series.volumes()[-AVERAGE_VOLUME_BARS:].mean())
            if average_volume < params.min_volume:
                return False
        return True

    def _score(
        self,
        symbol: Symbol,
        series: OHLCVSeries,
        params: ScanParams,
        sizer: PositionSizer,
    ) -> ScanResult | None:
        score = self.scorer(series)
        if score.score < params.min_score:
            return None
        position = (
            sizer.suggest(params.account_size, score.targets)
            if score.targets is not None
            else None
        )
        return ScanResult(
            symbol=symbol,
            score=score.score,
            recommendation=score.recommendation,
            confidence=score.confidence,
            price=series.bars[-1].close,
            signals=score.signals,
            warnings=score.warnings,
            targets=score.targets,
            position=position,
        )


def scan(
    universe: Iterable[str],
    fetch: SeriesFetcher,
    params: ScanParams | None = None,
    cancel: threading.Event | None = None,
) -> ScanReport:
    """Run a one-off scan with the default composite scorer."""
    return Scanner(fetch).scan(universe, params, cancel)


__all__ = ["Scanner", "SeriesFetcher", "Scorer", "scan"]
