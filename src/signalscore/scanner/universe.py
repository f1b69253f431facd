"""Symbol universes for scans."""

from __future__ import annotations

from typing import Iterable

from signalscore.types import Symbol

# Liquid US listings across sectors, used when no universe is configured
DEFAULT_UNIVERSE: tuple[str, ...] = (
    # Technology
    "AAPL", "MSFT", "GOOGL", "META", "NVDA", "AMD", "INTC", "PLTR", "UBER", "SNAP",
    # Semiconductors
    "TSM", "ASML", "QCOM", "AVGO", "TXN", "MU", "AMAT", "LRCX",
    # Software
    "CRM", "ORCL", "ADBE", "NOW", "SNOW", "DDOG", "NET", "CRWD",
    # Energy
    "XOM", "CVX", "BP", "COP", "OXY", "SLB", "HAL", "DVN",
    # Financials
    "JPM", "BAC", "WFC", "GS", "MS", "C", "USB", "PNC", "SOFI", "HOOD",
    # Healthcare
    "JNJ", "PFE", "ABBV", "MRK", "UNH", "CVS", "GILD", "VRTX", "AMGN", "REGN",
    # Consumer
    "WMT", "TGT", "HD", "LOW", "COST", "KO", "PEP", "MCD", "SBUX", "DIS",
    # Autos
    "TSLA", "F", "GM", "RIVN",
    # Travel
    "DAL", "AAL", "UAL", "LUV", "CCL", "RCL",
    # Retail
    "AMZN", "EBAY", "ETSY", "CHWY",
    # ADRs
    "BABA", "JD", "PDD", "BIDU",
    # REITs
    "SPG", "O", "PLD", "AMT", "EQIX",
    # ETFs
    "SPY", "QQQ",
)


def normalize_universe(symbols: Iterable[str]) -> list[Symbol]:
    """Strip, upper-case and de-duplicate symbols, keeping first-seen order.

    :param symbols: Raw ticker strings.
    :returns: Unique, non-empty symbols.
    """
    seen: set[str] = set()
    result: list[Symbol] = []
    for raw in symbols:
        symbol = str(raw).strip().upper()
        if symbol and symbol not in seen:
            seen.add(symbol)
            result.append(Symbol(symbol))
    return result


__all__ = ["DEFAULT_UNIVERSE", "normalize_universe"]
