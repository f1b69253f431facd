"""Position sizing for scan results.

Sizing turns an account size and risk level into a share count for a given
entry and stop. It never feeds back into score math.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from signalscore.types import PositionSuggestion, PriceTargets, RiskLevel

# Fraction of the account risked per trade
RISK_PERCENT_BY_LEVEL: dict[RiskLevel, float] = {
    RiskLevel.CONSERVATIVE: 0.01,
    RiskLevel.MODERATE: 0.02,
    RiskLevel.AGGRESSIVE: 0.03,
}


class PositionSizer(ABC):
    """Abstract base class for position sizing strategies."""

    @abstractmethod
    def calculate_shares(self, account_size: float, entry: float, stop_loss: float) -> int:
        """Calculate whole shares to buy.

        :param account_size: Account value in currency.
        :param entry: Planned entry price.
        :param stop_loss: Planned stop price.
        :returns: Number of shares (0 if the trade should be skipped).
        """

    def suggest(self, account_size: float, targets: PriceTargets) -> PositionSuggestion:
        """Build a position suggestion for the given price targets."""
        shares = self.calculate_shares(account_size, targets.entry, targets.stop_loss)
        risk_amount = shares * max(targets.entry - targets.stop_loss, 0.0)
        return PositionSuggestion(
            shares=shares,
            position_value=round(shares * targets.entry, 2),
            risk_amount=round(risk_amount, 2),
            risk_percent=risk_amount / account_size if account_size > 0 else 0.0,
        )


class RiskPercentSizer(PositionSizer):
    """Size positions so that hitting the stop loses a fixed share of the account.

    Shares = (account * risk%) / (entry - stop), capped so the position never
    costs more than the whole account.

    :param risk_percent: Fraction of the account to risk (0.02 = 2%).
    """

    def __init__(self, risk_percent: float = 0.02) -> None:
        self.risk_percent = risk_percent

    @classmethod
    def for_risk_level(cls, risk_level: RiskLevel) -> RiskPercentSizer:
        return cls(RISK_PERCENT_BY_LEVEL[risk_level])

    def calculate_shares(self, account_size: float, entry: float, stop_loss: float) -> int:
        risk_per_share = entry - stop_loss
        if entry <= 0 or risk_per_share <= 0 or account_size <= 0:
            return 0
        max_risk = account_size * self.risk_percent
        shares = math.floor(max_risk / risk_per_share)
        affordable = math.floor(account_size / entry)
        return max(0, min(shares, affordable))


__all__ = ["PositionSizer", "RiskPercentSizer", "RISK_PERCENT_BY_LEVEL"]
