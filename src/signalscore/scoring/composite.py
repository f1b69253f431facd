"""Weighted aggregation of component scores into one directional verdict.

The composite score is the weighted sum of the available component scores,
clamped to [-100, 100]. A component without enough history is excluded and
the remaining weights are renormalized to sum to 1; it is never counted as a
zero score.

Confidence measures agreement, not certainty:

    confidence = clamp(100 - pstdev(available scores), 0, 100) * share

where ``share`` is the fraction of configured weight that was available.

Recommendation thresholds are symmetric around zero:

    score >= 60   STRONG_BUY
    score >= 20   BUY
    score > -20   HOLD
    score > -60   SELL
    otherwise     STRONG_SELL
"""

from __future__ import annotations

import logging
import statistics
from typing import Callable

from signalscore.scoring.components import (
    patterns_component,
    price_action_component,
    technical_component,
    volume_component,
)
from signalscore.scoring.patterns import detect_patterns
from signalscore.scoring.targets import calculate_price_targets, generate_warnings
from signalscore.types import (
    ComponentScore,
    OHLCVSeries,
    Recommendation,
    Score,
    ScoreComponents,
    ScoringWeights,
)

logger = logging.getLogger(__name__)

STRONG_THRESHOLD = 60.0
THRESHOLD = 20.0


def recommendation_for(score: float) -> Recommendation:
    """Map a score in [-100, 100] to its recommendation label."""
    if score >= STRONG_THRESHOLD:
        return Recommendation.STRONG_BUY
    if score >= THRESHOLD:
        return Recommendation.BUY
    if score > -THRESHOLD:
        return Recommendation.HOLD
    if score > -STRONG_THRESHOLD:
        return Recommendation.SELL
    return Recommendation.STRONG_SELL


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def combine(
    components: dict[str, ComponentScore],
    weights: ScoringWeights,
) -> tuple[float, float, dict[str, ComponentScore], list[str]]:
    """Weight component scores into ``(score, confidence, components, notes)``.

    :param components: Raw component scores keyed by component name.
    :param weights: Configured weights.
    :returns: Clamped score, confidence, components carrying their effective
        weights, and notes about excluded components.
    """
    configured = weights.as_dict()
    notes: list[str] = []
    for name, component in components.items():
        if not component.available:
            notes.append(f"{name} excluded: insufficient history")

    available_weight = sum(
        configured[name] for name, c in components.items() if c.available
    )
    if available_weight <= 0:
        zeroed = {
            name: c.model_copy(update={"weight": 0.0}) for name, c in components.items()
        }
        notes.append("No component could be evaluated")
        return 0.0, 0.0, zeroed, notes

    effective: dict[str, ComponentScore] = {}
    for name, component in components.items():
        weight = configured[name] / available_weight if component.available else 0.0
        effective[name] = component.model_copy(update={"weight": weight})

    score = _clamp(sum(c.score * c.weight for c in effective.values()), -100.0, 100.0)

    present = [c.score for c in effective.values() if c.available and c.weight > 0]
    spread = statistics.pstdev(present) if len(present) > 1 else 0.0
    confidence = _clamp(100.0 - spread, 0.0, 100.0) * available_weight
    return score, _clamp(confidence, 0.0, 100.0), effective, notes


ComponentFn = Callable[[OHLCVSeries], ComponentScore]


class CompositeScorer:
    """Score a series from its technical, volume, price-action and pattern components.

    The scorer holds only its weights; :meth:`score` is a pure function of the
    input series, so one instance can be shared across threads.

    :param weights: Component weights (defaults: 0.35 / 0.25 / 0.25 / 0.15).
    :param include_targets: Whether to attach price targets to each score.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        include_targets: bool = True,
    ) -> None:
        self.weights = weights or ScoringWeights()
        self.include_targets = include_targets

    def score(self, series: OHLCVSeries) -> Score:
        """Compute the composite score for ``series``.

        :param series: Validated OHLCV input.
        :returns: Score with components, confidence, recommendation and notes.
        """
        patterns = detect_patterns(series) if len(series) else []
        raw = {
            "technical": technical_component(series),
            "volume": volume_component(series),
            "price_action": price_action_component(series),
            "patterns": patterns_component(series, patterns),
        }
        score, confidence, components, notes = combine(raw, self.weights)

        signals: list[str] = []
        for component in components.values():
            signals.extend(component.signals)
        signals.extend(notes)

        bar = series.last()
        result = Score(
            symbol=series.symbol,
            timestamp=bar.timestamp if bar is not None else None,
            score=score,
            components=ScoreComponents(**components),
            confidence=confidence,
            recommendation=recommendation_for(score),
            signals=signals,
            warnings=generate_warnings(series),
            patterns=patterns,
            targets=calculate_price_targets(series) if self.include_targets else None,
        )
        logger.debug(
            "Scored %s: %.1f (%s, confidence %.0f)",
            series.symbol or "series",
            result.score,
            result.recommendation.value,
            result.confidence,
        )
        return result

    __call__ = score


def score_series(series: OHLCVSeries, weights: ScoringWeights | None = None) -> Score:
    """Score ``series`` with a one-off :class:`CompositeScorer`."""
    return CompositeScorer(weights).score(series)


__all__ = [
    "CompositeScorer",
    "combine",
    "recommendation_for",
    "score_series",
]
