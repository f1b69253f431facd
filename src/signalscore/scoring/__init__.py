"""Composite signal scoring: components, patterns, targets and aggregation."""

from signalscore.scoring.components import (
    patterns_component,
    price_action_component,
    technical_component,
    volume_component,
)
from signalscore.scoring.composite import (
    CompositeScorer,
    combine,
    recommendation_for,
    score_series,
)
from signalscore.scoring.patterns import detect_patterns, detect_support_resistance
from signalscore.scoring.targets import calculate_price_targets, generate_warnings

__all__ = [
    "CompositeScorer",
    "combine",
    "recommendation_for",
    "score_series",
    "technical_component",
    "volume_component",
    "price_action_component",
    "patterns_component",
    "detect_patterns",
    "detect_support_resistance",
    "calculate_price_targets",
    "generate_warnings",
]
