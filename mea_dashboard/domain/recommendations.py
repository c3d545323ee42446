"""
Threshold policy turning a domain score into advisory text.

Tiers are half-open intervals ``[lower_bound, next_lower_bound)`` kept in one
ordered table and resolved by binary search over the lower bounds.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RecommendationTier:
    lower_bound: float
    label: str
    advice: str


RECOMMENDATION_TIERS: tuple[RecommendationTier, ...] = (
    RecommendationTier(
        float("-inf"),
        "Urgent: basic implementation and process logging",
        "Focus on basic implementation and on recording the process. "
        "Define initial performance metrics.",
    ),
    RecommendationTier(
        2.0,
        "Priority: standardize existing processes",
        "Make sure processes are managed and monitored, and that their outcomes are controlled.",
    ),
    RecommendationTier(
        3.0,
        "Improvement: apply well-defined, measured processes",
        "Use data to manage the processes.",
    ),
    RecommendationTier(
        4.0,
        "Optimization: focus on predictability and continuous improvement",
        "Predict process performance and drive continuous improvement proactively.",
    ),
    RecommendationTier(
        5.0,
        "Excellent: sustain and innovate",
        "Sustain current performance and keep innovating on the processes.",
    ),
)

_LOWER_BOUNDS: tuple[float, ...] = tuple(t.lower_bound for t in RECOMMENDATION_TIERS[1:])


def tier_for(score: float) -> RecommendationTier:
    """First tier whose interval contains ``score``; total over all floats."""
    if math.isnan(score):
        return RECOMMENDATION_TIERS[0]
    return RECOMMENDATION_TIERS[bisect_right(_LOWER_BOUNDS, score)]


def recommend(score: float, domain_label: str) -> str:
    """
    Advisory text for one domain.

    Example:
        >>> recommend(2.0, "MEA01")
        '[MEA01] Priority: standardize existing processes. Make sure processes ...'
    """
    tier = tier_for(score)
    return f"[{domain_label}] {tier.label}. {tier.advice}"
