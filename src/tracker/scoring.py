"""
Metric Scores

Pure scoring functions for tool metrics. Every score is an int in [0, 100].
"""

import math
from dataclasses import dataclass
from typing import Optional

NEUTRAL_TREND = 50
MAX_TREND_SWING = 50


@dataclass
class ViewCounts:
    """View events for a tool in the trailing 1/7/30 days."""
    daily: int = 0
    weekly: int = 0
    monthly: int = 0


def clamp_score(value: float) -> int:
    """Floor and clamp a value into [0, 100]."""
    return int(max(0, min(100, math.floor(value))))


def traffic_score(views: ViewCounts) -> int:
    """Weighted view windows, scaled down by 10."""
    score = views.daily * 10 + views.weekly * 2 + views.monthly * 0.5
    return clamp_score(min(100, score / 10))


def trend_score(current_weekly: int, previous_weekly: Optional[int]) -> int:
    """Week-over-week growth mapped onto 0-100 around 50.

    A 100% increase adds 25 points; the swing is capped at +/-50 (a 200% change).
    No previous snapshot gives the neutral 50.
    """
    if previous_weekly is None:
        return NEUTRAL_TREND

    previous = previous_weekly or 1
    change_pct = (current_weekly - previous) / previous * 100
    swing = max(-MAX_TREND_SWING, min(MAX_TREND_SWING, change_pct / 4))
    return clamp_score(NEUTRAL_TREND + swing)


def popularity_score(views: int, upvotes: int, github_stars: int,
                     traffic: int, trend: int) -> int:
    score = (
        views * 0.3
        + upvotes * 2
        + github_stars * 0.1
        + traffic * 0.5
        + trend * 0.3
    )
    return clamp_score(min(100, score / 5))
