"""Utility functions for recommendation system.

Score presentation and option clamping shared by the engine entry points.
"""

from typing import Optional

# Scores are presented with this many decimals at every entry point
SCORE_DECIMALS = 4

# Result size limits
DEFAULT_LIMIT = 5
MIN_LIMIT = 1
MAX_LIMIT = 50


def round_score(score: float) -> float:
    """Round a score for presentation."""
    return round(float(score), SCORE_DECIMALS)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def clamp_limit(limit: Optional[int], default: int = DEFAULT_LIMIT) -> int:
    """Clamp a requested result size to [MIN_LIMIT, MAX_LIMIT]."""
    if limit is None:
        return default
    return int(clamp(int(limit), MIN_LIMIT, MAX_LIMIT))
