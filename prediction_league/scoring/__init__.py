"""Prediction scoring.

Round results (``prediction_league.scoring.results``) depend on the table
models and are imported from their module directly.
"""

from prediction_league.scoring.ranking import (
    BASE_SCORE,
    RankingMeta,
    RankingWithMeta,
    RankingWithScore,
    calculate_hit,
    calculate_ranking_scores,
    sort_by_position,
    total_hit,
)

__all__ = [
    "BASE_SCORE",
    "RankingMeta",
    "RankingWithMeta",
    "RankingWithScore",
    "calculate_hit",
    "calculate_ranking_scores",
    "sort_by_position",
    "total_hit",
]
