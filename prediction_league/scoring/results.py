"""Round results built from an ordered chain of score modifiers.

Each modifier adjusts the running score and records a ``ModifierSummary`` so
a stored score can be explained after the fact.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from prediction_league.clock import utc_now
from prediction_league.models import EntryPrediction, ScoredEntryPrediction, Standings
from prediction_league.scoring.ranking import (
    BASE_SCORE,
    RankingWithMeta,
    RankingWithScore,
    calculate_ranking_scores,
    total_hit,
)

MODIFIER_BASE_SCORE = "BASE_SCORE"
MODIFIER_RANKINGS_HIT = "RANKINGS_HIT"


@dataclass
class ModifierSummary:
    code: str
    value: int


@dataclass
class RoundResult:
    """Score of one prediction against one standings snapshot."""

    rankings: list[RankingWithScore] = field(default_factory=list)
    score: int = 0
    modifiers: list[ModifierSummary] = field(default_factory=list)


Modifier = Callable[[RoundResult, Sequence[str], Sequence[RankingWithMeta]], None]


def base_score_modifier(base: int = BASE_SCORE) -> Modifier:
    def apply(result: RoundResult, predicted: Sequence[str], actual: Sequence[RankingWithMeta]) -> None:
        result.score += base
        result.modifiers.append(ModifierSummary(MODIFIER_BASE_SCORE, base))

    return apply


def rankings_hit_modifier() -> Modifier:
    def apply(result: RoundResult, predicted: Sequence[str], actual: Sequence[RankingWithMeta]) -> None:
        result.rankings = calculate_ranking_scores(predicted, actual)
        hits = total_hit(result.rankings)
        result.score -= hits
        result.modifiers.append(ModifierSummary(MODIFIER_RANKINGS_HIT, -hits))

    return apply


DEFAULT_MODIFIERS = (base_score_modifier(), rankings_hit_modifier())


def new_round_result(
    predicted: Sequence[str],
    actual: Sequence[RankingWithMeta],
    modifiers: Sequence[Modifier] = DEFAULT_MODIFIERS,
) -> RoundResult:
    result = RoundResult()
    for modifier in modifiers:
        modifier(result, predicted, actual)
    return result


def generate_scored_entry_prediction(
    prediction: EntryPrediction,
    standings: Standings,
    now: Optional[datetime] = None,
) -> ScoredEntryPrediction:
    """Score ``prediction`` against ``standings`` (raises MismatchedRankingsError)."""
    result = new_round_result(prediction.rankings, standings.ranking_items())
    ts = now or utc_now()
    return ScoredEntryPrediction(
        entry_prediction_id=prediction.id,
        standings_id=standings.id,
        rankings=[r.to_dict() for r in result.rankings],
        score=result.score,
        created_at=ts,
        updated_at=None,
    )
