"""Ranking algebra: compare predicted and actual league tables."""

from dataclasses import asdict, dataclass, field
from typing import Iterable, Sequence

from prediction_league.errors import MismatchedRankingsError

BASE_SCORE = 100


@dataclass
class RankingMeta:
    """Per-team table figures reported upstream."""

    played_games: int = 0
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0


@dataclass
class RankingWithMeta:
    id: str
    position: int
    meta: RankingMeta = field(default_factory=RankingMeta)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RankingWithMeta":
        return cls(
            id=data["id"],
            position=int(data["position"]),
            meta=RankingMeta(**(data.get("meta") or {})),
        )


@dataclass
class RankingWithScore:
    """A predicted team, its predicted position and the hit against actual."""

    id: str
    position: int
    score: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RankingWithScore":
        return cls(id=data["id"], position=int(data["position"]), score=int(data["score"]))


def calculate_hit(predicted_position: int, actual_position: int) -> int:
    return abs(predicted_position - actual_position)


def total_hit(scores: Iterable[RankingWithScore]) -> int:
    return sum(r.score for r in scores)


def sort_by_position(rankings: Sequence[RankingWithMeta]) -> list[RankingWithMeta]:
    return sorted(rankings, key=lambda r: r.position)


def calculate_ranking_scores(
    predicted_ids: Sequence[str],
    actual: Sequence[RankingWithMeta],
) -> list[RankingWithScore]:
    """
    Score each predicted team against the actual table.

    Args:
        predicted_ids: Team IDs in predicted order (position = index + 1).
        actual: Actual rankings with their reported positions.

    Returns:
        One RankingWithScore per predicted team, in predicted order, whose
        ``score`` is the absolute positional difference ("hit").

    Raises:
        MismatchedRankingsError: if the inputs are not permutations of the
        same team set.
    """
    if len(predicted_ids) != len(actual):
        raise MismatchedRankingsError(
            f"ranking lengths differ: predicted={len(predicted_ids)} actual={len(actual)}"
        )
    if len(set(predicted_ids)) != len(predicted_ids):
        raise MismatchedRankingsError("predicted rankings contain duplicate team IDs")

    actual_positions: dict[str, int] = {}
    for ranking in actual:
        if ranking.id in actual_positions:
            raise MismatchedRankingsError(f"actual rankings contain duplicate team ID {ranking.id}")
        actual_positions[ranking.id] = ranking.position

    missing = [team_id for team_id in predicted_ids if team_id not in actual_positions]
    if missing:
        raise MismatchedRankingsError(f"team IDs missing from actual rankings: {', '.join(missing)}")

    return [
        RankingWithScore(
            id=team_id,
            position=idx,
            score=calculate_hit(idx, actual_positions[team_id]),
        )
        for idx, team_id in enumerate(predicted_ids, start=1)
    ]
