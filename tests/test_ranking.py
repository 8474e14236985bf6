"""Tests for the ranking algebra and round results."""

import random

import pytest

from prediction_league.errors import MismatchedRankingsError
from prediction_league.models import EntryPrediction, Standings
from prediction_league.scoring import BASE_SCORE, calculate_hit, calculate_ranking_scores, total_hit
from prediction_league.scoring.results import (
    MODIFIER_BASE_SCORE,
    MODIFIER_RANKINGS_HIT,
    generate_scored_entry_prediction,
    new_round_result,
)

from conftest import TEAM_IDS, make_rankings


def _hits(predicted, actual_order):
    return total_hit(calculate_ranking_scores(predicted, make_rankings(actual_order)))


class TestCalculateRankingScores:
    """Per-team hits between predicted and actual tables."""

    def test_identical_rankings_score_zero(self):
        """A perfect prediction has no hits."""
        scores = calculate_ranking_scores(TEAM_IDS, make_rankings(TEAM_IDS))
        assert [s.score for s in scores] == [0] * 20
        assert [s.position for s in scores] == list(range(1, 21))

    def test_swapped_pair(self):
        """Swapping the top two costs one hit each."""
        actual = ["B", "A"] + TEAM_IDS[2:]
        scores = calculate_ranking_scores(TEAM_IDS, make_rankings(actual))
        assert [s.score for s in scores] == [1, 1] + [0] * 18
        assert total_hit(scores) == 2

    def test_hit_is_absolute_difference(self):
        assert calculate_hit(1, 20) == 19
        assert calculate_hit(20, 1) == 19

    def test_length_mismatch_raises(self):
        with pytest.raises(MismatchedRankingsError):
            calculate_ranking_scores(TEAM_IDS[:19], make_rankings(TEAM_IDS))

    def test_different_team_sets_raise(self):
        predicted = TEAM_IDS[:19] + ["Z"]
        with pytest.raises(MismatchedRankingsError):
            calculate_ranking_scores(predicted, make_rankings(TEAM_IDS))

    def test_duplicate_prediction_raises(self):
        predicted = TEAM_IDS[:19] + ["A"]
        with pytest.raises(MismatchedRankingsError):
            calculate_ranking_scores(predicted, make_rankings(TEAM_IDS))


class TestScoreProperties:
    """Symmetry and bounds over shuffled tables."""

    def test_total_hit_is_symmetric(self):
        rng = random.Random(20200912)
        for _ in range(50):
            p = TEAM_IDS[:]
            a = TEAM_IDS[:]
            rng.shuffle(p)
            rng.shuffle(a)
            assert _hits(p, a) == _hits(a, p)

    def test_total_hit_bounds(self):
        rng = random.Random(38)
        n = len(TEAM_IDS)
        for _ in range(50):
            p = TEAM_IDS[:]
            rng.shuffle(p)
            hits = _hits(p, TEAM_IDS)
            assert 0 <= hits <= n * (n - 1)

    def test_reversed_table_is_worst_case(self):
        hits = _hits(list(reversed(TEAM_IDS)), TEAM_IDS)
        assert hits == 200  # n^2 / 2 for n = 20


class TestRoundResult:
    """Modifier chain producing a round score."""

    def test_modifiers_recorded_in_order(self):
        actual = ["B", "A"] + TEAM_IDS[2:]
        result = new_round_result(TEAM_IDS, make_rankings(actual))
        assert result.score == BASE_SCORE - 2
        assert [(m.code, m.value) for m in result.modifiers] == [
            (MODIFIER_BASE_SCORE, 100),
            (MODIFIER_RANKINGS_HIT, -2),
        ]

    def test_generate_scored_entry_prediction(self):
        prediction = EntryPrediction(entry_id="e1", rankings=TEAM_IDS)
        standings = Standings(season_id="S", round_number=1)
        standings.set_ranking_items(make_rankings(["B", "A"] + TEAM_IDS[2:]))

        scored = generate_scored_entry_prediction(prediction, standings)

        assert scored.entry_prediction_id == prediction.id
        assert scored.standings_id == standings.id
        assert scored.score == 98
        assert [r["score"] for r in scored.rankings][:3] == [1, 1, 0]
