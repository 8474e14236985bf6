"""Async repositories over the league tables."""

from prediction_league.repositories.entry import EntryRepository
from prediction_league.repositories.entry_prediction import EntryPredictionRepository
from prediction_league.repositories.scored_entry_prediction import ScoredEntryPredictionRepository, ScoreRow
from prediction_league.repositories.standings import StandingsRepository
from prediction_league.repositories.token import TokenRepository

__all__ = [
    "EntryPredictionRepository",
    "EntryRepository",
    "ScoreRow",
    "ScoredEntryPredictionRepository",
    "StandingsRepository",
    "TokenRepository",
]
