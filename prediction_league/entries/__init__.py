"""Entry and prediction access for the scoring pipeline."""

from prediction_league.entries.service import EntryAgent

__all__ = ["EntryAgent"]
