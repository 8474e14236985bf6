"""Per-realm leaderboards."""

from prediction_league.leaderboard.service import LeaderBoard, LeaderBoardAgent, LeaderBoardRanking

__all__ = ["LeaderBoard", "LeaderBoardAgent", "LeaderBoardRanking"]
