"""Upstream standings sources."""

from prediction_league.etl.base import FootballDataSource, StandingsData
from prediction_league.etl.football_data_org import FootballDataOrgProvider

__all__ = ["FootballDataOrgProvider", "FootballDataSource", "StandingsData"]
