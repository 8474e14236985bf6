"""Abstract base class for upstream standings sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from prediction_league.scoring import RankingWithMeta
from prediction_league.seasons import Season


@dataclass
class StandingsData:
    """Data transfer object for an upstream league table."""

    season_id: str
    round_number: int
    rankings: list[RankingWithMeta] = field(default_factory=list)


class FootballDataSource(ABC):
    """Abstract base class for football standings providers."""

    @abstractmethod
    async def retrieve_latest(self, season: Season) -> StandingsData:
        """
        Fetch the current league table for a season.

        Args:
            season: The season to query; its ``client_id`` names the upstream competition.

        Returns:
            StandingsData with rankings keyed by league team ID.
        """
        pass

    async def close(self) -> None:
        pass
