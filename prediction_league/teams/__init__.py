"""Team reference data."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from prediction_league.errors import NotFoundError


@dataclass(frozen=True)
class Team:
    """A club known to the league, with its upstream identifier."""

    id: str
    name: str
    short_name: str
    client_id: int


@dataclass
class TeamCollection:
    """Read-only lookup of configured teams by short code or upstream ID."""

    teams: dict = field(default_factory=dict)

    @classmethod
    def from_teams(cls, teams: Iterable[Team]) -> "TeamCollection":
        return cls(teams={t.id: t for t in teams})

    def get_by_id(self, team_id: str) -> Team:
        team = self.teams.get(team_id)
        if team is None:
            raise NotFoundError(f"team not found: {team_id}")
        return team

    def get_by_client_id(self, client_id: int) -> Optional[Team]:
        for team in self.teams.values():
            if team.client_id == client_id:
                return team
        return None

    def __contains__(self, team_id: str) -> bool:
        return team_id in self.teams

    def __len__(self) -> int:
        return len(self.teams)


__all__ = ["Team", "TeamCollection"]
