"""Error kinds raised across the league core.

Scheduled jobs log these and carry on; the HTTP layer maps them to status
codes (see ``prediction_league.server``).
"""

from typing import Iterable, Optional


class LeagueError(Exception):
    """Base class for all league errors."""


class NotFoundError(LeagueError):
    """Entity missing by key."""


class SeasonNotFoundError(NotFoundError):
    def __init__(self, season_id: str):
        super().__init__(f"season not found: {season_id}")
        self.season_id = season_id


class StandingsNotFoundError(NotFoundError):
    def __init__(self, season_id: str, round_number: int):
        super().__init__(f"standings not found: season={season_id} round={round_number}")
        self.season_id = season_id
        self.round_number = round_number


class ConflictError(LeagueError):
    """Uniqueness violation or an operation the current state rejects."""


class ValidationError(LeagueError):
    """Input fails constraints."""

    def __init__(self, reasons: Iterable[str], fields: Optional[Iterable[str]] = None):
        self.reasons = list(reasons)
        self.fields = list(fields or [])
        super().__init__("; ".join(self.reasons) or "validation failed")


class UnauthorizedError(LeagueError):
    """Credential or token invalid."""


class MismatchedRankingsError(LeagueError):
    """Two rankings disagree on their team set."""


class UnknownTeamError(LeagueError):
    """Upstream snapshot references a team outside the configured set."""

    def __init__(self, team_id):
        super().__init__(f"unknown team: {team_id}")
        self.team_id = team_id


class TransientError(LeagueError):
    """I/O failure, upstream 5xx or timeout; the next run retries."""


class MultiError(LeagueError):
    """Aggregate of failures collected during a fan-out."""

    def __init__(self, errors: Iterable[BaseException]):
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} error(s): " + "; ".join(str(e) for e in self.errors))

    def __len__(self) -> int:
        return len(self.errors)
