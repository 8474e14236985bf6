"""football-data.org v2 standings provider."""

import logging
from typing import Optional

import httpx

from prediction_league.errors import TransientError, UnknownTeamError, ValidationError
from prediction_league.etl.base import FootballDataSource, StandingsData
from prediction_league.scoring import RankingMeta, RankingWithMeta
from prediction_league.seasons import Season
from prediction_league.teams import TeamCollection

logger = logging.getLogger(__name__)

STANDINGS_TYPE_TOTAL = "TOTAL"


class FootballDataOrgProvider(FootballDataSource):
    """Standings provider backed by api.football-data.org."""

    def __init__(
        self,
        api_token: str,
        teams: TeamCollection,
        base_url: str = "https://api.football-data.org",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.teams = teams
        self.BASE_URL = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            headers={"X-Auth-Token": api_token},
            timeout=timeout,
            transport=transport,
        )

    async def retrieve_latest(self, season: Season) -> StandingsData:
        if not season.client_id:
            raise ValidationError([f"season {season.id} has no upstream identifier"], fields=["client_id"])

        url = f"{self.BASE_URL}/v2/competitions/{season.client_id}/standings"
        params = {"season": season.live.start.year}

        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransientError(f"football-data.org timeout: {e}") from e
        except httpx.HTTPStatusError as e:
            raise TransientError(f"football-data.org returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise TransientError(f"football-data.org request failed: {e}") from e

        return self._parse_standings(season, response.json())

    def _parse_standings(self, season: Season, payload: dict) -> StandingsData:
        round_number = (payload.get("season") or {}).get("currentMatchday")
        if not round_number:
            raise TransientError("football-data.org response has no current matchday")

        table = None
        for standings in payload.get("standings") or []:
            if standings.get("type") == STANDINGS_TYPE_TOTAL:
                table = standings.get("table") or []
                break
        if table is None:
            raise TransientError(f"football-data.org response has no {STANDINGS_TYPE_TOTAL} table")

        rankings = []
        for row in table:
            client_team_id = (row.get("team") or {}).get("id")
            team = self.teams.get_by_client_id(client_team_id)
            if team is None:
                raise UnknownTeamError(client_team_id)
            rankings.append(
                RankingWithMeta(
                    id=team.id,
                    position=int(row["position"]),
                    meta=RankingMeta(
                        played_games=int(row.get("playedGames", 0)),
                        points=int(row.get("points", 0)),
                        goals_for=int(row.get("goalsFor", 0)),
                        goals_against=int(row.get("goalsAgainst", 0)),
                        goal_difference=int(row.get("goalDifference", 0)),
                    ),
                )
            )

        logger.debug(f"[FOOTBALL_DATA] {season.id}: matchday {round_number}, {len(rankings)} teams")
        return StandingsData(season_id=season.id, round_number=int(round_number), rankings=rankings)

    async def close(self) -> None:
        await self.client.aclose()
