"""Reference data: teams and seasons known to the league.

Built once at startup and passed by reference; never mutated afterwards.
"""

from datetime import datetime, timedelta

from prediction_league.clock import local_datetime
from prediction_league.seasons import Season, SeasonCollection, TimeFrame
from prediction_league.teams import Team, TeamCollection

LEAGUE_TZ = "Europe/London"
FAKE_SEASON_ID = "FakeSeason"

# football-data.org team IDs
_TEAMS = [
    Team("AFC", "Arsenal", "Arsenal", 57),
    Team("AVFC", "Aston Villa", "Aston Villa", 58),
    Team("BHAFC", "Brighton & Hove Albion", "Brighton", 397),
    Team("BFC", "Burnley", "Burnley", 328),
    Team("CFC", "Chelsea", "Chelsea", 61),
    Team("CPFC", "Crystal Palace", "Crystal Palace", 354),
    Team("EFC", "Everton", "Everton", 62),
    Team("FFC", "Fulham", "Fulham", 63),
    Team("LUFC", "Leeds United", "Leeds", 341),
    Team("LCFC", "Leicester City", "Leicester", 338),
    Team("LFC", "Liverpool", "Liverpool", 64),
    Team("MCFC", "Manchester City", "Man City", 65),
    Team("MUFC", "Manchester United", "Man Utd", 66),
    Team("NUFC", "Newcastle United", "Newcastle", 67),
    Team("SUFC", "Sheffield United", "Sheffield Utd", 356),
    Team("SFC", "Southampton", "Southampton", 340),
    Team("THFC", "Tottenham Hotspur", "Spurs", 73),
    Team("WBAFC", "West Bromwich Albion", "West Brom", 74),
    Team("WHUFC", "West Ham United", "West Ham", 563),
    Team("WWFC", "Wolverhampton Wanderers", "Wolves", 76),
]

PREMIER_LEAGUE_TEAM_IDS = tuple(t.id for t in _TEAMS)


def _ldt(*args: int) -> datetime:
    return local_datetime(LEAGUE_TZ, *args)


def build_teams() -> TeamCollection:
    return TeamCollection.from_teams(_TEAMS)


def build_premier_league_2020() -> Season:
    return Season(
        id="202021_1",
        name="Premier League 2020/21",
        client_id="PL",
        entries_accepted=TimeFrame(_ldt(2020, 8, 29, 9, 0), _ldt(2020, 9, 12, 15, 0)),
        predictions_accepted=TimeFrame(_ldt(2020, 8, 29, 9, 0), _ldt(2020, 11, 18, 23, 59, 59)),
        live=TimeFrame(_ldt(2020, 9, 12, 15, 0), _ldt(2021, 5, 23, 23, 59, 59)),
        prediction_windows=(
            # Sign-ups
            TimeFrame(_ldt(2020, 8, 29, 9, 0), _ldt(2020, 9, 12, 15, 0)),
            # International breaks
            TimeFrame(_ldt(2020, 10, 7, 0, 0), _ldt(2020, 10, 14, 23, 59, 59)),
            TimeFrame(_ldt(2020, 11, 11, 0, 0), _ldt(2020, 11, 18, 23, 59, 59)),
        ),
        team_ids=PREMIER_LEAGUE_TEAM_IDS,
        max_rounds=38,
    )


def build_fake_season(now: datetime) -> Season:
    """Always-live season for local runs; never queried upstream."""
    return Season(
        id=FAKE_SEASON_ID,
        name="Localhost Season",
        client_id=None,
        entries_accepted=TimeFrame(now, now + timedelta(minutes=20)),
        predictions_accepted=TimeFrame(now, now + timedelta(minutes=60)),
        live=TimeFrame(now, now + timedelta(days=365)),
        prediction_windows=(
            TimeFrame(now, now + timedelta(minutes=20)),
            TimeFrame(now + timedelta(minutes=40), now + timedelta(minutes=60)),
        ),
        team_ids=PREMIER_LEAGUE_TEAM_IDS,
        max_rounds=38,
    )


def build_seasons(now: datetime) -> SeasonCollection:
    seasons = SeasonCollection.from_seasons([build_premier_league_2020(), build_fake_season(now)])
    for season in seasons:
        season.validate()
    return seasons
