"""Tests for settings helpers, the clock override and admin credential checks."""

from datetime import datetime

from fastapi.security import HTTPBasicCredentials

from prediction_league.clock import FrozenClock, local_datetime, parse_ts_override, to_utc_naive
from prediction_league.config import Settings
from prediction_league.database import get_database_url
from prediction_league.main import build_clock, parse_args
from prediction_league.security import credentials_match


class TestClockOverride:
    def test_ts_parsed_in_local_time(self):
        # BST is UTC+1
        assert parse_ts_override("20200912123400") == datetime(2020, 9, 12, 11, 34)
        # GMT matches UTC
        assert parse_ts_override("20201212123400") == datetime(2020, 12, 12, 12, 34)

    def test_local_datetime(self):
        assert local_datetime("Europe/London", 2020, 9, 12, 9, 0) == datetime(2020, 9, 12, 8, 0)

    def test_to_utc_naive_keeps_naive(self):
        ts = datetime(2020, 1, 1, 12, 0)
        assert to_utc_naive(ts) is ts

    def test_build_clock(self):
        settings = Settings(DATABASE_URL="sqlite://")
        clock = build_clock(parse_args(["--ts", "20200912123400"]).ts, settings)

        assert isinstance(clock, FrozenClock)
        assert clock.now() == datetime(2020, 9, 12, 11, 34)

    def test_real_clock_by_default(self):
        settings = Settings(DATABASE_URL="sqlite://")
        assert not isinstance(build_clock(parse_args([]).ts, settings), FrozenClock)


class TestSettings:
    def test_defaults(self):
        settings = Settings(DATABASE_URL="sqlite://")
        assert settings.PORT == 3000
        assert settings.STANDINGS_CRON == "*/15 * * * *"
        assert settings.FOOTBALL_DATA_API_TOKEN is None

    def test_database_url_rewritten_for_async_drivers(self):
        assert get_database_url("sqlite://") == "sqlite+aiosqlite://"
        assert get_database_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert get_database_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert get_database_url("postgresql+asyncpg://h/db") == "postgresql+asyncpg://h/db"


class TestCredentials:
    def test_match(self):
        creds = HTTPBasicCredentials(username="admin", password="s3:cret")
        assert credentials_match("admin:s3:cret", creds)

    def test_mismatch(self):
        creds = HTTPBasicCredentials(username="admin", password="wrong")
        assert not credentials_match("admin:secret", creds)

    def test_fail_closed(self):
        creds = HTTPBasicCredentials(username="", password="")
        assert not credentials_match("", creds)
        assert not credentials_match("admin:secret", None)
