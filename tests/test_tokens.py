"""Tests for token issue/lookup/expiry and magic-login flows."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from prediction_league.clock import FrozenClock
from prediction_league.errors import ConflictError, NotFoundError, UnauthorizedError
from prediction_league.jobs import TokenReaperJob
from prediction_league.tokens import TOKEN_VALIDITY, TokenAgent, TokenType
from prediction_league.tokens.magic_login import issue_magic_login, redeem_magic_login
from prediction_league.tokens.service import TOKEN_ALPHABET, TOKEN_LENGTH

from conftest import NOW, drain


@pytest.fixture
def token_clock():
    return FrozenClock(NOW)


@pytest.fixture
def token_agent(token_repo, token_clock):
    return TokenAgent(token_repo, token_clock)


class TestTokenAgent:
    @pytest.mark.asyncio
    async def test_generate_sets_expiry_by_type(self, token_agent):
        token = await token_agent.generate(TokenType.PREDICTION, "entry-1")

        assert len(token.id) == TOKEN_LENGTH
        assert set(token.id) <= set(TOKEN_ALPHABET)
        assert token.type == "prediction"
        assert token.issued_at == NOW
        assert token.expires_at == NOW + timedelta(minutes=10)
        assert TOKEN_VALIDITY[TokenType.MAGIC_LOGIN] == timedelta(minutes=60)

    @pytest.mark.asyncio
    async def test_generate_redraws_on_collision(self, token_agent):
        with patch("prediction_league.tokens.service.new_token_id", side_effect=["a" * 36, "a" * 36, "b" * 36]):
            first = await token_agent.generate(TokenType.AUTH, "entry-1")
            second = await token_agent.generate(TokenType.AUTH, "entry-2")

        assert first.id == "a" * 36
        assert second.id == "b" * 36

    @pytest.mark.asyncio
    async def test_generate_gives_up_after_repeated_collisions(self, token_agent):
        with patch("prediction_league.tokens.service.new_token_id", return_value="c" * 36):
            await token_agent.generate(TokenType.AUTH, "entry-1")
            with pytest.raises(ConflictError):
                await token_agent.generate(TokenType.AUTH, "entry-1")

    @pytest.mark.asyncio
    async def test_retrieve_missing(self, token_agent):
        with pytest.raises(NotFoundError):
            await token_agent.retrieve("missing")

    @pytest.mark.asyncio
    async def test_is_valid(self, token_agent, token_clock):
        token = await token_agent.generate(TokenType.MAGIC_LOGIN, "entry-1")

        assert token_agent.is_valid(token, TokenType.MAGIC_LOGIN, "entry-1")
        assert not token_agent.is_valid(token, TokenType.AUTH, "entry-1")
        assert not token_agent.is_valid(token, TokenType.MAGIC_LOGIN, "entry-2")

        token_clock.set(token.expires_at)
        assert not token_agent.is_valid(token, TokenType.MAGIC_LOGIN, "entry-1")

    @pytest.mark.asyncio
    async def test_reap_removes_only_expired(self, token_agent, token_clock):
        short = await token_agent.generate(TokenType.PREDICTION, "entry-1")
        long = await token_agent.generate(TokenType.AUTH, "entry-1")

        token_clock.set(NOW + timedelta(minutes=30))
        removed = await TokenReaperJob(token_agent, token_clock).run()

        assert removed == 1
        with pytest.raises(NotFoundError):
            await token_agent.retrieve(short.id)
        assert (await token_agent.retrieve(long.id)).id == long.id

    @pytest.mark.asyncio
    async def test_delete_in_flight_matches_type_and_value(self, token_agent):
        await token_agent.generate(TokenType.MAGIC_LOGIN, "entry-1")
        await token_agent.generate(TokenType.MAGIC_LOGIN, "entry-1")
        other_type = await token_agent.generate(TokenType.AUTH, "entry-1")
        other_value = await token_agent.generate(TokenType.MAGIC_LOGIN, "entry-2")

        removed = await token_agent.delete_in_flight(TokenType.MAGIC_LOGIN, "entry-1")

        assert removed == 2
        await token_agent.retrieve(other_type.id)
        await token_agent.retrieve(other_value.id)


class TestMagicLogin:
    @pytest.mark.asyncio
    async def test_issue_replaces_previous_and_emails_link(self, add_entry, token_agent, comms, email_queue):
        entry = await add_entry("alpha")

        first = await issue_magic_login(entry, token_agent, comms)
        second = await issue_magic_login(entry, token_agent, comms)

        with pytest.raises(NotFoundError):
            await token_agent.retrieve(first.id)
        emails = await drain(email_queue)
        assert [e.subject for e in emails] == ["Your Login Link", "Your Login Link"]
        assert f"https://league.test/login/{second.id}" in emails[1].plain_text

    @pytest.mark.asyncio
    async def test_redeem_consumes_token(self, add_entry, token_agent, comms):
        entry = await add_entry("alpha")
        token = await issue_magic_login(entry, token_agent, comms)

        await redeem_magic_login(token.id, entry.id, token_agent)

        with pytest.raises(UnauthorizedError):
            await redeem_magic_login(token.id, entry.id, token_agent)

    @pytest.mark.asyncio
    async def test_redeem_rejects_other_entry(self, add_entry, token_agent, comms):
        entry = await add_entry("alpha")
        token = await issue_magic_login(entry, token_agent, comms)

        with pytest.raises(UnauthorizedError):
            await redeem_magic_login(token.id, "someone-else", token_agent)

    @pytest.mark.asyncio
    async def test_redeem_rejects_expired(self, add_entry, token_agent, token_clock, comms):
        entry = await add_entry("alpha")
        token = await issue_magic_login(entry, token_agent, comms)

        token_clock.set(NOW + timedelta(hours=2))
        with pytest.raises(UnauthorizedError):
            await redeem_magic_login(token.id, entry.id, token_agent)
