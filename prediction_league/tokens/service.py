"""Token generation, lookup and expiry sweeps."""

import logging
import secrets
import string
from datetime import timedelta
from enum import Enum

from prediction_league.clock import Clock
from prediction_league.errors import ConflictError, NotFoundError
from prediction_league.models import Token
from prediction_league.repositories import TokenRepository

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 36
TOKEN_ALPHABET = string.ascii_letters + string.digits
MAX_GENERATE_ATTEMPTS = 5


class TokenType(str, Enum):
    AUTH = "auth"
    MAGIC_LOGIN = "magic-login"
    PREDICTION = "prediction"


TOKEN_VALIDITY = {
    TokenType.AUTH: timedelta(minutes=60),
    TokenType.MAGIC_LOGIN: timedelta(minutes=60),
    TokenType.PREDICTION: timedelta(minutes=10),
}


def new_token_id() -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


class TokenAgent:
    def __init__(self, tokens: TokenRepository, clock: Clock):
        self.tokens = tokens
        self.clock = clock

    async def generate(self, token_type: TokenType, value: str) -> Token:
        """Issue a token, redrawing the ID on collision."""
        token_type = TokenType(token_type)
        now = self.clock.now()

        for attempt in range(1, MAX_GENERATE_ATTEMPTS + 1):
            token = Token(
                id=new_token_id(),
                type=token_type.value,
                value=value,
                issued_at=now,
                expires_at=now + TOKEN_VALIDITY[token_type],
            )
            try:
                return await self.tokens.insert(token)
            except ConflictError:
                logger.warning(f"[TOKEN] ID collision on attempt {attempt}, redrawing")

        raise ConflictError(f"could not issue unique token after {MAX_GENERATE_ATTEMPTS} attempts")

    async def retrieve(self, token_id: str) -> Token:
        token = await self.tokens.find(token_id)
        if token is None:
            raise NotFoundError(f"token not found: {token_id}")
        return token

    async def delete(self, token_id: str) -> None:
        await self.tokens.delete(token_id)

    async def reap_expired_as_of(self, ts) -> int:
        removed = await self.tokens.delete_expired_as_of(ts)
        if removed:
            logger.info(f"[TOKEN] Reaped {removed} expired token(s)")
        return removed

    async def delete_in_flight(self, token_type: TokenType, value: str) -> int:
        return await self.tokens.delete_in_flight(TokenType(token_type).value, value, self.clock.now())

    def is_valid(self, token: Token, token_type: TokenType, value: str) -> bool:
        """True if ``token`` matches type and value and has not yet expired."""
        return (
            token.type == TokenType(token_type).value
            and token.value == value
            and token.expires_at > self.clock.now()
        )
