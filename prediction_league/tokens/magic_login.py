"""Magic-login issuance and redemption built on the token primitives."""

import logging

from prediction_league.alerting import CommunicationsAgent
from prediction_league.errors import NotFoundError, UnauthorizedError
from prediction_league.models import Entry, Token
from prediction_league.tokens.service import TokenAgent, TokenType

logger = logging.getLogger(__name__)


async def issue_magic_login(entry: Entry, tokens: TokenAgent, comms: CommunicationsAgent) -> Token:
    """Replace any in-flight login token for ``entry`` and email a fresh link."""
    await tokens.delete_in_flight(TokenType.MAGIC_LOGIN, entry.id)
    token = await tokens.generate(TokenType.MAGIC_LOGIN, entry.id)
    await comms.issue_magic_login_email(entry, token.id)
    logger.info(f"[TOKEN] Issued magic login for entry {entry.id}")
    return token


async def redeem_magic_login(token_id: str, entry_id: str, tokens: TokenAgent) -> None:
    """Consume a magic-login token; raise UnauthorizedError unless it is valid for ``entry_id``."""
    try:
        token = await tokens.retrieve(token_id)
    except NotFoundError as e:
        raise UnauthorizedError("invalid login token") from e

    if not tokens.is_valid(token, TokenType.MAGIC_LOGIN, entry_id):
        raise UnauthorizedError("invalid login token")

    await tokens.delete(token_id)
