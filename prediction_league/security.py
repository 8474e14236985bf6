"""Admin authentication: HTTP basic auth against ADMIN_BASIC_AUTH."""

import logging
import secrets
from typing import Optional

from fastapi import Request, Security
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from prediction_league.errors import UnauthorizedError

logger = logging.getLogger(__name__)

basic_auth = HTTPBasic(auto_error=False)


def credentials_match(configured: str, credentials: Optional[HTTPBasicCredentials]) -> bool:
    """
    Compare supplied credentials to a ``user:password`` setting.

    An empty setting blocks every request (fail-closed).
    """
    if not configured or credentials is None or ":" not in configured:
        return False
    username, password = configured.split(":", 1)
    return secrets.compare_digest(credentials.username, username) and secrets.compare_digest(
        credentials.password, password
    )


async def verify_admin(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Security(basic_auth),
) -> bool:
    settings = request.app.state.application.settings
    if not credentials_match(settings.ADMIN_BASIC_AUTH, credentials):
        if not settings.ADMIN_BASIC_AUTH:
            logger.warning("ADMIN_BASIC_AUTH not configured - blocking admin access")
        raise UnauthorizedError("admin credentials required")
    return True
