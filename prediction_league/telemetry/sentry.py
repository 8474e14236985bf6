"""
Sentry error tracking for the HTTP worker and scheduled jobs.

Events never carry admin credentials, login tokens or entrant email
addresses: they are redacted in ``redact_event`` before sending.
"""

import logging
import os
import re
from contextlib import contextmanager
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
REDACTED_HEADERS = {"authorization", "cookie", "x-auth-token"}

# Magic-login links embed the token as the last path segment
_LOGIN_PATH = re.compile(r"(/login/)[A-Za-z0-9]+")
_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")

_enabled = False


def redact_event(event: dict, hint: dict) -> Optional[dict]:
    """Strip credentials, tokens and email addresses from an outgoing event."""
    request = event.get("request")
    if request:
        headers = request.get("headers") or {}
        request["headers"] = {k: (REDACTED if k.lower() in REDACTED_HEADERS else v) for k, v in headers.items()}
        if request.get("url"):
            request["url"] = _LOGIN_PATH.sub(rf"\1{REDACTED}", request["url"])
        request.pop("data", None)

    for entry in (event.get("logentry"), event.get("logging")):
        if entry and isinstance(entry.get("message"), str):
            entry["message"] = _EMAIL.sub(REDACTED, entry["message"])

    return event


def init_sentry(dsn: Optional[str]) -> bool:
    """Initialise Sentry when a DSN is configured; return whether it is enabled."""
    global _enabled

    if _enabled:
        return True
    if not dsn:
        logger.info("Sentry disabled (SENTRY_DSN not set)")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "development")
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=0.0,
        send_default_pii=False,
        before_send=redact_event,
    )
    _enabled = True
    logger.info(f"Sentry enabled: env={environment}")
    return True


@contextmanager
def sentry_job_context(job: str, **tags):
    """Tag events raised inside a job tick with the job name and its tags."""
    if not _enabled:
        yield
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("job", job)
        for key, value in tags.items():
            scope.set_tag(key, str(value))
        try:
            yield
        except Exception as e:
            sentry_sdk.capture_exception(e)
            raise
