"""Outbound email messages and delivery clients."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from prediction_league.errors import TransientError

logger = logging.getLogger(__name__)

MAILGUN_QUEUED_MESSAGE = "Queued. Thank you."


@dataclass(frozen=True)
class Identity:
    name: str
    address: str

    def formatted(self) -> str:
        return f"{self.name} <{self.address}>"


@dataclass(frozen=True)
class Email:
    """A plain-text message ready for delivery."""

    sender: Identity
    to: Identity
    reply_to: Identity
    sender_domain: str
    subject: str
    plain_text: str


class EmailClient(ABC):
    """Delivery platform used by the email queue runner."""

    @abstractmethod
    async def send(self, email: Email) -> None:
        """Deliver ``email``; raise on anything but a confirmed queued send."""
        pass

    async def close(self) -> None:
        pass


class MailgunClient(EmailClient):
    """Mailgun HTTP API client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.eu.mailgun.net",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            auth=("api", api_key),
            timeout=timeout,
            transport=transport,
        )

    async def send(self, email: Email) -> None:
        url = f"{self.base_url}/v3/{email.sender_domain}/messages"
        data = {
            "from": email.sender.formatted(),
            "to": email.to.formatted(),
            "h:Reply-To": email.reply_to.formatted(),
            "subject": email.subject,
            "text": email.plain_text,
        }

        try:
            response = await self.client.post(url, data=data)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientError(f"mailgun returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise TransientError(f"mailgun request failed: {e}") from e

        body = response.json()
        message = body.get("message")
        message_id = body.get("id")
        if message != MAILGUN_QUEUED_MESSAGE or not message_id:
            raise TransientError(f"mailgun did not queue message: message={message!r} id={message_id!r}")

        logger.debug(f"[EMAIL] Mailgun queued {message_id} to {email.to.address}")

    async def close(self) -> None:
        await self.client.aclose()
