"""Single consumer of the email queue."""

import asyncio
import logging
from typing import Optional

from prediction_league.alerting import Email, EmailClient, EmailQueue
from prediction_league.telemetry import record_email

logger = logging.getLogger(__name__)


class EmailQueueRunner:
    """
    Delivers queued email in order, one at a time.

    Without a client each message is logged instead of sent. ``halt`` closes
    the queue; ``run`` returns once everything queued before it is handled.
    """

    def __init__(self, queue: EmailQueue, client: Optional[EmailClient] = None, send_timeout: float = 10.0):
        self.queue = queue
        self.client = client
        self.send_timeout = send_timeout

    async def run(self) -> None:
        logger.info(f"[EMAIL_QUEUE] Runner started (client={'none' if self.client is None else type(self.client).__name__})")
        async for email in self.queue.stream():
            await self._deliver(email)
        logger.info("[EMAIL_QUEUE] Runner drained, exiting")

    async def halt(self) -> None:
        await self.queue.close()

    async def _deliver(self, email: Email) -> None:
        if self.client is None:
            logger.info(f"[EMAIL_QUEUE] (not sent) to={email.to.address} subject={email.subject!r}")
            record_email("logged", self.queue.pending_count)
            return

        try:
            await asyncio.wait_for(self.client.send(email), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.error(f"[EMAIL_QUEUE] Send timed out after {self.send_timeout}s to={email.to.address}")
            record_email("failed", self.queue.pending_count)
            return
        except Exception as e:
            logger.error(f"[EMAIL_QUEUE] Send failed to={email.to.address}: {e}")
            record_email("failed", self.queue.pending_count)
            return

        logger.info(f"[EMAIL_QUEUE] Sent to={email.to.address} subject={email.subject!r}")
        record_email("sent", self.queue.pending_count)
