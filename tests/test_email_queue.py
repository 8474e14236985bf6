"""Tests for the email queue, its runner and the Mailgun client."""

import asyncio

import httpx
import pytest
from unittest.mock import AsyncMock

from prediction_league.alerting import Email, EmailQueue, Identity, MailgunClient
from prediction_league.errors import ConflictError, TransientError
from prediction_league.jobs import EmailQueueRunner


def make_email(n: int) -> Email:
    return Email(
        sender=Identity("League", "noreply@league.test"),
        to=Identity(f"Entrant {n}", f"entrant{n}@example.test"),
        reply_to=Identity("League", "hello@league.test"),
        sender_domain="league.test",
        subject=f"Message {n}",
        plain_text="Hello",
    )


class TestEmailQueue:
    @pytest.mark.asyncio
    async def test_stream_is_fifo(self):
        queue = EmailQueue(max_queue_size=10)
        for n in range(5):
            await queue.offer(make_email(n))
        await queue.close()

        received = [e.subject async for e in queue.stream()]

        assert received == [f"Message {n}" for n in range(5)]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        queue = EmailQueue()
        await queue.close()
        await queue.close()
        assert queue.closed
        assert [e async for e in queue.stream()] == []

    @pytest.mark.asyncio
    async def test_offer_after_close_rejected(self):
        queue = EmailQueue()
        await queue.close()
        with pytest.raises(ConflictError):
            await queue.offer(make_email(1))

    @pytest.mark.asyncio
    async def test_offer_blocks_when_full(self):
        queue = EmailQueue(max_queue_size=1)
        await queue.offer(make_email(1))
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(queue.offer(make_email(2)), timeout=0.05)


class TestEmailQueueRunner:
    @pytest.mark.asyncio
    async def test_sends_in_order_and_drains_on_halt(self):
        queue = EmailQueue()
        client = AsyncMock()
        runner = EmailQueueRunner(queue, client)
        task = asyncio.create_task(runner.run())

        for n in range(3):
            await queue.offer(make_email(n))
        await runner.halt()
        await asyncio.wait_for(task, timeout=1)

        sent = [call.args[0].subject for call in client.send.await_args_list]
        assert sent == ["Message 0", "Message 1", "Message 2"]

    @pytest.mark.asyncio
    async def test_logs_without_client(self, caplog):
        queue = EmailQueue()
        runner = EmailQueueRunner(queue, None)
        await queue.offer(make_email(1))
        await runner.halt()

        with caplog.at_level("INFO"):
            await asyncio.wait_for(runner.run(), timeout=1)

        assert "entrant1@example.test" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_send_does_not_stop_runner(self):
        queue = EmailQueue()
        client = AsyncMock()
        client.send.side_effect = [TransientError("down"), None]
        runner = EmailQueueRunner(queue, client)
        await queue.offer(make_email(1))
        await queue.offer(make_email(2))
        await runner.halt()

        await asyncio.wait_for(runner.run(), timeout=1)

        assert client.send.await_count == 2

    @pytest.mark.asyncio
    async def test_send_timeout(self):
        queue = EmailQueue()

        async def slow_send(email):
            await asyncio.sleep(1)

        client = AsyncMock()
        client.send.side_effect = slow_send
        runner = EmailQueueRunner(queue, client, send_timeout=0.01)
        await queue.offer(make_email(1))
        await runner.halt()

        await asyncio.wait_for(runner.run(), timeout=1)

        assert client.send.await_count == 1


def _mailgun(handler) -> MailgunClient:
    return MailgunClient("key-test", base_url="https://mailgun.test", transport=httpx.MockTransport(handler))


class TestMailgunClient:
    @pytest.mark.asyncio
    async def test_queued_response_succeeds(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.content.decode()
            return httpx.Response(200, json={"message": "Queued. Thank you.", "id": "<abc@league.test>"})

        client = _mailgun(handler)
        await client.send(make_email(1))
        await client.close()

        assert seen["url"] == "https://mailgun.test/v3/league.test/messages"
        assert "subject=Message+1" in seen["body"]

    @pytest.mark.asyncio
    async def test_missing_id_is_error(self):
        client = _mailgun(lambda request: httpx.Response(200, json={"message": "Queued. Thank you.", "id": ""}))
        with pytest.raises(TransientError):
            await client.send(make_email(1))

    @pytest.mark.asyncio
    async def test_unexpected_message_is_error(self):
        client = _mailgun(lambda request: httpx.Response(200, json={"message": "Nope", "id": "x"}))
        with pytest.raises(TransientError):
            await client.send(make_email(1))

    @pytest.mark.asyncio
    async def test_http_error_is_transient(self):
        client = _mailgun(lambda request: httpx.Response(502, json={}))
        with pytest.raises(TransientError):
            await client.send(make_email(1))


class TestEmailQueueCloseWhenFull:
    @pytest.mark.asyncio
    async def test_close_does_not_block_on_full_queue(self):
        """Closing a full queue returns at once; the stream still drains it."""
        queue = EmailQueue(max_queue_size=1)
        await queue.offer(make_email(1))

        await asyncio.wait_for(queue.close(), timeout=1)

        assert queue.pending_count == 1
        received = await asyncio.wait_for(_collect(queue), timeout=1)
        assert [e.subject for e in received] == ["Message 1"]

    @pytest.mark.asyncio
    async def test_runner_halts_on_full_queue(self):
        queue = EmailQueue(max_queue_size=2)
        client = AsyncMock()
        runner = EmailQueueRunner(queue, client)
        await queue.offer(make_email(1))
        await queue.offer(make_email(2))

        await asyncio.wait_for(runner.halt(), timeout=1)
        await asyncio.wait_for(runner.run(), timeout=1)

        assert client.send.await_count == 2


async def _collect(queue: EmailQueue) -> list:
    return [email async for email in queue.stream()]
