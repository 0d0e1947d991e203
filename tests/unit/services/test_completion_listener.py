"""
Unit tests for CompletionListener / CompletionSubscription.

Each race (channel first, timer first, error first) must settle exactly one
terminal state and close the channel exactly once.
"""

import asyncio
import json
import logging
from typing import AsyncIterator

import pytest

from tinify_optimizer.errors import ProcessingFailedError, ProcessingTimeoutError
from tinify_optimizer.services.CompletionService.completion_listener import (
    CompletionListener,
    CompletionSubscription,
    ListenerState,
)
from tinify_optimizer.services.CompletionService.notification_channel import (
    NotificationChannelInterface,
    ServerEvent,
)

_END = object()


class FakeChannel(NotificationChannelInterface):
    """Channel fed through a queue; counts close calls."""

    def __init__(self, open_error: Exception | None = None) -> None:
        self.queue: asyncio.Queue = asyncio.Queue()
        self.close_calls = 0
        self.open_error = open_error

    def push(self, event: str, data: object = "") -> None:
        payload = data if isinstance(data, str) else json.dumps(data)
        self.queue.put_nowait(ServerEvent(event=event, data=payload))

    def end(self) -> None:
        self.queue.put_nowait(_END)

    async def events(self) -> AsyncIterator[ServerEvent]:
        if self.open_error is not None:
            raise self.open_error
        while True:
            item = await self.queue.get()
            if item is _END:
                return
            yield item

    async def aclose(self) -> None:
        self.close_calls += 1


def make_subscription(channel: FakeChannel, timeout_ms: int = 1000) -> CompletionSubscription:
    return CompletionSubscription(
        job_id="j1",
        channel=channel,
        timeout_ms=timeout_ms,
        logger=logging.getLogger("CompletionListenerTest"),
    )


COMPLETED_PAYLOAD = {
    "job_id": "j1",
    "status": "completed",
    "processed_size": 30000,
    "processed_format": "png",
    "processed_width": 800,
    "processed_height": 600,
    "processed_compression_ratio": 0.6,
    "seo_alt_text": "A hero image",
    "seo_keywords": ["hero", "banner"],
    "seo_filename": "hero-banner.png",
}


class TestCompletionSubscription:
    @pytest.mark.asyncio
    async def test_complete_event_resolves_completed(self) -> None:
        channel = FakeChannel()
        channel.push("complete", COMPLETED_PAYLOAD)
        subscription = make_subscription(channel)

        event = await subscription.wait()

        assert subscription.state is ListenerState.COMPLETED
        assert event.job_id == "j1"
        assert event.processed_size == 30000
        assert event.processed_format == "png"
        assert event.processed_compression_ratio == 0.6
        assert event.seo_keywords == ["hero", "banner"]
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["failed", "expired"])
    async def test_complete_event_with_failure_status(self, status: str) -> None:
        channel = FakeChannel()
        channel.push("complete", {"job_id": "j1", "status": status, "error": "corrupt input"})
        subscription = make_subscription(channel)

        with pytest.raises(ProcessingFailedError) as exc_info:
            await subscription.wait()

        assert str(exc_info.value) == "Processing failed: corrupt input"
        assert subscription.state is ListenerState.FAILED
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_failed_status_without_error_text(self) -> None:
        channel = FakeChannel()
        channel.push("complete", {"job_id": "j1", "status": "failed"})

        with pytest.raises(ProcessingFailedError) as exc_info:
            await make_subscription(channel).wait()

        assert str(exc_info.value) == "Processing failed: Unknown error"

    @pytest.mark.asyncio
    async def test_error_event_with_message(self) -> None:
        channel = FakeChannel()
        channel.push("error", {"message": "worker crashed"})
        subscription = make_subscription(channel)

        with pytest.raises(ProcessingFailedError) as exc_info:
            await subscription.wait()

        assert str(exc_info.value) == "Processing error: worker crashed"
        assert subscription.state is ListenerState.FAILED
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_error_event_without_payload(self) -> None:
        channel = FakeChannel()
        channel.push("error")

        with pytest.raises(ProcessingFailedError) as exc_info:
            await make_subscription(channel).wait()

        assert str(exc_info.value) == "Processing error: Connection lost"

    @pytest.mark.asyncio
    async def test_server_timeout_event(self) -> None:
        channel = FakeChannel()
        channel.push("timeout")
        subscription = make_subscription(channel, timeout_ms=60000)

        with pytest.raises(ProcessingTimeoutError) as exc_info:
            await subscription.wait()

        assert str(exc_info.value) == "Processing timed out after 60 seconds."
        assert subscription.state is ListenerState.TIMED_OUT
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_local_timer_expires_first(self) -> None:
        channel = FakeChannel()
        subscription = make_subscription(channel, timeout_ms=20)

        with pytest.raises(ProcessingTimeoutError) as exc_info:
            await subscription.wait()

        assert exc_info.value.timeout_ms == 20
        assert subscription.state is ListenerState.TIMED_OUT
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_late_events_after_timeout_are_ignored(self) -> None:
        channel = FakeChannel()
        subscription = make_subscription(channel, timeout_ms=10)

        with pytest.raises(ProcessingTimeoutError):
            await subscription.wait()

        channel.push("complete", COMPLETED_PAYLOAD)
        await asyncio.sleep(0.02)

        assert subscription.state is ListenerState.TIMED_OUT
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_first_terminal_event_wins(self) -> None:
        channel = FakeChannel()
        channel.push("complete", COMPLETED_PAYLOAD)
        channel.push("error", {"message": "too late"})
        channel.push("timeout")
        subscription = make_subscription(channel, timeout_ms=10)

        event = await subscription.wait()
        await asyncio.sleep(0.03)

        assert event.status == "completed"
        assert subscription.state is ListenerState.COMPLETED
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_unknown_events_are_skipped(self) -> None:
        channel = FakeChannel()
        channel.push("progress", {"percent": 50})
        channel.push("complete", COMPLETED_PAYLOAD)
        subscription = make_subscription(channel)

        event = await subscription.wait()

        assert event.processed_width == 800
        assert subscription.state is ListenerState.COMPLETED

    @pytest.mark.asyncio
    async def test_stream_ending_without_terminal_event_fails(self) -> None:
        channel = FakeChannel()
        channel.end()
        subscription = make_subscription(channel)

        with pytest.raises(ProcessingFailedError) as exc_info:
            await subscription.wait()

        assert str(exc_info.value) == "Processing error: Connection lost"
        assert subscription.state is ListenerState.FAILED
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_channel_open_failure(self) -> None:
        channel = FakeChannel(open_error=ConnectionError("refused"))
        subscription = make_subscription(channel)

        with pytest.raises(ProcessingFailedError) as exc_info:
            await subscription.wait()

        assert exc_info.value.detail == "refused"
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_abandoned_wait_closes_channel(self) -> None:
        channel = FakeChannel()
        subscription = make_subscription(channel, timeout_ms=60000)

        task = asyncio.create_task(subscription.wait())
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert channel.close_calls == 1
        assert subscription.state is ListenerState.LISTENING

    @pytest.mark.asyncio
    async def test_subscription_is_single_use(self) -> None:
        channel = FakeChannel()
        channel.push("complete", COMPLETED_PAYLOAD)
        subscription = make_subscription(channel)
        await subscription.wait()

        with pytest.raises(RuntimeError):
            await subscription.wait()


class TestCompletionListener:
    @pytest.mark.asyncio
    async def test_opens_channel_for_job(self) -> None:
        opened: list[str] = []
        channel = FakeChannel()
        channel.push("complete", COMPLETED_PAYLOAD)

        def factory(job_id: str) -> FakeChannel:
            opened.append(job_id)
            return channel

        listener = CompletionListener(
            channel_factory=factory, logger=logging.getLogger("CompletionListenerTest")
        )

        event = await listener.wait_for_completion("j1", timeout_ms=1000)

        assert opened == ["j1"]
        assert event.status == "completed"
        assert channel.close_calls == 1

    @pytest.mark.asyncio
    async def test_timeout_is_forwarded(self) -> None:
        listener = CompletionListener(
            channel_factory=lambda job_id: FakeChannel(),
            logger=logging.getLogger("CompletionListenerTest"),
        )

        with pytest.raises(ProcessingTimeoutError) as exc_info:
            await listener.wait_for_completion("j1", timeout_ms=15)

        assert exc_info.value.timeout_ms == 15
