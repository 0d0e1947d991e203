"""
Completion listener for processing jobs.

A job's terminal state arrives on a push channel. A local timer races the
channel; whichever settles the shared future first wins and the other becomes a
no-op. The channel is closed exactly once on every exit path, including when
the caller stops waiting.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any

from tinify_optimizer.entities.optimization import CompletionEvent
from tinify_optimizer.errors import (
    ProcessingFailedError,
    ProcessingTimeoutError,
    TinifyError,
)
from tinify_optimizer.services.CompletionService.completion_listener_interface import (
    CompletionListenerInterface,
)
from tinify_optimizer.services.CompletionService.notification_channel import (
    ChannelFactory,
    NotificationChannelInterface,
    ServerEvent,
)


class ListenerState(str, Enum):
    LISTENING = "listening"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def _parse_json_object(data: str) -> dict[str, Any]:
    if not data:
        return {}
    try:
        parsed = json.loads(data)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class CompletionSubscription:
    """One-shot state machine for a single job's completion channel."""

    def __init__(
        self,
        job_id: str,
        channel: NotificationChannelInterface,
        timeout_ms: int,
        logger: logging.Logger,
    ) -> None:
        self.job_id = job_id
        self.channel = channel
        self.timeout_ms = timeout_ms
        self.logger = logger
        self.state: ListenerState = ListenerState.LISTENING
        self._outcome: asyncio.Future[CompletionEvent] | None = None
        self._closed = False

    async def wait(self) -> CompletionEvent:
        if self._outcome is not None:
            raise RuntimeError(f"Subscription for job {self.job_id} already used")

        loop = asyncio.get_running_loop()
        self._outcome = loop.create_future()
        timer = loop.call_later(self.timeout_ms / 1000, self._on_timer)
        reader = asyncio.create_task(self._read())

        try:
            return await self._outcome
        finally:
            timer.cancel()
            if not reader.done():
                reader.cancel()
                await asyncio.wait([reader])
            await self._close()

    def _settle(
        self,
        state: ListenerState,
        event: CompletionEvent | None = None,
        error: TinifyError | None = None,
    ) -> bool:
        if self._outcome is None or self._outcome.done():
            return False

        self.state = state
        if error is not None:
            self._outcome.set_exception(error)
        else:
            self._outcome.set_result(event)
        self.logger.info("Job %s reached state %s", self.job_id, state.value)
        return True

    def _on_timer(self) -> None:
        if self._settle(
            ListenerState.TIMED_OUT, error=ProcessingTimeoutError(self.timeout_ms)
        ):
            self.logger.warning(
                "Job %s timed out after %d ms", self.job_id, self.timeout_ms
            )

    async def _read(self) -> None:
        try:
            async for message in self.channel.events():
                if self._handle(message):
                    return
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.warning("Status stream for job %s failed: %s", self.job_id, e)
            self._settle(
                ListenerState.FAILED,
                error=ProcessingFailedError(
                    "Processing error: Connection lost", status=500, detail=str(e)
                ),
            )
            return

        self._settle(
            ListenerState.FAILED,
            error=ProcessingFailedError("Processing error: Connection lost", status=500),
        )

    def _handle(self, message: ServerEvent) -> bool:
        """Apply one channel event. Returns True once a terminal state is reached."""
        if message.event == "complete":
            payload = _parse_json_object(message.data)
            event = CompletionEvent.from_payload(payload)
            if event.status == "completed":
                return self._settle(ListenerState.COMPLETED, event=event)

            error_text = event.error or "Unknown error"
            return self._settle(
                ListenerState.FAILED,
                error=ProcessingFailedError(
                    f"Processing failed: {error_text}",
                    status=500,
                    detail=event.error,
                ),
            )

        if message.event == "error":
            error_message = _parse_json_object(message.data).get("message")
            return self._settle(
                ListenerState.FAILED,
                error=ProcessingFailedError(
                    f"Processing error: {error_message or 'Connection lost'}",
                    status=500,
                    detail=error_message,
                ),
            )

        if message.event == "timeout":
            return self._settle(
                ListenerState.TIMED_OUT, error=ProcessingTimeoutError(self.timeout_ms)
            )

        self.logger.debug(
            "Ignoring '%s' event for job %s", message.event, self.job_id
        )
        return False

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.channel.aclose()


class CompletionListener(CompletionListenerInterface):
    def __init__(self, channel_factory: ChannelFactory, logger: logging.Logger):
        self.channel_factory = channel_factory
        self.logger = logger

    async def wait_for_completion(
        self,
        job_id: str,
        timeout_ms: int = CompletionListenerInterface.DEFAULT_TIMEOUT_MS,
    ) -> CompletionEvent:
        subscription = CompletionSubscription(
            job_id=job_id,
            channel=self.channel_factory(job_id),
            timeout_ms=timeout_ms,
            logger=self.logger,
        )
        self.logger.info("Waiting up to %d ms for job %s", timeout_ms, job_id)
        return await subscription.wait()
