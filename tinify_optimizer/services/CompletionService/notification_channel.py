from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import AsyncIterator, Callable

import httpx
from httpx_sse import aconnect_sse


@dataclass(frozen=True)
class ServerEvent:
    """One named event pushed on a job's status stream."""

    event: str
    data: str


class NotificationChannelInterface(ABC):
    """A push subscription scoped to a single job."""

    @abstractmethod
    def events(self) -> AsyncIterator[ServerEvent]:
        raise NotImplementedError

    @abstractmethod
    async def aclose(self) -> None:
        raise NotImplementedError


ChannelFactory = Callable[[str], NotificationChannelInterface]


class SseNotificationChannel(NotificationChannelInterface):
    """Server-sent events subscription on ``GET {base_url}/status/{job_id}/stream``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        job_id: str,
        logger: logging.Logger,
    ) -> None:
        self.http_client = http_client
        self.url = f"{base_url.rstrip('/')}/status/{job_id}/stream"
        self.logger = logger
        self._stack = AsyncExitStack()
        self._closed = False

    async def events(self) -> AsyncIterator[ServerEvent]:
        # Read timeout is disabled; the completion timer bounds the wait.
        event_source = await self._stack.enter_async_context(
            aconnect_sse(self.http_client, "GET", self.url, timeout=httpx.Timeout(None))
        )
        event_source.response.raise_for_status()
        self.logger.debug("Subscribed to %s", self.url)

        async for sse in event_source.aiter_sse():
            yield ServerEvent(event=sse.event, data=sse.data)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._stack.aclose()
        self.logger.debug("Closed subscription %s", self.url)
