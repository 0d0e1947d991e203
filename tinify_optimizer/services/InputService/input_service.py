import logging
import os
from urllib.parse import urlparse

import httpx

from tinify_optimizer.entities.optimization import InputPayload
from tinify_optimizer.errors import FetchFailedError, InputNotFoundError
from tinify_optimizer.services.InputService.input_service_interface import (
    InputServiceInterface,
)

FALLBACK_URL_FILENAME = "image"


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def filename_from_url(url: str) -> str:
    """Basename of the URL path if it carries an extension, otherwise a placeholder."""
    try:
        basename = os.path.basename(urlparse(url).path)
    except ValueError:
        return FALLBACK_URL_FILENAME

    if basename and os.path.splitext(basename)[1]:
        return basename
    return FALLBACK_URL_FILENAME


class InputService(InputServiceInterface):
    def __init__(self, http_client: httpx.AsyncClient, logger: logging.Logger):
        self.http_client = http_client
        self.logger = logger

    async def resolve_input(self, source: str) -> InputPayload:
        if is_url(source):
            return await self._fetch_url(source)
        return self._read_file(source)

    async def _fetch_url(self, url: str) -> InputPayload:
        self.logger.info("Fetching input from %s", url)
        try:
            response = await self.http_client.get(url, follow_redirects=True)
        except httpx.RequestError as e:
            raise FetchFailedError(f"Failed to fetch URL: {url} ({e})") from e

        if not response.is_success:
            raise FetchFailedError(
                f"Failed to fetch URL: {url} (HTTP {response.status_code})",
                status=response.status_code,
            )

        return InputPayload(
            data=response.content,
            filename=filename_from_url(url),
            is_url=True,
        )

    def _read_file(self, path: str) -> InputPayload:
        absolute_path = os.path.abspath(path)
        if not os.path.isfile(absolute_path):
            raise InputNotFoundError(f"File not found: {absolute_path}")

        with open(absolute_path, "rb") as handle:
            data = handle.read()

        self.logger.info("Read %s bytes from %s", len(data), absolute_path)
        return InputPayload(
            data=data,
            filename=os.path.basename(absolute_path),
            is_url=False,
        )
