"""
HTTP client for the optimization service.

Covers the three request/response endpoints:
- upload(): POST /upload (multipart)
- process(): POST /auto
- download(): GET /download/{job_id}

Non-success responses are translated into the error taxonomy in
``tinify_optimizer.errors``. Nothing here retries.
"""

import logging
import re
from typing import Any

import httpx

from tinify_optimizer.entities.optimization import (
    ArtifactBytes,
    ProcessingSettings,
    SubmissionResult,
    UploadHandle,
)
from tinify_optimizer.errors import (
    ApiError,
    FileTooLargeError,
    InsufficientCreditsError,
    JobExpiredError,
    JobNotFoundError,
    JobNotReadyError,
    UnsupportedFormatError,
)
from tinify_optimizer.services.TinifyApiService.tinify_api_service_interface import (
    TinifyApiServiceInterface,
)

DEFAULT_BASE_URL = "https://api.tinify.ai"
SESSION_HEADER = "X-Session-Token"
RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_REQUIRED_HEADER = "X-RateLimit-Required"
FALLBACK_DOWNLOAD_FILENAME = "output"

_FILENAME_PATTERN = re.compile(r'filename="?([^";\s]+)"?')


def parse_disposition_filename(disposition: str | None) -> str:
    """Extract the attachment filename, falling back to a placeholder."""
    match = _FILENAME_PATTERN.search(disposition or "")
    if match:
        return match.group(1)
    return FALLBACK_DOWNLOAD_FILENAME


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    return None


def _success_body(response: httpx.Response, action: str) -> dict[str, Any]:
    """Parse a 2xx body that must be a JSON object."""
    try:
        body: Any = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise ApiError(
            f"{action} failed: malformed response", status=response.status_code
        )
    return body


def _session_headers(session_token: str | None) -> dict[str, str]:
    if session_token:
        return {SESSION_HEADER: session_token}
    return {}


class TinifyApiService(TinifyApiServiceInterface):
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        logger: logging.Logger,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.http_client = http_client
        self.logger = logger
        self.base_url = base_url.rstrip("/")

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return await self.http_client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            self.logger.warning("%s %s network error: %s", method, path, e)
            raise ApiError(f"Request to {url} failed: {e}", status=0) from e

    async def upload(
        self, data: bytes, filename: str, session_token: str | None
    ) -> UploadHandle:
        self.logger.info("Uploading %s (%s bytes)", filename, len(data))
        response = await self._send(
            "POST",
            "/upload",
            files={"file": (filename, data)},
            headers=_session_headers(session_token),
        )

        if not response.is_success:
            detail = _error_detail(response)
            self.logger.warning(
                "Upload failed with status %d: %s", response.status_code, detail
            )
            if response.status_code == 413:
                raise FileTooLargeError(detail)
            if response.status_code == 415 or (detail and "Unsupported" in detail):
                raise UnsupportedFormatError(response.status_code, detail)
            raise ApiError(
                detail or "Upload failed", status=response.status_code, detail=detail
            )

        try:
            handle = UploadHandle.from_payload(_success_body(response, "Upload"))
        except (TypeError, ValueError) as e:
            raise ApiError(
                "Upload failed: malformed response", status=response.status_code
            ) from e
        if not handle.temp_file_id:
            raise ApiError("Upload response did not include a temp file id.")
        return handle

    async def process(
        self,
        temp_file_ids: list[str],
        settings: ProcessingSettings,
        session_token: str | None,
    ) -> SubmissionResult:
        payload = {
            "temp_file_ids": temp_file_ids,
            "settings": settings.to_payload(),
        }
        self.logger.info("Submitting %d file(s) for processing", len(temp_file_ids))
        response = await self._send(
            "POST",
            "/auto",
            json=payload,
            headers=_session_headers(session_token),
        )

        if not response.is_success:
            detail = _error_detail(response)
            self.logger.warning(
                "Processing request failed with status %d: %s",
                response.status_code,
                detail,
            )
            if response.status_code == 429:
                raise InsufficientCreditsError(
                    remaining=response.headers.get(RATE_LIMIT_REMAINING_HEADER, "0"),
                    detail=detail,
                    required=response.headers.get(RATE_LIMIT_REQUIRED_HEADER),
                )
            raise ApiError(
                detail or "Processing failed",
                status=response.status_code,
                detail=detail,
            )

        try:
            result = SubmissionResult.from_payload(
                _success_body(response, "Processing")
            )
        except (TypeError, ValueError) as e:
            raise ApiError(
                "Processing failed: malformed response", status=response.status_code
            ) from e
        self.logger.info(
            "Submitted %d job(s); credits used=%s remaining=%s",
            len(result.jobs),
            result.credits_used,
            result.credits_remaining,
        )
        return result

    async def download(self, job_id: str) -> ArtifactBytes:
        response = await self._send("GET", f"/download/{job_id}")

        if not response.is_success:
            detail = _error_detail(response)
            self.logger.warning(
                "Download of job %s failed with status %d: %s",
                job_id,
                response.status_code,
                detail,
            )
            if response.status_code == 410:
                raise JobExpiredError()
            if response.status_code == 400:
                raise JobNotReadyError()
            if response.status_code == 404:
                raise JobNotFoundError()
            raise ApiError(
                detail or "Download failed", status=response.status_code, detail=detail
            )

        filename = parse_disposition_filename(
            response.headers.get("Content-Disposition")
        )
        self.logger.info(
            "Downloaded job %s as %s (%s bytes)", job_id, filename, len(response.content)
        )
        return ArtifactBytes(data=response.content, filename=filename)
