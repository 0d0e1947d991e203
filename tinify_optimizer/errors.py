"""
Error taxonomy for the optimization pipeline.

Every failure surfaced by the remote clients, the completion listener and the
input resolver is one of these. Callers at the tool boundary render
``str(error)``; nothing in the pipeline retries.
"""


class TinifyError(Exception):
    """Base error carrying the user-facing message and optional remote info."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.message = message
        self.status = status
        self.detail = detail
        super().__init__(message)


class ApiError(TinifyError):
    """Non-success response from the remote service."""


class InsufficientCreditsError(ApiError):
    DAILY_CREDITS: int = 20

    def __init__(
        self,
        remaining: str,
        detail: str | None = None,
        required: str | None = None,
    ) -> None:
        self.remaining = remaining
        self.required = required
        message = (
            f"Insufficient credits. {remaining} of {self.DAILY_CREDITS} "
            f"daily credits left. {detail or ''}"
        ).strip()
        super().__init__(message, status=429, detail=detail)


class FileTooLargeError(ApiError):
    def __init__(self, detail: str | None = None) -> None:
        super().__init__("File exceeds maximum size limit.", status=413, detail=detail)


class UnsupportedFormatError(ApiError):
    def __init__(self, status: int, detail: str | None = None) -> None:
        super().__init__(
            "Unsupported image format. Supported: JPEG, PNG, WebP, HEIC.",
            status=status,
            detail=detail,
        )


class JobExpiredError(ApiError):
    def __init__(self) -> None:
        super().__init__(
            "Job has expired. Files are only available for a limited time.",
            status=410,
        )


class JobNotReadyError(ApiError):
    def __init__(self) -> None:
        super().__init__("Job not completed yet.", status=400)


class JobNotFoundError(ApiError):
    def __init__(self) -> None:
        super().__init__("Job not found.", status=404)


class ProcessingFailedError(ApiError):
    """Completion channel reported a failed or expired job, or an error event."""


class ProcessingTimeoutError(ApiError):
    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        seconds = timeout_ms / 1000
        label = f"{seconds:g}"
        super().__init__(f"Processing timed out after {label} seconds.", status=504)


class InputNotFoundError(TinifyError):
    """Local input path does not exist."""


class FetchFailedError(TinifyError):
    """Remote input could not be downloaded."""


class UnrecoverableError(TinifyError):
    """Local invariant violated, e.g. a submission that created no jobs."""
