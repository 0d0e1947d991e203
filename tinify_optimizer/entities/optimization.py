from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

OutputFormat = Literal["original", "jpeg", "png", "webp"]
ResizeMode = Literal["pad", "crop"]


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class InputPayload:
    """Raw bytes resolved from a local path or a remote URL."""

    data: bytes
    filename: str
    is_url: bool


@dataclass(frozen=True)
class UploadHandle:
    temp_file_id: str
    original_filename: str
    file_size: int
    mime_type: str
    session_token: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> UploadHandle:
        return cls(
            temp_file_id=str(payload.get("temp_file_id") or ""),
            original_filename=str(payload.get("original_filename") or ""),
            file_size=int(payload.get("file_size") or 0),
            mime_type=str(payload.get("mime_type") or ""),
            session_token=payload.get("session_token") or None,
        )


@dataclass
class ProcessingSettings:
    """
    Transform requested from the service.

    Only ``output_format``, ``output_seo_tag_gen`` and ``output_seo_rename``
    are always sent; the rest are omitted from the request when unset.
    """

    output_format: OutputFormat = "original"
    output_seo_tag_gen: bool = True
    output_seo_rename: bool = False
    output_width: int | None = None
    output_height: int | None = None
    output_upscale_factor: float | None = None
    output_aspect_lock: bool | None = None
    output_resize_mode: ResizeMode | None = None

    def to_payload(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class JobHandle:
    id: str
    temp_file_id: str
    status: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> JobHandle:
        return cls(
            id=str(payload.get("id") or ""),
            temp_file_id=str(payload.get("temp_file_id") or ""),
            status=str(payload.get("status") or ""),
        )


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    jobs: list[JobHandle]
    credits_used: int
    credits_remaining: int

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SubmissionResult:
        raw_jobs = payload.get("jobs") or []
        return cls(
            success=bool(payload.get("success", True)),
            jobs=[JobHandle.from_payload(job) for job in raw_jobs if isinstance(job, dict)],
            credits_used=int(payload.get("credits_used") or 0),
            credits_remaining=int(payload.get("credits_remaining") or 0),
        )


@dataclass(frozen=True)
class CompletionEvent:
    """Terminal notification pushed on the job's status stream."""

    job_id: str
    status: str
    processed_filename: str | None = None
    processed_size: int | None = None
    processed_format: str | None = None
    processed_width: int | None = None
    processed_height: int | None = None
    processed_compression_ratio: float | None = None
    seo_alt_text: str | None = None
    seo_filename: str | None = None
    seo_keywords: list[str] | None = None
    error: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CompletionEvent:
        keywords = payload.get("seo_keywords")
        return cls(
            job_id=str(payload.get("job_id") or ""),
            status=str(payload.get("status") or ""),
            processed_filename=_optional_str(payload.get("processed_filename")),
            processed_size=_optional_int(payload.get("processed_size")),
            processed_format=_optional_str(payload.get("processed_format")),
            processed_width=_optional_int(payload.get("processed_width")),
            processed_height=_optional_int(payload.get("processed_height")),
            processed_compression_ratio=_optional_float(
                payload.get("processed_compression_ratio")
            ),
            seo_alt_text=_optional_str(payload.get("seo_alt_text")),
            seo_filename=_optional_str(payload.get("seo_filename")),
            seo_keywords=(
                [str(keyword) for keyword in keywords]
                if isinstance(keywords, list)
                else None
            ),
            error=_optional_str(payload.get("error")),
        )


@dataclass(frozen=True)
class ArtifactBytes:
    data: bytes
    filename: str


@dataclass
class OptimizeImageParams:
    """Caller parameters for one end-to-end optimization."""

    input: str
    output_path: str | None = None
    output_format: OutputFormat | None = None
    output_width_px: int | None = None
    output_height_px: int | None = None
    output_upscale_factor: float | None = None
    output_resize_mode: ResizeMode | None = None
    output_aspect_lock: bool | None = None
    output_seo_tag_gen: bool | None = None
    timeout_ms: int | None = None


@dataclass(frozen=True)
class OptimizationResult:
    output_path: str
    output_size_bytes: int
    output_width_px: int | None = None
    output_height_px: int | None = None
    output_format: str | None = None
    compression_ratio: float | None = None
    seo_alt_text: str | None = None
    seo_keywords: list[str] | None = None
    seo_filename: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
