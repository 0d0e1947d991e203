from abc import ABC, abstractmethod

from tinify_optimizer.entities.optimization import (
    ArtifactBytes,
    ProcessingSettings,
    SubmissionResult,
    UploadHandle,
)


class TinifyApiServiceInterface(ABC):
    """Request/response calls against the optimization service."""

    @abstractmethod
    async def upload(
        self, data: bytes, filename: str, session_token: str | None
    ) -> UploadHandle:
        """Stage raw bytes and return the server-side handle."""
        raise NotImplementedError

    @abstractmethod
    async def process(
        self,
        temp_file_ids: list[str],
        settings: ProcessingSettings,
        session_token: str | None,
    ) -> SubmissionResult:
        """Submit staged files for processing."""
        raise NotImplementedError

    @abstractmethod
    async def download(self, job_id: str) -> ArtifactBytes:
        """Fetch the finished artifact for a completed job."""
        raise NotImplementedError
