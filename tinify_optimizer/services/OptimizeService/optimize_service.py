from __future__ import annotations

import logging
import os
from typing import Callable

from tinify_optimizer.entities.optimization import (
    CompletionEvent,
    OptimizationResult,
    OptimizeImageParams,
    ProcessingSettings,
)
from tinify_optimizer.errors import UnrecoverableError
from tinify_optimizer.repositories.credential_repository.credential_repository_interface import (
    CredentialRepositoryInterface,
)
from tinify_optimizer.services.CompletionService.completion_listener_interface import (
    CompletionListenerInterface,
)
from tinify_optimizer.services.InputService.input_service_interface import (
    InputServiceInterface,
)
from tinify_optimizer.services.OptimizeService.optimize_service_interface import (
    OptimizeServiceInterface,
)
from tinify_optimizer.services.TinifyApiService.tinify_api_service_interface import (
    TinifyApiServiceInterface,
)
from tinify_optimizer.utils.output_path import resolve_output_path


def build_settings(params: OptimizeImageParams) -> ProcessingSettings:
    """Apply the pipeline defaults: keep format, generate SEO tags, never rename."""
    return ProcessingSettings(
        output_format=params.output_format or "original",
        output_seo_tag_gen=(
            True if params.output_seo_tag_gen is None else params.output_seo_tag_gen
        ),
        output_seo_rename=False,
        output_width=params.output_width_px,
        output_height=params.output_height_px,
        output_upscale_factor=params.output_upscale_factor,
        output_aspect_lock=params.output_aspect_lock,
        output_resize_mode=params.output_resize_mode,
    )


def effective_output_format(
    requested: str | None, completed: CompletionEvent
) -> str | None:
    if requested and requested != "original":
        return requested
    return completed.processed_format


class OptimizeService(OptimizeServiceInterface):
    def __init__(
        self,
        credential_repository: CredentialRepositoryInterface,
        input_service: InputServiceInterface,
        api_service: TinifyApiServiceInterface,
        completion_listener: CompletionListenerInterface,
        logger: logging.Logger,
        default_timeout_ms: int = CompletionListenerInterface.DEFAULT_TIMEOUT_MS,
        cwd_provider: Callable[[], str] = os.getcwd,
    ) -> None:
        self.credential_repository = credential_repository
        self.input_service = input_service
        self.api_service = api_service
        self.completion_listener = completion_listener
        self.logger = logger
        self.default_timeout_ms = default_timeout_ms
        self.cwd_provider = cwd_provider

    async def optimize_image(self, params: OptimizeImageParams) -> OptimizationResult:
        session_token = self.credential_repository.get_token()

        payload = await self.input_service.resolve_input(params.input)

        upload = await self.api_service.upload(
            payload.data, payload.filename, session_token
        )
        if upload.session_token:
            self.credential_repository.save_token(upload.session_token)
            session_token = upload.session_token

        settings = build_settings(params)
        submission = await self.api_service.process(
            [upload.temp_file_id], settings, session_token
        )

        job = submission.jobs[0] if submission.jobs else None
        if job is None or not job.id:
            raise UnrecoverableError("No job created by the server.")
        if len(submission.jobs) > 1:
            self.logger.warning(
                "Server created %d jobs; only %s is followed",
                len(submission.jobs),
                job.id,
            )

        completed = await self.completion_listener.wait_for_completion(
            job.id, params.timeout_ms or self.default_timeout_ms
        )

        artifact = await self.api_service.download(job.id)

        output_path = resolve_output_path(
            input_path=params.input,
            is_url=payload.is_url,
            filename=payload.filename,
            output_path=params.output_path,
            output_format=effective_output_format(params.output_format, completed),
            cwd=self.cwd_provider(),
        )

        os.makedirs(os.path.dirname(output_path), exist_ok=True)
        with open(output_path, "wb") as handle:
            handle.write(artifact.data)
        self.logger.info(
            "Saved job %s output to %s (%d bytes)",
            job.id,
            output_path,
            len(artifact.data),
        )

        return OptimizationResult(
            output_path=output_path,
            output_size_bytes=(
                completed.processed_size
                if completed.processed_size is not None
                else len(artifact.data)
            ),
            output_width_px=completed.processed_width,
            output_height_px=completed.processed_height,
            output_format=completed.processed_format,
            compression_ratio=completed.processed_compression_ratio,
            seo_alt_text=completed.seo_alt_text,
            seo_keywords=completed.seo_keywords,
            seo_filename=completed.seo_filename,
        )
