"""
Optimize Image tool.

Caller-facing wrapper around the optimization pipeline: validates parameters,
runs the service and renders either a one-fact-per-line summary or a single
error message. The returned dictionary is always well-formed; this function
never raises.
"""

from __future__ import annotations

import logging
from typing import Any

from tinify_optimizer.entities.optimization import (
    OptimizationResult,
    OptimizeImageParams,
)
from tinify_optimizer.errors import TinifyError
from tinify_optimizer.services.OptimizeService.optimize_service_interface import (
    OptimizeServiceInterface,
)

OUTPUT_FORMATS = ("original", "jpeg", "png", "webp")
RESIZE_MODES = ("pad", "crop")
MIN_UPSCALE_FACTOR = 0.1
MAX_UPSCALE_FACTOR = 10.0
UNEXPECTED_ERROR_TEXT = "An unexpected error occurred."

_logger = logging.getLogger(__name__)


def validate_params(params: OptimizeImageParams) -> None:
    """
    Check caller parameters before any network traffic.

    Raises:
        ValueError: If a parameter is outside its allowed range or set
    """
    if not params.input or not params.input.strip():
        raise ValueError("input must be a local file path or an http(s) URL.")

    if params.output_format is not None and params.output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"output_format must be one of: {', '.join(OUTPUT_FORMATS)}."
        )

    for name in ("output_width_px", "output_height_px"):
        value = getattr(params, name)
        if value is not None and (
            isinstance(value, bool) or not isinstance(value, int) or value <= 0
        ):
            raise ValueError(f"{name} must be a positive integer.")

    factor = params.output_upscale_factor
    if factor is not None and not (MIN_UPSCALE_FACTOR <= factor <= MAX_UPSCALE_FACTOR):
        raise ValueError(
            f"output_upscale_factor must be between {MIN_UPSCALE_FACTOR:g} "
            f"and {MAX_UPSCALE_FACTOR:g}."
        )

    if (
        params.output_resize_mode is not None
        and params.output_resize_mode not in RESIZE_MODES
    ):
        raise ValueError(f"output_resize_mode must be one of: {', '.join(RESIZE_MODES)}.")

    if params.timeout_ms is not None and params.timeout_ms <= 0:
        raise ValueError("timeout_ms must be positive.")


def build_summary(result: OptimizationResult) -> str:
    lines: list[str] = [
        f"Optimized: {result.output_path}",
        f"Size: {result.output_size_bytes / 1024:.1f} KB",
    ]
    if result.compression_ratio is not None:
        lines.append(f"Compression: {result.compression_ratio * 100:.0f}%")
    if result.output_format:
        lines.append(f"Format: {result.output_format}")
    if result.output_width_px and result.output_height_px:
        lines.append(f"Dimensions: {result.output_width_px}x{result.output_height_px}")
    if result.seo_alt_text:
        lines.append(f"Alt text: {result.seo_alt_text}")
    return "\n".join(lines)


def format_error(error: object) -> dict[str, Any]:
    if isinstance(error, TinifyError):
        text = error.message
    elif isinstance(error, Exception) and str(error):
        text = str(error)
    else:
        text = UNEXPECTED_ERROR_TEXT

    return {
        "is_error": True,
        "content": [{"type": "text", "text": text}],
    }


async def optimize_image(
    service: OptimizeServiceInterface, params: OptimizeImageParams
) -> dict[str, Any]:
    """
    Optimize one image and describe the outcome.

    Args:
        service: Pipeline to run
        params: Input locator, destination and processing options

    Returns:
        A dictionary containing:
        - is_error: True when the pipeline failed
        - content: One text block with the summary or the error message
        - structured_content: The result fields (success only)
    """
    try:
        validate_params(params)
        result = await service.optimize_image(params)
    except Exception as e:
        _logger.error("optimize_image failed for %s: %s", params.input, e)
        return format_error(e)

    return {
        "is_error": False,
        "content": [{"type": "text", "text": build_summary(result)}],
        "structured_content": result.to_dict(),
    }
