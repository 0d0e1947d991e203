import asyncio
from typing import Any, Optional

import typer

from tinify_optimizer.bootstrap.components import Components
from tinify_optimizer.dependencies.components import get_components
from tinify_optimizer.dependencies.services import get_optimize_service
from tinify_optimizer.entities.optimization import OptimizeImageParams
from tinify_optimizer.tools.optimize_image_tool import format_error, optimize_image

app = typer.Typer(help="Optimize images through the Tinify service.")


async def run(params: OptimizeImageParams, env: str) -> dict[str, Any]:
    components: Components | None = None
    try:
        components = get_components(env=env, config_path="configuration")
        service = get_optimize_service(components)
    except Exception as e:
        if components is not None:
            await components.aclose()
        return format_error(e)

    try:
        return await optimize_image(service, params)
    finally:
        await components.aclose()


@app.command()
def optimize(
    input: str = typer.Argument(..., help="Local file path or remote URL of the image."),
    output_path: Optional[str] = typer.Option(
        None,
        "--output-path",
        "-o",
        help="File to write, or a directory ending in '/'. Defaults to a .tinified sibling.",
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="original, jpeg, png or webp."
    ),
    width: Optional[int] = typer.Option(None, "--width", help="Target width in pixels."),
    height: Optional[int] = typer.Option(None, "--height", help="Target height in pixels."),
    upscale: Optional[float] = typer.Option(
        None, "--upscale", help="Upscale factor between 0.1 and 10."
    ),
    resize_mode: Optional[str] = typer.Option(
        None, "--resize-mode", help="pad or crop when the aspect ratio changes."
    ),
    aspect_lock: Optional[bool] = typer.Option(
        None, "--aspect-lock/--no-aspect-lock", help="Keep the aspect ratio on resize."
    ),
    seo_tags: Optional[bool] = typer.Option(
        None, "--seo-tags/--no-seo-tags", help="Generate alt text, keywords and filename."
    ),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", help="How long to wait for processing."
    ),
    env: str = typer.Option("development", "--env", help="Configuration environment."),
) -> None:
    params = OptimizeImageParams(
        input=input,
        output_path=output_path,
        output_format=output_format,  # type: ignore[arg-type]
        output_width_px=width,
        output_height_px=height,
        output_upscale_factor=upscale,
        output_resize_mode=resize_mode,  # type: ignore[arg-type]
        output_aspect_lock=aspect_lock,
        output_seo_tag_gen=seo_tags,
        timeout_ms=timeout_ms,
    )

    response = asyncio.run(run(params, env))
    text = "\n".join(block["text"] for block in response["content"])

    if response["is_error"]:
        typer.echo(text, err=True)
        raise typer.Exit(code=1)
    typer.echo(text)


if __name__ == "__main__":
    app()
