"""
Output destination policy.

Pure functions: the working directory is passed in rather than read from the
process unless the caller leaves it unset.
"""

import os

TINIFIED_MARKER = ".tinified"
DEFAULT_EXTENSION = ".png"


def tinified_filename(filename: str, output_format: str | None) -> str:
    """Insert the marker before the extension, swapping the extension if a format is forced."""
    name, ext = os.path.splitext(os.path.basename(filename))

    if not output_format or output_format == "original":
        new_ext = ext or DEFAULT_EXTENSION
    else:
        new_ext = f".{output_format}"

    return f"{name}{TINIFIED_MARKER}{new_ext}"


def is_directory_path(path: str) -> bool:
    return path.endswith("/") or path.endswith(os.sep)


def resolve_output_path(
    input_path: str,
    is_url: bool,
    filename: str,
    output_path: str | None = None,
    output_format: str | None = None,
    cwd: str | None = None,
) -> str:
    """
    Compute where the optimized artifact is written.

    Args:
        input_path: Local path or URL the user passed in
        is_url: Whether the input was fetched remotely
        filename: Name derived during input resolution
        output_path: Explicit destination; a trailing separator means "into this folder"
        output_format: Effective output format, or None/"original" to keep the extension
        cwd: Base directory for remote inputs (defaults to the process cwd)

    Returns:
        Absolute path of the file to write
    """
    if output_path and not is_directory_path(output_path):
        return os.path.abspath(output_path)

    derived_name = tinified_filename(filename, output_format)

    if output_path:
        return os.path.join(os.path.abspath(output_path), derived_name)

    if is_url:
        base_dir = cwd if cwd is not None else os.getcwd()
        return os.path.join(base_dir, derived_name)

    input_dir = os.path.dirname(os.path.abspath(input_path))
    return os.path.join(input_dir, derived_name)
