"""Helper functions for CLI operations."""

import sys
from typing import Any, Dict, List, Optional

import click

from ...errors import (
    AllSourcesFailedError,
    ConfigurationError,
    MalformedSnapshotError,
    ModelNotFoundError,
    UnknownProviderError,
)


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    MODEL_NOT_FOUND = 3
    DATA_SOURCE_ERROR = 4


def exit_code_for(error: Exception) -> int:
    """Map a registry error to the CLI exit code that reports it."""
    if isinstance(error, ModelNotFoundError):
        return ExitCode.MODEL_NOT_FOUND
    if isinstance(error, (AllSourcesFailedError, MalformedSnapshotError)):
        return ExitCode.DATA_SOURCE_ERROR
    if isinstance(error, (UnknownProviderError, click.BadParameter, ValueError)):
        return ExitCode.INVALID_USAGE
    if isinstance(error, ConfigurationError):
        return ExitCode.DATA_SOURCE_ERROR
    return ExitCode.GENERIC_ERROR


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    # Auto-detect based on TTY
    if sys.stdout.isatty():
        return default_tty
    else:
        return default_non_tty


def handle_error(error: Exception, exit_code: Optional[int] = None) -> None:
    """Report an error and exit.

    Args:
        error: Exception to handle
        exit_code: Exit code to use; derived from the error type if None
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code if exit_code is not None else exit_code_for(error))


def validate_format_support(
    format_type: str,
    supported_formats: List[str],
    command_name: str,
    ctx_obj: Dict[str, Any],
) -> str:
    """Validate format support for a command with consistent fallback behavior.

    Args:
        format_type: The requested format
        supported_formats: List of supported formats for this command
        command_name: Name of the command for error messages
        ctx_obj: Click context object containing verbosity settings

    Returns:
        The validated format (may be changed from input for fallback)

    Raises:
        click.BadParameter: For unsupported formats that can't fall back
    """
    if format_type in supported_formats:
        return format_type

    if format_type == "table":
        fallback_format = "json" if "json" in supported_formats else supported_formats[0]
        # Only show message in verbose mode to avoid cluttering output
        if ctx_obj.get("verbose", 0) > 0:
            click.echo(
                f"Note: {command_name} doesn't support '{format_type}' format, using {fallback_format} instead.",
                err=True,
            )
        return fallback_format

    supported_list = "', '".join(supported_formats)
    raise click.BadParameter(f"Format '{format_type}' is not supported for {command_name}. Use '{supported_list}'.")


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    i = 0
    while size >= 1024 and i < len(size_names) - 1:
        size /= 1024.0
        i += 1

    return f"{size:.1f} {size_names[i]}"
