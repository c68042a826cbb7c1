"""CLI utilities package."""

from .helpers import (
    ExitCode,
    exit_code_for,
    format_file_size,
    handle_error,
    resolve_format,
    validate_format_support,
)
from .options import output_option, provider_option

__all__ = [
    "ExitCode",
    "exit_code_for",
    "resolve_format",
    "handle_error",
    "validate_format_support",
    "format_file_size",
    "provider_option",
    "output_option",
]
