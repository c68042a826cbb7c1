"""Provider inspection commands for the AMR CLI."""

import click

from ...registry import ModelRegistry
from ..formatters import (
    create_console,
    format_json,
    format_providers_json,
    format_providers_table,
)
from ..utils import ExitCode, handle_error


@click.group()
def providers() -> None:
    """Inspect configured providers."""
    pass


@providers.command(name="list")
@click.pass_context
def list_providers(ctx: click.Context) -> None:
    """List configured provider handles."""
    try:
        registry = ModelRegistry.get_default()
        handles = registry.providers

        format_type = ctx.obj["format"]
        if format_type == "json":
            format_json(format_providers_json(handles))
        elif format_type == "table":
            console = create_console(no_color=ctx.obj["no_color"])
            format_providers_table(handles, console)
        else:
            # Only json and table are supported here; anything else is invalid usage
            handle_error(
                click.BadParameter(
                    f"Format '{format_type}' is not supported for providers list. Use 'table' or 'json'."
                ),
                ExitCode.INVALID_USAGE,
            )

    except Exception as e:
        handle_error(e)
