"""Live refresh command for the AMR CLI."""

from typing import Optional

import click

from ...errors import AllSourcesFailedError
from ...registry import ModelRegistry
from ..formatters import create_console, format_json, format_refresh_json, format_refresh_table
from ..utils import ExitCode, handle_error


@click.command()
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Overall deadline in seconds.")
@click.option("--no-save", is_flag=True, help="Install the new snapshot without writing it to disk.")
@click.pass_context
def refresh(ctx: click.Context, timeout: Optional[float] = None, no_save: bool = False) -> None:
    """Fetch the shared catalog and provider listings and install a new snapshot.

    Sources that fail are reported; the previous snapshot is kept when every
    source fails.
    """
    try:
        registry = ModelRegistry.get_default()
        result = registry.refresh(timeout=timeout, save=not no_save)

        if ctx.obj["format"] == "json":
            format_json(format_refresh_json(result))
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_refresh_table(result, console)

    except AllSourcesFailedError as e:
        for error in e.failed:
            click.echo(f"  {error.source}: {error}", err=True)
        handle_error(e, ExitCode.DATA_SOURCE_ERROR)
    except Exception as e:
        handle_error(e)
