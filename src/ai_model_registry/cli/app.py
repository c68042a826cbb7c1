"""Main CLI application for AI Model Registry."""

import logging
from typing import Optional

import click
import rich_click as rich_click

# Expose ModelRegistry at module scope for tests monkeypatching
from ..registry import ModelRegistry as ModelRegistry  # noqa: F401
from ..logging import LOGGER_NAMESPACE
from .utils import resolve_format

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


def _log_level(verbose: int, quiet: int, debug: bool) -> str:
    """Map verbosity flags to a logging level name."""
    if debug:
        return "DEBUG"
    if verbose > quiet:
        return "DEBUG" if verbose >= 2 else "INFO"
    if quiet > verbose:
        return "ERROR"
    return "WARNING"


class _EchoHandler(logging.Handler):
    """Write log records to the current stderr through click."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def _configure_logging(level: str) -> None:
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)
    if not any(isinstance(handler, _EchoHandler) for handler in logger.handlers):
        handler = _EchoHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


@click.group(cls=rich_click.RichGroup, invoke_without_command=True)
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, is_eager=True, help="Print CLI and library version information.")
@click.pass_context
def app(
    ctx: click.Context,
    format: Optional[str] = None,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
) -> None:
    """AI Model Registry CLI - query, resolve and refresh AI model metadata.

    Examples:
      # List chat models served by OpenAI
      amr models list --provider openai --type chat

      # Resolve an alias to its record and serving provider
      amr models get claude-3-5-haiku

      # Refresh from the shared catalog and provider listings
      amr refresh --timeout 60
    """
    if version:
        from .. import __version__

        click.echo(f"AMR CLI version: {__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    ctx.ensure_object(dict)

    log_level = _log_level(verbose, quiet, debug)
    _configure_logging(log_level)

    ctx.obj.update(
        {
            "format": resolve_format(format),
            "format_explicit": format is not None,
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
        }
    )


# Import and register subcommands after the group is defined
from .commands import models, providers, refresh, snapshot  # noqa: E402

app.add_command(models.models)
app.add_command(providers.providers)
app.add_command(snapshot.snapshot)
app.add_command(refresh.refresh)


if __name__ == "__main__":
    app()
