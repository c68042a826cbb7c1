"""Rich table formatter for CLI output."""

import sys
from typing import Any, Dict, Mapping, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ...collection import ModelCollection
from ...providers import Provider
from ...registry import RefreshResult


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    # Let Rich use the actual terminal width to avoid truncating headers
    return Console(file=output, no_color=no_color)


def _format_tokens(value: Optional[int]) -> str:
    """Represent token counts in thousands (K) and millions (M)."""
    if value is None:
        return "N/A"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.0f}K"
    return str(value)


def _format_price(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"${value:g}"


def _mark(flag: bool) -> Text:
    return Text("✓", style="green") if flag else Text("✗", style="red")


def format_models_table(models: ModelCollection, console: Optional[Console] = None) -> None:
    """Format models as a Rich table.

    Args:
        models: Collection to display
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title=f"Models ({len(models)})", show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Provider", style="yellow")
    table.add_column("Type")
    table.add_column("Context\nWindow", justify="right", no_wrap=True)
    table.add_column("Max\nOutput", justify="right", no_wrap=True)
    table.add_column("Input\n$/M", justify="right", no_wrap=True)
    table.add_column("Output\n$/M", justify="right", no_wrap=True)
    table.add_column("Capabilities", style="dim")

    for model in models:
        table.add_row(
            model.id,
            model.provider,
            model.type,
            _format_tokens(model.context_window),
            _format_tokens(model.max_output_tokens),
            _format_price(model.input_price_per_million),
            _format_price(model.output_price_per_million),
            ", ".join(model.capabilities),
        )

    console.print(table)


def format_providers_table(providers: Mapping[str, Provider], console: Optional[Console] = None) -> None:
    """Format provider handles as a Rich table.

    Args:
        providers: Provider handles keyed by slug
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Configured Providers", show_header=True, header_style="bold magenta")

    table.add_column("Provider", style="cyan")
    table.add_column("Name")
    table.add_column("API Base", style="dim")
    table.add_column("Local", justify="center")
    table.add_column("Credentials", justify="center")
    table.add_column("Live Listing", justify="center")

    for slug in sorted(providers):
        provider = providers[slug]
        table.add_row(
            slug,
            provider.name,
            provider.api_base or "N/A",
            _mark(provider.local),
            _mark(bool(provider.api_key)),
            _mark(provider.listing_enabled),
        )

    console.print(table)


def format_refresh_table(result: RefreshResult, console: Optional[Console] = None) -> None:
    """Format a refresh outcome with one row per source."""
    if console is None:
        console = create_console()

    console.print(f"[bold]Status:[/bold] {result.status.value}")
    console.print(f"[bold]Models:[/bold] {result.models}")
    if result.carried_forward:
        console.print(f"[bold]Carried forward:[/bold] {result.carried_forward}")
    if result.saved_to:
        console.print(f"[bold]Saved to:[/bold] {result.saved_to}")
    console.print()

    table = Table(title="Sources", show_header=True, header_style="bold magenta")
    table.add_column("Source", style="cyan")
    table.add_column("Result", justify="center")
    table.add_column("Error", style="dim")

    for source in result.succeeded:
        table.add_row(source, Text("ok", style="green"), "")
    for error in result.failed:
        table.add_row(error.source or "unknown", Text("failed", style="red"), str(error))

    console.print(table)


def format_snapshot_info_table(info: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Format snapshot location information as a Rich table."""
    if console is None:
        console = create_console()

    console.print(f"[bold]Active snapshot:[/bold] {info.get('active') or 'N/A'}")
    console.print(f"[bold]Models loaded:[/bold] {info.get('models', 0)}")
    console.print()

    table = Table(title="Snapshot Files", show_header=True, header_style="bold magenta")
    table.add_column("Location", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Exists", justify="center")
    table.add_column("Size", justify="right")

    for entry in info.get("files", []):
        table.add_row(
            entry["location"],
            entry["path"],
            _mark(entry["exists"]),
            entry.get("size_formatted") or "N/A",
        )

    console.print(table)
