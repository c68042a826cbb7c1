"""Snapshot inspection, export and import commands for the AMR CLI."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from ...config_paths import (
    ENV_SNAPSHOT_PATH,
    SNAPSHOT_FILENAME,
    get_bundled_snapshot_path,
    get_snapshot_path,
    get_user_data_dir,
)
from ...registry import ModelRegistry
from ..formatters import create_console, format_json, format_snapshot_info_json, format_snapshot_info_table
from ..utils import format_file_size, handle_error


def _file_entry(location: str, path: Path) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"location": location, "path": str(path), "exists": path.is_file()}
    if entry["exists"]:
        size = path.stat().st_size
        entry["size"] = size
        entry["size_formatted"] = format_file_size(size)
    return entry


def get_snapshot_info(registry: ModelRegistry) -> Dict[str, Any]:
    """Describe the snapshot files the registry may load, in resolution order."""
    files: List[Dict[str, Any]] = []
    if registry.config.snapshot_path:
        files.append(_file_entry("configured", registry.config.snapshot_path))
    env_path = os.environ.get(ENV_SNAPSHOT_PATH)
    if env_path:
        files.append(_file_entry("environment", Path(env_path)))
    files.append(_file_entry("user", get_user_data_dir() / SNAPSHOT_FILENAME))
    files.append(_file_entry("bundled", get_bundled_snapshot_path()))

    active: Optional[Path] = registry.config.snapshot_path or get_snapshot_path()
    models = registry.models
    return {
        "active": str(active) if active else None,
        "models": len(models),
        "providers": models.providers(),
        "files": files,
    }


@click.group()
def snapshot() -> None:
    """Inspect, export and import model snapshots."""
    pass


@snapshot.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show snapshot locations and the loaded snapshot size."""
    try:
        registry = ModelRegistry.get_default()
        snapshot_info = get_snapshot_info(registry)

        if ctx.obj["format"] == "json":
            format_json(format_snapshot_info_json(snapshot_info))
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_snapshot_info_table(snapshot_info, console)

    except Exception as e:
        handle_error(e)


@snapshot.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def save(path: Path) -> None:
    """Write the current snapshot to PATH (.json, .yaml or .yml)."""
    try:
        registry = ModelRegistry.get_default()
        written = registry.save(path)
        click.echo(f"Saved {len(registry.models)} models to {written}")

    except Exception as e:
        handle_error(e)


@snapshot.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--persist/--no-persist", default=True, help="Also write the loaded snapshot to the default location.")
def load(path: Path, persist: bool = True) -> None:
    """Load the snapshot at PATH and make it the active snapshot."""
    try:
        registry = ModelRegistry.get_default()
        collection = registry.load(path)
        message = f"Loaded {len(collection)} models from {path}"
        if persist:
            message += f" and saved them to {registry.save()}"
        click.echo(message)

    except Exception as e:
        handle_error(e)
