"""Model inspection commands for the AMR CLI."""

from typing import Optional

import click
import yaml

from ...model_info import MODEL_TYPES
from ...registry import ModelRegistry
from ..formatters import (
    create_console,
    format_json,
    format_model_json,
    format_models_list_json,
    format_models_table,
)
from ..utils import ExitCode, handle_error, output_option, provider_option, validate_format_support


@click.group()
def models() -> None:
    """List and inspect models."""
    pass


@models.command(name="list")
@provider_option
@click.option("--family", type=str, help="Only models of this family.")
@click.option("--type", "model_type", type=click.Choice(MODEL_TYPES), help="Only models of this type.")
@click.option("--capability", type=str, help="Only models with this capability tag (e.g. function_calling).")
@click.pass_context
def list_models(
    ctx: click.Context,
    provider: Optional[str] = None,
    family: Optional[str] = None,
    model_type: Optional[str] = None,
    capability: Optional[str] = None,
) -> None:
    """List models, optionally filtered."""
    try:
        registry = ModelRegistry.get_default()
        selected = registry.models

        if provider:
            selected = selected.by_provider(provider)
        if family:
            selected = selected.by_family(family)
        if model_type == "chat":
            selected = selected.chat_models()
        elif model_type == "embedding":
            selected = selected.embedding_models()
        elif model_type == "image":
            selected = selected.image_models()
        elif model_type == "audio":
            selected = selected.audio_models()
        if capability:
            selected = selected.with_capability(capability)

        format_type = ctx.obj["format"]
        if format_type == "json":
            format_json(format_models_list_json(selected))
        elif format_type == "yaml":
            click.echo(yaml.safe_dump(format_models_list_json(selected), sort_keys=True).rstrip())
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_models_table(selected, console)

    except Exception as e:
        handle_error(e)


@models.command()
@click.argument("model_id", type=str)
@provider_option
@click.option("--assume-exists", is_flag=True, help="Synthesize a default record if the model is unknown.")
@output_option
@click.pass_context
def get(
    ctx: click.Context,
    model_id: str,
    provider: Optional[str] = None,
    assume_exists: bool = False,
    output: Optional[str] = None,
) -> None:
    """Resolve a model id or alias and show the record with its provider."""
    try:
        format_type = validate_format_support(ctx.obj["format"], ["json", "yaml"], "models get", ctx.obj)
    except click.BadParameter as e:
        handle_error(e, ExitCode.INVALID_USAGE)
        return

    try:
        registry = ModelRegistry.get_default()
        resolution = registry.resolve(model_id, provider=provider, assume_exists=assume_exists)
        payload = format_model_json(resolution)

        if output:
            with open(output, "w", encoding="utf-8") as output_file:
                if format_type == "yaml":
                    output_file.write(yaml.safe_dump(payload, default_flow_style=False, sort_keys=True))
                else:
                    format_json(payload, output_file)
        elif format_type == "yaml":
            click.echo(yaml.safe_dump(payload, default_flow_style=False, sort_keys=True).rstrip())
        else:
            format_json(payload)

    except Exception as e:
        handle_error(e)
