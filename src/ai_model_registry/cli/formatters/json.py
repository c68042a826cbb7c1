"""JSON output formatter for CLI."""

import datetime as _dt
import json
import sys
from enum import Enum as _Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, TextIO

from ...collection import ModelCollection
from ...providers import Provider
from ...registry import RefreshResult
from ...resolver import Resolution


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - datetime/date -> ISO 8601 string
    - Enum -> value (fallback to name)
    - Path -> string
    - Fallback -> str(obj)
    """
    if isinstance(obj, (_dt.datetime, _dt.date)):
        return obj.isoformat()
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    if isinstance(obj, Path):
        return str(obj)
    return str(obj)


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        sort_keys=True,
        default=_default_serializer,
    )
    output.write("\n")


def provider_to_dict(provider: Provider) -> Dict[str, Any]:
    """Describe a provider handle without exposing its credential."""
    return {
        "slug": provider.slug,
        "name": provider.name,
        "api_base": provider.api_base,
        "local": provider.local,
        "region": provider.region,
        "credentials": bool(provider.api_key),
        "listing": provider.listing_enabled,
    }


def format_models_list_json(models: ModelCollection) -> Dict[str, Any]:
    """Format a collection for JSON output, keeping collection order."""
    return {"models": models.to_dicts(), "count": len(models)}


def format_model_json(resolution: Resolution) -> Dict[str, Any]:
    """Format a resolved model together with its serving provider."""
    model = resolution.model.to_dict()
    model["type"] = resolution.model.type
    return {"model": model, "provider": provider_to_dict(resolution.provider)}


def format_providers_json(providers: Mapping[str, Provider]) -> Dict[str, Any]:
    """Format provider handles, sorted by slug for stable output."""
    return {
        "providers": [provider_to_dict(providers[slug]) for slug in sorted(providers)],
        "count": len(providers),
    }


def format_refresh_json(result: RefreshResult) -> Dict[str, Any]:
    """Format a refresh outcome."""
    return {
        "success": result.success,
        "status": result.status,
        "message": result.message,
        "models": result.models,
        "succeeded": result.succeeded,
        "failed": [{"source": error.source, "error": str(error)} for error in result.failed],
        "carried_forward": result.carried_forward,
        "saved_to": result.saved_to,
    }


def format_snapshot_info_json(info: Dict[str, Any]) -> Dict[str, Any]:
    """Format snapshot location information."""
    return {
        "snapshot": info,
        "resolution_order": [
            "AMR_SNAPSHOT_PATH environment variable",
            "User data directory (AMR_DATA_DIR overrides it)",
            "Bundled package data",
        ],
    }
