"""Mapping of shared-catalog (models.dev) entries onto model records.

The catalog payload is keyed by catalog provider id::

    {
      "openai": {
        "id": "openai",
        "models": {
          "gpt-4o": {"id": "gpt-4o", "limit": {"context": 128000}, ...}
        }
      }
    }

Catalog provider ids are translated to registry provider slugs with a
provider map; providers absent from the map are skipped.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .errors import FetchError
from .logging import LogEvent, log_debug, log_warning
from .model_info import ModelRecord, parse_date

CATALOG_SOURCE = "models.dev"

# models.dev provider id -> registry provider slug
DEFAULT_PROVIDER_MAP: Dict[str, str] = {
    "openai": "openai",
    "anthropic": "anthropic",
    "google": "gemini",
    "google-vertex": "vertexai",
    "amazon-bedrock": "bedrock",
    "deepseek": "deepseek",
    "mistral": "mistral",
    "openrouter": "openrouter",
    "perplexity": "perplexity",
    "xai": "xai",
}

# Boolean catalog flags -> capability tags
_CAPABILITY_FLAGS = (
    ("tool_call", "function_calling"),
    ("structured_output", "structured_output"),
    ("reasoning", "reasoning"),
)

# Catalog cost keys -> rate fields of the standard text tier
_COST_FIELDS = (
    ("input", "input_per_million"),
    ("output", "output_per_million"),
    ("cache_read", "cached_input_per_million"),
    ("reasoning", "reasoning_output_per_million"),
)

# Raw upstream fields kept verbatim in metadata
_PASSTHROUGH_FIELDS = (
    "cost",
    "limit",
    "knowledge",
    "last_updated",
    "release_date",
    "open_weights",
    "attachment",
    "temperature",
)


def _start_of_day(value: Any) -> Optional[datetime]:
    parsed = parse_date(value)
    if parsed is None:
        return None
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


def _capabilities(model_data: Mapping[str, Any], input_modalities: List[str]) -> List[str]:
    capabilities = [tag for flag, tag in _CAPABILITY_FLAGS if model_data.get(flag)]
    if "image" in input_modalities:
        capabilities.append("vision")
    return capabilities


def _pricing(cost: Any) -> Dict[str, Any]:
    if not isinstance(cost, Mapping):
        return {}
    standard = {field: cost[key] for key, field in _COST_FIELDS if cost.get(key) is not None}
    if not standard:
        return {}
    return {"text_tokens": {"standard": standard}}


def catalog_model_to_record_data(
    model_data: Mapping[str, Any],
    provider_slug: str,
    provider_id: str,
) -> Dict[str, Any]:
    """Convert one catalog model entry into ``ModelRecord.from_dict`` input.

    Args:
        model_data: The catalog's entry for one model
        provider_slug: Registry provider slug the model belongs to
        provider_id: Catalog provider id the entry was listed under

    Returns:
        A plain mapping of record fields

    Raises:
        ValueError: If ``limit`` or ``modalities`` is not a mapping

    Examples:
        >>> data = catalog_model_to_record_data(
        ...     {"id": "gpt-4o", "limit": {"context": 128000}}, "openai", "openai"
        ... )
        >>> data["context_window"]
        128000
    """
    limit = model_data.get("limit") or {}
    modalities = model_data.get("modalities") or {}
    for key, value in (("limit", limit), ("modalities", modalities)):
        if not isinstance(value, Mapping):
            raise ValueError(f"{key} must be a mapping, got {type(value).__name__}")
    input_modalities = list(modalities.get("input") or [])
    output_modalities = list(modalities.get("output") or [])

    created_at = _start_of_day(model_data.get("release_date")) or _start_of_day(model_data.get("last_updated"))

    metadata: Dict[str, Any] = {"source": CATALOG_SOURCE, "provider_id": provider_id}
    for key in _PASSTHROUGH_FIELDS:
        if key in model_data:
            metadata[key] = model_data[key]

    return {
        "id": model_data.get("id"),
        "name": model_data.get("name") or model_data.get("id"),
        "provider": provider_slug,
        "family": model_data.get("family"),
        "created_at": created_at,
        "knowledge_cutoff": parse_date(model_data.get("knowledge")),
        "context_window": limit.get("context"),
        "max_output_tokens": limit.get("output"),
        "modalities": {"input": input_modalities, "output": output_modalities},
        "capabilities": _capabilities(model_data, input_modalities),
        "pricing": _pricing(model_data.get("cost")),
        "metadata": metadata,
    }


def normalize_catalog(
    payload: Any,
    provider_map: Optional[Mapping[str, str]] = None,
) -> List[ModelRecord]:
    """Normalize a full catalog payload into model records.

    Entries that cannot be converted are skipped with a warning; a payload
    that is not a provider mapping at all is a fetch failure.

    Raises:
        FetchError: If the payload does not have the catalog shape
    """
    if not isinstance(payload, Mapping):
        raise FetchError("Catalog payload must be a mapping of providers", source=CATALOG_SOURCE)

    provider_map = DEFAULT_PROVIDER_MAP if provider_map is None else provider_map
    records: List[ModelRecord] = []

    for provider_id, provider_data in payload.items():
        slug = provider_map.get(provider_id)
        if slug is None:
            log_debug(LogEvent.SOURCE_FETCH, "Skipping unmapped catalog provider", provider_id=provider_id)
            continue
        if not isinstance(provider_data, Mapping):
            log_warning(LogEvent.SOURCE_FETCH, "Skipping malformed catalog provider", provider_id=provider_id)
            continue

        models = provider_data.get("models") or {}
        if isinstance(models, Mapping):
            entries = list(models.values())
        elif isinstance(models, list):
            entries = models
        else:
            log_warning(LogEvent.SOURCE_FETCH, "Skipping malformed catalog model list", provider_id=provider_id)
            continue
        for model_data in entries:
            if not isinstance(model_data, Mapping):
                continue
            try:
                records.append(ModelRecord.from_dict(catalog_model_to_record_data(model_data, slug, provider_id)))
            except (TypeError, ValueError) as e:
                log_warning(
                    LogEvent.SOURCE_FETCH,
                    "Skipping malformed catalog model",
                    provider_id=provider_id,
                    model=model_data.get("id"),
                    error=str(e),
                )

    return records
