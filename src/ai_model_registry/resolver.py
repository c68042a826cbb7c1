"""Model identifier resolution.

Resolution maps a requested ``(model_id, provider)`` pair to exactly one
record, in priority order:

1. exact id match, scoped to ``provider`` when one is given;
2. among exact matches, a region-qualified inference-profile variant
   (``us.meta.llama...`` for ``meta.llama...``) wins over the unqualified id,
   because that is the identifier the provider accepts at call time;
3. only when nothing matched exactly, the alias table is consulted and the
   lookup retried with the canonical id;
4. otherwise :class:`ModelNotFoundError` is raised, unless the caller asked
   for a synthesized default record.
"""

from typing import TYPE_CHECKING, List, Mapping, NamedTuple, Optional, Tuple

from .errors import ModelNotFoundError, UnknownProviderError
from .logging import LogEvent, log_debug, log_warning
from .model_info import ModelRecord

if TYPE_CHECKING:
    from .aliases import Aliases
    from .collection import ModelCollection
    from .providers import Provider

INFERENCE_PROFILE = "INFERENCE_PROFILE"
GLOBAL_PREFIX = "global"

# Region name prefix -> inference profile qualifier
_REGION_QUALIFIERS = {
    "ap": "apac",
}


class Resolution(NamedTuple):
    """A resolved model and the provider handle that serves it."""

    model: ModelRecord
    provider: "Provider"


def has_inference_profile(model: ModelRecord) -> bool:
    """Check whether a record is marked as a resolved inference profile."""
    metadata = model.metadata
    if metadata.get("inference_profile"):
        return True
    types = metadata.get("inference_types") or metadata.get("inference_types_supported") or ()
    if isinstance(types, str):
        types = [types]
    return any(str(value).upper() == INFERENCE_PROFILE for value in types)


def region_qualifiers(region: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Inference-profile qualifiers usable from ``region``, most specific first.

    Returns None when no region is configured, meaning any qualifier is
    acceptable.
    """
    if not region:
        return None
    region = region.lower()
    if region.startswith("us-gov-"):
        return ("us-gov", GLOBAL_PREFIX)
    head = region.split("-", 1)[0]
    return (_REGION_QUALIFIERS.get(head, head), GLOBAL_PREFIX)


def _qualifier(model: ModelRecord, model_id: str) -> Optional[str]:
    """Return the routing qualifier if ``model`` is a qualified variant of ``model_id``."""
    suffix = f".{model_id}"
    if not model.id.endswith(suffix):
        return None
    qualifier = model.id[: -len(suffix)]
    if not qualifier or "." in qualifier:
        return None
    return qualifier


def _exact_match(
    scope: "ModelCollection",
    model_id: str,
    region: Optional[str] = None,
) -> Optional[ModelRecord]:
    exact: Optional[ModelRecord] = None
    qualified: List[Tuple[str, ModelRecord]] = []

    for model in scope:
        if model.id == model_id:
            if exact is None:
                exact = model
            continue
        qualifier = _qualifier(model, model_id)
        if qualifier and has_inference_profile(model):
            qualified.append((qualifier, model))

    if qualified:
        allowed = region_qualifiers(region)
        if allowed is None:
            return qualified[0][1]
        for wanted in allowed:
            for qualifier, model in qualified:
                if qualifier == wanted:
                    return model
    return exact


def find_model(
    models: "ModelCollection",
    model_id: str,
    provider: Optional[str] = None,
    aliases: Optional["Aliases"] = None,
    region: Optional[str] = None,
) -> ModelRecord:
    """Find the single record for ``model_id``.

    Args:
        models: Collection to search
        model_id: Requested model id or alias
        provider: Restrict the search to this provider
        aliases: Alias table consulted when no exact match exists
        region: Provider region used to pick region-qualified variants

    Returns:
        The matching record

    Raises:
        ValueError: If ``model_id`` is empty
        ModelNotFoundError: If neither an exact match nor an alias matched
    """
    if not model_id:
        raise ValueError("Model id must be a non-empty string")

    scope = models.by_provider(provider) if provider else models

    match = _exact_match(scope, model_id, region)
    if match is not None:
        return match

    if aliases is not None:
        canonical = aliases.lookup(model_id, provider)
        if canonical and canonical != model_id:
            match = _exact_match(scope, canonical, region)
            if match is not None:
                log_debug(
                    LogEvent.MODEL_RESOLUTION,
                    "Resolved model through alias",
                    model=model_id,
                    canonical=canonical,
                    provider=match.provider,
                )
                return match

    if provider:
        message = f"Unknown model: {model_id} for provider: {provider}"
    else:
        message = f"Unknown model: {model_id}"
    raise ModelNotFoundError(message, model=model_id, provider=provider)


def resolve(
    models: "ModelCollection",
    model_id: str,
    providers: Mapping[str, "Provider"],
    provider: Optional[str] = None,
    assume_exists: bool = False,
    aliases: Optional["Aliases"] = None,
    region: Optional[str] = None,
) -> Resolution:
    """Resolve a model and its serving provider in one step.

    The provider handle is always looked up from the matched record's
    ``provider`` field, so a model id is never paired with a provider that
    does not serve it.

    Args:
        models: Collection to search
        model_id: Requested model id or alias
        providers: Provider handles keyed by slug
        provider: Restrict the search to this provider
        assume_exists: Synthesize a default record instead of failing;
            requires ``provider``. Local providers imply this flag.
        aliases: Alias table consulted when no exact match exists
        region: Provider region used to pick region-qualified variants

    Returns:
        The resolved model and provider

    Raises:
        ValueError: If ``assume_exists`` is set without a provider
        ModelNotFoundError: If the model cannot be found and no default was requested
        UnknownProviderError: If there is no handle for the resolved provider
    """
    requested_handle = providers.get(provider) if provider else None
    if requested_handle is not None and requested_handle.local:
        assume_exists = True

    if assume_exists:
        if not provider:
            raise ValueError("Provider must be specified if assume_exists is true")
        if requested_handle is None:
            raise UnknownProviderError(provider)
        try:
            model = find_model(models, model_id, provider=provider, aliases=aliases, region=region)
        except ModelNotFoundError:
            model = ModelRecord.default(model_id, provider)
            log_warning(
                LogEvent.MODEL_RESOLUTION,
                "Assuming model exists, capabilities may not be accurate",
                model=model_id,
                provider=provider,
            )
    else:
        model = find_model(models, model_id, provider=provider, aliases=aliases, region=region)

    handle = providers.get(model.provider)
    if handle is None:
        raise UnknownProviderError(model.provider)
    return Resolution(model, handle)
