"""Registry of AI model metadata across providers.

This package keeps an immutable, queryable collection of model records
(identity, capabilities, pricing, context limits) gathered from a shared
model catalog and each configured provider's live model listing. It resolves
user-supplied model ids, including aliases and region-qualified variants, to
exactly one record and the provider that serves it.
"""

# Version of the package
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("ai-model-registry")
except PackageNotFoundError:
    # Running from a source checkout that has not been installed
    __version__ = "0.0.0"

# Import main components for easier access
from .aliases import Aliases
from .collection import ModelCollection
from .errors import (
    AllSourcesFailedError,
    APIError,
    ConfigurationError,
    FetchError,
    MalformedSnapshotError,
    ModelNotFoundError,
    ModelRegistryError,
    UnknownProviderError,
)
from .merger import MergeResult, merge
from .model_info import Modalities, ModelRecord
from .pricing import Pricing, PricingTier, TokenPricing
from .providers import Provider, load_providers
from .registry import ModelRegistry, RefreshResult, RefreshStatus, RegistryConfig, get_registry
from .resolver import Resolution, find_model, resolve
from .snapshot import load_snapshot, save_snapshot
from .sources import CatalogSource, OpenAICompatibleSource, SourceAdapter, SourceResult, StaticSource, fetch_all

# Define public API
__all__ = [
    # Core registry
    "ModelRegistry",
    "RegistryConfig",
    "RefreshResult",
    "RefreshStatus",
    "get_registry",
    # Records and queries
    "ModelRecord",
    "Modalities",
    "ModelCollection",
    "Pricing",
    "PricingTier",
    "TokenPricing",
    # Resolution
    "Aliases",
    "Provider",
    "Resolution",
    "find_model",
    "resolve",
    "load_providers",
    # Refresh pipeline
    "SourceAdapter",
    "SourceResult",
    "CatalogSource",
    "OpenAICompatibleSource",
    "StaticSource",
    "fetch_all",
    "merge",
    "MergeResult",
    # Persistence
    "load_snapshot",
    "save_snapshot",
    # Errors
    "ModelRegistryError",
    "ModelNotFoundError",
    "AllSourcesFailedError",
    "MalformedSnapshotError",
    "FetchError",
    "ConfigurationError",
    "UnknownProviderError",
    "APIError",
]
