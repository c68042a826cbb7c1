"""Core registry functionality for managing AI model metadata.

This module provides the ModelRegistry class, which holds the current
snapshot of model records and owns its lifecycle: lazy load on first access,
explicit refresh from all configured sources, save and reset.

Typical usage:

    from ai_model_registry import get_registry  # singleton helper

    registry = get_registry()
    model, provider = registry.resolve("gpt-4o")

    # or, for a custom configuration
    from ai_model_registry import ModelRegistry, RegistryConfig

    registry = ModelRegistry(RegistryConfig(region="eu-west-1"))
"""

import os
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .aliases import Aliases
from .collection import ModelCollection
from .config_paths import get_snapshot_path, get_user_snapshot_path
from .errors import AllSourcesFailedError, FetchError, MalformedSnapshotError
from .logging import LogEvent, log_debug, log_info, log_warning
from .merger import merge
from .model_info import ModelRecord
from .providers import Provider, load_providers
from .resolver import Resolution, resolve
from .snapshot import Target, load_snapshot, save_snapshot
from .sources import DEFAULT_CATALOG_URL, CatalogSource, SourceAdapter, fetch_all

ENV_CATALOG_URL = "AMR_CATALOG_URL"
ENV_DISABLE_CATALOG = "AMR_DISABLE_CATALOG"
ENV_REGION = "AMR_REGION"

_TRUTHY = ("1", "true", "yes", "on")


class RegistryConfig:
    """Configuration for the model registry."""

    def __init__(
        self,
        snapshot_path: Optional[Union[str, Path]] = None,
        aliases_path: Optional[Union[str, Path]] = None,
        providers_path: Optional[Union[str, Path]] = None,
        catalog_url: Optional[str] = None,
        catalog_enabled: Optional[bool] = None,
        fetch_timeout: float = 30.0,
        refresh_timeout: Optional[float] = None,
        source_priority: Optional[Sequence[str]] = None,
        region: Optional[str] = None,
        retain_failed_providers: bool = True,
        max_workers: int = 8,
    ):
        """Initialize registry configuration.

        Args:
            snapshot_path: Snapshot file to load and save. If None, the
                           default location is used.
            aliases_path: Alias table file. If None, the default location is used.
            providers_path: Provider configuration file. If None, the default
                            location is used.
            catalog_url: Shared catalog endpoint.
            catalog_enabled: Whether refresh fetches the shared catalog.
            fetch_timeout: Seconds allowed for each catalog fetch.
            refresh_timeout: Overall deadline for a refresh, in seconds.
            source_priority: Source names in explicit precedence order.
            region: Routing region used to pick region-qualified model ids.
            retain_failed_providers: Keep a failed provider's previous records.
            max_workers: Number of concurrent fetches during refresh.
        """
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self.aliases_path = Path(aliases_path) if aliases_path else None
        self.providers_path = Path(providers_path) if providers_path else None
        self.catalog_url = catalog_url or os.getenv(ENV_CATALOG_URL) or DEFAULT_CATALOG_URL
        if catalog_enabled is None:
            catalog_enabled = os.getenv(ENV_DISABLE_CATALOG, "").strip().lower() not in _TRUTHY
        self.catalog_enabled = catalog_enabled
        self.source_priority = list(source_priority) if source_priority else []
        self.region = region or os.getenv(ENV_REGION) or None
        self.retain_failed_providers = retain_failed_providers

        # Validate bounds
        if fetch_timeout < 1:
            raise ValueError("fetch_timeout must be at least 1 second")
        if fetch_timeout > 600:
            raise ValueError("fetch_timeout must not exceed 600 seconds")
        self.fetch_timeout = float(fetch_timeout)

        if refresh_timeout is not None and refresh_timeout <= 0:
            raise ValueError("refresh_timeout must be positive")
        self.refresh_timeout = refresh_timeout

        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_workers > 64:
            raise ValueError("max_workers must not exceed 64")
        self.max_workers = max_workers


class RefreshStatus(Enum):
    """Status of a registry refresh operation."""

    UPDATED = "updated"
    PARTIAL = "partial"
    ALREADY_CURRENT = "already_current"


@dataclass
class RefreshResult:
    """Result of a registry refresh operation.

    Attributes:
        success: Whether a new snapshot was installed
        status: Outcome category
        message: Human-readable summary
        models: Number of records in the new snapshot
        succeeded: Names of sources that returned data
        failed: Errors of sources that did not
        carried_forward: Records kept from the previous snapshot
        saved_to: Path the snapshot was written to, if saved
    """

    success: bool
    status: RefreshStatus
    message: str
    models: int = 0
    succeeded: List[str] = field(default_factory=list)
    failed: List[FetchError] = field(default_factory=list)
    carried_forward: int = 0
    saved_to: Optional[Path] = None


class ModelRegistry:
    """Holder of the current model snapshot and its lifecycle.

    The snapshot is loaded lazily on first access: from the persisted
    snapshot if one exists, otherwise by a refresh. A refresh replaces the
    whole snapshot in one reference swap, so readers see either the old or
    the new collection. Concurrent refreshes are serialized; a caller that
    arrives while a refresh is in flight joins it and receives its result.
    """

    _default_instance: Optional["ModelRegistry"] = None
    _instance_lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> "ModelRegistry":
        """Get the default registry instance.

        Prefer :py:meth:`get_default` for clarity; this alias is *not* a
        separate code path.
        """
        return cls.get_default()

    @classmethod
    def get_default(cls) -> "ModelRegistry":
        """Get the default registry instance with standard configuration.

        Returns:
            The default ModelRegistry instance
        """
        with cls._instance_lock:
            if cls._default_instance is None:
                cls._default_instance = cls()
            return cls._default_instance

    @staticmethod
    def cleanup() -> None:
        """Drop the default registry instance."""
        with ModelRegistry._instance_lock:
            ModelRegistry._default_instance = None

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        providers: Optional[Mapping[str, Provider]] = None,
        sources: Optional[Sequence[SourceAdapter]] = None,
        aliases: Optional[Aliases] = None,
    ):
        """Initialize a new registry instance.

        Args:
            config: Configuration for this registry instance. If None, default
                   configuration is used.
            providers: Provider handles; loaded from configuration if None.
            sources: Sources used by refresh; built from the catalog settings
                     and the providers' live listings if None.
            aliases: Alias table; loaded from the configured file if None.
        """
        self.config = config or RegistryConfig()
        self._providers: Optional[Dict[str, Provider]] = dict(providers) if providers is not None else None
        self._sources: Optional[List[SourceAdapter]] = list(sources) if sources is not None else None
        self._aliases = aliases
        self._snapshot: Optional[ModelCollection] = None
        self._state_lock = threading.RLock()
        self._init_lock = threading.RLock()
        self._refresh_guard = threading.Lock()
        self._inflight: Optional["Future[RefreshResult]"] = None

    def __repr__(self) -> str:
        state = f"{len(self._snapshot)} models" if self._snapshot is not None else "uninitialized"
        return f"ModelRegistry({state})"

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def models(self) -> ModelCollection:
        """The current snapshot, loading it on first access."""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._init_lock:
            if self._snapshot is None:
                self._initialize()
            assert self._snapshot is not None
            return self._snapshot

    @property
    def providers(self) -> Dict[str, Provider]:
        """Provider handles keyed by slug."""
        with self._state_lock:
            if self._providers is None:
                self._providers = load_providers(self.config.providers_path)
            return dict(self._providers)

    @property
    def aliases(self) -> Aliases:
        with self._state_lock:
            if self._aliases is None:
                if self.config.aliases_path is not None:
                    self._aliases = Aliases.from_file(self.config.aliases_path)
                else:
                    self._aliases = Aliases.load_default()
            return self._aliases

    def provider(self, slug: str) -> Optional[Provider]:
        return self.providers.get(slug)

    def region_for(self, provider: Optional[str] = None) -> Optional[str]:
        """Routing region for ``provider``: the configured region, else the handle's."""
        if self.config.region:
            return self.config.region
        handle = self.providers.get(provider) if provider else None
        return handle.region if handle else None

    def sources(self) -> List[SourceAdapter]:
        """Sources consulted by :meth:`refresh`, in precedence-tiebreak order."""
        if self._sources is not None:
            return list(self._sources)

        sources: List[SourceAdapter] = []
        if self.config.catalog_enabled:
            sources.append(CatalogSource(self.config.catalog_url, timeout=self.config.fetch_timeout))
        for handle in self.providers.values():
            listing = handle.listing_source()
            if listing is not None:
                sources.append(listing)
        return sources

    def _initialize(self) -> None:
        path = self.config.snapshot_path if self.config.snapshot_path else get_snapshot_path()
        if path is not None and path.is_file():
            collection = load_snapshot(path)
            with self._state_lock:
                # A refresh may have installed a newer snapshot while the file was read
                if self._snapshot is not None:
                    log_debug(LogEvent.MODEL_REGISTRY, "Snapshot installed during lazy load, keeping it")
                    return
                self._swap(collection, reason="load")
            return

        log_info(LogEvent.MODEL_REGISTRY, "No persisted snapshot found, refreshing")
        self.refresh()

    def _swap(self, collection: ModelCollection, reason: str) -> None:
        with self._state_lock:
            self._snapshot = collection
        log_info(LogEvent.MODEL_REGISTRY, "Installed model snapshot", reason=reason, models=len(collection))

    def load(self, source: Optional[Target] = None) -> ModelCollection:
        """Replace the snapshot with a persisted one.

        Args:
            source: Snapshot path or text stream; defaults to the configured
                    or discovered snapshot file

        Returns:
            The loaded collection

        Raises:
            MalformedSnapshotError: If no snapshot exists or it cannot be read
        """
        if source is None:
            source = self.config.snapshot_path or get_snapshot_path()
            if source is None:
                raise MalformedSnapshotError("No snapshot file available")
        collection = load_snapshot(source)
        self._swap(collection, reason="load")
        return collection

    def save(self, target: Optional[Target] = None) -> Optional[Path]:
        """Persist the current snapshot.

        Args:
            target: Destination path or text stream; defaults to the
                    configured snapshot path or the user data directory

        Returns:
            The path written, or None when writing to a stream
        """
        collection = self.models
        if target is None:
            target = self.config.snapshot_path or get_user_snapshot_path()
        save_snapshot(collection, target)
        if hasattr(target, "write"):
            return None
        return Path(target)  # type: ignore[arg-type]

    def reset(self) -> None:
        """Return the registry to the uninitialized state."""
        with self._state_lock:
            self._snapshot = None
        log_debug(LogEvent.MODEL_REGISTRY, "Registry reset")

    def refresh(self, timeout: Optional[float] = None, save: bool = False) -> RefreshResult:
        """Fetch all sources, merge them and install the result.

        A call made while another refresh is running waits for that refresh
        and returns its result instead of starting a second one.

        Args:
            timeout: Overall deadline in seconds; defaults to the configured one
            save: Persist the new snapshot after installing it

        Returns:
            Outcome of the refresh

        Raises:
            AllSourcesFailedError: If no source succeeded; the previous
                snapshot is kept
        """
        with self._refresh_guard:
            inflight = self._inflight
            owner = inflight is None
            if owner:
                inflight = self._inflight = Future()
        assert inflight is not None

        if not owner:
            log_debug(LogEvent.REGISTRY_REFRESH, "Joining refresh in progress")
            return inflight.result()

        try:
            result = self._refresh(timeout, save)
        except BaseException as e:
            inflight.set_exception(e)
            raise
        else:
            inflight.set_result(result)
            return result
        finally:
            with self._refresh_guard:
                self._inflight = None

    def _refresh(self, timeout: Optional[float], save: bool) -> RefreshResult:
        sources = self.sources()
        if timeout is None:
            timeout = self.config.refresh_timeout
        log_info(LogEvent.REGISTRY_REFRESH, "Refreshing models", sources=[s.name for s in sources])

        results = fetch_all(sources, timeout=timeout, max_workers=self.config.max_workers)
        previous = self._snapshot
        merged = merge(
            results,
            priority=self.config.source_priority,
            fallback=previous if self.config.retain_failed_providers else None,
        )

        if not merged.ok:
            message = f"All {len(sources)} sources failed" if sources else "No sources configured"
            log_warning(
                LogEvent.REGISTRY_REFRESH,
                "Refresh failed, keeping previous snapshot",
                failed=merged.failed_sources,
            )
            raise AllSourcesFailedError(message, failed=merged.failed)

        if previous is not None and previous == merged.models:
            status = RefreshStatus.ALREADY_CURRENT
        elif merged.failed:
            status = RefreshStatus.PARTIAL
        else:
            status = RefreshStatus.UPDATED

        self._swap(merged.models, reason="refresh")

        saved_to = self.save() if save else None
        message = f"Loaded {len(merged.models)} models from {len(merged.succeeded)} of {len(sources)} sources"
        if merged.failed:
            message += f" ({', '.join(merged.failed_sources)} failed)"
        return RefreshResult(
            success=True,
            status=status,
            message=message,
            models=len(merged.models),
            succeeded=list(merged.succeeded),
            failed=list(merged.failed),
            carried_forward=merged.carried_forward,
            saved_to=saved_to,
        )

    def find(self, model_id: str, provider: Optional[str] = None) -> ModelRecord:
        """Find a record by id or alias.

        Raises:
            ModelNotFoundError: If no record matches
        """
        return self.models.find(model_id, provider=provider, aliases=self.aliases, region=self.region_for(provider))

    def resolve(self, model_id: str, provider: Optional[str] = None, assume_exists: bool = False) -> Resolution:
        """Resolve a model together with the provider handle that serves it.

        Raises:
            ModelNotFoundError: If the model cannot be found and no default was requested
            UnknownProviderError: If the serving provider has no handle
            ValueError: If ``assume_exists`` is set without a provider
        """
        return resolve(
            self.models,
            model_id,
            self.providers,
            provider=provider,
            assume_exists=assume_exists,
            aliases=self.aliases,
            region=self.region_for(provider),
        )


def get_registry() -> ModelRegistry:
    """Get the model registry singleton instance.

    This is a convenience function for getting the registry instance.

    Returns:
        ModelRegistry: The singleton registry instance
    """
    return ModelRegistry.get_instance()
