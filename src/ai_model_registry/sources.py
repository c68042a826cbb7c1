"""Model metadata sources and concurrent fan-out.

A source is anything that can produce a list of :class:`ModelRecord`
candidates: the shared catalog service, a provider's live model listing or
an in-memory list. Each fetch either succeeds with records or fails with a
:class:`FetchError`; failures are recorded in a :class:`SourceResult` and
never raised out of :func:`fetch_all`.
"""

import time
from abc import ABC, abstractmethod
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import requests

from .error_classification import raise_for_status
from .errors import FetchError, ModelRegistryError
from .logging import LogEvent, log_debug, log_warning
from .model_info import ModelRecord
from .normalization import CATALOG_SOURCE, normalize_catalog

if TYPE_CHECKING:
    from .providers import Provider

CATALOG = "catalog"
PROVIDER = "provider"
SOURCE_KINDS = (CATALOG, PROVIDER)

DEFAULT_CATALOG_URL = "https://models.dev/api.json"
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 8


class SourceAdapter(ABC):
    """A single, independently failable origin of model metadata.

    Attributes:
        name: Source identity, used for precedence and reporting
        kind: ``catalog`` or ``provider``; provider listings outrank the catalog
        timeout: Seconds allowed for one fetch
    """

    name: str
    kind: str
    timeout: float = DEFAULT_FETCH_TIMEOUT

    @abstractmethod
    def fetch(self) -> List[ModelRecord]:
        """Fetch the source's records.

        Raises:
            FetchError: If the source is unreachable or returned malformed data
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, kind={self.kind!r})"


@dataclass(frozen=True)
class SourceResult:
    """Outcome of one source fetch."""

    source: str
    kind: str
    models: Tuple[ModelRecord, ...] = ()
    error: Optional[FetchError] = None
    elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, adapter: SourceAdapter, models: Iterable[ModelRecord], elapsed: float = 0.0) -> "SourceResult":
        return cls(source=adapter.name, kind=adapter.kind, models=tuple(models), elapsed=elapsed)

    @classmethod
    def failure(cls, adapter: SourceAdapter, error: FetchError, elapsed: float = 0.0) -> "SourceResult":
        return cls(source=adapter.name, kind=adapter.kind, error=error, elapsed=elapsed)


def _error_message(response: requests.Response) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or "")
        if error:
            return str(error)
        if body.get("message"):
            return str(body["message"])
    return ""


def _get_json(url: str, source: str, timeout: float, headers: Optional[Mapping[str, str]] = None) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises:
        FetchError: On transport failures and undecodable bodies
        APIError: Classified provider error for non-2xx responses
    """
    try:
        response = requests.get(url, headers=dict(headers or {}), timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"Request to {url} failed: {e}", source=source) from e

    if not response.ok:
        raise_for_status(response.status_code, _error_message(response), response=response)

    try:
        return response.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON from {url}: {e}", source=source) from e


class CatalogSource(SourceAdapter):
    """The shared third-party catalog (models.dev)."""

    kind = CATALOG

    def __init__(
        self,
        url: str = DEFAULT_CATALOG_URL,
        provider_map: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        name: str = CATALOG_SOURCE,
    ) -> None:
        self.url = url
        self.provider_map = provider_map
        self.timeout = timeout
        self.name = name

    def fetch(self) -> List[ModelRecord]:
        payload = _get_json(self.url, self.name, self.timeout, headers={"Accept": "application/json"})
        return normalize_catalog(payload, self.provider_map)


class OpenAICompatibleSource(SourceAdapter):
    """A provider's live ``GET /models`` listing in the OpenAI response shape."""

    kind = PROVIDER

    def __init__(self, provider: "Provider") -> None:
        if not provider.api_base:
            raise ValueError(f"Provider '{provider.slug}' has no api_base")
        self.provider = provider
        self.name = provider.slug
        self.timeout = provider.timeout

    @property
    def url(self) -> str:
        return f"{self.provider.api_base.rstrip('/')}/models"

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.provider.api_key:
            headers["Authorization"] = f"Bearer {self.provider.api_key}"
        return headers

    def fetch(self) -> List[ModelRecord]:
        payload = _get_json(self.url, self.name, self.timeout, headers=self._headers())
        entries = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(entries, list):
            raise FetchError("Model listing must contain a 'data' list", source=self.name)

        records = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("id"):
                raise FetchError(f"Malformed model entry: {entry!r}", source=self.name)
            metadata = {"source": PROVIDER, "provider_id": self.name}
            if entry.get("owned_by"):
                metadata["owned_by"] = entry["owned_by"]
            records.append(
                ModelRecord(
                    id=str(entry["id"]),
                    provider=self.name,
                    created_at=entry.get("created"),
                    modalities={"input": ["text"], "output": ["text"]},
                    metadata=metadata,
                )
            )
        return records


class StaticSource(SourceAdapter):
    """In-memory source, used for bundled data and tests."""

    def __init__(
        self,
        name: str,
        records: Iterable[ModelRecord] = (),
        kind: str = CATALOG,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        if kind not in SOURCE_KINDS:
            raise ValueError(f"Unknown source kind '{kind}', expected one of {SOURCE_KINDS}")
        self.name = name
        self.kind = kind
        self.timeout = timeout
        self._records = tuple(records)

    def fetch(self) -> List[ModelRecord]:
        return list(self._records)


def _run(adapter: SourceAdapter) -> List[ModelRecord]:
    """Run one fetch, turning every failure into a FetchError."""
    try:
        return adapter.fetch()
    except FetchError as e:
        if e.source is None:
            e.source = adapter.name
        raise
    except ModelRegistryError as e:
        raise FetchError(str(e), source=adapter.name) from e
    except Exception as e:
        raise FetchError(f"{type(e).__name__}: {e}", source=adapter.name) from e


def _completed(adapter: SourceAdapter, future: "Future[List[ModelRecord]]", started: float) -> SourceResult:
    elapsed = time.monotonic() - started
    try:
        return SourceResult.ok(adapter, future.result(), elapsed)
    except FetchError as e:
        return SourceResult.failure(adapter, e, elapsed)


def _timed_out(adapter: SourceAdapter, started: float) -> SourceResult:
    return SourceResult.failure(
        adapter,
        FetchError(f"Timed out waiting for source {adapter.name}", source=adapter.name),
        time.monotonic() - started,
    )


def fetch_all(
    sources: Sequence[SourceAdapter],
    timeout: Optional[float] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[SourceResult]:
    """Fetch every source concurrently.

    At most ``max_workers`` fetches run at once; the rest wait for a free
    slot. Each source gets its own deadline of ``source.timeout`` seconds,
    measured from the moment its fetch starts, so time spent queued behind
    slower sources is not charged to it. A caller ``timeout`` caps every
    deadline. Sources still running or queued when their deadline passes
    are recorded as failures and abandoned, and their slot is given to the
    next queued source.

    Args:
        sources: Sources to fetch
        timeout: Overall deadline in seconds, or None
        max_workers: Maximum number of fetches in flight

    Returns:
        One result per source, in the order of ``sources``
    """
    if not sources:
        return []

    # One thread per source: an abandoned fetch keeps its thread, not its slot
    executor = ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="amr-fetch")
    limit = max(1, max_workers)
    started = time.monotonic()
    overall = started + timeout if timeout is not None else None
    queued = deque(enumerate(sources))
    running: Dict["Future[List[ModelRecord]]", Tuple[int, SourceAdapter, float]] = {}
    results: Dict[int, SourceResult] = {}
    try:
        while queued or running:
            now = time.monotonic()
            while queued and len(running) < limit and (overall is None or now < overall):
                index, adapter = queued.popleft()
                deadline = now + adapter.timeout
                if overall is not None:
                    deadline = min(deadline, overall)
                running[executor.submit(_run, adapter)] = (index, adapter, deadline)

            if not running:
                # Overall deadline passed before these could start
                for index, adapter in queued:
                    results[index] = _timed_out(adapter, started)
                break

            next_deadline = min(deadline for _, _, deadline in running.values())
            wait(list(running), timeout=max(0.0, next_deadline - time.monotonic()), return_when=FIRST_COMPLETED)

            now = time.monotonic()
            for future, (index, adapter, deadline) in list(running.items()):
                if future.done():
                    del running[future]
                    results[index] = _completed(adapter, future, started)
                elif now >= deadline:
                    del running[future]
                    future.cancel()
                    results[index] = _timed_out(adapter, started)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    ordered = [results[index] for index in range(len(sources))]
    for result in ordered:
        if result.success:
            log_debug(LogEvent.SOURCE_FETCH, "Fetched source", source=result.source, count=len(result.models))
        else:
            log_warning(LogEvent.SOURCE_FETCH, "Source fetch failed", source=result.source, error=str(result.error))
    return ordered
