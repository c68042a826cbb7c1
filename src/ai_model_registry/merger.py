"""Merging of per-source fetch results into one collection.

Records are keyed by ``(provider, id)``. When several sources disclose the
same key, the whole record from the highest-ranked source is kept; fields
are never combined across sources. Ranking, highest first:

1. sources listed in ``priority``, in list order;
2. provider live listings;
3. catalog sources.

Sources of equal rank are ordered by their position in the result list.
Each winning record keeps the position at which its key was first seen.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .collection import ModelCollection
from .errors import FetchError
from .logging import LogEvent, log_debug, log_info
from .model_info import ModelRecord
from .sources import PROVIDER, SourceResult

Rank = Tuple[int, int, int]


@dataclass(frozen=True)
class MergeResult:
    """Merged collection plus the per-source outcome.

    Attributes:
        models: Deduplicated records
        succeeded: Names of sources that returned data
        failed: Errors of sources that did not
        carried_forward: Number of records kept from the fallback collection
    """

    models: ModelCollection
    succeeded: List[str] = field(default_factory=list)
    failed: List[FetchError] = field(default_factory=list)
    carried_forward: int = 0

    @property
    def ok(self) -> bool:
        """True when at least one source succeeded."""
        return bool(self.succeeded)

    @property
    def failed_sources(self) -> List[str]:
        return [error.source or "unknown" for error in self.failed]


def source_rank(result: SourceResult, position: int, priority: Optional[Sequence[str]] = None) -> Rank:
    """Sort key for a source; lower ranks win conflicts."""
    if priority and result.source in priority:
        return (0, list(priority).index(result.source), position)
    return (1, 0 if result.kind == PROVIDER else 1, position)


def merge(
    results: Sequence[SourceResult],
    priority: Optional[Sequence[str]] = None,
    fallback: Optional[ModelCollection] = None,
) -> MergeResult:
    """Combine source results into one collection.

    Failed sources are reported, never raised. With a ``fallback``
    collection, records of failed provider listings that no successful
    source disclosed are carried over from it.

    Args:
        results: Fetch results in configured source order
        priority: Source names in explicit precedence order, highest first
        fallback: Previous snapshot used to fill in for failed providers

    Returns:
        The merge outcome; ``models`` is empty, never None, when nothing was
        disclosed
    """
    slots: Dict[Tuple[str, str], Tuple[Rank, ModelRecord]] = {}
    succeeded: List[str] = []
    failed: List[FetchError] = []
    replaced = 0

    for position, result in enumerate(results):
        if not result.success:
            failed.append(result.error or FetchError("Unknown failure", source=result.source))
            continue
        succeeded.append(result.source)

        rank = source_rank(result, position, priority)
        for record in result.models:
            current = slots.get(record.key)
            if current is None:
                slots[record.key] = (rank, record)
            elif rank < current[0]:
                # Dict assignment keeps the key's first-seen position
                slots[record.key] = (rank, record)
                replaced += 1

    winners = [record for _, record in slots.values()]

    carried = 0
    if fallback is not None:
        failed_providers = {
            result.source for result in results if not result.success and result.kind == PROVIDER
        }
        for record in fallback:
            if record.provider in failed_providers and record.key not in slots:
                slots[record.key] = ((2, 0, 0), record)
                winners.append(record)
                carried += 1
        if carried:
            log_debug(LogEvent.REGISTRY_REFRESH, "Carried forward records of failed providers", count=carried)

    log_info(
        LogEvent.REGISTRY_REFRESH,
        "Merged source results",
        models=len(winners),
        succeeded=succeeded,
        failed=[error.source for error in failed],
        replaced=replaced,
    )
    return MergeResult(
        models=ModelCollection(winners),
        succeeded=succeeded,
        failed=failed,
        carried_forward=carried,
    )
