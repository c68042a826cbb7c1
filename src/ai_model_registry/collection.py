"""Immutable, chainable collection of model records."""

from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple, TypeVar, overload

from .model_info import ModelRecord

if TYPE_CHECKING:
    from .aliases import Aliases

K = TypeVar("K", bound=Hashable)


class ModelCollection:
    """An ordered, immutable sequence of :class:`ModelRecord` objects.

    Every filter returns a new collection and keeps the order of the
    original, so filters can be chained in any order with the same result:

        >>> models.by_provider("openai").chat_models()
        >>> models.chat_models().by_provider("openai")
    """

    __slots__ = ("_models",)

    def __init__(self, models: Iterable[ModelRecord] = ()) -> None:
        """Initialize the collection.

        Args:
            models: Records in merge order
        """
        self._models: Tuple[ModelRecord, ...] = tuple(models)

    def __iter__(self) -> Iterator[ModelRecord]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __bool__(self) -> bool:
        return bool(self._models)

    @overload
    def __getitem__(self, index: int) -> ModelRecord: ...

    @overload
    def __getitem__(self, index: slice) -> "ModelCollection": ...

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return ModelCollection(self._models[index])
        return self._models[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModelCollection):
            return NotImplemented
        return self._models == other._models

    def __hash__(self) -> int:
        return hash(tuple(model.key for model in self._models))

    def __repr__(self) -> str:
        return f"ModelCollection({len(self._models)} models)"

    def all(self) -> List[ModelRecord]:
        """Return the records as a fresh list."""
        return list(self._models)

    def first(self) -> Optional[ModelRecord]:
        return self._models[0] if self._models else None

    def keys(self) -> List[Tuple[str, str]]:
        """``(provider, id)`` keys in collection order."""
        return [model.key for model in self._models]

    def providers(self) -> List[str]:
        """Distinct provider slugs in order of first appearance."""
        return list(dict.fromkeys(model.provider for model in self._models))

    def select(self, predicate: Callable[[ModelRecord], bool]) -> "ModelCollection":
        """Keep the records for which ``predicate`` is true."""
        return ModelCollection(model for model in self._models if predicate(model))

    def reject(self, predicate: Callable[[ModelRecord], bool]) -> "ModelCollection":
        """Drop the records for which ``predicate`` is true."""
        return ModelCollection(model for model in self._models if not predicate(model))

    def group_by(self, key_fn: Callable[[ModelRecord], K]) -> Dict[K, "ModelCollection"]:
        """Partition the records by ``key_fn``, preserving order within each group."""
        groups: Dict[K, List[ModelRecord]] = {}
        for model in self._models:
            groups.setdefault(key_fn(model), []).append(model)
        return {key: ModelCollection(members) for key, members in groups.items()}

    def by_provider(self, provider: str) -> "ModelCollection":
        return self.select(lambda model: model.provider == str(provider))

    def by_family(self, family: str) -> "ModelCollection":
        return self.select(lambda model: model.family == str(family))

    def chat_models(self) -> "ModelCollection":
        return self.select(lambda model: model.type == "chat")

    def embedding_models(self) -> "ModelCollection":
        return self.select(lambda model: model.type == "embedding" or "embeddings" in model.modalities.output)

    def audio_models(self) -> "ModelCollection":
        return self.select(lambda model: model.type == "audio" or "audio" in model.modalities.output)

    def image_models(self) -> "ModelCollection":
        return self.select(lambda model: model.type == "image" or "image" in model.modalities.output)

    def with_capability(self, capability: str) -> "ModelCollection":
        return self.select(lambda model: model.supports(capability))

    def find(
        self,
        model_id: str,
        provider: Optional[str] = None,
        aliases: Optional["Aliases"] = None,
        region: Optional[str] = None,
    ) -> ModelRecord:
        """Find a single record by id, see :func:`ai_model_registry.resolver.find_model`.

        Raises:
            ModelNotFoundError: If no record matches
        """
        from .resolver import find_model

        return find_model(self, model_id, provider=provider, aliases=aliases, region=region)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [model.to_dict() for model in self._models]
