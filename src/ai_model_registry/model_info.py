"""Model metadata records.

A :class:`ModelRecord` holds one model's identity, limits, modalities,
capabilities, pricing and provenance metadata. Records are immutable;
``(provider, id)`` is the key that identifies them.
"""

import copy
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .pricing import Pricing

MODEL_TYPES = ("chat", "embedding", "image", "audio")

DEFAULT_CAPABILITIES = ("function_calling", "streaming", "vision", "structured_output")
DEFAULT_WARNING = "Assuming model exists, capabilities may not be accurate"

_UTC_SUFFIX = re.compile(r"\s*(?:Z|UTC|GMT)$", re.IGNORECASE)
_OFFSET_SUFFIX = re.compile(r"\s*([+-])(\d{2}):?(\d{2})$")
_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def _unique(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    """Normalize a sequence of tags to a tuple of unique strings, keeping order."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    seen: Dict[str, None] = {}
    for value in values:
        seen.setdefault(str(value), None)
    return tuple(seen)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a creation timestamp into an aware UTC datetime.

    Accepts datetimes, dates (start of day), epoch seconds and ISO-like
    strings with ``Z``, ``UTC`` or ``+HHMM`` suffixes. Naive values are UTC.

    Raises:
        ValueError: If a string value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        text = _UTC_SUFFIX.sub("+00:00", value.strip())
        text = _OFFSET_SUFFIX.sub(lambda m: f"{m.group(1)}{m.group(2)}:{m.group(3)}", text)
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Cannot parse timestamp from {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any) -> Optional[date]:
    """Parse a calendar date such as a knowledge cutoff.

    ``YYYY-MM`` values map to the first day of the month.

    Raises:
        ValueError: If a string value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    year_month = _YEAR_MONTH.match(text)
    if year_month:
        return date(int(year_month.group(1)), int(year_month.group(2)), 1)
    return date.fromisoformat(text[:10])


def _non_negative(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e
    if number < 0:
        raise ValueError(f"{name} must be non-negative")
    return number


@dataclass(frozen=True)
class Modalities:
    """Input and output modalities of a model."""

    input: Tuple[str, ...] = ()
    output: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", _unique(self.input))
        object.__setattr__(self, "output", _unique(self.output))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Modalities":
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"modalities must be a mapping, got {type(data).__name__}")
        return cls(input=_unique(data.get("input")), output=_unique(data.get("output")))

    def to_dict(self) -> Dict[str, list]:
        return {"input": list(self.input), "output": list(self.output)}


@dataclass(frozen=True)
class ModelRecord:
    """Metadata for a single model offered by a provider.

    Attributes:
        id: Provider-specific model identifier
        name: Human-readable name
        provider: Provider slug (``openai``, ``bedrock``, ...)
        family: Model family
        created_at: Creation/release instant, always UTC
        knowledge_cutoff: Training data cutoff date
        context_window: Context window in tokens, None when unknown
        max_output_tokens: Maximum output tokens, None when unknown
        modalities: Input/output modalities
        capabilities: Capability tags
        pricing: Nested pricing information
        metadata: Provenance and raw upstream fields, passed through untouched
    """

    id: str
    provider: str
    name: str = ""
    family: Optional[str] = None
    created_at: Optional[datetime] = None
    knowledge_cutoff: Optional[date] = None
    context_window: Optional[int] = None
    max_output_tokens: Optional[int] = None
    modalities: Modalities = field(default_factory=Modalities)
    capabilities: Tuple[str, ...] = ()
    pricing: Pricing = field(default_factory=Pricing)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id or not isinstance(self.id, str):
            raise ValueError("Model id must be a non-empty string")
        if not self.provider or not isinstance(self.provider, str):
            raise ValueError(f"Model '{self.id}' must have a non-empty provider")

        object.__setattr__(self, "name", self.name or self.id)
        object.__setattr__(self, "created_at", parse_timestamp(self.created_at))
        object.__setattr__(self, "knowledge_cutoff", parse_date(self.knowledge_cutoff))
        object.__setattr__(self, "context_window", _non_negative("context_window", self.context_window))
        object.__setattr__(self, "max_output_tokens", _non_negative("max_output_tokens", self.max_output_tokens))
        if not isinstance(self.modalities, Modalities):
            object.__setattr__(self, "modalities", Modalities.from_dict(self.modalities))
        object.__setattr__(self, "capabilities", _unique(self.capabilities))
        if not isinstance(self.pricing, Pricing):
            object.__setattr__(self, "pricing", Pricing.from_dict(self.pricing))
        object.__setattr__(self, "metadata", MappingProxyType(copy.deepcopy(dict(self.metadata or {}))))

    def __hash__(self) -> int:
        return hash(self.key)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelRecord":
        """Build a record from a plain mapping.

        Unknown keys are ignored so that documents written by newer versions
        stay readable.

        Raises:
            ValueError: If required fields are missing or values are invalid
        """
        return cls(
            id=data.get("id") or "",
            provider=data.get("provider") or "",
            name=data.get("name") or "",
            family=data.get("family"),
            created_at=data.get("created_at"),
            knowledge_cutoff=data.get("knowledge_cutoff"),
            context_window=data.get("context_window"),
            max_output_tokens=data.get("max_output_tokens"),
            modalities=Modalities.from_dict(data.get("modalities")),
            capabilities=_unique(data.get("capabilities")),
            pricing=Pricing.from_dict(data.get("pricing")),
            metadata=data.get("metadata") or {},
        )

    @classmethod
    def default(cls, model_id: str, provider: str) -> "ModelRecord":
        """Synthesize a record for a model that is assumed to exist.

        The record carries a broad capability set and a ``warning`` marker in
        its metadata.
        """
        return cls(
            id=model_id,
            name=model_id.replace("-", " ").capitalize(),
            provider=provider,
            capabilities=DEFAULT_CAPABILITIES,
            modalities=Modalities(input=("text", "image"), output=("text",)),
            metadata={"warning": DEFAULT_WARNING},
        )

    @property
    def key(self) -> Tuple[str, str]:
        """The ``(provider, id)`` identity of this record."""
        return (self.provider, self.id)

    @property
    def type(self) -> str:
        """Primary model type derived from the output modalities."""
        output = self.modalities.output
        if "text" not in output:
            if "embeddings" in output:
                return "embedding"
            if "image" in output:
                return "image"
            if "audio" in output:
                return "audio"
        return "chat"

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def max_tokens(self) -> Optional[int]:
        return self.max_output_tokens

    def supports(self, capability: str) -> bool:
        """Check whether the record carries a capability tag."""
        return str(capability) in self.capabilities

    @property
    def supports_vision(self) -> bool:
        return "image" in self.modalities.input or self.supports("vision")

    @property
    def supports_video(self) -> bool:
        return "video" in self.modalities.input

    @property
    def supports_functions(self) -> bool:
        return self.supports("function_calling")

    @property
    def input_price_per_million(self) -> Optional[float]:
        return self.pricing.text_tokens.input

    @property
    def output_price_per_million(self) -> Optional[float]:
        return self.pricing.text_tokens.output

    def to_dict(self) -> Dict[str, Any]:
        """Field-complete plain representation, suitable for JSON/YAML."""
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "family": self.family,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "knowledge_cutoff": self.knowledge_cutoff.isoformat() if self.knowledge_cutoff else None,
            "context_window": self.context_window,
            "max_output_tokens": self.max_output_tokens,
            "modalities": self.modalities.to_dict(),
            "capabilities": list(self.capabilities),
            "pricing": self.pricing.to_dict(),
            "metadata": copy.deepcopy(dict(self.metadata)),
        }
