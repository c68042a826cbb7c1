"""Pricing data structures for model registry.

Pricing is nested by token class (``text_tokens``, ``audio_tokens``, ...),
then by tier (``standard``, ``batch``, ...), then by rate field. All rates are
USD per million tokens and may be absent.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

RATE_FIELDS = (
    "input_per_million",
    "output_per_million",
    "cached_input_per_million",
    "reasoning_output_per_million",
)

# Short keys accepted on input and mapped to the canonical rate fields
_RATE_ALIASES = {
    "input": "input_per_million",
    "output": "output_per_million",
    "cached_input": "cached_input_per_million",
    "reasoning_output": "reasoning_output_per_million",
}


def _rate(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class PricingTier:
    """Rates for one pricing tier of a token class."""

    input_per_million: Optional[float] = None
    output_per_million: Optional[float] = None
    cached_input_per_million: Optional[float] = None
    reasoning_output_per_million: Optional[float] = None

    def __post_init__(self) -> None:  # noqa: D401
        """Basic validation ensuring non-negative rates."""
        for name in RATE_FIELDS:
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricingTier":
        """Build a tier from a mapping, accepting short rate keys."""
        rates: Dict[str, Optional[float]] = {}
        for key, value in data.items():
            name = _RATE_ALIASES.get(key, key)
            if name in RATE_FIELDS:
                rates[name] = _rate(value)
        return cls(**rates)

    def to_dict(self) -> Dict[str, float]:
        """Return the populated rates only."""
        return {name: getattr(self, name) for name in RATE_FIELDS if getattr(self, name) is not None}


@dataclass(frozen=True)
class TokenPricing:
    """Tiers of one token class."""

    tiers: Mapping[str, PricingTier] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiers", MappingProxyType(dict(self.tiers)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenPricing":
        """Build from ``{tier: {rate: value}}``.

        A flat mapping of rates is treated as the ``standard`` tier.
        """
        if any(key in RATE_FIELDS or key in _RATE_ALIASES for key in data):
            return cls({"standard": PricingTier.from_dict(data)})
        tiers = {}
        for tier, rates in data.items():
            if isinstance(rates, Mapping):
                parsed = PricingTier.from_dict(rates)
                if parsed.to_dict():
                    tiers[tier] = parsed
        return cls(tiers)

    def tier(self, name: str) -> PricingTier:
        """Get a tier, or an empty tier if it is not priced."""
        return self.tiers.get(name) or PricingTier()

    @property
    def standard(self) -> PricingTier:
        return self.tier("standard")

    @property
    def batch(self) -> PricingTier:
        return self.tier("batch")

    @property
    def input(self) -> Optional[float]:
        return self.standard.input_per_million

    @property
    def output(self) -> Optional[float]:
        return self.standard.output_per_million

    @property
    def cached_input(self) -> Optional[float]:
        return self.standard.cached_input_per_million

    @property
    def reasoning_output(self) -> Optional[float]:
        return self.standard.reasoning_output_per_million

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        result = {}
        for name, tier in self.tiers.items():
            rates = tier.to_dict()
            if rates:
                result[name] = rates
        return result


@dataclass(frozen=True)
class Pricing:
    """Pricing of a model across token classes."""

    token_classes: Mapping[str, TokenPricing] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "token_classes", MappingProxyType(dict(self.token_classes)))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Pricing":
        """Build from ``{token_class: {tier: {rate: value}}}``."""
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"pricing must be a mapping, got {type(data).__name__}")
        token_classes = {}
        for name, tiers in data.items():
            if isinstance(tiers, Mapping):
                parsed = TokenPricing.from_dict(tiers)
                if parsed.tiers:
                    token_classes[name] = parsed
        return cls(token_classes)

    def get(self, token_class: str) -> TokenPricing:
        """Get a token class, or an empty one if it is not priced."""
        return self.token_classes.get(token_class) or TokenPricing()

    @property
    def text_tokens(self) -> TokenPricing:
        return self.get("text_tokens")

    @property
    def audio_tokens(self) -> TokenPricing:
        return self.get("audio_tokens")

    @property
    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, float]]]:
        result = {}
        for name, token_pricing in self.token_classes.items():
            tiers = token_pricing.to_dict()
            if tiers:
                result[name] = tiers
        return result
