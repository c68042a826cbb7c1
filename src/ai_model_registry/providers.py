"""Provider handles and provider configuration.

A :class:`Provider` describes where a provider's models are served and how
its live model listing can be reached. The provider table is built from a
built-in default table, overlaid with the user's ``providers.yaml``::

    providers:
      openai:
        api_key_env: OPENAI_API_KEY
      ollama:
        api_base: http://gpu-box:11434/v1
        local: true
        listing: true

Credentials are read from the environment variables named in the table.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

import yaml

from .config_paths import get_providers_path
from .errors import ConfigurationError
from .logging import LogEvent, log_debug

if TYPE_CHECKING:
    from .sources import OpenAICompatibleSource

DEFAULT_TIMEOUT = 30.0

DEFAULT_PROVIDERS: Dict[str, Dict[str, Any]] = {
    "openai": {
        "name": "OpenAI",
        "api_base": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
    "anthropic": {"name": "Anthropic", "api_key_env": "ANTHROPIC_API_KEY"},
    "gemini": {"name": "Google Gemini", "api_key_env": "GEMINI_API_KEY"},
    "bedrock": {"name": "AWS Bedrock", "region_env": "AWS_REGION"},
    "mistral": {
        "name": "Mistral",
        "api_base": "https://api.mistral.ai/v1",
        "api_key_env": "MISTRAL_API_KEY",
    },
    "deepseek": {
        "name": "DeepSeek",
        "api_base": "https://api.deepseek.com",
        "api_key_env": "DEEPSEEK_API_KEY",
    },
    "openrouter": {
        "name": "OpenRouter",
        "api_base": "https://openrouter.ai/api/v1",
        "api_key_env": "OPENROUTER_API_KEY",
    },
    "xai": {"name": "xAI", "api_base": "https://api.x.ai/v1", "api_key_env": "XAI_API_KEY"},
    "perplexity": {"name": "Perplexity", "api_key_env": "PERPLEXITY_API_KEY"},
    "ollama": {
        "name": "Ollama",
        "api_base": "http://localhost:11434/v1",
        "api_base_env": "OLLAMA_API_BASE",
        "local": True,
    },
}


@dataclass(frozen=True)
class Provider:
    """Handle for a provider that serves models.

    Attributes:
        slug: Provider identifier used in model records
        name: Display name
        api_base: Base URL of the OpenAI-compatible API, if any
        api_key: Credential for the live listing
        local: Local runtimes accept any model id
        region: Routing region (used for region-qualified model ids)
        timeout: Fetch timeout in seconds for the live listing
        listing: Force the live listing on or off; None means "when credentials exist"
    """

    slug: str
    name: str = ""
    api_base: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)
    local: bool = False
    region: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    listing: Optional[bool] = None

    def __post_init__(self) -> None:
        if not self.slug:
            raise ValueError("Provider slug must be non-empty")
        object.__setattr__(self, "name", self.name or self.slug)

    @property
    def listing_enabled(self) -> bool:
        """Whether a live model listing should be fetched for this provider."""
        if not self.api_base:
            return False
        if self.listing is not None:
            return self.listing
        return bool(self.api_key) and not self.local

    def listing_source(self) -> Optional["OpenAICompatibleSource"]:
        """Build the live listing source, or None if listing is disabled."""
        if not self.listing_enabled:
            return None
        from .sources import OpenAICompatibleSource

        return OpenAICompatibleSource(self)


def _provider_from_config(
    slug: str,
    config: Mapping[str, Any],
    environ: Mapping[str, str],
) -> Provider:
    api_key = config.get("api_key")
    if not api_key and config.get("api_key_env"):
        api_key = environ.get(str(config["api_key_env"])) or None

    api_base = config.get("api_base")
    if config.get("api_base_env") and environ.get(str(config["api_base_env"])):
        api_base = environ[str(config["api_base_env"])]

    region = config.get("region")
    if not region and config.get("region_env"):
        region = environ.get(str(config["region_env"])) or None

    listing = config.get("listing")
    return Provider(
        slug=slug,
        name=str(config.get("name") or slug),
        api_base=str(api_base).rstrip("/") if api_base else None,
        api_key=str(api_key) if api_key else None,
        local=bool(config.get("local", False)),
        region=str(region) if region else None,
        timeout=float(config.get("timeout", DEFAULT_TIMEOUT)),
        listing=None if listing is None else bool(listing),
    )


def load_providers(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Provider]:
    """Build the provider table.

    Args:
        path: Provider configuration file; defaults to the user's providers.yaml
        environ: Environment used for credentials (defaults to os.environ)

    Returns:
        Provider handles keyed by slug

    Raises:
        ConfigurationError: If the configuration file is unreadable or malformed
    """
    environ = os.environ if environ is None else environ
    configs: Dict[str, Dict[str, Any]] = {slug: dict(cfg) for slug, cfg in DEFAULT_PROVIDERS.items()}

    config_path = Path(path) if path else get_providers_path()
    if config_path is not None:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not load provider configuration: {e}", path=str(config_path)) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Provider configuration must be a mapping", path=str(config_path))
        entries = data.get("providers", data)
        if not isinstance(entries, dict):
            raise ConfigurationError("'providers' must be a mapping", path=str(config_path))

        for slug, overrides in entries.items():
            if overrides is None:
                overrides = {}
            if not isinstance(overrides, dict):
                raise ConfigurationError(f"Provider '{slug}' must be a mapping", path=str(config_path))
            configs.setdefault(str(slug), {}).update(overrides)
        log_debug(LogEvent.MODEL_REGISTRY, "Loaded provider configuration", path=str(config_path))

    try:
        return {slug: _provider_from_config(slug, cfg, environ) for slug, cfg in configs.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid provider configuration: {e}",
            path=str(config_path) if config_path else None,
        ) from e
