"""Static alias table.

Aliases map a user-facing shorthand to the canonical model id of each
provider that serves it::

    claude-3-5-haiku:
      anthropic: claude-3-5-haiku-20241022
      bedrock: anthropic.claude-3-5-haiku-20241022-v1:0

The table is fixed when it is loaded; it is consulted only after an exact
id lookup fails.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .config_paths import get_aliases_path
from .errors import ConfigurationError
from .logging import LogEvent, log_debug


class Aliases:
    """Alias-to-canonical-id mapping, optionally scoped per provider."""

    def __init__(self, table: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._table: Dict[str, Dict[str, str]] = {
            str(alias): {str(provider): str(target) for provider, target in targets.items()}
            for alias, targets in (table or {}).items()
        }

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Aliases":
        """Load an alias table from a YAML (or JSON) file.

        Raises:
            ConfigurationError: If the file cannot be read or has the wrong shape
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not load alias table: {e}", path=str(path)) from e

        if data is None:
            return cls()
        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise ConfigurationError(
                "Alias table must map aliases to {provider: model_id} mappings",
                path=str(path),
            )
        return cls(data)

    @classmethod
    def load_default(cls) -> "Aliases":
        """Load the alias table from the configured or bundled location."""
        path = get_aliases_path()
        if not path.is_file():
            return cls()
        return cls.from_file(path)

    def __contains__(self, alias: object) -> bool:
        return alias in self._table

    def __len__(self) -> int:
        return len(self._table)

    def lookup(self, model_id: str, provider: Optional[str] = None) -> Optional[str]:
        """Return the canonical id for an alias, or None if it is not aliased."""
        targets = self._table.get(model_id)
        if not targets:
            return None
        if provider is not None:
            return targets.get(provider)
        return next(iter(targets.values()))

    def resolve(self, model_id: str, provider: Optional[str] = None) -> str:
        """Return the canonical id for ``model_id``, or ``model_id`` itself."""
        target = self.lookup(model_id, provider)
        if target is None:
            return model_id
        log_debug(
            LogEvent.MODEL_RESOLUTION,
            "Resolved alias",
            alias=model_id,
            target=target,
            provider=provider,
        )
        return target

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {alias: dict(targets) for alias, targets in self._table.items()}
