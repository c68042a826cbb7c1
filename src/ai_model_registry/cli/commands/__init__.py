"""CLI command modules."""

from . import models, providers, refresh, snapshot

__all__ = ["models", "providers", "refresh", "snapshot"]
