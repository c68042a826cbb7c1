"""CLI formatters package."""

from .json import (
    format_json,
    format_model_json,
    format_models_list_json,
    format_providers_json,
    format_refresh_json,
    format_snapshot_info_json,
    provider_to_dict,
)
from .table import (
    create_console,
    format_models_table,
    format_providers_table,
    format_refresh_table,
    format_snapshot_info_table,
)

__all__ = [
    "format_json",
    "format_model_json",
    "format_models_list_json",
    "format_providers_json",
    "format_refresh_json",
    "format_snapshot_info_json",
    "provider_to_dict",
    "create_console",
    "format_models_table",
    "format_providers_table",
    "format_refresh_table",
    "format_snapshot_info_table",
]
