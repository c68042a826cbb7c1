"""Configuration path handling for the model registry.

This module resolves snapshot, alias and provider configuration files. User
files live in the platformdirs data/config directories; bundled defaults ship
inside the package ``data`` directory.
"""

import os
from pathlib import Path
from typing import Optional

import platformdirs

# Application name used for directory paths
APP_NAME = "ai-model-registry"

# Environment variable names
ENV_DATA_DIR = "AMR_DATA_DIR"
ENV_SNAPSHOT_PATH = "AMR_SNAPSHOT_PATH"
ENV_ALIASES_PATH = "AMR_ALIASES_PATH"
ENV_PROVIDERS_PATH = "AMR_PROVIDERS_PATH"

# Default filenames
SNAPSHOT_FILENAME = "models.json"
ALIASES_FILENAME = "aliases.yaml"
PROVIDERS_FILENAME = "providers.yaml"


def get_package_data_dir() -> Path:
    """Get the path to the package's bundled data directory."""
    return Path(__file__).parent / "data"


def get_user_data_dir() -> Path:
    """Get the user data directory, respecting the AMR_DATA_DIR override."""
    custom_dir = os.getenv(ENV_DATA_DIR)
    if custom_dir:
        return Path(custom_dir)
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_user_config_dir() -> Path:
    """Get the path to the user's config directory for this application."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def ensure_user_data_dir_exists() -> Path:
    """Ensure that the user data directory exists.

    Returns:
        The user data directory

    Raises:
        OSError: If the directory cannot be created
        PermissionError: If the directory exists but is not writable
    """
    user_dir = get_user_data_dir()
    user_dir.mkdir(parents=True, exist_ok=True)

    if not os.access(user_dir, os.W_OK):
        raise PermissionError(f"Data directory exists but is not writable: {user_dir}")
    return user_dir


def get_user_snapshot_path() -> Path:
    """Path where refreshed snapshots are saved by default."""
    env_path = os.environ.get(ENV_SNAPSHOT_PATH)
    if env_path:
        return Path(env_path)
    return get_user_data_dir() / SNAPSHOT_FILENAME


def get_bundled_snapshot_path() -> Path:
    """Path of the snapshot shipped with the package."""
    return get_package_data_dir() / SNAPSHOT_FILENAME


def get_snapshot_path() -> Optional[Path]:
    """Get the snapshot to load on first access.

    Resolution order: AMR_SNAPSHOT_PATH, user data directory, bundled package
    data.

    Returns:
        Path to an existing snapshot, or None if none is available
    """
    # 1. Check environment variable
    env_path = os.environ.get(ENV_SNAPSHOT_PATH)
    if env_path and Path(env_path).is_file():
        return Path(env_path)

    # 2. Check user data directory
    user_path = get_user_data_dir() / SNAPSHOT_FILENAME
    if user_path.is_file():
        return user_path

    # 3. Fall back to package directory
    bundled = get_bundled_snapshot_path()
    if bundled.is_file():
        return bundled
    return None


def get_aliases_path() -> Path:
    """Get the path to the alias table, respecting AMR_ALIASES_PATH."""
    env_path = os.environ.get(ENV_ALIASES_PATH)
    if env_path and Path(env_path).is_file():
        return Path(env_path)

    user_path = get_user_config_dir() / ALIASES_FILENAME
    if user_path.is_file():
        return user_path

    return get_package_data_dir() / ALIASES_FILENAME


def get_providers_path() -> Optional[Path]:
    """Get the user's provider configuration file, if any."""
    env_path = os.environ.get(ENV_PROVIDERS_PATH)
    if env_path and Path(env_path).is_file():
        return Path(env_path)

    user_path = get_user_config_dir() / PROVIDERS_FILENAME
    if user_path.is_file():
        return user_path
    return None
