"""Snapshot persistence.

A snapshot is a JSON (default) or YAML document holding every record of a
collection in order::

    {"schema_version": "1.0.0", "models": [{"id": ..., "provider": ...}, ...]}

The format is chosen from the file suffix (``.yaml``/``.yml`` for YAML).
Reading also accepts a bare list of records. Unknown record fields are
ignored; anything else that cannot be read raises
:class:`MalformedSnapshotError`, never a partial collection.
"""

import json
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any, Dict, Optional, Union

import semver
import yaml

from .collection import ModelCollection
from .errors import MalformedSnapshotError
from .logging import LogEvent, log_debug, log_error, log_info
from .model_info import ModelRecord

JSON = "json"
YAML = "yaml"
FORMATS = (JSON, YAML)

Target = Union[str, Path, IO[str]]


class SchemaVersionValidator:
    """Checks snapshot schema versions against the supported ranges using semver."""

    SUPPORTED_SCHEMA_VERSIONS = {
        "1.x": ">=1.0.0,<2.0.0",
    }

    CURRENT_SCHEMA_VERSION = "1.0.0"

    @classmethod
    def _check_version_range(cls, version: str, range_spec: str) -> bool:
        """Check if a version satisfies a range like ``">=1.0.0,<2.0.0"``."""
        try:
            parsed_version = semver.Version.parse(version)
        except (TypeError, ValueError):
            return False

        # Pre-releases of a supported version are judged by their base version
        if parsed_version.prerelease:
            parsed_version = parsed_version.finalize_version()
        conditions = [cond.strip() for cond in range_spec.split(",")]
        return all(parsed_version.match(condition) for condition in conditions)

    @classmethod
    def normalize(cls, version: Any) -> str:
        """Normalize short versions (``1``, ``1.0``) to full semver strings.

        Raises:
            ValueError: If the version cannot be normalized
        """
        version_str = str(version).strip()
        parts = version_str.split(".")
        if len(parts) in (1, 2) and all(part.isdigit() for part in parts):
            version_str = ".".join(parts + ["0"] * (3 - len(parts)))
        semver.Version.parse(version_str)
        return version_str

    @classmethod
    def is_compatible_schema(cls, version: str) -> bool:
        """Check if a schema version can be read by this registry."""
        return any(cls._check_version_range(version, spec) for spec in cls.SUPPORTED_SCHEMA_VERSIONS.values())


def _default_serializer(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _plain(value: Any) -> Any:
    """Convert a record mapping to plain YAML-safe types."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def format_for_path(path: Union[str, Path]) -> str:
    """Pick the document format from a file suffix."""
    suffix = Path(path).suffix.lower()
    return YAML if suffix in (".yaml", ".yml") else JSON


def to_document(collection: ModelCollection) -> Dict[str, Any]:
    """Build the snapshot document for ``collection``."""
    return {
        "schema_version": SchemaVersionValidator.CURRENT_SCHEMA_VERSION,
        "models": collection.to_dicts(),
    }


def from_document(data: Any, path: Optional[str] = None) -> ModelCollection:
    """Rebuild a collection from a parsed snapshot document.

    Raises:
        MalformedSnapshotError: If the document or any record is invalid
    """
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        version = data.get("schema_version", data.get("version"))
        if version is not None:
            try:
                version_str = SchemaVersionValidator.normalize(version)
            except ValueError as e:
                raise MalformedSnapshotError(f"Invalid schema version: {version}", path=path) from e
            if not SchemaVersionValidator.is_compatible_schema(version_str):
                log_error(LogEvent.SNAPSHOT_IO, "Incompatible snapshot schema version", version=version_str, path=path)
                raise MalformedSnapshotError(f"Unsupported schema version: {version_str}", path=path)
        entries = data.get("models")
        if not isinstance(entries, list):
            raise MalformedSnapshotError("Snapshot must contain a 'models' list", path=path)
    else:
        raise MalformedSnapshotError("Snapshot must be a mapping or a list of records", path=path)

    records = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise MalformedSnapshotError(f"Record {index} is not a mapping", path=path)
        try:
            records.append(ModelRecord.from_dict(entry))
        except (TypeError, ValueError) as e:
            raise MalformedSnapshotError(f"Invalid record {index}: {e}", path=path) from e
    return ModelCollection(records)


def dumps(collection: ModelCollection, fmt: str = JSON) -> str:
    """Serialize a collection deterministically (sorted keys, record order kept)."""
    document = to_document(collection)
    if fmt == YAML:
        return yaml.safe_dump(_plain(document), sort_keys=True, allow_unicode=True, default_flow_style=False)
    if fmt == JSON:
        return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False, default=_default_serializer) + "\n"
    raise ValueError(f"Unknown snapshot format '{fmt}', expected one of {FORMATS}")


def loads(text: str, fmt: str = JSON, path: Optional[str] = None) -> ModelCollection:
    """Parse a serialized snapshot.

    Raises:
        MalformedSnapshotError: If the text cannot be parsed
    """
    try:
        data = yaml.safe_load(text) if fmt == YAML else json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise MalformedSnapshotError(f"Could not parse snapshot: {e}", path=path) from e
    return from_document(data, path=path)


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def save_snapshot(collection: ModelCollection, target: Target, fmt: Optional[str] = None) -> None:
    """Write ``collection`` to a file path or an open text stream.

    File writes are atomic: readers see either the old or the new file.

    Args:
        collection: Records to persist
        target: Destination path or writable text stream
        fmt: ``json`` or ``yaml``; inferred from the path suffix by default
    """
    if hasattr(target, "write"):
        target.write(dumps(collection, fmt or JSON))  # type: ignore[union-attr]
        return

    path = Path(target)  # type: ignore[arg-type]
    _atomic_write(path, dumps(collection, fmt or format_for_path(path)))
    log_info(LogEvent.SNAPSHOT_IO, "Saved snapshot", path=str(path), models=len(collection))


def load_snapshot(source: Target, fmt: Optional[str] = None) -> ModelCollection:
    """Read a collection from a file path or an open text stream.

    Raises:
        MalformedSnapshotError: If the source is unreadable or invalid
    """
    if hasattr(source, "read"):
        return loads(source.read(), fmt or JSON)  # type: ignore[union-attr]

    path = Path(source)  # type: ignore[arg-type]
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedSnapshotError(f"Could not read snapshot: {e}", path=str(path)) from e

    collection = loads(text, fmt or format_for_path(path), path=str(path))
    log_debug(LogEvent.SNAPSHOT_IO, "Loaded snapshot", path=str(path), models=len(collection))
    return collection
