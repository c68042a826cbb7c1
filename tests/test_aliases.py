"""Tests for the static alias table."""

from pathlib import Path

import pytest

from ai_model_registry import config_paths
from ai_model_registry.aliases import Aliases
from ai_model_registry.errors import ConfigurationError


def test_lookup_scoped_and_unscoped() -> None:
    aliases = Aliases({"claude-3-5-haiku": {"anthropic": "claude-3-5-haiku-20241022", "bedrock": "b-id"}})
    assert aliases.lookup("claude-3-5-haiku", "bedrock") == "b-id"
    assert aliases.lookup("claude-3-5-haiku") == "claude-3-5-haiku-20241022"
    assert aliases.lookup("claude-3-5-haiku", "openai") is None
    assert aliases.lookup("unknown") is None


def test_resolve_falls_back_to_input() -> None:
    aliases = Aliases({"gpt-4o-latest": {"openai": "gpt-4o"}})
    assert aliases.resolve("gpt-4o-latest") == "gpt-4o"
    assert aliases.resolve("gpt-4o") == "gpt-4o"


def test_from_file(tmp_path: Path) -> None:
    path = tmp_path / "aliases.yaml"
    path.write_text("gemini-flash:\n  gemini: gemini-2.0-flash\n")
    aliases = Aliases.from_file(path)
    assert "gemini-flash" in aliases
    assert len(aliases) == 1
    assert aliases.to_dict() == {"gemini-flash": {"gemini": "gemini-2.0-flash"}}


def test_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "aliases.yaml"
    path.write_text("")
    assert len(Aliases.from_file(path)) == 0


def test_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "aliases.yaml"
    path.write_text("gemini-flash: gemini-2.0-flash\n")
    with pytest.raises(ConfigurationError) as exc_info:
        Aliases.from_file(path)
    assert exc_info.value.path == str(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Could not load alias table"):
        Aliases.from_file(tmp_path / "missing.yaml")


def test_load_default_uses_bundled_table() -> None:
    aliases = Aliases.load_default()
    assert aliases.lookup("claude-3-5-haiku", "bedrock") == "anthropic.claude-3-5-haiku-20241022-v1:0"


def test_load_default_respects_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("fast:\n  openai: gpt-4o-mini\n")
    monkeypatch.setenv(config_paths.ENV_ALIASES_PATH, str(path))
    aliases = Aliases.load_default()
    assert aliases.to_dict() == {"fast": {"openai": "gpt-4o-mini"}}
