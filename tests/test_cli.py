"""CLI unit tests for the AMR CLI."""

import json
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, Mock, patch

import pytest
import yaml
from click.testing import CliRunner

from ai_model_registry import __version__
from ai_model_registry.aliases import Aliases
from ai_model_registry.cli import app
from ai_model_registry.cli.utils.helpers import ExitCode, exit_code_for, format_file_size
from ai_model_registry.collection import ModelCollection
from ai_model_registry.errors import (
    AllSourcesFailedError,
    ConfigurationError,
    FetchError,
    MalformedSnapshotError,
    ModelNotFoundError,
    UnknownProviderError,
)
from ai_model_registry.registry import ModelRegistry, RegistryConfig
from ai_model_registry.snapshot import load_snapshot, save_snapshot
from ai_model_registry.sources import PROVIDER, StaticSource

from conftest import make_record


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def registry(tmp_path: Path, sample_records, sample_providers) -> Generator[ModelRegistry, None, None]:
    """Install a registry backed by the sample snapshot as the default instance."""
    snapshot_path = tmp_path / "models.json"
    save_snapshot(ModelCollection(sample_records), snapshot_path)
    registry = ModelRegistry(
        RegistryConfig(snapshot_path=snapshot_path),
        providers=sample_providers,
        sources=[StaticSource("models.dev", [make_record("gpt-4o"), make_record("gpt-5")])],
        aliases=Aliases({"claude-3-5-haiku": {"anthropic": "claude-3-5-haiku-20241022"}}),
    )
    with patch.object(ModelRegistry, "get_default", return_value=registry):
        yield registry


@pytest.fixture
def mock_registry() -> Mock:
    """Create a mock ModelRegistry for testing."""
    mock = Mock()
    mock.refresh.side_effect = AllSourcesFailedError(
        "All 2 sources failed",
        failed=[
            FetchError("Timed out waiting for source models.dev", source="models.dev"),
            FetchError("Invalid API key - check your credentials", source="openai"),
        ],
    )
    return mock


class TestRootCommand:
    """Tests for the root command group."""

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"AMR CLI version: {__version__}"

    def test_no_subcommand_prints_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, [])
        assert result.exit_code == 0
        assert "models" in result.output
        assert "refresh" in result.output

    def test_invalid_format(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--format", "xml", "models", "list"])
        assert result.exit_code == ExitCode.INVALID_USAGE


class TestModelsList:
    """Tests for `amr models list`."""

    def test_list_json(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "models", "list"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["count"] == 7
        assert data["models"][0]["id"] == "gpt-4o"

    def test_filters(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "models", "list", "--provider", "OpenAI", "--type", "chat"])
        assert result.exit_code == 0
        assert [model["id"] for model in json.loads(result.output)["models"]] == ["gpt-4o"]

    def test_family_and_capability(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(
            app,
            ["--format", "json", "models", "list", "--family", "claude-3-5-haiku", "--capability", "function_calling"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["count"] == 1

    def test_list_yaml(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "yaml", "models", "list", "--type", "embedding"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert [model["id"] for model in data["models"]] == ["text-embedding-3-small"]

    def test_list_table(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "table", "--no-color", "models", "list", "--type", "image"])
        assert result.exit_code == 0
        assert "Models (1)" in result.output

    def test_unknown_type(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["models", "list", "--type", "video"])
        assert result.exit_code == 2


class TestModelsGet:
    """Tests for `amr models get`."""

    def test_get_model(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "models", "get", "gpt-4o"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["model"]["id"] == "gpt-4o"
        assert data["model"]["type"] == "chat"
        assert data["provider"]["slug"] == "openai"
        assert "api_key" not in data["provider"]

    def test_get_alias(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "models", "get", "claude-3-5-haiku"])
        assert result.exit_code == 0
        assert json.loads(result.output)["model"]["id"] == "claude-3-5-haiku-20241022"

    def test_table_falls_back_to_json(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "table", "models", "get", "dall-e-3"])
        assert result.exit_code == 0
        assert json.loads(result.output)["model"]["type"] == "image"

    def test_get_yaml_to_file(self, cli_runner: CliRunner, registry: ModelRegistry, tmp_path: Path) -> None:
        output = tmp_path / "model.yaml"
        result = cli_runner.invoke(app, ["--format", "yaml", "models", "get", "gpt-4o", "-o", str(output)])
        assert result.exit_code == 0
        assert yaml.safe_load(output.read_text())["model"]["context_window"] == 128000

    def test_unknown_model(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["models", "get", "gpt-99"])
        assert result.exit_code == ExitCode.MODEL_NOT_FOUND
        assert "Unknown model: gpt-99" in result.output

    def test_assume_exists(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(
            app, ["-q", "--format", "json", "models", "get", "gpt-99", "--provider", "openai", "--assume-exists"]
        )
        assert result.exit_code == 0
        assert "warning" in json.loads(result.output)["model"]["metadata"]

    def test_assume_exists_without_provider(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["models", "get", "gpt-99", "--assume-exists"])
        assert result.exit_code == ExitCode.INVALID_USAGE

    def test_unknown_provider(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["models", "get", "x", "--provider", "nope", "--assume-exists"])
        assert result.exit_code == ExitCode.INVALID_USAGE
        assert "Unknown provider: nope" in result.output


class TestProviders:
    """Tests for `amr providers list`."""

    def test_list_json(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "providers", "list"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [provider["slug"] for provider in data["providers"]] == ["anthropic", "bedrock", "ollama", "openai"]
        ollama = data["providers"][2]
        assert ollama["local"] is True
        assert ollama["credentials"] is False

    def test_list_table(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "table", "providers", "list"])
        assert result.exit_code == 0
        assert "Configured Providers" in result.output

    def test_yaml_not_supported(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "yaml", "providers", "list"])
        assert result.exit_code == ExitCode.INVALID_USAGE


class TestRefresh:
    """Tests for `amr refresh`."""

    def test_refresh_saves_snapshot(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "refresh"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["status"] == "updated"
        assert data["models"] == 2
        assert data["saved_to"] == str(registry.config.snapshot_path)
        assert len(load_snapshot(registry.config.snapshot_path)) == 2

    def test_refresh_no_save(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "refresh", "--no-save"])
        assert result.exit_code == 0
        assert json.loads(result.output)["saved_to"] is None
        assert len(load_snapshot(registry.config.snapshot_path)) == 7

    def test_refresh_table(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        registry._sources = [
            StaticSource("models.dev", [make_record("gpt-5")]),
            StaticSource("anthropic", [], kind=PROVIDER),
        ]
        result = cli_runner.invoke(app, ["--format", "table", "--no-color", "refresh", "--no-save"])
        assert result.exit_code == 0
        assert "Status:" in result.output
        assert "models.dev" in result.output
        assert "anthropic" in result.output

    @patch("ai_model_registry.cli.commands.refresh.ModelRegistry")
    def test_all_sources_failed(
        self, mock_registry_class: MagicMock, cli_runner: CliRunner, mock_registry: Mock
    ) -> None:
        """Every failure is reported and the exit code signals a data source error."""
        mock_registry_class.get_default.return_value = mock_registry

        result = cli_runner.invoke(app, ["refresh"])

        assert result.exit_code == ExitCode.DATA_SOURCE_ERROR
        assert "models.dev: Timed out" in result.output
        assert "openai: Invalid API key" in result.output
        assert "All 2 sources failed" in result.output
        mock_registry.refresh.assert_called_once_with(timeout=None, save=True)

    @patch("ai_model_registry.cli.commands.refresh.ModelRegistry")
    def test_timeout_option(self, mock_registry_class: MagicMock, cli_runner: CliRunner, mock_registry: Mock) -> None:
        mock_registry_class.get_default.return_value = mock_registry
        cli_runner.invoke(app, ["refresh", "--timeout", "2.5", "--no-save"])
        mock_registry.refresh.assert_called_once_with(timeout=2.5, save=False)

    def test_non_positive_timeout(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["refresh", "--timeout", "0"])
        assert result.exit_code == 2


class TestSnapshotCommands:
    """Tests for `amr snapshot`."""

    def test_info_json(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "json", "snapshot", "info"])
        assert result.exit_code == 0
        info = json.loads(result.output)["snapshot"]
        assert info["active"] == str(registry.config.snapshot_path)
        assert info["models"] == 7
        assert info["providers"] == ["openai", "anthropic", "bedrock"]
        locations = [entry["location"] for entry in info["files"]]
        assert locations == ["configured", "user", "bundled"]
        assert info["files"][0]["exists"] is True

    def test_info_table(self, cli_runner: CliRunner, registry: ModelRegistry) -> None:
        result = cli_runner.invoke(app, ["--format", "table", "snapshot", "info"])
        assert result.exit_code == 0
        assert "Snapshot Files" in result.output

    def test_save(self, cli_runner: CliRunner, registry: ModelRegistry, tmp_path: Path) -> None:
        target = tmp_path / "export.yaml"
        result = cli_runner.invoke(app, ["snapshot", "save", str(target)])
        assert result.exit_code == 0
        assert "Saved 7 models" in result.output
        assert len(load_snapshot(target)) == 7

    def test_load_without_persist(self, cli_runner: CliRunner, registry: ModelRegistry, tmp_path: Path) -> None:
        source = tmp_path / "other.json"
        save_snapshot(ModelCollection([make_record("only-one")]), source)
        result = cli_runner.invoke(app, ["snapshot", "load", str(source), "--no-persist"])
        assert result.exit_code == 0
        assert "Loaded 1 models" in result.output
        assert registry.models.keys() == [("openai", "only-one")]
        assert len(load_snapshot(registry.config.snapshot_path)) == 7

    def test_load_and_persist(self, cli_runner: CliRunner, registry: ModelRegistry, tmp_path: Path) -> None:
        source = tmp_path / "other.json"
        save_snapshot(ModelCollection([make_record("only-one")]), source)
        result = cli_runner.invoke(app, ["snapshot", "load", str(source)])
        assert result.exit_code == 0
        assert load_snapshot(registry.config.snapshot_path).keys() == [("openai", "only-one")]

    def test_load_malformed(self, cli_runner: CliRunner, registry: ModelRegistry, tmp_path: Path) -> None:
        source = tmp_path / "broken.json"
        source.write_text("{broken")
        result = cli_runner.invoke(app, ["snapshot", "load", str(source)])
        assert result.exit_code == ExitCode.DATA_SOURCE_ERROR
        assert len(registry.models) == 7


class TestHelpers:
    """Tests for CLI helper functions."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (ModelNotFoundError("missing"), ExitCode.MODEL_NOT_FOUND),
            (AllSourcesFailedError("down"), ExitCode.DATA_SOURCE_ERROR),
            (MalformedSnapshotError("bad"), ExitCode.DATA_SOURCE_ERROR),
            (ConfigurationError("bad"), ExitCode.DATA_SOURCE_ERROR),
            (UnknownProviderError("nope"), ExitCode.INVALID_USAGE),
            (ValueError("bad"), ExitCode.INVALID_USAGE),
            (RuntimeError("boom"), ExitCode.GENERIC_ERROR),
        ],
    )
    def test_exit_code_for(self, error, expected) -> None:
        assert exit_code_for(error) == expected

    def test_format_file_size(self) -> None:
        assert format_file_size(0) == "0 B"
        assert format_file_size(512) == "512.0 B"
        assert format_file_size(2048) == "2.0 KB"
        assert format_file_size(3 * 1024 * 1024) == "3.0 MB"
