"""Shared fixtures for the model registry tests."""

import os
from pathlib import Path
from typing import Generator, List

import pytest

from ai_model_registry import config_paths
from ai_model_registry.collection import ModelCollection
from ai_model_registry.model_info import ModelRecord
from ai_model_registry.providers import Provider
from ai_model_registry.registry import ModelRegistry

_PROVIDER_ENV_VARS = ("AWS_REGION", "OLLAMA_API_BASE")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Keep tests away from the real user directories and credentials.

    Returns:
        The temporary user data directory
    """
    for name in list(os.environ):
        if name.startswith("AMR_") or name.endswith("_API_KEY") or name in _PROVIDER_ENV_VARS:
            monkeypatch.delenv(name, raising=False)

    data_dir = tmp_path / "user-data"
    config_dir = tmp_path / "user-config"
    monkeypatch.setenv(config_paths.ENV_DATA_DIR, str(data_dir))
    monkeypatch.setattr(config_paths.platformdirs, "user_config_dir", lambda *args, **kwargs: str(config_dir))

    ModelRegistry.cleanup()
    yield data_dir
    ModelRegistry.cleanup()


def make_record(model_id: str, provider: str = "openai", **fields) -> ModelRecord:
    """Build a chat model record with sensible defaults."""
    fields.setdefault("modalities", {"input": ["text"], "output": ["text"]})
    return ModelRecord(id=model_id, provider=provider, **fields)


@pytest.fixture
def sample_records() -> List[ModelRecord]:
    """A small multi-provider record set."""
    return [
        make_record(
            "gpt-4o",
            family="gpt-4o",
            context_window=128000,
            max_output_tokens=16384,
            modalities={"input": ["text", "image"], "output": ["text"]},
            capabilities=["function_calling", "structured_output"],
            pricing={"text_tokens": {"standard": {"input_per_million": 2.5, "output_per_million": 10.0}}},
        ),
        make_record(
            "text-embedding-3-small",
            family="text-embedding-3",
            modalities={"input": ["text"], "output": ["embeddings"]},
        ),
        make_record(
            "dall-e-3",
            family="dall-e",
            modalities={"input": ["text"], "output": ["image"]},
        ),
        make_record(
            "claude-3-5-haiku-20241022",
            provider="anthropic",
            family="claude-3-5-haiku",
            capabilities=["function_calling"],
        ),
        make_record(
            "meta.llama4-maverick-17b-instruct-v1:0",
            provider="bedrock",
            family="llama4",
        ),
        make_record(
            "us.meta.llama4-maverick-17b-instruct-v1:0",
            provider="bedrock",
            family="llama4",
            metadata={"inference_types": ["INFERENCE_PROFILE"]},
        ),
        make_record(
            "eu.meta.llama4-maverick-17b-instruct-v1:0",
            provider="bedrock",
            family="llama4",
            metadata={"inference_types": ["INFERENCE_PROFILE"]},
        ),
    ]


@pytest.fixture
def sample_collection(sample_records: List[ModelRecord]) -> ModelCollection:
    return ModelCollection(sample_records)


@pytest.fixture
def sample_providers() -> dict:
    """Provider handles for the sample records."""
    return {
        "openai": Provider("openai", "OpenAI", api_base="https://api.openai.com/v1"),
        "anthropic": Provider("anthropic", "Anthropic"),
        "bedrock": Provider("bedrock", "AWS Bedrock"),
        "ollama": Provider("ollama", "Ollama", api_base="http://localhost:11434/v1", local=True),
    }
