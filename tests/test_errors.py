"""Tests for error classes."""

from ai_model_registry.errors import (
    AllSourcesFailedError,
    APIError,
    ConfigurationError,
    FetchError,
    MalformedSnapshotError,
    ModelNotFoundError,
    ModelRegistryError,
    RateLimitError,
    UnknownProviderError,
)


class TestErrorClasses:
    """Tests for all error classes."""

    def test_model_registry_error(self) -> None:
        """Test ModelRegistryError base class."""
        error = ModelRegistryError("Base error message")
        assert str(error) == "Base error message"

    def test_model_not_found_error(self) -> None:
        """Test ModelNotFoundError."""
        error = ModelNotFoundError("Unknown model: gpt-99", model="gpt-99")
        assert error.message == "Unknown model: gpt-99"
        assert str(error) == "Unknown model: gpt-99"
        assert error.model == "gpt-99"
        assert error.provider is None
        assert isinstance(error, ModelRegistryError)

        # With provider
        error = ModelNotFoundError("Unknown model", model="gpt-99", provider="openai")
        assert error.provider == "openai"

    def test_configuration_error(self) -> None:
        """Test ConfigurationError."""
        error = ConfigurationError("Bad config", path="/tmp/providers.yaml")
        assert error.message == "Bad config"
        assert error.path == "/tmp/providers.yaml"
        assert isinstance(error, ModelRegistryError)

    def test_unknown_provider_error(self) -> None:
        """Test UnknownProviderError."""
        error = UnknownProviderError("acme")
        assert str(error) == "Unknown provider: acme"
        assert error.provider == "acme"
        assert isinstance(error, ConfigurationError)

    def test_malformed_snapshot_error(self) -> None:
        """Test MalformedSnapshotError."""
        error = MalformedSnapshotError("Could not parse snapshot", path="models.json")
        assert error.path == "models.json"
        assert isinstance(error, ModelRegistryError)

    def test_fetch_error(self) -> None:
        """Test FetchError."""
        error = FetchError("Timed out", source="models.dev")
        assert str(error) == "Timed out"
        assert error.source == "models.dev"

    def test_all_sources_failed_error(self) -> None:
        """Test AllSourcesFailedError."""
        failures = [FetchError("down", source="models.dev"), FetchError("401", source="openai")]
        error = AllSourcesFailedError("All 2 sources failed", failed=failures)
        assert error.failed == failures
        assert AllSourcesFailedError("No sources configured").failed == []

    def test_api_error(self) -> None:
        """Test APIError and its subclasses."""
        response = object()
        error = RateLimitError("slow down", status_code=429, response=response)
        assert error.status_code == 429
        assert error.response is response
        assert isinstance(error, APIError)
        assert isinstance(error, ModelRegistryError)
