"""Tests for merging source results."""

from ai_model_registry.collection import ModelCollection
from ai_model_registry.errors import FetchError
from ai_model_registry.merger import merge, source_rank
from ai_model_registry.sources import CATALOG, PROVIDER, SourceResult

from conftest import make_record


def ok(source, kind, *records):
    return SourceResult(source=source, kind=kind, models=tuple(records))


def failed(source, kind, message="unreachable"):
    return SourceResult(source=source, kind=kind, error=FetchError(message, source=source))


class TestMerge:
    """Tests for combining per-source results."""

    def test_catalog_with_failed_provider(self) -> None:
        """A catalog success and a provider failure give the catalog records and one failure."""
        result = merge(
            [
                ok("models.dev", CATALOG, make_record("gpt-4o"), make_record("claude-3-5-haiku", "anthropic")),
                failed("openai", PROVIDER),
            ]
        )
        assert result.ok
        assert result.models.keys() == [("openai", "gpt-4o"), ("anthropic", "claude-3-5-haiku")]
        assert result.succeeded == ["models.dev"]
        assert result.failed_sources == ["openai"]

    def test_successful_empty_sources(self) -> None:
        """Sources that succeed with no records give a valid empty collection."""
        result = merge([ok("models.dev", CATALOG), ok("openai", PROVIDER)])
        assert result.ok
        assert isinstance(result.models, ModelCollection)
        assert len(result.models) == 0
        assert result.failed == []

    def test_all_failed(self) -> None:
        result = merge([failed("models.dev", CATALOG), failed("openai", PROVIDER)])
        assert not result.ok
        assert len(result.models) == 0
        assert result.failed_sources == ["models.dev", "openai"]

    def test_no_results(self) -> None:
        result = merge([])
        assert not result.ok
        assert len(result.models) == 0

    def test_provider_listing_wins_conflict(self) -> None:
        """Provider records replace catalog records whole, never field by field."""
        catalog_record = make_record("gpt-4o", context_window=128000, capabilities=["vision"])
        provider_record = make_record("gpt-4o", metadata={"source": "provider"})
        result = merge([ok("models.dev", CATALOG, catalog_record), ok("openai", PROVIDER, provider_record)])

        assert len(result.models) == 1
        winner = result.models[0]
        assert winner is provider_record
        assert winner.context_window is None
        assert winner.capabilities == ()

    def test_provider_wins_regardless_of_order(self) -> None:
        catalog_record = make_record("gpt-4o", context_window=128000)
        provider_record = make_record("gpt-4o")
        result = merge([ok("openai", PROVIDER, provider_record), ok("models.dev", CATALOG, catalog_record)])
        assert result.models[0] is provider_record

    def test_explicit_priority(self) -> None:
        catalog_record = make_record("gpt-4o", context_window=128000)
        provider_record = make_record("gpt-4o")
        result = merge(
            [ok("models.dev", CATALOG, catalog_record), ok("openai", PROVIDER, provider_record)],
            priority=["models.dev"],
        )
        assert result.models[0] is catalog_record

    def test_equal_rank_earlier_source_wins(self) -> None:
        first = make_record("gpt-4o", context_window=1)
        second = make_record("gpt-4o", context_window=2)
        result = merge([ok("catalog-a", CATALOG, first), ok("catalog-b", CATALOG, second)])
        assert result.models[0] is first

    def test_winner_keeps_first_seen_position(self) -> None:
        result = merge(
            [
                ok("models.dev", CATALOG, make_record("a"), make_record("b"), make_record("c")),
                ok("openai", PROVIDER, make_record("c"), make_record("b", metadata={"source": "provider"})),
            ]
        )
        assert [model.id for model in result.models] == ["a", "b", "c"]
        assert result.models[1].metadata["source"] == "provider"

    def test_keys_are_unique(self) -> None:
        result = merge(
            [
                ok("models.dev", CATALOG, make_record("a"), make_record("a", "bedrock")),
                ok("openai", PROVIDER, make_record("a")),
                ok("bedrock", PROVIDER, make_record("a", "bedrock")),
            ]
        )
        keys = result.models.keys()
        assert len(keys) == len(set(keys)) == 2


class TestFallback:
    """Tests for carrying forward records of failed providers."""

    def test_failed_provider_records_carried_forward(self) -> None:
        previous = ModelCollection([make_record("gpt-4o"), make_record("o3-mini"), make_record("x", "anthropic")])
        result = merge(
            [ok("models.dev", CATALOG, make_record("gpt-4o")), failed("openai", PROVIDER)],
            fallback=previous,
        )
        assert result.models.keys() == [("openai", "gpt-4o"), ("openai", "o3-mini")]
        assert result.carried_forward == 1

    def test_failed_catalog_records_not_carried(self) -> None:
        previous = ModelCollection([make_record("gpt-4o")])
        result = merge([failed("models.dev", CATALOG), ok("openai", PROVIDER)], fallback=previous)
        assert len(result.models) == 0
        assert result.carried_forward == 0


def test_source_rank_ordering() -> None:
    catalog = ok("models.dev", CATALOG)
    provider = ok("openai", PROVIDER)
    assert source_rank(provider, 1) < source_rank(catalog, 0)
    assert source_rank(catalog, 0, ["models.dev"]) < source_rank(provider, 1, ["models.dev"])
    assert source_rank(catalog, 5, ["x", "models.dev"]) > source_rank(provider, 9, ["openai", "models.dev"])
