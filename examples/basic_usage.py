#!/usr/bin/env python3
"""Example of basic registry usage."""

from ai_model_registry import ModelNotFoundError, ModelRegistry


def print_model_info(model_id, provider=None):
    """Print information about a model.

    Args:
        model_id: Model id or alias to look up
        provider: Optional provider slug to restrict the lookup
    """
    try:
        registry = ModelRegistry.get_instance()
        model, handle = registry.resolve(model_id, provider=provider)

        print(f"Model: {model_id} -> {model.id} ({handle.name})")
        print(f"  Type: {model.type}")
        print(f"  Context window: {model.context_window or 'unknown'}")
        print(f"  Max output tokens: {model.max_output_tokens or 'unknown'}")
        print(f"  Supports vision: {model.supports_vision}")
        print(f"  Supports functions: {model.supports_functions}")
        if model.input_price_per_million is not None:
            print(f"  Input price: ${model.input_price_per_million}/M tokens")

        print()
    except ModelNotFoundError as e:
        print(f"Error getting information for {model_id}: {e}")


def main():
    """Run the example."""
    # Exact ids, an alias and a region-qualified Bedrock model
    for model_id, provider in [
        ("gpt-4o", None),
        ("claude-3-5-haiku", None),
        ("claude-3-5-haiku", "bedrock"),
        ("meta.llama4-maverick-17b-instruct-v1:0", "bedrock"),
        ("gpt-99", None),
    ]:
        print_model_info(model_id, provider)

    registry = ModelRegistry.get_instance()

    print("Chat models with function calling, by provider:")
    for slug, models in registry.models.chat_models().with_capability("function_calling").group_by(
        lambda m: m.provider
    ).items():
        print(f"  {slug}: {', '.join(m.id for m in models)}")

    # Local runtimes accept any model id
    model, handle = registry.resolve("llama3.2:latest", provider="ollama")
    print(f"\nLocal model: {model.id} via {handle.api_base} ({model.metadata['warning']})")


if __name__ == "__main__":
    main()
