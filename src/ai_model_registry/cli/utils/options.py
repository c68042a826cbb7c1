"""Common CLI options and decorators."""

from functools import wraps
from typing import Any, Callable, TypeVar, cast

import click

F = TypeVar("F", bound=Callable[..., Any])


def provider_option(func: F) -> F:
    """Add --provider option to a command."""

    @click.option("--provider", "-p", type=str, help="Restrict to a provider slug (openai, bedrock, ...).")
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get("provider"):
            kwargs["provider"] = kwargs["provider"].strip().lower()
        return func(*args, **kwargs)

    return cast(F, wrapper)


def output_option(func: F) -> F:
    """Add --output option to a command."""

    @click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write output to file instead of stdout.")
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return cast(F, wrapper)
