"""Classification of provider HTTP errors.

Maps an HTTP status code and the provider-supplied message onto the
:class:`~ai_model_registry.errors.APIError` hierarchy. Context-length
failures are detected from the message before the generic 400/429 mapping,
since several providers report them as bad requests or rate limits.
"""

import re
from typing import Any, List, Optional, Pattern, Type

from .errors import (
    APIError,
    BadRequestError,
    ContextLengthExceededError,
    ForbiddenError,
    OverloadedError,
    PaymentRequiredError,
    RateLimitError,
    ServerError,
    ServiceUnavailableError,
    UnauthorizedError,
)

CONTEXT_LENGTH_PATTERNS: List[Pattern[str]] = [
    re.compile(r"context length", re.IGNORECASE),
    re.compile(r"context window", re.IGNORECASE),
    re.compile(r"maximum context", re.IGNORECASE),
    re.compile(r"request too large", re.IGNORECASE),
    re.compile(r"too many tokens", re.IGNORECASE),
    re.compile(r"token count exceeds", re.IGNORECASE),
    re.compile(r"input[_\s-]?token", re.IGNORECASE),
    re.compile(r"input or output tokens? must be reduced", re.IGNORECASE),
    re.compile(r"reduce the length of messages", re.IGNORECASE),
]

DEFAULT_MESSAGES = {
    BadRequestError: "Invalid request - please check your input",
    UnauthorizedError: "Invalid API key - check your credentials",
    PaymentRequiredError: "Payment required - please top up your account",
    ForbiddenError: "Forbidden - you do not have permission to access this resource",
    ContextLengthExceededError: "Context length exceeded",
    RateLimitError: "Rate limit exceeded - please wait a moment",
    ServerError: "API server error - please try again",
    ServiceUnavailableError: "API server unavailable - please try again later",
    OverloadedError: "Service overloaded - please try again later",
    APIError: "An unknown error occurred",
}


def is_context_length_exceeded(message: Optional[str]) -> bool:
    """Check whether a provider message describes a context-length failure."""
    if not message:
        return False
    return any(pattern.search(message) for pattern in CONTEXT_LENGTH_PATTERNS)


def classify_error(status: int, message: Optional[str] = None) -> Optional[Type[APIError]]:
    """Map a status code and provider message to an error class.

    Args:
        status: HTTP status code
        message: Provider-supplied error message, if any

    Returns:
        The error class to raise, or None for successful statuses
    """
    if 200 <= status <= 399:
        return None
    if status in (400, 429) and is_context_length_exceeded(message):
        return ContextLengthExceededError
    if status == 400:
        return BadRequestError
    if status == 401:
        return UnauthorizedError
    if status == 402:
        return PaymentRequiredError
    if status == 403:
        return ForbiddenError
    if status == 429:
        return RateLimitError
    if status == 500:
        return ServerError
    if 502 <= status <= 504:
        return ServiceUnavailableError
    if status == 529:
        return OverloadedError
    return APIError


def raise_for_status(status: int, message: Optional[str] = None, response: Any = None) -> None:
    """Raise the classified API error for a failed response.

    Args:
        status: HTTP status code
        message: Provider-supplied error message
        response: Original response object, attached to the error unchanged

    Raises:
        APIError: A subclass matching the status code and message
    """
    error_class = classify_error(status, message)
    if error_class is None:
        return
    raise error_class(message or DEFAULT_MESSAGES[error_class], status_code=status, response=response)
