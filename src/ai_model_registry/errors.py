"""Error types for the AI model registry.

This module defines the error types raised by the registry for lookup,
refresh, snapshot and provider API failures.
"""

from typing import Any, List, Optional


class ModelRegistryError(Exception):
    """Base class for all registry-related errors.

    This is the parent class for all registry-specific exceptions.
    """

    pass


class ConfigurationError(ModelRegistryError):
    """Base class for configuration-related errors.

    This is raised for errors related to configuration loading, parsing,
    or validation.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path to the configuration file that caused the error
        """
        super().__init__(message)
        self.message = message
        self.path = path


class UnknownProviderError(ConfigurationError):
    """Raised when a model is served by a provider the registry has no handle for.

    Examples:
        >>> try:
        ...     registry.resolve("gpt-4o", provider="nope")
        ... except UnknownProviderError as e:
        ...     print(f"Unknown provider: {e.provider}")
    """

    def __init__(self, provider: str) -> None:
        """Initialize unknown provider error.

        Args:
            provider: The provider slug that could not be found
        """
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


class ModelNotFoundError(ModelRegistryError):
    """Raised when a model id cannot be resolved to a record.

    This error indicates that neither an exact match nor an alias matched
    the requested id, and no default record was requested.

    Examples:
        >>> try:
        ...     registry.find("unknown-model")
        ... except ModelNotFoundError as e:
        ...     print(f"Model {e.model} not found (provider: {e.provider})")
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        provider: Optional[str] = None,
    ) -> None:
        """Initialize model not found error.

        Args:
            message: Error message
            model: The requested model id
            provider: The requested provider, or None when the lookup was unscoped
        """
        super().__init__(message)
        self.message = message
        self.model = model
        self.provider = provider

    def __str__(self) -> str:
        """Return string representation of the error.

        Returns:
            Error message
        """
        return self.message


class MalformedSnapshotError(ModelRegistryError):
    """Raised when a persisted snapshot cannot be parsed.

    Examples:
        >>> try:
        ...     load_snapshot("models.json")
        ... except MalformedSnapshotError as e:
        ...     print(f"Bad snapshot at {e.path}: {e}")
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize malformed snapshot error.

        Args:
            message: Error message
            path: Optional path of the snapshot document
        """
        super().__init__(message)
        self.message = message
        self.path = path


class FetchError(ModelRegistryError):
    """A single source failed to produce models.

    Fetch errors are recorded in refresh results rather than raised to the
    caller of a refresh.
    """

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        """Initialize fetch error.

        Args:
            message: Error message
            source: Name of the source that failed
        """
        super().__init__(message)
        self.message = message
        self.source = source


class AllSourcesFailedError(ModelRegistryError):
    """Raised when a refresh could not obtain data from any source.

    The previous snapshot is left in place when this is raised.
    """

    def __init__(self, message: str, failed: Optional[List[FetchError]] = None) -> None:
        """Initialize all-sources-failed error.

        Args:
            message: Error message
            failed: Per-source failures collected during the refresh
        """
        super().__init__(message)
        self.message = message
        self.failed = failed or []


class APIError(ModelRegistryError):
    """Error returned by a provider API, classified by status code."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Any = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Error message, usually extracted from the provider response
            status_code: HTTP status code of the response
            response: The original response object, passed through unmodified
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response


class BadRequestError(APIError):
    """400: the request was rejected as invalid."""


class UnauthorizedError(APIError):
    """401: missing or invalid credentials."""


class PaymentRequiredError(APIError):
    """402: the account needs to be topped up."""


class ForbiddenError(APIError):
    """403: credentials lack permission for the resource."""


class ContextLengthExceededError(APIError):
    """The request did not fit in the model's context window."""


class RateLimitError(APIError):
    """429: too many requests."""


class ServerError(APIError):
    """500: provider-side failure."""


class ServiceUnavailableError(APIError):
    """502-504: provider temporarily unreachable."""


class OverloadedError(APIError):
    """529: provider overloaded."""
