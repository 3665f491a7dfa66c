"""conduit-testkit exception hierarchy.

This module defines the base exception class and specialized exceptions
for the three failure families the testkit distinguishes:

- Composition failures (setup, teardown, unknown or cyclic capabilities)
- Cleanup failures inside the resource tracker (logged, never raised)
- External service failures from the Conduit API collaborator
"""

from __future__ import annotations

from typing import Any


class TestkitError(Exception):
    """Base exception for all conduit-testkit errors.

    All custom exceptions in the testkit inherit from this class
    to enable consistent error handling and logging.
    """

    __test__ = False  # not a pytest test class


class ConfigurationError(TestkitError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("API_URL is not configured")
    """

    pass


# =============================================================================
# Composition
# =============================================================================


class CompositionError(TestkitError):
    """Raised when a composition cannot be resolved as requested."""

    pass


class UnknownCapabilityError(CompositionError):
    """Raised when a capability name has no provider in the composition.

    Attributes:
        name: The capability that was requested.
        requested_by: The provider that declared the dependency, if any.
    """

    def __init__(self, name: str, requested_by: str | None = None) -> None:
        self.name = name
        self.requested_by = requested_by
        if requested_by:
            message = f"Unknown capability '{name}' (required by '{requested_by}')"
        else:
            message = f"Unknown capability '{name}'"
        super().__init__(message)


class CircularDependencyError(CompositionError):
    """Raised when provider dependencies form a cycle.

    Attributes:
        chain: Provider names along the cycle, first name repeated at the end.
    """

    def __init__(self, chain: tuple[str, ...]) -> None:
        self.chain = chain
        super().__init__(f"Circular capability dependency: {' -> '.join(chain)}")


class SetupFailure(TestkitError):
    """Raised when a provider's setup raised.

    The original exception is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, provider: str, cause: BaseException) -> None:
        self.provider = provider
        self.cause = cause
        super().__init__(f"Setup of '{provider}' failed: {cause!r}")


class TeardownFailure(TestkitError):
    """Raised after all teardowns ran when at least one of them failed.

    Attributes:
        failures: ``(provider, exception)`` pairs in the order they happened.
    """

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(f"Teardown failed for {len(self.failures)} provider(s): {names}")

    @property
    def first(self) -> BaseException:
        """The first teardown exception that was collected."""
        return self.failures[0][1]


class CleanupFailure(TestkitError):
    """A tracked resource could not be deleted.

    Only ever logged by ResourceTracker.flush; cleanup is best-effort.
    """

    def __init__(self, kind: str, identifier: str, cause: BaseException) -> None:
        self.kind = kind
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"Cleanup of {kind} '{identifier}' failed: {cause!r}")


# =============================================================================
# External services
# =============================================================================


class ExternalServiceError(TestkitError):
    """Raised when an external service call fails.

    Attributes:
        service: Name or base URL of the external service that failed.
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise ExternalServiceError(service="conduit", message="Connection refused")
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class ApiError(ExternalServiceError):
    """Conduit API answered with an unexpected status code."""

    def __init__(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        message: str | None = None,
        body: Any = None,
    ) -> None:
        self.method = method
        self.endpoint = endpoint
        self.body = body
        super().__init__(
            service="conduit",
            message=f"{method} {endpoint} -> {status_code}: "
            f"{message or 'Request failed'}",
            status_code=status_code,
        )


class AuthenticationError(ApiError):
    """401 from the API."""

    def __init__(self, method: str, endpoint: str, body: Any = None) -> None:
        super().__init__(method, endpoint, 401, "Authentication required", body)


class AuthorizationError(ApiError):
    """403 from the API."""

    def __init__(self, method: str, endpoint: str, body: Any = None) -> None:
        super().__init__(method, endpoint, 403, "Access forbidden", body)


class NotFoundError(ApiError):
    """404 from the API."""

    def __init__(self, method: str, endpoint: str, body: Any = None) -> None:
        super().__init__(method, endpoint, 404, "Resource not found", body)


class UnprocessableEntityError(ApiError):
    """422 from the API, carrying the field errors it reported.

    Conduit reports validation problems as ``{"errors": {"field": ["msg"]}}``.
    """

    def __init__(
        self,
        method: str,
        endpoint: str,
        errors: dict[str, list[str]],
        body: Any = None,
    ) -> None:
        self.errors = errors
        summary = "; ".join(
            f"{field}: {', '.join(messages)}" for field, messages in errors.items()
        )
        super().__init__(method, endpoint, 422, f"Validation failed: {summary}", body)

    def has_field_error(self, field: str) -> bool:
        """Check if a specific field has errors."""
        return bool(self.errors.get(field))

    def field_errors(self, field: str) -> list[str]:
        """Get errors for a specific field."""
        return list(self.errors.get(field, []))


class ServerError(ApiError):
    """5xx from the API."""

    pass


def error_for_status(
    status_code: int,
    method: str,
    endpoint: str,
    body: Any = None,
) -> ApiError:
    """Build the ApiError subclass matching a response status.

    Args:
        status_code: HTTP status returned by the API.
        method: HTTP method of the request.
        endpoint: Request path.
        body: Parsed response body, if any.

    Returns:
        The most specific ApiError for the status.
    """
    if status_code == 401:
        return AuthenticationError(method, endpoint, body)
    if status_code == 403:
        return AuthorizationError(method, endpoint, body)
    if status_code == 404:
        return NotFoundError(method, endpoint, body)
    if status_code == 422:
        errors = body.get("errors") if isinstance(body, dict) else None
        if isinstance(errors, dict):
            return UnprocessableEntityError(method, endpoint, errors, body)
        return ApiError(method, endpoint, status_code, "Validation error", body)
    if status_code >= 500:
        return ServerError(method, endpoint, status_code, "Server error", body)
    return ApiError(method, endpoint, status_code, body=body)
