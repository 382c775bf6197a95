"""Error types raised by instance providers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification callers can branch on."""

    CONFIGURATION = "configuration"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    RESOURCE_NOT_FOUND = "resource_not_found"
    VENDOR_REQUEST = "vendor_request"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    PARTIAL_FAILURE = "partial_failure"


class ProviderError(Exception):
    """Base class for every error raised by a provider."""

    kind: ErrorKind = ErrorKind.VENDOR_REQUEST

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class ConfigurationError(ProviderError):
    """Provider cannot be built from the given configuration."""

    kind = ErrorKind.CONFIGURATION


class CapacityExceededError(ProviderError):
    """Creating the requested instances would exceed the running-instance cap."""

    kind = ErrorKind.CAPACITY_EXCEEDED

    def __init__(self, current: int, requested: int, limit: int, provider: str | None = None):
        super().__init__(
            f"Cannot start instances (limit reached): {current} + {requested} > {limit}",
            provider,
        )
        self.current = current
        self.requested = requested
        self.limit = limit


class ResourceNotFoundError(ProviderError):
    """A named vendor resource (flavor, snapshot, ssh key) does not exist."""

    kind = ErrorKind.RESOURCE_NOT_FOUND

    def __init__(self, resource: str, name: str, provider: str | None = None):
        super().__init__(f"Cannot find {resource} by name '{name}'", provider)
        self.resource = resource
        self.name = name


class VendorRequestError(ProviderError):
    """A call to the vendor API failed."""

    kind = ErrorKind.VENDOR_REQUEST

    def __init__(
        self,
        method: str,
        path: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        provider: str | None = None,
    ):
        text = f"{method} {path} failed: {message}"
        if body:
            text = f"{text}: {body}"
        super().__init__(text, provider)
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body


class UnsupportedOperationError(ProviderError):
    """The provider does not implement this lifecycle operation."""

    kind = ErrorKind.UNSUPPORTED_OPERATION

    def __init__(self, operation: str, provider: str | None = None):
        super().__init__(f"Unsupported method: {operation}", provider)
        self.operation = operation


class BatchOperationError(ProviderError):
    """
    One or more requests of a concurrent batch failed.

    Requests that succeeded are not undone; their vendor ids are listed in
    ``succeeded`` so the caller can reconcile by listing again.
    """

    kind = ErrorKind.PARTIAL_FAILURE

    def __init__(
        self,
        operation: str,
        succeeded: list[Any],
        errors: list[BaseException],
        provider: str | None = None,
    ):
        total = len(succeeded) + len(errors)
        super().__init__(
            f"{operation}: {len(errors)} of {total} requests failed "
            f"(first error: {errors[0] if errors else 'n/a'})",
            provider,
        )
        self.operation = operation
        self.succeeded = succeeded
        self.errors = errors
