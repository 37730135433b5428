"""
Cloud Cache - Core Error Types

Defines the exception hierarchy shared by every cache backend.
All exceptions inherit from CloudCacheError for consistent error handling.

Backend-specific exceptions (redis, pymemcache) never cross the adapter
boundary: they are wrapped in CacheOperationError with the original
exception chained as ``__cause__``.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for cache failures.

    Used for structured error reporting and caller-side recovery.
    """

    # Configuration errors
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    UNSUPPORTED_PROVIDER = "UNSUPPORTED_PROVIDER"
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"
    DESERIALIZATION_FAILURE = "DESERIALIZATION_FAILURE"
    BACKEND_OPERATION_FAILURE = "BACKEND_OPERATION_FAILURE"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CloudCacheError(Exception):
    """Base exception for all cloud cache errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured reporting."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CloudCacheError):
    """Raised when configuration is invalid or missing."""

    error_code = ErrorCode.INVALID_CONFIGURATION


class UnsupportedProviderError(ConfigurationError):
    """Raised when a configuration names a provider outside the supported set."""

    error_code = ErrorCode.UNSUPPORTED_PROVIDER

    def __init__(self, provider: Any, supported: list[str]):
        message = f"Unsupported cache provider: {provider}. Supported providers are: {', '.join(supported)}"
        super().__init__(message, {"provider": str(provider), "supported": list(supported)})
        self.provider = provider
        self.supported = list(supported)


class DependencyError(CloudCacheError):
    """Raised when a required client library is missing or fails to load."""

    error_code = ErrorCode.DEPENDENCY_MISSING

    def __init__(
        self,
        package: str,
        feature: str | None = None,
        install_hint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        if feature:
            message = f"Required dependency '{package}' is missing for {feature}"
        else:
            message = f"Required dependency '{package}' is missing"

        if install_hint:
            message += f". Install with: {install_hint}"

        error_details = details or {}
        error_details.update(
            {
                "package": package,
                "feature": feature,
                "install_hint": install_hint,
            }
        )

        super().__init__(message, error_details)


class CacheError(CloudCacheError):
    """Base exception for cache-related errors."""

    error_code = ErrorCode.CACHE_FAILURE


class SerializationError(CacheError):
    """Raised when a value cannot be converted to its stored form."""

    error_code = ErrorCode.SERIALIZATION_FAILURE


class DeserializationError(CacheError):
    """Raised when stored data cannot be parsed back into a value."""

    error_code = ErrorCode.DESERIALIZATION_FAILURE


class CacheOperationError(CacheError):
    """Raised when a backend operation fails at the network or protocol level."""

    error_code = ErrorCode.BACKEND_OPERATION_FAILURE

    def __init__(
        self,
        backend: str,
        operation: str,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ):
        reason = str(cause) if cause is not None and str(cause) else "Unknown error"
        message = f"{backend} {operation} operation failed: {reason}"

        error_details = details or {}
        error_details.update({"backend": backend, "operation": operation})
        if cause is not None:
            error_details["cause"] = type(cause).__name__

        super().__init__(message, error_details)
        self.backend = backend
        self.operation = operation
        self.cause = cause


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        ErrorCode carried by cloud cache errors, INTERNAL_ERROR otherwise
    """
    if isinstance(error, CloudCacheError):
        return error.error_code

    return ErrorCode.INTERNAL_ERROR
