"""
Custom exceptions for the Freebox API client.

This module defines all custom exceptions used throughout the freebox-api
library. All exceptions inherit from FreeboxError for easy catching of
library-specific errors.

Example usage:
    try:
        session = client.login()
    except FreeboxAuthenticationError as e:
        print(f"Login refused ({e.error_code}): {e.api_message}")
    except FreeboxError as e:
        print(f"Freebox error: {e}")

License: MIT
"""

import socket
from typing import Any, Optional

# Envelope error codes that mean the caller's credentials were refused
AUTH_ERROR_CODES = frozenset(
    {
        "auth_required",
        "invalid_token",
        "pending_token",
        "insufficient_rights",
        "denied_from_external_ip",
        "new_apps_denied",
        "apps_denied",
    }
)


class FreeboxError(Exception):
    """
    Base exception for all Freebox API client errors.

    Catching this exception will catch all library-specific errors. Every
    exception carries contextual details to help with debugging.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context

    Examples:
        >>> try:
        ...     devices = discover(DiscoverProtocol.HTTP)
        ... except FreeboxConnectionError:
        ...     print("Router not reachable")
        ... except FreeboxError as e:
        ...     print(f"Other error: {e}")
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize FreeboxError.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class FreeboxConnectionError(FreeboxError):
    """
    Raised when the router cannot be reached.

    This exception is raised when:
    - Network connection cannot be established
    - DNS resolution of the router hostname fails
    - SSL/TLS handshake fails

    Attributes:
        details: May include 'host', 'port', 'error_type', 'original_error'
    """


class FreeboxTimeoutError(FreeboxConnectionError):
    """
    Raised when a connect or read timeout expires.

    Attributes:
        details: May include 'operation', 'timeout'
    """


class FreeboxDiscoveryError(FreeboxConnectionError):
    """
    Raised when multicast discovery cannot be started.

    Per-announcement problems never raise this; they are logged and skipped.
    """


class FreeboxHTTPError(FreeboxError):
    """
    Raised when the router answers with an HTTP error and no API envelope.

    Attributes:
        status_code: HTTP status code if available
        details: May include 'operation', 'response_text'
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        if status_code and self.details is not None:
            self.details["status_code"] = status_code


class FreeboxParsingError(FreeboxError):
    """
    Raised when a response body cannot be decoded.

    This exception is raised when:
    - The body is not valid JSON
    - The body is JSON but not the expected object shape
    - A successful envelope is missing its result payload
    """


class FreeboxAPIError(FreeboxError):
    """
    Raised when the router returns an envelope with ``success=false``.

    This is an application-level failure, distinct from transport errors:
    the request reached the router and was answered, but refused.

    Attributes:
        error_code: The envelope's ``error_code`` (e.g. "invalid_token")
        api_message: The envelope's human-readable ``msg``
        status_code: HTTP status code the envelope arrived with
    """

    def __init__(
        self,
        message: str,
        error_code: str = "",
        api_message: str = "",
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.error_code = error_code
        self.api_message = api_message
        self.status_code = status_code


class FreeboxAuthenticationError(FreeboxAPIError):
    """
    Raised when the router refuses the caller's credentials.

    This exception is raised for envelope error codes such as
    ``invalid_token``, ``auth_required`` or ``insufficient_rights``.
    """


class FreeboxConfigurationError(FreeboxError):
    """
    Raised when configuration validation fails.

    Attributes:
        details: May include 'parameter', 'value', 'valid_values'
    """


def api_error_from_envelope(
    operation: str,
    error_code: str,
    api_message: str,
    status_code: Optional[int] = None,
) -> FreeboxAPIError:
    """
    Build the exception matching a ``success=false`` envelope.

    Args:
        operation: Endpoint that returned the envelope
        error_code: Envelope error code
        api_message: Envelope message
        status_code: HTTP status the envelope arrived with

    Returns:
        FreeboxAuthenticationError for credential failures, FreeboxAPIError otherwise
    """
    error_class = FreeboxAuthenticationError if error_code in AUTH_ERROR_CODES else FreeboxAPIError
    return error_class(
        f"{operation} failed: {api_message or error_code or 'unknown error'}",
        error_code=error_code,
        api_message=api_message,
        status_code=status_code,
        details={"operation": operation, "error_code": error_code, "status_code": status_code},
    )


def wrap_connection_error(original_error: Exception, host: str, port: Optional[int]) -> FreeboxConnectionError:
    """
    Wrap a standard connection exception in FreeboxConnectionError.

    Args:
        original_error: The original exception
        host: Host that failed to connect
        port: Port that failed to connect, if known

    Returns:
        FreeboxConnectionError with context
    """
    target = f"{host}:{port}" if port else host

    if isinstance(original_error, socket.timeout):
        return FreeboxTimeoutError(
            f"Connection to {target} timed out",
            details={
                "host": host,
                "port": port,
                "timeout_type": "connection",
                "original_error": str(original_error),
            },
        )

    message = f"Failed to connect to {target}"
    if isinstance(original_error, socket.gaierror):
        message = f"Could not resolve {host} - is this machine on the router's network?"
    elif isinstance(original_error, ConnectionRefusedError):
        message = f"Connection refused by {target} - router may be offline or API disabled"

    return FreeboxConnectionError(
        message,
        details={
            "host": host,
            "port": port,
            "error_type": type(original_error).__name__,
            "original_error": str(original_error),
        },
    )


__all__ = [
    "AUTH_ERROR_CODES",
    "FreeboxAPIError",
    "FreeboxAuthenticationError",
    "FreeboxConfigurationError",
    "FreeboxConnectionError",
    "FreeboxDiscoveryError",
    "FreeboxError",
    "FreeboxHTTPError",
    "FreeboxParsingError",
    "FreeboxTimeoutError",
    "api_error_from_envelope",
    "wrap_connection_error",
]
