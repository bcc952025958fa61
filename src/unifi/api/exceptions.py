#!/usr/bin/env python3
"""Exception Hierarchy for the UniFi Network API client.

Every failure the client can report is a typed exception rooted at
UnifiError, so callers can catch the whole family with one except clause
or pick out the exact failure they care about.

Design Principles:
    - All exceptions inherit from UnifiError
    - Exceptions preserve context (original error, timestamp, details)
    - Raw response bodies are kept on the exception for diagnostics
    - Nothing in the client retries; recoverable is advisory for callers

Exception Hierarchy:
    UnifiError (base)
    ├── ConfigurationError (fix config before retry)
    ├── SerializationError (request body could not be encoded)
    ├── RequestError (one HTTP round trip failed)
    │   ├── TransportError
    │   │   ├── ConnectionError
    │   │   └── TimeoutError
    │   ├── StatusError (non-2xx response)
    │   └── DecodeError (2xx response with an unparseable body)
    └── NotFoundError (by-id lookup returned nothing)
"""
from datetime import datetime, timezone
from typing import Any, Optional

# Bodies longer than this are cut down in `details` (the attribute keeps all of it)
MAX_DETAIL_BODY_LENGTH = 500


def _truncate(body: str) -> str:
    if len(body) > MAX_DETAIL_BODY_LENGTH:
        return body[:MAX_DETAIL_BODY_LENGTH]
    return body


# ============================================
# Base Exception
# ============================================

class UnifiError(Exception):
    """Base exception for all UniFi client errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "STATUS_ERROR_404")
        details: Additional context as a dictionary
        timestamp: When the error occurred (UTC)
        cause: The original exception that caused this error
        recoverable: Whether a caller-level retry might succeed
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Caller-Side Errors
# ============================================

class ConfigurationError(UnifiError):
    """Raised when client configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


class SerializationError(UnifiError):
    """Raised when a request body cannot be encoded.

    Always raised before any network call is made.
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(
            message,
            code="SERIALIZATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )
        self.endpoint = endpoint


# ============================================
# Request Errors
# ============================================

class RequestError(UnifiError):
    """Base class for failures of a single HTTP round trip.

    Attributes:
        endpoint: Resolved endpoint path that was called
        method: HTTP method used
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        method: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        if method:
            details["method"] = method
        super().__init__(message, details=details, **kwargs)
        self.endpoint = endpoint
        self.method = method


class TransportError(RequestError):
    """Raised when the request never produced an HTTP response.

    Connection refused, TLS failure, timeout and other client-side
    network failures land here.
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "TRANSPORT_ERROR")
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)


class ConnectionError(TransportError):
    """Raised when the connection to the controller fails."""

    def __init__(
        self,
        message: str = "Failed to connect to controller",
        host: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if host:
            details["host"] = host
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details=details,
            **kwargs,
        )
        self.host = host


class TimeoutError(TransportError):
    """Raised when a request exceeds its configured timeout."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            message,
            code="TIMEOUT_ERROR",
            details=details,
            **kwargs,
        )
        self.timeout_seconds = timeout_seconds


class StatusError(RequestError):
    """Raised when the controller answers with a non-success status.

    Attributes:
        status_code: HTTP status code
        response_body: Raw response body, never truncated
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        if response_body:
            details["response_body"] = _truncate(response_body)

        kwargs.setdefault("recoverable", status_code in (429, 500, 502, 503, 504))
        kwargs.setdefault("code", f"STATUS_ERROR_{status_code}")

        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code
        self.response_body = response_body


class DecodeError(RequestError):
    """Raised when a success response cannot be parsed into the expected shape.

    The raw payload is kept so schema drift can be diagnosed.

    Attributes:
        raw_body: Response body exactly as received
    """

    def __init__(
        self,
        message: str,
        raw_body: str = "",
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if raw_body:
            details["raw_body"] = _truncate(raw_body)
        super().__init__(
            message,
            code="DECODE_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )
        self.raw_body = raw_body


# ============================================
# Lookup Errors
# ============================================

class NotFoundError(UnifiError):
    """Raised when a by-id lookup returns an empty collection."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        **kwargs,
    ):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} '{resource_id}' not found"

        details = kwargs.pop("details", {})
        details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message,
            code="NOT_FOUND",
            details=details,
            recoverable=False,
            **kwargs,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


__all__ = [
    "UnifiError",
    "ConfigurationError",
    "SerializationError",
    "RequestError",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    "StatusError",
    "DecodeError",
    "NotFoundError",
]
