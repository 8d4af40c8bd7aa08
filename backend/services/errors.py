"""Structured errors shared by the chat and storage services."""
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx


@dataclass
class ChatError:
    """Structured error payload carried by every service exception."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ChatServiceError(Exception):
    """Base exception with structured error information."""

    def __init__(self, error: ChatError):
        self.error = error
        super().__init__(error.message)


class MalformedResponseError(ChatServiceError):
    """External API returned a body without the expected shape."""


class TransportError(ChatServiceError):
    """Network or HTTP-level failure while calling an external API."""


class NotFoundError(ChatServiceError):
    """Requested record does not exist."""


class StorageError(ChatServiceError):
    """Persistence layer failed."""


def transport_error_from(exc: httpx.HTTPError, service: str, details: Dict[str, Any]) -> TransportError:
    """
    Map an httpx failure to a TransportError with a stable error code.

    Args:
        exc: Exception raised by httpx (timeout, status or connection error)
        service: Human-readable name of the remote service
        details: Context to record (model, latency_ms, ...)
    """
    details = {**details, "original_error": str(exc)}

    if isinstance(exc, httpx.TimeoutException):
        return TransportError(ChatError(
            code="TIMEOUT_ERROR",
            message="Request timed out. Please try again.",
            details=details,
        ))

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        details["status_code"] = status
        if status == 429:
            retry_after = exc.response.headers.get("retry-after", "60")
            details["retry_after"] = int(retry_after) if retry_after.isdigit() else 60
            return TransportError(ChatError(
                code="RATE_LIMIT_ERROR",
                message="Rate limit exceeded. Please try again in a few moments.",
                details=details,
            ))
        if status in (401, 403):
            return TransportError(ChatError(
                code="AUTHENTICATION_ERROR",
                message="Authentication failed. Please check your API key.",
                details=details,
            ))
        return TransportError(ChatError(
            code="API_ERROR",
            message=f"{service} error: HTTP {status}",
            details=details,
        ))

    return TransportError(ChatError(
        code="CONNECTION_ERROR",
        message=f"Could not reach {service}: {exc}",
        details=details,
    ))
