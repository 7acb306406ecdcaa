"""Normalized error type for every failed API call.

All failures surfaced by the client, whatever the underlying transport
exception, are expressed as an ``ApiError`` carrying a message, an optional
HTTP status code and an optional decoded error payload.

``map_exception`` is the single place where raw exceptions (httpx, pydantic,
plain Python errors) are converted into ``ApiError``.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
from pydantic import ValidationError

# Sentinel ``code`` for client-side cancellation
CANCELLED_CODE = -1

_GENERIC_SAFE_MESSAGE = "Something went wrong. Please try again."

# User-facing messages keyed by HTTP status
_SAFE_MESSAGES: dict[int, str] = {
    400: "Invalid request. Please verify and try again.",
    401: "Unauthorized. Please log in again.",
    403: "Access denied.",
    404: "Resource not found.",
    408: "Request timed out. Please try again.",
    409: "Conflict detected. Please refresh and try again.",
    422: "Request could not be processed.",
    429: "Too many requests. Please wait a moment.",
    500: "Server error. Please try again later.",
    502: "Service unavailable. Please try again shortly.",
    503: "Service unavailable. Please try again shortly.",
    504: "Service unavailable. Please try again shortly.",
}


class ApiError(Exception):
    """A failed API call.

    Parameters
    ----------
    message:
        Developer/log-friendly description of the failure.
    code:
        HTTP status when the server answered, ``CANCELLED_CODE`` for a
        client-side cancellation, ``None`` otherwise.
    details:
        Decoded JSON object from the error response body, if any.
    cause:
        The original exception. Not part of equality.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        safe_message: str | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details
        self.cause = cause
        self._safe_message = safe_message
        super().__init__(message)

    @classmethod
    def cancelled(cls) -> ApiError:
        return cls(message="Cancelled", code=CANCELLED_CODE, safe_message="Request cancelled")

    @property
    def is_cancelled(self) -> bool:
        return self.code == CANCELLED_CODE

    @property
    def safe_message(self) -> str:
        """Message suitable for showing to an end user."""
        if self._safe_message is not None:
            return self._safe_message
        if self.code is not None and self.code in _SAFE_MESSAGES:
            return _SAFE_MESSAGES[self.code]
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiError):
            return NotImplemented
        return (self.message, self.code, self.details) == (
            other.message,
            other.code,
            other.details,
        )

    def __hash__(self) -> int:
        return hash((self.message, self.code))

    def __repr__(self) -> str:
        return f"ApiError(code={self.code!r}, message={self.message!r})"

    __str__ = __repr__


class RequestCancelledError(Exception):
    """Raised internally when a CancelToken fires; never leaves the client."""


def response_details(response: httpx.Response) -> dict[str, Any] | None:
    """Decode an error body into a dict, or None if it is not a JSON object."""
    try:
        data = json.loads(response.text) if response.text else None
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def from_response(response: httpx.Response, cause: BaseException | None = None) -> ApiError:
    """Build an ApiError from a non-2xx response."""
    status = response.status_code
    return ApiError(
        message=response.reason_phrase or f"HTTP {status}",
        code=status,
        details=response_details(response),
        cause=cause,
    )


def map_exception(exc: BaseException) -> ApiError:
    """Convert any exception into an ApiError with a consistent safe message."""
    if isinstance(exc, ApiError):
        return exc

    if isinstance(exc, RequestCancelledError):
        return ApiError.cancelled()

    if isinstance(exc, httpx.HTTPStatusError):
        return from_response(exc.response, cause=exc)

    if isinstance(exc, httpx.TimeoutException):
        return ApiError(
            message=str(exc) or "Request timed out",
            cause=exc,
            safe_message="Network error. Check your connection.",
        )

    if isinstance(exc, (httpx.NetworkError, httpx.RemoteProtocolError)):
        return ApiError(
            message=str(exc) or "Network connection error",
            cause=exc,
            safe_message="Network error. Check your connection.",
        )

    if isinstance(exc, ValidationError):
        return ApiError(
            message=str(exc),
            details={"errors": exc.errors(include_url=False, include_context=False)},
            cause=exc,
            safe_message="Data error. Please try again.",
        )

    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return ApiError(
            message=str(exc),
            cause=exc,
            safe_message=_GENERIC_SAFE_MESSAGE,
        )

    return ApiError(message=str(exc), cause=exc, safe_message=_GENERIC_SAFE_MESSAGE)
