#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Custom exception classes and error handling utilities for mediaquery.

Every failure a lookup can end in has its own class, so callers can tell a
user-actionable outcome (e.g. a playlist that is too long) from an operational
one (e.g. the instance answering with an unexpected status) without looking
at message strings. Messages stay short enough to show to an end user; the
detail goes to the log.
"""

from typing import Optional
from fastapi import HTTPException, status


# --- Base Exception Classes ---

class AppBaseError(Exception):
    """Root of every error mediaquery raises on purpose.

    Attributes:
        message: Text safe to show to an end user.
        error_code: Stable identifier, sent back in the X-Error-Code header.
        http_status_code: Status the HTTP API answers with.
        retry_after: Seconds a client should wait before trying again, if known.
    """

    def __init__(self, message: str, error_code: Optional[str] = None,
                 http_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
                 retry_after: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__.upper()
        self.http_status_code = http_status_code
        self.retry_after = retry_after

    def to_http_exception(self) -> HTTPException:
        """HTTPException carrying this error's status, message and headers."""
        headers = {"X-Error-Code": self.error_code}
        if self.retry_after:
            headers["Retry-After"] = str(self.retry_after)
        return HTTPException(status_code=self.http_status_code, detail=self.message, headers=headers)


class TransientError(AppBaseError):
    """Base class for operational errors where a later attempt may succeed."""
    pass


class CriticalError(AppBaseError):
    """Base class for errors caused by missing or broken configuration."""
    pass


# --- Configuration ---

class NotConfiguredError(CriticalError):
    """Raised when no Invidious instance has been configured."""

    def __init__(self, message: str = "Instance is not set for Invidious"):
        super().__init__(
            message=message,
            error_code="NOT_CONFIGURED",
            http_status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


# --- Upstream Status Errors ---

class RateLimitedError(TransientError):
    """Raised when the instance answers 429 Too Many Requests."""

    def __init__(self, message: str = "API rate limit reached", retry_after: int = 30):
        super().__init__(
            message=message,
            error_code="RATE_LIMITED",
            http_status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            retry_after=retry_after
        )


class ResourceNotFoundError(AppBaseError):
    """Raised when the requested video or playlist is unavailable (404)."""

    def __init__(self, message: str = "Video or playlist with this id is unavailable."):
        super().__init__(
            message=message,
            error_code="RESOURCE_NOT_FOUND",
            http_status_code=status.HTTP_404_NOT_FOUND
        )


class ForbiddenError(AppBaseError):
    """Raised when the requested video or playlist is private.

    Invidious reports private resources with a 500 status.
    """

    def __init__(self, message: str = "Video or playlist with this id is private."):
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            http_status_code=status.HTTP_403_FORBIDDEN
        )


class UpstreamError(TransientError):
    """Raised for any other non-200 answer from the instance.

    Attributes:
        status_code: The HTTP status the instance returned.
    """

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(
            message=message or f"Error calling Invidious API: HTTP {status_code}",
            error_code="UPSTREAM_ERROR",
            http_status_code=status.HTTP_502_BAD_GATEWAY
        )


class MalformedResponseError(TransientError):
    """Raised when a response body cannot be decoded or has the wrong shape."""

    def __init__(self, message: str = "Error calling Invidious API: could not decode response as JSON"):
        super().__init__(
            message=message,
            error_code="MALFORMED_RESPONSE",
            http_status_code=status.HTTP_502_BAD_GATEWAY
        )


# --- Content Errors ---

class PlaylistTooLongError(AppBaseError):
    """Raised when a playlist reaches the configured item limit."""

    def __init__(self, limit: int, message: Optional[str] = None):
        self.limit = limit
        super().__init__(
            message=message or f"YouTube Playlist is too long to queue (limit {limit}).",
            error_code="PLAYLIST_TOO_LONG",
            http_status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
        )


class InvalidItemError(AppBaseError):
    """Raised when an item is missing or carries an upstream error field."""

    def __init__(self, message: str = "Video is invalid"):
        super().__init__(
            message=message,
            error_code="INVALID_ITEM",
            http_status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
        )


class InvalidInputError(AppBaseError):
    """Raised when the user input is invalid."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(
            message=message,
            error_code="INVALID_INPUT",
            http_status_code=status.HTTP_400_BAD_REQUEST
        )


# --- Error Handling Utilities ---

def handle_exception(exception: Exception) -> HTTPException:
    """Map an exception raised while serving a request to an HTTPException.

    Application errors use their own status and code, a bare ValueError is
    treated as bad input, an HTTPException passes through untouched, and
    anything else becomes a 500 that names only the exception type.
    """
    if isinstance(exception, HTTPException):
        return exception
    if isinstance(exception, AppBaseError):
        return exception.to_http_exception()
    if isinstance(exception, ValueError):
        return InvalidInputError(str(exception)).to_http_exception()

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error: {type(exception).__name__}",
        headers={"X-Error-Code": "INTERNAL_SERVER_ERROR"}
    )
