"""Exceptions raised while building requests and handling responses."""

from __future__ import annotations

from typing import Optional

from .status import StatusCode


class HttpFlowError(Exception):
    """Base error for httpflow."""


class InvalidMethodError(HttpFlowError, ValueError):
    """Raised when a request method is not a valid HTTP token."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Invalid method: {method!r}")
        self.method = method


class MediaTypeError(HttpFlowError, ValueError):
    """Raised when a Content-Type value cannot be parsed."""

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Invalid media type {value!r}: {reason}")
        self.value = value
        self.reason = reason


class UnexpectedStatusCodeError(HttpFlowError):
    """
    Raised when a response status is not one of the expected codes.

    Attributes:
        status_code: Status code received
        body: Response body, when the handler had already read it
    """

    def __init__(self, status_code: int, body: Optional[bytes] = None) -> None:
        self.status_code = StatusCode(status_code)
        self.body = body
        super().__init__(f"Unexpected Status Code: {self.status_code}")


class UnexpectedContentTypeError(HttpFlowError):
    """
    Raised when a format-specific decode is requested for the wrong Content-Type.

    The body can no longer be re-read from the response, so the bytes
    already captured travel with the error.

    Attributes:
        content_type: Raw Content-Type header value
        body: Captured response body
    """

    def __init__(self, content_type: str, body: bytes = b"") -> None:
        self.content_type = content_type
        self.body = body
        super().__init__(f"Unexpected Content-Type: {content_type}")
