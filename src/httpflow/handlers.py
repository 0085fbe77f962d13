"""
Response handlers: consume one response and capture, validate or decode it.

Handlers are layered by composition. Each richer handler wraps the
previous one and calls through to it:

    NoBodyResponseHandler   status + headers, optional status validation
    BinaryResponseHandler   + whole body as bytes
    StringResponseHandler   + charset-aware text
    JSONResponseHandler     + Content-Type gated JSON decoding
    FormResponseHandler     + Content-Type gated form parsing

A handler instance accumulates the outcome of exactly one response. Use a
fresh instance per session; sharing one across concurrent sessions is not
safe.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import requests
from requests.structures import CaseInsensitiveDict

from .errors import UnexpectedContentTypeError, UnexpectedStatusCodeError
from .mediatype import (
    CONTENT_TYPE_HEADER,
    decode_text,
    is_form_media_type,
    is_json_media_type,
    media_type_of,
    parse_form,
)
from .status import StatusCode

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


@runtime_checkable
class ResponseHandler(Protocol):
    """
    Protocol for response handlers.

    Implementations that read the body must close the response on every
    exit path before returning or raising.
    """

    def handle_response(self, response: requests.Response) -> None:
        """
        Consume the response.

        Args:
            response: Response returned by the transport

        Raises:
            Exception if the response is rejected or cannot be read
        """
        ...


class RawResponseHandler:
    """Keeps the response as-is. The caller owns it, including closing it."""

    def __init__(self) -> None:
        self.response: Optional[requests.Response] = None

    def handle_response(self, response: requests.Response) -> None:
        self.response = response


class NoBodyResponseHandler:
    """
    Captures status code and headers, ignoring the body.

    Example:
        handler = NoBodyResponseHandler().expect_status_code(200, 204)
        agent.run_session(Session(builder, handler))
        print(handler.status_code, handler.headers.get("ETag"))
    """

    def __init__(self) -> None:
        self.status_code: Optional[StatusCode] = None
        self.headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        self._expected: set[int] = set()

    @property
    def expected_status_codes(self) -> frozenset[int]:
        return frozenset(self._expected)

    def expect_status_code(self, *codes: int) -> NoBodyResponseHandler:
        """
        Accept only the given status codes. Calls accumulate.

        With no codes registered, every status is accepted.
        """
        self._expected.update(int(code) for code in codes)
        return self

    def capture(self, response: requests.Response) -> None:
        """
        Record status and headers, then validate the status.

        Does not touch or close the body.

        Raises:
            UnexpectedStatusCodeError: If expected codes were registered and
                the status is not one of them
        """
        self.status_code = StatusCode(response.status_code)
        self.headers = response.headers
        if self._expected and self.status_code not in self._expected:
            raise UnexpectedStatusCodeError(self.status_code)

    def handle_response(self, response: requests.Response) -> None:
        try:
            self.capture(response)
        finally:
            response.close()


class BinaryResponseHandler:
    """
    Reads the whole body into memory, then applies status validation.

    A read failure is raised as-is without validating the status. A status
    mismatch raises UnexpectedStatusCodeError carrying the body.
    """

    def __init__(
        self,
        status_handler: Optional[NoBodyResponseHandler] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._status = status_handler if status_handler is not None else NoBodyResponseHandler()
        self.chunk_size = chunk_size
        self.body = b""

    @property
    def status_code(self) -> Optional[StatusCode]:
        return self._status.status_code

    @property
    def headers(self) -> CaseInsensitiveDict[str]:
        return self._status.headers

    @property
    def content_type(self) -> str:
        """Raw Content-Type header value, empty if absent."""
        return self.headers.get(CONTENT_TYPE_HEADER, "")

    def expect_status_code(self, *codes: int) -> BinaryResponseHandler:
        self._status.expect_status_code(*codes)
        return self

    def _read_body(self, response: requests.Response) -> bytes:
        return b"".join(response.iter_content(chunk_size=self.chunk_size))

    def handle_response(self, response: requests.Response) -> None:
        try:
            self.body = self._read_body(response)
            logger.debug(f"Read {len(self.body)} bytes from {response.url or 'response'}")
            self._status.capture(response)
        except UnexpectedStatusCodeError as err:
            err.body = self.body
            raise
        finally:
            response.close()


class _LayeredHandler:
    """Base for handlers that extend a wrapped handler's captured state."""

    def __init__(self, inner: Any) -> None:
        self._inner = inner

    @property
    def status_code(self) -> Optional[StatusCode]:
        return self._inner.status_code

    @property
    def headers(self) -> CaseInsensitiveDict[str]:
        return self._inner.headers

    @property
    def body(self) -> bytes:
        return self._inner.body

    @property
    def content_type(self) -> str:
        return self._inner.content_type

    def expect_status_code(self, *codes: int) -> Any:
        self._inner.expect_status_code(*codes)
        return self

    def handle_response(self, response: requests.Response) -> None:
        self._inner.handle_response(response)


class StringResponseHandler(_LayeredHandler):
    """
    Exposes the body as text decoded with the declared charset.

    Decoding happens in text(), so handle_response succeeds whether or not
    the body is decodable.
    """

    def __init__(self, binary_handler: Optional[BinaryResponseHandler] = None) -> None:
        super().__init__(binary_handler if binary_handler is not None else BinaryResponseHandler())

    def text(self) -> str:
        """
        Decode the captured body.

        Raises:
            MediaTypeError: If the Content-Type cannot be parsed
            LookupError: If the declared charset is unknown
            UnicodeDecodeError: If the body is invalid in that charset
        """
        return decode_text(self.body, self.content_type)


class JSONResponseHandler(_LayeredHandler):
    """Decodes JSON bodies, refusing responses that are not typed as JSON."""

    def __init__(self, string_handler: Optional[StringResponseHandler] = None) -> None:
        super().__init__(string_handler if string_handler is not None else StringResponseHandler())

    def text(self) -> str:
        return self._inner.text()

    def is_json(self) -> bool:
        return is_json_media_type(media_type_of(self.content_type))

    def loads(self, **kwargs: Any) -> Any:
        """Decode the body as JSON without looking at the Content-Type."""
        return json.loads(self.body, **kwargs)

    def decode_json(self, **kwargs: Any) -> Any:
        """
        Decode the body as JSON.

        Args:
            **kwargs: Passed to json.loads (object_hook, parse_float, ...)

        Returns:
            Decoded value

        Raises:
            UnexpectedContentTypeError: If the response is not typed as JSON
            json.JSONDecodeError: If the body is not valid JSON
        """
        if not self.is_json():
            raise UnexpectedContentTypeError(self.content_type, self.body)
        return self.loads(**kwargs)


class FormResponseHandler(_LayeredHandler):
    """Parses application/x-www-form-urlencoded bodies."""

    def __init__(self, string_handler: Optional[StringResponseHandler] = None) -> None:
        super().__init__(string_handler if string_handler is not None else StringResponseHandler())

    def text(self) -> str:
        return self._inner.text()

    def is_form(self) -> bool:
        return is_form_media_type(media_type_of(self.content_type))

    def parse_form(self) -> dict[str, list[str]]:
        """
        Parse the body as a form.

        Raises:
            UnexpectedContentTypeError: If the response is not form-encoded
        """
        if not self.is_form():
            raise UnexpectedContentTypeError(self.content_type, self.body)
        return parse_form(self.body)
