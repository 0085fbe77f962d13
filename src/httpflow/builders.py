"""Request builders: turn caller intent into a transport-ready request."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import IO, Any, Iterable, Optional, Protocol, Union, runtime_checkable

import requests
from requests.structures import CaseInsensitiveDict

from .errors import InvalidMethodError
from .mediatype import (
    CONTENT_TYPE_HEADER,
    FORM_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    FieldValues,
    encode_form,
    field_items,
    is_token,
)

# Anything requests can send as a body without further encoding
RawBody = Union[bytes, str, IO[bytes], Iterable[bytes]]


@runtime_checkable
class RequestBuilder(Protocol):
    """
    Protocol for request builders.

    Implementations must not mutate their own fields or the caller's
    header mapping, so one builder can serve several sessions.
    """

    def build_request(self) -> requests.PreparedRequest:
        """
        Build the request to send.

        Returns:
            Prepared request ready for a transport

        Raises:
            Exception on invalid method, URL or body
        """
        ...


@dataclass
class RawRequestBuilder:
    """
    Builds a request around an already-encoded body.

    Every caller header is copied onto a fresh header mapping; a name with
    several values is combined into one comma-separated field. The default
    Content-Type is only applied when the caller did not set one.

    Attributes:
        method: HTTP method token (GET, POST, ...)
        url: Absolute target URL
        headers: Header name -> value or list of values
        body: Bytes, text, file-like stream or iterable of chunks
        default_content_type: Content-Type to use if headers carry none
    """

    method: str
    url: str
    headers: Optional[FieldValues] = None
    body: Optional[RawBody] = None
    default_content_type: str = ""

    def build_request(self) -> requests.PreparedRequest:
        if not is_token(self.method):
            raise InvalidMethodError(self.method)

        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        if self.headers:
            for name, value in field_items(self.headers):
                if name in headers:
                    headers[name] = f"{headers[name]}, {value}"
                else:
                    headers[name] = value

        if self.default_content_type and not headers.get(CONTENT_TYPE_HEADER):
            headers[CONTENT_TYPE_HEADER] = self.default_content_type

        request = requests.Request(
            method=self.method,
            url=self.url,
            headers=headers,
            data=self.body,
        )
        return request.prepare()


@dataclass
class NoBodyRequestBuilder:
    """Builds a request without a body (GET, HEAD, DELETE, ...)."""

    method: str
    url: str
    headers: Optional[FieldValues] = None

    def build_request(self) -> requests.PreparedRequest:
        raw = RawRequestBuilder(
            method=self.method,
            url=self.url,
            headers=self.headers,
        )
        return raw.build_request()


@dataclass
class FormRequestBuilder:
    """
    Builds an application/x-www-form-urlencoded request.

    A None body sends no body; an empty mapping sends an empty one.
    """

    method: str
    url: str
    headers: Optional[FieldValues] = None
    body: Optional[FieldValues] = None

    def build_request(self) -> requests.PreparedRequest:
        data = None
        if self.body is not None:
            data = encode_form(self.body).encode("ascii")

        raw = RawRequestBuilder(
            method=self.method,
            url=self.url,
            headers=self.headers,
            body=data,
            default_content_type=FORM_MEDIA_TYPE,
        )
        return raw.build_request()


@dataclass
class JSONRequestBuilder:
    """
    Builds an application/json request from any JSON-serializable value.

    Serialization errors from json.dumps (TypeError for unsupported keys or
    values, ValueError for circular references and NaN or infinite floats)
    propagate unchanged. A None body sends no body rather than a JSON null.
    """

    method: str
    url: str
    headers: Optional[FieldValues] = None
    body: Any = None

    def build_request(self) -> requests.PreparedRequest:
        data = None
        if self.body is not None:
            data = json.dumps(self.body, separators=(",", ":"), allow_nan=False).encode("utf-8")

        raw = RawRequestBuilder(
            method=self.method,
            url=self.url,
            headers=self.headers,
            body=data,
            default_content_type=JSON_MEDIA_TYPE,
        )
        return raw.build_request()
