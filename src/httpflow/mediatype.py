"""Content-Type parsing, charset decoding and form encoding helpers."""

from __future__ import annotations

import re
from typing import Mapping, Optional, Sequence, Union
from urllib.parse import parse_qs, urlencode

from .errors import MediaTypeError

CONTENT_TYPE_HEADER = "Content-Type"

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

# Field values accepted for headers and form bodies: one value or several
FieldValues = Mapping[str, Union[str, Sequence[str]]]

# RFC 9110 token characters
_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_TOKEN_RE = re.compile(_TOKEN)
_PARAM_RE = re.compile(
    rf'\s*({_TOKEN})\s*=\s*(?:"((?:[^"\\]|\\.)*)"|({_TOKEN}))\s*(?:;|$)'
)
_QUOTED_PAIR_RE = re.compile(r"\\(.)")
_BAD_ESCAPE_RE = re.compile(rb"%(?![0-9A-Fa-f]{2})")


def is_token(value: str) -> bool:
    """Return True if value is a non-empty RFC 9110 token."""
    return _TOKEN_RE.fullmatch(value) is not None


def parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    """
    Parse a Content-Type value into its media type and parameters.

    The media type and parameter names are lower-cased; parameter values
    keep their case, with quoted strings unquoted.

    Args:
        value: Raw header value, e.g. 'text/plain; charset="Shift_JIS"'

    Returns:
        Tuple of (media type, parameters)

    Raises:
        MediaTypeError: If the value is not a well-formed media type
    """
    head, _, rest = value.partition(";")
    media_type = head.strip().lower()
    main_type, slash, sub_type = media_type.partition("/")
    if not slash or not is_token(main_type) or not is_token(sub_type):
        raise MediaTypeError(value, "expected type/subtype")

    params: dict[str, str] = {}
    rest = rest.lstrip(" \t;")
    while rest:
        match = _PARAM_RE.match(rest)
        if match is None:
            raise MediaTypeError(value, f"malformed parameter {rest.strip()!r}")
        name = match.group(1).lower()
        if match.group(2) is not None:
            param_value = _QUOTED_PAIR_RE.sub(r"\1", match.group(2))
        else:
            param_value = match.group(3)
        if name in params:
            raise MediaTypeError(value, f"duplicate parameter {name!r}")
        params[name] = param_value
        rest = rest[match.end() :].lstrip(" \t;")
    return media_type, params


def media_type_of(content_type: Optional[str]) -> Optional[str]:
    """Return the bare media type of a Content-Type value, or None if unparseable."""
    if not content_type:
        return None
    try:
        media_type, _ = parse_media_type(content_type)
    except MediaTypeError:
        return None
    return media_type


def is_json_media_type(media_type: Optional[str]) -> bool:
    """
    Check whether a media type carries JSON.

    Matches application/json, application/json+<suffix> and structured
    syntax types such as application/problem+json (RFC 7807).
    """
    if not media_type:
        return False
    if media_type == JSON_MEDIA_TYPE or media_type.startswith(JSON_MEDIA_TYPE + "+"):
        return True
    main_type, _, sub_type = media_type.partition("/")
    return main_type == "application" and sub_type.endswith("+json")


def is_form_media_type(media_type: Optional[str]) -> bool:
    return media_type == FORM_MEDIA_TYPE


def decode_text(body: bytes, content_type: Optional[str]) -> str:
    """
    Decode a response body using the charset declared in its Content-Type.

    Without a Content-Type or a charset parameter the body is taken as
    UTF-8, with invalid sequences replaced.

    Raises:
        MediaTypeError: If the Content-Type cannot be parsed
        LookupError: If the charset is not a known text encoding
        UnicodeDecodeError: If the body is not valid in the declared charset
    """
    if not content_type:
        return body.decode("utf-8", errors="replace")

    _, params = parse_media_type(content_type)
    charset = params.get("charset")
    if not charset:
        return body.decode("utf-8", errors="replace")
    return body.decode(charset)


def _as_list(value: Union[str, Sequence[str]]) -> list[str]:
    if isinstance(value, (str, bytes)):
        return [value]  # type: ignore[list-item]
    return list(value)


def field_items(values: FieldValues) -> list[tuple[str, str]]:
    """Flatten a name -> value(s) mapping into ordered (name, value) pairs."""
    return [(name, value) for name in values for value in _as_list(values[name])]


def encode_form(values: FieldValues) -> str:
    """
    Encode values as application/x-www-form-urlencoded.

    Keys are sorted; a key with several values is repeated once per value.
    """
    return urlencode(field_items(dict(sorted(values.items()))))


def parse_form(body: bytes) -> dict[str, list[str]]:
    """
    Parse an application/x-www-form-urlencoded body.

    Percent escapes decode as UTF-8 whatever charset the Content-Type
    declares. Bytes that are not valid UTF-8, raw or escaped, are kept as
    surrogate escapes rather than replaced. Blank values are kept.

    Raises:
        ValueError: If a "%" is not followed by two hex digits
    """
    bad_escape = _BAD_ESCAPE_RE.search(body)
    if bad_escape is not None:
        offset = bad_escape.start()
        raise ValueError(f"Invalid percent escape {body[offset : offset + 3]!r} at offset {offset}")

    text = body.decode("utf-8", errors="surrogateescape")
    return parse_qs(text, keep_blank_values=True, encoding="utf-8", errors="surrogateescape")
