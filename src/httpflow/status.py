"""HTTP status code value type."""

from __future__ import annotations

from http import HTTPStatus


class StatusCode(int):
    """
    HTTP status code with range predicates.

    The value is not validated: anything outside 100-599 is simply a code
    that matches none of the range predicates.

    Example:
        >>> str(StatusCode(200))
        '200 OK'
        >>> StatusCode(503).is_server_error()
        True
    """

    __slots__ = ()

    def is_informational(self) -> bool:
        return 100 <= self < 200

    def is_successful(self) -> bool:
        return 200 <= self < 300

    def is_redirection(self) -> bool:
        return 300 <= self < 400

    def is_client_error(self) -> bool:
        return 400 <= self < 500

    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def reason(self) -> str:
        """Standard reason phrase, or an empty string for unknown codes."""
        try:
            return HTTPStatus(int(self)).phrase
        except ValueError:
            return ""

    def __str__(self) -> str:
        return f"{int(self)} {self.reason}"

    def __repr__(self) -> str:
        return f"StatusCode({int(self)})"
