"""Shared fixtures for httpflow tests."""

import io
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict


class FailingReader(io.RawIOBase):
    """Body stream whose reads always fail."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    def readable(self):
        return True

    def read(self, size=-1):
        raise self.error


def build_response(status=200, headers=None, body=b"", url="http://localhost/"):
    """Build an unread requests.Response over an in-memory body."""
    response = requests.Response()
    response.status_code = status
    response.headers = CaseInsensitiveDict(headers or {})
    response.raw = body if hasattr(body, "read") else io.BytesIO(body)
    response.url = url
    response.close = MagicMock(wraps=response.close)
    return response


@pytest.fixture
def make_response():
    """Factory for responses whose close() calls are recorded."""
    return build_response


@pytest.fixture
def failing_reader():
    """Factory for body streams that raise the given error on read."""
    return FailingReader
