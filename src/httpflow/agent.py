"""Session driver: build a request, send it through a transport, handle the response."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union, runtime_checkable

import requests

from .builders import RequestBuilder
from .config import AgentConfig
from .handlers import ResponseHandler
from .status import StatusCode

logger = logging.getLogger(__name__)

# requests timeout: seconds, (connect, read) seconds, or None for no limit
Timeout = Union[float, tuple[float, float], None]


class Transport(Protocol):
    """
    Protocol for the transport that performs network I/O.

    requests.Session satisfies it as-is. Test doubles only need send().
    """

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        """
        Send a prepared request.

        Args:
            request: Request produced by a RequestBuilder
            **kwargs: timeout and stream, as accepted by requests.Session.send

        Returns:
            Response whose body has not been consumed yet when stream=True

        Raises:
            requests.RequestException (or the transport's own errors) on
            network failures, timeouts and cancellation
        """
        ...


@runtime_checkable
class Requester(RequestBuilder, ResponseHandler, Protocol):
    """Anything that can both build a request and handle its response."""


@dataclass
class Session:
    """
    One builder paired with one handler.

    The handler accumulates the outcome, so a Session is run once. The
    builder may be shared between sessions.
    """

    builder: RequestBuilder
    handler: ResponseHandler

    def build_request(self) -> requests.PreparedRequest:
        return self.builder.build_request()

    def handle_response(self, response: requests.Response) -> None:
        self.handler.handle_response(response)


class Agent:
    """
    Drives sessions through an injected transport.

    Each run is a single attempt: no retries, no redirect handling of its
    own, no cloning of the response. Errors from building, sending and
    handling are raised unchanged, and the handler never runs unless the
    transport returned a response.

    Example:
        agent = Agent.from_requests()
        handler = JSONResponseHandler().expect_status_code(200)
        agent.run(NoBodyRequestBuilder("GET", "https://api.example.com/items"), handler)
        items = handler.decode_json()
    """

    def __init__(self, transport: Transport, config: Optional[AgentConfig] = None) -> None:
        """
        Initialize the agent.

        Args:
            transport: Object with a requests.Session-compatible send()
            config: Agent settings (defaults if None)
        """
        self.transport = transport
        self.config = config or AgentConfig()

    @classmethod
    def from_requests(
        cls,
        session: Optional[requests.Session] = None,
        config: Optional[AgentConfig] = None,
    ) -> Agent:
        """Create an agent backed by a requests.Session (a new one if omitted)."""
        return cls(session if session is not None else requests.Session(), config)

    def run_session(self, session: Requester, timeout: Timeout = None) -> None:
        """
        Run one session.

        Args:
            session: Builder/handler pair, e.g. a Session
            timeout: Timeout for the transport call; falls back to
                config.timeout when None

        Raises:
            Whatever the builder, transport or handler raised
        """
        request = session.build_request()

        if timeout is None:
            timeout = self.config.timeout

        logger.debug(f"Sending {request.method} {request.url} (timeout={timeout})")
        response = self.transport.send(request, timeout=timeout, stream=self.config.stream)
        logger.debug(f"Received {StatusCode(response.status_code)} for {request.method} {request.url}")

        session.handle_response(response)

    def run(self, builder: RequestBuilder, handler: ResponseHandler, timeout: Timeout = None) -> None:
        """Pair builder and handler in a Session and run it."""
        self.run_session(Session(builder, handler), timeout=timeout)


_default_agent: Optional[Agent] = None
_default_agent_lock = threading.Lock()


def default_agent() -> Agent:
    """Return the shared agent backed by a module-level requests.Session."""
    global _default_agent
    with _default_agent_lock:
        if _default_agent is None:
            _default_agent = Agent.from_requests()
        return _default_agent


def run_session(session: Requester, timeout: Timeout = None) -> None:
    """Run a session through the default agent."""
    default_agent().run_session(session, timeout=timeout)
