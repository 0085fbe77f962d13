"""Tests for the session agent."""

from unittest.mock import MagicMock

import pytest
import requests
from httpflow import (
    Agent,
    AgentConfig,
    BinaryResponseHandler,
    JSONRequestBuilder,
    JSONResponseHandler,
    NoBodyRequestBuilder,
    Requester,
    Session,
    UnexpectedStatusCodeError,
    default_agent,
    run_session,
)
from httpflow import agent as agent_module

URL = "http://example.com/"


class MockRequester:
    """Requester that records how often each half is called."""

    def __init__(self, request=None, build_error=None, handle_error=None):
        self.request = request
        self.build_error = build_error
        self.handle_error = handle_error
        self.build_calls = 0
        self.handle_calls = 0
        self.response = None

    def build_request(self):
        self.build_calls += 1
        if self.build_error:
            raise self.build_error
        return self.request

    def handle_response(self, response):
        self.handle_calls += 1
        self.response = response
        if self.handle_error:
            raise self.handle_error


@pytest.fixture
def prepared():
    """Prepared GET request."""
    return NoBodyRequestBuilder(method="GET", url=URL).build_request()


@pytest.fixture
def transport(make_response):
    """Transport double returning a text/plain response."""
    transport = MagicMock()
    transport.send.return_value = make_response(
        status=200,
        headers={"Content-Type": "text/plain"},
        body=b"this is example.com",
        url=URL,
    )
    return transport


class TestAgent:
    """Tests for Agent.run_session."""

    def test_success(self, transport, prepared):
        """Test the full build, send, handle sequence."""
        requester = MockRequester(request=prepared)
        Agent(transport).run_session(requester)

        assert requester.build_calls == 1
        assert requester.handle_calls == 1
        transport.send.assert_called_once_with(prepared, timeout=None, stream=True)

        res = requester.response
        assert res.status_code == 200
        assert res.headers["Content-Type"] == "text/plain"
        assert res.content == b"this is example.com"

    def test_build_error(self, transport):
        """Test build failures stop the session before sending."""
        requester = MockRequester(build_error=ValueError("MOCK REQUEST BUILDING ERROR"))
        with pytest.raises(ValueError, match="MOCK REQUEST BUILDING ERROR"):
            Agent(transport).run_session(requester)

        assert requester.build_calls == 1
        assert requester.handle_calls == 0
        transport.send.assert_not_called()

    def test_transport_error(self, transport, prepared):
        """Test transport failures propagate and skip the handler."""
        transport.send.side_effect = requests.ConnectionError("MOCK REQUEST ERROR")
        requester = MockRequester(request=prepared)
        with pytest.raises(requests.ConnectionError, match="MOCK REQUEST ERROR"):
            Agent(transport).run_session(requester)

        assert requester.build_calls == 1
        assert requester.handle_calls == 0

    def test_timeout_error(self, transport, prepared):
        """Test timeouts surface unchanged."""
        transport.send.side_effect = requests.Timeout("deadline exceeded")
        requester = MockRequester(request=prepared)
        with pytest.raises(requests.Timeout):
            Agent(transport).run_session(requester, timeout=0.5)
        assert requester.handle_calls == 0

    def test_handle_error(self, transport, prepared):
        """Test handler failures are the session result."""
        requester = MockRequester(request=prepared, handle_error=RuntimeError("MOCK RESPONSE ERROR"))
        with pytest.raises(RuntimeError, match="MOCK RESPONSE ERROR"):
            Agent(transport).run_session(requester)

        assert requester.build_calls == 1
        assert requester.handle_calls == 1

    def test_timeout_passed(self, transport, prepared):
        """Test an explicit timeout is attached to the send."""
        Agent(transport).run_session(MockRequester(request=prepared), timeout=(3.0, 10.0))
        transport.send.assert_called_once_with(prepared, timeout=(3.0, 10.0), stream=True)

    def test_config_defaults(self, transport, prepared):
        """Test config supplies the default timeout and stream flag."""
        agent = Agent(transport, AgentConfig(timeout=5.0, stream=False))
        agent.run_session(MockRequester(request=prepared))
        transport.send.assert_called_once_with(prepared, timeout=5.0, stream=False)

    def test_explicit_timeout_wins(self, transport, prepared):
        """Test a per-session timeout overrides the configured one."""
        agent = Agent(transport, AgentConfig(timeout=5.0))
        agent.run_session(MockRequester(request=prepared), timeout=1.0)
        transport.send.assert_called_once_with(prepared, timeout=1.0, stream=True)


class TestSession:
    """Tests for builder/handler pairing."""

    def test_session_is_requester(self):
        """Test Session satisfies the Requester protocol."""
        session = Session(NoBodyRequestBuilder(method="GET", url=URL), BinaryResponseHandler())
        assert isinstance(session, Requester)

    def test_json_round_trip(self, make_response):
        """Test a JSON builder and handler through a transport double."""
        transport = MagicMock()
        transport.send.return_value = make_response(
            status=201,
            headers={"Content-Type": "application/json"},
            body=b'{"id":7,"foo":"bar"}',
        )
        builder = JSONRequestBuilder(method="POST", url=URL, body={"foo": "bar"})
        handler = JSONResponseHandler().expect_status_code(200, 201)

        Agent(transport).run(builder, handler)

        sent = transport.send.call_args.args[0]
        assert sent.body == b'{"foo":"bar"}'
        assert sent.headers["Content-Type"] == "application/json"
        assert handler.status_code == 201
        assert handler.decode_json() == {"id": 7, "foo": "bar"}
        transport.send.return_value.close.assert_called()

    def test_unexpected_status(self, make_response):
        """Test a status mismatch surfaces from run_session with the body."""
        transport = MagicMock()
        transport.send.return_value = make_response(status=500, body=b"boom")
        handler = BinaryResponseHandler().expect_status_code(200)
        session = Session(NoBodyRequestBuilder(method="GET", url=URL), handler)

        with pytest.raises(UnexpectedStatusCodeError) as exc_info:
            Agent(transport).run_session(session)
        assert exc_info.value.status_code == 500
        assert exc_info.value.body == b"boom"


class TestDefaultAgent:
    """Tests for the module-level agent."""

    @pytest.fixture(autouse=True)
    def reset_default(self, monkeypatch):
        monkeypatch.setattr(agent_module, "_default_agent", None)

    def test_from_requests(self):
        """Test an agent over a new requests.Session."""
        agent = Agent.from_requests()
        assert isinstance(agent.transport, requests.Session)
        assert agent.config == AgentConfig()

    def test_from_requests_existing_session(self):
        """Test an agent over a caller-provided requests.Session."""
        session = requests.Session()
        assert Agent.from_requests(session).transport is session

    def test_default_agent_is_shared(self):
        """Test the default agent is created once."""
        first = default_agent()
        assert first is default_agent()
        assert isinstance(first.transport, requests.Session)

    def test_run_session_uses_default(self, monkeypatch, transport, prepared):
        """Test run_session goes through the default agent."""
        monkeypatch.setattr(agent_module, "_default_agent", Agent(transport))
        requester = MockRequester(request=prepared)
        run_session(requester, timeout=2.0)
        transport.send.assert_called_once_with(prepared, timeout=2.0, stream=True)
        assert requester.handle_calls == 1
