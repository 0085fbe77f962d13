"""
httpflow - Composable request builders and response handlers on top of requests.

Usage:
    from httpflow import Agent, JSONRequestBuilder, JSONResponseHandler, Session

    builder = JSONRequestBuilder("POST", "https://api.example.com/items", body={"name": "foo"})
    handler = JSONResponseHandler().expect_status_code(200, 201)

    Agent.from_requests().run_session(Session(builder, handler), timeout=10)
    item = handler.decode_json()
"""

__version__ = "1.0.0"

import logging

from .agent import Agent, Requester, Session, Timeout, Transport, default_agent, run_session
from .builders import (
    FormRequestBuilder,
    JSONRequestBuilder,
    NoBodyRequestBuilder,
    RawRequestBuilder,
    RequestBuilder,
)
from .config import AgentConfig
from .errors import (
    HttpFlowError,
    InvalidMethodError,
    MediaTypeError,
    UnexpectedContentTypeError,
    UnexpectedStatusCodeError,
)
from .handlers import (
    BinaryResponseHandler,
    FormResponseHandler,
    JSONResponseHandler,
    NoBodyResponseHandler,
    RawResponseHandler,
    ResponseHandler,
    StringResponseHandler,
)
from .logging_config import disable_debug_logging, enable_debug_logging
from .status import StatusCode

__all__ = [
    "__version__",
    # Agent
    "Agent",
    "AgentConfig",
    "Requester",
    "Session",
    "Timeout",
    "Transport",
    "default_agent",
    "run_session",
    # Builders
    "RequestBuilder",
    "RawRequestBuilder",
    "NoBodyRequestBuilder",
    "FormRequestBuilder",
    "JSONRequestBuilder",
    # Handlers
    "ResponseHandler",
    "RawResponseHandler",
    "NoBodyResponseHandler",
    "BinaryResponseHandler",
    "StringResponseHandler",
    "JSONResponseHandler",
    "FormResponseHandler",
    # Errors
    "HttpFlowError",
    "InvalidMethodError",
    "MediaTypeError",
    "UnexpectedContentTypeError",
    "UnexpectedStatusCodeError",
    # Misc
    "StatusCode",
    "enable_debug_logging",
    "disable_debug_logging",
]

# Silent unless the application configures logging or calls enable_debug_logging()
logging.getLogger(__name__).addHandler(logging.NullHandler())
