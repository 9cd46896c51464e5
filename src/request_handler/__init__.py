"""
request-handler — request handling convenience layer over httpx.

Performs a request, validates the HTTP status and decodes the JSON body into a
requested type, whether or not the server wraps it in a metadata envelope.
"""

from request_handler.coding import (
    DateDecodingStrategy,
    DateEncodingStrategy,
    JSONDecoder,
    JSONEncoder,
    KeyDecodingStrategy,
    KeyEncodingStrategy,
    WireDatetime,
)
from request_handler.errors import (
    DecodingContext,
    DecodingError,
    EnvelopeDataMissing,
    HttpError,
    InvalidResponse,
    RequestError,
)
from request_handler.handler import BlockingHandler, Handler, redact_headers
from request_handler.models.envelope import Envelope
from request_handler.models.request import HTTPResponse, Request
from request_handler.reporting import IssueReporter, LoggingIssueReporter, SourceLocation
from request_handler.transport.http import HttpxTransport, Transport, default_transport

__version__ = "0.1.0"
__all__ = [
    "Handler",
    "BlockingHandler",
    "Request",
    "HTTPResponse",
    "Envelope",
    "RequestError",
    "InvalidResponse",
    "HttpError",
    "DecodingError",
    "EnvelopeDataMissing",
    "DecodingContext",
    "JSONDecoder",
    "JSONEncoder",
    "DateDecodingStrategy",
    "DateEncodingStrategy",
    "KeyDecodingStrategy",
    "KeyEncodingStrategy",
    "WireDatetime",
    "Transport",
    "HttpxTransport",
    "default_transport",
    "IssueReporter",
    "LoggingIssueReporter",
    "SourceLocation",
    "redact_headers",
]
