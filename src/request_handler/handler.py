"""
Request handler — performs a request, validates the status and decodes the body.

Bodies may arrive either wrapped in an `Envelope` or bare. `send` tries the
envelope first and falls back to decoding the requested type directly, so one
call site works whichever shape an endpoint returns. An envelope that decodes
but carries no data is reported as `EnvelopeDataMissing` and is not retried.
"""

import asyncio
import logging
from typing import Any, Optional, TypeVar, overload

from pydantic import ValidationError

from request_handler.coding import DateDecodingStrategy, JSONDecoder, KeyDecodingStrategy, type_name
from request_handler.errors import (
    DecodingContext,
    DecodingError,
    EnvelopeDataMissing,
    HttpError,
    InvalidResponse,
    RequestError,
)
from request_handler.models.envelope import Envelope, ErrorResponse
from request_handler.models.request import HTTPResponse, Request
from request_handler.reporting import IssueReporter, LoggingIssueReporter, SourceLocation, caller_location
from request_handler.transport.http import Transport, default_transport

T = TypeVar("T")

REDACTED = "*****"
SENSITIVE_HEADER_MARKERS = ("authorization", "token")


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask values of headers whose name mentions authorization or a token."""
    return {
        name: REDACTED if any(marker in name.lower() for marker in SENSITIVE_HEADER_MARKERS) else value
        for name, value in headers.items()
    }


def _format_headers(headers: dict[str, str]) -> str:
    return ", ".join(f"{name}: {value}" for name, value in headers.items())


def _utf8_or_none(data: bytes) -> Optional[str]:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class Handler:
    """Async request handler (primary).

    `debug` turns on step-by-step logging of requests, responses and decode
    attempts. Issue reports go out unless `report_issues` says otherwise; left
    as None it follows `not debug`.
    """

    def __init__(
        self,
        debug: bool = False,
        decoder: Optional[JSONDecoder] = None,
        *,
        report_issues: Optional[bool] = None,
        transport: Optional[Transport] = None,
        logger: Optional[logging.Logger] = None,
        issue_reporter: Optional[IssueReporter] = None,
    ):
        self.debug = debug
        self.decoder = decoder if decoder is not None else self.default_decoder()
        self._report_issues = (not debug) if report_issues is None else report_issues
        self._transport = transport or default_transport
        self._logger = logger or logging.getLogger("request_handler.handler")
        self._issue_reporter = issue_reporter or LoggingIssueReporter()

    @staticmethod
    def default_decoder() -> JSONDecoder:
        """ISO-8601 dates, snake_case wire keys mapped to camelCase."""
        return JSONDecoder(
            date_strategy=DateDecodingStrategy.ISO8601,
            key_strategy=KeyDecodingStrategy.CONVERT_FROM_SNAKE_CASE,
        )

    @property
    def report_issues(self) -> bool:
        return self._report_issues

    @overload
    async def send(self, request: Request, decoding_to: None = None, *,
                   location: Optional[SourceLocation] = None) -> None: ...

    @overload
    async def send(self, request: Request, decoding_to: type[T], *,
                   location: Optional[SourceLocation] = None) -> T: ...

    async def send(self, request: Request, decoding_to: Any = None, *,
                   location: Optional[SourceLocation] = None) -> Any:
        """Perform `request` and decode the body as `decoding_to`.

        Without `decoding_to` only the status is checked and nothing is decoded.
        `location` defaults to the caller's file and line.

        Raises:
            InvalidResponse: no URL, or the transport returned a non-HTTP response.
            HttpError: status outside 200-299.
            EnvelopeDataMissing: the body was an envelope without data.
            DecodingError: the body decoded as neither an envelope nor `decoding_to`.
        """
        location = location or caller_location()
        data = await self._perform(request, location)
        if decoding_to is None:
            return None
        return self._decode(data, decoding_to, location)

    __call__ = send

    async def _perform(self, request: Request, location: SourceLocation) -> bytes:
        if not request.url:
            self._report("Request has no URL", location)
            raise InvalidResponse()

        if self.debug:
            self._log_request(request)

        data, response = await self._transport(request)

        if self.debug:
            self._log_response(response, data)

        if not isinstance(response, HTTPResponse):
            if self.debug:
                self._logger.error(f"Invalid Response - Expected HTTPResponse but got: {response!r}")
            self._report(f"Received non-HTTP response: {response!r}", location)
            raise InvalidResponse()

        self._validate(response, data, location)
        return data

    def _validate(self, response: HTTPResponse, data: bytes, location: SourceLocation) -> None:
        if response.is_success:
            return

        try:
            message = ErrorResponse.model_validate_json(data).message
        except ValidationError:
            message = data.decode("utf-8", errors="replace")

        if self.debug:
            self._logger.error(
                f"HTTP Error - Status: {response.status_code}, Message: {message}, "
                f"Raw Response: {_utf8_or_none(data) or 'Unable to decode error response'}"
            )
        if response.status_code >= 500:
            self._report(f"Server error {response.status_code}: {message}", location)
        raise HttpError(response.status_code, message)

    def _decode(self, data: bytes, type_: Any, location: SourceLocation) -> Any:
        name = type_name(type_)
        if self.debug:
            self._logger.debug(f"Trying to decode response data: {_utf8_or_none(data) or 'Unable to decode response data'}")
            self._logger.debug(f"Attempting to decode as Envelope[{name}]")

        try:
            envelope = self.decoder.decode(Envelope[type_], data)
        except EnvelopeDataMissing:
            raise
        except (RequestError, ValueError) as e:
            if self.debug:
                self._logger.info(f"Envelope decode failed, attempting direct decode. Error: {e}")
            return self._decode_direct(data, type_, name, location)

        if self.debug:
            self._logger.debug(f"Envelope decoded successfully. Success: {envelope.success}")

        if envelope.data is not None:
            if self.debug:
                self._logger.debug("Returning envelope data")
            return envelope.data

        if self.debug:
            self._logger.warning("Envelope data is nil, envelope response contained no data")
        raise EnvelopeDataMissing()

    def _decode_direct(self, data: bytes, type_: Any, name: str, location: SourceLocation) -> Any:
        try:
            value = self.decoder.decode(type_, data)
        except RequestError as e:
            if self.debug:
                self._logger.error(f"Direct decode failed with RequestError: {e!r}")
            raise
        except ValueError as e:
            context = DecodingContext(
                original_error=str(e),
                attempted_type=name,
                file_id=location.file_id,
                line=location.line,
                raw_data=_utf8_or_none(data),
            )
            if self.debug:
                self._logger.error(f"Direct decode failed: {context.description}")
            self._report(f"Failed to decode response as {name}", location)
            raise DecodingError(context) from e

        if self.debug:
            self._logger.debug("Direct decode successful")
        return value

    def _report(self, message: str, location: SourceLocation) -> None:
        if self._report_issues:
            self._issue_reporter.report_issue(message, location)

    def _log_request(self, request: Request) -> None:
        self._logger.info(f"Request - URL: {request.url}, Method: {request.method}")
        if request.headers:
            self._logger.debug(f"Request Headers: {_format_headers(redact_headers(request.headers))}")
        if request.body is not None:
            self._logger.debug(f"Request Body: {_utf8_or_none(request.body) or 'Unable to decode body'}")

    def _log_response(self, response: Any, data: bytes) -> None:
        if isinstance(response, HTTPResponse):
            self._logger.info(f"Response - Status: {response.status_code}")
            self._logger.debug(f"Response Headers: {_format_headers(response.headers)}")
        self._logger.debug(f"Response Body: {_utf8_or_none(data) or 'Unable to decode response body'}")


class BlockingHandler:
    """Sync wrapper around Handler. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = Handler(**kwargs)
        self._loop = asyncio.new_event_loop()

    @property
    def handler(self) -> Handler:
        return self._async

    def send(self, request: Request, decoding_to: Any = None) -> Any:
        return self._loop.run_until_complete(
            self._async.send(request, decoding_to, location=caller_location())
        )

    def close(self) -> None:
        self._loop.close()

    def __enter__(self) -> "BlockingHandler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
