"""
Request error types — the closed set of outcomes a failed `Handler.send` can raise.

There are exactly four kinds. Callers are expected to handle each of them, so
the base class refuses subclasses declared anywhere but here:

    try:
        user = await handler.send(request, User)
    except RequestError as e:
        match e:
            case HttpError(404, message): ...
            case DecodingError(context): ...
            case EnvelopeDataMissing(): ...
            case InvalidResponse(): ...
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class DecodingContext(BaseModel):
    """Diagnostics for a response body that decoded as neither shape."""

    model_config = ConfigDict(frozen=True)

    original_error: str
    attempted_type: str
    file_id: str = "<unknown>"
    line: int = 0
    raw_data: Optional[str] = None

    @property
    def description(self) -> str:
        desc = f"{self.original_error} (attempted type: {self.attempted_type} at {self.file_id}:{self.line})"
        if self.raw_data is not None:
            desc += f"\nRaw data received: {self.raw_data}"
        return desc


class RequestError(Exception):
    code = "request_error"
    __match_args__: tuple[str, ...] = ()

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(f"{cls.__qualname__}: the set of RequestError kinds is closed")

    def _key(self) -> tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self.__match_args__)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._key()))

    def __repr__(self) -> str:
        args = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__match_args__)
        return f"{type(self).__name__}({args})"


class InvalidResponse(RequestError):
    """The transport answered with something that is not an HTTP response, or the request had no URL."""

    code = "invalid_response"

    def __init__(self) -> None:
        super().__init__("Invalid response from server")


class HttpError(RequestError):
    code = "http_error"
    __match_args__ = ("status_code", "message")

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DecodingError(RequestError):
    """The body decoded neither as an envelope nor as the requested type."""

    code = "decoding_error"
    __match_args__ = ("context",)

    def __init__(self, context: DecodingContext):
        super().__init__(f"Failed to decode response: {context.description}")
        self.context = context


class EnvelopeDataMissing(RequestError):
    """The envelope decoded but carried no data. Not retried as a direct decode."""

    code = "envelope_data_missing"

    def __init__(self) -> None:
        super().__init__("Envelope response contained no data")
