"""
Response envelope — metadata wrapped around a payload.

Wire shape:
    { "success": bool, "data": <T> | null, "message": str | null, "timestamp": "<ISO-8601>" }
"""

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from request_handler.coding import WireDatetime

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """`success` is informational only; a missing `data` is what callers act on."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    timestamp: WireDatetime

    @classmethod
    def wrap(cls, data: Optional[T], message: Optional[str] = None, success: bool = True) -> "Envelope[T]":
        """Build an envelope in code, stamped with the current UTC time."""
        return cls(success=success, data=data, message=message, timestamp=datetime.now(timezone.utc))


class ErrorResponse(BaseModel):
    """Error body the server sends alongside a non-2xx status."""

    message: str
