"""
Request and response descriptors passed across the transport seam.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, Field


class Request(BaseModel):
    url: Optional[str] = None
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Optional[bytes] = None

    @classmethod
    def with_json(
        cls,
        url: str,
        payload: Any,
        method: str = "POST",
        headers: Optional[dict[str, str]] = None,
    ) -> "Request":
        """Build a request carrying `payload` serialized as a JSON body."""
        return cls(
            url=url,
            method=method,
            headers={"Content-Type": "application/json", **(headers or {})},
            body=json.dumps(payload).encode("utf-8"),
        )


class HTTPResponse(BaseModel):
    status_code: int
    headers: dict[str, str] = Field(default_factory=dict)
    url: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299
