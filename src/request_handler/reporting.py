"""
Issue reporting — out-of-band record of unexpected conditions for monitoring.

Reports never change control flow; the caller still gets the raised error.
"""

import asyncio
import inspect
import logging
import os
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict


class SourceLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_id: str = "<unknown>"
    line: int = 0

    def __str__(self) -> str:
        return f"{self.file_id}:{self.line}"


_ASYNCIO_DIR = os.path.dirname(asyncio.__file__) + os.sep


def _is_event_loop_frame(frame) -> bool:
    return frame.f_code.co_filename.startswith(_ASYNCIO_DIR)


def caller_location(depth: int = 1) -> SourceLocation:
    """Location of the frame `depth` levels above the caller of this function.

    A coroutine started directly as a task has the event loop above it, not
    user code; that case gives an unknown location.
    """
    frame = inspect.currentframe()
    try:
        target = frame.f_back if frame else None
        for _ in range(depth):
            if target is None:
                break
            target = target.f_back
        if target is None or _is_event_loop_frame(target):
            return SourceLocation()
        return SourceLocation(file_id=target.f_code.co_filename, line=target.f_lineno)
    finally:
        del frame


class IssueReporter(Protocol):
    def report_issue(self, message: str, location: SourceLocation) -> None: ...


class LoggingIssueReporter:
    """Default reporter: an ERROR record on the `request_handler.issues` logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("request_handler.issues")

    def report_issue(self, message: str, location: SourceLocation) -> None:
        self._logger.error(f"Issue reported at {location}: {message}")
