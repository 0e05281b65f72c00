"""
http_replay exception hierarchy.

All exceptions inherit from ReplayError for easy catching. Errors raised by
the wrapped transport (``httpx.TransportError`` and friends) are never
wrapped, so existing network error handling keeps working unchanged.
"""

from pathlib import Path
from typing import Any

import httpx

from http_replay.sanitize import url_for_log


class ReplayError(Exception):
    """Base exception for all http_replay errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class FingerprintError(ReplayError):
    """Request body could not be read or restored while computing its checksum."""


class RecordingError(ReplayError):
    """Recording file could not be used."""

    def __init__(self, message: str, *, path: Path | str) -> None:
        super().__init__(message, path=str(path))
        self.path = Path(path)


class NotFoundError(RecordingError):
    """No recording exists at the given path."""


class StorageError(RecordingError):
    """Recording exists but could not be read, parsed or written."""


class InterceptionError(ReplayError):
    """
    Failure while fingerprinting a request or persisting its response.

    Lets callers tell a local recording problem apart from a network error
    raised by the wrapped transport. The underlying error is chained as
    ``__cause__``.

    Attributes:
        request: Request being processed when the error occurred.
        response: Live response being recorded, or None if the failure
            happened before the wrapped transport was called.
    """

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message, method=request.method, url=url_for_log(request.url))
        self.request = request
        self.response = response

    @property
    def cause(self) -> BaseException | None:
        """Underlying error that was encountered."""
        return self.__cause__
