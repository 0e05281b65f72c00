"""
Request fingerprinting.

Reduces a request to a recording path: a directory built from the scheme,
host, method and URL path, plus a CRC-32 checksum over whatever else could
tell two requests to the same URL apart (query parameters, headers, body).
"""

import os
import zlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from urllib.parse import quote_plus

import httpx
import structlog

from http_replay.core.headers import canonical_header_key, group_headers
from http_replay.exceptions import FingerprintError
from http_replay.models.recording import RecordingPath
from http_replay.sanitize import url_for_log

logger = structlog.get_logger(__name__)

BodyMunger = Callable[[httpx.Request, bytes], bytes]

_DEFAULT_OMIT_HEADERS = frozenset(
    {
        "Authorization",
        "Connection",
        "Date",
        "Proxy-Authorization",
        "Transfer-Encoding",
        "Upgrade",
        # Filled in by httpx itself on every request.
        "Host",
        "Content-Length",
        "User-Agent",
        "Accept",
        "Accept-Encoding",
    }
)


def default_omit_headers() -> frozenset[str]:
    """
    Headers left out of checksums by default.

    Covers credentials, hop-by-hop headers, and headers httpx adds to every
    request, none of which say anything about what is being asked for.
    """
    return _DEFAULT_OMIT_HEADERS


@dataclass
class PathGenerator:
    """
    Derives a unique recording path for a request.

    Attributes:
        omit_headers: Header names excluded from the checksum (matched
            case-insensitively). Requests differing only in these headers
            share a recording.
        omit_query: Query parameter names excluded from the checksum.
        munge_request_body: Optional hook returning the body bytes to hash.
            It never changes what is sent to the server.
    """

    omit_headers: set[str] = field(default_factory=lambda: set(default_omit_headers()))
    omit_query: set[str] = field(default_factory=set)
    munge_request_body: BodyMunger | None = None

    def recording_path(self, request: httpx.Request) -> RecordingPath:
        """
        Compute the recording path for a request.

        The request body is buffered so it can still be sent afterwards.

        Raises:
            FingerprintError: If the request body cannot be read.
        """
        return RecordingPath(
            directory=request_directory(request),
            checksum=self.request_checksum(request),
        )

    async def arecording_path(self, request: httpx.Request) -> RecordingPath:
        """Async variant of :meth:`recording_path` for async request streams."""
        return RecordingPath(
            directory=request_directory(request),
            checksum=await self.arequest_checksum(request),
        )

    def request_checksum(self, request: httpx.Request) -> str:
        """
        Checksum over the request's query parameters, headers and body.

        Returns:
            Decimal CRC-32, or an empty string if there was nothing to hash.

        Raises:
            FingerprintError: If the request body cannot be read.
        """
        try:
            body = request.read()
        except Exception as e:
            msg = "Failed to buffer request body"
            raise FingerprintError(msg, url=url_for_log(request.url)) from e
        return self._checksum(request, body)

    async def arequest_checksum(self, request: httpx.Request) -> str:
        """Async variant of :meth:`request_checksum`."""
        try:
            body = await request.aread()
        except Exception as e:
            msg = "Failed to buffer request body"
            raise FingerprintError(msg, url=url_for_log(request.url)) from e
        return self._checksum(request, body)

    def _checksum(self, request: httpx.Request, body: bytes) -> str:
        crc = 0
        has_hash = False

        query: dict[str, list[str]] = {}
        for key, value in request.url.params.multi_items():
            query.setdefault(key, []).append(value)
        crc, hashed = _update_crc(crc, query, self.omit_query)
        has_hash = has_hash or hashed

        omit_headers = {canonical_header_key(name) for name in self.omit_headers}
        crc, hashed = _update_crc(crc, group_headers(request.headers), omit_headers)
        has_hash = has_hash or hashed

        if self.munge_request_body is not None:
            try:
                body = self.munge_request_body(request, body)
            except Exception as e:
                msg = "Request body hook failed"
                raise FingerprintError(msg, url=url_for_log(request.url)) from e
        if body:
            crc = zlib.crc32(body, crc)
            has_hash = True

        if not has_hash:
            return ""
        return str(crc)


def request_directory(request: httpx.Request) -> str:
    """
    Directory part of a recording path.

    Every component is escaped with ``quote_plus`` so characters such as
    ``:`` never end up in a filename.
    """
    url = request.url
    parts: list[str] = []
    if url.scheme:
        parts.append(url.scheme)
    if url.netloc:
        parts.append(quote_plus(url.netloc.decode("ascii"), safe=""))
    if request.method:
        parts.append(request.method)
    parts.extend(quote_plus(segment, safe="") for segment in url.path.split("/") if segment)
    return os.sep.join(parts)


def _update_crc(
    crc: int, values: dict[str, list[str]], excludes: Iterable[str]
) -> tuple[int, bool]:
    # Keys are fed in sorted order so key order never matters, while values
    # keep their original order within a key.
    excluded = set(excludes)
    keys = sorted(key for key in values if key not in excluded)
    for key in keys:
        crc = zlib.crc32(key.encode(), crc)
        for value in values[key]:
            crc = zlib.crc32(value.encode(), crc)
    return crc, len(keys) > 0
