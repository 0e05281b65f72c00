"""
Recording domain models.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

import httpx

from http_replay.core.headers import group_headers

_GENERIC_FILENAME = "request.json"


@dataclass(frozen=True)
class RecordingPath:
    """
    Location of a recording, relative to the recording directory.

    Attributes:
        directory: Directory derived from scheme, host, method and URL path.
        checksum: Decimal CRC-32 over the request's discriminating content,
            or an empty string if there was none.
    """

    directory: str
    checksum: str = ""

    def path(self) -> Path:
        """Checksum-qualified path, or the generic path if there is no checksum."""
        if self.checksum:
            return Path(self.directory) / f"request.{self.checksum}.json"
        return self.generic_path()

    def generic_path(self) -> Path:
        """Checksum-free path, used as a fallback lookup target."""
        return Path(self.directory) / _GENERIC_FILENAME


@dataclass(frozen=True, kw_only=True)
class Recording:
    """
    A recorded HTTP response.

    Fields mirror the response status line and headers. ``body`` holds the
    raw bytes as received, before any content-encoding is undone, so a
    replayed response is decoded by httpx exactly like the live one was.
    """

    status: str = ""
    status_code: int = 0
    proto: str = ""
    proto_major: int = 0
    proto_minor: int = 0
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def from_response(cls, response: httpx.Response, body: bytes) -> Self:
        """
        Build a recording from a live response and its buffered raw body.

        Args:
            response: Response returned by the wrapped transport.
            body: Raw body bytes already read from ``response.stream``.
        """
        proto = response.http_version
        major, minor = _parse_http_version(proto)
        return cls(
            status=f"{response.status_code} {response.reason_phrase}".rstrip(),
            status_code=response.status_code,
            proto=proto,
            proto_major=major,
            proto_minor=minor,
            headers=group_headers(response.headers),
            body=body,
        )

    @property
    def reason_phrase(self) -> str:
        """Reason phrase part of the status line, e.g. ``"Not Found"``."""
        code, _, reason = self.status.partition(" ")
        if code.isdigit():
            return reason
        return self.status

    def header_items(self) -> list[tuple[str, str]]:
        """Flatten the header multimap into (name, value) pairs."""
        return [(key, value) for key, values in self.headers.items() for value in values]

    def to_response(self, request: httpx.Request | None = None) -> httpx.Response:
        """
        Materialise an httpx response backed by the recorded body.

        Each call returns an independent response over a fresh byte stream.
        """
        extensions = {}
        if self.proto:
            extensions["http_version"] = self.proto.encode("ascii", errors="ignore")
        if reason := self.reason_phrase:
            extensions["reason_phrase"] = reason.encode("ascii", errors="ignore")
        # httpx encodes str headers as ASCII, so non-ASCII values go in as bytes.
        headers = [
            (key.encode("utf-8", "surrogateescape"), value.encode("utf-8", "surrogateescape"))
            for key, value in self.header_items()
        ]
        return httpx.Response(
            self.status_code,
            headers=headers,
            content=self.body,
            request=request,
            extensions=extensions,
        )


def _parse_http_version(proto: str) -> tuple[int, int]:
    # "HTTP/1.1" -> (1, 1), "HTTP/2" -> (2, 0)
    prefix, _, version = proto.partition("/")
    if prefix != "HTTP" or not version:
        return 0, 0
    major, _, minor = version.partition(".")
    if not major.isdigit() or (minor and not minor.isdigit()):
        return 0, 0
    return int(major), int(minor or 0)
