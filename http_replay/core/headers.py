"""Header name canonicalisation shared by fingerprinting and storage."""

import string

import httpx

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")


def canonical_header_key(name: str) -> str:
    """
    Return the canonical MIME form of a header name.

    The first letter and any letter following a hyphen are upper-cased, the
    rest lower-cased: ``"content-type"`` becomes ``"Content-Type"``. Names
    containing characters that are not valid in a header token are returned
    unchanged.
    """
    if not name or any(c not in _TOKEN_CHARS for c in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def group_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    """
    Collect headers into a multimap keyed by canonical name.

    Keys keep the order they first appear in, values keep wire order.
    """
    grouped: dict[str, list[str]] = {}
    for raw_key, raw_value in headers.raw:
        key = canonical_header_key(raw_key.decode(headers.encoding))
        grouped.setdefault(key, []).append(raw_value.decode(headers.encoding))
    return grouped
