"""Helpers for keeping secrets out of log lines and error messages."""

import httpx


def url_for_log(url: httpx.URL) -> str:
    """
    Render a URL without its query string.

    Query parameters commonly carry API keys and signatures, so they are
    dropped before a URL is logged or attached to an exception.
    """
    return str(url).split("?", 1)[0]
