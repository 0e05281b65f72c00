"""
Client factories.

Convenience constructors returning httpx clients wired to a replay
transport, for the common case where a test just needs "a client that
replays from this directory".
"""

from pathlib import Path
from typing import Any

import httpx

from http_replay.config import Mode, ReplayConfig
from http_replay.core.fingerprint import PathGenerator
from http_replay.transport import AsyncReplayTransport, ReplayTransport


def new_client(
    directory: Path | str,
    *,
    mode: Mode = Mode.RECORD_IF_MISSING,
    strict_path: bool = False,
    transport: httpx.BaseTransport | None = None,
    path_generator: PathGenerator | None = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """
    Create a client that replays recordings and records missing ones.

    Args:
        directory: Directory recordings are read from and written to.
        mode: Replay mode. Defaults to recording only what is missing.
        strict_path: Disable the fallback to checksum-free recordings.
        transport: Transport used for live requests.
        path_generator: Generator for recording paths.
        **client_kwargs: Passed through to ``httpx.Client``.
    """
    config = ReplayConfig(directory=Path(directory), mode=mode, strict_path=strict_path)
    replay = ReplayTransport(transport, config=config, path_generator=path_generator)
    return httpx.Client(transport=replay, **client_kwargs)


def new_playback_only_client(directory: Path | str, **kwargs: Any) -> httpx.Client:
    """Create a client that only serves recordings and never touches the network."""
    return new_client(directory, mode=Mode.PLAYBACK_ONLY, **kwargs)


def new_record_only_client(directory: Path | str, **kwargs: Any) -> httpx.Client:
    """Create a client that always fetches and records, overwriting old recordings."""
    return new_client(directory, mode=Mode.RECORD_ONLY, **kwargs)


def new_async_client(
    directory: Path | str,
    *,
    mode: Mode = Mode.RECORD_IF_MISSING,
    strict_path: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
    path_generator: PathGenerator | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Async variant of :func:`new_client`."""
    config = ReplayConfig(directory=Path(directory), mode=mode, strict_path=strict_path)
    replay = AsyncReplayTransport(transport, config=config, path_generator=path_generator)
    return httpx.AsyncClient(transport=replay, **client_kwargs)


def new_async_playback_only_client(directory: Path | str, **kwargs: Any) -> httpx.AsyncClient:
    return new_async_client(directory, mode=Mode.PLAYBACK_ONLY, **kwargs)


def new_async_record_only_client(directory: Path | str, **kwargs: Any) -> httpx.AsyncClient:
    return new_async_client(directory, mode=Mode.RECORD_ONLY, **kwargs)
