"""
http_replay: record and replay HTTP responses as test fixtures.

Requests made through a replay transport are answered from files on disk.
Missing responses are fetched once with the wrapped transport and recorded,
so later runs never touch the network.

Recordings live under paths derived from the request::

    <scheme>/<host>/<METHOD>/<path>/.../request[.<crc32>].json

The CRC suffix is only present when the request had query parameters,
headers or a body that are not excluded from fingerprinting.

Example:
    ```python
    from pathlib import Path

    from http_replay import new_client, new_playback_only_client

    with new_client(Path("testdata")) as client:
        response = client.get("https://api.ipify.org?format=json")

    # On CI, fail instead of going to the network
    with new_playback_only_client(Path("testdata")) as client:
        response = client.get("https://api.ipify.org?format=json")
    ```
"""

from http_replay.client import (
    new_async_client,
    new_async_playback_only_client,
    new_async_record_only_client,
    new_client,
    new_playback_only_client,
    new_record_only_client,
)
from http_replay.config import Mode, ReplayConfig
from http_replay.core.fingerprint import PathGenerator, default_omit_headers
from http_replay.core.store import load_recording, save_recording
from http_replay.exceptions import (
    FingerprintError,
    InterceptionError,
    NotFoundError,
    RecordingError,
    ReplayError,
    StorageError,
)
from http_replay.models.recording import Recording, RecordingPath
from http_replay.transport import AsyncReplayTransport, ReplayTransport

__version__ = "0.1.0"

__all__ = [
    # Clients
    "new_client",
    "new_playback_only_client",
    "new_record_only_client",
    "new_async_client",
    "new_async_playback_only_client",
    "new_async_record_only_client",
    # Transports
    "ReplayTransport",
    "AsyncReplayTransport",
    # Configuration
    "Mode",
    "ReplayConfig",
    "PathGenerator",
    "default_omit_headers",
    # Models and storage
    "Recording",
    "RecordingPath",
    "load_recording",
    "save_recording",
    # Exceptions
    "ReplayError",
    "FingerprintError",
    "RecordingError",
    "NotFoundError",
    "StorageError",
    "InterceptionError",
]
