"""
On-disk recording format.

A recording file is a JSON object describing the response status and
headers, one newline, and then the raw response body, verbatim::

    {
      "status": "404 Not Found",
      "status_code": 404,
      "proto": "HTTP/1.1",
      "proto_major": 1,
      "proto_minor": 1,
      "headers": {
        "Content-Type": [
          "text/plain"
        ]
      }
    }
    The requested content was not found.

Keeping the body outside the JSON makes recordings easy to write and edit by
hand.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from http_replay.exceptions import NotFoundError, StorageError
from http_replay.models.recording import Recording

logger = structlog.get_logger(__name__)

_decoder = json.JSONDecoder()

_STR_FIELDS = ("status", "proto")
_INT_FIELDS = ("status_code", "proto_major", "proto_minor")


def load_recording(path: Path) -> Recording:
    """
    Load a recording from disk.

    Args:
        path: Recording file path.

    Returns:
        The parsed recording.

    Raises:
        NotFoundError: If no file exists at ``path``.
        StorageError: If the file cannot be read or its header block is malformed.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        msg = "Recording not found"
        raise NotFoundError(msg, path=path) from e
    except OSError as e:
        msg = f"Failed to read recording: {e.strerror or e}"
        raise StorageError(msg, path=path) from e

    try:
        recording = parse_recording(data)
    except ValueError as e:
        msg = f"Malformed recording: {e}"
        raise StorageError(msg, path=path) from e

    logger.debug("Recording loaded", path=str(path), status_code=recording.status_code)
    return recording


def save_recording(recording: Recording, path: Path) -> None:
    """
    Atomically write a recording to disk.

    The content goes to a temporary file in the target directory which is
    then renamed over ``path``, so readers never observe a partial file.
    Parent directories are created as needed.

    Raises:
        StorageError: If the recording cannot be written. The temporary file
            is removed and ``path`` is left untouched.
    """
    payload = dump_recording(recording)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f"{path.name}.")
    except OSError as e:
        raise _write_error(e, path) from e

    try:
        try:
            f = os.fdopen(fd, "wb")
        except BaseException:
            os.close(fd)
            raise
        with f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException as e:
        Path(tmp_name).unlink(missing_ok=True)
        if isinstance(e, OSError):
            raise _write_error(e, path) from e
        raise

    logger.info("Recording saved", path=str(path), status_code=recording.status_code)


def _write_error(error: OSError, path: Path) -> StorageError:
    msg = f"Failed to write recording: {error.strerror or error}"
    return StorageError(msg, path=path)


def dump_recording(recording: Recording) -> bytes:
    """
    Serialize a recording to the on-disk format.

    Zero-valued fields and empty headers are left out of the header block.
    """
    fields: dict[str, Any] = {}
    for name in ("status", "status_code", "proto", "proto_major", "proto_minor"):
        if value := getattr(recording, name):
            fields[name] = value
    if recording.headers:
        fields["headers"] = {key: recording.headers[key] for key in sorted(recording.headers)}

    header = json.dumps(fields, indent=2, ensure_ascii=False)
    return header.encode() + b"\n" + recording.body


def parse_recording(data: bytes) -> Recording:
    """
    Parse the on-disk format.

    Everything after the leading JSON object, minus one newline, is the body.

    Raises:
        ValueError: If the header block is missing, not an object, or holds
            fields of the wrong type.
    """
    # surrogateescape lets arbitrary body bytes survive the round trip
    # through str, so the byte offset of the body can be recovered exactly.
    text = data.decode("utf-8", errors="surrogateescape")
    start = len(text) - len(text.lstrip())
    try:
        fields, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as e:
        msg = f"invalid header block: {e}"
        raise ValueError(msg) from e
    if not isinstance(fields, dict):
        msg = f"header block must be a JSON object, got {type(fields).__name__}"
        raise ValueError(msg)

    offset = len(text[:end].encode("utf-8", errors="surrogateescape"))
    body = data[offset:]
    if body.startswith(b"\n"):
        body = body[1:]

    return Recording(**_validate_fields(fields), body=body)


def _validate_fields(fields: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for name in _STR_FIELDS:
        if (value := fields.get(name)) is not None:
            if not isinstance(value, str):
                msg = f"{name!r} must be a string"
                raise ValueError(msg)
            result[name] = value
    for name in _INT_FIELDS:
        if (value := fields.get(name)) is not None:
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f"{name!r} must be an integer"
                raise ValueError(msg)
            result[name] = value

    headers = fields.get("headers")
    if headers is None:
        return result
    if not isinstance(headers, dict):
        msg = "'headers' must be an object"
        raise ValueError(msg)
    for key, values in headers.items():
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            msg = f"header {key!r} must be a list of strings"
            raise ValueError(msg)
    result["headers"] = headers
    return result
