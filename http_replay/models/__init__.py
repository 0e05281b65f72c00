"""
Domain models for http_replay.

These are immutable (frozen) dataclasses describing recordings and where they
live on disk.
"""

from http_replay.models.recording import Recording, RecordingPath

__all__ = [
    "Recording",
    "RecordingPath",
]
