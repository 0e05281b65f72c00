"""
http_replay configuration.
"""

import os
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Self

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


class Mode(IntEnum):
    """Controls whether recordings are played back, recorded, or both."""

    RECORD_IF_MISSING = 0
    PLAYBACK_ONLY = 1
    RECORD_ONLY = 2

    @classmethod
    def parse(cls, value: str) -> "Mode":
        """
        Parse a mode name such as ``"playback-only"``.

        Case is ignored and underscores are accepted in place of dashes.

        Raises:
            ValueError: If the name is not a known mode.
        """
        name = value.strip().upper().replace("-", "_")
        try:
            return cls[name]
        except KeyError:
            choices = ", ".join(m.name.lower().replace("_", "-") for m in cls)
            msg = f"Unknown replay mode {value!r}, expected one of: {choices}"
            raise ValueError(msg) from None


@dataclass(frozen=True, kw_only=True)
class ReplayConfig:
    """
    Attributes:
        directory: Base directory recordings are read from and written to.
        mode: Whether responses are played back, recorded, or recorded only
            when missing.
        strict_path: If True, never fall back to the checksum-free recording
            path when the checksum-qualified one does not exist.
    """

    directory: Path
    mode: Mode = Mode.RECORD_IF_MISSING
    strict_path: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.directory, Path):
            msg = "directory must be a pathlib.Path"
            raise ValueError(msg)
        if not isinstance(self.mode, Mode):
            msg = f"mode must be a Mode, got {self.mode!r}"
            raise ValueError(msg)

    @classmethod
    def from_env(
        cls,
        directory: Path | str,
        *,
        mode: Mode = Mode.RECORD_IF_MISSING,
        strict_path: bool = False,
        prefix: str = "HTTP_REPLAY_",
    ) -> Self:
        """
        Build a config, letting environment variables override the defaults.

        ``{prefix}MODE`` selects the mode (e.g. ``playback-only`` on CI) and
        ``{prefix}STRICT_PATH`` toggles strict path lookups.

        Raises:
            ValueError: If a variable holds an unrecognised value.
        """
        if (raw_mode := os.getenv(f"{prefix}MODE")) is not None:
            mode = Mode.parse(raw_mode)
        if (raw_strict := os.getenv(f"{prefix}STRICT_PATH")) is not None:
            strict_path = _parse_bool(f"{prefix}STRICT_PATH", raw_strict)
        return cls(directory=Path(directory), mode=mode, strict_path=strict_path)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    msg = f"{name} must be a boolean, got {value!r}"
    raise ValueError(msg)
