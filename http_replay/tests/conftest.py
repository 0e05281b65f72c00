from collections.abc import Callable
from pathlib import Path

import pytest

from http_replay.config import Mode, ReplayConfig


@pytest.fixture
def recordings_dir(tmp_path: Path) -> Path:
    return tmp_path / "recordings"


@pytest.fixture
def make_config(recordings_dir: Path) -> Callable[..., ReplayConfig]:
    def _make(mode: Mode = Mode.RECORD_IF_MISSING, strict_path: bool = False) -> ReplayConfig:
        return ReplayConfig(directory=recordings_dir, mode=mode, strict_path=strict_path)

    return _make
