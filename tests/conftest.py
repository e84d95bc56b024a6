import datetime as dt
from pathlib import Path

import pytest

BUILD_TIME = dt.datetime(2026, 10, 18, 12, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def src(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def write(src: Path):
    def _write(relative_path: str, text: str) -> Path:
        path = src / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def build_time() -> dt.datetime:
    return BUILD_TIME
