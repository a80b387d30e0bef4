"""Shared pytest fixtures for contactbot tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from contactbot.delivery.storage import FileRef


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("CONTACTBOT_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOTENV_PATH", str(tmp_path / ".env"))
    return data_dir


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_data_dir: Path):
    from contactbot.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def data_dir(_isolate_data_dir: Path) -> Path:
    return _isolate_data_dir


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingSleep:
    """Stands in for ``asyncio.sleep``: records delays, advances a fake clock, yields once."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.clock is not None:
            self.clock.now += delay
        await asyncio.sleep(0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_sleep(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture()
def frozen_sleep() -> RecordingSleep:
    """Records delays without moving any clock, so staleness never triggers."""
    return RecordingSleep()


@pytest.fixture()
def make_files(tmp_path: Path):
    def _make(count: int, prefix: str = "file") -> list[FileRef]:
        out = tmp_path / "out"
        out.mkdir(exist_ok=True)
        refs = []
        for i in range(1, count + 1):
            path = out / f"{prefix} {i}.vcf"
            path.write_text(f"BEGIN:VCARD\nFN:{prefix} {i}\nEND:VCARD\n")
            refs.append(FileRef(path=path, count=1))
        return refs

    return _make
