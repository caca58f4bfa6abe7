"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from salvage_harness.context import HarnessContext
from tests.chaos.fixtures.fake_engine import FakeEngine

SALVAGE_ENV_VARS = [
    "SALVAGE_SALVAGE",
    "SALVAGE_HOME",
    "SALVAGE_SOURCE_NAME",
    "SALVAGE_SOURCE_TYPE",
    "SALVAGE_SEED",
    "SALVAGE_ENGINE",
    "SALVAGE_ENGINE_CONFIG",
    "SALVAGE_LOG_LEVEL",
    "SALVAGE_SNAPSHOT_PATTERNS",
    "SALVAGE_WRITE_CHUNK_SIZE",
    "SALVAGE_SNAPSHOT_DIR_NAME",
    "SALVAGE_CORRUPT_LOG_NAME",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Ensure no local SALVAGE_* variables leak into tests."""
    for var in SALVAGE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def engine_home(tmp_path: Path) -> Path:
    """Empty engine home directory."""
    home = tmp_path / "RUNDIR"
    home.mkdir()
    return home


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_context(engine_home: Path, fake_engine: FakeEngine) -> Callable[..., HarnessContext]:
    """Factory for contexts rooted at engine_home with the fake engine."""

    def _make(**overrides) -> HarnessContext:
        values = {
            "home": engine_home,
            "source_name": "wt",
            "uri": "table:wt",
            "engine": fake_engine,
            "seed": 42,
        }
        values.update(overrides)
        return HarnessContext(**values)

    return _make


@pytest.fixture
def context(make_context: Callable[..., HarnessContext]) -> HarnessContext:
    return make_context()


def write_file(path: Path, size: int, fill: bytes = b"a") -> Path:
    """Create a file of exactly `size` bytes."""
    path.write_bytes(fill * size)
    return path


@pytest.fixture
def populate_home(engine_home: Path) -> Callable[..., list[Path]]:
    """Fill the engine home with named files of given sizes."""

    def _populate(files: dict[str, int]) -> list[Path]:
        return [write_file(engine_home / name, size) for name, size in files.items()]

    return _populate
