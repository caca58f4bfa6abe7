"""
Tests for harness settings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from salvage_harness.config import DEFAULT_ENGINE, Settings, SourceType


def test_defaults() -> None:
    settings = Settings()

    assert settings.salvage is True
    assert settings.home == Path("./RUNDIR")
    assert settings.source_name == "wt"
    assert settings.source_type == SourceType.TABLE
    assert settings.seed is None
    assert settings.snapshot_dir_name == "SALVAGE.copy"
    assert settings.corrupt_log_name == "SALVAGE.corrupt"
    assert settings.write_chunk_size == 8192
    assert settings.engine == DEFAULT_ENGINE
    assert settings.uri == "table:wt"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SALVAGE_SALVAGE", "false")
    monkeypatch.setenv("SALVAGE_HOME", str(tmp_path))
    monkeypatch.setenv("SALVAGE_SOURCE_TYPE", "file")
    monkeypatch.setenv("SALVAGE_SEED", "1234")

    settings = Settings()

    assert settings.salvage is False
    assert settings.home == tmp_path
    assert settings.uri == "file:wt"
    assert settings.seed == 1234


def test_log_level_is_normalised() -> None:
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_invalid_log_level_rejected() -> None:
    with pytest.raises(ValidationError, match="Invalid log level"):
        Settings(log_level="chatty")


@pytest.mark.parametrize("name", ["a/b", "..", "x\\y"])
def test_names_must_be_plain(name: str) -> None:
    with pytest.raises(ValidationError):
        Settings(source_name=name)


def test_engine_path_needs_attribute() -> None:
    with pytest.raises(ValidationError, match="Invalid engine path"):
        Settings(engine="salvage_harness.engines.wiredtiger")


def test_negative_seed_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(seed=-1)


def test_snapshot_patterns_include_source_files() -> None:
    settings = Settings(source_name="data")
    assert settings.all_snapshot_patterns == ["WiredTiger*", "data*"]

    settings = Settings(source_name="data", snapshot_patterns=["data*"])
    assert settings.all_snapshot_patterns == ["data*"]


def test_redacted_config() -> None:
    config = Settings(seed=7).get_redacted_config()

    assert config["uri"] == "table:wt"
    assert config["seed"] == 7
    assert config["salvage"] is True


@pytest.mark.parametrize("name", ["S", "SALVAGE", "SALVAGE.c"])
def test_source_name_cannot_glob_harness_files(name: str) -> None:
    with pytest.raises(ValidationError, match="would snapshot"):
        Settings(source_name=name)


def test_source_name_checked_against_renamed_harness_files() -> None:
    settings = Settings(source_name="S", snapshot_dir_name="copy", corrupt_log_name="corrupt.log")
    assert settings.source_name == "S"

    with pytest.raises(ValidationError, match="would snapshot 'data.log'"):
        Settings(source_name="data", corrupt_log_name="data.log")
