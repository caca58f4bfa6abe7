"""
Configuration management for the salvage harness.

Uses pydantic-settings for type-safe environment variable handling.
Command line flags override whatever the environment provides.
"""

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENGINE = "salvage_harness.engines.wiredtiger:WiredTigerEngine"


class SourceType(str, Enum):
    """Layout of the logical data source under test."""

    FILE = "file"  # Single Btree file named after the source
    TABLE = "table"  # Table backed by "<name>.wt"
    LSM = "lsm"  # Multi-file layout, never byte-corruptible


class Settings(BaseSettings):
    """
    Harness settings loaded from environment variables.

    Every field can be set with a ``SALVAGE_`` prefixed variable, e.g.
    ``SALVAGE_HOME=/tmp/run1`` or ``SALVAGE_SEED=42``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SALVAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Master switch for the whole salvage phase
    salvage: bool = Field(
        default=True,
        description="Run salvage testing (disable to make the harness a no-op)",
    )

    # Engine layout
    home: Path = Field(
        default=Path("./RUNDIR"),
        description="Engine home directory holding the data under test",
    )
    source_name: str = Field(
        default="wt",
        min_length=1,
        description="Logical name of the data source",
    )
    source_type: SourceType = Field(
        default=SourceType.TABLE,
        description="Data source layout: file, table or lsm",
    )

    # Reproducibility
    seed: int | None = Field(
        default=None,
        ge=0,
        description="Random seed for the corruption window (drawn and logged if unset)",
    )

    # Artefacts
    snapshot_dir_name: str = Field(
        default="SALVAGE.copy",
        min_length=1,
        description="Snapshot directory created under the home directory",
    )
    corrupt_log_name: str = Field(
        default="SALVAGE.corrupt",
        min_length=1,
        description="Corruption log file created under the home directory",
    )
    snapshot_patterns: list[str] = Field(
        default_factory=lambda: ["WiredTiger*"],
        description="Extra filename globs to snapshot ('<source_name>*' is always included)",
    )
    write_chunk_size: int = Field(
        default=8 * 1024,
        ge=1,
        le=1024 * 1024,
        description="Maximum bytes written per corruption write call",
    )

    # Storage engine collaborator
    engine: str = Field(
        default=DEFAULT_ENGINE,
        description="Import path of the storage engine, as 'package.module:attribute'",
    )
    engine_config: str = Field(
        default="",
        description="Configuration string passed to the engine when opening",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("source_name", "snapshot_dir_name", "corrupt_log_name")
    @classmethod
    def validate_plain_name(cls, v: str) -> str:
        """Names are created directly under home, so no path separators."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid name: {v!r} must be a plain file name")
        return v

    @field_validator("engine")
    @classmethod
    def validate_engine_path(cls, v: str) -> str:
        """Engine path must look like 'module:attribute'."""
        module, sep, attr = v.partition(":")
        if not sep or not module or not attr:
            raise ValueError(f"Invalid engine path: {v!r} (expected 'package.module:attribute')")
        return v

    @model_validator(mode="after")
    def validate_source_name_not_harness_file(self) -> "Settings":
        """The '<source_name>*' glob must not pick up the harness's own files."""
        for own in (self.snapshot_dir_name, self.corrupt_log_name):
            if own.startswith(self.source_name):
                raise ValueError(
                    f"Invalid source name: {self.source_name!r} would snapshot {own!r}"
                )
        return self

    @property
    def uri(self) -> str:
        """Engine URI of the data source, e.g. ``table:wt``."""
        return f"{self.source_type.value}:{self.source_name}"

    @property
    def all_snapshot_patterns(self) -> list[str]:
        """Snapshot globs including the data source's own files."""
        patterns = list(self.snapshot_patterns)
        own = f"{self.source_name}*"
        if own not in patterns:
            patterns.append(own)
        return patterns

    def get_redacted_config(self) -> dict[str, str | int | bool | None]:
        """Get configuration dict safe for logging."""
        return {
            "salvage": self.salvage,
            "home": str(self.home),
            "uri": self.uri,
            "seed": self.seed,
            "engine": self.engine,
            "log_level": self.log_level,
        }
