"""
Harness context for a salvage run.

Everything a component needs (paths, data source, RNG, engine) travels in a
single HarnessContext built once per run and passed explicitly.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from salvage_harness.config import Settings
from salvage_harness.interfaces.engine import EngineConnection, StorageEngine, load_engine

# Called with the open connection and a phase label after each salvage
VerifyHook = Callable[[EngineConnection, str], None]


def skip_verify(conn: EngineConnection, label: str) -> None:
    """Default verification hook: post-salvage verification is disabled."""
    return None


def generate_run_id(prefix: str = "salvage") -> str:
    """
    Generate a unique run ID.

    Format: {prefix}_{timestamp}_{uuid8}
    Example: salvage_20240115_143022_a1b2c3d4
    """
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    short_uuid = uuid4().hex[:8]
    return f"{prefix}_{timestamp}_{short_uuid}"


def generate_seed() -> int:
    """Draw a fresh seed for runs that were not given one."""
    return random.SystemRandom().randrange(2**32)


@dataclass
class HarnessContext:
    """
    Context for one salvage run.

    Holds the engine home, the data source under test, the seeded RNG
    driving corruption and the engine collaborator.
    """

    home: Path
    source_name: str
    uri: str
    engine: StorageEngine
    seed: int
    enabled: bool = True
    engine_config: str = ""
    snapshot_dir_name: str = "SALVAGE.copy"
    corrupt_log_name: str = "SALVAGE.corrupt"
    snapshot_patterns: list[str] | None = None
    write_chunk_size: int = 8 * 1024
    verify: VerifyHook = skip_verify
    run_id: str = field(default_factory=generate_run_id)
    rng: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.snapshot_patterns is None:
            self.snapshot_patterns = ["WiredTiger*", f"{self.source_name}*"]
        self.rng = random.Random(self.seed)

    @property
    def snapshot_dir(self) -> Path:
        """Directory holding the replay snapshot."""
        return self.home / self.snapshot_dir_name

    @property
    def corrupt_log(self) -> Path:
        """File recording the corruption window of the last run."""
        return self.home / self.corrupt_log_name

    def with_home(self, home: Path) -> "HarnessContext":
        """Copy of this context rooted at another directory (fresh RNG)."""
        return replace(self, home=home)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "run_id": self.run_id,
            "home": str(self.home),
            "uri": self.uri,
            "seed": self.seed,
            "enabled": self.enabled,
            "engine": self.engine.name,
        }

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: StorageEngine | None = None,
        verify: VerifyHook | None = None,
    ) -> "HarnessContext":
        """
        Build a context from settings.

        Args:
            settings: Harness settings
            engine: Engine to use instead of the one named in settings
            verify: Post-salvage verification hook (default: none)

        Returns:
            New HarnessContext. The seed is drawn here when unset so that
            the value can be logged and replayed.
        """
        if engine is None:
            engine = load_engine(settings.engine)
        seed = settings.seed if settings.seed is not None else generate_seed()
        return cls(
            home=settings.home,
            source_name=settings.source_name,
            uri=settings.uri,
            engine=engine,
            seed=seed,
            enabled=settings.salvage,
            engine_config=settings.engine_config,
            snapshot_dir_name=settings.snapshot_dir_name,
            corrupt_log_name=settings.corrupt_log_name,
            snapshot_patterns=settings.all_snapshot_patterns,
            write_chunk_size=settings.write_chunk_size,
            verify=verify or skip_verify,
        )
