"""
Target file location.

A single-file data source is stored as "<name>", a table as "<name>.wt".
Multi-file layouts (LSM) have neither and cannot be corrupted byte-wise.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from salvage_harness.context import HarnessContext
from salvage_harness.logging import get_logger

logger = get_logger(__name__)

CORRUPTED_SUFFIX = ".corrupted"


@dataclass(frozen=True)
class TargetFile:
    """The primary data file of the data source under test."""

    path: Path

    @property
    def corrupted_name(self) -> str:
        """Name of the corrupted copy inside the snapshot directory."""
        return self.path.name + CORRUPTED_SUFFIX


def candidate_paths(home: Path, name: str) -> list[Path]:
    """Paths to try, in order: single file first, then table file."""
    return [home / name, home / f"{name}.wt"]


def _is_read_write_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK | os.W_OK)


def locate(context: HarnessContext) -> TargetFile | None:
    """
    Find the file backing the data source.

    Args:
        context: Harness context

    Returns:
        The first candidate that is a readable and writable regular file,
        or None when there is none (not an error).
    """
    for path in candidate_paths(context.home, context.source_name):
        if _is_read_write_file(path):
            logger.debug("Corruption target is %s", path)
            return TargetFile(path=path)

    logger.info(
        "No single-file target for %s in %s, corruption will be skipped",
        context.source_name,
        context.home,
    )
    return None
