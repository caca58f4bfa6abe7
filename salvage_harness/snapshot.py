"""
Artefact snapshots for salvage replay.

Before any salvage runs, the engine's interesting files are copied into a
snapshot directory under the engine home:

{home}/
    SALVAGE.copy/
        WiredTiger*          # Engine metadata and turtle files
        {name}*              # Data source files
        {target}.corrupted   # Added by the corruptor, if corruption ran
"""

import errno
import os
import shutil
from pathlib import Path

from salvage_harness.context import HarnessContext
from salvage_harness.errors import SnapshotError
from salvage_harness.logging import get_logger

logger = get_logger(__name__)


class ArtifactSnapshotter:
    """
    Takes the replay snapshot of an engine home directory.

    Each call replaces the snapshot directory wholesale; nothing from a
    previous snapshot survives.
    """

    def __init__(self, context: HarnessContext) -> None:
        self._context = context

    @property
    def snapshot_dir(self) -> Path:
        return self._context.snapshot_dir

    def matching_files(self, source_dir: Path) -> list[Path]:
        """
        List regular files in source_dir matching the snapshot globs.

        Args:
            source_dir: Directory to scan

        Returns:
            Sorted, de-duplicated list of file paths.
        """
        found: set[Path] = set()
        for pattern in self._context.snapshot_patterns:
            for path in source_dir.glob(pattern):
                if path.is_file():
                    found.add(path)
                else:
                    logger.debug("Not snapshotting non-file %s", path)
        return sorted(found)

    def snapshot(self, source_dir: Path | None = None) -> Path:
        """
        Replace the snapshot directory with copies of the engine files.

        Args:
            source_dir: Directory to copy from (default: the engine home)

        Returns:
            Path to the snapshot directory.

        Raises:
            SnapshotError: If the source directory is missing, the snapshot
                directory cannot be recreated or a file cannot be copied.
        """
        source_dir = source_dir or self._context.home
        target = self.snapshot_dir

        # The home must already exist; it is never created here
        if not source_dir.is_dir():
            raise SnapshotError(
                "salvage copy: cd",
                source_dir,
                FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(source_dir)),
            )

        try:
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.exists():
                shutil.rmtree(target)
        except OSError as e:
            raise SnapshotError("salvage copy: remove snapshot directory", target, e) from e

        try:
            target.mkdir()
        except OSError as e:
            raise SnapshotError("salvage copy: create snapshot directory", target, e) from e

        try:
            files = self.matching_files(source_dir)
        except OSError as e:
            raise SnapshotError("salvage copy: list files", source_dir, e) from e

        for path in files:
            try:
                shutil.copy2(path, target / path.name)
            except OSError as e:
                raise SnapshotError("salvage copy: copy file", path, e) from e

        logger.info("Snapshot of %d files saved to %s", len(files), target)
        return target

    def save_corrupted(self, path: Path, name: str) -> Path:
        """
        Save a copy of a corrupted file into the snapshot directory.

        Args:
            path: File to copy
            name: File name inside the snapshot directory

        Returns:
            Path of the copy.

        Raises:
            SnapshotError: If the copy fails.
        """
        destination = self.snapshot_dir / name
        try:
            shutil.copyfile(path, destination)
        except OSError as e:
            raise SnapshotError("salvage corrupt copy step failed", path, e) from e
        logger.debug("Corrupted copy saved to %s", destination)
        return destination
