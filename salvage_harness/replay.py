"""
Offline replay of a saved salvage snapshot.

Rebuilds an engine home from {home}/SALVAGE.copy and runs one salvage
against it, optionally with the corrupted copy swapped in.
"""

import shutil
from pathlib import Path

from salvage_harness.context import HarnessContext
from salvage_harness.errors import SnapshotError
from salvage_harness.locator import CORRUPTED_SUFFIX
from salvage_harness.logging import get_logger
from salvage_harness.orchestrator import SalvageOrchestrator

logger = get_logger(__name__)

REPLAY_VERIFY_LABEL = "replay-salvage verify"


def restore_snapshot(snapshot_dir: Path, work_dir: Path, corrupted: bool = True) -> list[Path]:
    """
    Recreate work_dir from a snapshot directory.

    Args:
        snapshot_dir: Snapshot to restore from
        work_dir: Directory to (re)create
        corrupted: Restore "X.corrupted" files as "X", replacing the clean copy

    Returns:
        Paths of the restored files.

    Raises:
        SnapshotError: If the snapshot is missing or a copy fails.
    """
    if not snapshot_dir.is_dir():
        raise SnapshotError(
            "replay: no snapshot",
            snapshot_dir,
            FileNotFoundError("snapshot directory does not exist"),
        )

    work = work_dir.resolve()
    snapshot = snapshot_dir.resolve()
    if work == snapshot or snapshot in work.parents or work in snapshot.parents:
        raise SnapshotError(
            "replay: work directory overlaps snapshot",
            work_dir,
            ValueError("refusing to overwrite the snapshot"),
        )

    try:
        if work_dir.exists():
            shutil.rmtree(work_dir)
        work_dir.mkdir(parents=True)
    except OSError as e:
        raise SnapshotError("replay: recreate work directory", work_dir, e) from e

    entries = sorted(p for p in snapshot_dir.iterdir() if p.is_file())
    clean = [p for p in entries if not p.name.endswith(CORRUPTED_SUFFIX)]
    damaged = [p for p in entries if p.name.endswith(CORRUPTED_SUFFIX)]

    restored: dict[str, Path] = {}
    for path in clean:
        restored[path.name] = _copy(path, work_dir / path.name)

    if corrupted:
        for path in damaged:
            name = path.name[: -len(CORRUPTED_SUFFIX)]
            restored[name] = _copy(path, work_dir / name)
            logger.info("Replaying with corrupted %s", name)

    return sorted(restored.values())


def _copy(source: Path, destination: Path) -> Path:
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise SnapshotError("replay: copy file", source, e) from e
    return destination


def replay(context: HarnessContext, work_dir: Path, corrupted: bool = True) -> Path:
    """
    Restore the snapshot of `context` into work_dir and salvage it once.

    Returns:
        The work directory.

    Raises:
        HarnessFatalError: If the restore or the salvage fails.
    """
    files = restore_snapshot(context.snapshot_dir, work_dir, corrupted=corrupted)
    logger.info("Restored %d files into %s", len(files), work_dir)

    SalvageOrchestrator(context.with_home(work_dir)).run_salvage(REPLAY_VERIFY_LABEL)
    return work_dir
