"""
Random corruption of the data source's primary file.

Roughly 2% of the file is overwritten with 'z' bytes at a random offset,
anywhere from the first byte up to and including end of file, so the
window may overlap or extend past the end.
"""

import contextlib
import os
import random
from pathlib import Path
from typing import BinaryIO

from pydantic import BaseModel, ConfigDict, Field

from salvage_harness.context import HarnessContext
from salvage_harness.errors import CorruptionError
from salvage_harness.locator import TargetFile, locate
from salvage_harness.logging import get_logger
from salvage_harness.snapshot import ArtifactSnapshotter

logger = get_logger(__name__)

FILL_BYTE = b"z"
MIN_CORRUPTION_LENGTH = 20


class CorruptionRecord(BaseModel):
    """The byte range overwritten in a target file."""

    model_config = ConfigDict(frozen=True)

    target_path: Path
    offset: int = Field(ge=0)
    length: int = Field(gt=0)

    @property
    def end(self) -> int:
        """First byte past the corruption window."""
        return self.offset + self.length

    def to_log_line(self) -> str:
        return f"salvage-corrupt: offset {self.offset}, length {self.length}\n"


def corruption_length(size: int) -> int:
    """
    Length of the corruption window for a file of `size` bytes.

    The size is floor-divided by 100 before doubling; replayed runs depend
    on this exact arithmetic.
    """
    return MIN_CORRUPTION_LENGTH + (size // 100) * 2


def corruption_window(size: int, rng: random.Random) -> tuple[int, int]:
    """
    Pick a corruption window for a file of `size` bytes.

    Returns:
        (offset, length) with 0 <= offset <= size.
    """
    offset = rng.randint(0, size)
    return offset, corruption_length(size)


class Corruptor:
    """Corrupts the data source file and records what it did."""

    def __init__(
        self,
        context: HarnessContext,
        snapshotter: ArtifactSnapshotter | None = None,
    ) -> None:
        self._context = context
        self._snapshotter = snapshotter or ArtifactSnapshotter(context)

    def corrupt(self) -> CorruptionRecord | None:
        """
        Corrupt the target file, if the data source has one.

        Returns:
            The CorruptionRecord, or None when no target file exists.

        Raises:
            CorruptionError: On any stat, open, seek, write or close failure.
            SnapshotError: If the corrupted copy cannot be saved.
        """
        target = locate(self._context)
        if target is None:
            return None

        record = self.corrupt_file(target)

        # Save a copy so the salvage step can be replayed
        self._snapshotter.save_corrupted(target.path, target.corrupted_name)
        return record

    def corrupt_file(self, target: TargetFile) -> CorruptionRecord:
        """Overwrite a random window of `target` and log it."""
        path = target.path
        try:
            fh = open(path, "r+b", buffering=0)
        except OSError as e:
            raise CorruptionError("salvage-corrupt: open", path, e) from e

        try:
            record = self._apply(fh, path)
        except BaseException:
            # Keep the seek/write failure as the one raised
            with contextlib.suppress(OSError):
                fh.close()
            raise

        try:
            fh.close()
        except OSError as e:
            raise CorruptionError("salvage-corrupt: close", path, e) from e

        logger.info(
            "Corrupted %s: offset %d, length %d (seed %d)",
            path,
            record.offset,
            record.length,
            self._context.seed,
        )
        return record

    def write_log(self, record: CorruptionRecord) -> Path:
        """Overwrite the corruption log with the record's line."""
        log_path = self._context.corrupt_log
        try:
            with open(log_path, "w") as f:
                f.write(record.to_log_line())
        except OSError as e:
            raise CorruptionError("salvage-corrupt: open", log_path, e) from e
        return log_path

    def _apply(self, fh: BinaryIO, path: Path) -> CorruptionRecord:
        try:
            size = os.fstat(fh.fileno()).st_size
        except OSError as e:
            raise CorruptionError("salvage-corrupt: fstat", path, e) from e

        offset, length = corruption_window(size, self._context.rng)
        record = CorruptionRecord(target_path=path, offset=offset, length=length)
        self.write_log(record)

        try:
            fh.seek(offset, os.SEEK_SET)
        except OSError as e:
            raise CorruptionError("salvage-corrupt: lseek", path, e) from e

        self._fill(fh, path, length)
        return record

    def _fill(self, fh: BinaryIO, path: Path, length: int) -> None:
        chunk = FILL_BYTE * min(length, self._context.write_chunk_size)
        remaining = length
        while remaining > 0:
            view = memoryview(chunk)[: min(remaining, len(chunk))]
            try:
                written = fh.write(view)
            except OSError as e:
                raise CorruptionError("salvage-corrupt: write", path, e) from e
            if not written:
                raise CorruptionError(
                    "salvage-corrupt: write",
                    path,
                    OSError(f"short write with {remaining} bytes remaining"),
                )
            remaining -= written
