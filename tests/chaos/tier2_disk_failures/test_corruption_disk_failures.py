"""
Tier 2: Disk failures while corrupting and snapshotting.

Every filesystem failure is fatal: the run stops with an error naming the
failing operation and nothing after it runs.
"""

import errno
from pathlib import Path

import pytest

from salvage_harness.corruptor import Corruptor
from salvage_harness.driver import DriverState, SalvageDriver
from salvage_harness.errors import CorruptionError, SnapshotError
from salvage_harness.snapshot import ArtifactSnapshotter
from tests.chaos.fixtures.disk_chaos import DiskChaos
from tests.chaos.fixtures.fake_engine import FakeEngine


@pytest.mark.chaos
@pytest.mark.tier2
class TestCorruptionDiskFailures:
    """Disk failures hitting the corruptor."""

    def test_disk_full_mid_corruption__fatal(
        self, context, populate_home, fake_engine: FakeEngine
    ) -> None:
        """
        SCENARIO: ENOSPC after 100 bytes of a 220-byte corruption window
        EXPECTED: CorruptionError naming the write; no second salvage
        FAILURE MODE: Short corruption silently accepted, log no longer matches file
        """
        populate_home({"wt.wt": 10_000})
        driver = SalvageDriver(context)

        with DiskChaos.disk_full_on_write(bytes_before_full=100):
            with pytest.raises(CorruptionError) as exc_info:
                driver.run()

        assert exc_info.value.operation == "salvage-corrupt: write"
        assert exc_info.value.errno == errno.ENOSPC
        assert driver.state == DriverState.CLEAN_SALVAGE_DONE
        assert fake_engine.salvage_count == 1

    def test_close_failure__fatal(self, context, populate_home) -> None:
        """
        SCENARIO: All bytes written but close reports EIO
        EXPECTED: CorruptionError naming the close
        FAILURE MODE: Lost write-back ignored and the run carries on
        """
        populate_home({"wt": 5_000})
        ArtifactSnapshotter(context).snapshot()

        with DiskChaos.close_fails():
            with pytest.raises(CorruptionError) as exc_info:
                Corruptor(context).corrupt()

        assert exc_info.value.operation == "salvage-corrupt: close"
        assert exc_info.value.errno == errno.EIO

    def test_fstat_failure__fatal_before_any_write(
        self, context, populate_home, engine_home: Path
    ) -> None:
        """
        SCENARIO: Target size cannot be determined
        EXPECTED: CorruptionError naming fstat; file and log untouched
        FAILURE MODE: Window computed from a bogus size
        """
        populate_home({"wt.wt": 5_000})

        with DiskChaos.fstat_fails():
            with pytest.raises(CorruptionError) as exc_info:
                Corruptor(context).corrupt()

        assert exc_info.value.operation == "salvage-corrupt: fstat"
        assert exc_info.value.path == engine_home / "wt.wt"
        assert (engine_home / "wt.wt").read_bytes() == b"a" * 5_000
        assert not context.corrupt_log.exists()

    def test_corrupted_copy_fails__fatal(self, context, populate_home) -> None:
        """
        SCENARIO: Saving the corrupted copy into the snapshot fails
        EXPECTED: SnapshotError; the replay copy is never half-written
        FAILURE MODE: Run continues without a replayable fixture
        """
        populate_home({"wt.wt": 5_000})
        ArtifactSnapshotter(context).snapshot()

        with DiskChaos.copy_fails():
            with pytest.raises(SnapshotError) as exc_info:
                Corruptor(context).corrupt()

        assert exc_info.value.operation == "salvage corrupt copy step failed"
        assert not (context.snapshot_dir / "wt.wt.corrupted").exists()

    def test_unopenable_log__fatal(self, make_context, populate_home, engine_home: Path) -> None:
        """
        SCENARIO: Corruption log path is a directory
        EXPECTED: CorruptionError before the target is modified
        FAILURE MODE: Corruption applied without a record of where
        """
        populate_home({"wt.wt": 5_000})
        context = make_context()
        context.corrupt_log.mkdir()

        with pytest.raises(CorruptionError):
            Corruptor(context).corrupt()

        assert (engine_home / "wt.wt").read_bytes() == b"a" * 5_000


@pytest.mark.chaos
@pytest.mark.tier2
class TestSnapshotDiskFailures:
    """Disk failures hitting the snapshotter."""

    def test_copy_failure__fatal_before_salvage(
        self, context, populate_home, fake_engine: FakeEngine
    ) -> None:
        """
        SCENARIO: Disk full while snapshotting
        EXPECTED: SnapshotError; engine never opened
        FAILURE MODE: Salvage runs without a replayable baseline
        """
        populate_home({"WiredTiger.wt": 100, "wt.wt": 5_000})
        driver = SalvageDriver(context)

        with DiskChaos.copy_fails():
            with pytest.raises(SnapshotError) as exc_info:
                driver.run()

        assert exc_info.value.operation == "salvage copy: copy file"
        assert exc_info.value.errno == errno.ENOSPC
        assert driver.state == DriverState.INIT
        assert fake_engine.calls == []
