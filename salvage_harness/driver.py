"""
Salvage test driver.

Sequences snapshot, clean salvage, corruption and post-corruption salvage.
Fatal errors propagate to the caller; a missing corruption target just
shortens the run.
"""

from enum import Enum

from pydantic import BaseModel, Field

from salvage_harness.context import HarnessContext
from salvage_harness.corruptor import CorruptionRecord, Corruptor
from salvage_harness.logging import get_logger
from salvage_harness.orchestrator import SalvageOrchestrator
from salvage_harness.snapshot import ArtifactSnapshotter

logger = get_logger(__name__)

CLEAN_VERIFY_LABEL = "post-salvage verify"
CORRUPT_VERIFY_LABEL = "post-corrupt-salvage verify"


class DriverState(str, Enum):
    """
    Driver state machine.

    INIT -> DISABLED (terminal, flag off)
    INIT -> SNAPSHOT_TAKEN -> CLEAN_SALVAGE_DONE
    CLEAN_SALVAGE_DONE -> CORRUPTION_APPLIED -> POST_CORRUPT_SALVAGE_DONE -> COMPLETE
    CLEAN_SALVAGE_DONE -> NO_CORRUPTION_TARGET -> COMPLETE
    """

    INIT = "INIT"
    DISABLED = "DISABLED"
    SNAPSHOT_TAKEN = "SNAPSHOT_TAKEN"
    CLEAN_SALVAGE_DONE = "CLEAN_SALVAGE_DONE"
    CORRUPTION_APPLIED = "CORRUPTION_APPLIED"
    NO_CORRUPTION_TARGET = "NO_CORRUPTION_TARGET"
    POST_CORRUPT_SALVAGE_DONE = "POST_CORRUPT_SALVAGE_DONE"
    COMPLETE = "COMPLETE"

    @property
    def is_terminal(self) -> bool:
        return self in (DriverState.DISABLED, DriverState.COMPLETE)


DRIVER_STATE_TRANSITIONS: dict[DriverState, set[DriverState]] = {
    DriverState.INIT: {DriverState.DISABLED, DriverState.SNAPSHOT_TAKEN},
    DriverState.SNAPSHOT_TAKEN: {DriverState.CLEAN_SALVAGE_DONE},
    DriverState.CLEAN_SALVAGE_DONE: {
        DriverState.CORRUPTION_APPLIED,
        DriverState.NO_CORRUPTION_TARGET,
    },
    DriverState.CORRUPTION_APPLIED: {DriverState.POST_CORRUPT_SALVAGE_DONE},
    DriverState.NO_CORRUPTION_TARGET: {DriverState.COMPLETE},
    DriverState.POST_CORRUPT_SALVAGE_DONE: {DriverState.COMPLETE},
    DriverState.DISABLED: set(),
    DriverState.COMPLETE: set(),
}


def validate_driver_transition(from_state: DriverState, to_state: DriverState) -> bool:
    """Check whether the driver may move from one state to another."""
    return to_state in DRIVER_STATE_TRANSITIONS.get(from_state, set())


class SalvageReport(BaseModel):
    """Outcome of a driver run."""

    run_id: str
    seed: int
    state: DriverState
    history: list[DriverState] = Field(default_factory=list)
    corruption: CorruptionRecord | None = None
    salvage_count: int = 0

    @property
    def corrupted(self) -> bool:
        return self.corruption is not None


class SalvageDriver:
    """Runs the salvage test phase for one harness context."""

    def __init__(
        self,
        context: HarnessContext,
        snapshotter: ArtifactSnapshotter | None = None,
        orchestrator: SalvageOrchestrator | None = None,
        corruptor: Corruptor | None = None,
    ) -> None:
        self._context = context
        self._snapshotter = snapshotter or ArtifactSnapshotter(context)
        self._orchestrator = orchestrator or SalvageOrchestrator(context)
        self._corruptor = corruptor or Corruptor(context, self._snapshotter)
        self._state = DriverState.INIT
        self._history: list[DriverState] = [DriverState.INIT]

    @property
    def state(self) -> DriverState:
        return self._state

    def _transition(self, to_state: DriverState) -> None:
        if not validate_driver_transition(self._state, to_state):
            raise RuntimeError(f"Invalid driver transition {self._state.value} -> {to_state.value}")
        logger.debug("Driver %s -> %s", self._state.value, to_state.value)
        self._state = to_state
        self._history.append(to_state)

    def _report(self, corruption: CorruptionRecord | None = None) -> SalvageReport:
        return SalvageReport(
            run_id=self._context.run_id,
            seed=self._context.seed,
            state=self._state,
            history=list(self._history),
            corruption=corruption,
            salvage_count=self._orchestrator.salvage_count,
        )

    def run(self) -> SalvageReport:
        """
        Run the salvage phase.

        Returns:
            SalvageReport describing where the run ended.

        Raises:
            HarnessFatalError: On any failure; the run is abandoned.
        """
        if self._state.is_terminal:
            raise RuntimeError(f"SalvageDriver already finished in {self._state.value}")
        if self._state is not DriverState.INIT:
            raise RuntimeError(f"SalvageDriver abandoned in {self._state.value} after a fatal error")

        if not self._context.enabled:
            logger.info("Salvage testing disabled")
            self._transition(DriverState.DISABLED)
            return self._report()

        logger.info("Salvage testing %s", self._context.to_dict())

        # Save the interesting files so the salvage step can be replayed
        self._snapshotter.snapshot()
        self._transition(DriverState.SNAPSHOT_TAKEN)

        self._orchestrator.run_salvage(CLEAN_VERIFY_LABEL)
        self._transition(DriverState.CLEAN_SALVAGE_DONE)

        corruption = self._corruptor.corrupt()
        if corruption is None:
            self._transition(DriverState.NO_CORRUPTION_TARGET)
        else:
            self._transition(DriverState.CORRUPTION_APPLIED)
            self._orchestrator.run_salvage(CORRUPT_VERIFY_LABEL)
            self._transition(DriverState.POST_CORRUPT_SALVAGE_DONE)

        self._transition(DriverState.COMPLETE)
        logger.info(
            "Salvage testing complete: %d salvage phases, corruption %s",
            self._orchestrator.salvage_count,
            "applied" if corruption else "skipped",
        )
        return self._report(corruption)
