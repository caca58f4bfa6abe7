"""
Salvage orchestration: open the engine, force a salvage, close.

There is no retry. A salvage that fails once is a defect in the repair
path, and retrying would hide it.
"""

import contextlib
from pathlib import Path

from salvage_harness.context import HarnessContext
from salvage_harness.errors import EngineError
from salvage_harness.interfaces.engine import EngineConnection
from salvage_harness.logging import get_logger

logger = get_logger(__name__)


class SalvageOrchestrator:
    """Runs single salvage phases against an engine home directory."""

    def __init__(self, context: HarnessContext) -> None:
        self._context = context
        self.salvage_count = 0

    def run_salvage(self, label: str, home: Path | None = None) -> None:
        """
        Open the engine, salvage the data source, verify, close.

        Args:
            label: Phase label passed to the verification hook
            home: Directory to open (default: the context's home)

        Raises:
            EngineError: If open, salvage, verify or close fails.
        """
        home = home or self._context.home
        engine = self._context.engine
        uri = self._context.uri

        logger.info("Salvage %s in %s (%s)", uri, home, label)
        try:
            conn = engine.open(home, self._context.engine_config)
        except Exception as e:
            raise EngineError(f"{engine.name}: open", home, e) from e

        try:
            self._salvage_and_verify(conn, home, uri, label)
        except BaseException:
            # Don't let a close failure mask the salvage failure
            with contextlib.suppress(Exception):
                conn.close()
            raise

        try:
            conn.close()
        except Exception as e:
            raise EngineError(f"{engine.name}: close", home, e) from e

        self.salvage_count += 1

    def _salvage_and_verify(
        self, conn: EngineConnection, home: Path, uri: str, label: str
    ) -> None:
        try:
            conn.salvage(uri, force=True)
        except Exception as e:
            raise EngineError(f"salvage {uri}", home, e) from e

        try:
            self._context.verify(conn, label)
        except Exception as e:
            raise EngineError(label, home, e) from e
