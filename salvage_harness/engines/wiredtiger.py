"""
WiredTiger adapter.

Wraps the ``wiredtiger`` Python bindings (install the ``wiredtiger`` extra).
The bindings are imported when the engine is opened so the rest of the
harness works without them.
"""

from pathlib import Path
from typing import Any

from salvage_harness.interfaces.engine import EngineConnection, StorageEngine
from salvage_harness.logging import get_logger

logger = get_logger(__name__)


class WiredTigerConnection(EngineConnection):
    """A WiredTiger connection plus the session used to salvage."""

    def __init__(self, conn: Any):
        self._conn = conn
        self._closed = False

    def salvage(self, uri: str, force: bool = True) -> None:
        config = "force=true" if force else None
        session = self._conn.open_session()
        try:
            session.salvage(uri, config)
        finally:
            session.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._conn.close()


class WiredTigerEngine(StorageEngine):
    """Opens WiredTiger connections via ``wiredtiger.wiredtiger_open``."""

    name = "wiredtiger"

    def open(self, home: Path, config: str = "") -> WiredTigerConnection:
        import wiredtiger

        logger.debug("wiredtiger_open(%s, %r)", home, config)
        return WiredTigerConnection(wiredtiger.wiredtiger_open(str(home), config))
