"""
Interfaces (abstract base classes) for the salvage harness.

These define the contracts that must be implemented by:
- StorageEngine: opens a connection on an engine home directory
- EngineConnection: salvages a data source and closes
"""

from salvage_harness.interfaces.engine import EngineConnection, StorageEngine, load_engine

__all__ = [
    "EngineConnection",
    "StorageEngine",
    "load_engine",
]
