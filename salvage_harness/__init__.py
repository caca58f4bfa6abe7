"""
Salvage Harness

A fault-injection harness for a storage engine's salvage (forced repair) path:
- Snapshots the engine's files so a failing run can be replayed offline
- Salvages the clean data, corrupts the primary data file at a random window
- Salvages again and fails loudly on any engine error
"""

__version__ = "0.1.0"

from salvage_harness.config import Settings

__all__ = ["__version__", "Settings"]
