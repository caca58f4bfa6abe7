"""
StorageEngine interface.

Defines the contract the harness needs from the storage engine under test.
The engine's on-disk format and repair algorithm are its own business.
"""

import importlib
from abc import ABC, abstractmethod
from pathlib import Path

from salvage_harness.errors import EngineLoadError


class EngineConnection(ABC):
    """
    An open connection to a storage engine rooted at a home directory.

    Owned by a single salvage phase: opened, salvaged, closed.
    """

    @abstractmethod
    def salvage(self, uri: str, force: bool = True) -> None:
        """
        Salvage a data source.

        Args:
            uri: Data source URI, e.g. "table:wt"
            force: Proceed even when metadata is ambiguous

        Raises:
            Any exception on failure; the harness treats it as fatal.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection and release engine resources."""
        pass


class StorageEngine(ABC):
    """Abstract base class for the storage engine collaborator."""

    name: str = "engine"

    @abstractmethod
    def open(self, home: Path, config: str = "") -> EngineConnection:
        """
        Open the engine rooted at a directory.

        Args:
            home: Engine home directory
            config: Engine-specific open configuration

        Returns:
            An open EngineConnection.
        """
        pass


def load_engine(path: str) -> StorageEngine:
    """
    Resolve a 'package.module:attribute' path to a StorageEngine.

    The attribute may be a StorageEngine instance, a StorageEngine subclass
    or any zero-argument callable returning one.

    Raises:
        EngineLoadError: If the path cannot be imported or does not
            produce a StorageEngine.
    """
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise EngineLoadError("load engine", cause=ValueError(f"malformed engine path {path!r}"))

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EngineLoadError(f"load engine {path}", cause=e) from e

    try:
        target: object = getattr(module, attr)
    except AttributeError as e:
        raise EngineLoadError(f"load engine {path}", cause=e) from e

    if isinstance(target, StorageEngine):
        return target

    if callable(target):
        try:
            engine = target()
        except Exception as e:
            raise EngineLoadError(f"create engine {path}", cause=e) from e
        if isinstance(engine, StorageEngine):
            return engine

    raise EngineLoadError(
        f"load engine {path}",
        cause=TypeError(f"{path} does not produce a StorageEngine"),
    )
