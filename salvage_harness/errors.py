"""
Exceptions raised by the salvage harness.

Every subclass of HarnessFatalError aborts the whole run. A missing
corruption target is not an error and has no exception here.
"""

from pathlib import Path


class HarnessFatalError(Exception):
    """
    Raised for any failure that must abort the run.

    Carries the failing operation, the path involved (if any) and the
    underlying error, which is also chained as ``__cause__``.
    """

    def __init__(
        self,
        operation: str,
        path: Path | str | None = None,
        cause: BaseException | None = None,
    ):
        self.operation = operation
        self.path = Path(path) if path is not None else None
        self.cause = cause
        super().__init__(self._build_message())

    @property
    def errno(self) -> int | None:
        """errno of the underlying OS error, when there is one."""
        return getattr(self.cause, "errno", None)

    def _build_message(self) -> str:
        message = self.operation
        if self.path is not None:
            message += f": {self.path}"
        if self.cause is not None:
            message += f": {self.cause}"
        return message


class SnapshotError(HarnessFatalError):
    """Raised when the artefact snapshot cannot be taken or restored."""

    pass


class CorruptionError(HarnessFatalError):
    """Raised when the corruption step fails part way."""

    pass


class EngineError(HarnessFatalError):
    """Raised when the storage engine fails to open, salvage, verify or close."""

    pass


class EngineLoadError(HarnessFatalError):
    """Raised when the configured storage engine cannot be imported."""

    pass
