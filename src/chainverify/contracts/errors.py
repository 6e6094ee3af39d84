"""Exception hierarchy for verification runs.

Three failure families are kept apart on purpose:

- Data anomalies (undefined, unreferenced, multiply-defined keys) never
  raise. They only move counters and produce diagnostics.
- Infrastructure failures (source read, partitioning, sink write) raise
  an InfrastructureError subclass and abort the run. Counters from an
  aborted run are invalid.
- Precondition violations (asking for a verdict before a run completed)
  raise VerificationNotRunError, a programming error.
"""

from __future__ import annotations


class ChainVerifyError(Exception):
    """Base class for every error raised by chainverify."""


class InfrastructureError(ChainVerifyError):
    """A collaborator failed and the run cannot produce a verdict.

    Never retried here. Retry policy belongs to whatever submitted the run.
    """


class SourceReadError(InfrastructureError):
    """Node records could not be read or parsed.

    Attributes:
        source: Name of the source plugin that failed
        location: Human-readable position in the input (e.g. "line 12"), if known
    """

    def __init__(self, message: str, *, source: str, location: str | None = None) -> None:
        self.source = source
        self.location = location
        where = f" at {location}" if location else ""
        super().__init__(f"[{source}] {message}{where}")


class ShuffleError(InfrastructureError):
    """Grouping or reducing a partition failed unexpectedly.

    Attributes:
        partition: Index of the partition whose reducer crashed, if known
    """

    def __init__(self, message: str, *, partition: int | None = None) -> None:
        self.partition = partition
        prefix = f"partition {partition}: " if partition is not None else ""
        super().__init__(f"{prefix}{message}")


class SinkWriteError(InfrastructureError):
    """Diagnostic output could not be written or committed.

    Attributes:
        sink: Name of the sink plugin that failed
        target: Path or URI being written, if known
    """

    def __init__(self, message: str, *, sink: str, target: str | None = None) -> None:
        self.sink = sink
        self.target = target
        where = f" ({target})" if target else ""
        super().__init__(f"[{sink}] {message}{where}")


class VerificationNotRunError(ChainVerifyError):
    """Verdict requested before a verification run completed successfully."""

    def __init__(self, message: str = "You should call run() first") -> None:
        super().__init__(message)


class PluginConfigError(ChainVerifyError):
    """Raised when source or sink configuration is invalid."""
