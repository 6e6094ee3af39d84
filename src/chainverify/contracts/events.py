"""Observability events for verification runs.

These domain events provide visibility into run phases and completion
status. Events are emitted by the Verifier and consumed by CLI formatters
for human-readable or structured output.
"""

from dataclasses import dataclass
from enum import StrEnum

from chainverify.contracts.enums import RunStatus
from chainverify.contracts.results import Verdict, VerificationCounters


class RunPhase(StrEnum):
    """Run lifecycle phases for observability events."""

    SOURCE = "source"
    AGGREGATE = "aggregate"
    COMMIT = "commit"


class PhaseAction(StrEnum):
    """Actions within a run phase."""

    READING = "reading"
    REDUCING = "reducing"
    COMMITTING = "committing"


@dataclass(frozen=True, slots=True)
class PhaseStarted:
    """Emitted when a run phase begins.

    Phases:
    - source: Reading nodes, emitting signals and partitioning them by key
    - aggregate: Reducing every partition and writing diagnostics
    - commit: Finalizing diagnostic output

    Attributes:
        phase: The lifecycle phase starting
        action: What's happening (e.g., "reading", "reducing")
        target: Optional target (e.g., file path, plugin name)
    """

    phase: RunPhase
    action: PhaseAction
    target: str | None = None


@dataclass(frozen=True, slots=True)
class PhaseCompleted:
    """Emitted when a run phase completes successfully."""

    phase: RunPhase
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class PhaseError:
    """Emitted when a run phase fails.

    Stores the full exception object to preserve traceback and chained causes.
    """

    phase: RunPhase
    error: BaseException
    target: str | None = None

    @property
    def error_message(self) -> str:
        """Human-readable error message for formatting."""
        return str(self.error)


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Summary emitted when a run finishes (success or failure).

    Counters are only meaningful when status is COMPLETED.
    """

    run_id: str
    status: RunStatus
    counters: VerificationCounters
    nodes_read: int
    signals_emitted: int
    num_reducers: int
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class VerdictReached:
    """Emitted after counters have been checked against expectations."""

    run_id: str
    verdict: Verdict
