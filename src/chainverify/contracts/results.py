"""Result types produced by the aggregate and verdict stages.

These are the values that cross subsystem boundaries: per-key aggregates,
diagnostic records handed to sinks, counters merged across reducers, and
the final verdict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from chainverify.contracts.enums import Classification, CounterName, VerdictCondition, VerdictStatus
from chainverify.contracts.nodes import format_key


@dataclass(frozen=True, slots=True)
class KeyAggregate:
    """Everything the aggregator learned about one key.

    Attributes:
        key: The key the signals were grouped under
        def_count: Number of definition signals (0 or 1 for well-formed data)
        refs: Distinct referrer keys, in the order first observed
        ref_overflow: Distinct referrers dropped because a cap was reached
    """

    key: int
    def_count: int
    refs: tuple[int, ...] = ()
    ref_overflow: int = 0

    @property
    def is_defined(self) -> bool:
        return self.def_count > 0

    @property
    def is_referenced(self) -> bool:
        return len(self.refs) > 0


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    """One undefined key and every node that pointed at it.

    Sinks render this as ``key_text -> message``, both in ``%016x`` form.
    """

    key: int
    referrers: tuple[int, ...]
    overflow: int = 0

    @property
    def key_text(self) -> str:
        return format_key(self.key)

    @property
    def referrer_texts(self) -> list[str]:
        return [format_key(ref) for ref in self.referrers]

    @property
    def message(self) -> str:
        text = ",".join(self.referrer_texts)
        if self.overflow:
            text += f",...(+{self.overflow} more)"
        return text


@dataclass(frozen=True, slots=True)
class VerificationCounters:
    """The four run-wide counters, as an immutable value.

    Counters from independent reducers are combined with merge(), which is
    associative and commutative, so the order reducers finish in does not
    matter.
    """

    referenced: int = 0
    unreferenced: int = 0
    undefined: int = 0
    corrupt: int = 0

    def __post_init__(self) -> None:
        for name in ("referenced", "unreferenced", "undefined", "corrupt"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    def merge(self, other: VerificationCounters) -> VerificationCounters:
        return VerificationCounters(
            referenced=self.referenced + other.referenced,
            unreferenced=self.unreferenced + other.unreferenced,
            undefined=self.undefined + other.undefined,
            corrupt=self.corrupt + other.corrupt,
        )

    @classmethod
    def combine(cls, counters: list[VerificationCounters] | tuple[VerificationCounters, ...]) -> VerificationCounters:
        total = cls()
        for item in counters:
            total = total.merge(item)
        return total

    @property
    def classified(self) -> int:
        """Number of keys classified (every key lands in exactly one of these)."""
        return self.referenced + self.unreferenced + self.undefined

    def get(self, name: CounterName) -> int:
        return int(getattr(self, name.value))

    def as_dict(self) -> dict[str, int]:
        return {name.value: self.get(name) for name in CounterName}


class CounterAccumulator:
    """Mutable counters owned by a single reducer.

    Not thread-safe. Each reducer gets its own accumulator and the run
    merges snapshots afterwards.
    """

    def __init__(self) -> None:
        self._counts: dict[CounterName, int] = dict.fromkeys(CounterName, 0)

    def increment(self, classification: Classification, amount: int = 1) -> None:
        self._counts[CounterName(classification.value)] += amount

    def snapshot(self) -> VerificationCounters:
        return VerificationCounters(
            referenced=self._counts[CounterName.REFERENCED],
            unreferenced=self._counts[CounterName.UNREFERENCED],
            undefined=self._counts[CounterName.UNDEFINED],
            corrupt=self._counts[CounterName.CORRUPT],
        )


@dataclass(frozen=True, slots=True)
class ArtifactDescriptor:
    """Descriptor for an artifact written by a sink.

    content_hash and size_bytes let a caller check the diagnostic output
    was not truncated or altered after the run.
    """

    artifact_type: Literal["file"]
    path_or_uri: str
    content_hash: str
    size_bytes: int

    @classmethod
    def for_file(cls, path: str, content_hash: str, size_bytes: int) -> ArtifactDescriptor:
        """Create descriptor for file-based artifacts."""
        return cls(
            artifact_type="file",
            path_or_uri=f"file://{path}",
            content_hash=content_hash,
            size_bytes=size_bytes,
        )


@dataclass(frozen=True, slots=True)
class PartitionResult:
    """What one reducer produced for its partition."""

    partition: int
    counters: VerificationCounters
    keys: int
    signals: int
    diagnostics: int


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of a completed verification run.

    Attributes:
        run_id: Unique identifier for the run
        counters: Counters merged across every partition
        nodes_read: Node records read from the source
        signals_emitted: Signals emitted by the map stage
        partitions: Per-reducer results, ordered by partition index
        artifacts: Artifacts committed by the diagnostic sink
        duration_seconds: Wall-clock time of the run
    """

    run_id: str
    counters: VerificationCounters
    nodes_read: int
    signals_emitted: int
    partitions: tuple[PartitionResult, ...]
    artifacts: tuple[ArtifactDescriptor, ...] = ()
    duration_seconds: float = 0.0


@dataclass(frozen=True, slots=True)
class VerdictFailure:
    """One failed verdict condition."""

    condition: VerdictCondition
    expected: int
    actual: int
    message: str


@dataclass(frozen=True, slots=True)
class Verdict:
    """Pass/fail decision derived from final counters.

    Attributes:
        counters: Counters the decision was made on
        expected_referenced: Interior nodes the caller expected to survive
        failures: Every condition that failed (empty on PASS)
    """

    counters: VerificationCounters
    expected_referenced: int
    failures: tuple[VerdictFailure, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return not self.failures

    @property
    def status(self) -> VerdictStatus:
        return VerdictStatus.PASS if self.passed else VerdictStatus.FAIL

    @property
    def failed_conditions(self) -> list[VerdictCondition]:
        return [failure.condition for failure in self.failures]
