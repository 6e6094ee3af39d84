# src/chainverify/engine/verifier.py
"""Verifier: runs the map -> shuffle -> aggregate pass and derives the verdict.

The Verifier is the only stateful component of a run:
1. Read every node from the source, emit signals, partition them by key
2. Reduce partitions in parallel, one KeyReducer and one sink writer each
3. Merge per-reducer counters and commit the diagnostic sink
4. On request, check the merged counters against the expected count

Infrastructure failures abort the run, discard partial diagnostics and
propagate as InfrastructureError. Data anomalies only show up in counters,
diagnostics and the verdict.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from chainverify.contracts.enums import RunStatus
from chainverify.contracts.errors import (
    InfrastructureError,
    ShuffleError,
    SinkWriteError,
    SourceReadError,
    VerificationNotRunError,
)
from chainverify.contracts.events import (
    PhaseAction,
    PhaseCompleted,
    PhaseError,
    PhaseStarted,
    RunPhase,
    RunSummary,
    VerdictReached,
)
from chainverify.contracts.nodes import Node
from chainverify.contracts.results import (
    ArtifactDescriptor,
    DiagnosticRecord,
    PartitionResult,
    Verdict,
    VerificationCounters,
    VerificationResult,
)
from chainverify.core.events import EventBusProtocol, NullEventBus
from chainverify.core.logging import get_logger
from chainverify.engine.aggregator import KeyReducer
from chainverify.engine.emitter import emit_signals
from chainverify.engine.shuffle import HashPartitionShuffle, Partition
from chainverify.engine.verdict import check_verdict
from chainverify.plugins.protocols import DiagnosticSink, DiagnosticWriter, NodeSource

logger = get_logger(__name__)


class Verifier:
    """Runs one verification pass over a node source.

    Example:
        verifier = Verifier(source, sink, num_reducers=4)
        result = verifier.run()
        verdict = verifier.verify(expected_referenced=999_998)
        if not verdict.passed:
            for failure in verdict.failures:
                print(failure.condition, failure.expected, failure.actual)
    """

    def __init__(
        self,
        source: NodeSource,
        sink: DiagnosticSink,
        *,
        num_reducers: int = 1,
        max_refs_per_key: int | None = None,
        event_bus: EventBusProtocol | None = None,
    ) -> None:
        if num_reducers < 1:
            raise ValueError(f"num_reducers must be >= 1, got {num_reducers}")
        if max_refs_per_key is not None and max_refs_per_key < 1:
            raise ValueError(f"max_refs_per_key must be >= 1 when set, got {max_refs_per_key}")
        self._source = source
        self._sink = sink
        self._num_reducers = num_reducers
        self._max_refs = max_refs_per_key
        self._events: EventBusProtocol = event_bus if event_bus is not None else NullEventBus()
        self._result: VerificationResult | None = None
        self._nodes_read = 0

    @property
    def num_reducers(self) -> int:
        return self._num_reducers

    @property
    def result(self) -> VerificationResult | None:
        """Result of the last successful run, or None."""
        return self._result

    def run(self) -> VerificationResult:
        """Execute the verification pass.

        Returns:
            VerificationResult with merged counters and committed artifacts

        Raises:
            SourceReadError: Nodes could not be read
            ShuffleError: A reducer crashed
            SinkWriteError: Diagnostics could not be written or committed
        """
        self._result = None
        run_id = uuid.uuid4().hex
        log = logger.bind(run_id=run_id)
        log.info(
            "Running verification",
            source=self._source.name,
            sink=self._sink.name,
            num_reducers=self._num_reducers,
        )

        started = time.perf_counter()
        phase = RunPhase.SOURCE
        shuffle = HashPartitionShuffle(self._num_reducers)
        self._nodes_read = 0
        try:
            phase_started = self._start_phase(RunPhase.SOURCE, PhaseAction.READING, self._source.name)
            self._map(shuffle)
            self._complete_phase(RunPhase.SOURCE, phase_started)
            log.debug("Signals partitioned", nodes_read=self._nodes_read, signals=shuffle.signal_count)

            phase = RunPhase.AGGREGATE
            phase_started = self._start_phase(RunPhase.AGGREGATE, PhaseAction.REDUCING, f"{self._num_reducers} reducers")
            partition_results = self._reduce(shuffle.partitions())
            self._complete_phase(RunPhase.AGGREGATE, phase_started)

            phase = RunPhase.COMMIT
            phase_started = self._start_phase(RunPhase.COMMIT, PhaseAction.COMMITTING, self._sink.name)
            artifacts = self._commit()
            self._complete_phase(RunPhase.COMMIT, phase_started)
        except InfrastructureError as e:
            self._events.emit(PhaseError(phase=phase, error=e))
            self._abort()
            duration = time.perf_counter() - started
            log.error("Verification run failed", phase=phase.value, error=str(e), error_type=type(e).__name__)
            self._events.emit(
                RunSummary(
                    run_id=run_id,
                    status=RunStatus.FAILED,
                    counters=VerificationCounters(),
                    nodes_read=self._nodes_read,
                    signals_emitted=shuffle.signal_count,
                    num_reducers=self._num_reducers,
                    duration_seconds=duration,
                )
            )
            raise
        finally:
            self._source.close()

        nodes_read = self._nodes_read
        counters = VerificationCounters.combine([p.counters for p in partition_results])
        duration = time.perf_counter() - started
        result = VerificationResult(
            run_id=run_id,
            counters=counters,
            nodes_read=nodes_read,
            signals_emitted=shuffle.signal_count,
            partitions=tuple(partition_results),
            artifacts=tuple(artifacts),
            duration_seconds=duration,
        )
        self._result = result

        log.info("Verification run completed", duration_seconds=round(duration, 3), nodes_read=nodes_read, **counters.as_dict())
        self._events.emit(
            RunSummary(
                run_id=run_id,
                status=RunStatus.COMPLETED,
                counters=counters,
                nodes_read=nodes_read,
                signals_emitted=shuffle.signal_count,
                num_reducers=self._num_reducers,
                duration_seconds=duration,
            )
        )
        return result

    def verify(self, expected_referenced: int) -> Verdict:
        """Check the last run's counters against the expected referenced count.

        Raises:
            VerificationNotRunError: If run() has not completed successfully
        """
        if self._result is None:
            raise VerificationNotRunError()

        verdict = check_verdict(self._result.counters, expected_referenced)
        logger.info(
            "Verdict reached",
            run_id=self._result.run_id,
            verdict=verdict.status.value,
            expected_referenced=expected_referenced,
        )
        self._events.emit(VerdictReached(run_id=self._result.run_id, verdict=verdict))
        return verdict

    def _map(self, shuffle: HashPartitionShuffle) -> None:
        try:
            for node in self._source.load():
                shuffle.add_all(emit_signals(node))
                self._nodes_read += 1
        except InfrastructureError:
            raise
        except Exception as e:
            raise SourceReadError(f"{type(e).__name__}: {e}", source=self._source.name) from e

    def _reduce(self, partitions: list[Partition]) -> list[PartitionResult]:
        # Writers are opened on this thread; each reducer thread only writes to its own.
        writers = [self._sink.open(partition.index) for partition in partitions]

        results: list[PartitionResult] = []
        with ThreadPoolExecutor(max_workers=self._num_reducers, thread_name_prefix="reducer") as pool:
            futures: dict[Future[PartitionResult], int] = {
                pool.submit(self._reduce_partition, partition, writer): partition.index
                for partition, writer in zip(partitions, writers, strict=True)
            }
            for future in as_completed(futures):
                try:
                    results.append(future.result())
                except InfrastructureError:
                    raise
                except Exception as e:
                    raise ShuffleError(f"reducer crashed: {e}", partition=futures[future]) from e

        results.sort(key=lambda r: r.partition)
        return results

    def _reduce_partition(self, partition: Partition, writer: DiagnosticWriter) -> PartitionResult:
        reducer = KeyReducer(partition.index, writer, max_refs=self._max_refs)
        try:
            return reducer.run(partition)
        finally:
            writer.close()

    def _commit(self) -> list[ArtifactDescriptor]:
        try:
            return self._sink.commit()
        except InfrastructureError:
            raise
        except OSError as e:
            raise SinkWriteError(f"commit failed: {e}", sink=self._sink.name) from e

    def _abort(self) -> None:
        try:
            self._sink.abort()
        except (OSError, InfrastructureError) as abort_error:
            # The run is already failing; report the original error, not this one.
            logger.error("Failed to discard partial diagnostics", sink=self._sink.name, error=str(abort_error))

    def _start_phase(self, phase: RunPhase, action: PhaseAction, target: str | None) -> float:
        self._events.emit(PhaseStarted(phase=phase, action=action, target=target))
        return time.perf_counter()

    def _complete_phase(self, phase: RunPhase, started: float) -> None:
        self._events.emit(PhaseCompleted(phase=phase, duration_seconds=time.perf_counter() - started))


@dataclass(frozen=True, slots=True)
class LocalVerification:
    """Outcome of verify_nodes(): run result, optional verdict, and diagnostics."""

    result: VerificationResult
    verdict: Verdict | None
    diagnostics: tuple[DiagnosticRecord, ...]


def verify_nodes(
    nodes: Iterable[Node | tuple[int, int | None]],
    *,
    expected_referenced: int | None = None,
    num_reducers: int = 1,
    max_refs_per_key: int | None = None,
) -> LocalVerification:
    """Verify an in-memory node collection.

    Convenience wrapper for library callers and tests: wraps the nodes in an
    IterableNodeSource, collects diagnostics in memory, and checks the
    verdict if ``expected_referenced`` is given.
    """
    from chainverify.plugins.sinks.memory_sink import CollectingSink
    from chainverify.plugins.sources.iterable_source import IterableNodeSource

    sink = CollectingSink()
    verifier = Verifier(
        IterableNodeSource(nodes),
        sink,
        num_reducers=num_reducers,
        max_refs_per_key=max_refs_per_key,
    )
    result = verifier.run()
    verdict = verifier.verify(expected_referenced) if expected_referenced is not None else None
    return LocalVerification(result=result, verdict=verdict, diagnostics=tuple(sink.records))
