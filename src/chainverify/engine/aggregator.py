"""Aggregate stage: classify each key from the complete set of its signals.

For one key the aggregator counts definition signals and collects the
distinct referrers, then classifies (in this priority order):

1. no definition, at least one referrer  -> UNDEFINED (lost write)
2. defined, no referrer                  -> UNREFERENCED (chain tail)
3. anything else                         -> REFERENCED

A key defined more than once falls through to rules 2/3. The CORRUPT
counter is reserved for that case and is not incremented here.

Classification never raises: a single bad key must not fail the run.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from chainverify.contracts.enums import Classification
from chainverify.contracts.nodes import Signal, format_key
from chainverify.contracts.results import (
    CounterAccumulator,
    DiagnosticRecord,
    KeyAggregate,
    PartitionResult,
)
from chainverify.core.logging import get_logger

if TYPE_CHECKING:
    from chainverify.engine.shuffle import Partition
    from chainverify.plugins.protocols import DiagnosticWriter

logger = get_logger(__name__)


def aggregate(key: int, signals: Iterable[Signal], max_refs: int | None = None) -> KeyAggregate:
    """Fold the signals grouped under ``key`` into a KeyAggregate.

    Referrers are de-duplicated and kept in first-seen order. With
    ``max_refs`` set, at most that many distinct referrers are kept and the
    remaining distinct ones are only counted in ``ref_overflow``.
    """
    def_count = 0
    refs: dict[int, None] = {}
    overflow: set[int] = set()
    for signal in signals:
        if signal.referrer is None:
            def_count += 1
        elif signal.referrer in refs or signal.referrer in overflow:
            continue
        elif max_refs is not None and len(refs) >= max_refs:
            overflow.add(signal.referrer)
        else:
            refs[signal.referrer] = None
    return KeyAggregate(key=key, def_count=def_count, refs=tuple(refs), ref_overflow=len(overflow))


def classify(agg: KeyAggregate) -> Classification:
    """Classify an aggregate. Total over every possible aggregate."""
    if not agg.is_defined and agg.is_referenced:
        return Classification.UNDEFINED
    if agg.is_defined and not agg.is_referenced:
        return Classification.UNREFERENCED
    return Classification.REFERENCED


def format_diagnostic(agg: KeyAggregate) -> DiagnosticRecord:
    """Diagnostic record listing every node that pointed at an undefined key."""
    return DiagnosticRecord(key=agg.key, referrers=agg.refs, overflow=agg.ref_overflow)


class KeyReducer:
    """Reduces the keys of one partition into local counters and diagnostics.

    Each reducer owns its counters and its sink writer, so reducers running
    in parallel share no mutable state. The run merges their counters once
    all of them have finished.
    """

    def __init__(self, partition: int, writer: DiagnosticWriter, *, max_refs: int | None = None) -> None:
        self._partition = partition
        self._writer = writer
        self._max_refs = max_refs
        self._counters = CounterAccumulator()
        self._keys = 0
        self._signals = 0
        self._diagnostics = 0

    def reduce(self, key: int, signals: list[Signal]) -> Classification:
        agg = aggregate(key, signals, self._max_refs)
        classification = classify(agg)

        if agg.def_count > 1:
            # Still classified by the usual rules; CORRUPT stays untouched.
            logger.warning(
                "Key defined more than once",
                partition=self._partition,
                key=format_key(key),
                def_count=agg.def_count,
            )

        if classification is Classification.UNDEFINED:
            # Referenced but never written: it must have been lost.
            self._writer.write(format_diagnostic(agg))
            self._diagnostics += 1
            if agg.ref_overflow:
                logger.warning(
                    "Referrer list truncated",
                    partition=self._partition,
                    key=format_key(key),
                    kept=len(agg.refs),
                    dropped=agg.ref_overflow,
                )

        self._counters.increment(classification)
        self._keys += 1
        self._signals += len(signals)
        return classification

    def run(self, partition: Partition) -> PartitionResult:
        """Reduce every key group of a partition and return the partition totals."""
        for key, signals in partition:
            self.reduce(key, signals)
        logger.debug(
            "Partition reduced",
            partition=self._partition,
            keys=self._keys,
            diagnostics=self._diagnostics,
        )
        return self.result()

    def result(self) -> PartitionResult:
        return PartitionResult(
            partition=self._partition,
            counters=self._counters.snapshot(),
            keys=self._keys,
            signals=self._signals,
            diagnostics=self._diagnostics,
        )
