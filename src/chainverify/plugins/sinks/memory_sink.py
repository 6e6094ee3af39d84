"""CollectingSink - keeps diagnostics in memory.

Used by verify_nodes() and by tests. Reducers write concurrently, so
appends go through a lock.
"""

from __future__ import annotations

import threading

from chainverify.contracts.results import ArtifactDescriptor, DiagnosticRecord


class _CollectingWriter:
    def __init__(self, sink: CollectingSink, partition: int) -> None:
        self._sink = sink
        self.partition = partition
        self.closed = False

    def write(self, record: DiagnosticRecord) -> None:
        if self.closed:
            raise RuntimeError(f"writer for partition {self.partition} is closed")
        self._sink._append(self.partition, record)

    def close(self) -> None:
        self.closed = True


class CollectingSink:
    """Diagnostic sink that collects records in memory.

    Attributes:
        committed: True once commit() was called
        aborted: True once abort() was called
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[tuple[int, DiagnosticRecord]] = []
        self.committed = False
        self.aborted = False

    def open(self, partition: int) -> _CollectingWriter:
        return _CollectingWriter(self, partition)

    def commit(self) -> list[ArtifactDescriptor]:
        self.committed = True
        return []

    def abort(self) -> None:
        with self._lock:
            self._records.clear()
        self.aborted = True

    @property
    def records(self) -> list[DiagnosticRecord]:
        """Collected records, grouped by partition in write order."""
        with self._lock:
            ordered = sorted(self._records, key=lambda item: item[0])
        return [record for _, record in ordered]

    def as_dict(self) -> dict[str, str]:
        """Formatted ``key -> comma-joined referrers`` mapping."""
        return {record.key_text: record.message for record in self.records}

    def _append(self, partition: int, record: DiagnosticRecord) -> None:
        with self._lock:
            self._records.append((partition, record))
