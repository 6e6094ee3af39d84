"""Plugin protocols for node sources and diagnostic sinks.

Sources and sinks are the collaborators at the two ends of a run: the data
store the nodes live in, and wherever diagnostics for undefined keys go.
The engine only talks to them through these protocols.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chainverify.contracts.nodes import Node
    from chainverify.contracts.results import ArtifactDescriptor, DiagnosticRecord


@runtime_checkable
class NodeSource(Protocol):
    """Protocol for node sources.

    A source yields every stored node exactly once, in any order.

    Errors:
        Read and parse failures raise SourceReadError. They are fatal to the
        run and never retried here.
    """

    name: str

    def load(self) -> Iterator[Node]:
        """Yield every node in the store."""
        ...

    def close(self) -> None:
        """Release any resources held by the source."""
        ...


@runtime_checkable
class DiagnosticWriter(Protocol):
    """Writer for one reducer's diagnostic output.

    Each reducer gets its own writer, so writers are never shared between
    threads.
    """

    def write(self, record: DiagnosticRecord) -> None:
        """Write one diagnostic record. Raises SinkWriteError on failure."""
        ...

    def close(self) -> None:
        """Flush and close the writer."""
        ...


@runtime_checkable
class DiagnosticSink(Protocol):
    """Protocol for diagnostic sinks.

    Lifecycle per run:
        writer = sink.open(partition)   # once per reducer
        writer.write(record) ...
        writer.close()
        sink.commit()                   # all reducers succeeded
        # or sink.abort() if the run failed

    Example:
        class PrintSink:
            name = "print"

            def open(self, partition: int) -> DiagnosticWriter:
                return _PrintWriter()

            def commit(self) -> list[ArtifactDescriptor]:
                return []

            def abort(self) -> None:
                pass
    """

    name: str

    def open(self, partition: int) -> DiagnosticWriter:
        """Open the writer for a partition."""
        ...

    def commit(self) -> list[ArtifactDescriptor]:
        """Finalize output after every writer closed successfully."""
        ...

    def abort(self) -> None:
        """Discard output of a failed run."""
        ...
