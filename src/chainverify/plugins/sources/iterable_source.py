"""IterableNodeSource - a source over nodes already in memory.

Used by verify_nodes() and by tests. Accepts Node instances or plain
``(key, prev)`` tuples, where prev may be None or negative for a chain head.
"""

from collections.abc import Iterable, Iterator

from chainverify.contracts.nodes import Node


class IterableNodeSource:
    """Yield nodes from an in-memory iterable.

    The iterable is consumed once. Pass a list if the source must be
    reloaded.
    """

    name = "iterable"

    def __init__(self, nodes: Iterable[Node | tuple[int, int | None]]) -> None:
        self._nodes = nodes
        self.closed = False

    def load(self) -> Iterator[Node]:
        for item in self._nodes:
            if isinstance(item, Node):
                yield item
            else:
                key, prev = item
                yield Node(key=key, prev=prev)

    def close(self) -> None:
        self.closed = True
