"""Map stage: turn stored nodes into definition and reference signals.

Every node produces exactly one definition signal keyed by its own key. A
node with a predecessor additionally produces one reference signal keyed by
that predecessor, carrying the node's own key as payload.

These functions are pure. They may run redundantly or out of order without
changing the outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from chainverify.contracts.nodes import Node, Signal


def emit_signals(node: Node) -> tuple[Signal, ...]:
    """Signals for one node: a definition, plus a reference if it has a predecessor."""
    if node.prev is None:
        return (Signal.definition(node.key),)
    return (Signal.definition(node.key), Signal.reference(node.prev, node.key))


def emit_all(nodes: Iterable[Node]) -> Iterator[Signal]:
    """Flat-map emit_signals over a node stream."""
    for node in nodes:
        yield from emit_signals(node)
