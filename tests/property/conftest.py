# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Keys: small key universes (so references often hit real nodes) and the
  full unsigned 64-bit range
- Node lists: arbitrary stores, possibly with duplicate keys and dangling
  references
- Chains: intact linked lists, optionally with writes removed

Usage:
    from tests.property.conftest import node_lists

    @given(nodes=node_lists())
    def test_conservation(nodes: list[Node]) -> None:
        ...
"""

# =============================================================================
# Hypothesis Settings
# =============================================================================
#
# For standardized @settings decorators, import from tests.property.settings:
#   from tests.property.settings import STANDARD_SETTINGS, DETERMINISM_SETTINGS
#
# Tiers: DETERMINISM (500), STANDARD (100), SLOW (50), QUICK (20)
# =============================================================================

from __future__ import annotations

from hypothesis import strategies as st

from chainverify.contracts.nodes import KEY_MASK, Node

# Small universe: references collide with real keys often
small_keys = st.integers(min_value=0, max_value=40)

# Full unsigned 64-bit range
full_keys = st.integers(min_value=0, max_value=KEY_MASK)


@st.composite
def nodes(draw: st.DrawFn, keys: st.SearchStrategy[int] = small_keys) -> Node:
    key = draw(keys)
    prev = draw(st.none() | keys)
    return Node(key, prev=prev)


def node_lists(keys: st.SearchStrategy[int] = small_keys, max_size: int = 60) -> st.SearchStrategy[list[Node]]:
    """Arbitrary node stores, duplicates and dangling references included."""
    return st.lists(nodes(keys), max_size=max_size)


def unique_node_lists(keys: st.SearchStrategy[int] = small_keys, max_size: int = 60) -> st.SearchStrategy[list[Node]]:
    """Node stores where every key is written at most once."""
    return st.lists(nodes(keys), max_size=max_size, unique_by=lambda n: n.key)


@st.composite
def chains(draw: st.DrawFn, min_size: int = 1, max_size: int = 40) -> list[Node]:
    """An intact linked list over distinct keys: head has no predecessor."""
    keys = draw(st.lists(full_keys, min_size=min_size, max_size=max_size, unique=True))
    result: list[Node] = []
    prev: int | None = None
    for key in keys:
        result.append(Node(key, prev=prev))
        prev = key
    return draw(st.permutations(result))


@st.composite
def chains_with_losses(draw: st.DrawFn) -> tuple[list[Node], list[Node]]:
    """An intact chain and the subset of its nodes that survived.

    Returns:
        (full chain, surviving nodes)
    """
    chain = draw(chains(min_size=2))
    lost = draw(st.sets(st.sampled_from(range(len(chain))), max_size=len(chain) - 1))
    survivors = [node for index, node in enumerate(chain) if index not in lost]
    return chain, survivors


reducer_counts = st.integers(min_value=1, max_value=8)
