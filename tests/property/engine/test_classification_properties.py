# tests/property/engine/test_classification_properties.py
"""Property-based tests for key classification over whole node stores.

The counters are the product of a verification run. These properties hold
for any node store, however it is partitioned:

- Conservation: every distinct key (node key or prev) is classified once
- No silent drop: every edge into an undefined key shows up in exactly one
  diagnostic
- Duplicate safety: re-emitting every node changes no classification
- Partition independence: the reducer count never changes the counters
"""

from __future__ import annotations

from collections import Counter

from hypothesis import given

from chainverify.contracts.enums import Classification
from chainverify.contracts.nodes import Node
from chainverify.contracts.results import CounterAccumulator
from chainverify.engine.aggregator import aggregate, classify
from chainverify.engine.emitter import emit_all
from chainverify.engine.shuffle import HashPartitionShuffle
from chainverify.engine.verifier import verify_nodes
from tests.property.conftest import chains, chains_with_losses, node_lists, reducer_counts, unique_node_lists
from tests.property.settings import DETERMINISM_SETTINGS, SLOW_SETTINGS, STANDARD_SETTINGS


def _classify_all(nodes: list[Node], num_partitions: int = 1) -> dict[int, Classification]:
    shuffle = HashPartitionShuffle(num_partitions)
    shuffle.add_all(emit_all(nodes))
    result: dict[int, Classification] = {}
    for partition in shuffle.partitions():
        for key, signals in partition:
            result[key] = classify(aggregate(key, signals))
    return result


def _referenced_keys(nodes: list[Node]) -> set[int]:
    return {n.key for n in nodes} | {n.prev for n in nodes if n.prev is not None}


class TestConservation:
    """Every key is classified exactly once."""

    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_classified_total_equals_distinct_keys(self, nodes: list[Node]) -> None:
        result = verify_nodes(nodes)

        assert result.result.counters.classified == len(_referenced_keys(nodes))

    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_each_key_lands_in_exactly_one_group(self, nodes: list[Node]) -> None:
        shuffle = HashPartitionShuffle(3)
        shuffle.add_all(emit_all(nodes))

        seen = Counter(key for partition in shuffle.partitions() for key, _ in partition)

        assert set(seen) == _referenced_keys(nodes)
        assert all(count == 1 for count in seen.values())

    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_corrupt_is_never_incremented(self, nodes: list[Node]) -> None:
        result = verify_nodes(nodes)

        assert result.result.counters.corrupt == 0


class TestNoSilentDrop:
    """Edges into undefined keys are always reported."""

    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_every_dangling_edge_appears_in_one_diagnostic(self, nodes: list[Node]) -> None:
        defined = {n.key for n in nodes}
        dangling = {(n.prev, n.key) for n in nodes if n.prev is not None and n.prev not in defined}

        result = verify_nodes(nodes, num_reducers=2)

        reported = Counter((record.key, ref) for record in result.diagnostics for ref in record.referrers)
        assert set(reported) == dangling
        assert all(count == 1 for count in reported.values())

    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_edges_into_defined_keys_make_them_referenced(self, nodes: list[Node]) -> None:
        defined = {n.key for n in nodes}
        classes = _classify_all(nodes)

        for node in nodes:
            if node.prev is not None and node.prev in defined:
                assert classes[node.prev] is Classification.REFERENCED

    @given(data=chains_with_losses())
    @STANDARD_SETTINGS
    def test_every_lost_interior_node_is_undefined(self, data: tuple[list[Node], list[Node]]) -> None:
        chain, survivors = data
        surviving_keys = {n.key for n in survivors}
        lost_and_pointed_at = {n.prev for n in survivors if n.prev is not None and n.prev not in surviving_keys}

        result = verify_nodes(survivors)

        assert {record.key for record in result.diagnostics} == lost_and_pointed_at
        assert result.result.counters.undefined == len(lost_and_pointed_at)


class TestDuplicateSafety:
    """Redundant emission (speculative map tasks) changes no classification."""

    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_emitting_twice_keeps_classifications(self, nodes: list[Node]) -> None:
        assert _classify_all(nodes + nodes) == _classify_all(nodes)

    @given(nodes=unique_node_lists())
    @STANDARD_SETTINGS
    def test_emitting_twice_doubles_def_count_only(self, nodes: list[Node]) -> None:
        signals = list(emit_all(nodes))
        for node in nodes:
            own = [s for s in signals if s.key == node.key]
            once = aggregate(node.key, own)
            twice = aggregate(node.key, own + own)

            assert twice.def_count == 2 * once.def_count
            assert twice.refs == once.refs


class TestPartitionIndependence:
    """Counters and diagnostics do not depend on the reducer count."""

    @given(nodes=node_lists(), num_reducers=reducer_counts)
    @SLOW_SETTINGS
    def test_counters_independent_of_reducer_count(self, nodes: list[Node], num_reducers: int) -> None:
        baseline = verify_nodes(nodes, num_reducers=1)
        partitioned = verify_nodes(nodes, num_reducers=num_reducers)

        assert partitioned.result.counters == baseline.result.counters
        assert {r.key: set(r.referrers) for r in partitioned.diagnostics} == {r.key: set(r.referrers) for r in baseline.diagnostics}

    @given(nodes=node_lists(), num_partitions=reducer_counts)
    @DETERMINISM_SETTINGS
    def test_classification_independent_of_partitioning(self, nodes: list[Node], num_partitions: int) -> None:
        assert _classify_all(nodes, num_partitions) == _classify_all(nodes, 1)


class TestIntactChains:
    """An intact chain has one head, one tail, and everything else referenced."""

    @given(chain=chains(min_size=2))
    @STANDARD_SETTINGS
    def test_intact_chain_counts(self, chain: list[Node]) -> None:
        result = verify_nodes(chain, expected_referenced=len(chain) - 1)

        counters = result.result.counters
        assert counters.undefined == 0
        # The tail: nothing points at the last node written
        assert counters.unreferenced == 1
        assert counters.referenced == len(chain) - 1
        assert result.diagnostics == ()

    @given(chain=chains(min_size=1))
    @STANDARD_SETTINGS
    def test_intact_chain_fails_verdict_only_on_tail(self, chain: list[Node]) -> None:
        result = verify_nodes(chain, expected_referenced=len(chain) - 1)

        assert result.verdict is not None
        assert [f.condition.value for f in result.verdict.failures] == ["unreferenced_present"]


class TestCounterAccumulation:
    @given(nodes=node_lists())
    @STANDARD_SETTINGS
    def test_accumulator_matches_classification_histogram(self, nodes: list[Node]) -> None:
        classes = _classify_all(nodes)
        acc = CounterAccumulator()
        for classification in classes.values():
            acc.increment(classification)

        histogram = Counter(classes.values())
        snapshot = acc.snapshot()
        assert snapshot.referenced == histogram[Classification.REFERENCED]
        assert snapshot.unreferenced == histogram[Classification.UNREFERENCED]
        assert snapshot.undefined == histogram[Classification.UNDEFINED]
