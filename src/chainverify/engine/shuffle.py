"""Group-by-key primitive standing in for a distributed shuffle.

Signals are routed to one of ``num_partitions`` partitions by key and grouped
within the partition, so every signal for a key ends up in exactly one
group. This is all the aggregate stage relies on; classification never looks
at how the grouping was done.

Within a key, signals keep the order they were added in. Nothing is promised
about ordering across keys or partitions.

Partitioning happens on the single map thread. Once partitions() has been
called, each Partition is read by exactly one reducer.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from chainverify.contracts.nodes import KEY_MASK, Signal


def partition_for(key: int, num_partitions: int) -> int:
    """Partition index for a key: the unsigned key modulo the partition count."""
    return (key & KEY_MASK) % num_partitions


@dataclass
class Partition:
    """All signal groups routed to one reducer.

    Attributes:
        index: Partition number (0-based)
        groups: key -> signals for that key, in arrival order
    """

    index: int
    groups: dict[int, list[Signal]] = field(default_factory=dict)

    def __iter__(self) -> Iterator[tuple[int, list[Signal]]]:
        return iter(self.groups.items())

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def signal_count(self) -> int:
        return sum(len(signals) for signals in self.groups.values())


class HashPartitionShuffle:
    """In-process hash-partitioning group-by.

    Example:
        shuffle = HashPartitionShuffle(num_partitions=4)
        shuffle.add_all(emit_all(nodes))
        for partition in shuffle.partitions():
            for key, signals in partition:
                ...
    """

    def __init__(self, num_partitions: int) -> None:
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        self._num_partitions = num_partitions
        self._partitions = [Partition(index=i) for i in range(num_partitions)]
        self._signal_count = 0

    @property
    def num_partitions(self) -> int:
        return self._num_partitions

    @property
    def signal_count(self) -> int:
        """Total signals added so far."""
        return self._signal_count

    def add(self, signal: Signal) -> None:
        partition = self._partitions[partition_for(signal.key, self._num_partitions)]
        group = partition.groups.get(signal.key)
        if group is None:
            partition.groups[signal.key] = [signal]
        else:
            group.append(signal)
        self._signal_count += 1

    def add_all(self, signals: Iterable[Signal]) -> int:
        """Add every signal; returns how many were added."""
        added = 0
        for signal in signals:
            self.add(signal)
            added += 1
        return added

    def partitions(self) -> list[Partition]:
        return list(self._partitions)
