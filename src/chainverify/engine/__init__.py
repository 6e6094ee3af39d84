"""Verification engine: emit, shuffle, aggregate, verdict."""

from chainverify.engine.aggregator import KeyReducer, aggregate, classify, format_diagnostic
from chainverify.engine.emitter import emit_all, emit_signals
from chainverify.engine.shuffle import HashPartitionShuffle, Partition, partition_for
from chainverify.engine.verdict import check_verdict
from chainverify.engine.verifier import LocalVerification, Verifier, verify_nodes

__all__ = [
    "HashPartitionShuffle",
    "KeyReducer",
    "LocalVerification",
    "Partition",
    "Verifier",
    "aggregate",
    "check_verdict",
    "classify",
    "emit_all",
    "emit_signals",
    "format_diagnostic",
    "partition_for",
    "verify_nodes",
]
