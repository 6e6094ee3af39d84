"""Shared contracts for chainverify.

This package holds the types that cross subsystem boundaries: the node and
signal data model, result values, enums, events and the exception
hierarchy. It imports nothing from engine/, core/ or plugins/.
"""

from chainverify.contracts.enums import (
    Classification,
    CounterName,
    RunStatus,
    VerdictCondition,
    VerdictStatus,
)
from chainverify.contracts.errors import (
    ChainVerifyError,
    InfrastructureError,
    PluginConfigError,
    ShuffleError,
    SinkWriteError,
    SourceReadError,
    VerificationNotRunError,
)
from chainverify.contracts.nodes import (
    DEFINITION_PAYLOAD,
    KEY_MASK,
    NO_PREDECESSOR,
    Node,
    Signal,
    canonical_key,
    format_key,
)
from chainverify.contracts.results import (
    ArtifactDescriptor,
    CounterAccumulator,
    DiagnosticRecord,
    KeyAggregate,
    PartitionResult,
    Verdict,
    VerdictFailure,
    VerificationCounters,
    VerificationResult,
)

__all__ = [
    "DEFINITION_PAYLOAD",
    "KEY_MASK",
    "NO_PREDECESSOR",
    "ArtifactDescriptor",
    "ChainVerifyError",
    "Classification",
    "CounterAccumulator",
    "CounterName",
    "DiagnosticRecord",
    "InfrastructureError",
    "KeyAggregate",
    "Node",
    "PartitionResult",
    "PluginConfigError",
    "RunStatus",
    "ShuffleError",
    "Signal",
    "SinkWriteError",
    "SourceReadError",
    "Verdict",
    "VerdictCondition",
    "VerdictFailure",
    "VerdictStatus",
    "VerificationCounters",
    "VerificationNotRunError",
    "VerificationResult",
    "canonical_key",
    "format_key",
]
