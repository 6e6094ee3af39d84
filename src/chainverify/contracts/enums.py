"""All status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class Classification(StrEnum):
    """Outcome of aggregating every signal emitted for one key.

    Exactly one classification is produced per key the aggregator sees.

    Values:
        REFERENCED: Key was defined and at least one node points at it
        UNREFERENCED: Key was defined but nothing points at it (chain tail)
        UNDEFINED: Key is pointed at but was never written (lost write)
    """

    REFERENCED = "referenced"
    UNREFERENCED = "unreferenced"
    UNDEFINED = "undefined"


class CounterName(StrEnum):
    """Names of the run-wide verification counters.

    CORRUPT is reserved for multi-definition detection. Nothing in the
    classification logic increments it today.
    """

    REFERENCED = "referenced"
    UNREFERENCED = "unreferenced"
    UNDEFINED = "undefined"
    CORRUPT = "corrupt"


class VerdictCondition(StrEnum):
    """Individual conditions checked by the verdict step.

    Each failed condition is reported on its own so one run surfaces
    every category of anomaly.
    """

    REFERENCED_MISMATCH = "referenced_mismatch"
    UNREFERENCED_PRESENT = "unreferenced_present"
    UNDEFINED_PRESENT = "undefined_present"
    CORRUPT_PRESENT = "corrupt_present"


class VerdictStatus(StrEnum):
    """Final pass/fail decision."""

    PASS = "pass"
    FAIL = "fail"


class RunStatus(StrEnum):
    """Status of a verification run (distinct from the verdict).

    A FAILED run means infrastructure broke; its counters are invalid
    and no verdict may be derived from them.
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
