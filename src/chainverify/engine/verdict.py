"""Verdict stage: decide pass/fail from final counters.

PASS requires all of:
- REFERENCED equals the caller's expected interior-node count
- UNREFERENCED is zero
- UNDEFINED is zero
- CORRUPT is zero (reserved; always zero today)

Every condition is checked, none short-circuits, and each failure is logged
on its own so one run surfaces every category of anomaly.
"""

from __future__ import annotations

from chainverify.contracts.enums import VerdictCondition
from chainverify.contracts.results import Verdict, VerdictFailure, VerificationCounters
from chainverify.core.logging import get_logger

logger = get_logger(__name__)


def check_verdict(counters: VerificationCounters, expected_referenced: int) -> Verdict:
    """Compare final counters against the expected referenced count.

    Args:
        counters: Counters merged across all reducers of a completed run
        expected_referenced: Number of interior nodes expected to survive

    Returns:
        Verdict listing every failed condition

    Raises:
        ValueError: If expected_referenced is negative
    """
    if expected_referenced < 0:
        raise ValueError(f"expected_referenced must be non-negative, got {expected_referenced}")

    failures: list[VerdictFailure] = []

    if counters.referenced != expected_referenced:
        failures.append(
            VerdictFailure(
                condition=VerdictCondition.REFERENCED_MISMATCH,
                expected=expected_referenced,
                actual=counters.referenced,
                message="Expected referenced count does not match with actual referenced count",
            )
        )

    if counters.unreferenced > 0:
        failures.append(
            VerdictFailure(
                condition=VerdictCondition.UNREFERENCED_PRESENT,
                expected=0,
                actual=counters.unreferenced,
                message="Unreferenced nodes were not expected",
            )
        )

    if counters.undefined > 0:
        failures.append(
            VerdictFailure(
                condition=VerdictCondition.UNDEFINED_PRESENT,
                expected=0,
                actual=counters.undefined,
                message="Found an undefined node",
            )
        )

    if counters.corrupt > 0:
        failures.append(
            VerdictFailure(
                condition=VerdictCondition.CORRUPT_PRESENT,
                expected=0,
                actual=counters.corrupt,
                message="Found keys with more than one definition",
            )
        )

    for failure in failures:
        logger.error(
            failure.message,
            condition=failure.condition.value,
            expected=failure.expected,
            actual=failure.actual,
        )

    return Verdict(counters=counters, expected_referenced=expected_referenced, failures=tuple(failures))
