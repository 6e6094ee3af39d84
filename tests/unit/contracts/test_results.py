"""Tests for result contracts: aggregates, diagnostics, counters, verdicts."""

import pytest

from chainverify.contracts.enums import Classification, CounterName, VerdictCondition, VerdictStatus
from chainverify.contracts.results import (
    ArtifactDescriptor,
    CounterAccumulator,
    DiagnosticRecord,
    KeyAggregate,
    Verdict,
    VerdictFailure,
    VerificationCounters,
)


class TestKeyAggregate:
    def test_defined_and_referenced_flags(self) -> None:
        agg = KeyAggregate(key=1, def_count=1, refs=(2,))

        assert agg.is_defined
        assert agg.is_referenced

    def test_empty_aggregate(self) -> None:
        agg = KeyAggregate(key=1, def_count=0)

        assert not agg.is_defined
        assert not agg.is_referenced


class TestDiagnosticRecord:
    def test_single_referrer_message(self) -> None:
        record = DiagnosticRecord(key=0xB, referrers=(0xC,))

        assert record.key_text == "000000000000000b"
        assert record.message == "000000000000000c"

    def test_multiple_referrers_comma_joined_in_order(self) -> None:
        record = DiagnosticRecord(key=1, referrers=(3, 2))

        assert record.message == "0000000000000003,0000000000000002"

    def test_overflow_suffix(self) -> None:
        record = DiagnosticRecord(key=1, referrers=(2,), overflow=5)

        assert record.message == "0000000000000002,...(+5 more)"


class TestVerificationCounters:
    def test_defaults_are_zero(self) -> None:
        counters = VerificationCounters()

        assert counters.as_dict() == {"referenced": 0, "unreferenced": 0, "undefined": 0, "corrupt": 0}

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ValueError, match="undefined"):
            VerificationCounters(undefined=-1)

    def test_merge_adds_fieldwise(self) -> None:
        merged = VerificationCounters(1, 2, 3, 0).merge(VerificationCounters(10, 20, 30, 1))

        assert merged == VerificationCounters(11, 22, 33, 1)

    def test_combine_empty_is_zero(self) -> None:
        assert VerificationCounters.combine([]) == VerificationCounters()

    def test_classified_excludes_corrupt(self) -> None:
        assert VerificationCounters(1, 2, 3, 4).classified == 6

    def test_get_by_counter_name(self) -> None:
        assert VerificationCounters(undefined=4).get(CounterName.UNDEFINED) == 4


class TestCounterAccumulator:
    def test_increment_and_snapshot(self) -> None:
        acc = CounterAccumulator()
        acc.increment(Classification.REFERENCED)
        acc.increment(Classification.REFERENCED)
        acc.increment(Classification.UNDEFINED, amount=3)

        assert acc.snapshot() == VerificationCounters(referenced=2, undefined=3)

    def test_snapshot_is_detached(self) -> None:
        acc = CounterAccumulator()
        snapshot = acc.snapshot()
        acc.increment(Classification.UNREFERENCED)

        assert snapshot.unreferenced == 0


class TestVerdict:
    def test_pass_when_no_failures(self) -> None:
        verdict = Verdict(counters=VerificationCounters(), expected_referenced=0)

        assert verdict.passed
        assert verdict.status is VerdictStatus.PASS
        assert verdict.failed_conditions == []

    def test_fail_lists_conditions(self) -> None:
        failure = VerdictFailure(
            condition=VerdictCondition.UNDEFINED_PRESENT,
            expected=0,
            actual=1,
            message="Found an undefined node",
        )
        verdict = Verdict(counters=VerificationCounters(undefined=1), expected_referenced=0, failures=(failure,))

        assert not verdict.passed
        assert verdict.status is VerdictStatus.FAIL
        assert verdict.failed_conditions == [VerdictCondition.UNDEFINED_PRESENT]


class TestArtifactDescriptor:
    def test_for_file(self) -> None:
        descriptor = ArtifactDescriptor.for_file(path="/out/part-r-00000", content_hash="abc", size_bytes=10)

        assert descriptor.artifact_type == "file"
        assert descriptor.path_or_uri == "file:///out/part-r-00000"
        assert descriptor.size_bytes == 10
