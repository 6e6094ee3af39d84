"""Unit tests for CLI event formatters."""

from __future__ import annotations

import json
from unittest.mock import patch

from chainverify.cli_formatters import create_console_formatters, create_json_formatters, subscribe_formatters
from chainverify.contracts.enums import RunStatus, VerdictCondition
from chainverify.contracts.errors import SourceReadError
from chainverify.contracts.events import (
    PhaseAction,
    PhaseCompleted,
    PhaseError,
    PhaseStarted,
    RunPhase,
    RunSummary,
    VerdictReached,
)
from chainverify.contracts.results import Verdict, VerdictFailure, VerificationCounters
from chainverify.core.events import EventBus


def _summary(status: RunStatus = RunStatus.COMPLETED) -> RunSummary:
    return RunSummary(
        run_id="run-1",
        status=status,
        counters=VerificationCounters(referenced=1_000, unreferenced=1, undefined=2),
        nodes_read=1_003,
        signals_emitted=2_005,
        num_reducers=4,
        duration_seconds=1.5,
    )


def _failed_verdict() -> Verdict:
    failure = VerdictFailure(
        condition=VerdictCondition.UNDEFINED_PRESENT,
        expected=0,
        actual=2,
        message="Found an undefined node",
    )
    return Verdict(counters=VerificationCounters(undefined=2), expected_referenced=0, failures=(failure,))


class TestConsoleFormatters:
    def test_phase_started_with_target(self) -> None:
        handler = create_console_formatters()[PhaseStarted]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(PhaseStarted(phase=RunPhase.SOURCE, action=PhaseAction.READING, target="jsonl"))

        assert mock_echo.call_args.args[0] == "[SOURCE] Reading → jsonl..."

    def test_phase_completed_minutes(self) -> None:
        handler = create_console_formatters()[PhaseCompleted]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(PhaseCompleted(phase=RunPhase.AGGREGATE, duration_seconds=90.0))

        assert "1.5m" in mock_echo.call_args.args[0]

    def test_phase_error_goes_to_stderr(self) -> None:
        handler = create_console_formatters()[PhaseError]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(PhaseError(phase=RunPhase.SOURCE, error=SourceReadError("bad", source="csv")))

        assert "[csv] bad" in mock_echo.call_args.args[0]
        assert mock_echo.call_args.kwargs["err"] is True

    def test_completed_summary_lists_counters(self) -> None:
        handler = create_console_formatters()[RunSummary]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(_summary())

        rendered = mock_echo.call_args.args[0]
        assert "COMPLETED" in rendered
        assert "REFERENCED=1,000" in rendered
        assert "UNDEFINED=2" in rendered
        assert "4 reducers" in rendered

    def test_failed_summary_omits_counters(self) -> None:
        handler = create_console_formatters()[RunSummary]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(_summary(RunStatus.FAILED))

        rendered = mock_echo.call_args.args[0]
        assert "FAILED" in rendered
        assert "REFERENCED" not in rendered

    def test_failed_verdict_lists_each_condition(self) -> None:
        handler = create_console_formatters()[VerdictReached]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(VerdictReached(run_id="run-1", verdict=_failed_verdict()))

        lines = [call.args[0] for call in mock_echo.call_args_list]
        assert "Verdict FAIL" in lines[0]
        assert "undefined_present" in lines[1]
        assert "actual 2" in lines[1]


class TestJsonFormatters:
    def test_run_summary(self) -> None:
        handler = create_json_formatters()[RunSummary]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(_summary())

        payload = json.loads(mock_echo.call_args.args[0])
        assert payload["event"] == "run_completed"
        assert payload["status"] == "completed"
        assert payload["counters"]["undefined"] == 2

    def test_verdict(self) -> None:
        handler = create_json_formatters()[VerdictReached]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(VerdictReached(run_id="run-1", verdict=_failed_verdict()))

        payload = json.loads(mock_echo.call_args.args[0])
        assert payload["status"] == "fail"
        assert payload["failures"] == [
            {"condition": "undefined_present", "expected": 0, "actual": 2, "message": "Found an undefined node"}
        ]

    def test_phase_error_includes_type(self) -> None:
        handler = create_json_formatters()[PhaseError]

        with patch("chainverify.cli_formatters.typer.echo") as mock_echo:
            handler(PhaseError(phase=RunPhase.COMMIT, error=OSError("read-only")))

        payload = json.loads(mock_echo.call_args.args[0])
        assert payload["error_type"] == "OSError"
        assert payload["phase"] == "commit"


class TestSubscribeFormatters:
    def test_every_event_type_is_subscribed(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        formatters = {PhaseStarted: lambda e: calls.append("started"), PhaseCompleted: lambda e: calls.append("completed")}

        subscribe_formatters(bus, formatters)
        bus.emit(PhaseStarted(phase=RunPhase.SOURCE, action=PhaseAction.READING))
        bus.emit(PhaseCompleted(phase=RunPhase.SOURCE, duration_seconds=0.1))

        assert calls == ["started", "completed"]
