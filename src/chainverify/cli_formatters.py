# src/chainverify/cli_formatters.py
"""CLI event formatter factories for verification run output.

Provides factory functions that return event handler maps for console
(human-readable) and JSON (structured) output formats. Each factory
returns a dict mapping event types to handler callables, suitable for
subscribing to an EventBus.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import typer

from chainverify.contracts.events import (
    PhaseCompleted,
    PhaseError,
    PhaseStarted,
    RunSummary,
    VerdictReached,
)
from chainverify.core.events import EventBusProtocol


def _format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s" if seconds < 60 else f"{seconds / 60:.1f}m"


def create_console_formatters() -> dict[type, Callable[..., None]]:
    """Create console formatters for human-readable CLI output."""

    def _format_phase_started(event: PhaseStarted) -> None:
        target_info = f" → {event.target}" if event.target else ""
        typer.echo(f"[{event.phase.value.upper()}] {event.action.value.capitalize()}{target_info}...")

    def _format_phase_completed(event: PhaseCompleted) -> None:
        typer.echo(f"[{event.phase.value.upper()}] ✓ Completed in {_format_duration(event.duration_seconds)}")

    def _format_phase_error(event: PhaseError) -> None:
        target_info = f" ({event.target})" if event.target else ""
        typer.echo(f"[{event.phase.value.upper()}] ✗ Error{target_info}: {event.error_message}", err=True)

    def _format_run_summary(event: RunSummary) -> None:
        status_symbols = {
            "running": "…",
            "completed": "✓",
            "failed": "✗",
        }
        symbol = status_symbols[event.status.value]
        if event.status.value != "completed":
            typer.echo(
                f"\n{symbol} Run {event.status.value.upper()}: "
                f"{event.nodes_read:,} nodes read before failure | "
                f"{event.duration_seconds:.2f}s total"
            )
            return
        counters = event.counters
        typer.echo(
            f"\n{symbol} Run {event.status.value.upper()}: "
            f"{event.nodes_read:,} nodes | "
            f"{event.num_reducers} reducers | "
            f"REFERENCED={counters.referenced:,} "
            f"UNREFERENCED={counters.unreferenced:,} "
            f"UNDEFINED={counters.undefined:,} "
            f"CORRUPT={counters.corrupt:,} | "
            f"{event.duration_seconds:.2f}s total"
        )

    def _format_verdict(event: VerdictReached) -> None:
        verdict = event.verdict
        if verdict.passed:
            typer.echo(f"✓ Verdict PASS: {verdict.counters.referenced:,} referenced (expected {verdict.expected_referenced:,})")
            return
        typer.echo(f"✗ Verdict FAIL: {len(verdict.failures)} condition(s) failed", err=True)
        for failure in verdict.failures:
            typer.echo(
                f"  - {failure.condition.value}: {failure.message} (expected {failure.expected:,}, actual {failure.actual:,})",
                err=True,
            )

    return {
        PhaseStarted: _format_phase_started,
        PhaseCompleted: _format_phase_completed,
        PhaseError: _format_phase_error,
        RunSummary: _format_run_summary,
        VerdictReached: _format_verdict,
    }


def create_json_formatters() -> dict[type, Callable[..., None]]:
    """Create JSON formatters for structured CLI output."""

    def _format_phase_started_json(event: PhaseStarted) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "phase_started",
                    "phase": event.phase.value,
                    "action": event.action.value,
                    "target": event.target,
                }
            )
        )

    def _format_phase_completed_json(event: PhaseCompleted) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "phase_completed",
                    "phase": event.phase.value,
                    "duration_seconds": event.duration_seconds,
                }
            )
        )

    def _format_phase_error_json(event: PhaseError) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "phase_error",
                    "phase": event.phase.value,
                    "error": event.error_message,
                    "error_type": type(event.error).__name__,
                    "target": event.target,
                }
            ),
            err=True,
        )

    def _format_run_summary_json(event: RunSummary) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "run_completed",
                    "run_id": event.run_id,
                    "status": event.status.value,
                    "nodes_read": event.nodes_read,
                    "signals_emitted": event.signals_emitted,
                    "num_reducers": event.num_reducers,
                    "counters": event.counters.as_dict(),
                    "duration_seconds": event.duration_seconds,
                }
            )
        )

    def _format_verdict_json(event: VerdictReached) -> None:
        verdict = event.verdict
        typer.echo(
            json.dumps(
                {
                    "event": "verdict",
                    "run_id": event.run_id,
                    "status": verdict.status.value,
                    "expected_referenced": verdict.expected_referenced,
                    "failures": [
                        {
                            "condition": failure.condition.value,
                            "expected": failure.expected,
                            "actual": failure.actual,
                            "message": failure.message,
                        }
                        for failure in verdict.failures
                    ],
                }
            )
        )

    return {
        PhaseStarted: _format_phase_started_json,
        PhaseCompleted: _format_phase_completed_json,
        PhaseError: _format_phase_error_json,
        RunSummary: _format_run_summary_json,
        VerdictReached: _format_verdict_json,
    }


def subscribe_formatters(
    event_bus: EventBusProtocol,
    formatters: dict[type, Callable[..., None]],
) -> None:
    """Subscribe all formatters to the event bus.

    Args:
        event_bus: The event bus to subscribe handlers to.
        formatters: Mapping from event type to handler callable.
    """
    for event_type, handler in formatters.items():
        event_bus.subscribe(event_type, handler)
