# src/chainverify/cli.py
"""chainverify Command Line Interface.

Entry point for the chainverify CLI tool.

Exit codes:
    0  run completed (and, when an expected count was given, verdict PASS)
    1  verdict FAIL
    2  usage error (reported by Typer)
    3  configuration error or infrastructure failure during the run
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from chainverify import __version__
from chainverify.contracts.errors import InfrastructureError, PluginConfigError
from chainverify.core.config import VerifySettings, load_settings, render_settings

if TYPE_CHECKING:
    from chainverify.plugins.protocols import DiagnosticSink, NodeSource

__all__ = [
    "EXIT_RUN_FAILED",
    "EXIT_VERDICT_FAILED",
    "app",
    "load_settings",  # Re-exported from config for convenience
]

EXIT_VERDICT_FAILED = 1
EXIT_RUN_FAILED = 3


class OutputFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"


class KeyFormat(StrEnum):
    DECIMAL = "decimal"
    HEX = "hex"


class SinkFormat(StrEnum):
    TEXT = "text"
    JSONL = "jsonl"


app = typer.Typer(
    name="chainverify",
    help="chainverify: find lost writes by verifying a distributed random linked list.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"chainverify version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(EXIT_RUN_FAILED)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence is checked by _load_dotenv for a clearer message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """chainverify: find lost writes by verifying a distributed random linked list."""
    from chainverify.core.logging import configure_logging

    # Settings files may lower or raise the level later; flags given here win.
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _apply_logging_settings(ctx: typer.Context, config: VerifySettings) -> None:
    from chainverify.core.logging import configure_logging

    flags: dict[str, Any] = ctx.obj or {}
    configure_logging(
        json_output=flags.get("json_logs", False) or config.logging.json_output,
        level="DEBUG" if flags.get("verbose", False) else config.logging.level,
    )


def _execute_verification(
    source: NodeSource,
    sink: DiagnosticSink,
    *,
    num_reducers: int,
    expected_referenced: int | None,
    max_refs_per_key: int | None,
    output_format: OutputFormat,
) -> None:
    """Run one verification pass with CLI event output.

    Raises:
        typer.Exit: EXIT_RUN_FAILED on infrastructure failure,
            EXIT_VERDICT_FAILED if the verdict fails
    """
    from chainverify.cli_formatters import (
        create_console_formatters,
        create_json_formatters,
        subscribe_formatters,
    )
    from chainverify.core.events import EventBus
    from chainverify.engine.verifier import Verifier

    event_bus = EventBus()
    formatters = create_json_formatters() if output_format is OutputFormat.JSON else create_console_formatters()
    subscribe_formatters(event_bus, formatters)

    verifier = Verifier(
        source,
        sink,
        num_reducers=num_reducers,
        max_refs_per_key=max_refs_per_key,
        event_bus=event_bus,
    )
    try:
        verifier.run()
    except InfrastructureError:
        # PhaseError and the FAILED RunSummary were already rendered by the formatters
        raise typer.Exit(EXIT_RUN_FAILED) from None

    if expected_referenced is None:
        return

    verdict = verifier.verify(expected_referenced)
    if not verdict.passed:
        raise typer.Exit(EXIT_VERDICT_FAILED)


@app.command()
def run(
    ctx: typer.Context,
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    expected_referenced: int | None = typer.Option(
        None,
        "--expected-referenced",
        "-e",
        min=0,
        help="Override the expected referenced count from the settings file.",
    ),
    reducers: int | None = typer.Option(
        None,
        "--reducers",
        "-r",
        min=1,
        help="Override the reducer count from the settings file.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.CONSOLE,
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Run a verification pass described by a settings file."""
    from chainverify.cli_helpers import instantiate_plugins_from_config

    settings_path = Path(settings).expanduser()

    try:
        config = load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(EXIT_RUN_FAILED) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(EXIT_RUN_FAILED) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(EXIT_RUN_FAILED) from None

    _apply_logging_settings(ctx, config)

    try:
        plugins = instantiate_plugins_from_config(config)
    except PluginConfigError as e:
        typer.echo(f"Error instantiating plugins: {e}", err=True)
        raise typer.Exit(EXIT_RUN_FAILED) from None

    _execute_verification(
        plugins["source"],
        plugins["sink"],
        num_reducers=reducers if reducers is not None else config.num_reducers,
        expected_referenced=expected_referenced if expected_referenced is not None else config.expected_referenced,
        max_refs_per_key=config.max_refs_per_key,
        output_format=output_format,
    )


@app.command()
def verify(
    input_path: Path = typer.Argument(
        ...,
        metavar="INPUT",
        help="Node file to verify (.json, .jsonl, .ndjson or .csv).",
    ),
    output_dir: Path = typer.Argument(
        ...,
        metavar="OUTPUT_DIR",
        help="Directory for diagnostic part files.",
    ),
    num_reducers: int = typer.Argument(
        ...,
        metavar="NUM_REDUCERS",
        min=1,
        help="Number of partitions reduced in parallel.",
    ),
    expected_referenced: int | None = typer.Option(
        None,
        "--expected-referenced",
        "-e",
        min=0,
        help="Expected referenced count; when given, a verdict is checked.",
    ),
    key_format: KeyFormat = typer.Option(
        KeyFormat.DECIMAL,
        "--key-format",
        help="How string keys in the input are parsed.",
    ),
    sink_plugin: SinkFormat = typer.Option(
        SinkFormat.TEXT,
        "--sink",
        help="Diagnostic output layout.",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Replace verification output already present in OUTPUT_DIR.",
    ),
    max_refs_per_key: int | None = typer.Option(
        None,
        "--max-refs-per-key",
        min=1,
        help="Cap on distinct referrers collected per key.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.CONSOLE,
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Verify a node file without a settings file."""
    from chainverify.cli_helpers import create_sink, create_source, source_plugin_for_path

    try:
        plugin = source_plugin_for_path(input_path)
        source = create_source(plugin, {"path": str(input_path), "key_format": key_format.value})
        sink = create_sink(sink_plugin.value, {"path": str(output_dir), "overwrite": overwrite})
    except PluginConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_RUN_FAILED) from None

    _execute_verification(
        source,
        sink,
        num_reducers=num_reducers,
        expected_referenced=expected_referenced,
        max_refs_per_key=max_refs_per_key,
        output_format=output_format,
    )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Print the resolved settings (after env overrides) as YAML.",
    ),
) -> None:
    """Validate a settings file without running."""
    from chainverify.cli_helpers import instantiate_plugins_from_config

    settings_path = Path(settings).expanduser()

    try:
        config = load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(EXIT_RUN_FAILED) from None
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(EXIT_RUN_FAILED) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(EXIT_RUN_FAILED) from None

    try:
        plugins = instantiate_plugins_from_config(config)
    except PluginConfigError as e:
        _format_validation_error(
            title="Plugin Configuration Error",
            message=str(e),
            hint="Check plugin names and that options match the plugin's requirements.",
        )
        raise typer.Exit(EXIT_RUN_FAILED) from None

    typer.echo("✓ Configuration valid.")
    typer.echo(f"  Source: {plugins['source'].name} ({config.source.plugin})")
    typer.echo(f"  Sink: {plugins['sink'].name}")
    typer.echo(f"  Reducers: {config.num_reducers}")
    if config.expected_referenced is not None:
        typer.echo(f"  Expected referenced: {config.expected_referenced:,}")

    if show:
        typer.echo("")
        typer.echo(render_settings(config), nl=False)


if __name__ == "__main__":
    app()
