# src/chainverify/core/config.py
"""
Configuration schema and loading for verification runs.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class SourceSettings(BaseModel):
    """Node source plugin configuration.

    Example YAML:
        source:
          plugin: jsonl
          options:
            path: nodes.jsonl
            key_format: hex
    """

    model_config = {"frozen": True}

    plugin: str = Field(description="Source plugin name (json, jsonl, csv)")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Plugin-specific configuration options",
    )


class SinkSettings(BaseModel):
    """Diagnostic sink plugin configuration.

    Example YAML:
        sink:
          plugin: text
          options:
            path: out/verify
            overwrite: true
    """

    model_config = {"frozen": True}

    plugin: str = Field(description="Sink plugin name (text, jsonl)")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Plugin-specific configuration options",
    )


class LoggingSettings(BaseModel):
    """Logging configuration applied by the CLI before a run."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )


class VerifySettings(BaseModel):
    """Top-level verification run configuration.

    This is the single source of truth for a run. All settings are
    validated and frozen after construction.
    """

    model_config = {"frozen": True}

    source: SourceSettings = Field(
        description="Where node records are read from (exactly one per run)",
    )
    sink: SinkSettings = Field(
        description="Where diagnostics for undefined keys are written",
    )
    num_reducers: int = Field(
        default=1,
        ge=1,
        description="Number of partitions reduced in parallel",
    )
    expected_referenced: int | None = Field(
        default=None,
        ge=0,
        description="Interior node count expected to survive; omit to skip the verdict",
    )
    max_refs_per_key: int | None = Field(
        default=None,
        gt=0,
        description="Cap on distinct referrers collected per key (unbounded when omitted)",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original (will likely cause error)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lowercase_keys(value: Any) -> Any:
    """Dynaconf upper-cases keys at every level; Pydantic fields are lowercase."""
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lowercase_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> VerifySettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (CHAINVERIFY_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: CHAINVERIFY_SINK__OPTIONS__PATH for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated VerifySettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="CHAINVERIFY",
        settings_files=[str(config_path)],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # The CLI loads .env itself
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lowercase_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    raw_config = _expand_env_vars(raw_config)

    return VerifySettings(**raw_config)


def render_settings(settings: VerifySettings) -> str:
    """Render resolved settings back to YAML for display."""
    return yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False)
