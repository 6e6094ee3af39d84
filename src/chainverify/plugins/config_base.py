# src/chainverify/plugins/config_base.py
"""Base classes for typed plugin configurations.

This module provides base classes that plugins inherit from to get:
- Strict validation (reject unknown fields)
- Factory methods with clear error messages
- Common validation patterns (path handling, node field layout)

Example usage:
    class CSVNodeSourceConfig(NodeRecordConfig):
        delimiter: str = ","

    cfg = CSVNodeSourceConfig.from_dict(config)
    path = cfg.path  # Direct access, fails fast if missing
"""

from pathlib import Path
from typing import Any, Literal, Self

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from chainverify.contracts.errors import PluginConfigError


class PluginConfig(BaseModel):
    """Base class for typed plugin configurations.

    All plugin configs should inherit from this class.
    """

    model_config = {"extra": "forbid"}  # Reject unknown fields

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict with clear error on validation failure.

        Raises:
            PluginConfigError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")
        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e


class PathConfig(PluginConfig):
    """Base for configs that include file paths.

    Provides path validation and resolution relative to a base directory.
    """

    path: str

    @field_validator("path")
    @classmethod
    def validate_path_not_empty(cls, v: str) -> str:
        """Validate that path is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError("path cannot be empty")
        return v

    def resolved_path(self, base_dir: Path | None = None) -> Path:
        """Resolve path relative to base directory if provided."""
        p = Path(self.path).expanduser()
        if base_dir and not p.is_absolute():
            return base_dir / p
        return p


class NodeRecordConfig(PathConfig):
    """Field layout of stored node records, shared by file-based sources.

    Attributes:
        key_field: Record field holding the node's own key
        prev_field: Record field holding the predecessor key
        key_format: How string-typed keys are parsed. "decimal" reads
            "12345"; "hex" reads "0000000000003039" or "0x3039", the form
            diagnostics are written in. Integer-typed values are used as-is.
        encoding: File encoding
    """

    key_field: str = "key"
    prev_field: str = "prev"
    key_format: Literal["decimal", "hex"] = "decimal"
    encoding: str = "utf-8"

    @model_validator(mode="after")
    def validate_distinct_fields(self) -> Self:
        if self.key_field == self.prev_field:
            raise ValueError(f"key_field and prev_field must differ, both are '{self.key_field}'")
        return self


class OutputDirConfig(PathConfig):
    """Base for sinks writing one part file per reducer into a directory.

    Attributes:
        overwrite: Allow writing into a directory that already has output
        encoding: File encoding
    """

    overwrite: bool = False
    encoding: str = "utf-8"
