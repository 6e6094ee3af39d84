# src/chainverify/plugins/sources/json_source.py
"""JSON node source.

Loads node records from JSON files. Supports JSON array and JSONL formats.

Each record is an object holding the node's key and its predecessor, e.g.
``{"key": 12345, "prev": 678}`` or, with ``key_format: hex``,
``{"key": "0000000000003039", "prev": null}``.

NOTE: Non-standard JSON constants (NaN, Infinity, -Infinity) are rejected
at parse time. They can never be a valid key.
"""

import json
from collections.abc import Iterator
from typing import Any, Literal

from chainverify.contracts.errors import SourceReadError
from chainverify.contracts.nodes import Node
from chainverify.plugins.config_base import NodeRecordConfig
from chainverify.plugins.sources.records import node_from_record


def _reject_nonfinite_constant(value: str) -> None:
    """Reject non-standard JSON constants (NaN, Infinity, -Infinity).

    Python's json module accepts these by default, but they violate RFC 8259.
    Passed to json.loads/json.load via the parse_constant parameter.

    Raises:
        ValueError: Always - these constants are not allowed
    """
    raise ValueError(f"Non-standard JSON constant '{value}' not allowed")


class JSONNodeSourceConfig(NodeRecordConfig):
    """Configuration for the JSON node source."""

    format: Literal["json", "jsonl"] | None = None
    data_key: str | None = None


class JSONNodeSource:
    """Load nodes from a JSON or JSONL file.

    Config options:
        path: Path to JSON file (required)
        format: "json" (array) or "jsonl" (lines). Auto-detected from extension if not set.
        data_key: Key to extract the record array from a JSON object (e.g., "nodes")
        key_field / prev_field: Record field names (default: "key" / "prev")
        key_format: "decimal" or "hex" for string-typed keys (default: "decimal")
        encoding: File encoding (default: "utf-8")
    """

    name = "json"

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = JSONNodeSourceConfig.from_dict(config)

        self._path = cfg.resolved_path()
        self._encoding = cfg.encoding
        self._data_key = cfg.data_key
        self._key_field = cfg.key_field
        self._prev_field = cfg.prev_field
        self._key_format = cfg.key_format

        # Auto-detect format from extension if not specified
        fmt = cfg.format
        if fmt is None:
            fmt = "jsonl" if self._path.suffix == ".jsonl" else "json"
        self._format = fmt

    @property
    def format(self) -> str:
        return self._format

    def load(self) -> Iterator[Node]:
        """Yield nodes from the file.

        Raises:
            SourceReadError: File missing or unreadable, malformed JSON, or a bad record
        """
        if self._format == "jsonl":
            yield from self._load_jsonl()
        else:
            yield from self._load_json_array()

    def close(self) -> None:
        """Release resources (no-op for JSON source)."""
        pass

    def _to_node(self, record: Any, location: str) -> Node:
        if not isinstance(record, dict):
            raise SourceReadError(
                f"expected a JSON object, got {type(record).__name__}",
                source=self.name,
                location=location,
            )
        try:
            return node_from_record(
                record,
                key_field=self._key_field,
                prev_field=self._prev_field,
                key_format=self._key_format,
            )
        except ValueError as e:
            raise SourceReadError(str(e), source=self.name, location=location) from e

    def _load_jsonl(self) -> Iterator[Node]:
        location = f"{self._path}"
        try:
            with open(self._path, encoding=self._encoding) as f:
                for line_num, line in enumerate(f, start=1):
                    location = f"{self._path}:{line_num}"
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line, parse_constant=_reject_nonfinite_constant)
                    except ValueError as e:
                        raise SourceReadError(f"invalid JSON: {e}", source=self.name, location=location) from e
                    yield self._to_node(record, location)
        except OSError as e:
            raise SourceReadError(f"cannot read file: {e}", source=self.name, location=location) from e
        except UnicodeDecodeError as e:
            raise SourceReadError(f"cannot decode file as {self._encoding}: {e}", source=self.name, location=location) from e

    def _load_json_array(self) -> Iterator[Node]:
        try:
            with open(self._path, encoding=self._encoding) as f:
                data = json.load(f, parse_constant=_reject_nonfinite_constant)
        except OSError as e:
            raise SourceReadError(f"cannot read file: {e}", source=self.name, location=str(self._path)) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise SourceReadError(f"invalid JSON: {e}", source=self.name, location=str(self._path)) from e

        if self._data_key is not None:
            if not isinstance(data, dict) or self._data_key not in data:
                raise SourceReadError(
                    f"data_key '{self._data_key}' not found in top-level object",
                    source=self.name,
                    location=str(self._path),
                )
            data = data[self._data_key]

        if not isinstance(data, list):
            raise SourceReadError(
                f"expected a JSON array of records, got {type(data).__name__}",
                source=self.name,
                location=str(self._path),
            )

        for index, record in enumerate(data):
            yield self._to_node(record, f"{self._path}[{index}]")
