# src/chainverify/plugins/sources/csv_source.py
"""CSV node source.

Loads node records from a CSV file with a header row. Every value is a
string, so ``key_format`` decides how keys are read. An empty prev cell
means "no predecessor".
"""

import csv
from collections.abc import Iterator
from typing import Any

from chainverify.contracts.errors import SourceReadError
from chainverify.contracts.nodes import Node
from chainverify.plugins.config_base import NodeRecordConfig
from chainverify.plugins.sources.records import node_from_record


class CSVNodeSourceConfig(NodeRecordConfig):
    """Configuration for the CSV node source."""

    delimiter: str = ","


class CSVNodeSource:
    """Load nodes from a CSV file.

    Config options:
        path: Path to CSV file (required)
        delimiter: Field delimiter (default: ",")
        key_field / prev_field: Column names (default: "key" / "prev")
        key_format: "decimal" or "hex" (default: "decimal")
        encoding: File encoding (default: "utf-8")
    """

    name = "csv"

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = CSVNodeSourceConfig.from_dict(config)

        self._path = cfg.resolved_path()
        self._delimiter = cfg.delimiter
        self._encoding = cfg.encoding
        self._key_field = cfg.key_field
        self._prev_field = cfg.prev_field
        self._key_format = cfg.key_format

    def load(self) -> Iterator[Node]:
        """Yield nodes from the CSV file.

        Raises:
            SourceReadError: File missing or unreadable, missing key column, or a bad row
        """
        location = str(self._path)
        try:
            with open(self._path, encoding=self._encoding, newline="") as f:
                reader = csv.DictReader(f, delimiter=self._delimiter)
                if reader.fieldnames is None:
                    return
                if self._key_field not in reader.fieldnames:
                    raise SourceReadError(
                        f"header has no '{self._key_field}' column (found: {', '.join(reader.fieldnames)})",
                        source=self.name,
                        location=f"{self._path}:1",
                    )
                for row in reader:
                    # reader.line_num counts physical lines, so multi-line cells stay accurate
                    location = f"{self._path}:{reader.line_num}"
                    if not any(value for value in row.values() if isinstance(value, str)):
                        continue
                    try:
                        yield node_from_record(
                            row,
                            key_field=self._key_field,
                            prev_field=self._prev_field,
                            key_format=self._key_format,
                        )
                    except ValueError as e:
                        raise SourceReadError(str(e), source=self.name, location=location) from e
        except OSError as e:
            raise SourceReadError(f"cannot read file: {e}", source=self.name, location=location) from e
        except UnicodeDecodeError as e:
            raise SourceReadError(f"cannot decode file as {self._encoding}: {e}", source=self.name, location=location) from e
        except csv.Error as e:
            raise SourceReadError(f"malformed CSV: {e}", source=self.name, location=location) from e

    def close(self) -> None:
        """Release resources (no-op for CSV source)."""
        pass
