"""Conversion of raw stored records into Nodes.

Shared by every file-based source so that JSON and CSV inputs agree on what
counts as a key and what counts as "no predecessor".

Predecessor normalization:
- missing field, null, or empty string -> no predecessor
- any negative integer (the -1 sentinel or otherwise) -> no predecessor
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from chainverify.contracts.nodes import Node


def parse_key_value(value: Any, key_format: Literal["decimal", "hex"]) -> int | None:
    """Parse one raw key value. Returns None for an absent value.

    Raises:
        ValueError: If the value is not an integer or a parseable string
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"boolean is not a valid key: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if key_format == "hex":
            negative = text.startswith("-")
            digits = text[1:] if negative else text
            if digits[:2].lower() == "0x":
                digits = digits[2:]
            parsed = int(digits, 16)
            return -parsed if negative else parsed
        return int(text, 10)
    raise ValueError(f"expected an integer or string key, got {type(value).__name__}: {value!r}")


def node_from_record(
    record: Mapping[str, Any],
    *,
    key_field: str,
    prev_field: str,
    key_format: Literal["decimal", "hex"],
) -> Node:
    """Build a Node from a raw record.

    Raises:
        ValueError: If the key is missing or any value cannot be parsed
    """
    if key_field not in record:
        raise ValueError(f"record has no '{key_field}' field")
    key = parse_key_value(record[key_field], key_format)
    if key is None:
        raise ValueError(f"record has an empty '{key_field}' field")
    prev = parse_key_value(record.get(prev_field), key_format)
    try:
        return Node(key=key, prev=prev)
    except TypeError as e:
        raise ValueError(str(e)) from e
