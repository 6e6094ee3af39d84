# src/chainverify/plugins/sinks/jsonl_sink.py
"""JSONL diagnostic sink.

Writes one JSON object per undefined key:

    {"key": "000000000000000b", "referrers": ["000000000000000c"], "overflow": 0}

Easier to post-process than the text layout when referrer lists are long.
"""

import json
from typing import Any

from chainverify.contracts.results import DiagnosticRecord
from chainverify.plugins.config_base import OutputDirConfig
from chainverify.plugins.sinks.part_files import PartFileSink


class JSONLSinkConfig(OutputDirConfig):
    """Configuration for the JSONL diagnostic sink."""


class JSONLDiagnosticSink(PartFileSink):
    """Write diagnostics as JSONL part files.

    Config options:
        path: Output directory (required)
        overwrite: Replace existing verification output (default: False)
        encoding: File encoding (default: "utf-8")
    """

    name = "jsonl"
    suffix = ".jsonl"

    def __init__(self, config: dict[str, Any]) -> None:
        super().__init__(JSONLSinkConfig.from_dict(config))

    def render(self, record: DiagnosticRecord) -> str:
        return json.dumps(
            {
                "key": record.key_text,
                "referrers": record.referrer_texts,
                "overflow": record.overflow,
            },
            separators=(",", ":"),
        )
