# src/chainverify/plugins/sinks/text_sink.py
"""Text diagnostic sink.

Writes one ``<undefined key>\\t<referrer>,<referrer>,...`` line per
undefined key, every key in ``%016x`` form. This is the MapReduce
TextOutputFormat layout, so existing tooling that greps verify output keeps
working.
"""

from typing import Any

from chainverify.contracts.results import DiagnosticRecord
from chainverify.plugins.config_base import OutputDirConfig
from chainverify.plugins.sinks.part_files import PartFileSink


class TextSinkConfig(OutputDirConfig):
    """Configuration for the text diagnostic sink."""

    separator: str = "\t"


class TextDiagnosticSink(PartFileSink):
    """Write diagnostics as tab-separated text part files.

    Config options:
        path: Output directory (required)
        overwrite: Replace existing verification output (default: False)
        separator: Key/value separator (default: tab)
        encoding: File encoding (default: "utf-8")
    """

    name = "text"
    suffix = ""

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = TextSinkConfig.from_dict(config)
        super().__init__(cfg)
        self._separator = cfg.separator

    def render(self, record: DiagnosticRecord) -> str:
        return f"{record.key_text}{self._separator}{record.message}"
