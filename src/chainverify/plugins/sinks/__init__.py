"""Built-in diagnostic sinks."""

from chainverify.plugins.sinks.jsonl_sink import JSONLDiagnosticSink
from chainverify.plugins.sinks.memory_sink import CollectingSink
from chainverify.plugins.sinks.text_sink import TextDiagnosticSink

__all__ = ["CollectingSink", "JSONLDiagnosticSink", "TextDiagnosticSink"]
