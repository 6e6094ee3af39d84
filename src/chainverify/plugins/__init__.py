"""Source and sink plugins.

Plugin names used in settings files:

    source.plugin: json | jsonl | csv
    sink.plugin:   text | jsonl
"""

from chainverify.plugins.protocols import DiagnosticSink, DiagnosticWriter, NodeSource

__all__ = [
    "DiagnosticSink",
    "DiagnosticWriter",
    "NodeSource",
]
