"""Built-in node sources."""

from chainverify.plugins.sources.csv_source import CSVNodeSource
from chainverify.plugins.sources.iterable_source import IterableNodeSource
from chainverify.plugins.sources.json_source import JSONNodeSource

__all__ = ["CSVNodeSource", "IterableNodeSource", "JSONNodeSource"]
