"""CLI helper functions for plugin lookup and instantiation."""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from chainverify.contracts.errors import PluginConfigError
from chainverify.plugins.sinks.jsonl_sink import JSONLDiagnosticSink
from chainverify.plugins.sinks.text_sink import TextDiagnosticSink
from chainverify.plugins.sources.csv_source import CSVNodeSource
from chainverify.plugins.sources.json_source import JSONNodeSource

if TYPE_CHECKING:
    from chainverify.core.config import VerifySettings
    from chainverify.plugins.protocols import DiagnosticSink, NodeSource

SOURCE_PLUGINS: dict[str, type[Any]] = {
    "json": JSONNodeSource,
    "jsonl": JSONNodeSource,
    "csv": CSVNodeSource,
}

SINK_PLUGINS: dict[str, type[Any]] = {
    "text": TextDiagnosticSink,
    "jsonl": JSONLDiagnosticSink,
}

# Options a plugin name implies when the settings file leaves them out
_SOURCE_DEFAULTS: dict[str, dict[str, Any]] = {
    "json": {"format": "json"},
    "jsonl": {"format": "jsonl"},
}

_EXTENSION_PLUGINS = {
    ".json": "json",
    ".jsonl": "jsonl",
    ".ndjson": "jsonl",
    ".csv": "csv",
}


def create_source(plugin: str, options: dict[str, Any]) -> "NodeSource":
    """Instantiate a node source by plugin name.

    Raises:
        PluginConfigError: Unknown plugin name or invalid options
    """
    source_cls = SOURCE_PLUGINS.get(plugin)
    if source_cls is None:
        raise PluginConfigError(f"Unknown source plugin '{plugin}'. Available: {', '.join(sorted(SOURCE_PLUGINS))}")
    merged = {**_SOURCE_DEFAULTS.get(plugin, {}), **options}
    source: NodeSource = source_cls(merged)
    return source


def create_sink(plugin: str, options: dict[str, Any]) -> "DiagnosticSink":
    """Instantiate a diagnostic sink by plugin name.

    Raises:
        PluginConfigError: Unknown plugin name or invalid options
    """
    sink_cls = SINK_PLUGINS.get(plugin)
    if sink_cls is None:
        raise PluginConfigError(f"Unknown sink plugin '{plugin}'. Available: {', '.join(sorted(SINK_PLUGINS))}")
    sink: DiagnosticSink = sink_cls(dict(options))
    return sink


def instantiate_plugins_from_config(config: "VerifySettings") -> dict[str, Any]:
    """Instantiate the source and sink named in the settings.

    Returns:
        Dict with keys ``source`` (NodeSource) and ``sink`` (DiagnosticSink)

    Raises:
        PluginConfigError: If config references unknown plugins or bad options
    """
    return {
        "source": create_source(config.source.plugin, dict(config.source.options)),
        "sink": create_sink(config.sink.plugin, dict(config.sink.options)),
    }


def source_plugin_for_path(path: Path) -> str:
    """Pick a source plugin name from an input file's extension.

    Raises:
        PluginConfigError: If the extension is not recognized
    """
    plugin = _EXTENSION_PLUGINS.get(path.suffix.lower())
    if plugin is None:
        raise PluginConfigError(f"Cannot infer input format from '{path.name}'. Expected one of: {', '.join(sorted(_EXTENSION_PLUGINS))}")
    return plugin
