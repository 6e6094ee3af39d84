"""CLI test fixtures."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """The CLI configures logging against CliRunner's captured stdout; undo it afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def circular_chain_file(write_nodes: Callable[..., Path]) -> Path:
    """Three nodes whose tail points back at the head: all referenced."""
    return write_nodes([{"key": 1, "prev": 3}, {"key": 2, "prev": 1}, {"key": 3, "prev": 2}], suffix=".jsonl")


@pytest.fixture
def lost_write_file(write_nodes: Callable[..., Path]) -> Path:
    """A and C survive, B (0xb) was lost."""
    return write_nodes([{"key": 0xA, "prev": None}, {"key": 0xC, "prev": 0xB}], suffix=".jsonl", name="lost")


@pytest.fixture
def settings_file(tmp_path: Path, circular_chain_file: Path) -> Callable[..., Path]:
    """Factory writing a settings YAML for the circular chain; keyword args override top-level keys."""

    def _write(**overrides: Any) -> Path:
        data: dict[str, Any] = {
            "source": {"plugin": "jsonl", "options": {"path": str(circular_chain_file)}},
            "sink": {"plugin": "text", "options": {"path": str(tmp_path / "out"), "overwrite": True}},
            "num_reducers": 2,
            "expected_referenced": 3,
        }
        data.update(overrides)
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write
