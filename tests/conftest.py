# tests/conftest.py
"""Shared test fixtures and helpers.

Scenario fixtures:
- chain_nodes: intact chain A <- B <- C (A has no predecessor)
- broken_chain_nodes: chain with B lost, so C points at an undefined key
- write_nodes: writes node dicts as JSON, JSONL or CSV and returns the path

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import csv
import json
import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from chainverify.contracts.nodes import Node

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Thread pool start-up makes timings noisy
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Scenario keys
# =============================================================================

KEY_A = 0xA
KEY_B = 0xB
KEY_C = 0xC


@pytest.fixture
def chain_nodes() -> list[Node]:
    """A <- B <- C: A and B are referenced, C is the unreferenced tail."""
    return [Node(KEY_A), Node(KEY_B, prev=KEY_A), Node(KEY_C, prev=KEY_B)]


@pytest.fixture
def broken_chain_nodes() -> list[Node]:
    """A and C survive, B was lost: C points at an undefined key."""
    return [Node(KEY_A), Node(KEY_C, prev=KEY_B)]


@pytest.fixture
def write_nodes(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing node records to a file in tmp_path.

    Usage:
        path = write_nodes([{"key": 1, "prev": None}], suffix=".jsonl")
    """

    def _write(records: list[dict[str, Any]], suffix: str = ".jsonl", name: str = "nodes") -> Path:
        path = tmp_path / f"{name}{suffix}"
        if suffix in (".jsonl", ".ndjson"):
            path.write_text("".join(json.dumps(r) + "\n" for r in records), encoding="utf-8")
        elif suffix == ".json":
            path.write_text(json.dumps(records), encoding="utf-8")
        elif suffix == ".csv":
            fieldnames = list(records[0]) if records else ["key", "prev"]
            with open(path, "w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=fieldnames)
                writer.writeheader()
                for record in records:
                    writer.writerow({k: "" if v is None else v for k, v in record.items()})
        else:
            raise ValueError(f"unsupported suffix {suffix}")
        return path

    return _write


@pytest.fixture(autouse=True)
def _isolate_chainverify_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep CHAINVERIFY_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("CHAINVERIFY_"):
            monkeypatch.delenv(name)
    yield
