# src/chainverify/plugins/sinks/part_files.py
"""Shared machinery for sinks that write one part file per reducer.

Output layout follows the familiar MapReduce convention:

    <path>/part-r-00000[.ext]
    <path>/part-r-00001[.ext]
    ...
    <path>/_SUCCESS           (written by commit, absent after a failed run)

Every reducer writes only its own part file, so writers need no locking.
The directory itself is prepared once, under a lock, on the first open().
"""

from __future__ import annotations

import hashlib
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO

from chainverify.contracts.errors import SinkWriteError
from chainverify.contracts.results import ArtifactDescriptor, DiagnosticRecord
from chainverify.plugins.config_base import OutputDirConfig

SUCCESS_MARKER = "_SUCCESS"
PART_PREFIX = "part-r-"


def part_file_name(partition: int, suffix: str = "") -> str:
    return f"{PART_PREFIX}{partition:05d}{suffix}"


def _sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class PartFileWriter:
    """Writes rendered diagnostic lines to one part file."""

    def __init__(self, sink: PartFileSink, path: Path, handle: IO[str]) -> None:
        self._sink = sink
        self._path = path
        self._handle = handle
        self.records_written = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write(self, record: DiagnosticRecord) -> None:
        try:
            self._handle.write(self._sink.render(record))
            self._handle.write("\n")
        except OSError as e:
            raise SinkWriteError(f"write failed: {e}", sink=self._sink.name, target=str(self._path)) from e
        self.records_written += 1

    def close(self) -> None:
        if self._handle.closed:
            return
        try:
            self._handle.close()
        except OSError as e:
            raise SinkWriteError(f"close failed: {e}", sink=self._sink.name, target=str(self._path)) from e


class PartFileSink(ABC):
    """Base class for part-file diagnostic sinks.

    Subclasses set ``name`` and ``suffix`` and implement render().
    """

    name: str
    suffix: str = ""

    def __init__(self, cfg: OutputDirConfig) -> None:
        self._dir = cfg.resolved_path()
        self._overwrite = cfg.overwrite
        self._encoding = cfg.encoding
        self._lock = threading.Lock()
        self._prepared = False
        self._writers: dict[int, PartFileWriter] = {}

    @property
    def directory(self) -> Path:
        return self._dir

    @abstractmethod
    def render(self, record: DiagnosticRecord) -> str:
        """Render one record as a single line (without trailing newline)."""
        ...

    def open(self, partition: int) -> PartFileWriter:
        with self._lock:
            self._prepare()
            if partition in self._writers:
                raise SinkWriteError(f"partition {partition} opened twice", sink=self.name, target=str(self._dir))
            path = self._dir / part_file_name(partition, self.suffix)
            try:
                handle = open(path, "w", encoding=self._encoding, newline="\n")
            except OSError as e:
                raise SinkWriteError(f"cannot create part file: {e}", sink=self.name, target=str(path)) from e
            writer = PartFileWriter(self, path, handle)
            self._writers[partition] = writer
            return writer

    def commit(self) -> list[ArtifactDescriptor]:
        """Write the _SUCCESS marker and describe every part file.

        Raises:
            SinkWriteError: If a writer is still open or the marker cannot be written
        """
        with self._lock:
            still_open = sorted(p for p, w in self._writers.items() if not w.closed)
            if still_open:
                raise SinkWriteError(f"writers still open for partitions {still_open}", sink=self.name, target=str(self._dir))
            if not self._prepared:
                # No reducer opened a writer; still leave an empty, committed directory
                self._prepare()
            try:
                (self._dir / SUCCESS_MARKER).touch()
                artifacts = [
                    ArtifactDescriptor.for_file(
                        path=str(writer.path),
                        content_hash=_sha256_file(writer.path),
                        size_bytes=writer.path.stat().st_size,
                    )
                    for _, writer in sorted(self._writers.items())
                ]
            except OSError as e:
                raise SinkWriteError(f"commit failed: {e}", sink=self.name, target=str(self._dir)) from e
            return artifacts

    def abort(self) -> None:
        """Close any open writers and delete part files from this run."""
        with self._lock:
            for writer in self._writers.values():
                if not writer.closed:
                    writer.close()
                writer.path.unlink(missing_ok=True)
            # An unprepared directory may still hold a previous run's output
            if self._prepared:
                (self._dir / SUCCESS_MARKER).unlink(missing_ok=True)
            self._writers.clear()

    def _prepare(self) -> None:
        if self._prepared:
            return
        try:
            if self._dir.exists():
                if not self._dir.is_dir():
                    raise SinkWriteError("output path exists and is not a directory", sink=self.name, target=str(self._dir))
                existing = [p for p in self._dir.iterdir() if p.name.startswith(PART_PREFIX) or p.name == SUCCESS_MARKER]
                if existing and not self._overwrite:
                    raise SinkWriteError(
                        "output directory already holds verification output (set overwrite: true to replace it)",
                        sink=self.name,
                        target=str(self._dir),
                    )
                for stale in existing:
                    stale.unlink()
            else:
                self._dir.mkdir(parents=True)
        except OSError as e:
            raise SinkWriteError(f"cannot prepare output directory: {e}", sink=self.name, target=str(self._dir)) from e
        self._prepared = True
