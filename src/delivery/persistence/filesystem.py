"""File-based output sinks for exported assignments."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from ..config import settings


class OutputSink(Protocol):
    """Receives exported text; returns where it went. Raises OSError on failure."""

    def deliver(self, content: str) -> str:
        ...


class FileStorage:
    """Thin wrapper around the data root for storing JSON and CSV outputs."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "assignments") -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        path = self.output_root / f"{prefix}_{timestamp}"
        path.mkdir(parents=True, exist_ok=False)
        return path

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=indent)

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)


class FileSink:
    """Writes each export to ``assignments.csv`` in a fresh run directory."""

    def __init__(self, storage: FileStorage | None = None, file_name: str = "assignments.csv") -> None:
        self.storage = storage or FileStorage()
        self.file_name = file_name

    def deliver(self, content: str) -> str:
        run_dir = self.storage.make_run_directory(prefix="assignments")
        path = run_dir / self.file_name
        self.storage.write_csv(path, content)
        return str(path)
