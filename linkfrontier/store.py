"""JSON persistence for the link graph with single-generation backup rotation."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .models import Graph, GraphError, GraphFormatError, StorageError


logger = logging.getLogger(__name__)


def default_backup_path(path: Path | str) -> Path:
    """Return ``graph.bak.json`` for ``graph.json``."""

    primary = Path(path)
    return primary.with_name(f"{primary.stem}.bak{primary.suffix}")


class GraphStore:
    """Reads and writes ``graph.json``, keeping the previous generation as a backup.

    ``read``/``write`` raise :class:`GraphError` subclasses. ``load``/``save``
    are the fail-open variants that log and fall back instead.
    """

    def __init__(self, path: Path | str = "graph.json", backup_path: Path | str | None = None) -> None:
        self.path = Path(path)
        self.backup_path = Path(backup_path) if backup_path else default_backup_path(self.path)

    def read(self) -> Graph:
        if not self.path.exists():
            return Graph()
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read {self.path}: {exc}") from exc
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GraphFormatError(f"Invalid JSON in {self.path}: {exc}") from exc
        return Graph.from_dict(raw)

    def write(self, graph: Graph) -> None:
        try:
            text = json.dumps(graph.to_dict(), ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Failed to serialize graph: {exc}") from exc

        # A crash after the rename leaves the previous generation in the backup.
        try:
            if self.backup_path.exists():
                self.backup_path.unlink()
            if self.path.exists():
                self.path.rename(self.backup_path)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    def load(self) -> Graph:
        try:
            return self.read()
        except GraphError as exc:
            logger.warning("Starting from an empty graph: %s", exc)
            return Graph()

    def save(self, graph: Graph) -> bool:
        try:
            self.write(graph)
        except GraphError as exc:
            logger.warning("Graph not persisted: %s", exc)
            return False
        return True


__all__ = ["GraphStore", "default_backup_path"]
