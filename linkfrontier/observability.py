"""File-backed event log and counters for a running crawl."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .langfuse import LangfuseClient
from .telemetry import TelemetrySink


logger = logging.getLogger(__name__)

_COUNTERS = {
    "graph.page_saved": "pages_saved",
    "graph.page_rejected": "pages_rejected",
    "graph.visited": "visits",
    "graph.redirect_added": "redirects_added",
    "graph.purged": "purges",
    "graph.persist_failed": "persist_failures",
    "graph.load_failed": "load_failures",
}


class CrawlObservability(TelemetrySink):
    """Appends events to ``observability/events.jsonl`` and keeps ``metrics.json`` current."""

    def __init__(
        self,
        state_dir: Path | str = ".",
        *,
        langfuse_client: Optional[LangfuseClient] = None,
    ) -> None:
        self.state_dir = Path(state_dir)
        self._langfuse = langfuse_client
        self._metrics: Dict[str, Dict[str, Any]] = {}

    @property
    def events_path(self) -> Path:
        return self.state_dir / "observability" / "events.jsonl"

    @property
    def metrics_path(self) -> Path:
        return self.state_dir / "observability" / "metrics.json"

    def emit(self, event: str, payload: Dict[str, object]) -> None:
        entry = dict(payload)
        crawl_id = str(entry.get("crawl_id") or "default")
        entry["crawl_id"] = crawl_id
        entry.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        entry["event"] = event

        try:
            self._append(entry)
            metrics = self._metrics.setdefault(crawl_id, {"crawl_id": crawl_id})
            self._update_metrics(metrics, entry)
            self._persist_metrics()
        except OSError as exc:
            logger.warning("Failed to record %s: %s", event, exc)
        self._forward_to_langfuse(event, entry)

    def metrics(self, crawl_id: str = "default") -> Dict[str, Any]:
        return dict(self._metrics.get(crawl_id, {}))

    def _append(self, entry: Dict[str, object]) -> None:
        self.events_path.parent.mkdir(parents=True, exist_ok=True)
        with self.events_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry) + "\n")

    def _update_metrics(self, metrics: Dict[str, Any], entry: Dict[str, object]) -> None:
        event = str(entry.get("event", ""))
        counter = _COUNTERS.get(event)
        if counter:
            metrics[counter] = int(metrics.get(counter, 0)) + 1
        if event == "graph.purged":
            metrics["domains_purged"] = int(metrics.get("domains_purged", 0)) + _to_int(entry.get("domains_removed"))
            metrics["queue_purged"] = int(metrics.get("queue_purged", 0)) + _to_int(entry.get("queue_removed"))
        if event in {"frontier.seeded", "frontier.refilled"}:
            metrics["last_seeded_at"] = entry.get("timestamp")
        if "queued" in entry:
            metrics["queue_depth"] = _to_int(entry.get("queued"))
        metrics["updated_at"] = entry.get("timestamp")

    def _persist_metrics(self) -> None:
        self.metrics_path.write_text(json.dumps(self._metrics, indent=2), encoding="utf-8")

    def _forward_to_langfuse(self, event: str, entry: Dict[str, object]) -> None:
        if not self._langfuse:
            return
        try:
            self._langfuse.emit(event, dict(entry))
        except Exception:  # pragma: no cover - telemetry best effort
            logger.warning("Failed to forward event %s to Langfuse", event, exc_info=True)


def _to_int(value: object) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return 0


__all__ = ["CrawlObservability"]
