"""Telemetry sink interface the frontier manager reports crawl events to."""
from __future__ import annotations

from typing import Dict, List, Tuple


class TelemetrySink:
    """Receives ``(event, payload)`` pairs such as ``graph.page_saved``."""

    def emit(self, event: str, payload: Dict[str, object]) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


class NoOpTelemetry(TelemetrySink):
    def emit(self, event: str, payload: Dict[str, object]) -> None:
        return


class RecordingTelemetry(TelemetrySink):
    """Keeps every event in memory; handy for embedding the manager in tests."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, object]]] = []

    def emit(self, event: str, payload: Dict[str, object]) -> None:
        self.events.append((event, dict(payload)))

    def names(self) -> List[str]:
        return [event for event, _ in self.events]


__all__ = ["NoOpTelemetry", "RecordingTelemetry", "TelemetrySink"]
