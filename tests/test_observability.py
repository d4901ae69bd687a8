from __future__ import annotations

import json
import random
from pathlib import Path

import requests

from linkfrontier.config import FrontierConfig
from linkfrontier.langfuse import LangfuseClient
from linkfrontier.manager import FrontierManager
from linkfrontier.models import DomainInfo
from linkfrontier.observability import CrawlObservability


class StubLangfuse:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def emit(self, event: str, payload: dict) -> None:
        self.calls.append((event, payload))


class StubResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")


class StubSession:
    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.posts: list[dict] = []

    def post(self, url: str, **kwargs) -> StubResponse:
        self.posts.append({"url": url, **kwargs})
        return StubResponse(self.status)


def test_manager_events_land_in_jsonl_and_metrics(tmp_path: Path) -> None:
    telemetry = CrawlObservability(tmp_path)
    manager = FrontierManager(
        FrontierConfig(graph_path=tmp_path / "graph.json", crawl_id="obs"),
        telemetry=telemetry,
        clock=lambda: 1_700_000_000,
        rng=random.Random(0),
    )
    manager.save("https://example.test/", DomainInfo.from_urls(["/a", "/b"]))
    manager.mark_visited("https://example.test/")
    manager.save("https://loop.test/", DomainInfo.from_urls(["https://loop.test/"]))

    events = [json.loads(line) for line in telemetry.events_path.read_text().splitlines()]
    assert [entry["event"] for entry in events][0] == "frontier.seeded"
    assert all(entry["crawl_id"] == "obs" for entry in events)

    metrics = json.loads(telemetry.metrics_path.read_text())["obs"]
    assert metrics["pages_saved"] == 2
    assert metrics["visits"] == 1
    assert metrics["purges"] == 1
    assert metrics["domains_purged"] == 1
    assert metrics["queue_depth"] == 2
    assert telemetry.metrics("obs") == metrics


def test_observability_forwards_to_langfuse(tmp_path: Path) -> None:
    stub = StubLangfuse()
    telemetry = CrawlObservability(tmp_path, langfuse_client=stub)
    telemetry.emit("graph.visited", {"crawl_id": "nightly", "url": "https://example.test/"})

    event, payload = stub.calls[0]
    assert event == "graph.visited"
    assert payload["crawl_id"] == "nightly"
    assert payload["event"] == "graph.visited"


def test_langfuse_client_posts_span_and_tolerates_errors() -> None:
    session = StubSession()
    client = LangfuseClient("https://langfuse.test/", "pk", "sk", session=session)
    client.emit("graph.purged", {"crawl_id": "nightly", "timestamp": "2025-01-01T00:00:00Z"})

    post = session.posts[0]
    assert post["url"] == "https://langfuse.test/api/public/ingest"
    assert post["json"]["traceId"] == "crawl-nightly"
    assert post["json"]["name"] == "graph.purged"
    assert post["headers"]["X-Langfuse-Public-Key"] == "pk"

    failing = LangfuseClient("https://langfuse.test", "pk", "sk", session=StubSession(status=500))
    failing.emit("graph.purged", {})


def test_langfuse_from_env_requires_keys(monkeypatch) -> None:
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    assert LangfuseClient.from_env() is None

    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk")
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk")
    monkeypatch.setenv("LANGFUSE_BASE_URL", "https://self-hosted.test")
    client = LangfuseClient.from_env()
    assert client is not None
    assert client.base_url == "https://self-hosted.test"
