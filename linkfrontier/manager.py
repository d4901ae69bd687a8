"""Frontier manager coordinating the link graph, policies, queue and store."""
from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, Iterable, Optional

from .config import FrontierConfig
from .frontier import FrontierQueue
from .models import DomainInfo, Graph, GraphError
from .policy import HostDenylist, PurgePolicy, RedirectResolver, RevisitPolicy
from .store import GraphStore
from .telemetry import NoOpTelemetry, TelemetrySink


logger = logging.getLogger(__name__)


class FrontierManager:
    """Owns the crawl state for a single fetch loop.

    Construction seeds the frontier from the persisted graph. Afterwards the
    fetcher drives it through :meth:`dequeue`, :meth:`save`,
    :meth:`mark_visited` and :meth:`add_redirect`. Storage failures are logged
    and reported as telemetry, never raised, so one bad write cannot stop a
    crawl. With ``autosave=False`` nothing is written until :meth:`persist` is
    called explicitly.

    The manager is not thread-safe; concurrent fetchers must report through a
    single owner.
    """

    def __init__(
        self,
        config: FrontierConfig | None = None,
        *,
        seeds: Iterable[str] = (),
        store: GraphStore | None = None,
        telemetry: TelemetrySink | None = None,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
        autosave: bool = True,
    ) -> None:
        self.config = config or FrontierConfig()
        self.autosave = autosave
        self.store = store or GraphStore(self.config.graph_path, self.config.resolved_backup_path())
        self.telemetry = telemetry or NoOpTelemetry()

        self.graph = self._load()
        self.resolver = RedirectResolver(self.graph)
        self.purge_policy = PurgePolicy(
            self.graph,
            self.resolver,
            HostDenylist(self.config.denylist),
            self.config.allowed_schemes,
        )
        self.revisit_policy = RevisitPolicy(
            self.graph,
            self.resolver,
            window_seconds=self.config.revisit_window_seconds,
            clock=clock,
            refetch_empty_sites=self.config.refetch_empty_sites,
            max_pages_per_host=self.config.max_pages_per_host,
        )
        self.frontier = FrontierQueue(self.purge_policy, self.revisit_policy, seeds, rng=rng)

        self.seed_purge = self.purge()
        added = self._fill_from_graph()
        self.frontier.normalize()
        logger.info(
            "Seeded frontier with %d URLs from %d pages (%d from graph edges)",
            len(self.frontier),
            len(self.graph.domains),
            added,
        )
        self._emit("frontier.seeded", {"queued": len(self.frontier), "from_graph": added})

    # ------------------------------------------------------------------ public
    def dequeue(self) -> Optional[str]:
        if not self.frontier and self.config.refill_when_empty:
            self.refill()
        depth = len(self.frontier)
        if depth:
            logger.info("queue: %d", depth)
        return self.frontier.dequeue()

    def mark_visited(self, url: str) -> None:
        now = self.revisit_policy.now()
        previous = self.graph.visited.get(url)
        self.graph.visited[url] = now if previous is None else max(previous, now)
        self._emit("graph.visited", {"url": url, "visited_at": self.graph.visited[url]})
        self._autosave()

    def save(self, real_url: str, info: DomainInfo) -> bool:
        """Record the links found at ``real_url``; returns False if the page was rejected."""

        if self.purge_policy.should_be_purged(real_url):
            removed = self.graph.domains.pop(real_url, None) is not None
            self._emit("graph.page_rejected", {"url": real_url, "removed": removed})
            if removed:
                self._autosave()
            return False

        enqueued = 0
        for link in info.links:
            if link.url in self.graph.domains:
                continue
            if not self.revisit_policy.should_be_queued(link.url):
                continue
            if self.frontier.enqueue(link.url, base=real_url):
                enqueued += 1

        self.graph.domains[real_url] = info
        self._autosave()
        self.purge()
        self._emit(
            "graph.page_saved",
            {
                "url": real_url,
                "links": len(info.links),
                "enqueued": enqueued,
                "queued": len(self.frontier),
            },
        )
        return True

    def add_redirect(self, from_url: str, to_url: str) -> None:
        if from_url == to_url:
            logger.debug("Ignoring self-redirect for %s", from_url)
            return
        self.graph.redirects[from_url] = to_url
        self._emit("graph.redirect_added", {"from": from_url, "to": to_url})
        self._autosave()

    def purge(self) -> Dict[str, int]:
        """Evict degenerate pages and ineligible queue entries."""

        queue_removed = self.frontier.prune()

        domains_removed = 0
        for url, info in list(self.graph.domains.items()):
            if self.purge_policy.should_be_purged(url) and self.graph.domains.pop(url, None) is not None:
                domains_removed += 1
            for link in info.links:
                if self.purge_policy.should_be_purged(link.url) and self.graph.domains.pop(link.url, None) is not None:
                    domains_removed += 1

        if domains_removed:
            self._autosave()
        if domains_removed or queue_removed:
            self._emit(
                "graph.purged",
                {
                    "domains_removed": domains_removed,
                    "queue_removed": queue_removed,
                    "queued": len(self.frontier),
                },
            )
        return {"domains_removed": domains_removed, "queue_removed": queue_removed}

    def refill(self) -> int:
        added = self._fill_from_graph()
        self.frontier.normalize()
        self._emit("frontier.refilled", {"queued": len(self.frontier), "from_graph": added})
        return added

    def should_be_queued(self, url: str) -> bool:
        return self.revisit_policy.should_be_queued(url)

    def should_be_purged(self, url: str) -> bool:
        return self.purge_policy.should_be_purged(url)

    def resolve(self, url: str) -> str:
        return self.resolver.resolve(url)

    def stats(self) -> Dict[str, int]:
        return {
            "domains": len(self.graph.domains),
            "links": self.graph.link_count(),
            "visited": len(self.graph.visited),
            "redirects": len(self.graph.redirects),
            "queued": len(self.frontier),
        }

    def persist(self) -> bool:
        """Write the graph; failures are logged and reported, not raised."""

        try:
            self.store.write(self.graph)
        except GraphError as exc:
            logger.warning("Could not persist %s: %s", self.store.path, exc)
            self._emit("graph.persist_failed", {"path": str(self.store.path), "error": str(exc)})
            return False
        return True

    # ---------------------------------------------------------------- internal
    def _autosave(self) -> None:
        if self.autosave:
            self.persist()

    def _fill_from_graph(self) -> int:
        added = 0
        for page, info in list(self.graph.domains.items()):
            for link in info.links:
                if self.frontier.enqueue(self.resolver.resolve(link.url), base=page):
                    added += 1
        return added

    def _load(self) -> Graph:
        try:
            return self.store.read()
        except GraphError as exc:
            logger.warning("Could not load %s, starting from an empty graph: %s", self.store.path, exc)
            self._emit("graph.load_failed", {"path": str(self.store.path), "error": str(exc)})
            return Graph()

    def _emit(self, event: str, payload: Dict[str, object]) -> None:
        entry = dict(payload)
        entry.setdefault("crawl_id", self.config.crawl_id)
        try:
            self.telemetry.emit(event, entry)
        except Exception:  # pragma: no cover - telemetry must not stop the crawl
            logger.exception("frontier telemetry emit failed: %s", event)


__all__ = ["FrontierManager"]
