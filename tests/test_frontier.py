import random

from linkfrontier.frontier import FrontierQueue, resolve_link
from linkfrontier.models import DomainInfo, Graph
from linkfrontier.policy import HostDenylist, PurgePolicy, RedirectResolver, RevisitPolicy

T = 1_700_000_000


def _queue(graph: Graph | None = None, urls=(), seed: int = 7) -> FrontierQueue:
    graph = graph or Graph()
    resolver = RedirectResolver(graph)
    return FrontierQueue(
        PurgePolicy(graph, resolver, HostDenylist()),
        RevisitPolicy(graph, resolver, clock=lambda: T),
        urls,
        rng=random.Random(seed),
    )


def test_resolve_link_joins_relative_links() -> None:
    assert resolve_link("https://example.test/dir/page", "../other") == "https://example.test/other"
    assert resolve_link("https://example.test/", "https://else.test/x") == "https://else.test/x"
    assert resolve_link(None, "https://example.test/") == "https://example.test/"


def test_resolve_link_lowercases_host_and_adds_root_path() -> None:
    assert resolve_link(None, "https://Friend.TEST") == "https://friend.test/"
    assert resolve_link("https://Example.test/a", "/B") == "https://example.test/B"
    assert resolve_link(None, "https://User@Host.test:8080/p?q=1") == "https://User@host.test:8080/p?q=1"
    assert resolve_link(None, "mailto:Me@Blog.test") == "mailto:Me@Blog.test"


def test_host_case_variants_share_one_entry() -> None:
    queue = _queue()
    assert queue.enqueue("https://friend.test/")
    assert not queue.enqueue("https://Friend.test")
    assert queue.snapshot() == ["https://friend.test/"]


def test_push_drops_non_absolute_urls() -> None:
    queue = _queue(urls=["example.com/x", "  ", "https://ok.test/"])
    assert queue.snapshot() == ["https://ok.test/"]
    assert not queue.push("/relative")


def test_resolve_link_rejects_unusable_input() -> None:
    assert resolve_link("not a url", "/about") is None
    assert resolve_link(None, "/about") is None
    assert resolve_link("https://[broken/", "/about") is None


def test_normalize_dedupes_and_keeps_membership() -> None:
    queue = _queue(urls=["http://x/a", "http://x/a", "http://x/b"])

    queue.normalize()

    assert len(queue) == 2
    assert set(queue) == {"http://x/a", "http://x/b"}

    queue.normalize()
    assert set(queue) == {"http://x/a", "http://x/b"}
    assert len(queue) == 2


def test_dequeue_is_lifo_and_empty_returns_none() -> None:
    queue = _queue(urls=["https://a.test/", "https://b.test/"])
    assert queue.dequeue() == "https://b.test/"
    assert queue.dequeue() == "https://a.test/"
    assert queue.dequeue() is None


def test_enqueue_resolves_against_base_and_skips_duplicates() -> None:
    queue = _queue()
    assert queue.enqueue("/about", base="https://example.test/home")
    assert not queue.enqueue("about", base="https://example.test/home")
    assert queue.snapshot() == ["https://example.test/about"]
    assert "https://example.test/about" in queue


def test_enqueue_applies_policies() -> None:
    graph = Graph(
        domains={"https://loop.test/": DomainInfo.from_urls(["https://loop.test/"])},
        visited={"https://seen.test/": T - 10},
    )
    queue = _queue(graph)

    assert not queue.enqueue("   ")
    assert not queue.enqueue("https://loop.test/")
    assert not queue.enqueue("https://seen.test/")
    assert not queue.enqueue("https://www.youtube.com/watch")
    assert not queue.enqueue("/relative", base="not-absolute")
    assert len(queue) == 0


def test_prune_drops_entries_that_became_ineligible() -> None:
    graph = Graph()
    queue = _queue(graph, urls=["https://keep.test/", "https://visited.test/"])
    graph.visited["https://visited.test/"] = T

    assert queue.prune() == 1
    assert queue.snapshot() == ["https://keep.test/"]
