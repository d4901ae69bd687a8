"""Eligibility rules deciding what gets queued and what gets evicted."""
from __future__ import annotations

import fnmatch
import time
from collections import Counter
from typing import Callable, Dict, Iterable, Mapping, Optional
from urllib.parse import urlsplit

from .models import Graph


REVISIT_WINDOW_SECONDS = 60 * 60 * 24 * 7
DEFAULT_DENYLIST: Dict[str, bool] = {"youtube.com": True}


def url_host(url: str) -> Optional[str]:
    """Return the lowercase host of an absolute URL, or ``None``."""

    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def url_scheme(url: str) -> str:
    try:
        return urlsplit(url).scheme.lower()
    except ValueError:
        return ""


class HostDenylist:
    """Table of ``{host pattern: purge}`` rules.

    A plain pattern matches the host itself and any of its subdomains; a
    pattern with glob characters (``*``, ``?``, ``[``) is matched against the host.
    """

    def __init__(self, rules: Mapping[str, bool] | None = None) -> None:
        table = DEFAULT_DENYLIST if rules is None else rules
        self.rules: Dict[str, bool] = {
            pattern.strip().lower(): bool(purge) for pattern, purge in table.items() if pattern.strip()
        }

    def matches(self, host: str | None) -> bool:
        if not host:
            return False
        host = host.lower().rstrip(".")
        for pattern, purge in self.rules.items():
            if not purge:
                continue
            if any(char in pattern for char in "*?["):
                if fnmatch.fnmatchcase(host, pattern):
                    return True
            elif host == pattern or host.endswith("." + pattern):
                return True
        return False

    def is_denied(self, url: str) -> bool:
        return self.matches(url_host(url))


class RedirectResolver:
    """Single-hop redirect lookup.

    Chains are not followed: ``a -> b -> c`` resolves ``a`` to ``b``.
    """

    def __init__(self, graph: Graph) -> None:
        self.graph = graph

    def target(self, url: str) -> Optional[str]:
        return self.graph.redirects.get(url)

    def resolve(self, url: str) -> str:
        return self.graph.redirects.get(url, url)


class PurgePolicy:
    def __init__(
        self,
        graph: Graph,
        resolver: RedirectResolver,
        denylist: HostDenylist | None = None,
        allowed_schemes: Iterable[str] = (),
    ) -> None:
        self.graph = graph
        self.resolver = resolver
        self.denylist = denylist or HostDenylist()
        self.allowed_schemes = frozenset(scheme.lower() for scheme in allowed_schemes)

    def should_be_purged(self, url: str) -> bool:
        if not url.strip():
            return True

        info = self.graph.domains.get(url)
        if info is not None and info.is_self_loop(url):
            return True

        target = self.resolver.target(url)
        if target is not None:
            target_info = self.graph.domains.get(target)
            if target_info is not None and (target_info.is_self_loop(target) or target_info.is_self_loop(url)):
                return True

        if self.denylist.is_denied(url):
            return True

        if self.allowed_schemes:
            scheme = url_scheme(url)
            if scheme and scheme not in self.allowed_schemes:
                return True

        return False


class RevisitPolicy:
    """Time-windowed, redirect-aware decision on whether a URL is worth fetching."""

    def __init__(
        self,
        graph: Graph,
        resolver: RedirectResolver,
        *,
        window_seconds: int = REVISIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
        refetch_empty_sites: bool = False,
        max_pages_per_host: int = 0,
    ) -> None:
        self.graph = graph
        self.resolver = resolver
        self.window_seconds = window_seconds
        self.clock = clock
        self.refetch_empty_sites = refetch_empty_sites
        self.max_pages_per_host = max_pages_per_host

    def now(self) -> int:
        return int(self.clock())

    def should_be_queued(self, url: str) -> bool:
        if self.refetch_empty_sites and self._is_empty_page(url):
            return True

        now = self.now()
        if self._visited_recently(url, now):
            return False

        target = self.resolver.target(url)
        if target is not None:
            if self.refetch_empty_sites and self._is_empty_page(target):
                return True
            if self._visited_recently(target, now):
                return False

        if self.max_pages_per_host > 0:
            counts = self._pages_per_host()
            for candidate in (url, target):
                if candidate is None:
                    continue
                host = url_host(candidate)
                if host and counts[host] > self.max_pages_per_host:
                    return False

        return True

    def _is_empty_page(self, url: str) -> bool:
        info = self.graph.domains.get(url)
        return info is not None and not info.links

    def _visited_recently(self, url: str, now: int) -> bool:
        timestamp = self.graph.visited.get(url)
        if timestamp is None:
            return False
        return now - timestamp < self.window_seconds

    def _pages_per_host(self) -> Counter:
        counts: Counter = Counter()
        for page in self.graph.domains:
            host = url_host(page)
            if host:
                counts[host] += 1
        return counts


__all__ = [
    "DEFAULT_DENYLIST",
    "HostDenylist",
    "PurgePolicy",
    "REVISIT_WINDOW_SECONDS",
    "RedirectResolver",
    "RevisitPolicy",
    "url_host",
]
