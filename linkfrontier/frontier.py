"""Deduplicated LIFO frontier of absolute URLs awaiting a fetch."""
from __future__ import annotations

import logging
import random
from typing import Iterable, Iterator, List, Optional, Set
from urllib.parse import urljoin, urlsplit, urlunsplit

from .policy import PurgePolicy, RevisitPolicy


logger = logging.getLogger(__name__)


def resolve_link(base: str | None, url: str) -> Optional[str]:
    """Join a raw link against the page it was found on.

    The result has a lowercase host and at least a root path, so
    ``https://Example.test`` and ``https://example.test/`` are the same entry.
    Returns ``None`` when either side cannot be parsed, the base is not
    absolute, or the result has no scheme.
    """

    try:
        if base is None:
            joined = url
        else:
            parsed_base = urlsplit(base)
            if not (parsed_base.scheme and parsed_base.netloc):
                return None
            joined = urljoin(base, url)
        parts = urlsplit(joined)
        if not parts.scheme:
            return None
    except ValueError:
        return None
    if not parts.netloc:
        return joined
    userinfo, at, hostport = parts.netloc.rpartition("@")
    return urlunsplit(
        (parts.scheme, userinfo + at + hostport.lower(), parts.path or "/", parts.query, parts.fragment)
    )


class FrontierQueue:
    """Pending URLs, popped most-recent-first.

    Membership is tracked in a set, so a URL is never held twice.
    """

    def __init__(
        self,
        purge_policy: PurgePolicy,
        revisit_policy: RevisitPolicy,
        urls: Iterable[str] = (),
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.purge_policy = purge_policy
        self.revisit_policy = revisit_policy
        self.rng = rng or random.Random()
        self._entries: List[str] = []
        self._members: Set[str] = set()
        for url in urls:
            self.push(url)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def snapshot(self) -> List[str]:
        return list(self._entries)

    def push(self, url: str) -> bool:
        """Append an absolute URL without consulting the policies."""

        absolute = resolve_link(None, url.strip())
        if absolute is None:
            logger.debug("Dropping non-absolute seed %r", url)
            return False
        if absolute in self._members:
            return False
        self._entries.append(absolute)
        self._members.add(absolute)
        return True

    def enqueue(self, url: str, base: str | None = None) -> bool:
        if not self._eligible(url):
            return False
        absolute = resolve_link(base, url)
        if absolute is None:
            logger.debug("Dropping unresolvable link %r (base %r)", url, base)
            return False
        # Visits are recorded under absolute URLs, so relative links are checked twice.
        if absolute != url and not self._eligible(absolute):
            return False
        return self.push(absolute)

    def dequeue(self) -> Optional[str]:
        if not self._entries:
            return None
        url = self._entries.pop()
        self._members.discard(url)
        return url

    def normalize(self) -> None:
        # Sorting keeps dedup deterministic; the shuffle spreads hosts apart.
        entries = sorted(set(self._entries))
        self.rng.shuffle(entries)
        self._entries = entries
        self._members = set(entries)

    def prune(self) -> int:
        kept = [url for url in self._entries if self._eligible(url)]
        removed = len(self._entries) - len(kept)
        self._entries = kept
        self._members = set(kept)
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._members.clear()

    def _eligible(self, url: str) -> bool:
        return not self.purge_policy.should_be_purged(url) and self.revisit_policy.should_be_queued(url)


__all__ = ["FrontierQueue", "resolve_link"]
