"""Link graph data model shared by the store, policies and manager."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List


class GraphError(Exception):
    """Base class for link graph failures."""


class GraphFormatError(GraphError):
    """Raised when persisted graph data cannot be parsed."""


class StorageError(GraphError):
    """Raised when the graph cannot be read from or written to disk."""


@dataclass(slots=True)
class Link:
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url}

    @classmethod
    def from_dict(cls, raw: object) -> "Link":
        if not isinstance(raw, dict) or not isinstance(raw.get("url"), str):
            raise GraphFormatError(f"link must be an object with a string url: {raw!r}")
        return cls(url=raw["url"])


@dataclass(slots=True)
class DomainInfo:
    """Outgoing edges discovered when a page was fetched."""

    links: List[Link] = field(default_factory=list)

    @classmethod
    def from_urls(cls, urls: Iterable[str]) -> "DomainInfo":
        return cls(links=[Link(url) for url in urls])

    def is_self_loop(self, url: str) -> bool:
        return len(self.links) == 1 and self.links[0].url == url

    def to_dict(self) -> Dict[str, object]:
        return {"links": [link.to_dict() for link in self.links]}

    @classmethod
    def from_dict(cls, raw: object) -> "DomainInfo":
        if not isinstance(raw, dict):
            raise GraphFormatError("domain entry must be an object")
        links_raw = raw.get("links", [])
        if not isinstance(links_raw, list):
            raise GraphFormatError("domain links must be an array")
        return cls(links=[Link.from_dict(item) for item in links_raw])


@dataclass(slots=True)
class Graph:
    """Fetched pages, visit timestamps and observed redirects.

    Edges are plain URL strings keyed into ``domains``; nothing holds a
    reference to another entry, so self-referencing pages are just strings.
    """

    domains: Dict[str, DomainInfo] = field(default_factory=dict)
    visited: Dict[str, int] = field(default_factory=dict)
    redirects: Dict[str, str] = field(default_factory=dict)

    def link_count(self) -> int:
        return sum(len(info.links) for info in self.domains.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "domains": {url: info.to_dict() for url, info in self.domains.items()},
            "visited": dict(self.visited),
            "redirects": dict(self.redirects),
        }

    @classmethod
    def from_dict(cls, raw: object) -> "Graph":
        if not isinstance(raw, dict):
            raise GraphFormatError("graph must be a JSON object")

        domains_raw = _mapping(raw, "domains")
        visited_raw = _mapping(raw, "visited")
        redirects_raw = _mapping(raw, "redirects")

        domains = {str(url): DomainInfo.from_dict(info) for url, info in domains_raw.items()}

        visited: Dict[str, int] = {}
        for url, timestamp in visited_raw.items():
            if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
                raise GraphFormatError(f"visited timestamp for {url} must be a number")
            visited[str(url)] = int(timestamp)

        redirects: Dict[str, str] = {}
        for source, target in redirects_raw.items():
            if not isinstance(target, str):
                raise GraphFormatError(f"redirect target for {source} must be a string")
            redirects[str(source)] = target

        return cls(domains=domains, visited=visited, redirects=redirects)


def _mapping(raw: Dict[str, object], key: str) -> Dict[str, object]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise GraphFormatError(f"{key} must be an object")
    return value


__all__ = ["DomainInfo", "Graph", "GraphError", "GraphFormatError", "Link", "StorageError"]
