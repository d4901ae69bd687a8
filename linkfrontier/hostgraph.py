"""Host-level view of the link graph (who links to whom)."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Set

from .frontier import resolve_link
from .models import Graph
from .policy import HostDenylist, RedirectResolver, url_host


def build_host_graph(graph: Graph, denylist: HostDenylist | None = None) -> Dict[str, Dict[str, List[str]]]:
    """Collapse page edges into host edges.

    Pages and link targets are redirect-resolved one hop before the host is
    taken. Denied and host-less URLs are dropped.
    """

    denylist = denylist or HostDenylist()
    resolver = RedirectResolver(graph)
    links_to: Dict[str, Set[str]] = {}
    linked_from: Dict[str, Set[str]] = {}

    for page, info in graph.domains.items():
        host = url_host(resolver.resolve(page))
        if not host or denylist.matches(host):
            continue
        targets = links_to.setdefault(host, set())
        for link in info.links:
            absolute = resolve_link(page, link.url)
            if absolute is None:
                continue
            target_host = url_host(resolver.resolve(absolute))
            if not target_host or denylist.matches(target_host):
                continue
            targets.add(target_host)
            linked_from.setdefault(target_host, set()).add(host)

    return {
        "linksTo": {host: sorted(targets) for host, targets in sorted(links_to.items())},
        "linkedFrom": {host: sorted(sources) for host, sources in sorted(linked_from.items())},
    }


def write_host_graph(graph: Graph, output: Path | str, denylist: HostDenylist | None = None) -> Path:
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(build_host_graph(graph, denylist), indent=2), encoding="utf-8")
    return path


__all__ = ["build_host_graph", "write_host_graph"]
