"""Command-line maintenance tools for a persisted link graph."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import ConfigError, FrontierConfig, load_config
from .hostgraph import write_host_graph
from .langfuse import LangfuseClient
from .manager import FrontierManager
from .observability import CrawlObservability
from .policy import HostDenylist


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and maintain a crawl frontier graph")
    parser.add_argument("--config", type=Path, help="JSON file with frontier settings")
    parser.add_argument("--graph", type=Path, help="Graph file (overrides graph_path from --config)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    parser.add_argument(
        "--no-telemetry",
        action="store_true",
        help="Do not write observability logs next to the graph",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("stats", help="Print graph and frontier counts as JSON")
    queue = sub.add_parser("queue", help="Print the frontier seeded from the graph")
    queue.add_argument("--limit", type=int, default=0, help="Print at most N URLs (0 = all)")
    sub.add_parser("purge", help="Evict degenerate entries and rewrite the graph")
    hosts = sub.add_parser("hosts", help="Export the host-level link graph")
    hosts.add_argument("--output", type=Path, default=Path("hosts.json"), help="Destination JSON file")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> FrontierConfig:
    config = load_config(args.config) if args.config else FrontierConfig()
    if args.graph:
        config.graph_path = args.graph
        config.backup_path = None
    return config


def build_manager(config: FrontierConfig, *, telemetry_enabled: bool = True) -> FrontierManager:
    telemetry = None
    if telemetry_enabled:
        telemetry = CrawlObservability(
            config.resolved_state_dir(),
            langfuse_client=LangfuseClient.from_env(),
        )
    # Inspection must not rotate the backup; only `purge` writes, explicitly.
    return FrontierManager(config, telemetry=telemetry, autosave=False)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = build_config(args)
    except ConfigError as exc:
        print("Invalid frontier configuration:", file=sys.stderr)
        for field, message in exc.errors.items():
            print(f" - {field}: {message}", file=sys.stderr)
        raise SystemExit(2)

    manager = build_manager(config, telemetry_enabled=not args.no_telemetry)

    if args.command == "stats":
        print(json.dumps(manager.stats(), indent=2))
    elif args.command == "purge":
        removed = manager.seed_purge
        persisted = manager.persist() if removed["domains_removed"] else True
        summary = dict(manager.stats(), persisted=persisted, **removed)
        print(json.dumps(summary, indent=2))
        if not summary["persisted"]:
            raise SystemExit(1)
    elif args.command == "queue":
        urls = list(reversed(manager.frontier.snapshot()))
        if args.limit > 0:
            urls = urls[: args.limit]
        for url in urls:
            print(url)
    elif args.command == "hosts":
        path = write_host_graph(manager.graph, args.output, HostDenylist(config.denylist))
        print(f"Wrote host graph to {path}")


if __name__ == "__main__":  # pragma: no cover
    main()
