"""Crawl frontier and link graph manager."""
from .config import ConfigError, FrontierConfig, load_config
from .frontier import FrontierQueue
from .manager import FrontierManager
from .models import DomainInfo, Graph, GraphError, GraphFormatError, Link, StorageError
from .policy import HostDenylist, PurgePolicy, RedirectResolver, RevisitPolicy
from .store import GraphStore

__all__ = [
    "ConfigError",
    "DomainInfo",
    "FrontierConfig",
    "FrontierManager",
    "FrontierQueue",
    "Graph",
    "GraphError",
    "GraphFormatError",
    "GraphStore",
    "HostDenylist",
    "Link",
    "PurgePolicy",
    "RedirectResolver",
    "RevisitPolicy",
    "StorageError",
    "load_config",
]
