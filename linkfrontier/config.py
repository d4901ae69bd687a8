"""Frontier settings and their JSON loader."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence

from .policy import DEFAULT_DENYLIST, REVISIT_WINDOW_SECONDS
from .store import default_backup_path


class ConfigError(Exception):
    """Raised when frontier configuration is invalid."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("Frontier configuration is invalid")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - debug convenience
        return f"ConfigError(errors={self.errors!r})"


@dataclass(slots=True)
class FrontierConfig:
    graph_path: Path = Path("graph.json")
    backup_path: Optional[Path] = None
    revisit_window_seconds: int = REVISIT_WINDOW_SECONDS
    refetch_empty_sites: bool = False
    max_pages_per_host: int = 0
    denylist: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_DENYLIST))
    allowed_schemes: Sequence[str] = ()
    refill_when_empty: bool = False
    crawl_id: str = "default"
    state_dir: Optional[Path] = None

    def resolved_backup_path(self) -> Path:
        return self.backup_path or default_backup_path(self.graph_path)

    def resolved_state_dir(self) -> Path:
        return self.state_dir or self.graph_path.parent

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "FrontierConfig":
        errors: Dict[str, str] = {}

        graph_path = Path(str(raw.get("graph_path") or "graph.json"))
        backup_raw = raw.get("backup_path")
        backup_path = Path(str(backup_raw)) if backup_raw else None
        state_raw = raw.get("state_dir")
        state_dir = Path(str(state_raw)) if state_raw else None

        window = _coerce_int(raw.get("revisit_window_seconds"), default=REVISIT_WINDOW_SECONDS)
        if window is None or window < 0:
            errors["revisit_window_seconds"] = "must be a non-negative integer"
            window = REVISIT_WINDOW_SECONDS

        max_pages = _coerce_int(raw.get("max_pages_per_host"), default=0)
        if max_pages is None or max_pages < 0:
            errors["max_pages_per_host"] = "must be a non-negative integer"
            max_pages = 0

        denylist_raw = raw.get("denylist")
        denylist: Dict[str, bool]
        if denylist_raw is None:
            denylist = dict(DEFAULT_DENYLIST)
        elif isinstance(denylist_raw, dict):
            denylist = {str(pattern): bool(purge) for pattern, purge in denylist_raw.items()}
        elif isinstance(denylist_raw, list):
            denylist = {str(pattern): True for pattern in denylist_raw}
        else:
            errors["denylist"] = "denylist must be an object or an array of hosts"
            denylist = dict(DEFAULT_DENYLIST)

        schemes_raw = raw.get("allowed_schemes") or []
        if isinstance(schemes_raw, list):
            allowed_schemes = tuple(str(scheme).lower() for scheme in schemes_raw)
        else:
            errors["allowed_schemes"] = "allowed_schemes must be an array"
            allowed_schemes = ()

        crawl_id = str(raw.get("crawl_id") or "").strip() or "default"

        if errors:
            raise ConfigError(errors)

        return cls(
            graph_path=graph_path,
            backup_path=backup_path,
            revisit_window_seconds=window,
            refetch_empty_sites=bool(raw.get("refetch_empty_sites", False)),
            max_pages_per_host=max_pages,
            denylist=denylist,
            allowed_schemes=allowed_schemes,
            refill_when_empty=bool(raw.get("refill_when_empty", False)),
            crawl_id=crawl_id,
            state_dir=state_dir,
        )


def load_config(path: Path | str) -> FrontierConfig:
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError({"config": f"configuration file not found: {config_path}"})
    except json.JSONDecodeError as exc:
        raise ConfigError({"config": f"invalid JSON in {config_path}: {exc}"})
    if not isinstance(raw, dict):
        raise ConfigError({"config": "configuration must be a JSON object"})
    return FrontierConfig.from_dict(raw)


def _coerce_int(value: object, default: int) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


__all__ = ["ConfigError", "FrontierConfig", "load_config"]
