import json
from pathlib import Path

import pytest

from linkfrontier.config import ConfigError, FrontierConfig, load_config


def test_defaults_match_crawler_conventions() -> None:
    config = FrontierConfig()
    assert config.graph_path == Path("graph.json")
    assert config.resolved_backup_path() == Path("graph.bak.json")
    assert config.revisit_window_seconds == 604800
    assert config.denylist == {"youtube.com": True}
    assert config.refetch_empty_sites is False


def test_from_dict_accepts_denylist_array_and_overrides(tmp_path: Path) -> None:
    config = FrontierConfig.from_dict(
        {
            "graph_path": str(tmp_path / "state" / "graph.json"),
            "revisit_window_seconds": "3600",
            "denylist": ["web.archive.org", "jcink.net"],
            "allowed_schemes": ["HTTP", "https"],
            "max_pages_per_host": 50,
            "crawl_id": "nightly",
        }
    )
    assert config.resolved_backup_path() == tmp_path / "state" / "graph.bak.json"
    assert config.resolved_state_dir() == tmp_path / "state"
    assert config.revisit_window_seconds == 3600
    assert config.denylist == {"web.archive.org": True, "jcink.net": True}
    assert config.allowed_schemes == ("http", "https")
    assert config.max_pages_per_host == 50
    assert config.crawl_id == "nightly"


def test_from_dict_collects_errors() -> None:
    with pytest.raises(ConfigError) as excinfo:
        FrontierConfig.from_dict(
            {
                "revisit_window_seconds": -1,
                "max_pages_per_host": "lots",
                "denylist": "youtube.com",
                "allowed_schemes": "https",
            }
        )
    assert set(excinfo.value.errors) == {
        "revisit_window_seconds",
        "max_pages_per_host",
        "denylist",
        "allowed_schemes",
    }


def test_load_config_reads_json_file(tmp_path: Path) -> None:
    path = tmp_path / "frontier.json"
    path.write_text(json.dumps({"refill_when_empty": True}), encoding="utf-8")
    assert load_config(path).refill_when_empty is True


def test_load_config_reports_missing_and_invalid_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.json")
    broken = tmp_path / "broken.json"
    broken.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)
