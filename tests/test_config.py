# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from link_spider.config import SpiderConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,loader,expect_exc",
    [
        ("seed_url: http://example.com\nmax_depth: 3", load_config, None),
        (json.dumps({"seed_url": "http://example.com", "max_depth": 3}), load_config, None),
        ("{}", load_config, ValidationError),
        ("not: a: mapping", load_config, ValueError),
        ("::invalid yaml", load_config, TypeError),
    ],
)
def test_load_config_variants(tmp_path, content, loader, expect_exc):
    suffix = ".yaml" if not content.strip().startswith("{") else ".json"
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            loader(cfg_path)
    else:
        cfg = loader(cfg_path)
        assert isinstance(cfg, SpiderConfig)
        assert str(cfg.seed_url).rstrip("/") == "http://example.com"
        assert cfg.max_depth == 3


def test_defaults():
    cfg = SpiderConfig(seed_url="https://example.com")
    assert cfg.max_depth == 2
    assert cfg.max_in_flight == 10
    assert cfg.max_resources is None
    assert cfg.same_host is True
    assert cfg.cache_dir == Path(".cache/pages")


@pytest.mark.parametrize(
    "field,value",
    [
        ("max_depth", -1),
        ("max_in_flight", 0),
        ("max_resources", 0),
        ("rate_limit", 0),
        ("timeout", 0),
        ("unknown_key", 1),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        SpiderConfig(seed_url="https://example.com", **{field: value})


def test_config_is_frozen():
    cfg = SpiderConfig(seed_url="https://example.com")
    with pytest.raises(ValidationError):
        cfg.max_depth = 5


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_default_present(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("seed_url: https://example.org\n", encoding="utf-8")
    assert str(load_config(None).seed_url).startswith("https://example.org")


def test_unsupported_suffix(tmp_path):
    cfg_path = write_file(tmp_path, "seed_url = 'x'", ".toml")
    with pytest.raises(ValueError):
        load_config(cfg_path)
