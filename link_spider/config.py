"""
Loading and validation of LinkSpider crawl configuration.
Pydantic describes the schema and checks the data.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class SpiderConfig(BaseModel):
    """Configuration for a single crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: HttpUrl = Field(..., description="URL the crawl starts from.")
    max_depth: int = Field(2, ge=0, description="Maximum number of link hops from the seed.")
    cache_dir: Path = Field(Path(".cache/pages"), description="Directory of the on-disk page store.")
    timeout: float = Field(10.0, gt=0, description="Timeout of a single request (seconds).")
    user_agent: str = Field("LinkSpider/1.0", min_length=1, description="User-Agent header.")
    rate_limit: float = Field(5.0, gt=0, description="Requests per second.")
    retry_times: int = Field(2, ge=0, description="Retries on 5xx/429 and transport errors.")
    backoff_factor: float = Field(1.0, ge=0, description="Multiplier of the exponential retry backoff.")
    max_in_flight: int = Field(10, ge=1, description="Maximum concurrent fetches.")
    max_resources: Optional[int] = Field(None, ge=1, description="Upper bound on identifiers processed.")
    same_host: bool = Field(True, description="Follow only links on the seed's host.")


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> SpiderConfig:
    """
    Read YAML or JSON and return a validated SpiderConfig.
    Raises FileNotFoundError when the config file is missing.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return SpiderConfig(**data)
