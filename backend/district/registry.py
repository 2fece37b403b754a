from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from district.types import DistrictConfig


def _repo_root() -> Path:
    # .../backend/district/registry.py -> repo root is 2 levels up
    return Path(__file__).resolve().parents[2]


def config_path() -> Path:
    raw = (os.getenv("DISTRICT_MAP_CONFIG") or "").strip()
    if raw:
        return Path(raw)
    return _repo_root() / "config" / "district.yaml"


@dataclass(frozen=True)
class Settings:
    """
    Process-level knobs that live outside the YAML file.
    """

    style_key: str | None
    data_base_url: str | None
    fetch_timeout_s: float | None
    offline_style: bool


def _env_flag(name: str, default: str = "0") -> bool:
    v = (os.getenv(name) or default).strip().lower()
    return v not in {"0", "false", "no", "off", ""}


def _env_float(name: str) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    return value if value > 0 else None


def get_settings() -> Settings:
    return Settings(
        style_key=(os.getenv("DISTRICT_MAP_STYLE_KEY") or "").strip() or None,
        data_base_url=(os.getenv("DISTRICT_MAP_DATA_BASE_URL") or "").strip() or None,
        fetch_timeout_s=_env_float("DISTRICT_MAP_FETCH_TIMEOUT_S"),
        offline_style=_env_flag("DISTRICT_MAP_OFFLINE_STYLE"),
    )


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"District config not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid district yaml root: {path}")
    return data


@lru_cache(maxsize=1)
def get_district() -> DistrictConfig:
    path = config_path()
    cfg = DistrictConfig.model_validate(_load_yaml(path))
    if not cfg.sources:
        raise ValueError(f"District config is missing `sources`: {path}")
    return cfg


def resolve_repo_path(repo_relative: str) -> Path:
    # Allow both "data/..." and "/data/..." inputs (normalize to repo-relative).
    rel = (repo_relative or "").lstrip("/")
    return _repo_root() / rel


def repo_root() -> Path:
    return _repo_root()


def clear_district_cache() -> None:
    """
    Drop the cached district config so the next `get_district()` rereads the YAML.
    """
    get_district.cache_clear()
