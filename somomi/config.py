"""TOML configuration loader for somomi."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

_DEFAULT_DB_PATH = "~/.config/somomi/products.db"


@dataclass
class DatabaseConfig:
    path: str = _DEFAULT_DB_PATH


@dataclass
class FreshnessConfig:
    warning_pct: int = 30
    urgent_pct: int = 10
    default_life_days: int = 180


@dataclass
class AdsConfig:
    platform: str = "web"
    unit_id: str = ""
    non_personalized_only: bool = True


@dataclass
class SchedulerConfig:
    enabled: bool = False
    sweep_schedule: str = "0 9 * * *"


@dataclass
class SomomiConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    freshness: FreshnessConfig = field(default_factory=FreshnessConfig)
    ads: AdsConfig = field(default_factory=AdsConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)


def load_config(path: str | Path | None = None) -> SomomiConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path and ad unit id can be supplied via environment
    variables when the file leaves them empty.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dbs = raw.get("database", {})
    frs = raw.get("freshness", {})
    ads = raw.get("ads", {})
    sch = raw.get("scheduler", {})

    # Config file wins, then environment, then default
    db_path = dbs.get("path", "") or os.environ.get(
        "SOMOMI_DB_PATH", _DEFAULT_DB_PATH
    )
    unit_id = ads.get("unit_id", "") or os.environ.get("SOMOMI_AD_UNIT_ID", "")

    return SomomiConfig(
        database=DatabaseConfig(path=db_path),
        freshness=FreshnessConfig(
            warning_pct=int(frs.get("warning_pct", 30)),
            urgent_pct=int(frs.get("urgent_pct", 10)),
            default_life_days=int(frs.get("default_life_days", 180)),
        ),
        ads=AdsConfig(
            platform=ads.get("platform", "web"),
            unit_id=unit_id,
            non_personalized_only=ads.get("non_personalized_only", True),
        ),
        scheduler=SchedulerConfig(
            enabled=sch.get("enabled", False),
            sweep_schedule=sch.get("sweep_schedule", "0 9 * * *"),
        ),
    )
