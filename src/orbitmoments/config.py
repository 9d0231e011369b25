"""Runtime settings read from the environment (populated from .env by the entry points)."""

import logging
import os
from dataclasses import dataclass


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    poi_api_url: str = ""  # Empty → in-memory store with sample moments
    orbit_source: str = "horizons"  # "horizons" or "skyfield"
    orbit_body: str = "399"  # Horizons COMMAND id (399 = Earth)
    rail_visible_count: int = 9  # Odd
    year_end_threshold_days: int = 20
    renderer: str = "svg"  # "svg" or "plotly"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``os.environ``; unset values keep their defaults."""
        settings = cls(
            poi_api_url=os.environ.get("POI_API_URL", "").strip(),
            orbit_source=os.environ.get("ORBIT_SOURCE", "horizons").strip().lower(),
            orbit_body=os.environ.get("ORBIT_BODY", "399").strip(),
            rail_visible_count=_int_env("RAIL_VISIBLE_COUNT", 9),
            year_end_threshold_days=_int_env("YEAR_END_THRESHOLD_DAYS", 20),
            renderer=os.environ.get("RENDERER", "svg").strip().lower(),
            log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
        )
        if settings.orbit_source not in ("horizons", "skyfield"):
            raise ValueError(f"ORBIT_SOURCE must be 'horizons' or 'skyfield', got {settings.orbit_source!r}")
        if settings.renderer not in ("svg", "plotly"):
            raise ValueError(f"RENDERER must be 'svg' or 'plotly', got {settings.renderer!r}")
        if settings.rail_visible_count < 1 or settings.rail_visible_count % 2 == 0:
            raise ValueError("RAIL_VISIBLE_COUNT must be a positive odd number")
        return settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
