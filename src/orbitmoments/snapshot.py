"""Render the orbit for one date to a PNG without starting the app.

Usage:
    orbitmoments-snapshot 2025-01-20
    orbitmoments-snapshot 2025-01-20 --source skyfield -o out.png
"""

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from orbitmoments.config import Settings, configure_logging
from orbitmoments.daykeys import as_date
from orbitmoments.ephemeris import compute_orbit_trajectory, fetch_orbit_trajectory
from orbitmoments.navigation import Navigator
from orbitmoments.renderers.static import save_static_chart
from orbitmoments.store import MemoryPoiStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Save a static orbit chart for a date, with the sample moments overlaid."
    )
    parser.add_argument("date", help="Date to show, YYYY-MM-DD")
    parser.add_argument(
        "--source",
        choices=("horizons", "skyfield"),
        default=None,
        help="Trajectory source (default: ORBIT_SOURCE or horizons)",
    )
    parser.add_argument(
        "--no-samples",
        action="store_true",
        help="Draw the orbit without the sample moments",
    )
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output PNG path")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        selected = as_date(args.date)
    except ValueError:
        logger.error("Not a date: %r", args.date)
        return 2

    nav = Navigator(today=selected, today_fn=lambda: selected)
    if not args.no_samples:
        nav.load_pois(MemoryPoiStore().fetch_pois)
    source = args.source or settings.orbit_source
    if source == "skyfield":
        ok = nav.load_orbit(compute_orbit_trajectory)
    else:
        ok = nav.load_orbit(lambda: fetch_orbit_trajectory(settings.orbit_body))
    if not ok:
        logger.error("No orbit trajectory available; nothing to draw")
        return 1

    # Loading POIs moves the selection to the latest moment; put it back.
    nav.jump_to_today()
    nav.scheduler.flush()

    path = save_static_chart(nav.view(), args.output)
    print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
