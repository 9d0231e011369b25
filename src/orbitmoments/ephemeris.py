"""Ephemeris sources: JPL Horizons over httpx, or skyfield with a local DE421 kernel.

Both return raw heliocentric points in km, one per day. Rescaling into scene
coordinates happens in orbitmoments.orbit.
"""

import logging
import os
import re
import time
from datetime import date, datetime, timedelta
from pathlib import Path

import httpx
from skyfield.api import Loader

from orbitmoments.models import EphemerisPoint

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent
_HORIZONS_URL = "https://ssd.jpl.nasa.gov/api/horizons.api"
CACHE_INTERVAL_S = 20 * 60 * 60

_DATE_RE = re.compile(r"A\.D\.\s+(\d{4}-[A-Za-z]{3}-\d{2})")
_XYZ_RE = re.compile(
    r"X\s*=\s*([-\d.E+]+)\s*Y\s*=\s*([-\d.E+]+)\s*Z\s*=\s*([-\d.E+]+)"
)

# body id -> (fetched_at monotonic seconds, points)
_cache: dict[str, tuple[float, tuple[EphemerisPoint, ...]]] = {}

_loader: Loader | None = None
_eph = None


class EphemerisError(Exception):
    """Orbit trajectory fetch or parse failure."""


def parse_horizons_vectors(text: str) -> tuple[EphemerisPoint, ...]:
    """Parse the $$SOE…$$EOE block of a Horizons VECTORS text response.

    Each record is a date line (``A.D. 2025-Jan-20 00:00:00.0000 TDB``)
    followed by an ``X = … Y = … Z = …`` line. Velocity lines are ignored.

    Raises:
        EphemerisError: If no $$SOE marker is present.
    """
    lines = text.splitlines()
    try:
        start = next(i for i, line in enumerate(lines) if "$$SOE" in line)
    except StopIteration:
        raise EphemerisError("Horizons response has no $$SOE block") from None

    points: list[EphemerisPoint] = []
    i = start + 1
    while i < len(lines):
        line = lines[i]
        if "$$EOE" in line:
            break
        date_match = _DATE_RE.search(line)
        if date_match and i + 1 < len(lines):
            xyz_match = _XYZ_RE.search(lines[i + 1])
            if xyz_match:
                points.append(
                    EphemerisPoint(
                        date=datetime.strptime(date_match.group(1), "%Y-%b-%d").date(),
                        x=float(xyz_match.group(1)),
                        y=float(xyz_match.group(2)),
                        z=float(xyz_match.group(3)),
                    )
                )
                i += 2
                continue
        i += 1
    return tuple(points)


def fetch_orbit_trajectory(
    body_id: str = "399",
    start: date | None = None,
    client: httpx.Client | None = None,
) -> tuple[EphemerisPoint, ...]:
    """Fetch one year of daily heliocentric vectors for ``body_id`` from Horizons.

    Results are cached in-process for 20 hours per body.

    Args:
        body_id: Horizons COMMAND value ("399" = Earth).
        start: First day of the window. Defaults to today.
        client: Optional httpx client (injected by tests).

    Returns:
        Points ordered by date, in km.

    Raises:
        EphemerisError: On HTTP failure or an unparseable response.
    """
    cached = _cache.get(body_id)
    now = time.monotonic()
    if cached is not None and now - cached[0] < CACHE_INTERVAL_S:
        logger.info("Orbit cache hit for body %s (%d points)", body_id, len(cached[1]))
        return cached[1]

    start = start or date.today()
    try:
        stop = start.replace(year=start.year + 1)
    except ValueError:  # Feb 29
        stop = start + timedelta(days=365)
    params = {
        "format": "text",
        "COMMAND": f"'{body_id}'",
        "MAKE_EPHEM": "'YES'",
        "EPHEM_TYPE": "'VECTORS'",
        "CENTER": "'@10'",
        "START_TIME": f"'{start.isoformat()}'",
        "STOP_TIME": f"'{stop.isoformat()}'",
        "STEP_SIZE": "'1 DAYS'",
        "VEC_TABLE": "'1'",
        "REF_SYSTEM": "'ICRF'",
        "CAL_TYPE": "'M'",
        "OUT_UNITS": "'KM-S'",
    }
    http = client or httpx.Client(timeout=30)
    try:
        resp = http.get(_HORIZONS_URL, params=params)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise EphemerisError(f"Horizons request failed: {e}") from e
    finally:
        if client is None:
            http.close()

    points = parse_horizons_vectors(resp.text)
    if not points:
        raise EphemerisError("Horizons response contained no vectors")
    logger.info("Fetched %d orbit points for body %s", len(points), body_id)
    _cache[body_id] = (now, points)
    return points


def clear_cache() -> None:
    _cache.clear()


def _ephemeris():
    """Lazily open the DE421 kernel; skyfield downloads it on first use."""
    global _loader, _eph
    if _eph is None:
        data_dir = os.environ.get("SKYFIELD_DATA_DIR") or str(_ROOT / "resources")
        _loader = Loader(data_dir)
        _eph = _loader("de421.bsp")
    return _loader, _eph


def compute_orbit_trajectory(
    start: date | None = None, days: int = 366
) -> tuple[EphemerisPoint, ...]:
    """Offline alternative to Horizons: Earth's heliocentric position from DE421.

    Args:
        start: First day. Defaults to Jan 1 of the current year.
        days: Number of daily samples (366 covers a full day-key ring).

    Returns:
        Points in km, ICRF axes, ordered by date.
    """
    loader, eph = _ephemeris()
    start = start or date(date.today().year, 1, 1)
    ts = loader.timescale()
    sun, earth = eph["sun"], eph["earth"]

    dates = [start + timedelta(days=i) for i in range(days)]
    t = ts.utc(
        [d.year for d in dates], [d.month for d in dates], [d.day for d in dates]
    )
    x, y, z = (earth.at(t) - sun.at(t)).position.km
    return tuple(
        EphemerisPoint(date=d, x=float(x[i]), y=float(y[i]), z=float(z[i]))
        for i, d in enumerate(dates)
    )
