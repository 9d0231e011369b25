"""Orbit layer: trajectory rescale, day-key → position index, and marker derivation.

Scene coordinates: the viewBox spans [-MAX_COORD, MAX_COORD] on both axes,
with the sun at the origin.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np

from orbitmoments.daykeys import as_date, day_key_of
from orbitmoments.models import DayKey, EphemerisPoint, OrbitPosition

logger = logging.getLogger(__name__)

MAX_COORD = 1000
ORBIT_FILL = 0.7  # Modal radius lands at 70% of the half-viewport
DISTANCE_BIN_KM = 1e7


def to_ephemeris_point(raw: EphemerisPoint | Mapping[str, Any]) -> EphemerisPoint:
    """Accept a native point or a wire dict whose ``date`` is a string or date."""
    if isinstance(raw, EphemerisPoint):
        return raw
    return EphemerisPoint(
        date=as_date(raw["date"]),
        x=float(raw["x"]),
        y=float(raw["y"]),
        z=float(raw.get("z", 0.0)),
    )


def modal_radius(points: Iterable[EphemerisPoint], bin_size: float = DISTANCE_BIN_KM) -> float:
    """Most common distance from the origin after rounding into ``bin_size`` bins.

    Ties resolve to the bin seen first. Returns 0.0 for an empty input.
    """
    pts = list(points)
    if not pts:
        return 0.0
    xy = np.array([[p.x, p.y] for p in pts], dtype=float)
    dists = np.hypot(xy[:, 0], xy[:, 1])
    bins = np.round(dists / bin_size) * bin_size
    values, first_seen, counts = np.unique(bins, return_index=True, return_counts=True)
    best = max(range(len(values)), key=lambda i: (counts[i], -first_seen[i]))
    return float(values[best])


def rescale_trajectory(
    points: Iterable[EphemerisPoint | Mapping[str, Any]],
    bin_size: float = DISTANCE_BIN_KM,
) -> tuple[tuple[EphemerisPoint, ...], float]:
    """Scale a raw trajectory so its modal radius maps to 70% of MAX_COORD.

    Args:
        points: Raw ephemeris points (km) as native points or wire dicts.
        bin_size: Distance bin used to find the modal radius.

    Returns:
        (scaled points, scale factor). When no modal radius can be found the
        points are returned unscaled with a factor of 0.0.
    """
    normalized = tuple(to_ephemeris_point(p) for p in points)
    mode = modal_radius(normalized, bin_size)
    if mode <= 0:
        return normalized, 0.0
    scale = (MAX_COORD / mode) * ORBIT_FILL
    scaled = tuple(
        EphemerisPoint(date=p.date, x=p.x * scale, y=p.y * scale, z=p.z * scale)
        for p in normalized
    )
    logger.debug("Rescaled %d orbit points by %.3e (mode=%.3e km)", len(scaled), scale, mode)
    return scaled, scale


class OrbitIndex:
    """Day key → OrbitPosition lookup over one (already scaled) trajectory.

    Points are matched by month/day only. When a key appears more than once
    (multi-year trajectories) the first occurrence wins.
    """

    def __init__(self, trajectory: Iterable[EphemerisPoint | Mapping[str, Any]] = ()):
        self._points: tuple[EphemerisPoint, ...] = tuple(
            to_ephemeris_point(p) for p in trajectory
        )
        self._by_key: dict[DayKey, OrbitPosition] = {}
        for p in self._points:
            key = day_key_of(p.date)
            if key not in self._by_key:
                self._by_key[key] = OrbitPosition(p.x, p.y, math.atan2(p.y, p.x))

    def __len__(self) -> int:
        return len(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def lookup(self, key: DayKey) -> OrbitPosition | None:
        """Position for ``key``; first trajectory point if unmatched, None if empty."""
        pos = self._by_key.get(key)
        if pos is not None:
            return pos
        if not self._points:
            return None
        first = self._points[0]
        return OrbitPosition(first.x, first.y, math.atan2(first.y, first.x))

    def path_points(self) -> tuple[tuple[float, float], ...]:
        return tuple((p.x, p.y) for p in self._points)


# --- Marker renderer (stateless) ---


def marker_position(index: OrbitIndex, key: DayKey) -> OrbitPosition | None:
    """Where the planet marker sits for ``key``."""
    return index.lookup(key)


def orbit_path_points(index: OrbitIndex) -> tuple[tuple[float, float], ...]:
    """Static orbit polyline in scene coordinates."""
    return index.path_points()


def offset_along_radial(
    base: OrbitPosition, step: float, offset_idx: int
) -> tuple[float, float]:
    """Shift ``base`` outward (or inward for negative ``offset_idx``) along its radial."""
    return (
        base.x + math.cos(base.radial) * step * offset_idx,
        base.y + math.sin(base.radial) * step * offset_idx,
    )
