"""Navigation orchestrator: the single owner of the selected date and POI cursor.

Everything else (day rail, year bar, orbit marker, POI overlay) is derived
from ``(selected_date, poi_cursor)`` or asks this class to change it. The pair
is always replaced together, so a non-null cursor always points at a POI on
the selected day.
"""

import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from types import MappingProxyType
from typing import Any

from orbitmoments.animation import AnimationScheduler
from orbitmoments.client import poi_from_dto, sort_pois
from orbitmoments.daykeys import date_from_day_key, day_key_of
from orbitmoments.models import DayKey, EphemerisPoint, PointOfInterest, ViewModel
from orbitmoments.orbit import (
    OrbitIndex,
    marker_position,
    orbit_path_points,
    rescale_trajectory,
)
from orbitmoments.overlay import build_poi_markers
from orbitmoments.rail import DayRailController
from orbitmoments.year_rail import DEFAULT_THRESHOLD_DAYS, YearProgressController

logger = logging.getLogger(__name__)

PoiRecord = PointOfInterest | Mapping[str, Any]


class YearCarry:
    """One-shot year offset from the day rail's boundary signal.

    ``push`` accumulates; ``consume`` returns the total and resets it.
    """

    def __init__(self) -> None:
        self._delta = 0

    def push(self, delta: int) -> None:
        self._delta += delta

    def consume(self) -> int:
        delta, self._delta = self._delta, 0
        return delta

    def clear(self) -> None:
        self._delta = 0

    @property
    def pending(self) -> int:
        return self._delta


# --- Memoized derivations (keyed by their true inputs) ---


@functools.lru_cache(maxsize=16)
def _has_poi_keys(pois: tuple[PointOfInterest, ...], year: int) -> frozenset[DayKey]:
    return frozenset(day_key_of(p.date) for p in pois if p.date.year == year)


@functools.lru_cache(maxsize=16)
def _id_to_index(pois: tuple[PointOfInterest, ...]) -> Mapping[str, int]:
    return MappingProxyType({p.id: i for i, p in enumerate(pois)})


@functools.lru_cache(maxsize=16)
def _year_bounds(pois: tuple[PointOfInterest, ...], fallback: int) -> tuple[int, int]:
    if not pois:
        return fallback, fallback
    years = [p.date.year for p in pois]
    return min(years), max(years)


class Navigator:
    """Owns ``{selected_date, poi_cursor}``, the POI collection, and the orbit index.

    Args:
        today: Initial selected date (defaults to ``today_fn()``).
        scheduler: Animation clock shared with the day rail.
        visible_count: Visible day chips on the rail.
        threshold_days: Year-end cue threshold for the year bar.
        today_fn: Clock used for "today" (injected by tests).
    """

    def __init__(
        self,
        today: date | None = None,
        scheduler: AnimationScheduler | None = None,
        visible_count: int = 9,
        threshold_days: int = DEFAULT_THRESHOLD_DAYS,
        today_fn: Callable[[], date] = date.today,
    ):
        self._today_fn = today_fn
        self._selected: date = today or today_fn()
        self._cursor: int | None = None
        self._pois: tuple[PointOfInterest, ...] = ()
        self._orbit = OrbitIndex()
        self._carry = YearCarry()
        self._alive = True
        self._pois_loaded = False
        self._orbit_loaded = False

        self.scheduler = scheduler or AnimationScheduler()
        self.rail = DayRailController(
            on_change=self.set_day_key,
            on_year_boundary=self._carry.push,
            scheduler=self.scheduler,
            initial_key=day_key_of(self._selected),
            visible_count=visible_count,
        )
        self.year_rail = YearProgressController(
            on_prev_year=lambda: self.change_year_step(-1),
            on_next_year=lambda: self.change_year_step(1),
            threshold_days=threshold_days,
        )
        self._publish()

    # --- State accessors ---

    @property
    def selected_date(self) -> date:
        return self._selected

    @property
    def poi_cursor(self) -> int | None:
        return self._cursor

    @property
    def pois(self) -> tuple[PointOfInterest, ...]:
        return self._pois

    @property
    def orbit(self) -> OrbitIndex:
        return self._orbit

    @property
    def pending_year_carry(self) -> int:
        return self._carry.pending

    @property
    def current_year(self) -> int:
        return self._selected.year

    @property
    def current_day_key(self) -> DayKey:
        return day_key_of(self._selected)

    @property
    def selected_poi(self) -> PointOfInterest | None:
        return self._pois[self._cursor] if self._cursor is not None else None

    @property
    def selected_poi_id(self) -> str | None:
        poi = self.selected_poi
        return poi.id if poi is not None else None

    @property
    def id_to_index(self) -> Mapping[str, int]:
        return _id_to_index(self._pois)

    @property
    def year_bounds(self) -> tuple[int, int]:
        """(min_year, max_year) over loaded POIs; the current calendar year if none."""
        return _year_bounds(self._pois, self._today_fn().year)

    @property
    def nav_bounds(self) -> tuple[int, int]:
        lo, hi = self.year_bounds
        return lo - 1, hi + 1

    @property
    def has_poi_keys(self) -> frozenset[DayKey]:
        return _has_poi_keys(self._pois, self.current_year)

    @property
    def current_day_has_poi(self) -> bool:
        return any(p.date == self._selected for p in self._pois)

    @property
    def poi_for_edit(self) -> PointOfInterest | None:
        """The cursor's POI when it sits on the selected day, else that day's first POI."""
        poi = self.selected_poi
        if poi is not None and poi.date == self._selected:
            return poi
        return next((p for p in self._pois if p.date == self._selected), None)

    # --- Internal commit ---

    def _first_index_on(self, d: date) -> int | None:
        return next((i for i, p in enumerate(self._pois) if p.date == d), None)

    def _commit(self, selected: date, cursor: int | None, animate: bool = False) -> None:
        """Replace the (date, cursor) pair, optionally sliding the rail silently.

        A rail slide still in flight was started for an older selection, so it
        is superseded and will not report its key or year delta.
        """
        self.rail.supersede()
        self._selected = selected
        self._cursor = cursor
        if animate:
            self._carry.clear()
            self.rail.animate_to_key(day_key_of(selected), silent=True)
        self._publish()

    def _rail_key(self) -> DayKey:
        """Key the rail should rest on.

        The rail's own centre is kept when it already resolves to the selected
        date, so "02-29" stays put in a non-leap year and the next step reaches
        "03-01" instead of bouncing back to "02-28".
        """
        center = self.rail.center_key
        if date_from_day_key(center, self._selected.year) == self._selected:
            return center
        return self.current_day_key

    def _publish(self) -> None:
        self.rail.set_has_poi_keys(self.has_poi_keys)
        self.rail.sync(self._rail_key())

    # --- Navigation operations ---

    def set_day_key(self, key: DayKey) -> None:
        """Day rail committed ``key``: resolve it against the year plus any pending carry."""
        year = self._selected.year + self._carry.consume()
        d = date_from_day_key(key, year)
        cursor = self._first_index_on(d)
        logger.debug("set_day_key %s -> %s (cursor=%s)", key, d, cursor)
        self._commit(d, cursor)

    def jump_to_poi(self, index: int) -> bool:
        """Select POI ``index`` and slide the rail to its day. Out-of-range is a no-op."""
        if not 0 <= index < len(self._pois):
            return False
        poi = self._pois[index]
        logger.debug("jump_to_poi %d (%s on %s)", index, poi.id, poi.date)
        self._commit(poi.date, index, animate=True)
        return True

    def next_poi(self) -> bool:
        """Jump to the first POI after the selected day.

        Same-day POIs after the cursor come first, so repeated presses walk a
        busy day before moving on.
        """
        for i, p in enumerate(self._pois):
            if p.date > self._selected or (
                p.date == self._selected and self._cursor is not None and i > self._cursor
            ):
                return self.jump_to_poi(i)
        return False

    def prev_poi(self) -> bool:
        for i in range(len(self._pois) - 1, -1, -1):
            p = self._pois[i]
            if p.date < self._selected or (
                p.date == self._selected and self._cursor is not None and i < self._cursor
            ):
                return self.jump_to_poi(i)
        return False

    def change_year_step(self, direction: int) -> bool:
        """Step one year within ``[min_year - 1, max_year + 1]``.

        Lands on the target year's last POI when stepping forward, first when
        stepping back, or the same day key when the year has none.
        """
        if not direction:
            return False
        step = 1 if direction > 0 else -1
        lo, hi = self.nav_bounds
        target = max(lo, min(hi, self.current_year + step))
        if target == self.current_year:
            return False

        in_year = [i for i, p in enumerate(self._pois) if p.date.year == target]
        if in_year:
            return self.jump_to_poi(in_year[-1] if step > 0 else in_year[0])
        d = date_from_day_key(self.current_day_key, target)
        logger.debug("change_year_step -> %d (empty year, %s)", target, d)
        self._commit(d, None, animate=True)
        return True

    def select_poi(self, poi_id: str | None) -> None:
        """Overlay selection: an id jumps to that POI, None clears the cursor."""
        if poi_id is None:
            self._commit(self._selected, None)
            return
        index = self.id_to_index.get(poi_id)
        if index is not None:
            self.jump_to_poi(index)

    def jump_to_today(self) -> None:
        today = self._today_fn()
        self._commit(today, self._first_index_on(today), animate=True)

    # --- Collection mutations (after the store confirmed them) ---

    def on_saved(self, saved: PoiRecord) -> None:
        """Upsert a created/updated POI, re-sort, and move to its day."""
        poi = saved if isinstance(saved, PointOfInterest) else poi_from_dto(saved)
        pois = list(self._pois)
        existing = self.id_to_index.get(poi.id)
        if existing is not None:
            pois[existing] = poi
        else:
            pois.append(poi)
        self._pois = tuple(sort_pois(pois))
        logger.info("POI %s saved on %s", poi.id, poi.date)
        self._commit(poi.date, self.id_to_index[poi.id], animate=True)

    def on_deleted(self, poi_id: str) -> None:
        """Drop a deleted POI; the cursor follows its POI by id, or clears."""
        current_id = self.selected_poi_id
        self._pois = tuple(sort_pois([p for p in self._pois if p.id != poi_id]))
        cursor = None
        if current_id is not None and current_id != poi_id:
            cursor = self.id_to_index.get(current_id)
            if cursor is not None and self._pois[cursor].date != self._selected:
                cursor = None
        logger.info("POI %s deleted", poi_id)
        self._commit(self._selected, cursor)

    # --- Loading (external collaborators) ---

    def close(self) -> None:
        """Mark the navigator as gone; late async completions are then ignored."""
        self._alive = False

    def receive_pois(self, records: Iterable[PoiRecord]) -> bool:
        """Initial POI load. Applies once; later or post-close deliveries are ignored.

        Selects the latest POI at or before today (else the last one).
        """
        if not self._alive or self._pois_loaded:
            logger.debug("Ignoring POI delivery (alive=%s, loaded=%s)", self._alive, self._pois_loaded)
            return False
        pois = [r if isinstance(r, PointOfInterest) else poi_from_dto(r) for r in records]
        self._pois = tuple(sort_pois(pois))
        self._pois_loaded = True
        if not self._pois:
            self._publish()
            return True
        today = self._today_fn()
        idx = next(
            (i for i in range(len(self._pois) - 1, -1, -1) if self._pois[i].date <= today),
            len(self._pois) - 1,
        )
        self._carry.clear()
        self._commit(self._pois[idx].date, idx)
        return True

    def receive_orbit(self, points: Iterable[EphemerisPoint | Mapping[str, Any]]) -> bool:
        """Install a raw (km) trajectory: rescale once and index by day key."""
        if not self._alive or self._orbit_loaded:
            return False
        scaled, _ = rescale_trajectory(points)
        self._orbit = OrbitIndex(scaled)
        self._orbit_loaded = True
        return True

    def load_pois(self, fetch: Callable[[], Iterable[PoiRecord]]) -> bool:
        """Fetch and install POIs. Failures are logged and leave an empty collection."""
        try:
            records = list(fetch())
        except Exception:
            logger.exception("Failed to fetch POIs")
            return False
        return self.receive_pois(records)

    def load_orbit(self, fetch: Callable[[], Iterable[EphemerisPoint | Mapping[str, Any]]]) -> bool:
        """Fetch and install the orbit. Failures are logged; navigation keeps working."""
        try:
            points = list(fetch())
        except Exception:
            logger.exception("Failed to fetch orbit trajectory")
            return False
        return self.receive_orbit(points)

    # --- View model ---

    def view(self) -> ViewModel:
        key = self.current_day_key
        lo, hi = self.year_bounds
        return ViewModel(
            selected_date=self._selected,
            day_key=key,
            marker=marker_position(self._orbit, key),
            orbit_path=orbit_path_points(self._orbit),
            rail=self.rail.visual_state(),
            year_progress=self.year_rail.state(self._selected, lo, hi),
            poi_markers=build_poi_markers(
                self._pois, self.current_year, self._orbit, key, self.selected_poi_id
            ),
            selected_poi_id=self.selected_poi_id,
            current_day_has_poi=self.current_day_has_poi,
            poi_for_edit=self.poi_for_edit,
            pois=self._pois,
        )
