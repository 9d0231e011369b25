"""POI overlay: markers for the displayed year, grouped by day and fanned out.

Draw order matters (later = on top): the day holding the selected POI goes
last, else the selected day, and inside a group the selected POI goes last.
"""

from collections.abc import Sequence
from datetime import date

from orbitmoments.daykeys import day_key_of
from orbitmoments.models import DayKey, PoiMarkerView, PoiPopup, PointOfInterest
from orbitmoments.orbit import OrbitIndex, offset_along_radial

FAN_STEP_PX = 18


def date_label(d: date) -> str:
    """Popup date, e.g. "Mon, 20 Jan 2025"."""
    return f"{d:%a}, {d.day} {d:%b} {d.year}"


def popup_for(poi: PointOfInterest) -> PoiPopup:
    return PoiPopup(
        title=poi.title,
        date_label=date_label(poi.date),
        description=poi.description,
        photo_count=len(poi.image_urls),
        image_urls=poi.image_urls,
    )


def group_by_day(
    pois: Sequence[PointOfInterest],
    year: int,
    selected_day_key: DayKey | None = None,
    selected_poi_id: str | None = None,
) -> list[tuple[DayKey, list[PointOfInterest]]]:
    """POIs of ``year`` grouped by day key, in draw order."""
    by_day: dict[DayKey, list[PointOfInterest]] = {}
    for p in pois:
        if p.date.year != year:
            continue
        by_day.setdefault(day_key_of(p.date), []).append(p)
    for group in by_day.values():
        group.sort(key=lambda p: p.date)

    entries = list(by_day.items())
    top = next(
        (i for i, (_, group) in enumerate(entries) if any(p.id == selected_poi_id for p in group)),
        None,
    )
    if top is None:
        top = next((i for i, (k, _) in enumerate(entries) if k == selected_day_key), None)
    if top is not None:
        entries.append(entries.pop(top))
    return entries


def build_poi_markers(
    pois: Sequence[PointOfInterest],
    year: int,
    orbit: OrbitIndex,
    selected_day_key: DayKey | None = None,
    selected_poi_id: str | None = None,
    step: float = FAN_STEP_PX,
) -> tuple[PoiMarkerView, ...]:
    """Positioned markers in draw order. Nothing is drawn without an orbit."""
    if not orbit:
        return ()
    markers: list[PoiMarkerView] = []
    for key, group in group_by_day(pois, year, selected_day_key, selected_poi_id):
        base = orbit.lookup(key)
        if base is None:
            continue
        size = len(group)
        center = (size - 1) // 2
        ordered = [p for p in group if p.id != selected_poi_id] + [
            p for p in group if p.id == selected_poi_id
        ]
        for poi in ordered:
            idx = group.index(poi)
            if size > 1:
                x, y = offset_along_radial(base, step, idx - center)
            else:
                x, y = base.x, base.y
            markers.append(
                PoiMarkerView(
                    poi_id=poi.id,
                    day_key=key,
                    x=x,
                    y=y,
                    index_in_group=idx,
                    group_size=size,
                    selected=poi.id == selected_poi_id,
                    popup=popup_for(poi),
                )
            )
    return tuple(markers)


def toggle_selection(clicked_id: str, selected_id: str | None) -> str | None:
    """Marker click: selecting the already-selected POI deselects it."""
    return None if clicked_id == selected_id else clicked_id
