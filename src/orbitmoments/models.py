"""Data model definitions — explicit boundaries between data, navigation, and render layers."""

from dataclasses import dataclass, field
from datetime import date

DayKey = str  # Canonical "MM-DD", year-independent


@dataclass(frozen=True)
class PointOfInterest:
    """A single moment attached to a calendar day."""

    id: str  # Opaque, stable identifier assigned by the store
    date: date  # Day granularity; time-of-day dropped on normalization
    title: str
    description: str = ""
    image_urls: tuple[str, ...] = ()  # Ordered photo URLs


@dataclass(frozen=True)
class EphemerisPoint:
    """One sample of a body's trajectory (km before rescale, scene units after)."""

    date: date
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class OrbitPosition:
    """Scene position of a day on the orbit plus its outward direction."""

    x: float
    y: float
    radial: float  # atan2(y, x), radians


@dataclass(frozen=True)
class ChipView:
    """A single day chip in the rendered rail window."""

    key: DayKey
    slot: int  # Offset from the strip's rendered centre (negative = left)
    active: bool  # Matches the committed centre
    has_poi: bool  # At least one POI on this key in the displayed year


@dataclass(frozen=True)
class RailVisualState:
    """Everything a renderer needs to draw the day rail strip."""

    chips: tuple[ChipView, ...]
    center_key: DayKey
    item_width: float  # px
    strip_width: float  # px, may exceed container width
    translate_x: float  # px, centring offset + in-flight offset
    animating: bool
    transition_ms: int  # 0 when the strip jumps without a transition


@dataclass(frozen=True)
class YearTick:
    year: int
    x: int  # px from the left edge of the track


@dataclass(frozen=True)
class YearProgressState:
    """Derived state of the multi-year progress bar."""

    year: int
    day_of_year: int  # 1-based
    days_in_year: int
    progress: float  # 0..1 across the padded timeline
    thumb_x: int  # px
    ticks: tuple[YearTick, ...]
    cutoff_visible: bool  # Year end approaching
    width: int  # px
    nav_min_year: int
    nav_max_year: int


@dataclass(frozen=True)
class PoiPopup:
    """Popup content shown on hover or selection."""

    title: str
    date_label: str
    description: str
    photo_count: int
    image_urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class PoiMarkerView:
    """A POI marker positioned along the orbit, in draw order."""

    poi_id: str
    day_key: DayKey
    x: float
    y: float
    index_in_group: int
    group_size: int
    selected: bool
    popup: PoiPopup


@dataclass(frozen=True)
class ViewModel:
    """The sole input to renderers. Fully derived navigation state."""

    selected_date: date
    day_key: DayKey
    marker: OrbitPosition | None  # None when no orbit is loaded
    orbit_path: tuple[tuple[float, float], ...]
    rail: RailVisualState
    year_progress: YearProgressState
    poi_markers: tuple[PoiMarkerView, ...]
    selected_poi_id: str | None
    current_day_has_poi: bool
    poi_for_edit: PointOfInterest | None
    pois: tuple[PointOfInterest, ...] = field(default=())
