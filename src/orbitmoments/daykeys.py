"""Cyclic day-of-year calendar: the ring of "MM-DD" keys and its modular arithmetic.

The ring represents a generic year, so Feb-29 appears exactly once and the
successor of "12-31" is "01-01". Python's ``%`` already returns a non-negative
residue for a positive modulus, but ``modulo`` is kept explicit so every ring
computation goes through one place.
"""

import calendar
from datetime import date, datetime, timedelta

from orbitmoments.models import DayKey

MS_PER_DAY = 86_400_000


def day_key_of(d: date) -> DayKey:
    """Return the zero-padded "MM-DD" key of a date (year ignored)."""
    return f"{d.month:02d}-{d.day:02d}"


def _build_ring() -> tuple[DayKey, ...]:
    # 2024 is a leap year, so one pass covers Feb-29.
    base = date(2024, 1, 1)
    keys = (day_key_of(base + timedelta(days=i)) for i in range(366))
    return tuple(dict.fromkeys(keys))


DAY_KEYS: tuple[DayKey, ...] = _build_ring()
PERIOD = len(DAY_KEYS)
_INDEX: dict[DayKey, int] = {k: i for i, k in enumerate(DAY_KEYS)}


def index_of(key: DayKey) -> int:
    """Position of ``key`` on the ring.

    Raises:
        ValueError: If ``key`` is not a canonical day key.
    """
    try:
        return _INDEX[key]
    except KeyError:
        raise ValueError(f"Not a day key: {key!r}") from None


def is_day_key(key: str) -> bool:
    return key in _INDEX


def key_at(index: int) -> DayKey:
    """Day key at any integer ring position, wrapping in both directions."""
    return DAY_KEYS[modulo(index, PERIOD)]


def date_from_day_key(key: DayKey, year: int) -> date:
    """Build the date for ``key`` in ``year``.

    "02-29" in a non-leap year clamps to Feb 28 instead of raising.
    """
    month, day = (int(part) for part in key.split("-"))
    if month == 2 and day == 29 and not calendar.isleap(year):
        day = 28
    return date(year, month, day)


def modulo(n: int, m: int) -> int:
    """Non-negative residue of ``n`` modulo ``m``."""
    return ((n % m) + m) % m


def cyclic_distance(a_idx: int, b_idx: int, period: int = PERIOD) -> int:
    """Shortest unsigned distance between two ring indices, in [0, period // 2]."""
    diff = abs(a_idx - b_idx) % period
    return min(diff, period - diff)


def shortest_signed_delta(from_idx: int, to_idx: int, period: int = PERIOD) -> int:
    """Signed step count from ``from_idx`` to ``to_idx`` in (-period/2, period/2].

    Positive means forward (later in the year, possibly wrapping past 12-31).
    """
    delta = modulo(to_idx - from_idx, period)
    if delta * 2 > period:
        delta -= period
    return delta


# --- Year helpers ---


def start_of_year(year: int) -> date:
    return date(year, 1, 1)


def end_of_year(year: int) -> date:
    return date(year, 12, 31)


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def day_of_year(d: date) -> int:
    """1-based ordinal day within the year (1..365/366)."""
    return d.timetuple().tm_yday


def utc_ms(d: date) -> int:
    """Milliseconds since the epoch at UTC midnight of ``d``."""
    return (d - date(1970, 1, 1)).days * MS_PER_DAY


def as_date(value: "date | datetime | str") -> date:
    """Normalize a date-like value (native or ISO string) to a calendar date.

    Time-of-day is discarded. ISO strings may carry a time part and a
    ``Z``/offset suffix; the calendar day as written is kept.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
