"""Year progress controller: a day-granular bar across the padded POI years."""

from collections.abc import Callable
from datetime import date

from orbitmoments.daykeys import (
    MS_PER_DAY,
    day_of_year,
    days_in_year,
    end_of_year,
    start_of_year,
    utc_ms,
)
from orbitmoments.models import YearProgressState, YearTick

DEFAULT_WIDTH = 720
DEFAULT_THRESHOLD_DAYS = 20


class YearProgressController:
    """Renders the multi-year bar and forwards prev/next-year requests.

    Year stepping itself belongs to the owner; this controller only asks.
    Pixel positions follow the observed container width via ``resize``.
    """

    def __init__(
        self,
        on_prev_year: Callable[[], None] | None = None,
        on_next_year: Callable[[], None] | None = None,
        width: int = DEFAULT_WIDTH,
        threshold_days: int = DEFAULT_THRESHOLD_DAYS,
    ):
        self.on_prev_year = on_prev_year
        self.on_next_year = on_next_year
        self.width = width
        self.threshold_days = threshold_days

    def resize(self, width: float) -> None:
        self.width = max(0, int(width))

    def request_prev_year(self) -> None:
        if self.on_prev_year is not None:
            self.on_prev_year()

    def request_next_year(self) -> None:
        if self.on_next_year is not None:
            self.on_next_year()

    def state(self, selected: date, min_year: int, max_year: int) -> YearProgressState:
        """Derive the bar for ``selected`` over ``[min_year - 1, max_year + 1]``."""
        pad_start, pad_end = min_year - 1, max_year + 1
        start_ms = utc_ms(start_of_year(pad_start))
        total_days = (end_of_year(pad_end) - start_of_year(pad_start)).days + 1
        span_ms = total_days * MS_PER_DAY

        def fraction(ms: int) -> float:
            return max(0.0, min(1.0, (ms - start_ms) / span_ms))

        progress = fraction(utc_ms(selected))
        ticks = tuple(
            YearTick(year=y, x=round(fraction(utc_ms(start_of_year(y))) * self.width))
            for y in range(pad_start, pad_end + 1)
        )
        doy = day_of_year(selected)
        n_days = days_in_year(selected.year)
        return YearProgressState(
            year=selected.year,
            day_of_year=doy,
            days_in_year=n_days,
            progress=progress,
            thumb_x=round(progress * self.width),
            ticks=ticks,
            cutoff_visible=n_days - doy <= self.threshold_days,
            width=self.width,
            nav_min_year=pad_start,
            nav_max_year=pad_end,
        )
