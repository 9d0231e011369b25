"""Day rail controller: an apparently infinite strip of day chips.

Five input paths (wheel/scroll, pointer drag, chip click, arrow step, and the
owner's ``animate_to_key`` command) all end in the same transition: commit a
new centred day key and, when Dec-31 ↔ Jan-01 was crossed, report a year
delta.

States:
  IDLE       resting on the committed centre
  ANIMATING  a fixed-duration slide is in flight; new slides are dropped

Long jumps are not animated chip by chip. The strip is pre-positioned
``window_half`` chips short of the target and only that last hop slides, so
every transition takes ``anim_ms`` and covers at most ``window_half`` chips.
"""

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from orbitmoments.animation import AnimationScheduler
from orbitmoments.daykeys import (
    PERIOD,
    index_of,
    is_day_key,
    key_at,
    modulo,
    shortest_signed_delta,
)
from orbitmoments.models import ChipView, DayKey, RailVisualState

logger = logging.getLogger(__name__)

ANIM_MS = 240
COPIES = 3  # Rendered strip = three concatenated rings
SNAP_LOW = 0.5 * PERIOD
SNAP_HIGH = 2.5 * PERIOD


class RailState(Enum):
    IDLE = "idle"
    ANIMATING = "animating"


@dataclass(frozen=True)
class RailAnimationState:
    """Transient rail state. Private to the controller; exposed for inspection only."""

    committed_center_index: int
    in_flight_offset_px: float
    is_animating: bool


class DayRailController:
    """Owns the rail's animation state and turns gestures into committed day keys.

    Args:
        on_change: Called with the new centred key after a non-silent commit.
        on_year_boundary: Called with +1/-1 when a commit crossed the year end.
        scheduler: Frame/timer source for transitions.
        initial_key: Day key to centre on before the first commit.
        visible_count: Chips fully visible at once (odd).
        extra_pad: Chips rendered past each visible edge.
        min_item_width: Chip width floor in px; the strip overflows below it.
        anim_ms: Duration of every slide.
    """

    def __init__(
        self,
        on_change: Callable[[DayKey], None],
        on_year_boundary: Callable[[int], None] | None = None,
        scheduler: AnimationScheduler | None = None,
        initial_key: DayKey = "01-01",
        visible_count: int = 9,
        extra_pad: int = 6,
        min_item_width: float = 76,
        anim_ms: int = ANIM_MS,
    ):
        if visible_count < 1 or visible_count % 2 == 0:
            raise ValueError("visible_count must be a positive odd number")
        self.on_change = on_change
        self.on_year_boundary = on_year_boundary
        self.scheduler = scheduler or AnimationScheduler()
        self.visible_count = visible_count
        self.extra_pad = extra_pad
        self.min_item_width = min_item_width
        self.anim_ms = anim_ms

        self._center = index_of(initial_key)
        self._render_center = self._center
        self._offset_px = 0.0
        self._state = RailState.IDLE
        self._transition = False
        self._container_w = 0.0
        self._has_poi_keys: frozenset[DayKey] = frozenset()
        self._owner_key: DayKey | None = None
        # Bumped when the owner moves away from the in-flight target
        self._generation = 0
        self._target: int | None = None
        # Fractional position of the viewport centre on the tripled strip
        self._scroll_pos: float | None = None
        self._drag: tuple[float, float] | None = None  # (pointer x, scroll pos at press)

    # --- Geometry ---

    @property
    def period(self) -> int:
        return PERIOD

    @property
    def window_half(self) -> int:
        return self.visible_count // 2

    @property
    def slice_half(self) -> int:
        return self.window_half + self.extra_pad

    @property
    def item_count(self) -> int:
        return 2 * self.slice_half + 1

    @property
    def item_width(self) -> float:
        if self._container_w <= 0:
            return self.min_item_width
        return max(self._container_w / self.item_count, self.min_item_width)

    @property
    def center_key(self) -> DayKey:
        return key_at(self._center)

    @property
    def state(self) -> RailState:
        return self._state

    @property
    def is_animating(self) -> bool:
        return self._state is RailState.ANIMATING

    def animation_state(self) -> RailAnimationState:
        return RailAnimationState(self._center, self._offset_px, self.is_animating)

    # --- Owner-facing configuration ---

    def set_has_poi_keys(self, keys: Iterable[DayKey]) -> None:
        self._has_poi_keys = frozenset(keys)

    def resize(self, width: float) -> None:
        """Container width changed: recompute chip width and recentre without animation."""
        self._container_w = max(0.0, float(width))
        if not self.is_animating:
            self._reset_to(self._center)

    def sync(self, key: DayKey) -> None:
        """Record the owner's current day key.

        When idle and out of step, the strip jumps to it without animation or
        callbacks. While animating, the key is reconciled when the slide ends;
        a key other than the slide's target supersedes the slide, which then
        lands without reporting a change or a year delta.
        """
        self._owner_key = key
        if not is_day_key(key):
            return
        if self.is_animating:
            if index_of(key) != self._target:
                self._generation += 1
        elif index_of(key) != self._center:
            self.recenter(key)

    def supersede(self) -> None:
        """The owner committed a selection of its own; an in-flight slide lands silently."""
        if self.is_animating:
            self._generation += 1

    def recenter(self, key: DayKey) -> None:
        """Jump to ``key`` instantly. Ignored while a slide is in flight."""
        if self.is_animating:
            return
        self._reset_to(index_of(key))

    def _reset_to(self, idx: int) -> None:
        self._center = self._render_center = idx
        self._offset_px = 0.0
        self._transition = False
        self._scroll_pos = None
        self._drag = None

    # --- Slides ---

    def request_slide(self, steps: int, silent: bool = False) -> bool:
        """Start a slide of ``steps`` chips. Returns False when dropped.

        Dropped when ``steps`` is 0 or a slide is already in flight.
        """
        if not steps or self.is_animating:
            return False

        sign = 1 if steps > 0 else -1
        base = self._center
        target = modulo(base + steps, self.period)
        if base + steps >= self.period:
            year_delta = 1
        elif base + steps < 0:
            year_delta = -1
        else:
            year_delta = 0
        anim_steps = min(abs(steps), self.window_half)
        hop_px = -sign * anim_steps * self.item_width

        self._state = RailState.ANIMATING
        self._target = target
        self._scroll_pos = None
        self._drag = None
        generation = self._generation

        def commit() -> None:
            self._commit(target, year_delta, silent or generation != self._generation)

        if abs(steps) > anim_steps:
            # Long jump: show the chip anim_steps short of target, then slide the last hop.
            self._render_center = modulo(target - sign * anim_steps, self.period)
            self._offset_px = 0.0
            self._transition = False

            def start_hop() -> None:
                self._transition = True
                self._offset_px = hop_px
                self.scheduler.call_later(self.anim_ms, commit)

            self.scheduler.request_frame(start_hop)
        else:
            self._render_center = base
            self._transition = True
            self._offset_px = hop_px
            self.scheduler.call_later(self.anim_ms, commit)

        logger.debug(
            "Rail slide %+d from %s (animated %d, silent=%s)",
            steps, key_at(base), anim_steps, silent,
        )
        return True

    def _commit(self, target: int, year_delta: int, silent: bool) -> None:
        self._state = RailState.IDLE
        self._target = None
        self._reset_to(target)
        key = key_at(target)
        # Silent and superseded slides: the owner already holds the resulting date.
        if not silent:
            if year_delta and self.on_year_boundary is not None:
                self.on_year_boundary(year_delta)
            self.on_change(key)
        owner_key = self._owner_key
        if owner_key is not None and is_day_key(owner_key) and owner_key != self.center_key:
            self.recenter(owner_key)

    def animate_to_key(self, key: DayKey, silent: bool = True) -> bool:
        """Owner command: slide the shortest way round to ``key``.

        Silent by default, since the caller already set the date and only wants
        the visual motion.
        """
        if not is_day_key(key):
            return False
        delta = shortest_signed_delta(self._center, index_of(key), self.period)
        if delta == 0:
            return False
        return self.request_slide(delta, silent=silent)

    def click_chip(self, key: DayKey) -> bool:
        if not is_day_key(key) or key == self.center_key:
            return False
        delta = shortest_signed_delta(self._center, index_of(key), self.period)
        return self.request_slide(delta)

    def step(self, direction: int) -> bool:
        """Arrow button: one chip back (-1) or forward (+1). Zero is dropped."""
        if not direction:
            return False
        return self.request_slide(1 if direction > 0 else -1)

    # --- Free scrolling ---

    def scroll_by(self, dx_px: float) -> None:
        """Move the viewport ``dx_px`` to the right (later days). Ignored while animating.

        Every time the nearest chip changes the key is committed immediately.
        Crossing into another copy of the ring reports a year delta. Drifting past
        half a period from either end re-centres onto the middle copy without
        any callback.
        """
        if self.is_animating or not dx_px:
            return
        w = self.item_width
        pos = self._scroll_pos if self._scroll_pos is not None else self.period + self._center
        old_i = round(pos)
        pos += dx_px / w
        i = round(pos)

        if i != old_i:
            year_delta = math.floor(i / self.period) - math.floor(old_i / self.period)
            self._center = self._render_center = modulo(i, self.period)
            if year_delta and self.on_year_boundary is not None:
                self.on_year_boundary(year_delta)
            self.on_change(self.center_key)

        if i < SNAP_LOW or i > SNAP_HIGH:
            pos = self.period + modulo(i, self.period) + (pos - i)
            i = round(pos)
        self._scroll_pos = pos
        self._offset_px = -(pos - i) * w
        self._transition = False

    def wheel(self, delta_x: float, delta_y: float) -> None:
        """Translate a wheel/trackpad event along its dominant axis into a scroll."""
        self.scroll_by(delta_x if abs(delta_x) > abs(delta_y) else delta_y)

    def pointer_down(self, x: float) -> None:
        if self.is_animating:
            return
        pos = self._scroll_pos if self._scroll_pos is not None else self.period + self._center
        self._drag = (x, pos)

    def pointer_move(self, x: float) -> None:
        if self._drag is None or self.is_animating:
            return
        x0, pos0 = self._drag
        want = pos0 - (x - x0) / self.item_width
        current = self._scroll_pos if self._scroll_pos is not None else self.period + self._center
        drag = self._drag
        self.scroll_by((want - current) * self.item_width)
        # A snap-back shifts the scroll position by a whole period; keep the anchor aligned.
        if self._scroll_pos is not None and abs(self._scroll_pos - want) > self.period / 2:
            shift = self._scroll_pos - want
            self._drag = (drag[0], drag[1] + shift)

    def pointer_up(self) -> None:
        self._drag = None
        self.settle()

    def settle(self) -> None:
        """Drop any fractional scroll offset so the committed chip sits centred."""
        if self.is_animating:
            return
        self._offset_px = 0.0
        if self._scroll_pos is not None:
            self._scroll_pos = float(round(self._scroll_pos))

    # --- Rendering ---

    def visual_state(self) -> RailVisualState:
        w = self.item_width
        active_key = key_at(self._render_center)
        chips = tuple(
            ChipView(
                key=key_at(self._render_center + slot),
                slot=slot,
                active=key_at(self._render_center + slot) == active_key,
                has_poi=key_at(self._render_center + slot) in self._has_poi_keys,
            )
            for slot in range(-self.slice_half, self.slice_half + 1)
        )
        centre_offset = (
            self._container_w / 2 - (self.slice_half + 0.5) * w if self._container_w > 0 else 0.0
        )
        return RailVisualState(
            chips=chips,
            center_key=self.center_key,
            item_width=w,
            strip_width=self.item_count * w,
            translate_x=centre_offset + self._offset_px,
            animating=self.is_animating,
            transition_ms=self.anim_ms if self._transition else 0,
        )
