# tests/test_navigation.py
from __future__ import annotations

import logging
from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st

from conftest import circular_orbit
from orbitmoments.animation import AnimationScheduler
from orbitmoments.client import PoiServiceError
from orbitmoments.daykeys import date_from_day_key
from orbitmoments.ephemeris import EphemerisError
from orbitmoments.models import PointOfInterest
from orbitmoments.navigation import Navigator, YearCarry
from orbitmoments.store import SAMPLE_POIS


def _poi(poi_id: str, d: date) -> PointOfInterest:
    return PointOfInterest(poi_id, d, f"Moment {poi_id}")


def _assert_consistent(nav: Navigator) -> None:
    dates = [p.date for p in nav.pois]
    assert dates == sorted(dates)
    if nav.poi_cursor is not None:
        assert nav.pois[nav.poi_cursor].date == nav.selected_date


# ─────────────────────────────────────────────────────────────────────────────
# Loading
# ─────────────────────────────────────────────────────────────────────────────

def test_initial_load_selects_latest_past_poi(nav: Navigator) -> None:
    assert nav.selected_date == date(2025, 5, 18)
    assert nav.selected_poi_id == "poi3"
    assert nav.rail.center_key == "05-18"
    assert nav.year_bounds == (2024, 2025)
    assert nav.nav_bounds == (2023, 2026)


def test_initial_load_with_only_future_pois_selects_last() -> None:
    today = date(2020, 1, 1)
    nav = Navigator(today=today, today_fn=lambda: today)
    nav.receive_pois([_poi("a", date(2025, 1, 1)), _poi("b", date(2026, 1, 1))])
    assert nav.selected_poi_id == "b"


def test_pois_are_applied_once_and_not_after_close(nav: Navigator) -> None:
    assert not nav.receive_pois([_poi("late", date(2025, 1, 1))])
    assert "late" not in nav.id_to_index
    nav.close()
    assert not nav.receive_orbit(circular_orbit())
    assert not nav.orbit


def test_receive_pois_accepts_wire_records(today: date) -> None:
    nav = Navigator(today=today, today_fn=lambda: today)
    nav.receive_pois([{"id": "w", "date": "2025-02-02T00:00:00Z", "title": "Wire"}])
    assert nav.selected_poi == PointOfInterest("w", date(2025, 2, 2), "Wire")


def test_failed_poi_load_degrades(caplog, today: date) -> None:
    nav = Navigator(today=today, today_fn=lambda: today)

    def boom():
        raise PoiServiceError("down")

    with caplog.at_level(logging.ERROR, logger="orbitmoments.navigation"):
        assert not nav.load_pois(boom)
    assert "Failed to fetch POIs" in caplog.text
    assert nav.pois == ()
    assert nav.poi_cursor is None
    assert nav.year_bounds == (today.year, today.year)
    # Calendar navigation still works
    nav.rail.step(1)
    nav.scheduler.flush()
    assert nav.selected_date == date(2025, 6, 2)
    assert not nav.next_poi()


def test_failed_orbit_load_leaves_no_marker(nav: Navigator) -> None:
    def boom():
        raise EphemerisError("no vectors")

    assert not nav.load_orbit(boom)
    view = nav.view()
    assert view.marker is None
    assert view.orbit_path == ()
    assert view.poi_markers == ()
    assert view.rail.center_key == "05-18"


# ─────────────────────────────────────────────────────────────────────────────
# POI stepping
# ─────────────────────────────────────────────────────────────────────────────

def test_next_poi_walks_same_day_before_moving_on() -> None:
    today = date(2025, 1, 20)
    nav = Navigator(today=today, today_fn=lambda: today)
    nav.receive_pois([_poi("A", today), _poi("B", today), _poi("C", date(2025, 11, 7))])
    assert nav.jump_to_poi(0)
    nav.scheduler.flush()
    assert nav.selected_poi_id == "A"

    assert nav.next_poi()
    assert nav.selected_poi_id == "B"
    assert nav.next_poi()
    assert nav.selected_poi_id == "C"
    assert nav.selected_date == date(2025, 11, 7)
    assert not nav.next_poi()

    assert nav.prev_poi()
    assert nav.selected_poi_id == "B"
    assert nav.prev_poi()
    assert nav.selected_poi_id == "A"
    assert not nav.prev_poi()


def test_next_poi_from_day_before_visits_both(nav: Navigator) -> None:
    nav.set_day_key("01-19")
    assert nav.selected_date == date(2025, 1, 19)
    assert nav.poi_cursor is None
    nav.next_poi()
    nav.next_poi()
    nav.scheduler.flush()
    assert nav.selected_poi_id == "poi1"
    nav.next_poi()
    assert nav.selected_poi_id == "poi3"


def test_jump_out_of_range_is_noop(nav: Navigator) -> None:
    before = (nav.selected_date, nav.poi_cursor)
    assert not nav.jump_to_poi(99)
    assert not nav.jump_to_poi(-1)
    assert (nav.selected_date, nav.poi_cursor) == before


def test_jump_animates_rail_silently(nav: Navigator) -> None:
    assert nav.jump_to_poi(nav.id_to_index["poi2"])
    assert nav.selected_date == date(2025, 11, 7)
    assert nav.rail.is_animating
    nav.scheduler.flush()
    assert nav.rail.center_key == "11-07"
    assert nav.selected_date == date(2025, 11, 7)


# ─────────────────────────────────────────────────────────────────────────────
# Year stepping and the year carry
# ─────────────────────────────────────────────────────────────────────────────

def test_year_step_forward_lands_on_latest_poi_of_target_year() -> None:
    today = date(2024, 6, 15)
    nav = Navigator(today=today, today_fn=lambda: today)
    nav.receive_pois([_poi("A", date(2025, 1, 20)), _poi("C", date(2025, 11, 7))])
    nav.jump_to_today()
    nav.scheduler.flush()
    assert nav.selected_date == today

    assert nav.change_year_step(1)
    assert nav.selected_date == date(2025, 11, 7)
    assert nav.selected_poi_id == "C"


def test_year_step_back_lands_on_first_poi(nav: Navigator) -> None:
    nav.change_year_step(1)  # 2026: no POIs
    nav.scheduler.flush()
    assert nav.change_year_step(-1)
    assert nav.selected_poi_id == "poi0"


def test_year_step_into_empty_year_keeps_day_key(nav: Navigator) -> None:
    assert nav.change_year_step(1)
    assert nav.selected_date == date(2026, 5, 18)
    assert nav.poi_cursor is None


def test_year_step_is_clamped_to_padded_range(nav: Navigator) -> None:
    assert nav.change_year_step(1)
    assert not nav.change_year_step(1)
    assert nav.current_year == 2026
    nav.scheduler.flush()
    assert nav.change_year_step(-1)  # 2025
    assert nav.change_year_step(-1)  # 2024
    assert nav.change_year_step(-1)  # 2023
    assert not nav.change_year_step(-1)
    assert nav.current_year == 2023


def test_year_bar_buttons_drive_year_step(nav: Navigator) -> None:
    nav.year_rail.request_next_year()
    assert nav.current_year == 2026
    nav.year_rail.request_prev_year()
    assert nav.current_year == 2025


def test_feb_29_clamps_when_year_is_not_leap(nav: Navigator) -> None:
    nav.set_day_key("02-29")
    assert nav.selected_date == date(2025, 2, 28)


def test_rail_steps_through_feb_29_in_non_leap_year(nav: Navigator) -> None:
    nav.set_day_key("02-28")
    nav.rail.step(1)
    nav.scheduler.flush()
    assert nav.selected_date == date(2025, 2, 28)
    assert nav.rail.center_key == "02-29"
    nav.rail.step(1)
    nav.scheduler.flush()
    assert nav.selected_date == date(2025, 3, 1)
    nav.rail.step(-1)
    nav.scheduler.flush()
    nav.rail.step(-1)
    nav.scheduler.flush()
    assert nav.selected_date == date(2025, 2, 28)


def test_year_carry_is_one_shot() -> None:
    carry = YearCarry()
    carry.push(1)
    assert carry.pending == 1
    assert carry.consume() == 1
    assert carry.consume() == 0


def test_rail_step_over_year_end_moves_to_next_year(nav: Navigator) -> None:
    nav.set_day_key("12-31")
    assert nav.selected_date == date(2025, 12, 31)
    nav.rail.step(1)
    nav.scheduler.flush()
    assert nav.selected_date == date(2026, 1, 1)
    assert nav.pending_year_carry == 0
    nav.rail.step(-1)
    nav.scheduler.flush()
    assert nav.selected_date == date(2025, 12, 31)


def test_scroll_over_year_start_moves_to_previous_year(nav: Navigator) -> None:
    nav.set_day_key("01-01")
    nav.rail.scroll_by(-nav.rail.item_width)
    assert nav.selected_date == date(2024, 12, 31)


def test_programmatic_jump_clears_stale_carry(nav: Navigator) -> None:
    nav.rail.on_year_boundary(1)  # a carry with no day change behind it
    assert nav.pending_year_carry == 1
    nav.jump_to_poi(0)
    assert nav.pending_year_carry == 0
    nav.scheduler.flush()
    nav.set_day_key("03-03")
    assert nav.selected_date == date(2024, 3, 3)


def test_year_step_during_rail_slide_wins_over_the_slide() -> None:
    today = date(2025, 12, 31)
    nav = Navigator(today=today, today_fn=lambda: today)
    assert nav.nav_bounds == (2024, 2026)
    assert nav.rail.step(1)  # heading for 2026-01-01
    assert nav.change_year_step(1)
    assert nav.selected_date == date(2026, 12, 31)
    nav.scheduler.flush()
    assert nav.selected_date == date(2026, 12, 31)
    assert nav.pending_year_carry == 0
    lo, hi = nav.nav_bounds
    assert lo <= nav.current_year <= hi
    assert nav.rail.center_key == "12-31"


def test_poi_jump_during_rail_slide_is_kept(nav: Navigator) -> None:
    nav.set_day_key("12-31")
    assert nav.rail.step(1)
    assert nav.jump_to_poi(0)
    target = nav.pois[0]
    nav.scheduler.flush()
    assert nav.selected_date == target.date
    assert nav.selected_poi_id == target.id
    assert nav.pending_year_carry == 0


def test_jump_to_same_day_key_during_slide_keeps_its_year() -> None:
    today = date(2025, 6, 1)
    nav = Navigator(today=today, today_fn=lambda: today)
    nav.receive_pois([_poi("a", date(2024, 1, 1))])
    nav.set_day_key("12-31")
    assert nav.selected_date == date(2024, 12, 31)
    assert nav.rail.step(1)  # also heading for "01-01", one year later
    assert nav.jump_to_poi(0)
    nav.scheduler.flush()
    assert nav.selected_date == date(2024, 1, 1)
    assert nav.selected_poi_id == "a"
    _assert_consistent(nav)


def test_year_step_zero_does_nothing(nav: Navigator) -> None:
    before = nav.selected_date
    assert not nav.change_year_step(0)
    assert nav.selected_date == before


# ─────────────────────────────────────────────────────────────────────────────
# Selection, today, edit target
# ─────────────────────────────────────────────────────────────────────────────

def test_select_and_deselect_poi(nav: Navigator) -> None:
    nav.select_poi("poi2")
    assert nav.selected_date == date(2025, 11, 7)
    nav.select_poi(None)
    assert nav.poi_cursor is None
    assert nav.selected_date == date(2025, 11, 7)
    nav.select_poi("missing")
    assert nav.poi_cursor is None


def test_id_to_index_is_read_only(nav: Navigator) -> None:
    index = nav.id_to_index
    with pytest.raises(TypeError):
        index["poi2"] = 0
    nav.select_poi("poi2")
    assert nav.selected_poi_id == "poi2"


def test_jump_to_today(nav: Navigator, today: date) -> None:
    nav.jump_to_today()
    nav.scheduler.flush()
    assert nav.selected_date == today
    assert nav.poi_cursor is None
    assert nav.rail.center_key == "06-01"
    assert not nav.current_day_has_poi


def test_edit_target_is_first_poi_of_day_without_cursor(nav: Navigator) -> None:
    nav.select_poi("poi1")
    assert nav.poi_for_edit.id == "poi1"
    nav.select_poi(None)
    assert nav.current_day_has_poi
    assert nav.poi_for_edit.id == "poi0"


# ─────────────────────────────────────────────────────────────────────────────
# Mutations
# ─────────────────────────────────────────────────────────────────────────────

def test_on_saved_inserts_sorted_and_selects(nav: Navigator) -> None:
    nav.on_saved({"id": "new", "date": "2025-01-20T00:00:00Z", "title": "Third"})
    ids = [p.id for p in nav.pois]
    assert ids.index("new") == ids.index("poi1") + 1
    assert nav.selected_poi_id == "new"
    assert nav.selected_date == date(2025, 1, 20)
    _assert_consistent(nav)


def test_on_saved_update_moves_poi(nav: Navigator) -> None:
    nav.on_saved(PointOfInterest("poi5", date(2025, 12, 1), "Moved"))
    assert nav.pois[-1].id == "poi5"
    assert nav.selected_poi_id == "poi5"
    assert nav.year_bounds == (2025, 2025)
    _assert_consistent(nav)


def test_on_deleted_remaps_cursor_by_id(nav: Navigator) -> None:
    assert nav.selected_poi_id == "poi3"
    nav.on_deleted("poi0")
    assert nav.selected_poi_id == "poi3"
    nav.on_deleted("poi3")
    assert nav.poi_cursor is None
    assert nav.selected_date == date(2025, 5, 18)
    _assert_consistent(nav)


# ─────────────────────────────────────────────────────────────────────────────
# View model
# ─────────────────────────────────────────────────────────────────────────────

def test_view_model(nav_with_orbit: Navigator) -> None:
    view = nav_with_orbit.view()
    assert view.selected_date == date(2025, 5, 18)
    assert view.day_key == "05-18"
    assert view.marker == nav_with_orbit.orbit.lookup("05-18")
    assert len(view.orbit_path) == 366
    assert {m.poi_id for m in view.poi_markers} == {"poi0", "poi1", "poi2", "poi3"}
    assert view.poi_markers[-1].poi_id == "poi3"
    assert view.rail.center_key == "05-18"
    assert "05-18" in {c.key for c in view.rail.chips if c.has_poi}
    assert view.year_progress.year == 2025
    assert view.current_day_has_poi
    assert view.poi_for_edit.id == "poi3"


def test_has_poi_keys_follow_year(nav: Navigator) -> None:
    assert nav.has_poi_keys == frozenset({"01-20", "05-18", "11-07"})
    nav.select_poi("poi5")
    assert nav.has_poi_keys == frozenset({"05-20"})


# ─────────────────────────────────────────────────────────────────────────────
# Invariants under arbitrary interaction
# ─────────────────────────────────────────────────────────────────────────────

ACTIONS = st.lists(
    st.one_of(
        st.sampled_from(["next", "prev", "year+", "year-", "day+", "day-", "today", "clear"]),
        st.tuples(st.just("select"), st.sampled_from([p.id for p in SAMPLE_POIS])),
        st.tuples(st.just("delete"), st.sampled_from([p.id for p in SAMPLE_POIS])),
        st.tuples(st.just("save"), st.dates(min_value=date(2023, 1, 1), max_value=date(2027, 12, 31))),
    ),
    max_size=25,
)


@given(ACTIONS)
def test_cursor_always_points_at_selected_day(actions) -> None:
    today = date(2025, 6, 1)
    nav = Navigator(today=today, scheduler=AnimationScheduler(), today_fn=lambda: today)
    nav.receive_pois(SAMPLE_POIS)
    for n, action in enumerate(actions):
        if action == "next":
            nav.next_poi()
        elif action == "prev":
            nav.prev_poi()
        elif action == "year+":
            nav.change_year_step(1)
        elif action == "year-":
            nav.change_year_step(-1)
        elif action == "day+":
            nav.rail.step(1)
        elif action == "day-":
            nav.rail.step(-1)
        elif action == "today":
            nav.jump_to_today()
        elif action == "clear":
            nav.select_poi(None)
        elif action[0] == "select":
            nav.select_poi(action[1])
        elif action[0] == "delete":
            if action[1] in nav.id_to_index:
                nav.on_deleted(action[1])
        elif action[0] == "save":
            nav.on_saved(PointOfInterest(f"s{n}", action[1], "saved"))
        _assert_consistent(nav)
        nav.scheduler.flush()
        _assert_consistent(nav)
        assert date_from_day_key(nav.rail.center_key, nav.current_year) == nav.selected_date
