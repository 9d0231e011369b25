"""Orbit Moments — Streamlit app for browsing memories along a planet's orbit."""

import base64
import html
import logging
from datetime import date

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from orbitmoments.client import PoiClient, PoiServiceError  # noqa: E402
from orbitmoments.config import Settings, configure_logging  # noqa: E402
from orbitmoments.ephemeris import compute_orbit_trajectory, fetch_orbit_trajectory  # noqa: E402
from orbitmoments.i18n import t  # noqa: E402
from orbitmoments.navigation import Navigator  # noqa: E402
from orbitmoments.overlay import date_label, toggle_selection  # noqa: E402
from orbitmoments.renderers.plotly_2d import render_plotly_chart  # noqa: E402
from orbitmoments.renderers.svg_2d import (  # noqa: E402
    render_rail_html,
    render_scene_html,
    render_year_bar_html,
)
from orbitmoments.store import MemoryPoiStore  # noqa: E402

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger("orbitmoments.app")

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun it triggers fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="✦",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# --- Session state initialization ---

if "store" not in st.session_state:
    st.session_state.store = (
        PoiClient(settings.poi_api_url) if settings.poi_api_url else MemoryPoiStore()
    )
if "nav" not in st.session_state:
    _nav = Navigator(
        visible_count=settings.rail_visible_count,
        threshold_days=settings.year_end_threshold_days,
    )
    st.session_state.pois_ok = _nav.load_pois(st.session_state.store.fetch_pois)
    if settings.orbit_source == "skyfield":
        st.session_state.orbit_ok = _nav.load_orbit(compute_orbit_trajectory)
    else:
        st.session_state.orbit_ok = _nav.load_orbit(
            lambda: fetch_orbit_trajectory(settings.orbit_body)
        )
    st.session_state.nav = _nav
if "form_mode" not in st.session_state:
    st.session_state.form_mode = None  # None | "create" | "edit"

nav: Navigator = st.session_state.nav
store = st.session_state.store

# --- Viewport width → rail geometry ---
_vw = streamlit_js_eval(js_expressions="window.innerWidth", key="_viewport_w", height=0)
if _vw:
    nav.rail.resize(float(_vw) * 0.62)
    nav.year_rail.resize(min(float(_vw) * 0.6, 720))

# --- Dark theme CSS (static) ---
st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #0d1b35 !important;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] { display: none !important; }
    [data-testid="stMainBlockContainer"] { padding-top: 1rem !important; }
    [data-testid="stButton"] button {
        background-color: rgba(126, 200, 227, 0.2) !important;
        color: #7ec8e3 !important;
        border: 1px solid #7ec8e3 !important;
        border-radius: 6px !important;
        font-weight: 600;
    }
    [data-testid="stButton"] button:hover { background-color: rgba(126, 200, 227, 0.35) !important; }
    label, [data-testid="stWidgetLabel"] p { color: #aaaaaa !important; font-size: 0.85rem !important; }
    .moment-card { color: #e8d5a3; border-top: 1px solid rgba(201,169,110,0.18); padding: 0.8rem 0; }
    .moment-card h4 { color: #f5e6b8; margin: 0 0 0.2rem 0; }
    .moment-card small { color: #8899bb; }
    </style>
    """,
    unsafe_allow_html=True,
)


# --- Event handlers ---
# Every handler settles the animation clock before the rerun renders; the
# browser-side CSS transitions provide the visible motion.


def _settle() -> None:
    nav.scheduler.flush()


def _on_rail_step(direction: int) -> None:
    nav.rail.step(direction)
    _settle()


def _on_chip_pick() -> None:
    key = st.session_state.get("rail_pick")
    if key:
        nav.rail.click_chip(key)
        _settle()


def _on_poi_step(direction: int) -> None:
    if direction > 0:
        nav.next_poi()
    else:
        nav.prev_poi()
    _settle()


def _on_year_step(direction: int) -> None:
    if direction > 0:
        nav.year_rail.request_next_year()
    else:
        nav.year_rail.request_prev_year()
    _settle()


def _on_today() -> None:
    nav.jump_to_today()
    _settle()


def _on_moment_pick() -> None:
    poi_id = st.session_state.get("moment_pick")
    nav.select_poi(poi_id)
    _settle()


def _open_form(mode: str | None) -> None:
    st.session_state.form_mode = mode


def _image_bytes(url: str) -> bytes | str:
    """Resolve a stored image URL to something st.image can display."""
    if isinstance(store, MemoryPoiStore) and url.startswith("/images/"):
        found = store.read_image(url.rsplit("/", 1)[-1])
        if found is not None:
            return found[1]
    if isinstance(store, PoiClient) and url.startswith("/"):
        return settings.poi_api_url.rstrip("/") + url
    return url


view = nav.view()

# --- Load warnings ---
if not st.session_state.pois_ok:
    st.warning(t("warn_pois_unavailable", _lang))
if not st.session_state.orbit_ok:
    st.warning(t("warn_orbit_unavailable", _lang))

# --- Year bar ---
ycol1, ycol2, ycol3 = st.columns([1, 8, 1])
with ycol1:
    st.button("‹", key="year_prev", help=t("help_prev_year", _lang), on_click=_on_year_step, args=(-1,))
with ycol2:
    st.markdown(
        render_year_bar_html(view.year_progress, cutoff_title=t("year_cutoff", _lang)),
        unsafe_allow_html=True,
    )
with ycol3:
    st.button("›", key="year_next", help=t("help_next_year", _lang), on_click=_on_year_step, args=(1,))

# --- Scene ---
if settings.renderer == "plotly":
    fig = render_plotly_chart(view)
    event = st.plotly_chart(
        fig,
        key=f"scene_{view.selected_date.isoformat()}_{view.selected_poi_id}",
        on_select="rerun",
        selection_mode="points",
        config={"scrollZoom": True, "displayModeBar": False},
    )
    points = (event or {}).get("selection", {}).get("points", [])
    clicked = next((p.get("customdata") for p in points if p.get("customdata")), None)
    if clicked is not None:
        nav.select_poi(toggle_selection(clicked, view.selected_poi_id))
        _settle()
        st.rerun()
else:
    # The HTML component is one-way; selection goes through the moments picker.
    components.html(render_scene_html(view, height_px=560), height=570, scrolling=False)
    if view.poi_markers:
        st.caption(t("hint_svg_select", _lang))

# --- Day rail ---
st.markdown(render_rail_html(view.rail), unsafe_allow_html=True)

rcol1, rcol2, rcol3, rcol4, rcol5 = st.columns([1, 1, 8, 1, 1])
with rcol1:
    st.button(
        t("btn_prev_poi", _lang), key="poi_prev", help=t("help_prev_poi", _lang),
        on_click=_on_poi_step, args=(-1,),
    )
with rcol2:
    st.button(t("btn_prev_day", _lang), key="day_prev", on_click=_on_rail_step, args=(-1,))
with rcol3:
    _half = nav.rail.window_half
    _visible = [c for c in view.rail.chips if abs(c.slot) <= _half]
    st.session_state.rail_pick = view.day_key
    st.segmented_control(
        t("label_date", _lang),
        options=[c.key for c in _visible],
        format_func=lambda k: f"{k} •" if k in nav.has_poi_keys else k,
        key="rail_pick",
        on_change=_on_chip_pick,
        label_visibility="collapsed",
    )
with rcol4:
    st.button(t("btn_next_day", _lang), key="day_next", on_click=_on_rail_step, args=(1,))
with rcol5:
    st.button(
        t("btn_next_poi", _lang), key="poi_next", help=t("help_next_poi", _lang),
        on_click=_on_poi_step, args=(1,),
    )

# --- Action bar: Create / Today / Edit ---
# A day with moments offers Edit in place of Create.
acol1, acol2 = st.columns(2)
with acol1:
    if view.current_day_has_poi:
        st.button(t("btn_edit", _lang), key="edit_btn", use_container_width=True, on_click=_open_form, args=("edit",))
    else:
        st.button(t("btn_create", _lang), key="create_btn", use_container_width=True, on_click=_open_form, args=("create",))
with acol2:
    st.button(t("btn_today", _lang), key="today_btn", use_container_width=True, on_click=_on_today)

# --- Create / edit form ---
if st.session_state.form_mode is not None:
    editing = view.poi_for_edit if st.session_state.form_mode == "edit" else None
    with st.form("poi_form", clear_on_submit=True):
        title = st.text_input(t("label_title", _lang), value=editing.title if editing else "")
        when = st.date_input(
            t("label_date", _lang),
            value=editing.date if editing else view.selected_date,
            min_value=date(1900, 1, 1),
        )
        description = st.text_area(
            t("label_description", _lang), value=editing.description if editing else ""
        )
        uploads = st.file_uploader(
            t("label_photos", _lang), type=["png", "jpg", "jpeg", "gif", "webp"], accept_multiple_files=True
        )
        fcol1, fcol2, fcol3 = st.columns(3)
        with fcol1:
            save = st.form_submit_button(t("btn_save", _lang), use_container_width=True)
        with fcol2:
            cancel = st.form_submit_button(t("btn_cancel", _lang), use_container_width=True)
        with fcol3:
            delete = (
                st.form_submit_button(t("btn_delete", _lang), use_container_width=True)
                if editing is not None
                else False
            )

    if cancel:
        st.session_state.form_mode = None
        st.rerun()

    if save:
        if not title.strip():
            st.error(t("error_title_required", _lang))
        else:
            image_urls = list(editing.image_urls) if editing else []
            try:
                for f in uploads or []:
                    uploaded = store.upload_image(
                        f.type or "application/octet-stream",
                        base64.b64encode(f.getvalue()).decode("ascii"),
                    )
                    image_urls.append(uploaded["url"])
            except PoiServiceError:
                logger.exception("Image upload failed")
                st.toast(t("toast_upload_failed", _lang))
            try:
                if editing is not None:
                    saved = store.update_poi(
                        editing.id, date=when, title=title, description=description, image_urls=image_urls
                    )
                else:
                    saved = store.create_poi(
                        date=when, title=title, description=description, image_urls=image_urls
                    )
            except PoiServiceError:
                logger.exception("Saving POI failed")
                st.toast(t("toast_save_failed", _lang))
            else:
                nav.on_saved(saved)
                _settle()
                st.session_state.form_mode = None
                st.toast(t("toast_saved", _lang))
                st.rerun()

    if delete and editing is not None:
        try:
            store.delete_poi(editing.id)
        except PoiServiceError:
            logger.exception("Deleting POI %s failed", editing.id)
            st.toast(t("toast_delete_failed", _lang))
        else:
            nav.on_deleted(editing.id)
            _settle()
            st.session_state.form_mode = None
            st.toast(t("toast_deleted", _lang))
            st.rerun()

# --- Selected moment + gallery ---
selected = nav.selected_poi
if selected is not None:
    st.markdown(
        f"<div class='moment-card'><h4>{html.escape(selected.title)}</h4>"
        f"<small>{date_label(selected.date)}</small><p>{html.escape(selected.description)}</p></div>",
        unsafe_allow_html=True,
    )
    if selected.image_urls:
        st.caption(t("photo_count", _lang).format(n=len(selected.image_urls)))
        st.image([_image_bytes(u) for u in selected.image_urls], width=220)

# --- Moments this year ---
_year_pois = [p for p in view.pois if p.date.year == nav.current_year]
if _year_pois:
    _ids = [p.id for p in _year_pois]
    st.session_state.moment_pick = view.selected_poi_id if view.selected_poi_id in _ids else None
    st.selectbox(
        t("label_moments", _lang),
        options=_ids,
        format_func=lambda pid: next(f"{p.date:%m-%d} · {p.title}" for p in _year_pois if p.id == pid),
        key="moment_pick",
        on_change=_on_moment_pick,
    )
