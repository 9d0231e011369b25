"""SVG 2D renderers for the scene, the day rail, and the year bar.

Each function takes a slice of the ViewModel and returns an HTML string for
st.components.v1.html() or st.markdown(unsafe_allow_html=True).

Scene coordinate system (matches orbitmoments.orbit):
  viewBox = [-MAX_COORD, MAX_COORD] on both axes, sun at the origin.
"""

from __future__ import annotations

import html

from orbitmoments.models import (
    PoiMarkerView,
    RailVisualState,
    ViewModel,
    YearProgressState,
)
from orbitmoments.orbit import MAX_COORD

_BG = "#0d1b35"
_SUN_COLOR = "#FFD700"
_EARTH_COLOR = "#1e9fff"
_ORBIT_COLOR = "rgba(255,255,255,0.28)"
_POI_COLOR = "#e67aff"
_SELECTED_RING = "rgba(230,122,255,0.95)"
_GOLD = "#c9a96e"

_SUN_RADIUS = 100
_EARTH_RADIUS = 10
_POI_RADIUS = 15
_SELECTED_RADIUS = 40


def _orbit_path_d(points: tuple[tuple[float, float], ...]) -> str:
    return " ".join(
        f"{'M' if i == 0 else 'L'} {x:.2f} {y:.2f}" for i, (x, y) in enumerate(points)
    )


def _poi_marker_svg(m: PoiMarkerView) -> str:
    p = m.popup
    photos = f" (+{p.photo_count} photos)" if p.photo_count else ""
    tooltip = html.escape(f"{p.title}{photos}\n{p.date_label}\n{p.description}")
    parts = [
        f'<g class="poi{" selected" if m.selected else ""}" data-poi-id="{html.escape(m.poi_id)}">',
        f"<title>{tooltip}</title>",
        f'<circle cx="{m.x:.2f}" cy="{m.y:.2f}" r="{_POI_RADIUS}"'
        f' fill="{_POI_COLOR}" fill-opacity="0.85" stroke="#fff" stroke-width="3"/>',
    ]
    if m.selected:
        parts.append(
            f'<circle class="ring" cx="{m.x:.2f}" cy="{m.y:.2f}" r="{_SELECTED_RADIUS}"'
            f' fill="none" stroke="{_SELECTED_RING}" stroke-width="3.5" stroke-dasharray="2 4"/>'
        )
        parts.append(
            f'<text x="{m.x + _SELECTED_RADIUS + 8:.2f}" y="{m.y:.2f}" fill="#f5e6b8"'
            f' font-size="34" dominant-baseline="middle">{html.escape(p.title)}</text>'
        )
    parts.append("</g>")
    return "".join(parts)


def render_scene_svg(view: ViewModel) -> str:
    """Return the solar-system scene as a bare <svg> element.

    Draw order: sun, orbit path, POI markers (already in z-order), then the
    moving planet marker on top. Without an orbit only the sun is drawn.
    """
    body: list[str] = [
        f'<circle cx="0" cy="0" r="{_SUN_RADIUS * 1.6}" fill="{_SUN_COLOR}" fill-opacity="0.12"/>',
        f'<circle cx="0" cy="0" r="{_SUN_RADIUS}" fill="{_SUN_COLOR}"/>',
    ]
    if view.orbit_path:
        body.append(
            f'<path d="{_orbit_path_d(view.orbit_path)}" fill="none"'
            f' stroke="{_ORBIT_COLOR}" stroke-width="1.6" vector-effect="non-scaling-stroke"/>'
        )
    body.extend(_poi_marker_svg(m) for m in view.poi_markers)
    if view.marker is not None:
        mx, my = view.marker.x, view.marker.y
        body.append(
            f'<g class="planet" transform="translate({mx:.2f}, {my:.2f})">'
            f'<circle r="{_EARTH_RADIUS * 1.8}" fill="{_EARTH_COLOR}" fill-opacity="0.25"/>'
            f'<circle r="{_EARTH_RADIUS}" fill="{_EARTH_COLOR}" stroke="#fff" stroke-width="2"/>'
            "</g>"
        )
    inner = "\n    ".join(body)
    return (
        f'<svg id="scene" xmlns="http://www.w3.org/2000/svg"'
        f' viewBox="{-MAX_COORD} {-MAX_COORD} {MAX_COORD * 2} {MAX_COORD * 2}"'
        f' preserveAspectRatio="xMidYMid meet">\n    {inner}\n</svg>'
    )


def render_scene_html(view: ViewModel, height_px: int = 640) -> str:
    """Self-contained HTML page around ``render_scene_svg`` with hover styling."""
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
html, body {{ width: 100%; height: {height_px}px; background: {_BG}; overflow: hidden; }}
svg#scene {{ width: 100%; height: 100%; display: block; }}
.poi {{ cursor: pointer; }}
.poi:hover circle {{ stroke: {_GOLD}; }}
.poi .ring {{ transform-box: fill-box; transform-origin: center; animation: spin 12s linear infinite; }}
.planet {{ transition: transform 240ms ease; }}
@keyframes spin {{ to {{ transform: rotate(360deg); }} }}
</style>
</head>
<body>
{render_scene_svg(view)}
</body>
</html>"""


def render_rail_html(rail: RailVisualState) -> str:
    """The day rail strip: a translated flex track of chips with POI dots.

    ``transition_ms`` is 0 for instant re-positioning (long-jump pre-position,
    resize, snap-back) and the slide duration otherwise.
    """
    transition = f"transform {rail.transition_ms}ms ease" if rail.transition_ms else "none"
    chips: list[str] = []
    for chip in rail.chips:
        cls = "chip"
        if chip.active:
            cls += " active"
        if chip.has_poi:
            cls += " has"
        label = f"Day {chip.key}{' (has memory)' if chip.has_poi else ''}"
        chips.append(
            f'<div class="{cls}" style="width:{rail.item_width:.1f}px" role="button"'
            f' aria-pressed="{str(chip.active).lower()}" aria-label="{label}"'
            f' data-has-poi="{1 if chip.has_poi else 0}">'
            f'<span class="label">{chip.key}</span>'
            f'{"<span class=dot></span>" if chip.has_poi else ""}</div>'
        )
    return f"""<div class="rail-wrap" style="position:relative;overflow:hidden;height:56px;">
<style>
.rail-wrap .chip {{ display:flex; align-items:center; justify-content:center; position:relative;
  height:70%; color:#8899bb; font-size:0.9rem; }}
.rail-wrap .chip.active {{ color:#f5e6b8; font-weight:600; }}
.rail-wrap .chip .dot {{ position:absolute; bottom:2px; width:6px; height:6px; border-radius:3px;
  background:{_POI_COLOR}; }}
.rail-wrap .center-band {{ position:absolute; left:50%; top:0; bottom:0; width:{rail.item_width:.1f}px;
  transform:translateX(-50%); border:1px solid rgba(201,169,110,0.45); border-radius:8px; }}
</style>
<div class="center-band"></div>
<div class="strip" style="display:flex;align-items:center;height:100%;width:{rail.strip_width:.1f}px;
  transform:translateX({rail.translate_x:.1f}px);transition:{transition};will-change:transform;">
{"".join(chips)}
</div>
</div>"""


def render_year_bar_html(state: YearProgressState, cutoff_title: str = "Year boundary approaching") -> str:
    """The padded multi-year track with ticks, thumb, centre chip, and year-end cue."""
    ticks = "".join(
        f'<div class="tick" style="left:{tick.x}px" title="{tick.year}"></div>' for tick in state.ticks
    )
    return f"""<div class="year-bar" style="position:relative;width:{state.width}px;height:54px;margin:0 auto;">
<style>
.year-bar .track {{ position:absolute; left:0; right:0; top:26px; height:2px; background:rgba(255,255,255,0.2); }}
.year-bar .tick {{ position:absolute; top:20px; width:1px; height:14px; background:{_GOLD}; }}
.year-bar .thumb {{ position:absolute; top:21px; width:12px; height:12px; margin-left:-6px; border-radius:6px;
  background:{_EARTH_COLOR}; transition:left 240ms ease; }}
.year-bar .chip {{ position:absolute; left:50%; top:-4px; transform:translateX(-50%); text-align:center;
  color:#f5e6b8; font-size:0.95rem; line-height:1.1; }}
.year-bar .chip small {{ color:#8899bb; font-size:0.7rem; }}
.year-bar .cutoff {{ position:absolute; right:0; top:16px; width:4px; height:22px; background:#ff9966;
  border-radius:2px; transition:opacity 300ms; }}
</style>
<div class="track"></div>
{ticks}
<div class="thumb" style="left:{state.thumb_x}px"></div>
<div class="chip">{state.year}<br><small>{state.day_of_year}/{state.days_in_year}</small></div>
<div class="cutoff" style="opacity:{1 if state.cutoff_visible else 0}" title="{html.escape(cutoff_title)}"></div>
</div>"""
