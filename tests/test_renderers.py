# tests/test_renderers.py
from __future__ import annotations

from datetime import date

import plotly.graph_objects as go
from matplotlib.figure import Figure

from orbitmoments import snapshot
from orbitmoments.navigation import Navigator
from orbitmoments.renderers.plotly_2d import render_plotly_chart
from orbitmoments.renderers.static import render_static_chart, save_static_chart
from orbitmoments.renderers.svg_2d import (
    render_rail_html,
    render_scene_html,
    render_scene_svg,
    render_year_bar_html,
)

from conftest import circular_orbit


def test_scene_svg_draws_orbit_markers_and_planet(nav_with_orbit: Navigator) -> None:
    view = nav_with_orbit.view()
    svg = render_scene_svg(view)
    assert svg.startswith('<svg id="scene"')
    assert 'viewBox="-1000 -1000 2000 2000"' in svg
    assert svg.count('class="poi') == len(view.poi_markers)
    assert 'class="poi selected" data-poi-id="poi3"' in svg
    assert 'class="planet"' in svg
    # Selected marker comes after the others
    assert svg.index('data-poi-id="poi3"') > svg.index('data-poi-id="poi2"')


def test_scene_without_orbit_shows_only_sun(nav: Navigator) -> None:
    svg = render_scene_svg(nav.view())
    assert "<path" not in svg
    assert 'class="planet"' not in svg
    assert 'class="poi' not in svg


def test_popup_text_is_escaped(nav_with_orbit: Navigator) -> None:
    html_page = render_scene_html(nav_with_orbit.view())
    assert "&quot;First&quot; Date" in html_page
    assert html_page.startswith("<!DOCTYPE html>")


def test_rail_html_reflects_visual_state(nav: Navigator) -> None:
    nav.rail.resize(2100)
    out = render_rail_html(nav.view().rail)
    assert out.count('class="chip') == 21
    assert 'class="chip active has"' in out
    assert "transition:none" in out
    nav.rail.step(1)
    out = render_rail_html(nav.rail.visual_state())
    assert "transition:transform 240ms ease" in out
    assert "translateX(-100.0px)" in out


def test_year_bar_html(nav: Navigator) -> None:
    state = nav.view().year_progress
    out = render_year_bar_html(state, cutoff_title="Soon")
    assert out.count('class="tick"') == 4
    assert f'left:{state.thumb_x}px' in out
    assert "opacity:0" in out
    nav.set_day_key("12-25")
    assert "opacity:1" in render_year_bar_html(nav.view().year_progress)


def test_plotly_chart(nav_with_orbit: Navigator) -> None:
    fig = render_plotly_chart(nav_with_orbit.view())
    assert isinstance(fig, go.Figure)
    names = [tr.name for tr in fig.data]
    assert names == ["sun", "orbit", "moments", "planet"]
    moments = fig.data[2]
    assert list(moments.customdata)[-1] == "poi3"
    assert len(fig.data[1].x) == 367  # closed loop


def test_plotly_hover_text_is_escaped(nav_with_orbit: Navigator) -> None:
    nav_with_orbit.on_saved(
        {"id": "x1", "date": "2025-03-03", "title": "<script>hi</script>", "description": "a & b"}
    )
    hover = list(render_plotly_chart(nav_with_orbit.view()).data[2].hovertext)
    assert any("&quot;First&quot; Date" in h for h in hover)
    assert any("<b>&lt;script&gt;hi&lt;/script&gt;</b>" in h and "a &amp; b" in h for h in hover)
    assert not any("<script>" in h for h in hover)


def test_static_chart(nav_with_orbit: Navigator, tmp_path) -> None:
    view = nav_with_orbit.view()
    fig = render_static_chart(view)
    assert isinstance(fig, Figure)
    out = save_static_chart(view, tmp_path / "orbit.png")
    assert out.exists()
    assert out.read_bytes()[:4] == b"\x89PNG"


def test_snapshot_cli(monkeypatch, tmp_path) -> None:
    for name in ("ORBIT_SOURCE", "RENDERER", "RAIL_VISIBLE_COUNT", "YEAR_END_THRESHOLD_DAYS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(snapshot, "compute_orbit_trajectory", lambda: circular_orbit())
    out = tmp_path / "snap.png"
    assert snapshot.main(["2025-01-20", "--source", "skyfield", "-o", str(out)]) == 0
    assert out.exists()


def test_snapshot_cli_rejects_bad_date(monkeypatch) -> None:
    monkeypatch.delenv("ORBIT_SOURCE", raising=False)
    assert snapshot.main(["yesterday"]) == 2


def test_snapshot_cli_without_orbit_fails(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("ORBIT_SOURCE", raising=False)

    def boom():
        raise OSError("kernel missing")

    monkeypatch.setattr(snapshot, "compute_orbit_trajectory", boom)
    assert snapshot.main(["2025-01-20", "--source", "skyfield", "-o", str(tmp_path / "x.png")]) == 1


def test_view_date_is_rendered_in_static_title(nav_with_orbit: Navigator) -> None:
    fig = render_static_chart(nav_with_orbit.view())
    assert fig.axes[0].get_title() == date(2025, 5, 18).isoformat()
