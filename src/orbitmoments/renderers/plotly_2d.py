"""Plotly 2D interactive orbit renderer.

Uses the rescaled orbit coordinates from orbitmoments.orbit directly.
Supports wheel zoom and drag panning; POI popups are shown as hover text.
"""

import html

import plotly.graph_objects as go

from orbitmoments.models import ViewModel
from orbitmoments.orbit import MAX_COORD

_BG = "#0d1b35"
_SUN_COLOR = "#FFD700"
_EARTH_COLOR = "#1e9fff"
_ORBIT_COLOR = "rgba(255,255,255,0.28)"
_POI_COLOR = "#e67aff"


def render_plotly_chart(view: ViewModel) -> go.Figure:
    """Render a ViewModel as a Plotly 2D interactive orbit chart.

    The sun sits at the origin. The orbit path, the POI markers of the
    displayed year and the marker for the selected date are overlaid.

    Args:
        view: Snapshot produced by Navigator.view().

    Returns:
        Plotly Figure object.
    """
    traces: list[go.Scatter] = [
        go.Scatter(
            x=[0.0],
            y=[0.0],
            mode="markers",
            marker=dict(size=36, color=_SUN_COLOR, line=dict(width=0)),
            hoverinfo="skip",
            name="sun",
        )
    ]

    if view.orbit_path:
        # Closed loop: repeat the first point
        xs = [x for x, _ in view.orbit_path] + [view.orbit_path[0][0]]
        ys = [y for _, y in view.orbit_path] + [view.orbit_path[0][1]]
        traces.append(
            go.Scatter(
                x=xs,
                y=ys,
                mode="lines",
                line=dict(color=_ORBIT_COLOR, width=1.5),
                hoverinfo="skip",
                name="orbit",
            )
        )

    if view.poi_markers:
        traces.append(
            go.Scatter(
                x=[m.x for m in view.poi_markers],
                y=[m.y for m in view.poi_markers],
                mode="markers",
                marker=dict(
                    size=[16 if m.selected else 10 for m in view.poi_markers],
                    color=_POI_COLOR,
                    opacity=0.9,
                    line=dict(color="#ffffff", width=[3 if m.selected else 1 for m in view.poi_markers]),
                ),
                customdata=[m.poi_id for m in view.poi_markers],
                hovertext=[
                    f"<b>{html.escape(m.popup.title)}</b><br>{m.popup.date_label}"
                    + (f"<br>{html.escape(m.popup.description)}" if m.popup.description else "")
                    for m in view.poi_markers
                ],
                hoverinfo="text",
                name="moments",
            )
        )

    if view.marker is not None:
        traces.append(
            go.Scatter(
                x=[view.marker.x],
                y=[view.marker.y],
                mode="markers",
                marker=dict(size=14, color=_EARTH_COLOR, line=dict(color="#ffffff", width=2)),
                hovertext=[view.selected_date.isoformat()],
                hoverinfo="text",
                name="planet",
            )
        )

    fig = go.Figure(data=traces)

    # Square data range with scaleanchor keeps the orbit circular
    limit = MAX_COORD * 1.05
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=640,
        height=640,
        dragmode="pan",
        xaxis=dict(visible=False, range=[-limit, limit], autorange=False, fixedrange=False),
        yaxis=dict(
            visible=False,
            range=[limit, -limit],  # SVG-style y-down, same as the HTML renderer
            autorange=False,
            fixedrange=False,
            scaleanchor="x",
        ),
    )

    # st.plotly_chart call also requires config={"scrollZoom": True}
    fig._config = {"scrollZoom": True, "displayModeBar": False}  # type: ignore[attr-defined]

    return fig
