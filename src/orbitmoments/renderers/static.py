"""Matplotlib static PNG renderer."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from orbitmoments.models import ViewModel
from orbitmoments.orbit import MAX_COORD

_ROOT = Path(__file__).parent.parent.parent.parent
_BG = "#0d1b35"


def render_static_chart(view: ViewModel, chart_size: int = 8) -> Figure:
    """Render a ViewModel as a static matplotlib image.

    Args:
        view: Snapshot produced by Navigator.view().
        chart_size: Output image size in inches.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(chart_size, chart_size))
    fig.patch.set_facecolor(_BG)
    ax.set_facecolor(_BG)

    ax.add_patch(plt.Circle((0, 0), 100, color="#FFD700", zorder=2))

    if view.orbit_path:
        path = np.array(view.orbit_path + view.orbit_path[:1])
        ax.plot(path[:, 0], path[:, 1], color="white", linewidth=0.8, alpha=0.3, zorder=1)

    if view.poi_markers:
        xs = np.array([m.x for m in view.poi_markers])
        ys = np.array([m.y for m in view.poi_markers])
        sizes = np.array([160 if m.selected else 60 for m in view.poi_markers])
        ax.scatter(xs, ys, s=sizes, color="#e67aff", edgecolors="white", linewidths=1, zorder=3)
        for m in view.poi_markers:
            if m.selected:
                ax.annotate(
                    m.popup.title,
                    (m.x, m.y),
                    xytext=(10, 0),
                    textcoords="offset points",
                    color="#f5e6b8",
                    fontsize=10,
                    va="center",
                )

    if view.marker is not None:
        ax.scatter(
            [view.marker.x], [view.marker.y], s=120, color="#1e9fff", edgecolors="white", zorder=4
        )

    ax.set_title(view.selected_date.isoformat(), color="#f5e6b8")
    ax.set_xlim(-MAX_COORD * 1.05, MAX_COORD * 1.05)
    # y grows downward in orbit coordinates
    ax.set_ylim(MAX_COORD * 1.05, -MAX_COORD * 1.05)
    ax.set_aspect("equal")
    ax.axis("off")

    return fig


def save_static_chart(view: ViewModel, output_path: Path | None = None) -> Path:
    """Save a ViewModel as a PNG file.

    Args:
        view: Snapshot produced by Navigator.view().
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        filename = f"orbit__{view.selected_date:%Y_%m_%d}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(view)
    fig.savefig(output_path, facecolor=_BG)
    plt.close(fig)
    return output_path
