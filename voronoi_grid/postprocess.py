"""
Frame Plotting
==============

Draws a saved frame file as a matplotlib figure: one filled polygon per
cell, colored by relevance, with the item title at its site. Meant for
checking layouts offline, not as the product renderer.

Requirements:
    pip install matplotlib
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib
import matplotlib.pyplot as plt
from matplotlib.collections import PatchCollection
from matplotlib.patches import Polygon

from .frames import FrameData, load_frame

RELEVANT_LABEL_THRESHOLD = 0.1


def plot_frame(frame: FrameData, ax=None, cmap: str = "viridis"):
    """Plot the cells of ``frame``; returns the figure."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8 * frame.height / frame.width))
    else:
        fig = ax.figure

    patches = [Polygon(poly, closed=True) for poly in frame.polygons]
    pc = PatchCollection(patches, cmap=cmap, edgecolor='k', linewidth=0.6, alpha=0.85)
    pc.set_array(frame.relevance)
    pc.set_clim(0.0, 1.0)
    ax.add_collection(pc)

    for i in range(frame.n_cells):
        cx, cy = frame.centers[i]
        relevant = frame.relevance[i] > RELEVANT_LABEL_THRESHOLD
        ax.plot(cx, cy, 'o', color='white', ms=3, mec='k', mew=0.4)
        ax.text(cx, cy, frame.titles[i], ha='center', va='bottom',
                fontsize=9 if relevant else 6,
                fontweight='bold' if relevant else 'normal')

    ax.set_xlim(0, frame.width)
    ax.set_ylim(frame.height, 0)    # screen coordinates: y grows downward
    ax.set_aspect('equal')
    query = frame.query if frame.query else "(empty)"
    ax.set_title(f"tick {frame.tick}  |  query: {query}  |  {frame.n_cells} cells",
                 fontsize=10)
    fig.colorbar(pc, ax=ax, fraction=0.046, pad=0.04, label='relevance')
    return fig


def render_frame_file(input_path, output_path: Optional[str] = None,
                      dpi: int = 150) -> Path:
    """Render a frame JSON to PNG next to it (or to ``output_path``)."""
    matplotlib.use('Agg')
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path else input_path.with_suffix('.png')
    frame = load_frame(input_path)
    fig = plot_frame(frame)
    fig.savefig(output_path, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    return output_path
