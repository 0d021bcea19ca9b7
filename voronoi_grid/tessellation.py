"""
Clipped Voronoi Tessellation
============================

Positions  ->  Delaunay triangulation  ->  dual Voronoi cells  ->  clip to
the working rectangle  ->  one polygon per item.

Four guard sites are placed far outside the rectangle before triangulating.
Every real site is then strictly inside the convex hull, so its Voronoi cell
is bounded and equals the polygon of circumcenters of its incident
triangles, taken in angular order around the site. The guards sit at least
twice the rectangle diagonal away, farther than any real site can be from
a point of the rectangle, so they never claim area inside it. Clipping the
bounded cells to the rectangle yields an exact partition.

A site that cannot produce a proper polygon gets no Cell: one lying within
MERGE_TOLERANCE of an earlier site (its neighbour covers the area instead),
one with a non-finite circumcenter, or one whose clip is empty or has zero
area. The other cells are unaffected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import Delaunay, QhullError, cKDTree
from shapely.geometry import Polygon, box
from shapely.geometry.polygon import orient

from .catalog import Item
from .config import LayoutParams
from .state import SimulationState

log = logging.getLogger(__name__)

GUARD_MARGIN = 3.0      # guard distance in units of max(W, H)
MIN_CELL_AREA = 1e-9
MERGE_TOLERANCE = 1e-6  # site merge distance in units of max(W, H)


@dataclass(frozen=True)
class Cell:
    item_id: str
    item: Item
    polygon: Tuple[Tuple[float, float], ...]   # counter-clockwise, not closed
    relevance: float
    center: Tuple[float, float]

    @property
    def area(self) -> float:
        """Shoelace area of the polygon."""
        pts = np.asarray(self.polygon)
        x, y = pts[:, 0], pts[:, 1]
        return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))

    def svg_path(self, precision: int = 3) -> str:
        """Polygon as an SVG path string (``M x,y L x,y ... Z``)."""
        fmt = f"{{:.{precision}f}},{{:.{precision}f}}"
        coords = [fmt.format(x, y) for x, y in self.polygon]
        return "M" + "L".join(coords) + "Z"

    def to_dict(self) -> dict:
        return {"item_id": self.item_id,
                "polygon": [list(v) for v in self.polygon],
                "relevance": self.relevance,
                "center": list(self.center)}


# =============================================================================
# VORONOI FROM DELAUNAY
# =============================================================================

def circumcenters(triangles: np.ndarray) -> np.ndarray:
    """Circumcenters of an (M, 3, 2) array of triangles; NaN for flat ones."""
    a, b, c = triangles[:, 0], triangles[:, 1], triangles[:, 2]
    ax, ay = a[:, 0], a[:, 1]
    bx, by = b[:, 0], b[:, 1]
    cx, cy = c[:, 0], c[:, 1]
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    a2, b2, c2 = ax*ax + ay*ay, bx*bx + by*by, cx*cx + cy*cy
    with np.errstate(divide="ignore", invalid="ignore"):
        ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
        uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return np.column_stack([ux, uy])


def guard_sites(width: float, height: float) -> np.ndarray:
    m = GUARD_MARGIN * max(width, height)
    return np.array([[-m, -m], [width + m, -m],
                     [width + m, height + m], [-m, height + m]])


def coincident_sites(sites: np.ndarray, tol: float) -> np.ndarray:
    """Mask of sites lying within ``tol`` of an earlier, unmasked site."""
    merged = np.zeros(len(sites), dtype=bool)
    if len(sites) < 2:
        return merged
    tree = cKDTree(sites)
    # pairs come as (i, j) with i < j; sorting settles i before it masks j
    for i, j in sorted(tree.query_pairs(tol)):
        if not merged[i]:
            merged[j] = True
    return merged


def voronoi_regions(sites: np.ndarray, width: float,
                    height: float) -> List[Optional[np.ndarray]]:
    """Unclipped Voronoi polygon of every site, or None where undefined."""
    n = len(sites)
    if n == 0:
        return []
    regions: List[Optional[np.ndarray]] = [None] * n

    merged = coincident_sites(sites, MERGE_TOLERANCE * max(width, height))
    if merged.any():
        log.debug("merged %d near-coincident sites", int(merged.sum()))
    kept = np.flatnonzero(~merged)
    m = len(kept)

    pts = np.vstack([sites[kept], guard_sites(width, height)])
    try:
        tri = Delaunay(pts)
    except (QhullError, ValueError) as exc:
        log.warning("Delaunay triangulation failed for %d sites: %s", n, exc)
        return regions

    centers = circumcenters(pts[tri.simplices])
    incident: List[List[int]] = [[] for _ in range(m)]
    for s, simplex in enumerate(tri.simplices):
        for v in simplex:
            if v < m:
                incident[v].append(s)

    for k, i in enumerate(kept):
        if len(incident[k]) < 3:
            continue
        verts = centers[incident[k]]
        if not np.all(np.isfinite(verts)):
            continue
        angles = np.arctan2(verts[:, 1] - sites[i, 1], verts[:, 0] - sites[i, 0])
        regions[i] = verts[np.argsort(angles, kind="stable")]
    return regions


# =============================================================================
# CELLS
# =============================================================================

def clip_region(region: np.ndarray, frame: Polygon) -> Optional[Polygon]:
    poly = Polygon(region)
    if not poly.is_valid:
        return None
    clipped = poly.intersection(frame)
    if clipped.is_empty or clipped.geom_type != "Polygon":
        return None
    if clipped.area <= MIN_CELL_AREA:
        return None
    return orient(clipped, sign=1.0)


def normalized_relevance(r: float, p: LayoutParams) -> float:
    span = p.radius_span
    if span <= 0:
        return 0.0
    return float(min(max((r - p.base_radius) / span, 0.0), 1.0))


def build_cells(state: SimulationState, items: Sequence[Item],
                p: LayoutParams) -> List[Cell]:
    """One Cell per item whose clipped Voronoi polygon is well formed."""
    frame = box(0.0, 0.0, p.width, p.height)
    regions = voronoi_regions(state.positions(), p.width, p.height)

    cells = []
    for i, region in enumerate(regions):
        clipped = None if region is None else clip_region(region, frame)
        if clipped is None:
            log.debug("no cell for item %s at (%.3f, %.3f)",
                      state.ids[i], state.x[i], state.y[i])
            continue
        polygon = tuple((float(x), float(y)) for x, y in clipped.exterior.coords[:-1])
        cells.append(Cell(
            item_id=state.ids[i],
            item=items[i],
            polygon=polygon,
            relevance=normalized_relevance(state.r[i], p),
            center=(float(state.x[i]), float(state.y[i])),
        ))
    return cells
