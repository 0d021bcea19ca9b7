"""Tests for the clipped Voronoi tessellation."""

import numpy as np
import pytest
from shapely.geometry import Point, Polygon

from voronoi_grid.catalog import Item
from voronoi_grid.config import LayoutParams
from voronoi_grid.state import SimulationState
from voronoi_grid.tessellation import (
    Cell, build_cells, circumcenters, coincident_sites, normalized_relevance,
    voronoi_regions,
)

W, H = 1200.0, 800.0


def make_state(xy, radii=None):
    xy = np.asarray(xy, dtype=float).reshape(-1, 2)
    n = len(xy)
    r = np.full(n, 60.0) if radii is None else np.asarray(radii, dtype=float)
    return SimulationState([f"i{k}" for k in range(n)], xy[:, 0], xy[:, 1], r, r.copy())


def make_items(n):
    return [Item(f"i{k}", f"Item {k}", "cat") for k in range(n)]


def tessellate(xy, radii=None, p=None):
    p = p or LayoutParams(width=W, height=H)
    state = make_state(xy, radii)
    return build_cells(state, make_items(state.N), p)


def max_pairwise_overlap(cells):
    polys = [Polygon(c.polygon) for c in cells]
    worst = 0.0
    for i in range(len(polys)):
        for j in range(i + 1, len(polys)):
            worst = max(worst, polys[i].intersection(polys[j]).area)
    return worst


class TestCircumcenters:

    def test_right_triangle(self):
        tri = np.array([[[0.0, 0.0], [2.0, 0.0], [0.0, 2.0]]])
        assert circumcenters(tri)[0].tolist() == pytest.approx([1.0, 1.0])

    def test_flat_triangle_is_not_finite(self):
        tri = np.array([[[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]]])
        assert not np.all(np.isfinite(circumcenters(tri)))


class TestPartition:

    def setup_method(self):
        rng = np.random.default_rng(42)
        self.xy = np.column_stack([rng.uniform(0, W, 30), rng.uniform(0, H, 30)])
        self.cells = tessellate(self.xy)

    def test_one_cell_per_point(self):
        assert len(self.cells) == 30
        assert [c.item_id for c in self.cells] == [f"i{k}" for k in range(30)]

    def test_areas_sum_to_rectangle(self):
        total = sum(c.area for c in self.cells)
        assert total == pytest.approx(W * H, rel=1e-9)

    def test_interiors_pairwise_disjoint(self):
        polys = [Polygon(c.polygon) for c in self.cells]
        for i in range(len(polys)):
            for j in range(i + 1, len(polys)):
                assert polys[i].intersection(polys[j]).area < 1e-6

    def test_vertices_inside_rectangle(self):
        for cell in self.cells:
            pts = np.asarray(cell.polygon)
            assert np.all(pts[:, 0] >= -1e-9) and np.all(pts[:, 0] <= W + 1e-9)
            assert np.all(pts[:, 1] >= -1e-9) and np.all(pts[:, 1] <= H + 1e-9)

    def test_polygons_counter_clockwise(self):
        assert all(c.area > 0 for c in self.cells)

    def test_each_cell_contains_its_site(self):
        for cell in self.cells:
            assert Polygon(cell.polygon).buffer(1e-6).contains(Point(cell.center))

    def test_vertices_nearest_to_own_site(self):
        for k, cell in enumerate(self.cells):
            for v in cell.polygon:
                d = np.hypot(self.xy[:, 0] - v[0], self.xy[:, 1] - v[1])
                assert d[k] <= d.min() + 1e-6

    def test_deterministic(self):
        again = tessellate(self.xy.copy())
        assert [c.polygon for c in again] == [c.polygon for c in self.cells]


class TestSmallAndDegenerate:

    def test_empty(self):
        assert tessellate(np.zeros((0, 2))) == []
        assert voronoi_regions(np.zeros((0, 2)), W, H) == []

    def test_single_point_owns_rectangle(self):
        cells = tessellate([[300.0, 200.0]])
        assert len(cells) == 1
        assert cells[0].area == pytest.approx(W * H)

    def test_two_corner_points_split_on_bisector(self):
        cells = tessellate([[0.0, 0.0], [W, H]])
        assert len(cells) == 2
        assert cells[0].area == pytest.approx(W * H / 2)
        assert cells[1].area == pytest.approx(W * H / 2)
        a, b = np.array([0.0, 0.0]), np.array([W, H])
        for v in cells[0].polygon:
            assert np.linalg.norm(v - a) <= np.linalg.norm(v - b) + 1e-6

    def test_collinear_points(self):
        cells = tessellate([[100.0, 400.0], [600.0, 400.0], [1100.0, 400.0]])
        assert len(cells) == 3
        assert [c.area for c in cells] == pytest.approx([350 * H, 500 * H, 350 * H])

    def test_duplicate_points_drop_one_cell_keep_cover(self):
        cells = tessellate([[300.0, 300.0], [300.0, 300.0], [900.0, 500.0]])
        assert len(cells) == 2
        assert sum(c.area for c in cells) == pytest.approx(W * H)

    def test_near_duplicates_merge_into_earlier_site(self):
        rng = np.random.default_rng(3)
        xy = np.column_stack([rng.uniform(0, W, 12), rng.uniform(0, H, 12)])
        xy[1] = xy[0] + 1e-9
        xy[3] = xy[2] + [1e-9, -1e-9]
        cells = tessellate(xy)
        ids = [c.item_id for c in cells]
        assert len(cells) == 10
        assert "i0" in ids and "i2" in ids
        assert "i1" not in ids and "i3" not in ids
        assert sum(c.area for c in cells) == pytest.approx(W * H, rel=1e-9)
        assert max_pairwise_overlap(cells) < 1e-6

    def test_tight_cluster_keeps_partition(self):
        rng = np.random.default_rng(5)
        cluster = 600.0 + rng.uniform(0.0, 1e-4, size=(12, 2))
        others = np.column_stack([rng.uniform(0, W, 8), rng.uniform(0, H, 8)])
        cells = tessellate(np.vstack([cluster, others]))
        assert len(cells) == 9
        assert cells[0].item_id == "i0"
        assert sum(c.area for c in cells) == pytest.approx(W * H, rel=1e-9)
        assert max_pairwise_overlap(cells) < 1e-6

    def test_coincident_sites_mask(self):
        sites = np.array([[0.0, 0.0], [0.5, 0.0], [1.0, 0.0], [5.0, 5.0]])
        # 1 is masked by 0, so 2 is only compared with kept sites and stays
        assert coincident_sites(sites, 0.6).tolist() == [False, True, False, False]

    def test_points_on_boundary_keep_cells(self):
        cells = tessellate([[0.0, 400.0], [W, 400.0], [600.0, 0.0], [600.0, H]])
        assert len(cells) == 4
        assert sum(c.area for c in cells) == pytest.approx(W * H)

    def test_cocircular_points(self):
        cells = tessellate([[400.0, 200.0], [800.0, 200.0], [800.0, 600.0], [400.0, 600.0]])
        assert len(cells) == 4
        assert [c.area for c in cells] == pytest.approx([W * H / 4] * 4)


class TestCellData:

    def test_relevance_normalized_from_radius(self):
        cells = tessellate([[300.0, 400.0], [900.0, 400.0]], radii=[60.0, 150.0])
        assert cells[0].relevance == 0.0
        assert cells[1].relevance == pytest.approx(0.75)

    def test_relevance_clamped(self):
        p = LayoutParams()
        assert normalized_relevance(10.0, p) == 0.0
        assert normalized_relevance(500.0, p) == 1.0

    def test_relevance_zero_when_radius_range_empty(self):
        p = LayoutParams(base_radius=50.0, max_radius=50.0)
        assert normalized_relevance(50.0, p) == 0.0

    def test_center_and_item(self):
        cells = tessellate([[300.0, 400.0]])
        assert cells[0].center == (300.0, 400.0)
        assert cells[0].item.title == "Item 0"

    def test_svg_path(self):
        cell = Cell("x", Item("x", "X", "c"), ((0.0, 0.0), (10.0, 0.0), (10.0, 5.0)),
                    0.0, (5.0, 2.0))
        assert cell.svg_path(precision=1) == "M0.0,0.0L10.0,0.0L10.0,5.0Z"

    def test_cell_is_immutable(self):
        cells = tessellate([[300.0, 400.0]])
        with pytest.raises(AttributeError):
            cells[0].relevance = 1.0
