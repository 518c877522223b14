import networkx as nx
import numpy as np
import pytest

from crimescene.grid import GridConfig, build_walkability_grid
from crimescene.grid_graph import build_grid_graph
from crimescene.pathfinder import (
    PathStatus, Pathfinder, PathfinderConfig, astar, find_path, nearest_walkable_cell,
)


def _floor(H=40, W=40):
    return np.full((H, W, 3), 255, dtype=np.uint8)


def _block(img, cx, cy, size=10):
    img[cy * size:(cy + 1) * size, cx * size:(cx + 1) * size] = 0


def _maze(seed=3, n=12, density=0.3):
    rng = np.random.RandomState(seed)
    img = _floor(n * 10, n * 10)
    for cy in range(n):
        for cx in range(n):
            if rng.rand() < density:
                _block(img, cx, cy)
    img[0:10, 0:10] = 255
    img[-10:, -10:] = 255
    return img


def _assert_contiguous(cells, grid):
    for (x0, y0), (x1, y1) in zip(cells, cells[1:]):
        assert abs(x0 - x1) + abs(y0 - y1) == 1
    assert all(grid.is_walkable(x, y) for x, y in cells)


class TestFindPath:

    def test_open_square(self):
        res = find_path(_floor(), (5, 5), (35, 35))
        assert res.found
        assert res.cells[0] == (0, 0)
        assert res.cells[-1] == (3, 3)
        assert res.length == 6
        assert len(res.cells) == 7
        assert res.cost == pytest.approx(6.0)
        assert res.node_size == 10

    @pytest.mark.parametrize("start, end", [
        ((5, 5), (35, 5)),
        ((35, 5), (5, 35)),
        ((15, 25), (15, 25)),
        ((0, 39), (39, 0)),
    ])
    def test_manhattan_optimal_on_open_grid(self, start, end):
        res = find_path(_floor(), start, end)
        sx, sy = start[0] // 10, start[1] // 10
        ex, ey = end[0] // 10, end[1] // 10
        assert res.length == abs(sx - ex) + abs(sy - ey)
        _assert_contiguous(res.cells, build_walkability_grid(_floor()))

    def test_same_cell(self):
        res = find_path(_floor(), (12, 12), (18, 18))
        assert res.found
        assert res.cells == [(1, 1)]
        assert res.length == 0

    def test_wall_forces_detour(self):
        img = _floor()
        for cy in range(3):
            _block(img, 1, cy)                  # wall in column 1, gap at the bottom
        res = find_path(img, (5, 5), (25, 5))
        assert res.found
        assert res.length == 8
        assert (1, 3) in res.cells

    def test_disconnected_components(self):
        img = _floor()
        for cy in range(4):
            _block(img, 2, cy)
        res = find_path(img, (5, 5), (35, 35))
        assert not res.found
        assert res.status is PathStatus.UNREACHABLE
        assert res.cells == []
        assert res.length == 0
        assert res.expanded == 8

    def test_no_walkable_cells(self):
        res = find_path(np.zeros((40, 40, 3), dtype=np.uint8), (5, 5), (35, 35))
        assert res.status is PathStatus.NO_WALKABLE_CELL
        assert res.cells == []

    def test_blocked_start_snaps_to_nearest(self):
        img = _floor()
        _block(img, 0, 0)
        res = find_path(img, (5, 5), (35, 5))
        assert res.found
        assert res.start_cell != (0, 0)
        assert res.cells[0] == res.start_cell
        assert abs(res.start_cell[0]) <= 1 and abs(res.start_cell[1]) <= 1

    def test_points_outside_image_snap_inside(self):
        res = find_path(_floor(), (-5, -5), (45, 45))
        assert res.found
        assert res.cells[0] == (0, 0)
        assert res.cells[-1] == (3, 3)

    def test_pixel_points_are_cell_centres(self):
        res = find_path(_floor(), (5, 5), (35, 5))
        assert res.pixel_points() == [(5, 5), (15, 5), (25, 5), (35, 5)]

    def test_custom_cell_size(self):
        res = find_path(_floor(), (2, 2), (38, 2), grid_config=GridConfig(node_size=5))
        assert res.cells[-1] == (7, 0)
        assert res.length == 7


class TestOptimality:

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_matches_networkx_shortest_path(self, seed):
        img = _maze(seed)
        grid = build_walkability_grid(img)
        graph = build_grid_graph(grid)
        res = Pathfinder().search(grid, (5, 5), (115, 115), graph=graph)

        G = graph.to_networkx()
        src, dst = 0, 11 * grid.width + 11
        if nx.has_path(G, src, dst):
            assert res.found
            assert res.length == nx.shortest_path_length(G, src, dst)
            _assert_contiguous(res.cells, grid)
        else:
            assert res.status is PathStatus.UNREACHABLE

    def test_astar_direct(self):
        grid = build_walkability_grid(_floor())
        g = build_grid_graph(grid)
        path, cost, expanded = astar(g, g.get_node(0), g.get_node(15))
        assert [n.id for n in path][0] == 0
        assert [n.id for n in path][-1] == 15
        assert cost == pytest.approx(6.0)
        assert 0 < expanded <= 16


class TestNearestWalkable:

    def _grid(self, walkable_cells, n=5):
        img = np.zeros((n * 10, n * 10, 3), dtype=np.uint8)
        for x, y in walkable_cells:
            img[y * 10:(y + 1) * 10, x * 10:(x + 1) * 10] = 255
        return build_walkability_grid(img)

    def test_walkable_cell_returned_as_is(self):
        grid = self._grid([(2, 2)])
        assert nearest_walkable_cell(grid, 2, 2) == (2, 2)

    def test_ring_scan_order(self):
        grid = self._grid([(1, 3), (3, 1)])
        # dx = -1 column is scanned first
        assert nearest_walkable_cell(grid, 2, 2) == (1, 3)

    def test_closer_ring_wins(self):
        grid = self._grid([(0, 0), (3, 2)])
        assert nearest_walkable_cell(grid, 2, 2) == (3, 2)

    def test_radius_bound(self):
        grid = self._grid([(4, 4)])
        assert nearest_walkable_cell(grid, 2, 2, max_radius=1) is None
        assert nearest_walkable_cell(grid, 2, 2, max_radius=2) == (4, 4)

    def test_search_radius_config(self):
        img = np.zeros((50, 50, 3), dtype=np.uint8)
        img[40:50, 40:50] = 255
        res = find_path(img, (25, 25), (45, 45), config=PathfinderConfig(search_radius=1))
        assert res.status is PathStatus.NO_WALKABLE_CELL
        res = find_path(img, (25, 25), (45, 45))
        assert res.found and res.cells == [(4, 4)]

    def test_fresh_state_per_call(self):
        finder = Pathfinder()
        open_floor = _floor()
        walled = _floor()
        for cy in range(4):
            _block(walled, 2, cy)
        assert finder.find_path(walled, (5, 5), (35, 35)).status is PathStatus.UNREACHABLE
        assert finder.find_path(open_floor, (5, 5), (35, 35)).found
