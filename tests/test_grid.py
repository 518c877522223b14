import numpy as np
import pytest

from crimescene.grid import GridConfig, build_walkability_grid
from crimescene.grid_graph import build_grid_graph


def _floor(H=40, W=40, value=255):
    return np.full((H, W, 3), value, dtype=np.uint8)


class TestWalkabilityGrid:

    def test_all_light_image(self):
        grid = build_walkability_grid(_floor())
        assert (grid.width, grid.height) == (4, 4)
        assert grid.walkable.all()
        assert grid.walkable_count() == 16

    def test_dark_centre_blocks_cell(self):
        img = _floor()
        img[15, 15] = 0                     # centre of cell (1, 1)
        img[0:5, 30:40] = 0                 # corner of cell (3, 0), not its centre
        grid = build_walkability_grid(img)
        assert not grid.is_walkable(1, 1)
        assert grid.is_walkable(3, 0)
        assert grid.walkable_count() == 15

    @pytest.mark.parametrize("value, expected", [(200, False), (201, True)])
    def test_threshold_is_strict(self, value, expected):
        grid = build_walkability_grid(_floor(20, 20, value))
        assert bool(grid.walkable.all()) is expected

    def test_brightness_is_channel_mean(self):
        img = _floor(10, 10)
        img[5, 5] = (255, 255, 100)         # mean 203
        assert build_walkability_grid(img).is_walkable(0, 0)
        img[5, 5] = (255, 255, 90)          # mean 200
        assert not build_walkability_grid(img).is_walkable(0, 0)

    def test_partial_cells_dropped(self):
        grid = build_walkability_grid(_floor(45, 47))
        assert (grid.width, grid.height) == (4, 4)

    def test_custom_cell_size(self):
        grid = build_walkability_grid(_floor(40, 40), GridConfig(node_size=5))
        assert (grid.width, grid.height) == (8, 8)
        assert grid.cell_center(1, 2) == (7, 12)
        assert grid.to_cell(12, 7) == (2, 1)

    def test_image_smaller_than_cell(self):
        grid = build_walkability_grid(_floor(5, 5))
        assert (grid.width, grid.height) == (0, 0)
        assert not grid.is_walkable(0, 0)

    def test_out_of_bounds_not_walkable(self):
        grid = build_walkability_grid(_floor())
        assert not grid.is_walkable(-1, 0)
        assert not grid.is_walkable(4, 0)

    def test_bad_cell_size(self):
        with pytest.raises(ValueError):
            GridConfig(node_size=0)


class TestGridGraph:

    def test_open_grid(self):
        g = build_grid_graph(build_walkability_grid(_floor()))
        assert len(g) == 16
        assert g.number_of_edges() == 24        # 2 * 4 * 3
        node = g.get_node(1 * 4 + 2)
        assert (node.x, node.y) == (2, 1)
        assert all(e.weight == 1.0 for e in g.edges())

    def test_interior_and_corner_degree(self):
        g = build_grid_graph(build_walkability_grid(_floor()))
        assert len(g.neighbors(g.get_node(0))) == 2
        assert len(g.neighbors(g.get_node(5))) == 4

    def test_blocked_cell_has_no_node(self):
        img = _floor()
        img[15, 15] = 0
        g = build_grid_graph(build_walkability_grid(img))
        assert g.get_node(5) is None
        assert len(g) == 15
        assert g.number_of_edges() == 20
        assert all(n.id != 5 for n in g.neighbors(g.get_node(1)))

    def test_no_diagonal_edges(self):
        g = build_grid_graph(build_walkability_grid(_floor()))
        assert g.get_edge(g.get_node(0), g.get_node(5)) is None
