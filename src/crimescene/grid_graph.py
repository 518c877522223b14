"""4-connected graph over the walkable cells of a WalkabilityGrid."""

from __future__ import annotations

import logging

from .graph import Graph, GraphNode, grid_edge, grid_node
from .grid import WalkabilityGrid

logger = logging.getLogger(__name__)

# right, down, left, up
DIRECTIONS = ((1, 0), (0, 1), (-1, 0), (0, -1))


def build_grid_graph(grid: WalkabilityGrid) -> Graph[GraphNode]:
    """
    One node per walkable cell (id = y * grid_width + x) and a weight-1.0
    edge between every pair of 4-adjacent walkable cells.
    """
    g: Graph[GraphNode] = Graph()
    gw = grid.width
    for y in range(grid.height):
        for x in range(gw):
            if grid.walkable[y, x]:
                g.add_node(grid_node(x, y, gw))

    for node in g.nodes():
        for dx, dy in DIRECTIONS[:2]:        # right/down covers every pair once
            nx_, ny = node.x + dx, node.y + dy
            if grid.is_walkable(nx_, ny):
                g.add_edge(node, g.get_node(ny * gw + nx_), grid_edge(1.0))

    logger.debug("grid graph: %d nodes, %d edges", len(g), g.number_of_edges())
    return g
