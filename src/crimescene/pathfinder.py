"""
A* shortest path over a walkability grid graph.

    f(n) = g(n) + h(n)

g is the accumulated edge cost from the start cell, h the Euclidean
distance (in cells) to the goal. On a uniform-cost 4-connected grid h is
admissible and consistent, so the first time the goal is popped its path
is optimal.

Start/end pixels are mapped to cells by integer division by the cell size.
A point landing on a blocked cell is moved to the nearest walkable cell
found on growing square rings around it.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from .graph import Graph, GraphNode
from .grid import GridConfig, WalkabilityGrid, build_walkability_grid
from .grid_graph import build_grid_graph

logger = logging.getLogger(__name__)

Point = Tuple[int, int]


@dataclass
class PathfinderConfig:
    search_radius: Optional[int] = None   # Ring search bound; None = max grid dimension

    def __post_init__(self):
        if self.search_radius is not None and self.search_radius < 0:
            raise ValueError(f"search_radius must be >= 0, got {self.search_radius}")


class PathStatus(str, Enum):
    FOUND            = "found"
    UNREACHABLE      = "unreachable"        # both ends walkable, not connected
    NO_WALKABLE_CELL = "no_walkable_cell"   # start or end has no walkable cell nearby


@dataclass
class PathResult:
    cells:     List[Point]              # grid (x, y) from start to end; empty if none
    node_size: int
    status:    PathStatus
    cost:      float = 0.0
    expanded:  int = 0                  # nodes closed by the search
    start_cell: Optional[Point] = None
    end_cell:   Optional[Point] = None

    @property
    def found(self) -> bool:
        return self.status is PathStatus.FOUND

    @property
    def length(self) -> int:
        """Number of edges along the path."""
        return max(0, len(self.cells) - 1)

    def pixel_points(self) -> List[Point]:
        half = self.node_size // 2
        return [(x * self.node_size + half, y * self.node_size + half) for x, y in self.cells]


# ------------------------------------------------------------------  helpers

def euclidean(a: GraphNode, b: GraphNode) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def nearest_walkable_cell(
    grid:       WalkabilityGrid,
    x:          int,
    y:          int,
    max_radius: Optional[int] = None,
) -> Optional[Point]:
    """
    ``(x, y)`` itself when walkable, else the first walkable cell on the
    square rings of radius 1..max_radius around it. Rings are scanned with
    dx outer and dy inner, both ascending.
    """
    if grid.is_walkable(x, y):
        return x, y
    if max_radius is None:
        max_radius = max(grid.width, grid.height)

    for radius in range(1, max_radius + 1):
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                if abs(dx) != radius and abs(dy) != radius:
                    continue
                if grid.is_walkable(x + dx, y + dy):
                    return x + dx, y + dy
    return None


def _reconstruct(came_from: Dict[int, GraphNode], current: GraphNode) -> List[GraphNode]:
    path = [current]
    while current.id in came_from:
        current = came_from[current.id]
        path.append(current)
    path.reverse()
    return path


def astar(graph: Graph[GraphNode], start: GraphNode, goal: GraphNode) -> Tuple[List[GraphNode], float, int]:
    """
    Run A* between two nodes of ``graph``.

    Returns
    -------
    (path, cost, expanded) : path is start..goal inclusive, empty when the
    open set runs dry before reaching the goal.

    The open set is a binary heap. A node whose cost improves is pushed
    again and the superseded entry is dropped when popped, so each node is
    expanded at most once.
    """
    counter = itertools.count()
    g_score: Dict[int, float] = {start.id: 0.0}
    came_from: Dict[int, GraphNode] = {}
    closed = set()
    open_heap = [(euclidean(start, goal), next(counter), start)]

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current.id in closed:
            continue
        if current == goal:
            return _reconstruct(came_from, current), g_score[current.id], len(closed)
        closed.add(current.id)

        for neighbor in graph.neighbors(current):
            if neighbor.id in closed:
                continue
            edge = graph.get_edge(current, neighbor)
            tentative = g_score[current.id] + (edge.weight if edge is not None else math.inf)
            if tentative < g_score.get(neighbor.id, math.inf):
                came_from[neighbor.id] = current
                g_score[neighbor.id] = tentative
                heapq.heappush(open_heap, (tentative + euclidean(neighbor, goal), next(counter), neighbor))

    return [], math.inf, len(closed)


# ------------------------------------------------------------------  entry points

class Pathfinder:
    """
    Grid construction plus A*; every call builds its own grid and graph.

    Usage
    -----
    result = Pathfinder().find_path(floor_plan, (5, 5), (35, 35))
    if result.found:
        print(result.cells)
    """

    def __init__(
        self,
        grid_config: Optional[GridConfig] = None,
        config:      Optional[PathfinderConfig] = None,
    ):
        self.grid_config = grid_config or GridConfig()
        self.config      = config or PathfinderConfig()

    def find_path(self, image: np.ndarray, start: Point, end: Point) -> PathResult:
        grid = build_walkability_grid(image, self.grid_config)
        return self.search(grid, start, end)

    def search(
        self,
        grid:  WalkabilityGrid,
        start: Point,
        end:   Point,
        graph: Optional[Graph[GraphNode]] = None,
    ) -> PathResult:
        """Search on a prepared grid. ``start``/``end`` are pixel coordinates."""
        if graph is None:
            graph = build_grid_graph(grid)
        radius = self.config.search_radius

        start_cell = nearest_walkable_cell(grid, *grid.to_cell(*start), max_radius=radius)
        end_cell   = nearest_walkable_cell(grid, *grid.to_cell(*end),   max_radius=radius)
        if start_cell is None or end_cell is None:
            logger.info("no walkable cell near %s", start if start_cell is None else end)
            return PathResult(cells=[], node_size=grid.node_size,
                              status=PathStatus.NO_WALKABLE_CELL,
                              start_cell=start_cell, end_cell=end_cell)

        gw = grid.width
        start_node = graph.get_node(start_cell[1] * gw + start_cell[0])
        end_node   = graph.get_node(end_cell[1] * gw + end_cell[0])
        path, cost, expanded = astar(graph, start_node, end_node)

        if not path:
            logger.info("no path from %s to %s (%d cells expanded)", start_cell, end_cell, expanded)
            return PathResult(cells=[], node_size=grid.node_size,
                              status=PathStatus.UNREACHABLE, cost=math.inf,
                              expanded=expanded, start_cell=start_cell, end_cell=end_cell)

        logger.info("path %s -> %s: %d steps, %d cells expanded",
                    start_cell, end_cell, len(path) - 1, expanded)
        return PathResult(
            cells=[(n.x, n.y) for n in path],
            node_size=grid.node_size,
            status=PathStatus.FOUND,
            cost=cost,
            expanded=expanded,
            start_cell=start_cell,
            end_cell=end_cell,
        )


def find_path(
    image:       np.ndarray,
    start:       Point,
    end:         Point,
    grid_config: Optional[GridConfig] = None,
    config:      Optional[PathfinderConfig] = None,
) -> PathResult:
    return Pathfinder(grid_config, config).find_path(image, start, end)
