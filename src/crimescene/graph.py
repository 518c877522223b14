"""
Generic undirected graph shared by region analysis and path finding.

Nodes
-----
One record type, ``GraphNode``, tagged with a ``NodeKind``:
  REGION     payload = SuperPixel   (region adjacency graph)
  GRID_CELL  payload = GridCell     (walkability grid graph)

Edges
-----
One record type, ``GraphEdge``, tagged with an ``EdgeKind``:
  SIMILARITY  weight = overall similarity, plus colour/texture/shape parts
  GRID        weight = step cost (1.0 on a 4-connected grid)

Edge keys are canonical unordered pairs packed into a single integer, so
``add_edge(a, b)`` and ``get_edge(b, a)`` resolve to the same slot.
"""

from __future__ import annotations

import copy as _copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Generic, List, NamedTuple, Optional, TypeVar

import networkx as nx


UNKNOWN_LABEL = "Unknown"


class NodeKind(str, Enum):
    REGION    = "region"
    GRID_CELL = "grid_cell"


class EdgeKind(str, Enum):
    SIMILARITY = "similarity"
    GRID       = "grid"


class GridCell(NamedTuple):
    x: int
    y: int


@dataclass(eq=False)
class GraphNode:
    """A graph vertex. Identity is the integer id alone."""
    id:      int
    kind:    NodeKind
    payload: Any = field(repr=False)
    label:   str = UNKNOWN_LABEL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GraphNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def x(self) -> int:
        return self._cell().x

    @property
    def y(self) -> int:
        return self._cell().y

    def _cell(self) -> GridCell:
        if self.kind is not NodeKind.GRID_CELL:
            raise TypeError(f"node {self.id} is a {self.kind.value} node, not a grid cell")
        return self.payload


def region_node(node_id: int, superpixel) -> GraphNode:
    return GraphNode(id=node_id, kind=NodeKind.REGION, payload=superpixel)


def grid_node(x: int, y: int, grid_width: int) -> GraphNode:
    """Grid cell node whose id is derived from its coordinates."""
    return GraphNode(id=y * grid_width + x, kind=NodeKind.GRID_CELL, payload=GridCell(x, y))


@dataclass
class SimilarityComponents:
    color:   float = 0.0
    texture: float = 0.0
    shape:   float = 0.0


@dataclass
class GraphEdge:
    weight:     float = 1.0
    kind:       EdgeKind = EdgeKind.GRID
    visited:    bool = False   # scratch flag for traversal algorithms
    label:      str = ""
    components: Optional[SimilarityComponents] = None

    @property
    def similarity(self) -> float:
        return self.weight

    def reset(self) -> None:
        self.visited = False

    def copy(self) -> "GraphEdge":
        return replace(self, components=_copy.copy(self.components))

    def is_similar(self, other: "GraphEdge", threshold: float) -> bool:
        """True when ``other`` is the same kind of edge and its weight is within ``threshold``."""
        if not isinstance(other, GraphEdge) or other.kind is not self.kind:
            return False
        return abs(self.weight - other.weight) <= threshold

    def recalculate_similarity(
        self,
        color_weight:   float,
        texture_weight: float,
        shape_weight:   float,
    ) -> None:
        """
        Derive the overall similarity from the three component scores.

        The weights are re-normalised to sum to one. Nothing changes when
        the weights do not sum to a positive value or the edge carries no
        components.
        """
        total = color_weight + texture_weight + shape_weight
        if total <= 0 or self.components is None:
            return
        c = self.components
        self.weight = (
            color_weight / total * c.color
            + texture_weight / total * c.texture
            + shape_weight / total * c.shape
        )


def similarity_edge(
    similarity: float,
    color:      float = 0.0,
    texture:    float = 0.0,
    shape:      float = 0.0,
) -> GraphEdge:
    return GraphEdge(
        weight=similarity,
        kind=EdgeKind.SIMILARITY,
        components=SimilarityComponents(color, texture, shape),
    )


def grid_edge(weight: float = 1.0) -> GraphEdge:
    return GraphEdge(weight=weight, kind=EdgeKind.GRID)


def edge_key(a: int, b: int) -> int:
    """Pack the unordered pair {a, b} into one integer."""
    lo, hi = (a, b) if a <= b else (b, a)
    return (lo << 32) | (hi & 0xFFFFFFFF)


N = TypeVar("N", bound=GraphNode)


class Graph(Generic[N]):
    """
    Node/edge store with symmetric adjacency.

    Lookups of absent nodes or edges return ``None`` (or an empty list);
    nothing here raises for a missing key. Re-adding a node id or an edge
    pair replaces the previous entry.

    Example
    -------
    g = Graph()
    g.add_node(a); g.add_node(b)
    g.add_edge(a, b, grid_edge())
    assert g.get_edge(b, a) is g.get_edge(a, b)
    """

    def __init__(self):
        self._nodes: Dict[int, N] = {}
        self._edges: Dict[int, GraphEdge] = {}
        self._adjacency: Dict[int, Dict[int, None]] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node) -> bool:
        node_id = node.id if isinstance(node, GraphNode) else node
        return node_id in self._nodes

    # ------------------------------------------------------------------  nodes

    def add_node(self, node: N) -> None:
        self._nodes[node.id] = node
        self._adjacency.setdefault(node.id, {})

    def get_node(self, node_id: int) -> Optional[N]:
        return self._nodes.get(node_id)

    def nodes(self) -> List[N]:
        return list(self._nodes.values())

    # ------------------------------------------------------------------  edges

    def add_edge(self, a: N, b: N, edge: GraphEdge) -> None:
        self._edges[edge_key(a.id, b.id)] = edge
        self._adjacency.setdefault(a.id, {})[b.id] = None
        self._adjacency.setdefault(b.id, {})[a.id] = None

    def get_edge(self, a: N, b: N) -> Optional[GraphEdge]:
        return self._edges.get(edge_key(a.id, b.id))

    def has_edge(self, a: N, b: N) -> bool:
        return edge_key(a.id, b.id) in self._edges

    def edges(self) -> List[GraphEdge]:
        return list(self._edges.values())

    def number_of_edges(self) -> int:
        return len(self._edges)

    def reset_edges(self) -> None:
        for e in self._edges.values():
            e.reset()

    # ------------------------------------------------------------------  adjacency

    def adjacent_nodes(self, node: N) -> List[N]:
        """Every other node joined to ``node`` by an edge, found by scanning all nodes."""
        return [
            other for other in self._nodes.values()
            if other.id != node.id and edge_key(node.id, other.id) in self._edges
        ]

    def neighbors(self, node: N) -> List[N]:
        """Same result as ``adjacent_nodes`` but served from the adjacency index."""
        return [
            self._nodes[nid] for nid in self._adjacency.get(node.id, ())
            if nid in self._nodes and nid != node.id
        ]

    # ------------------------------------------------------------------  export

    def to_networkx(self) -> nx.Graph:
        G = nx.Graph()
        for n in self._nodes.values():
            G.add_node(n.id, kind=n.kind.value, label=n.label)
        for a, nbrs in self._adjacency.items():
            for b in nbrs:
                if a < b and a in self._nodes and b in self._nodes:
                    e = self._edges[edge_key(a, b)]
                    G.add_edge(a, b, weight=e.weight, kind=e.kind.value)
        return G
