"""
Region adjacency graph (RAG) construction.

Two superpixels are joined when their bounding boxes, each grown by
``tolerance`` pixels, intersect. The edge weight is the colour similarity

    s = 1 / (1 + ||rgb_a - rgb_b|| / 255)        s in (0, 1]

The pass is O(n^2) over superpixels, which stays small at the default
target of ~100 regions.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .graph import Graph, GraphNode, region_node, similarity_edge
from .superpixel import SuperPixel

logger = logging.getLogger(__name__)


@dataclass
class AdjacencyConfig:
    tolerance: int = 5    # Bounding-box growth in pixels

    def __post_init__(self):
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")


def boxes_adjacent(a: SuperPixel, b: SuperPixel, tolerance: int = 5) -> bool:
    t = tolerance
    return not (
        a.max_x + t < b.min_x - t
        or b.max_x + t < a.min_x - t
        or a.max_y + t < b.min_y - t
        or b.max_y + t < a.min_y - t
    )


def color_distance(a: SuperPixel, b: SuperPixel) -> float:
    return math.sqrt((a.r - b.r) ** 2 + (a.g - b.g) ** 2 + (a.b - b.b) ** 2)


def color_similarity(a: SuperPixel, b: SuperPixel) -> float:
    return 1.0 / (1.0 + color_distance(a, b) / 255.0)


def texture_similarity(a: SuperPixel, b: SuperPixel) -> float:
    diff = abs(a.average_texture_variance - b.average_texture_variance)
    return 1.0 / (1.0 + diff / 255.0)


def shape_similarity(a: SuperPixel, b: SuperPixel) -> float:
    return 1.0 / (1.0 + abs(a.aspect_ratio - b.aspect_ratio))


def build_region_graph(
    superpixels: Sequence[SuperPixel],
    config:      Optional[AdjacencyConfig] = None,
) -> Graph[GraphNode]:
    """
    Build the RAG for a list of superpixels.

    Node ids are the superpixel indices. Every edge is a similarity edge
    whose weight is the colour similarity; texture and shape scores are
    stored as components for callers that want to re-weight.
    """
    cfg = config or AdjacencyConfig()
    rag: Graph[GraphNode] = Graph()
    nodes = [region_node(i, sp) for i, sp in enumerate(superpixels)]
    for n in nodes:
        rag.add_node(n)

    for i, a in enumerate(superpixels):
        for j in range(i + 1, len(superpixels)):
            b = superpixels[j]
            if not boxes_adjacent(a, b, cfg.tolerance):
                continue
            sim = color_similarity(a, b)
            rag.add_edge(nodes[i], nodes[j], similarity_edge(
                sim,
                color=sim,
                texture=texture_similarity(a, b),
                shape=shape_similarity(a, b),
            ))

    logger.info("region graph: %d nodes, %d edges", len(rag), rag.number_of_edges())
    return rag
