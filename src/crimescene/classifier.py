"""
Rule-based evidence classification of RAG regions.

Each region is tested against fixed colour/shape/size rules in priority
order; the first rule that matches decides the label:

  1. Blood    strongly red, size > 50
  2. Weapon   metallic colour, weapon-like shape, size > 200
  3. Tool     tool-like shape, wooden or metallic colour, size > 150
  4. Background

The k nearest graph neighbours of every region (by 1 - edge similarity,
over connected regions only) are retrieved alongside; the current rules
do not consult them.
"""

from __future__ import annotations

import heapq
import logging
import math
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from .graph import Graph, GraphNode
from .superpixel import SuperPixel

logger = logging.getLogger(__name__)


class RegionLabel(str, Enum):
    WEAPON     = "Weapon"
    TOOL       = "Tool"
    BLOOD      = "Blood"
    BACKGROUND = "Background"
    UNKNOWN    = "Unknown"


# RGB box colours for drawn detections
LABEL_COLORS: Dict[RegionLabel, Tuple[int, int, int]] = {
    RegionLabel.WEAPON: (255,   0,   0),   # red
    RegionLabel.TOOL:   (  0,   0, 255),   # blue
    RegionLabel.BLOOD:  (255,   0, 255),   # magenta
}
FALLBACK_COLOR = (128, 128, 128)


@dataclass
class ClassifierConfig:
    k: int = 5    # Neighbours retrieved per region

    def __post_init__(self):
        if self.k < 0:
            raise ValueError(f"k must be >= 0, got {self.k}")


@dataclass
class Detection:
    """A non-background region ready to be drawn."""
    region_id: int
    label:     RegionLabel
    bbox:      Tuple[int, int, int, int]   # (min_x, min_y, max_x, max_y)
    color:     Tuple[int, int, int]        # RGB
    size:      int = 0


class ClassifierOutput(NamedTuple):
    detections: List[Detection]
    neighbors:  Dict[int, List[int]]


# ------------------------------------------------------------------  colour rules

def brightness(sp: SuperPixel) -> int:
    return (sp.r + sp.g + sp.b) // 3


def is_metallic(sp: SuperPixel) -> bool:
    max_diff = max(abs(sp.r - sp.g), abs(sp.g - sp.b), abs(sp.r - sp.b))
    return max_diff < 40 and 80 < brightness(sp) < 220


def is_wooden(sp: SuperPixel) -> bool:
    brownish = sp.r > sp.g > sp.b and sp.b < 100 and sp.r > 100
    return brownish and (sp.r - sp.b) > 50


# ------------------------------------------------------------------  shape rules

def bbox_compactness(sp: SuperPixel) -> float:
    """4*pi*area / perimeter^2 with the bounding-box perimeter; inf for a point box."""
    perimeter = 2 * (sp.width + sp.height)
    if perimeter == 0:
        return math.inf
    return (4 * math.pi * sp.size) / (perimeter * perimeter)


def has_weapon_shape(sp: SuperPixel) -> bool:
    aspect = sp.aspect_ratio
    elongated = aspect > 3.0 or aspect < 0.33
    return elongated or bbox_compactness(sp) < 0.6


def has_tool_shape(sp: SuperPixel) -> bool:
    aspect = sp.aspect_ratio
    elongated = aspect > 2.5 or aspect < 0.4
    length = max(sp.width, sp.height)
    width  = min(sp.width, sp.height)
    return elongated or length / max(1, width) > 2.0


# ------------------------------------------------------------------  class rules

def is_blood(sp: SuperPixel) -> bool:
    reddish = sp.r > 120 and sp.g < 90 and sp.b < 90
    red_ratio = sp.r / (sp.g + sp.b + 1)
    return reddish and red_ratio > 1.5 and sp.size > 50


def is_weapon(sp: SuperPixel) -> bool:
    return is_metallic(sp) and has_weapon_shape(sp) and sp.size > 200


def is_tool(sp: SuperPixel) -> bool:
    return has_tool_shape(sp) and (is_wooden(sp) or is_metallic(sp)) and sp.size > 150


_RULES = (
    (RegionLabel.BLOOD,  is_blood),
    (RegionLabel.WEAPON, is_weapon),
    (RegionLabel.TOOL,   is_tool),
)


def classify_region(sp: SuperPixel) -> RegionLabel:
    for label, rule in _RULES:
        if rule(sp):
            return label
    return RegionLabel.BACKGROUND


# ------------------------------------------------------------------  neighbour retrieval

def k_nearest_neighbors(graph: Graph, node: GraphNode, k: int = 5) -> List[GraphNode]:
    """
    The ``k`` connected regions closest to ``node`` by ``1 - similarity``.

    Only nodes sharing an edge with ``node`` are candidates. Ties are
    broken by node id.
    """
    heap = []
    for other in graph.neighbors(node):
        edge = graph.get_edge(node, other)
        if edge is not None:
            heap.append((1.0 - edge.similarity, other.id, other))
    heapq.heapify(heap)
    return [heapq.heappop(heap)[2] for _ in range(min(k, len(heap)))]


class RegionClassifier:
    """
    Labels every region node of a RAG in place.

    Usage
    -----
    out = RegionClassifier().classify(rag)
    for det in out.detections:
        print(det.label.value, det.bbox)
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()

    def classify(self, graph: Graph) -> ClassifierOutput:
        detections: List[Detection] = []
        neighbors:  Dict[int, List[int]] = {}

        for node in sorted(graph.nodes(), key=lambda n: n.id):
            knn = k_nearest_neighbors(graph, node, self.config.k)
            neighbors[node.id] = [n.id for n in knn]

            sp: SuperPixel = node.payload
            label = classify_region(sp)
            node.label = label.value
            if label is RegionLabel.BACKGROUND:
                continue
            detections.append(Detection(
                region_id=node.id,
                label=label,
                bbox=sp.bbox,
                color=LABEL_COLORS.get(label, FALLBACK_COLOR),
                size=sp.size,
            ))

        logger.info("classified %d regions: %s", len(graph), dict(summarize(detections)))
        return ClassifierOutput(detections, neighbors)


def summarize(detections: Iterable[Detection]) -> Counter:
    """Detection count per label value."""
    return Counter(d.label.value for d in detections)
