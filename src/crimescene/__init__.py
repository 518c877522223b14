"""
crimescene

Graph-based spatial analysis of crime-scene imagery: superpixel
segmentation and rule-based evidence labelling over a region adjacency
graph, and A* routing over the walkable cells of a floor plan.
"""

from .graph import (
    Graph, GraphNode, GraphEdge, GridCell, NodeKind, EdgeKind,
    SimilarityComponents, region_node, grid_node, similarity_edge, grid_edge,
    edge_key,
)
from .image import InvalidImageError, as_rgb, load_image, save_image
from .superpixel import (
    SuperPixel, SuperpixelConfig, SuperpixelExtractor, Segmentation, segment,
)
from .adjacency import AdjacencyConfig, build_region_graph, boxes_adjacent, color_similarity
from .classifier import (
    RegionLabel, RegionClassifier, ClassifierConfig, Detection,
    classify_region, k_nearest_neighbors, summarize,
)
from .grid import GridConfig, WalkabilityGrid, build_walkability_grid
from .grid_graph import build_grid_graph
from .pathfinder import (
    Pathfinder, PathfinderConfig, PathResult, PathStatus,
    astar, find_path, nearest_walkable_cell,
)
from .config import AnalysisConfig, load_config, create_config
from .pipeline import SceneAnalyzer, ClassificationResult, PathfindingResult
from .render import draw_detections, draw_path, draw_superpixels

__version__ = "0.1.0"

__all__ = [
    "Graph", "GraphNode", "GraphEdge", "GridCell", "NodeKind", "EdgeKind",
    "SimilarityComponents", "region_node", "grid_node", "similarity_edge",
    "grid_edge", "edge_key",

    "InvalidImageError", "as_rgb", "load_image", "save_image",

    "SuperPixel", "SuperpixelConfig", "SuperpixelExtractor", "Segmentation", "segment",

    "AdjacencyConfig", "build_region_graph", "boxes_adjacent", "color_similarity",

    "RegionLabel", "RegionClassifier", "ClassifierConfig", "Detection",
    "classify_region", "k_nearest_neighbors", "summarize",

    "GridConfig", "WalkabilityGrid", "build_walkability_grid", "build_grid_graph",

    "Pathfinder", "PathfinderConfig", "PathResult", "PathStatus",
    "astar", "find_path", "nearest_walkable_cell",

    "AnalysisConfig", "load_config", "create_config",

    "SceneAnalyzer", "ClassificationResult", "PathfindingResult",

    "draw_detections", "draw_path", "draw_superpixels",
]
