"""
Crime-scene analysis end-to-end entry points.

Classification:
  1. Superpixel segmentation
  2. Region adjacency graph
  3. Rule-based region labelling (+ k-NN neighbour retrieval)

Path finding:
  1. Walkability grid from the floor plan
  2. 4-connected grid graph
  3. A* between the two requested points

Usage
-----
analyzer = SceneAnalyzer()
result   = analyzer.classify(image)
route    = analyzer.find_path(floor_plan, (5, 5), (35, 35))

The analyzer holds configuration only. Every call builds and returns its
own working state, so one instance can serve concurrent callers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from .adjacency import build_region_graph
from .classifier import Detection, RegionClassifier, summarize
from .config import AnalysisConfig
from .graph import Graph
from .grid import WalkabilityGrid, build_walkability_grid
from .grid_graph import build_grid_graph
from .pathfinder import PathResult, Pathfinder, Point
from .render import draw_detections, draw_path
from .superpixel import SuperPixel, SuperpixelExtractor

logger = logging.getLogger(__name__)


@dataclass
class ClassificationResult:
    """All outputs from one classification run."""
    image:       np.ndarray                 # Source RGB, untouched
    superpixels: List[SuperPixel]
    labels:      np.ndarray                 # (H, W) superpixel index map
    graph:       Graph                      # RAG with labelled nodes
    detections:  List[Detection]
    neighbors:   Dict[int, List[int]]       # region id -> k nearest region ids
    timing:      dict = field(default_factory=dict)

    @property
    def counts(self) -> Dict[str, int]:
        return dict(summarize(self.detections))

    def overlay(self) -> np.ndarray:
        return draw_detections(self.image, self.detections)


@dataclass
class PathfindingResult:
    """All outputs from one path-finding run."""
    image:  np.ndarray
    path:   PathResult
    grid:   WalkabilityGrid
    timing: dict = field(default_factory=dict)

    def overlay(self) -> np.ndarray:
        return draw_path(self.image, self.path)


class SceneAnalyzer:
    """
    Parameters
    ----------
    config : AnalysisConfig (defaults: 100 superpixels, 5 px tolerance,
             k=5, 10 px cells, brightness > 200)
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def classify(self, image: np.ndarray) -> ClassificationResult:
        cfg = self.config
        timing: Dict[str, float] = {}

        t = time.perf_counter()
        seg = SuperpixelExtractor(cfg.segmentation).compute(image)
        timing["segmentation"] = time.perf_counter() - t

        t = time.perf_counter()
        rag = build_region_graph(seg.superpixels, cfg.adjacency)
        timing["adjacency"] = time.perf_counter() - t

        t = time.perf_counter()
        out = RegionClassifier(cfg.classifier).classify(rag)
        timing["classification"] = time.perf_counter() - t

        logger.info("classification done in %.3fs: %d detections",
                    sum(timing.values()), len(out.detections))
        return ClassificationResult(
            image=image,
            superpixels=seg.superpixels,
            labels=seg.labels,
            graph=rag,
            detections=out.detections,
            neighbors=out.neighbors,
            timing=timing,
        )

    def find_path(self, image: np.ndarray, start: Point, end: Point) -> PathfindingResult:
        cfg = self.config
        timing: Dict[str, float] = {}

        t = time.perf_counter()
        grid = build_walkability_grid(image, cfg.grid)
        timing["grid_build"] = time.perf_counter() - t

        t = time.perf_counter()
        graph = build_grid_graph(grid)
        timing["graph_build"] = time.perf_counter() - t

        t = time.perf_counter()
        path = Pathfinder(cfg.grid, cfg.pathfinding).search(grid, start, end, graph=graph)
        timing["search"] = time.perf_counter() - t

        return PathfindingResult(image=image, path=path, grid=grid, timing=timing)
