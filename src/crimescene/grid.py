"""Walkability grid sampled from a floor-plan raster."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .image import as_rgb

logger = logging.getLogger(__name__)


@dataclass
class GridConfig:
    node_size:            int = 10    # Cell edge in pixels
    brightness_threshold: int = 200   # Centre pixel must be brighter than this

    def __post_init__(self):
        if self.node_size < 1:
            raise ValueError(f"node_size must be >= 1, got {self.node_size}")


@dataclass
class WalkabilityGrid:
    walkable:  np.ndarray    # (grid_height, grid_width) bool, indexed [y, x]
    node_size: int

    @property
    def width(self) -> int:
        return int(self.walkable.shape[1])

    @property
    def height(self) -> int:
        return int(self.walkable.shape[0])

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_walkable(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and bool(self.walkable[y, x])

    def to_cell(self, px: int, py: int) -> Tuple[int, int]:
        return int(px) // self.node_size, int(py) // self.node_size

    def cell_center(self, x: int, y: int) -> Tuple[int, int]:
        half = self.node_size // 2
        return x * self.node_size + half, y * self.node_size + half

    def walkable_count(self) -> int:
        return int(self.walkable.sum())


def build_walkability_grid(
    image:  np.ndarray,
    config: Optional[GridConfig] = None,
) -> WalkabilityGrid:
    """
    Mark each ``node_size`` cell walkable when its centre pixel is bright.

    Brightness is the integer mean of R, G and B. Cells whose centre falls
    outside the image are never walkable.
    """
    cfg = config or GridConfig()
    rgb = as_rgb(image)
    h, w = rgb.shape[:2]
    ns = cfg.node_size
    gw, gh = w // ns, h // ns

    cx = np.arange(gw) * ns + ns // 2
    cy = np.arange(gh) * ns + ns // 2
    walkable = np.zeros((gh, gw), dtype=bool)

    vx, vy = cx < w, cy < h
    if vx.any() and vy.any():
        centres = rgb[np.ix_(cy[vy], cx[vx])]          # (gh', gw', 3)
        bright  = centres.sum(axis=-1) // 3
        walkable[np.ix_(vy, vx)] = bright > cfg.brightness_threshold

    grid = WalkabilityGrid(walkable=walkable, node_size=ns)
    logger.info("walkability grid %dx%d, %d walkable cells",
                gw, gh, grid.walkable_count())
    return grid
