"""
Grid-seeded iterative superpixel clustering (a simplified SLIC).

Seeds are placed on a regular grid of stride ``S = floor(sqrt(W*H / n_segments))``.
Each iteration assigns every pixel to the cluster minimising

    D = ||rgb_p - rgb_k|| + (compactness / S) * ||xy_p - xy_k||

and then moves every non-empty cluster to the integer mean position and colour
of its members. Clusters that lose all their pixels keep their last centre.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .image import as_rgb

logger = logging.getLogger(__name__)


@dataclass
class SuperpixelConfig:
    n_segments:  int   = 100    # Target superpixel count
    compactness: float = 10.0   # Spatial weight relative to colour distance
    n_iter:      int   = 10     # Assignment / update rounds

    def __post_init__(self):
        if self.n_segments < 1:
            raise ValueError(f"n_segments must be >= 1, got {self.n_segments}")
        if self.n_iter < 1:
            raise ValueError(f"n_iter must be >= 1, got {self.n_iter}")


@dataclass
class SuperPixel:
    """One cluster of pixels. Colour and centre are integer means."""
    center_x: int
    center_y: int
    r: int
    g: int
    b: int
    pixels: np.ndarray = field(
        default_factory=lambda: np.empty((0, 2), dtype=np.int32), repr=False
    )                                 # (n, 2) member (x, y) coordinates
    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0
    # accumulators from the last update step
    sum_x: int = 0
    sum_y: int = 0
    sum_r: int = 0
    sum_g: int = 0
    sum_b: int = 0
    count: int = 0
    texture: np.ndarray = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64), repr=False
    )                                 # per-channel colour variance

    @property
    def color(self) -> tuple:
        return (self.r, self.g, self.b)

    @property
    def bbox(self) -> tuple:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    @property
    def size(self) -> int:
        return int(len(self.pixels))

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def aspect_ratio(self) -> float:
        return self.width / max(1, self.height)

    @property
    def bbox_area(self) -> int:
        return self.width * self.height

    @property
    def fill_ratio(self) -> float:
        area = self.bbox_area
        return self.size / area if area > 0 else 0.0

    @property
    def average_texture_variance(self) -> float:
        return float(np.mean(self.texture)) if len(self.texture) else 0.0


@dataclass
class Segmentation:
    superpixels: List[SuperPixel]
    labels:      np.ndarray        # (H, W) int32 cluster index per pixel
    grid_size:   int


def grid_step(width: int, height: int, n_segments: int) -> int:
    """Seed stride; never below one pixel."""
    return max(1, int(math.sqrt((width * height) // n_segments)))


class SuperpixelExtractor:
    """
    Example
    -------
    seg = SuperpixelExtractor(SuperpixelConfig(n_segments=100)).compute(image)
    for sp in seg.superpixels:
        print(sp.bbox, sp.color, sp.size)
    """

    def __init__(self, config: Optional[SuperpixelConfig] = None):
        self.config = config or SuperpixelConfig()

    def compute(self, image: np.ndarray) -> Segmentation:
        """image : RGB (H, W, 3). Returns the final superpixels and label map."""
        rgb = as_rgb(image)
        h, w = rgb.shape[:2]
        cfg = self.config
        step = grid_step(w, h, cfg.n_segments)

        clusters = self._seed(rgb, step)
        ratio = cfg.compactness / step
        ys, xs = np.mgrid[0:h, 0:w]
        labels = np.zeros((h, w), dtype=np.int32)

        for it in range(cfg.n_iter):
            labels = self._assign(rgb, xs, ys, clusters, ratio)
            self._update(rgb, xs, ys, labels, clusters)
            logger.debug("iteration %d: %d non-empty clusters",
                         it, sum(1 for c in clusters if c.count > 0))

        self._collect_members(rgb, labels, clusters)
        logger.info("segmented %dx%d image into %d superpixels (step=%d)",
                    w, h, len(clusters), step)
        return Segmentation(superpixels=clusters, labels=labels, grid_size=step)

    # ------------------------------------------------------------------  steps

    @staticmethod
    def _seed(rgb: np.ndarray, step: int) -> List[SuperPixel]:
        h, w = rgb.shape[:2]
        clusters = []
        for y in range(min(step // 2, h - 1), h, step):
            for x in range(min(step // 2, w - 1), w, step):
                r, g, b = (int(v) for v in rgb[y, x])
                clusters.append(SuperPixel(
                    center_x=x, center_y=y, r=r, g=g, b=b,
                    min_x=x, min_y=y, max_x=x, max_y=y,
                ))
        return clusters

    @staticmethod
    def _assign(rgb, xs, ys, clusters, ratio) -> np.ndarray:
        best   = np.full(xs.shape, np.inf)
        labels = np.zeros(xs.shape, dtype=np.int32)
        for k, c in enumerate(clusters):
            color_d = np.sqrt(
                (rgb[:, :, 0] - c.r) ** 2
                + (rgb[:, :, 1] - c.g) ** 2
                + (rgb[:, :, 2] - c.b) ** 2
            )
            spatial_d = np.sqrt((xs - c.center_x) ** 2 + (ys - c.center_y) ** 2)
            d = color_d + ratio * spatial_d
            closer = d < best          # strict: lowest index wins ties
            best[closer]   = d[closer]
            labels[closer] = k
        return labels

    @staticmethod
    def _update(rgb, xs, ys, labels, clusters) -> None:
        n = len(clusters)
        flat = labels.ravel()
        fx, fy = xs.ravel(), ys.ravel()
        counts = np.bincount(flat, minlength=n)

        def sums(values):
            return np.bincount(flat, weights=values, minlength=n).astype(np.int64)

        sx, sy = sums(fx), sums(fy)
        sr, sg, sb = (sums(rgb[:, :, ch].ravel()) for ch in range(3))

        min_x = np.full(n, np.iinfo(np.int64).max); np.minimum.at(min_x, flat, fx)
        min_y = np.full(n, np.iinfo(np.int64).max); np.minimum.at(min_y, flat, fy)
        max_x = np.full(n, -1, dtype=np.int64);     np.maximum.at(max_x, flat, fx)
        max_y = np.full(n, -1, dtype=np.int64);     np.maximum.at(max_y, flat, fy)

        for k, c in enumerate(clusters):
            cnt = int(counts[k])
            c.count = cnt
            c.sum_x, c.sum_y = int(sx[k]), int(sy[k])
            c.sum_r, c.sum_g, c.sum_b = int(sr[k]), int(sg[k]), int(sb[k])
            if cnt == 0:
                continue
            c.center_x, c.center_y = c.sum_x // cnt, c.sum_y // cnt
            c.r, c.g, c.b = c.sum_r // cnt, c.sum_g // cnt, c.sum_b // cnt
            c.min_x, c.min_y = int(min_x[k]), int(min_y[k])
            c.max_x, c.max_y = int(max_x[k]), int(max_y[k])

    @staticmethod
    def _collect_members(rgb, labels, clusters) -> None:
        for k, c in enumerate(clusters):
            ys, xs = np.nonzero(labels == k)
            c.pixels = np.column_stack([xs, ys]).astype(np.int32)
            if len(xs):
                c.texture = rgb[ys, xs].astype(np.float64).var(axis=0)
            else:
                c.texture = np.zeros(3, dtype=np.float64)


def segment(image: np.ndarray, config: Optional[SuperpixelConfig] = None) -> Segmentation:
    return SuperpixelExtractor(config).compute(image)
