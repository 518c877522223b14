"""
Drawing helpers for callers that want a picture of the results.

All functions take an RGB uint8 image and return a new annotated copy;
the input is never modified.
"""

from __future__ import annotations

from typing import Iterable

import cv2
import numpy as np
from skimage.segmentation import mark_boundaries

from .image import as_rgb

FONT = cv2.FONT_HERSHEY_SIMPLEX

PATH_COLOR     = (  0, 150, 255)
WAYPOINT_COLOR = (  0, 100, 200)
START_COLOR    = (  0, 255,   0)
END_COLOR      = (255,   0,   0)


def _canvas(image: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(as_rgb(image), dtype=np.uint8)


def draw_detections(image: np.ndarray, detections: Iterable) -> np.ndarray:
    """Box each detection in its label colour with a small white name tab."""
    out = _canvas(image)
    for det in detections:
        x0, y0, x1, y1 = det.bbox
        name = det.label.value
        cv2.rectangle(out, (x0, y0), (x1, y1), det.color, 2)

        (tw, _), _ = cv2.getTextSize(name, FONT, 0.4, 1)
        cv2.rectangle(out, (x0, y0 - 15), (x0 + tw + 4, y0), (255, 255, 255), -1)
        cv2.putText(out, name, (x0 + 2, y0 - 3), FONT, 0.4, (0, 0, 0), 1, cv2.LINE_AA)
    return out


def draw_path(image: np.ndarray, result) -> np.ndarray:
    """Connect the path cells, mark waypoints, start (green) and end (red)."""
    out = _canvas(image)
    points = result.pixel_points()
    if not points:
        h, w = out.shape[:2]
        anchor = (min(50, w // 8), min(50, max(15, h // 2)))   # baseline stays inside small images
        cv2.putText(out, "No path found", anchor, FONT, 0.8, END_COLOR, 2, cv2.LINE_AA)
        return out

    thickness = max(1, result.node_size // 2)
    for p, q in zip(points, points[1:]):
        cv2.line(out, p, q, PATH_COLOR, thickness)
    for p in points:
        cv2.circle(out, p, 4, WAYPOINT_COLOR, -1)
    if len(points) >= 2:
        cv2.circle(out, points[0],  6, START_COLOR, -1)
        cv2.circle(out, points[-1], 6, END_COLOR,   -1)
    return out


def draw_superpixels(image: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """Outline superpixel boundaries."""
    img = mark_boundaries(_canvas(image), labels, color=(1, 0.3, 0))
    return (img * 255).astype(np.uint8)
