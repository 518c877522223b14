"""Raster input handling: validation and loading of RGB images."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import cv2
import numpy as np


class InvalidImageError(ValueError):
    """Raised for rasters the analysis cannot run on (empty, wrong shape)."""


def as_rgb(image: np.ndarray) -> np.ndarray:
    """
    Validate a raster and return it as an (H, W, 3) int32 RGB array.

    Accepts (H, W) or (H, W, 1) grayscale, (H, W, 3) RGB and (H, W, 4) RGBA
    input.
    The input array is never modified.
    """
    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = np.stack([arr] * 3, axis=-1)
    elif arr.ndim == 3 and arr.shape[2] == 1:
        arr = np.repeat(arr, 3, axis=2)
    elif arr.ndim == 3 and arr.shape[2] == 4:
        arr = arr[:, :, :3]
    elif arr.ndim != 3 or arr.shape[2] != 3:
        raise InvalidImageError(f"Expected an (H, W, 3) RGB raster, got shape {arr.shape}")

    h, w = arr.shape[:2]
    if h == 0 or w == 0:
        raise InvalidImageError(f"Image has zero area ({w}x{h})")
    return arr.astype(np.int32)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Read an image file into an RGB uint8 array."""
    bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if bgr is None:
        raise FileNotFoundError(f"Could not read image: {path}")
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def save_image(path: Union[str, Path], rgb: np.ndarray) -> None:
    if not cv2.imwrite(str(path), cv2.cvtColor(rgb.astype(np.uint8), cv2.COLOR_RGB2BGR)):
        raise OSError(f"Could not write image: {path}")
