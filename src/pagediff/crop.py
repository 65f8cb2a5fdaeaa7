"""Tight content cropping of rendered page images.

Pages are rendered onto opaque white paper. A pixel counts as background when
every RGBA channel lies within ``tolerance`` of 255; everything else is
content. Cropping to the bounding box of the content lets two revisions be
compared even when their margins differ.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from .presets import DEFAULT_TOLERANCE

logger = logging.getLogger(__name__)

BBox = Tuple[int, int, int, int]


def as_rgba(image: np.ndarray) -> np.ndarray:
    """Return ``image`` as an ``(h, w, 4)`` uint8 array.

    Grayscale and RGB inputs get an opaque alpha channel. RGBA input is
    returned unchanged.
    """

    arr = np.asarray(image)
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected an 8-bit image, got dtype {arr.dtype}")
    if arr.ndim == 2:
        arr = np.repeat(arr[:, :, None], 3, axis=2)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported image shape {arr.shape}")
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    return arr


def background_mask(image: np.ndarray, tolerance: int = DEFAULT_TOLERANCE) -> np.ndarray:
    """Return a boolean mask that is ``True`` for near-white opaque pixels."""

    if not 0 <= tolerance <= 255:
        raise ValueError(f"tolerance must be within 0-255, got {tolerance}")
    rgba = as_rgba(image)
    return np.all(rgba >= 255 - tolerance, axis=2)


def content_bbox(image: np.ndarray, tolerance: int = DEFAULT_TOLERANCE) -> Optional[BBox]:
    """Return the inclusive ``(x0, y0, x1, y1)`` box of non-background pixels.

    ``None`` is returned when the whole image is background.
    """

    content = ~background_mask(image, tolerance)
    rows = np.flatnonzero(content.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(content.any(axis=0))
    return int(cols[0]), int(rows[0]), int(cols[-1]), int(rows[-1])


def crop_to_content(image: np.ndarray, tolerance: int = DEFAULT_TOLERANCE) -> np.ndarray:
    """Crop ``image`` to its content bounding box.

    The result is always a new array. A page without content is returned as a
    full-size copy rather than an empty crop.
    """

    rgba = as_rgba(image)
    bbox = content_bbox(rgba, tolerance)
    if bbox is None:
        logger.debug("No content found in %dx%d image", rgba.shape[1], rgba.shape[0])
        return rgba.copy()
    x0, y0, x1, y1 = bbox
    logger.debug("Content box (%d, %d)-(%d, %d)", x0, y0, x1, y1)
    return rgba[y0 : y1 + 1, x0 : x1 + 1].copy()
