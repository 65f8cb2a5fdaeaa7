"""Pixel difference metric and diff annotation for page images."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Protocol, Tuple

import cv2
import numpy as np
from skimage.metrics import structural_similarity

from .crop import as_rgba
from .presets import DiffParams

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]

# skimage's default SSIM window
_SSIM_WIN = 7

_DEFAULTS = DiffParams()


class DiffEngine(Protocol):
    def difference_ratio(self, old: np.ndarray, new: np.ndarray) -> float:
        ...

    def annotate(self, old: np.ndarray, new: np.ndarray, sensitivity: float) -> np.ndarray:
        ...


@dataclass(frozen=True)
class HighlightColors:
    """RGB palette (0-1 floats) used when drawing a diff image."""

    added: Color = (0.0, 0.73, 0.0)
    removed: Color = (0.84, 0.0, 0.0)
    region: Color = (0.93, 0.63, 0.0)

    @staticmethod
    def to_uint8(color: Color) -> Tuple[int, int, int]:
        return tuple(int(round(max(0.0, min(channel, 1.0)) * 255)) for channel in color)  # type: ignore[return-value]


@dataclass(frozen=True)
class Box:
    """Pixel rectangle covering columns ``x0..x1-1`` and rows ``y0..y1-1``."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def area(self) -> int:
        return (self.x1 - self.x0) * (self.y1 - self.y0)

    def gap_to(self, other: "Box") -> float:
        """Euclidean distance between the nearest edges, 0 when they overlap."""

        dx = max(other.x0 - self.x1, self.x0 - other.x1, 0)
        dy = max(other.y0 - self.y1, self.y0 - other.y1, 0)
        return math.hypot(dx, dy)

    def __or__(self, other: "Box") -> "Box":
        return Box(
            min(self.x0, other.x0),
            min(self.y0, other.y0),
            max(self.x1, other.x1),
            max(self.y1, other.y1),
        )


def pad_to_common_size(old: np.ndarray, new: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Place both images top-left on white canvases of their combined extent."""

    old_rgba = as_rgba(old)
    new_rgba = as_rgba(new)
    height = max(old_rgba.shape[0], new_rgba.shape[0])
    width = max(old_rgba.shape[1], new_rgba.shape[1])
    return _pad(old_rgba, width, height), _pad(new_rgba, width, height)


def _pad(image: np.ndarray, width: int, height: int) -> np.ndarray:
    if image.shape[:2] == (height, width):
        return image
    canvas = np.full((height, width, 4), 255, dtype=np.uint8)
    canvas[: image.shape[0], : image.shape[1]] = image
    return canvas


def difference_ratio(old: np.ndarray, new: np.ndarray) -> float:
    """Return the fraction of pixels that differ in any channel.

    Images of unequal size are compared on a shared white canvas. The ratio is
    exactly ``0.0`` only for identical canvases.
    """

    canvas_old, canvas_new = pad_to_common_size(old, new)
    differing = np.any(canvas_old != canvas_new, axis=2)
    if differing.size == 0:
        return 0.0
    return float(np.count_nonzero(differing)) / float(differing.size)


def _check_sensitivity(sensitivity: float) -> None:
    if not 0.0 <= sensitivity <= 1.0:
        raise ValueError(f"sensitivity must be within 0.0-1.0, got {sensitivity}")


def _to_gray(rgba: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(np.ascontiguousarray(rgba), cv2.COLOR_RGBA2GRAY)


def _ssim_mask(gray_old: np.ndarray, gray_new: np.ndarray, sensitivity: float) -> np.ndarray:
    if min(gray_old.shape) < _SSIM_WIN:
        return np.zeros_like(gray_old)
    _, ssim_map = structural_similarity(gray_old, gray_new, full=True, data_range=255)
    dissimilarity = 1.0 - ssim_map
    return (dissimilarity > sensitivity).astype(np.uint8) * 255


def _kernel_size(sensitivity: float) -> int:
    # 9px at sensitivity 0, 3px at sensitivity 1; always odd
    return 3 + 2 * int(round((1.0 - sensitivity) * 3))


def change_mask(old: np.ndarray, new: np.ndarray, sensitivity: float) -> np.ndarray:
    """Return a 0/255 mask of changed pixels, grown into regions by morphology."""

    _check_sensitivity(sensitivity)
    canvas_old, canvas_new = pad_to_common_size(old, new)
    gray_old = _to_gray(canvas_old)
    gray_new = _to_gray(canvas_new)

    abs_diff = cv2.absdiff(gray_old, gray_new)
    abs_mask = (abs_diff > sensitivity * 255.0).astype(np.uint8) * 255
    alpha_mask = np.any(canvas_old[:, :, 3:] != canvas_new[:, :, 3:], axis=2).astype(np.uint8) * 255
    seeds = np.maximum(abs_mask, alpha_mask)

    size = _kernel_size(sensitivity)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (size, size))
    # structural dissimilarity only extends regions around flagged pixels
    near = cv2.dilate(seeds, kernel, iterations=1)
    grown = cv2.bitwise_and(_ssim_mask(gray_old, gray_new, sensitivity), near)
    combined = np.maximum(seeds, grown)

    closed = cv2.morphologyEx(combined, cv2.MORPH_CLOSE, kernel)
    return cv2.dilate(closed, kernel, iterations=1)


def _component_boxes(mask: np.ndarray) -> List[Box]:
    if mask.size == 0:
        return []
    count, _, stats, _ = cv2.connectedComponentsWithStats((mask > 0).astype(np.uint8), connectivity=8)
    # label 0 is the unchanged background
    return [
        Box(int(x), int(y), int(x + w), int(y + h))
        for x, y, w, h, _ in stats[1:count]
    ]


def _merge_pass(boxes: List[Box], gap_px: int) -> List[Box]:
    pending = list(boxes)
    merged: List[Box] = []
    while pending:
        current = pending.pop()
        grew = True
        while grew:
            grew = False
            for idx in range(len(pending) - 1, -1, -1):
                if current.gap_to(pending[idx]) <= gap_px:
                    current = current | pending.pop(idx)
                    grew = True
        merged.append(current)
    return merged


def merge_boxes(boxes: List[Box], gap_px: int) -> List[Box]:
    """Union boxes that overlap or lie within ``gap_px`` of each other."""

    boxes = [box for box in boxes if box.area > 0]
    # a grown union can reach boxes finalized earlier in the pass
    while True:
        merged = _merge_pass(boxes, gap_px)
        if len(merged) == len(boxes):
            break
        boxes = merged
    return sorted(merged, key=lambda b: (b.y0, b.x0))


def find_changed_regions(
    old: np.ndarray,
    new: np.ndarray,
    sensitivity: float,
    *,
    min_box_area_px: int = _DEFAULTS.min_box_area_px,
    merge_gap_px: int = _DEFAULTS.merge_gap_px,
) -> List[Box]:
    """Return merged rectangles around changed areas, top to bottom."""

    mask = change_mask(old, new, sensitivity)
    boxes = merge_boxes(_component_boxes(mask), merge_gap_px)
    regions = [box for box in boxes if box.area >= min_box_area_px]
    logger.debug("%d changed region(s) kept of %d merged", len(regions), len(boxes))
    return regions


def annotate(
    old: np.ndarray,
    new: np.ndarray,
    sensitivity: float,
    *,
    min_box_area_px: int = _DEFAULTS.min_box_area_px,
    merge_gap_px: int = _DEFAULTS.merge_gap_px,
    colors: HighlightColors = HighlightColors(),
    fade: float = 0.35,
) -> np.ndarray:
    """Draw a diff image over the new page.

    The new page is faded toward white. Ink present only in the old page is
    painted in ``colors.removed``, ink present only in the new page in
    ``colors.added``, and every changed region is outlined in
    ``colors.region``. Lower ``sensitivity`` flags fainter changes and groups
    them into larger regions.
    """

    _check_sensitivity(sensitivity)
    canvas_old, canvas_new = pad_to_common_size(old, new)
    gray_old = _to_gray(canvas_old).astype(np.int16)
    gray_new = _to_gray(canvas_new).astype(np.int16)

    faded = 255.0 - (255.0 - canvas_new[:, :, :3].astype(np.float32)) * fade
    out = np.ascontiguousarray(faded.round().astype(np.uint8))

    ink_threshold = sensitivity * 255.0
    removed = (gray_new - gray_old) > ink_threshold
    added = (gray_old - gray_new) > ink_threshold
    out[removed] = HighlightColors.to_uint8(colors.removed)
    out[added] = HighlightColors.to_uint8(colors.added)

    regions = find_changed_regions(
        canvas_old,
        canvas_new,
        sensitivity,
        min_box_area_px=min_box_area_px,
        merge_gap_px=merge_gap_px,
    )
    outline = HighlightColors.to_uint8(colors.region)
    for box in regions:
        cv2.rectangle(out, (box.x0, box.y0), (box.x1 - 1, box.y1 - 1), outline, thickness=2)

    return as_rgba(out)


class RasterDiffEngine:
    """Default diff engine: exact pixel ratio plus mask based annotation."""

    def __init__(
        self,
        *,
        min_box_area_px: int = _DEFAULTS.min_box_area_px,
        merge_gap_px: int = _DEFAULTS.merge_gap_px,
        colors: HighlightColors = HighlightColors(),
    ) -> None:
        self.min_box_area_px = min_box_area_px
        self.merge_gap_px = merge_gap_px
        self.colors = colors

    @classmethod
    def from_params(cls, params: DiffParams) -> "RasterDiffEngine":
        return cls(min_box_area_px=params.min_box_area_px, merge_gap_px=params.merge_gap_px)

    def difference_ratio(self, old: np.ndarray, new: np.ndarray) -> float:
        return difference_ratio(old, new)

    def annotate(self, old: np.ndarray, new: np.ndarray, sensitivity: float) -> np.ndarray:
        return annotate(
            old,
            new,
            sensitivity,
            min_box_area_px=self.min_box_area_px,
            merge_gap_px=self.merge_gap_px,
            colors=self.colors,
        )
