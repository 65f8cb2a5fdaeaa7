"""Positional pairing of old and new page images."""
from __future__ import annotations

import logging
from functools import partial
from typing import Callable, List, NamedTuple, Optional

import fitz
import numpy as np

from .crop import crop_to_content
from .errors import PageDiffError, RenderError
from .presets import DiffParams
from .render import PageRenderer, page_renderer

logger = logging.getLogger(__name__)

Cropper = Callable[[np.ndarray], np.ndarray]


class PagePair(NamedTuple):
    """Cropped images for one page index. Either side may be missing."""

    old: Optional[np.ndarray]
    new: Optional[np.ndarray]


def _render_cropped(render: PageRenderer, crop: Cropper, index: int, label: str) -> np.ndarray:
    try:
        image = render(index)
    except PageDiffError:
        raise
    except Exception as exc:
        raise RenderError(str(exc) or type(exc).__name__, document=label, page_index=index) from exc
    return crop(image)


def build_pairs(
    old_page_count: int,
    new_page_count: int,
    render_old: PageRenderer,
    render_new: PageRenderer,
    crop: Cropper,
) -> List[PagePair]:
    """Render and crop pages, pairing them by index over the new document.

    The new document bounds the iteration: one pair is returned per new page.
    Where the old document is shorter the old side is ``None`` and
    ``render_old`` is not called. Old pages beyond the new document's length
    are not paired.
    """

    if old_page_count < 0 or new_page_count < 0:
        raise ValueError("page counts must not be negative")

    pairs: List[PagePair] = []
    for index in range(new_page_count):
        new_image = _render_cropped(render_new, crop, index, "new")
        old_image = None
        if index < old_page_count:
            old_image = _render_cropped(render_old, crop, index, "old")
        pairs.append(PagePair(old=old_image, new=new_image))

    dropped = old_page_count - new_page_count
    if dropped > 0:
        logger.info(
            "Old document has %d trailing page(s) beyond the new document; they are not compared",
            dropped,
        )
    return pairs


def build_document_pairs(
    old_doc: fitz.Document, new_doc: fitz.Document, params: DiffParams
) -> List[PagePair]:
    """Pair the pages of two open documents using ``params`` for dpi and tolerance."""

    return build_pairs(
        old_doc.page_count,
        new_doc.page_count,
        page_renderer(old_doc, params.dpi, "old"),
        page_renderer(new_doc, params.dpi, "new"),
        partial(crop_to_content, tolerance=params.background_tolerance),
    )
