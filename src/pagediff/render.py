"""PDF loading and page rasterization with PyMuPDF."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import fitz
import numpy as np

from .crop import as_rgba
from .errors import InputError, RenderError

logger = logging.getLogger(__name__)

PageRenderer = Callable[[int], np.ndarray]


def open_document(path: str | Path, label: str = "document") -> fitz.Document:
    """Open ``path`` as a PDF, raising :class:`InputError` when that is not possible."""

    pdf_path = Path(path)
    if not pdf_path.exists():
        raise InputError("file does not exist", path=pdf_path, document=label)
    if not pdf_path.is_file():
        raise InputError("not a regular file", path=pdf_path, document=label)
    try:
        doc = fitz.open(str(pdf_path), filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise InputError(f"cannot open PDF: {exc}", path=pdf_path, document=label) from exc
    if not doc.is_pdf:
        doc.close()
        raise InputError("not a PDF document", path=pdf_path, document=label)
    logger.info("Loaded %d pages from %s PDF %s", doc.page_count, label, pdf_path)
    return doc


def render_page(doc: fitz.Document, index: int, dpi: float, label: str = "document") -> np.ndarray:
    """Rasterize page ``index`` of ``doc`` at ``dpi`` to an opaque RGBA array.

    The same zoom matrix (``dpi/72``) is used for every page so that pages of
    equal size yield equal shapes. Pages are drawn on white paper without an
    alpha channel and then given a fully opaque one, so blank areas read as
    background for the cropper.
    """

    if dpi <= 0:
        raise ValueError(f"dpi must be positive, got {dpi}")
    if not 0 <= index < doc.page_count:
        raise RenderError(
            f"page does not exist (document has {doc.page_count} pages)",
            document=label,
            page_index=index,
        )
    zoom = dpi / 72.0
    mat = fitz.Matrix(zoom, zoom)
    try:
        page = doc[index]
        pix = page.get_pixmap(matrix=mat, colorspace=fitz.csRGB, alpha=False)
    except (RuntimeError, ValueError) as exc:
        raise RenderError(str(exc), document=label, page_index=index) from exc
    if pix.width <= 0 or pix.height <= 0:
        raise RenderError(
            f"rendered an empty {pix.width}x{pix.height} image",
            document=label,
            page_index=index,
        )
    rgb = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.width, pix.n)
    logger.debug("Rendered %s page %d at %.0f dpi: %dx%d", label, index + 1, dpi, pix.width, pix.height)
    return as_rgba(rgb[:, :, :3])


def page_renderer(doc: fitz.Document, dpi: float, label: str) -> PageRenderer:
    """Return a callback rendering pages of ``doc`` by index."""

    def _render(index: int) -> np.ndarray:
        return render_page(doc, index, dpi, label)

    return _render
