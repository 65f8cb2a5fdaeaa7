from pathlib import Path

import fitz
import numpy as np
import pytest


def white_image(width, height, value=255, alpha=255):
    img = np.full((height, width, 4), value, dtype=np.uint8)
    img[:, :, 3] = alpha
    return img


def image_with_content(width, height, x, y, w, h, color=(100, 100, 100, 255)):
    img = white_image(width, height)
    img[y : y + h, x : x + w] = color
    return img


@pytest.fixture
def make_pdf(tmp_path):
    """Return a factory writing a PDF whose pages hold filled black rectangles."""

    def _make(name, pages, size=(200, 200)):
        path = Path(tmp_path) / name
        doc = fitz.open()
        for rects in pages:
            page = doc.new_page(width=size[0], height=size[1])
            for rect in rects:
                page.draw_rect(fitz.Rect(*rect), color=(0, 0, 0), fill=(0, 0, 0))
        doc.save(str(path))
        doc.close()
        return path

    return _make
