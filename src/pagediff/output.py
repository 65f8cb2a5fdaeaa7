"""Writing diff images to disk."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

import numpy as np
from PIL import Image

from .crop import as_rgba
from .errors import OutputError

logger = logging.getLogger(__name__)

FILENAME_TEMPLATE = "diff_page_{number}.png"


def output_filename(position: int) -> str:
    """Return the file name for the image at 0-based ``position``."""

    return FILENAME_TEMPLATE.format(number=position + 1)


def save_images(images: Sequence[np.ndarray], output_dir: str | Path) -> List[Path]:
    """Save ``images`` as numbered PNG files in ``output_dir``.

    The directory is created with its parents when missing. Existing files of
    the same name are overwritten.
    """

    out_dir = Path(output_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"cannot create output directory: {exc}", path=out_dir) from exc

    written: List[Path] = []
    for position, image in enumerate(images):
        out_path = out_dir / output_filename(position)
        try:
            Image.fromarray(np.ascontiguousarray(as_rgba(image))).save(out_path, format="PNG")
        except OSError as exc:
            raise OutputError(f"cannot write image: {exc}", path=out_path) from exc
        logger.info("Saved diff image to %s", out_path)
        written.append(out_path)
    return written
