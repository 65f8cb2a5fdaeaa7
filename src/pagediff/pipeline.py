"""Per-page diff decisions and the end-to-end comparison run."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .diff import DiffEngine, RasterDiffEngine
from .errors import DiffError, PageDiffError
from .output import save_images
from .pairs import PagePair, build_document_pairs
from .presets import DiffParams
from .render import open_document

logger = logging.getLogger(__name__)

IDENTICAL = "identical"
CHANGED = "changed"
NEW_ONLY = "new_only"
OLD_ONLY = "old_only"
EMPTY = "empty"


@dataclass(frozen=True)
class PageOutcome:
    index: int
    status: str
    ratio: Optional[float]
    images: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "page": self.index + 1,
            "status": self.status,
            "ratio": self.ratio,
            "images": self.images,
        }


@dataclass(frozen=True)
class ComparisonResult:
    params: DiffParams
    old_page_count: int
    new_page_count: int
    pages: List[PageOutcome]
    images: List[np.ndarray] = field(repr=False)
    files: List[Path] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "params": self.params.to_dict(),
            "old_page_count": self.old_page_count,
            "new_page_count": self.new_page_count,
            "pages": [page.to_dict() for page in self.pages],
            "files": [path.name for path in self.files],
        }


def _engine_call(page_index: int, func, *args):
    try:
        return func(*args)
    except PageDiffError:
        raise
    except Exception as exc:
        raise DiffError(str(exc) or type(exc).__name__, page_index=page_index) from exc


def _evaluate_pair(
    index: int, pair: PagePair, sensitivity: float, engine: DiffEngine
) -> Tuple[PageOutcome, List[np.ndarray]]:
    old, new = pair
    if old is not None and new is not None:
        ratio = float(_engine_call(index, engine.difference_ratio, old, new))
        logger.debug("Page %d difference ratio %.6f", index + 1, ratio)
        if ratio == 0.0:
            return PageOutcome(index, IDENTICAL, ratio, 1), [new]
        diff_image = _engine_call(index, engine.annotate, old, new, sensitivity)
        return PageOutcome(index, CHANGED, ratio, 2), [diff_image, new]
    if new is not None:
        return PageOutcome(index, NEW_ONLY, None, 1), [new]
    if old is not None:
        return PageOutcome(index, OLD_ONLY, None, 1), [old]
    return PageOutcome(index, EMPTY, None, 0), []


def evaluate_pairs(
    pairs: Iterable[PagePair],
    sensitivity: float,
    engine: Optional[DiffEngine] = None,
) -> Tuple[List[PageOutcome], List[np.ndarray]]:
    """Decide per pair what to output, returning outcomes and the image sequence.

    Both sides present: the new page alone when the difference ratio is
    exactly zero, otherwise the annotated diff followed by the new page. One
    side present: that side. Neither: nothing. Output follows pair order.
    """

    engine = engine or RasterDiffEngine()
    outcomes: List[PageOutcome] = []
    images: List[np.ndarray] = []
    for index, pair in enumerate(pairs):
        outcome, contributed = _evaluate_pair(index, pair, sensitivity, engine)
        outcomes.append(outcome)
        images.extend(contributed)
    return outcomes, images


def compute_outputs(
    pairs: Sequence[PagePair],
    sensitivity: float,
    engine: Optional[DiffEngine] = None,
) -> List[np.ndarray]:
    """Return the images to persist for ``pairs``."""

    _, images = evaluate_pairs(pairs, sensitivity, engine)
    return images


def _log_summary(outcomes: Sequence[PageOutcome]) -> None:
    counts: Dict[str, int] = {}
    for outcome in outcomes:
        counts[outcome.status] = counts.get(outcome.status, 0) + 1
    summary = ", ".join(f"{status}={count}" for status, count in sorted(counts.items()))
    logger.info("Compared %d page(s): %s", len(outcomes), summary or "none")


def compare_documents(
    old_path: str | Path,
    new_path: str | Path,
    params: Optional[DiffParams] = None,
    engine: Optional[DiffEngine] = None,
) -> ComparisonResult:
    """Render, pair and diff two PDFs without writing anything."""

    params = (params or DiffParams()).validate()
    engine = engine or RasterDiffEngine.from_params(params)

    old_doc = open_document(old_path, "old")
    try:
        new_doc = open_document(new_path, "new")
        try:
            old_count, new_count = old_doc.page_count, new_doc.page_count
            pairs = build_document_pairs(old_doc, new_doc, params)
        finally:
            new_doc.close()
    finally:
        old_doc.close()

    outcomes, images = evaluate_pairs(pairs, params.sensitivity, engine)
    _log_summary(outcomes)
    return ComparisonResult(
        params=params,
        old_page_count=old_count,
        new_page_count=new_count,
        pages=outcomes,
        images=images,
    )


def run(
    old_path: str | Path,
    new_path: str | Path,
    params: Optional[DiffParams] = None,
    engine: Optional[DiffEngine] = None,
) -> ComparisonResult:
    """Compare two PDFs and save the resulting images to ``params.output_dir``."""

    params = params or DiffParams()
    result = compare_documents(old_path, new_path, params, engine)
    files = save_images(result.images, params.output_dir)
    return replace(result, files=files)
