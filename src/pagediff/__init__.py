"""Visual page-by-page diffs of two PDF revisions."""

from __future__ import annotations

from .crop import as_rgba, content_bbox, crop_to_content
from .diff import DiffEngine, RasterDiffEngine, annotate, difference_ratio
from .errors import DiffError, InputError, OutputError, PageDiffError, RenderError
from .output import save_images
from .pairs import PagePair, build_document_pairs, build_pairs
from .pipeline import ComparisonResult, PageOutcome, compare_documents, compute_outputs, evaluate_pairs, run
from .presets import DiffParams, get_preset, iter_presets, params_from_env

__all__ = [
    "as_rgba",
    "content_bbox",
    "crop_to_content",
    "DiffEngine",
    "RasterDiffEngine",
    "annotate",
    "difference_ratio",
    "PageDiffError",
    "InputError",
    "RenderError",
    "DiffError",
    "OutputError",
    "save_images",
    "PagePair",
    "build_pairs",
    "build_document_pairs",
    "ComparisonResult",
    "PageOutcome",
    "compare_documents",
    "compute_outputs",
    "evaluate_pairs",
    "run",
    "DiffParams",
    "get_preset",
    "iter_presets",
    "params_from_env",
]

__version__ = "0.1.0"
