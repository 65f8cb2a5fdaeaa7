"""Custom exceptions used across pagediff."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

__all__ = ["PageDiffError", "InputError", "RenderError", "DiffError", "OutputError"]


class PageDiffError(Exception):
    """Base class for every failure raised by the comparison pipeline."""

    stage = "pipeline"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.stage} failed: {self.message}"


class InputError(PageDiffError):
    """Raised when a document path is missing or is not a readable PDF."""

    stage = "input"

    def __init__(self, message: str, *, path: str | Path, document: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = Path(path)
        self.document = document

    def __str__(self) -> str:
        label = f"{self.document} document" if self.document else "document"
        return f"{self.stage} failed for {label} '{self.path}': {self.message}"


class RenderError(PageDiffError):
    """Raised when a page that should exist cannot be rasterized."""

    stage = "render"

    def __init__(self, message: str, *, document: str, page_index: int) -> None:
        super().__init__(message)
        self.document = document
        self.page_index = page_index

    def __str__(self) -> str:
        return (
            f"{self.stage} failed for {self.document} document, "
            f"page {self.page_index + 1}: {self.message}"
        )


class DiffError(PageDiffError):
    """Raised when the diff engine fails on a page pair."""

    stage = "diff"

    def __init__(self, message: str, *, page_index: int) -> None:
        super().__init__(message)
        self.page_index = page_index

    def __str__(self) -> str:
        return f"{self.stage} failed on page {self.page_index + 1}: {self.message}"


class OutputError(PageDiffError):
    """Raised when the output directory or an image file cannot be written."""

    stage = "output"

    def __init__(self, message: str, *, path: str | Path) -> None:
        super().__init__(message)
        self.path = Path(path)

    def __str__(self) -> str:
        return f"{self.stage} failed for '{self.path}': {self.message}"
