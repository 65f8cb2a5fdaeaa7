"""JSON report helpers."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import OutputError
from .pipeline import ComparisonResult


def write_json_report(result: ComparisonResult, path: str | Path) -> None:
    out_path = Path(path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as handle:
            json.dump(result.to_dict(), handle, ensure_ascii=False, indent=2)
    except OSError as exc:
        raise OutputError(f"cannot write report: {exc}", path=out_path) from exc


def result_to_json(result: ComparisonResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
