import json

from pagediff.pipeline import CHANGED, ComparisonResult, PageOutcome
from pagediff.presets import DiffParams
from pagediff.report import result_to_json, write_json_report


def _result(tmp_path):
    return ComparisonResult(
        params=DiffParams(dpi=150),
        old_page_count=1,
        new_page_count=1,
        pages=[PageOutcome(index=0, status=CHANGED, ratio=0.25, images=2)],
        images=[],
        files=[tmp_path / "diff_page_1.png", tmp_path / "diff_page_2.png"],
    )


def test_write_json_report_creates_parents(tmp_path):
    path = tmp_path / "nested" / "report.json"

    write_json_report(_result(tmp_path), path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["params"]["dpi"] == 150
    assert data["pages"] == [{"page": 1, "status": "changed", "ratio": 0.25, "images": 2}]
    assert data["files"] == ["diff_page_1.png", "diff_page_2.png"]


def test_result_to_json_round_trips(tmp_path):
    result = _result(tmp_path)
    assert json.loads(result_to_json(result)) == result.to_dict()
