from pathlib import Path

from pagediff.errors import DiffError, InputError, OutputError, PageDiffError, RenderError


def test_errors_share_a_base_and_carry_context():
    errors = [
        InputError("file does not exist", path="old.pdf", document="old"),
        RenderError("broken stream", document="new", page_index=2),
        DiffError("bad shapes", page_index=0),
        OutputError("disk full", path="out/diff_page_1.png"),
    ]

    assert all(isinstance(err, PageDiffError) for err in errors)
    assert [err.stage for err in errors] == ["input", "render", "diff", "output"]
    assert errors[0].path == Path("old.pdf")
    assert errors[1].page_index == 2
    assert errors[3].path == Path("out/diff_page_1.png")


def test_messages_name_stage_document_and_page():
    assert str(InputError("file does not exist", path="a.pdf", document="old")) == (
        "input failed for old document 'a.pdf': file does not exist"
    )
    assert str(RenderError("broken stream", document="new", page_index=2)) == (
        "render failed for new document, page 3: broken stream"
    )
    assert str(DiffError("bad shapes", page_index=0)) == "diff failed on page 1: bad shapes"
    assert "disk full" in str(OutputError("disk full", path="x"))


def test_input_error_without_document_label():
    assert str(InputError("nope", path="x.pdf")).startswith("input failed for document")
