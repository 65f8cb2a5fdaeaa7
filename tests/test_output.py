import numpy as np
import pytest
from PIL import Image

from pagediff.errors import OutputError
from pagediff.output import output_filename, save_images

from conftest import white_image


def test_save_images(tmp_path):
    red = white_image(10, 10)
    red[:, :, 1:3] = 0
    green = white_image(6, 4)

    written = save_images([red, green], tmp_path)

    assert [p.name for p in written] == ["diff_page_1.png", "diff_page_2.png"]
    with Image.open(tmp_path / "diff_page_1.png") as img:
        assert img.mode == "RGBA"
        assert img.size == (10, 10)
        assert np.array_equal(np.asarray(img), red)
    with Image.open(tmp_path / "diff_page_2.png") as img:
        assert img.size == (6, 4)


def test_save_images_empty_creates_directory(tmp_path):
    out_dir = tmp_path / "empty"

    assert save_images([], out_dir) == []
    assert out_dir.is_dir()


def test_save_images_creates_nested_directories(tmp_path):
    out_dir = tmp_path / "a" / "b" / "c"

    save_images([white_image(5, 5)], out_dir)

    assert (out_dir / "diff_page_1.png").exists()


def test_save_images_overwrites_existing(tmp_path):
    save_images([white_image(5, 5)], tmp_path)
    save_images([white_image(7, 3)], tmp_path)

    with Image.open(tmp_path / "diff_page_1.png") as img:
        assert img.size == (7, 3)


def test_save_images_accepts_rgb(tmp_path):
    rgb = np.zeros((4, 4, 3), dtype=np.uint8)

    save_images([rgb], tmp_path)

    with Image.open(tmp_path / "diff_page_1.png") as img:
        assert img.mode == "RGBA"


def test_save_images_output_dir_is_a_file(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")

    with pytest.raises(OutputError) as excinfo:
        save_images([white_image(2, 2)], blocker)

    assert excinfo.value.path == blocker


def test_output_filename_is_one_based():
    assert output_filename(0) == "diff_page_1.png"
    assert output_filename(9) == "diff_page_10.png"
