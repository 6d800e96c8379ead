import io

import pytest
from PIL import Image

from pixview.listing import HEADER, format_size, image_info, list_images, loadables


@pytest.fixture
def rgba_png(tmp_path):
    path = tmp_path / "alpha.png"
    Image.new("RGBA", (4, 3), (1, 2, 3, 4)).save(path)
    return path


@pytest.fixture
def bad_file(tmp_path):
    path = tmp_path / "bad.png"
    path.write_text("definitely not a png")
    return path


def test_format_size_small_is_plain():
    assert format_size(512) == "512"
    assert format_size(0) == "0"


def test_format_size_units_grow():
    assert format_size(2_000).endswith("k")
    assert format_size(3_000_000).endswith("M")
    assert format_size(4 * 10**9).endswith("G")


def test_image_info_rgba(rgba_png):
    info = image_info(rgba_png)
    assert (info.width, info.height, info.pixels) == (4, 3, 12)
    assert info.format == "png"
    assert info.has_alpha is True
    assert info.size == rgba_png.stat().st_size


def test_image_info_jpeg_has_no_alpha(tmp_path):
    path = tmp_path / "a.jpg"
    Image.new("RGB", (6, 2)).save(path)
    info = image_info(path)
    assert info.format == "jpeg"
    assert info.has_alpha is False


def test_list_header_only():
    out = io.StringIO()
    assert list_images([], out) == []
    assert out.getvalue() == "NUM\tFORMAT\tWIDTH\tHEIGHT\tPIXELS\tSIZE\tALPHA\tFILENAME\n"


def test_list_row(rgba_png):
    out = io.StringIO()
    list_images([str(rgba_png)], out)
    lines = out.getvalue().splitlines()
    assert lines[0] == HEADER
    fields = lines[1].split("\t")
    assert fields[:4] == ["1", "png", "4", "3"]
    assert fields[4] == format_size(12)
    assert fields[5] == format_size(rgba_png.stat().st_size)
    assert fields[6:] == ["X", str(rgba_png)]


def test_list_skips_unloadable(rgba_png, bad_file):
    out = io.StringIO()
    listed = list_images([str(bad_file), str(rgba_png)], out)
    assert [info.filename for info in listed] == [str(rgba_png)]
    assert out.getvalue().splitlines()[1].startswith("1\t")


def test_loadables_all_good(rgba_png):
    out = io.StringIO()
    assert loadables([str(rgba_png)], True, out) == 0
    assert out.getvalue() == f"{rgba_png}\n"


def test_loadables_with_bad_file(rgba_png, bad_file):
    out = io.StringIO()
    assert loadables([str(rgba_png), str(bad_file)], True, out) == 1
    assert out.getvalue() == f"{rgba_png}\n"


def test_unloadables(rgba_png, bad_file):
    out = io.StringIO()
    assert loadables([str(rgba_png), str(bad_file)], False, out) == 1
    assert out.getvalue() == f"{bad_file}\n"
    quiet = io.StringIO()
    assert loadables([str(bad_file)], False, quiet) == 0