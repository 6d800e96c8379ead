import pytest
from PIL import Image

from pixview.loading import (
    ImageLoadError,
    LoadError,
    apply_orientation,
    is_image_mime,
    is_url,
    load_error_message,
    load_image,
    passes_dimension_filter,
)

A = (255, 0, 0)
B = (0, 0, 255)


def _row():
    image = Image.new("RGB", (2, 1))
    image.putpixel((0, 0), A)
    image.putpixel((1, 0), B)
    return image


def test_error_messages_follow_source_wording():
    assert load_error_message("x.png", LoadError.FILE_DOES_NOT_EXIST) == "x.png - File does not exist"
    assert load_error_message("x.png", LoadError.OUT_OF_MEMORY) == "While loading x.png - Out of memory"
    assert load_error_message("x.png", LoadError.DCRAW) == "x.png - Unable to open preview via dcraw"


def test_every_error_has_message_with_filename():
    for error in LoadError:
        assert "name.jpg" in load_error_message("name.jpg", error)


def test_image_load_error_carries_details():
    exc = ImageLoadError("a.gif", LoadError.FILE_IS_DIRECTORY)
    assert exc.filename == "a.gif"
    assert exc.error is LoadError.FILE_IS_DIRECTORY
    assert str(exc) == "a.gif - Directory specified for image filename"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("http://example.com/a.png", True),
        ("https://example.com/a.png", True),
        ("ftp://example.com/a.png", True),
        ("/home/a.png", False),
        ("http.png", False),
    ],
)
def test_is_url(path, expected):
    assert is_url(path) is expected


def test_is_image_mime():
    assert is_image_mime("image/png")
    assert not is_image_mime("application/gzip")
    assert not is_image_mime(None)


def test_dimension_filter():
    assert passes_dimension_filter(100, 100, 10, 200, 10, 200)
    assert passes_dimension_filter(10, 200, 10, 200, 10, 200)
    assert not passes_dimension_filter(9, 100, 10, 200, 10, 200)
    assert not passes_dimension_filter(100, 201, 10, 200, 10, 200)


def test_orientation_mirror():
    out = apply_orientation(_row(), 2)
    assert out.getpixel((0, 0)) == B
    assert out.getpixel((1, 0)) == A


def test_orientation_clockwise_and_counterclockwise():
    cw = apply_orientation(_row(), 6)
    assert cw.size == (1, 2)
    assert cw.getpixel((0, 0)) == A
    ccw = apply_orientation(_row(), 8)
    assert ccw.size == (1, 2)
    assert ccw.getpixel((0, 0)) == B


@pytest.mark.parametrize("orientation", [5, 6, 7, 8])
def test_orientation_swaps_dimensions(orientation):
    assert apply_orientation(Image.new("RGB", (4, 3)), orientation).size == (3, 4)


def test_orientation_round_trips():
    original = _row()
    twice = apply_orientation(apply_orientation(original, 3), 3)
    assert list(twice.getdata()) == list(original.getdata())
    back = apply_orientation(apply_orientation(original, 6), 8)
    assert list(back.getdata()) == list(original.getdata())
    assert apply_orientation(original, 1) is original


def test_load_png(tmp_path):
    path = tmp_path / "a.png"
    Image.new("RGB", (5, 4), A).save(path)
    image = load_image(path)
    assert image.size == (5, 4)
    assert image.getpixel((2, 2)) == A


def test_load_missing(tmp_path):
    with pytest.raises(ImageLoadError) as info:
        load_image(tmp_path / "nope.png")
    assert info.value.error is LoadError.FILE_DOES_NOT_EXIST


def test_load_directory(tmp_path):
    with pytest.raises(ImageLoadError) as info:
        load_image(tmp_path)
    assert info.value.error is LoadError.FILE_IS_DIRECTORY


def test_load_not_an_image(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("just some text")
    with pytest.raises(ImageLoadError) as info:
        load_image(path)
    assert info.value.error is LoadError.NO_LOADER


def test_auto_rotate_uses_exif(tmp_path):
    path = tmp_path / "r.jpg"
    exif = Image.Exif()
    exif[0x0112] = 6
    Image.new("RGB", (4, 2), A).save(path, exif=exif)
    assert load_image(path).size == (4, 2)
    assert load_image(path, auto_rotate=True).size == (2, 4)