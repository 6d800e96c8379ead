import pytest
from PIL import Image

from pixview.cli import build_parser, main
from pixview.layout import DEFAULT_WIDTH
from pixview.listing import HEADER


@pytest.fixture
def files(tmp_path):
    good = tmp_path / "good.png"
    Image.new("RGB", (10, 8), (1, 2, 3)).save(good)
    bad = tmp_path / "bad.png"
    bad.write_text("not an image")
    return str(good), str(bad)


def test_parser_reads_options():
    args = build_parser().parse_args(["-i", "-y", "30", "--stretch", "a.png", "b.png"])
    assert args.index is True
    assert args.thumb_width == 30
    assert args.stretch is True
    assert args.files == ["a.png", "b.png"]


def test_no_mode_is_an_error(files):
    with pytest.raises(SystemExit) as info:
        main([files[0]])
    assert info.value.code == 2


def test_list_mode(files, capsys):
    good, bad = files
    assert main(["--list", good, bad]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == HEADER
    assert len(lines) == 2
    assert lines[1].endswith(good)
    assert lines[1].split("\t")[2:4] == ["10", "8"]


def test_loadable_mode(files, capsys):
    good, bad = files
    assert main(["--loadable", good, bad]) == 1
    assert capsys.readouterr().out.splitlines() == [good]


def test_unloadable_mode(files, capsys):
    good, bad = files
    assert main(["--unloadable", good, bad]) == 1
    assert capsys.readouterr().out.splitlines() == [bad]


def test_loadable_all_good(files, capsys):
    good, _ = files
    assert main(["-U", good]) == 0
    assert capsys.readouterr().out.splitlines() == [good]


def test_index_mode_writes_file(files, tmp_path):
    good, bad = files
    target = tmp_path / "index.png"
    assert main(["--index", "-o", str(target), good, bad]) == 0
    with Image.open(target) as result:
        assert result.width == DEFAULT_WIDTH
        assert result.height > 0


def test_index_mode_output_dir(files, tmp_path):
    good, _ = files
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    assert main(["-i", "-W", "200", "-o", "sheet.png", "-O", str(out_dir), good]) == 0
    with Image.open(out_dir / "sheet.png") as result:
        assert result.width == 200