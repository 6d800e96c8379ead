import os
import termios

import pytest

from pixview.control import (
    SLIDESHOW_RELOAD_MAX,
    ZOOM_MAX,
    ZOOM_MIN,
    CaptionEditor,
    StdinDecoder,
    adjust_reload,
    raw_terminal,
    zoom_step,
)
from pixview.keys import Modifier, keysym_from_name


def feed_all(decoder, text):
    return [decoder.feed(c) for c in text]


def test_plain_letter():
    assert StdinDecoder().feed("q") == (0, keysym_from_name("q"))


@pytest.mark.parametrize(
    "char,name",
    [(" ", "space"), ("\n", "Return"), ("\b", "BackSpace"), ("\x7f", "BackSpace")],
)
def test_special_characters(char, name):
    assert StdinDecoder().feed(char) == (0, keysym_from_name(name))


@pytest.mark.parametrize("letter,name", [("A", "Up"), ("B", "Down"), ("C", "Right"), ("D", "Left")])
def test_arrow_sequences(letter, name):
    events = feed_all(StdinDecoder(), "\x1b[" + letter)
    assert events == [None, None, (0, keysym_from_name(name))]


def test_escape_prefix_is_alt():
    decoder = StdinDecoder()
    assert decoder.feed("\x1b") is None
    assert decoder.feed("n") == (int(Modifier.MOD1), keysym_from_name("n"))
    assert decoder.feed("n") == (0, keysym_from_name("n"))


def test_unknown_character_gives_nothing():
    assert StdinDecoder().feed("\x01") is None


def test_empty_input_raises():
    with pytest.raises(EOFError):
        StdinDecoder().feed("")


def test_caption_typing_and_backspace():
    editor = CaptionEditor()
    for c in "cat":
        assert editor.feed(ord(c)) is True
    editor.feed(keysym_from_name("BackSpace"))
    assert editor.text == "ca"


def test_caption_control_return_inserts_newline():
    editor = CaptionEditor("a")
    editor.feed(keysym_from_name("Return"), int(Modifier.CONTROL))
    editor.feed(ord("b"))
    assert editor.text == "a\nb"
    assert editor.editing


def test_caption_return_finishes():
    editor = CaptionEditor("x")
    editor.feed(ord("y"))
    assert editor.feed(keysym_from_name("Return")) is False
    assert editor.text == "xy"
    assert not editor.cancelled
    assert editor.feed(ord("z")) is False
    assert editor.text == "xy"


def test_caption_escape_reverts():
    editor = CaptionEditor("orig")
    editor.feed(ord("!"))
    assert editor.feed(keysym_from_name("Escape")) is False
    assert editor.cancelled
    assert editor.text == "orig"


def test_caption_ignores_non_ascii_keysyms():
    editor = CaptionEditor("t")
    editor.feed(keysym_from_name("Up"))
    assert editor.text == "t"


def test_zoom_round_trip():
    zoom, x, y = zoom_step(1.0, 0, 0, 100, 80, 2.0, True)
    assert zoom == 2.0
    back = zoom_step(zoom, x, y, 100, 80, 2.0, False)
    assert back == (1.0, 0, 0)


def test_zoom_keeps_centre_fixed():
    zoom, x, y = zoom_step(1.0, 50, 40, 100, 80, 3.0, True)
    assert (x, y) == (50, 40)
    assert zoom == 3.0


def test_zoom_clamps():
    assert zoom_step(ZOOM_MAX, 0, 0, 10, 10, 2.0, True)[0] == ZOOM_MAX
    assert zoom_step(ZOOM_MIN, 0, 0, 10, 10, 2.0, False)[0] == ZOOM_MIN


def test_adjust_reload():
    assert adjust_reload(5, True) == 6
    assert adjust_reload(5, False) == 4
    assert adjust_reload(1, False) == 1
    assert adjust_reload(SLIDESHOW_RELOAD_MAX, True) == SLIDESHOW_RELOAD_MAX


def test_raw_terminal_sets_and_restores():
    master, slave = os.openpty()
    try:
        before = termios.tcgetattr(slave)
        with raw_terminal(slave) as fd:
            assert fd == slave
            inside = termios.tcgetattr(slave)
            assert not inside[3] & termios.ECHO
            assert not inside[3] & termios.ICANON
            assert inside[2] & termios.CSIZE == termios.CS8
        assert termios.tcgetattr(slave) == before
    finally:
        os.close(master)
        os.close(slave)


def test_raw_terminal_rejects_non_tty(tmp_path):
    with open(tmp_path / "plain", "w") as handle:
        with pytest.raises(termios.error):
            with raw_terminal(handle):
                pass