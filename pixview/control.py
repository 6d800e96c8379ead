"""Viewer control: terminal key input, caption entry, zoom and reload steps."""

from __future__ import annotations

import contextlib
import logging
import sys
import termios
from collections.abc import Iterator
from typing import IO

from .keys import NO_SYMBOL, Modifier, keysym_from_name

logger = logging.getLogger(__name__)

ZOOM_MIN = 0.002
ZOOM_MAX = 2000.0
SLIDESHOW_RELOAD_MAX = 4095

_SPACE = keysym_from_name("space")
_RETURN = keysym_from_name("Return")
_BACKSPACE = keysym_from_name("BackSpace")
_ESCAPE = keysym_from_name("Escape")
_ARROWS = {
    "A": keysym_from_name("Up"),
    "B": keysym_from_name("Down"),
    "C": keysym_from_name("Right"),
    "D": keysym_from_name("Left"),
}


class StdinDecoder:
    """Turns characters typed on a terminal into (state, keysym) events.

    An escape followed by ``[`` and A-D is an arrow key; an escape
    followed by another key acts as the Alt modifier.
    """

    def __init__(self) -> None:
        self._esc = 0

    def feed(self, char: str) -> tuple[int, int] | None:
        """Consume one character; return an event once one is complete."""
        if not char:
            raise EOFError("no input on stdin")
        char = char[0]

        if char == "\x1b":
            self._esc = 1
            return None
        if self._esc == 1 and char == "[":
            self._esc = 2
            return None

        if char == " ":
            keysym = _SPACE
        elif char == "\n":
            keysym = _RETURN
        elif char in ("\b", "\x7f"):
            keysym = _BACKSPACE
        elif self._esc == 2:
            keysym = _ARROWS.get(char, NO_SYMBOL)
            self._esc = 0
        else:
            keysym = keysym_from_name(char)

        state = self._esc * int(Modifier.MOD1)
        self._esc = 0
        if keysym == NO_SYMBOL:
            return None
        return state, keysym


class CaptionEditor:
    """Edits a caption from key events until it is confirmed or cancelled."""

    def __init__(self, text: str = "") -> None:
        self.original = text
        self.text = text
        self.editing = True
        self.cancelled = False

    def feed(self, keysym: int, state: int = 0) -> bool:
        """Apply one key press; return True while editing continues."""
        if not self.editing or keysym == NO_SYMBOL:
            return self.editing

        if keysym == _RETURN:
            if state & Modifier.CONTROL:
                self.text += "\n"
            else:
                self.editing = False
        elif keysym == _ESCAPE:
            self.text = self.original
            self.cancelled = True
            self.editing = False
        elif keysym == _BACKSPACE:
            self.text = self.text[:-1]
        elif 0 <= keysym <= 127:
            self.text += chr(keysym)
        return self.editing


def zoom_step(
    zoom: float,
    offset_x: int,
    offset_y: int,
    win_w: int,
    win_h: int,
    rate: float,
    zoom_in: bool = True,
) -> tuple[float, int, int]:
    """Zoom by ``rate`` around the window centre.

    Returns the new zoom factor, clamped to ZOOM_MIN..ZOOM_MAX, and the
    image offsets that keep the centre point in place.
    """
    old = zoom
    if zoom_in:
        zoom = min(zoom * rate, ZOOM_MAX)
    else:
        zoom = max(zoom / rate, ZOOM_MIN)

    half_w = win_w // 2
    half_h = win_h // 2
    new_x = int(half_w - ((half_w - offset_x) / old * zoom))
    new_y = int(half_h - ((half_h - offset_y) / old * zoom))
    return zoom, new_x, new_y


def adjust_reload(reload: float, increase: bool) -> float:
    """Step the reload delay by one second within 1..SLIDESHOW_RELOAD_MAX."""
    if increase:
        if reload < SLIDESHOW_RELOAD_MAX:
            return reload + 1
        logger.info("Cannot set RELOAD higher than %f seconds.", reload)
        return reload
    if reload > 1:
        return reload - 1
    logger.info("Cannot set RELOAD lower than 1 second.")
    return reload


@contextlib.contextmanager
def raw_terminal(stream: IO | int | None = None) -> Iterator[int]:
    """Put a terminal into unbuffered, non-echoing mode for the block.

    Yields the file descriptor; the previous settings are restored on exit.
    Raises termios.error if the terminal cannot be configured.
    """
    if stream is None:
        stream = sys.stdin
    fd = stream if isinstance(stream, int) else stream.fileno()

    saved = termios.tcgetattr(fd)
    attrs = termios.tcgetattr(fd)
    attrs[0] &= ~(termios.PARMRK | termios.ISTRIP | termios.INLCR | termios.IGNCR | termios.IXON)
    attrs[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN)
    attrs[2] &= ~(termios.CSIZE | termios.PARENB)
    attrs[2] |= termios.CS8
    termios.tcsetattr(fd, termios.TCSANOW, attrs)
    try:
        yield fd
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, saved)