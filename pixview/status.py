"""Progress line printed while many images are loaded."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO


class StatusDisplay:
    """Writes one character per processed file, grouped in tens and fifties.

    ``total`` is the number of files, or a callable returning the current
    length of a list that may shrink while it is being processed.
    """

    def __init__(self, total: int | Callable[[], int], stream: TextIO | None = None) -> None:
        self._total = total
        self._stream = stream
        self._count = 0
        self._initial = 0
        self._reset_output = False

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def _current_total(self) -> int:
        return self._total() if callable(self._total) else self._total

    def update(self, char: str) -> None:
        """Record one file with the given status character."""
        out = self.stream
        if not self._initial:
            self._initial = self._current_total()

        i = self._count
        if i:
            if self._reset_output:
                out.write(" " * ((i % 50) + (i % 50) // 10 + 7))
            if i % 50 == 0:
                percent = int(i / self._initial * 100) if self._initial else 0
                out.write(" %5d/%d (%d)\n[%3d%%] " % (i, self._initial, self._current_total(), percent))
            elif i % 10 == 0 and not self._reset_output:
                out.write(" ")
            self._reset_output = False
        else:
            out.write("[  0%] ")

        out.write(char)
        out.flush()
        self._count += 1

    def mark_error(self) -> None:
        """Break the status line before an error message is printed."""
        self.stream.write("\n")
        self._reset_output = True

    def finish(self) -> None:
        """End the status line and start over for the next run."""
        self.stream.write("\n")
        self._count = 0
        self._initial = 0