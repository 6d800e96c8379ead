"""Text helpers for on-image overlays: wrapping and label strings."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

ACTIONS_HEADER = "defined actions:"


def wrap_text(text: str, wrap_width: int, measure: Callable[[str], int]) -> list[str]:
    """Split ``text`` into lines no wider than ``wrap_width``.

    ``measure`` returns the rendered width of a string. A width of 0 only
    splits on newlines. A single word wider than the limit is kept on its
    own line and raises the limit for the rest of the text.
    """
    lines = text.split("\n")
    if not wrap_width:
        return lines

    space_width = measure("M M") - 2 * measure("M")
    limit = wrap_width
    result: list[str] = []

    for paragraph in lines:
        if measure(paragraph) <= limit:
            result.append(paragraph)
            continue
        if paragraph in ("", " "):
            result.append(paragraph)
            continue

        line: str | None = None
        line_width = 0
        for word in (w for w in paragraph.split(" ") if w):
            word_width = measure(word)
            new_width = word_width if line_width == 0 else line_width + space_width + word_width
            if new_width <= limit:
                line = word if line is None else f"{line} {word}"
                line_width = new_width
            elif line_width == 0:
                limit = word_width
                line = word
                line_width = new_width
            else:
                if line is not None:
                    result.append(line)
                line = word
                line_width = word_width
        if line is not None:
            result.append(line)

    return result


def zoom_label(zoom: float, width: int, height: int) -> str:
    """Describe the zoom level and the resulting image size."""
    return "%.0f%%, %dx%d" % (zoom * 100, int(width * zoom), int(height * zoom))


def position_label(index: int, total: int) -> str | None:
    """Return "N of M" for a zero-based position, or None for a single image."""
    if total <= 1:
        return None
    return f"{index + 1} of {total}"


def action_lines(titles: Sequence[str | None] | Mapping[int, str | None]) -> list[str]:
    """Build the overlay lines listing defined actions 0 to 9."""
    if isinstance(titles, Mapping):
        items = sorted(titles.items())
    else:
        items = list(enumerate(titles))
    entries = [f"{number}: {title}" for number, title in items if 0 <= number < 10 and title]
    if not entries:
        return []
    return [ACTIONS_HEADER, *entries]