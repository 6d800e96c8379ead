"""Index (contact sheet) mode: thumbnail layout and rendering."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TextIO

from PIL import Image, ImageDraw, ImageFont

from .loading import ImageLoadError, load_image
from .status import StatusDisplay
from .text import wrap_text

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 800
TEXT_GAP = 5
TITLE_LIMIT = 49

_WHITE = (255, 255, 255, 255)


@dataclass
class IndexOptions:
    """Settings for building an index image.

    ``info`` returns the caption text printed below a thumbnail for a
    filename; without it no text is drawn. ``bg_file`` is an image to
    draw the index onto, or ``"trans"`` for a transparent background.
    """

    thumb_w: int = 60
    thumb_h: int = 60
    limit_w: int = 0
    limit_h: int = 0
    aspect: bool = True
    stretch: bool = False
    alpha: bool = False
    alpha_level: int = 0
    info: Callable[[str], str] | None = None
    bg_file: str | None = None
    font: str | None = None
    font_size: int = 11
    title: bool = False
    title_font: str | None = None
    output_file: str | None = None
    output_dir: str | None = None
    auto_rotate: bool = False
    verbose: bool = False
    stream: TextIO | None = None


def thumbnail_size(
    image_w: int,
    image_h: int,
    thumb_w: int,
    thumb_h: int,
    aspect: bool = True,
    stretch: bool = False,
) -> tuple[int, int]:
    """Return the size a thumbnail of an ``image_w`` x ``image_h`` image gets.

    With ``aspect`` the image keeps its proportions inside the thumbnail
    box; without ``stretch`` it is never made larger than it is.
    """
    width, height = thumb_w, thumb_h
    if aspect and image_h and thumb_w and thumb_h:
        ratio = (image_w / image_h) / (thumb_w / thumb_h)
        if ratio > 1.0:
            height = int(thumb_h / ratio)
        elif ratio != 1.0:
            width = int(thumb_w * ratio)
    if not stretch and (width > image_w or height > image_h):
        width, height = image_w, image_h
    return width, height


def _text_area_width(text_w: int, thumb_w: int) -> int:
    area = max(thumb_w, text_w)
    if area > thumb_w:
        area += TEXT_GAP
    return area


def calculate_height(
    text_sizes: Sequence[tuple[int, int]], width: int, thumb_w: int, thumb_h: int
) -> tuple[int, int]:
    """Lay thumbnails out in rows of at most ``width`` pixels.

    ``text_sizes`` holds the (width, height) of each file's caption text,
    (0, 0) when there is none. Returns the total height needed and the
    height of one thumbnail row including its text.
    """
    tot_thumb_h = thumb_h + TEXT_GAP
    text_area_h = 0
    x = y = 0
    for text_w, text_h in text_sizes:
        if text_h > text_area_h:
            text_area_h = text_h + TEXT_GAP
            tot_thumb_h = thumb_h + text_area_h
        area_w = _text_area_width(text_w, thumb_w)
        if x > width - area_w:
            x = 0
            y += tot_thumb_h
        x += area_w
    return y + tot_thumb_h, tot_thumb_h


def calculate_width(
    text_sizes: Sequence[tuple[int, int]], height: int, thumb_w: int, thumb_h: int
) -> tuple[int, int]:
    """Lay thumbnails out in columns of at most ``height`` pixels.

    Returns the total width needed and the height of one thumbnail cell
    including its text.
    """
    tot_thumb_h = thumb_h + TEXT_GAP
    text_area_h = 0
    area_w = 0
    max_column_w = 0
    x = y = 0
    for text_w, text_h in text_sizes:
        area_w = thumb_w
        if text_w > area_w:
            area_w = text_w
        if text_h > text_area_h:
            text_area_h = text_h + TEXT_GAP
            tot_thumb_h = thumb_h + text_area_h
        if area_w > thumb_w:
            area_w += TEXT_GAP
        max_column_w = max(max_column_w, area_w)
        if y > height - tot_thumb_h:
            y = 0
            x += max_column_w
            max_column_w = 0
        y += tot_thumb_h
    return x + area_w, tot_thumb_h


def index_title(count: int, width: int, height: int) -> str:
    """Return the title line written below an index image."""
    text = f"pixview index - {count} thumbnails, {width} by {height} pixels"
    return text[:TITLE_LIMIT]


def _load_font(path: str | None, size: int):
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.warning("Cannot load font %s, using the default", path)
    return ImageFont.load_default()


def _text_size(font, text: str) -> tuple[int, int]:
    right = font.getbbox(text)[2] if text else 0
    try:
        ascent, descent = font.getmetrics()
        height = ascent + descent
    except AttributeError:
        height = font.getbbox("Wg")[3]
    return int(right), int(height)


class _Captioner:
    """Wraps and measures the caption text of index entries."""

    def __init__(self, info: Callable[[str], str] | None, font, wrap_width: int) -> None:
        self.info = info
        self.font = font
        self.wrap_width = wrap_width

    def lines(self, filename: str) -> list[str]:
        if self.info is None:
            return []
        return wrap_text(self.info(filename), self.wrap_width, lambda s: _text_size(self.font, s)[0])

    def dimensions(self, filename: str) -> tuple[int, int]:
        max_w = total_h = 0
        for line in self.lines(filename):
            line_w, line_h = _text_size(self.font, line)
            max_w = max(max_w, line_w)
            total_h += line_h + 2
        return max_w, total_h


def _background(bg_file: str | None) -> tuple[Image.Image | None, bool]:
    if not bg_file:
        return None, False
    if bg_file == "trans":
        return None, True
    try:
        return load_image(bg_file).convert("RGBA"), False
    except ImageLoadError as exc:
        logger.warning("%s", exc)
        return None, False


def _new_canvas(width: int, height: int) -> Image.Image:
    try:
        return Image.new("RGBA", (width, height))
    except (MemoryError, ValueError) as exc:
        megabytes = width * height * 4 // (1024 * 1024)
        raise MemoryError(
            f"Failed to create {width}x{height} pixels ({megabytes} MB) index image."
        ) from exc


def make_index(paths: Iterable[str | os.PathLike[str]], options: IndexOptions | None = None) -> Image.Image:
    """Render thumbnails of ``paths`` into one index image and return it.

    Files that cannot be loaded are skipped. If ``options.output_file`` is
    set the image is also saved there.
    """
    opts = options if options is not None else IndexOptions()
    files = [os.fspath(p) for p in paths]

    font = _load_font(opts.font, opts.font_size)
    title_fn = _load_font(opts.title_font, opts.font_size) if opts.title else None
    title_area_h = _text_size(title_fn, "W")[1] + 4 if title_fn is not None else 0

    _, th = _text_size(font, "W")
    captions = _Captioner(opts.info, font, opts.thumb_w * 3)

    bg_im, trans_bg = _background(opts.bg_file)
    limit_w, limit_h = opts.limit_w, opts.limit_h
    if not limit_w and not limit_h:
        if bg_im is not None:
            limit_w, limit_h = bg_im.size
        else:
            limit_w = DEFAULT_WIDTH

    text_sizes = [captions.dimensions(f) for f in files] if opts.info else [(0, 0)] * len(files)
    vertical = False
    if limit_w:
        w = limit_w
        h, tot_thumb_h = calculate_height(text_sizes, w, opts.thumb_w, opts.thumb_h)
        if limit_h:
            if h > limit_h:
                logger.warning(
                    "The image size you specified (%dx%d) is not large enough to hold "
                    "all %d thumbnails. To fit all the thumbnails, either decrease their "
                    "size, choose a smaller font, or use a larger image (like %dx%d)",
                    limit_w,
                    limit_h,
                    len(files),
                    w,
                    h,
                )
            h = limit_h
    else:
        vertical = True
        h = limit_h
        w, tot_thumb_h = calculate_width(text_sizes, h, opts.thumb_w, opts.thumb_h)

    index_w, index_h = w, h + title_area_h
    canvas = _new_canvas(index_w, index_h)
    if bg_im is not None:
        canvas.paste(bg_im.resize((w, h)) if w > 0 and h > 0 else bg_im, (0, 0))
    elif not trans_bg:
        canvas.paste((0, 0, 0, 255), (0, 0, index_w, index_h))
    draw = ImageDraw.Draw(canvas)

    status = StatusDisplay(len(files), opts.stream) if opts.verbose else None
    x = y = 0
    max_column_w = 0
    count = 0
    for filename in files:
        try:
            image = load_image(filename, opts.auto_rotate)
        except ImageLoadError as exc:
            if status is not None:
                status.update("x")
            logger.debug("%s", exc)
            continue
        if status is not None:
            status.update(".")

        www, hhh = thumbnail_size(
            image.width, image.height, opts.thumb_w, opts.thumb_h, opts.aspect, opts.stretch
        )
        count += 1
        thumb = image.convert("RGBA").resize((max(www, 1), max(hhh, 1)))
        if opts.alpha:
            thumb.putalpha(opts.alpha_level)

        text_w = captions.dimensions(filename)[0] if opts.info else 0
        area_w = _text_area_width(text_w, opts.thumb_w)

        if vertical:
            max_column_w = max(max_column_w, area_w)
            if y > h - tot_thumb_h:
                y = 0
                x += max_column_w
                max_column_w = 0
            if x > w - area_w:
                break
        else:
            if x > w - area_w:
                x = 0
                y += tot_thumb_h
            if y > h - tot_thumb_h:
                break

        xxx = x + (area_w - www) // 2
        yyy = y
        if opts.aspect:
            yyy += (opts.thumb_h - hhh) // 2
        if www > 0 and hhh > 0:
            canvas.paste(thumb, (xxx, yyy), thumb)

        for lineno, line in enumerate(captions.lines(filename)):
            fw, _ = _text_size(font, line)
            draw.text(
                (x + ((area_w - fw) >> 1), y + opts.thumb_h + lineno * (th + 2) + 2),
                line,
                font=font,
                fill=_WHITE,
            )

        if vertical:
            y += tot_thumb_h
        else:
            x += area_w

    if status is not None:
        status.finish()

    if title_fn is not None:
        title = index_title(count, w, h)
        fw, fh = _text_size(title_fn, title)
        draw.text(((index_w - fw) >> 1, index_h - fh - 2), title, font=title_fn, fill=_WHITE)

    if opts.output_file:
        target = (
            f"{opts.output_dir}/{opts.output_file}" if opts.output_dir else opts.output_file
        )
        canvas.save(target)
        if opts.verbose:
            out = opts.stream if opts.stream is not None else sys.stderr
            out.write(f"pixview - File saved as {target}\n")
            out.write(
                f"    - Image is {canvas.width}x{canvas.height} pixels "
                f"and contains {count} thumbnails\n"
            )

    return canvas