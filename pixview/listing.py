"""List mode and the loadable / unloadable file filters."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from .loading import ImageLoadError, load_image

logger = logging.getLogger(__name__)

HEADER = "NUM\tFORMAT\tWIDTH\tHEIGHT\tPIXELS\tSIZE\tALPHA\tFILENAME"

_UNITS = ("", "k", "M", "G", "T")


@dataclass(frozen=True)
class ImageInfo:
    """What list mode reports about one image."""

    filename: str
    format: str
    width: int
    height: int
    size: int
    has_alpha: bool

    @property
    def pixels(self) -> int:
        return self.width * self.height

    def row(self, number: int) -> str:
        """Format one tab-separated line of the listing."""
        return "\t".join(
            (
                str(number),
                self.format,
                str(self.width),
                str(self.height),
                format_size(self.pixels),
                format_size(self.size),
                "X" if self.has_alpha else "-",
                self.filename,
            )
        )


def format_size(size: int) -> str:
    """Abbreviate a count with a decimal unit suffix."""
    value = float(size)
    for unit in _UNITS:
        if value < 1000 or unit == _UNITS[-1]:
            return str(int(value)) if not unit else f"{value:.1f}{unit}"
        value /= 1000
    raise AssertionError("unreachable")


def image_info(path: str | os.PathLike[str]) -> ImageInfo:
    """Load ``path`` and describe it; raises ImageLoadError on failure."""
    filename = os.fspath(path)
    image = load_image(filename)
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return ImageInfo(
        filename=filename,
        format=(image.format or "").lower(),
        width=image.width,
        height=image.height,
        size=os.stat(filename).st_size,
        has_alpha=has_alpha,
    )


def list_images(paths: Iterable[str], stream: TextIO | None = None) -> list[ImageInfo]:
    """Print a table of the loadable images among ``paths``."""
    out = stream if stream is not None else sys.stdout
    out.write(HEADER + "\n")
    listed: list[ImageInfo] = []
    for path in paths:
        try:
            info = image_info(path)
        except ImageLoadError as exc:
            logger.warning("%s", exc)
            continue
        listed.append(info)
        out.write(info.row(len(listed)) + "\n")
    return listed


def loadables(paths: Iterable[str], loadable: bool = True, stream: TextIO | None = None) -> int:
    """Print the files that load (or, with ``loadable`` False, that do not).

    Returns 1 if any file fell into the other group, else 0.
    """
    out = stream if stream is not None else sys.stdout
    status = 0
    for path in paths:
        try:
            load_image(path)
            loaded = True
        except ImageLoadError:
            loaded = False
        if loaded == loadable:
            out.write(f"{os.fspath(path)}\n")
            out.flush()
        else:
            status = 1
    return status