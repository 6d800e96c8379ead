"""Command line entry point: selects a mode and runs it over the files."""

from __future__ import annotations

import argparse
import logging
import sys

from .layout import IndexOptions, make_index
from .listing import list_images, loadables


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command line."""
    defaults = IndexOptions()
    parser = argparse.ArgumentParser(prog="pixview", description="Image listing and index tool.")
    modes = parser.add_argument_group("modes")
    modes.add_argument("-i", "--index", action="store_true", help="create an index image")
    modes.add_argument("-l", "--list", action="store_true", help="list image properties")
    modes.add_argument("-U", "--loadable", action="store_true", help="print loadable files")
    modes.add_argument("-u", "--unloadable", action="store_true", help="print unloadable files")

    parser.add_argument("-y", "--thumb-width", type=int, default=defaults.thumb_w)
    parser.add_argument("-E", "--thumb-height", type=int, default=defaults.thumb_h)
    parser.add_argument("-W", "--limit-width", type=int, default=0)
    parser.add_argument("-H", "--limit-height", type=int, default=0)
    parser.add_argument("-o", "--output", dest="output_file", default=None)
    parser.add_argument("-O", "--output-dir", default=None)
    parser.add_argument("-b", "--bg", dest="bg_file", default=None)
    parser.add_argument("--font", default=None, help="TrueType font file")
    parser.add_argument("--font-size", type=int, default=defaults.font_size)
    parser.add_argument("--title", action="store_true", help="print a title below the index")
    parser.add_argument("--title-font", default=None)
    parser.add_argument("-s", "--stretch", action="store_true")
    parser.add_argument("--ignore-aspect", action="store_true")
    parser.add_argument("-a", "--alpha", type=int, default=None, metavar="LEVEL")
    parser.add_argument("--auto-rotate", action="store_true")
    parser.add_argument("-V", "--verbose", action="store_true")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("files", nargs="*")
    return parser


def _index_options(args: argparse.Namespace) -> IndexOptions:
    return IndexOptions(
        thumb_w=args.thumb_width,
        thumb_h=args.thumb_height,
        limit_w=args.limit_width,
        limit_h=args.limit_height,
        aspect=not args.ignore_aspect,
        stretch=args.stretch,
        alpha=args.alpha is not None,
        alpha_level=args.alpha or 0,
        bg_file=args.bg_file,
        font=args.font,
        font_size=args.font_size,
        title=args.title or args.title_font is not None,
        title_font=args.title_font,
        output_file=args.output_file,
        output_dir=args.output_dir,
        auto_rotate=args.auto_rotate,
        verbose=args.verbose,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the selected mode; return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.ERROR if args.quiet else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="pixview: %(message)s", stream=sys.stderr)

    if args.index:
        make_index(args.files, _index_options(args))
        return 0
    if args.list:
        list_images(args.files)
        return 0
    if args.loadable:
        return loadables(args.files, True)
    if args.unloadable:
        return loadables(args.files, False)

    parser.error("Invalid option combination")
    return 2


if __name__ == "__main__":
    sys.exit(main())