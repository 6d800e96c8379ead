# pixview

Command-line and library tools for working with collections of images:
list them with their format, dimensions and size, sort out which files can
and cannot be loaded, and build an index sheet of thumbnails.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install .[test]
pytest
```

## Command line

```
pixview --help
```

prints all options. One mode is chosen per run:

- `-l`, `--list` – print a tab-separated table of the loadable files:
  `NUM FORMAT WIDTH HEIGHT PIXELS SIZE ALPHA FILENAME`. Pixel counts and
  file sizes are abbreviated with `k`, `M`, `G`, `T` suffixes. Files that
  fail to load are reported as warnings and left out.
- `-U`, `--loadable` – print only the files that load. The exit status is 1
  if any file failed to load, otherwise 0.
- `-u`, `--unloadable` – print only the files that fail to load. The exit
  status is 1 if any file loaded, otherwise 0.
- `-i`, `--index` – build an index sheet: a grid of thumbnails. The sheet
  is written to a file only when `-o`/`--output` is given (inside
  `-O`/`--output-dir` if that is set as well).

Without a mode, `pixview` reports "Invalid option combination".

Index options:

- `-y`/`--thumb-width`, `-E`/`--thumb-height` – thumbnail box (default 60×60).
- `-W`/`--limit-width`, `-H`/`--limit-height` – sheet size. With only a
  height the thumbnails are laid out in columns; with neither, the width is
  taken from the background image or defaults to 800 pixels.
- `-b`/`--bg FILE` – draw onto an image, or `trans` for a transparent sheet
  (the default background is black).
- `--ignore-aspect` – do not keep thumbnail proportions; `-s`/`--stretch` –
  allow thumbnails larger than the image.
- `-a`/`--alpha LEVEL` – give thumbnails a fixed alpha value.
- `--title`, `--title-font FILE` – print a line such as
  `pixview index - 12 thumbnails, 800 by 150 pixels` below the sheet.
- `--font FILE`, `--font-size N` – TrueType font for text.
- `--auto-rotate` – turn images upright from their EXIF orientation.
- `-V`/`--verbose` – show a progress line while loading; `-q`/`--quiet` –
  only report errors.

## Library

The modules can also be used on their own:

- `pixview.md5` – a pure MD5 implementation with a hashlib-like interface
  (`MD5` with `update`, `copy`, `digest`, `hexdigest`; `md5_hexdigest`).
- `pixview.keys` – key bindings: `KeyMap` holds built-in defaults for every
  viewer action, reads binding files (`load`, `load_file`) with lines such
  as `next_img Right n C-space`, and matches events (`matches`,
  `find_action`). `find_config_path` returns
  `$XDG_CONFIG_HOME/pixview/keys` or `~/.config/pixview/keys`.
  `keysym_from_name` knows the common X keysym names.
- `pixview.text` – `wrap_text` word-wraps to a pixel width using a
  measuring function; `zoom_label`, `position_label` and `action_lines`
  build overlay labels.
- `pixview.status` – `StatusDisplay`, the progress line shown while many
  files are loaded.
- `pixview.loading` – `load_image` raises `ImageLoadError` with a
  `LoadError` reason; `apply_orientation`, `load_error_message`, `is_url`,
  `is_image_mime`, `passes_dimension_filter`.
- `pixview.convert` – `Converter` loads files no built-in loader reads by
  converting them with `dcraw` (camera raw) or ImageMagick's `convert`, with
  an optional timeout and conversion cache, and downloads URLs. The command
  line does not use it.
- `pixview.listing` – `list_images`, `loadables`, `image_info`,
  `ImageInfo`, `format_size`.
- `pixview.captions` – `caption_filename`, `read_caption` and
  `write_caption` for per-image caption files in a caption subdirectory.
- `pixview.control` – `StdinDecoder` turns terminal input into key events,
  `CaptionEditor` edits a caption from key presses, `zoom_step` and
  `adjust_reload` compute zoom and reload-delay changes, and `raw_terminal`
  is a context manager for unbuffered terminal input.
- `pixview.layout` – `thumbnail_size`, `calculate_height`,
  `calculate_width`, `index_title`, and `make_index` with `IndexOptions`.

```python
from pixview.md5 import md5_hexdigest

md5_hexdigest(b"abc")  # '900150983cd24fb0d6963f7d28e17f72'
```

## What it does not do

pixview has no image window: there is no interactive viewer or slideshow,
and the key binding, caption editing and zoom helpers are building blocks
without a screen that uses them. It also cannot rotate, flip or mirror image
files in place.