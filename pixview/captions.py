"""Caption files stored next to images in a caption subdirectory."""

from __future__ import annotations

import os


def _split(filename: str) -> tuple[str, str]:
    directory, slash, name = filename.rpartition("/")
    if not slash:
        return ".", filename
    return directory, name


def caption_filename(
    filename: str | os.PathLike[str], caption_path: str, create_dir: bool = False
) -> str | None:
    """Return the caption file for an image, e.g. ``dir/captions/img.jpg.txt``.

    Returns None when the caption directory is missing and ``create_dir``
    is false. Raises NotADirectoryError if the caption directory exists
    but is not a directory, and OSError if it cannot be created.
    """
    directory, name = _split(os.fspath(filename))
    caption_dir = f"{directory}/{caption_path}"

    if not os.path.exists(caption_dir):
        if not create_dir:
            return None
        try:
            os.mkdir(caption_dir, 0o755)
        except OSError as exc:
            raise OSError(
                exc.errno, f"Failed to create caption directory {caption_dir}: {exc.strerror}"
            ) from exc
    elif not os.path.isdir(caption_dir):
        raise NotADirectoryError(
            f"Caption directory ({caption_dir}) exists, but is not a directory."
        )

    return f"{directory}/{caption_path}/{name}.txt"


def read_caption(filename: str | os.PathLike[str], caption_path: str) -> str:
    """Return the caption of an image, or an empty string if it has none."""
    path = caption_filename(filename, caption_path, create_dir=False)
    if path is None:
        return ""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError:
        return ""


def write_caption(filename: str | os.PathLike[str], caption_path: str, text: str) -> str:
    """Store ``text`` as the caption of an image and return the file written."""
    path = caption_filename(filename, caption_path, create_dir=True)
    assert path is not None
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)
    return path