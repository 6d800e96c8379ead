"""Loading images from disk, with error reporting and EXIF orientation."""

from __future__ import annotations

import enum
import errno
import os

from PIL import Image

ORIENTATION_TAG = 0x0112

_URL_PREFIXES = ("http://", "https://", "ftp://")


class LoadError(enum.Enum):
    """Reasons why an image could not be loaded."""

    FILE_DOES_NOT_EXIST = enum.auto()
    FILE_IS_DIRECTORY = enum.auto()
    PERMISSION_DENIED_TO_READ = enum.auto()
    NO_LOADER = enum.auto()
    UNKNOWN = enum.auto()
    PATH_TOO_LONG = enum.auto()
    PATH_COMPONENT_NON_EXISTANT = enum.auto()
    PATH_COMPONENT_NOT_DIRECTORY = enum.auto()
    PATH_POINTS_OUTSIDE_ADDRESS_SPACE = enum.auto()
    TOO_MANY_SYMBOLIC_LINKS = enum.auto()
    OUT_OF_MEMORY = enum.auto()
    OUT_OF_FILE_DESCRIPTORS = enum.auto()
    PERMISSION_DENIED_TO_WRITE = enum.auto()
    OUT_OF_DISK_SPACE = enum.auto()
    IMAGE_READ = enum.auto()
    IMAGE_FRAME = enum.auto()
    IMAGEMAGICK = enum.auto()
    CURL = enum.auto()
    DCRAW = enum.auto()
    MAGICBYTES = enum.auto()
    OTHER = enum.auto()


_MESSAGES = {
    LoadError.FILE_DOES_NOT_EXIST: "%s - File does not exist",
    LoadError.FILE_IS_DIRECTORY: "%s - Directory specified for image filename",
    LoadError.PERMISSION_DENIED_TO_READ: "%s - No read access",
    LoadError.NO_LOADER: "%s - No loader for that file format",
    LoadError.UNKNOWN: "%s - No loader for that file format",
    LoadError.PATH_TOO_LONG: "%s - Path specified is too long",
    LoadError.PATH_COMPONENT_NON_EXISTANT: "%s - Path component does not exist",
    LoadError.PATH_COMPONENT_NOT_DIRECTORY: "%s - Path component is not a directory",
    LoadError.PATH_POINTS_OUTSIDE_ADDRESS_SPACE: "%s - Path points outside address space",
    LoadError.TOO_MANY_SYMBOLIC_LINKS: "%s - Too many levels of symbolic links",
    LoadError.OUT_OF_MEMORY: "While loading %s - Out of memory",
    LoadError.OUT_OF_FILE_DESCRIPTORS: "%s - Out of file descriptors while loading",
    LoadError.PERMISSION_DENIED_TO_WRITE: "%s - Cannot write to directory",
    LoadError.OUT_OF_DISK_SPACE: "%s - Cannot write - out of disk space",
    LoadError.IMAGE_READ: "%s - Invalid image file",
    LoadError.IMAGE_FRAME: "%s - Requested frame not in image",
    LoadError.IMAGEMAGICK: "%s - No ImageMagick loader for that file format",
    LoadError.CURL: "%s - unable to retrieve the file",
    LoadError.DCRAW: "%s - Unable to open preview via dcraw",
    LoadError.MAGICBYTES: "%s - Does not look like an image (magic bytes missing)",
    LoadError.OTHER: "While loading %s - Unknown error",
}

_ERRNO_ERRORS = {
    errno.ENOENT: LoadError.FILE_DOES_NOT_EXIST,
    errno.EISDIR: LoadError.FILE_IS_DIRECTORY,
    errno.EACCES: LoadError.PERMISSION_DENIED_TO_READ,
    errno.EPERM: LoadError.PERMISSION_DENIED_TO_READ,
    errno.ENAMETOOLONG: LoadError.PATH_TOO_LONG,
    errno.ENOTDIR: LoadError.PATH_COMPONENT_NOT_DIRECTORY,
    errno.EFAULT: LoadError.PATH_POINTS_OUTSIDE_ADDRESS_SPACE,
    errno.ELOOP: LoadError.TOO_MANY_SYMBOLIC_LINKS,
    errno.ENOMEM: LoadError.OUT_OF_MEMORY,
    errno.EMFILE: LoadError.OUT_OF_FILE_DESCRIPTORS,
    errno.ENFILE: LoadError.OUT_OF_FILE_DESCRIPTORS,
    errno.ENOSPC: LoadError.OUT_OF_DISK_SPACE,
}

_T = Image.Transpose
_ORIENTATIONS = {
    2: (_T.FLIP_LEFT_RIGHT,),
    3: (_T.ROTATE_180,),
    4: (_T.FLIP_TOP_BOTTOM,),
    5: (_T.ROTATE_90, _T.FLIP_TOP_BOTTOM),
    6: (_T.ROTATE_270,),
    7: (_T.ROTATE_90, _T.FLIP_LEFT_RIGHT),
    8: (_T.ROTATE_90,),
}


def load_error_message(filename: str, error: LoadError) -> str:
    """Return the human-readable message for a load failure."""
    return _MESSAGES[error] % filename


class ImageLoadError(Exception):
    """Raised when an image cannot be loaded."""

    def __init__(self, filename: str, error: LoadError) -> None:
        self.filename = filename
        self.error = error
        super().__init__(load_error_message(filename, error))


def is_url(path: str) -> bool:
    """Tell whether ``path`` names a remote resource rather than a file."""
    return path.startswith(_URL_PREFIXES)


def is_image_mime(mime_type: str | None) -> bool:
    """Tell whether a MIME type denotes an image."""
    return bool(mime_type) and mime_type.startswith("image/")


def passes_dimension_filter(
    width: int,
    height: int,
    min_width: int,
    max_width: int,
    min_height: int,
    max_height: int,
) -> bool:
    """Return False for images outside the allowed size range."""
    return min_width <= width <= max_width and min_height <= height <= max_height


def apply_orientation(image: Image.Image, orientation: int) -> Image.Image:
    """Return ``image`` turned upright according to an EXIF orientation."""
    for method in _ORIENTATIONS.get(orientation, ()):
        image = image.transpose(method)
    return image


def _error_from_oserror(exc: OSError) -> LoadError:
    if exc.errno is None:
        return LoadError.IMAGE_READ
    return _ERRNO_ERRORS.get(exc.errno, LoadError.OTHER)


def load_image(path: str | os.PathLike[str], auto_rotate: bool = False) -> Image.Image:
    """Load an image file fully into memory.

    Raises ImageLoadError describing why the file could not be loaded.
    """
    filename = os.fspath(path)
    try:
        with open(filename, "rb") as handle:
            image = Image.open(handle)
            image.load()
    except Image.UnidentifiedImageError as exc:
        raise ImageLoadError(filename, LoadError.NO_LOADER) from exc
    except Image.DecompressionBombError as exc:
        raise ImageLoadError(filename, LoadError.OUT_OF_MEMORY) from exc
    except MemoryError as exc:
        raise ImageLoadError(filename, LoadError.OUT_OF_MEMORY) from exc
    except OSError as exc:
        raise ImageLoadError(filename, _error_from_oserror(exc)) from exc
    except (ValueError, SyntaxError, EOFError) as exc:
        raise ImageLoadError(filename, LoadError.IMAGE_READ) from exc

    if auto_rotate:
        orientation = image.getexif().get(ORIENTATION_TAG, 0)
        image = apply_orientation(image, orientation)
    return image