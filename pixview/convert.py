"""Loading images through external converters and HTTP downloads."""

from __future__ import annotations

import logging
import os
import shutil
import signal
import ssl
import subprocess
import tempfile
import urllib.error
import urllib.request

from PIL import Image

from .loading import ImageLoadError, LoadError, is_url, load_image

logger = logging.getLogger(__name__)

NAME_MAX = 255
HTTP_TIMEOUT = 1800
USER_AGENT = "pixview"

_CONVERTIBLE = (LoadError.UNKNOWN, LoadError.NO_LOADER)


def _unlink(path: str) -> None:
    try:
        os.unlink(path)
    except OSError:
        pass


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        proc.kill()


class Converter:
    """Loads images that need a download or an external conversion first.

    A negative ``timeout`` disables conversion, zero allows it without a
    time limit. With ``use_cache`` converted files are kept and reused
    until the converter is closed as a context manager.
    """

    def __init__(self, timeout: int = -1, use_cache: bool = False, quiet: bool = False) -> None:
        self.timeout = timeout
        self.use_cache = use_cache
        self.quiet = quiet
        self._cache: dict[str, str] = {}
        self._leftovers: list[str] = []

    def __enter__(self) -> Converter:
        return self

    def __exit__(self, *exc_info) -> None:
        for path in self._leftovers:
            _unlink(path)
        self._leftovers.clear()
        self._cache.clear()

    @property
    def _limit(self) -> float | None:
        return self.timeout if self.timeout > 0 else None

    def _cached(self, key: str) -> str | None:
        return self._cache.get(key) if self.use_cache else None

    def _remember(self, key: str, path: str) -> None:
        if self.use_cache:
            self._cache[key] = path

    @staticmethod
    def _temp_target(filename: str) -> tuple[int, str]:
        base = filename.rsplit("/", 1)[-1]
        return tempfile.mkstemp(prefix=f"{base[:NAME_MAX - 16]}_")

    def is_raw(self, filename: str) -> bool:
        """Tell whether dcraw recognises ``filename`` as a raw camera image."""
        try:
            result = subprocess.run(
                ["dcraw", "-i", filename],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            return False
        return result.returncode == 0

    def dcraw(self, filename: str) -> str | None:
        """Extract the embedded preview of a raw image; return its path."""
        cached = self._cached(filename)
        if cached:
            return cached

        fd, path = self._temp_target(filename)
        with os.fdopen(fd, "wb") as out:
            try:
                result = subprocess.run(
                    ["dcraw", "-c", "-e", filename],
                    stdout=out,
                    timeout=self._limit,
                    check=False,
                )
            except subprocess.TimeoutExpired:
                _unlink(path)
                if not self.quiet:
                    logger.warning("%s - Conversion took too long, skipping", filename)
                return None
            except OSError as exc:
                _unlink(path)
                logger.warning("%s: Can't load with dcraw: %s", filename, exc)
                return None
        if result.returncode < 0:
            _unlink(path)
            return None

        self._remember(filename, path)
        return path

    def magick(self, filename: str) -> str | None:
        """Convert ``filename`` to PNG with ImageMagick; return its path."""
        cached = self._cached(filename)
        if cached:
            return cached

        fd, path = self._temp_target(filename)
        os.close(fd)

        env = dict(os.environ)
        tempdir = None
        if "MAGICK_TMPDIR" not in env:
            try:
                tempdir = tempfile.mkdtemp(prefix=".pixview-magick-tmp-")
                env["MAGICK_TMPDIR"] = tempdir
            except OSError as exc:
                logger.warning(
                    "%s: ImageMagick may leave temporary files behind. mkdtemp failed: %s",
                    filename,
                    exc,
                )

        output = subprocess.DEVNULL if self.quiet else None
        result: str | None = path
        try:
            proc = subprocess.Popen(
                ["convert", filename, f"png:{path}"],
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=output,
                env=env,
                start_new_session=True,
            )
        except OSError as exc:
            logger.warning("%s: Can't load with imagemagick: %s", filename, exc)
            result = None
        else:
            try:
                returncode = proc.wait(timeout=self._limit)
            except subprocess.TimeoutExpired:
                _kill_group(proc)
                proc.wait()
                result = None
                if not self.quiet:
                    logger.warning("%s: Conversion took too long, skipping", filename)
            else:
                if returncode != 0:
                    result = None
        finally:
            if tempdir is not None:
                try:
                    shutil.rmtree(tempdir)
                except OSError as exc:
                    logger.warning(
                        "%s: Cannot remove temporary ImageMagick files from %s: %s",
                        filename,
                        tempdir,
                        exc,
                    )

        if result is None:
            _unlink(path)
            return None
        self._remember(filename, result)
        return result

    def fetch_url(self, url: str, keep: bool = False, output_dir: str | None = None) -> str | None:
        """Download ``url`` into a local file; return its path or None."""
        cached = self._cached(url)
        if cached:
            return cached

        directory = (output_dir or os.curdir) if keep else tempfile.gettempdir()
        base = url.rsplit("/", 1)[-1]
        suffix = f"_{base}"[: NAME_MAX - 21]
        try:
            fd, path = tempfile.mkstemp(prefix="pixview_curl_", suffix=suffix, dir=directory)
        except OSError as exc:
            logger.warning("open url: mkstemps failed: %s", exc)
            return None

        cafile = os.environ.get("CURL_CA_BUNDLE")
        context = ssl.create_default_context(cafile=cafile) if cafile else None
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with os.fdopen(fd, "wb") as out, urllib.request.urlopen(
                request, timeout=HTTP_TIMEOUT, context=context
            ) as response:
                shutil.copyfileobj(response, out)
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.warning("open url: %s", exc)
            _unlink(path)
            return None

        self._remember(url, path)
        return path

    def forget(self, filename: str) -> None:
        """Drop the cached conversion of ``filename`` so it is redone."""
        self._cache.pop(filename, None)

    def _dispose(self, path: str) -> None:
        if not self.use_cache:
            _unlink(path)
        elif path not in self._leftovers:
            self._leftovers.append(path)

    def load(self, filename: str, auto_rotate: bool = False) -> Image.Image:
        """Load a file or URL, converting it if no loader handles it."""
        filename = os.fspath(filename)
        if is_url(filename):
            converted = self.fetch_url(filename)
            if converted is None:
                raise ImageLoadError(filename, LoadError.CURL)
        else:
            try:
                return load_image(filename, auto_rotate)
            except ImageLoadError as exc:
                if self.timeout < 0 or exc.error not in _CONVERTIBLE:
                    raise
                if self.is_raw(filename):
                    converted, failure = self.dcraw(filename), LoadError.DCRAW
                else:
                    converted, failure = self.magick(filename), LoadError.IMAGEMAGICK
                if converted is None:
                    raise ImageLoadError(filename, failure) from exc

        try:
            return load_image(converted, auto_rotate)
        except ImageLoadError as exc:
            raise ImageLoadError(filename, exc.error) from exc
        finally:
            self._dispose(converted)