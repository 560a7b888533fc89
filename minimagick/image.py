"""Image handle driving identify, mogrify and composite."""

import glob
import logging
import os
import re
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Union
from urllib.parse import urlparse

import requests

from minimagick.command import CommandBuilder
from minimagick.exceptions import ImageFetchError, InvalidInputError, MiniMagickError
from minimagick.execution import Executor
from minimagick.tempfiles import ManagedTempFile

logger = logging.getLogger(__name__)


class Image:
    """A handle on an image file that is processed in place.

    The path passed in is the *working copy*: mogrify commands modify it, and
    ``format`` renames it. Use ``Image.open`` to work on a temporary copy and
    leave the original untouched.

    Any public attribute that is not defined here is resolved against the
    recognized mogrify options and run as a single-option mogrify command:

        >>> image = Image.open("photo.jpg")
        >>> image.resize("50%").auto_orient()
        >>> image.write("thumb.jpg")

    Attributes:
        path: Location of the working file
        executor: Executor used for every command
    """

    def __init__(
        self,
        path: Union[str, Path],
        tempfile: Optional[ManagedTempFile] = None,
        executor: Optional[Executor] = None
    ) -> None:
        """Create an image handle.

        Args:
            path: Location of the image file (modified in place)
            tempfile: Temporary file owned by this image, released by
                ``destroy`` or when a command fails
            executor: Executor to run commands with (default settings if not
                provided)
        """
        self.path = str(path)
        self._tempfile = tempfile
        self.executor = executor if executor is not None else Executor()

    # Class Methods
    # -------------

    @classmethod
    def read(
        cls,
        stream: Any,
        ext: Optional[str] = None,
        executor: Optional[Executor] = None
    ) -> "Image":
        """Load an image from binary data or a readable stream.

        The data is written to a temporary file that the returned image owns.

        Args:
            stream: Bytes, or an object with a ``read()`` method returning bytes
            ext: Extension for the temporary file (e.g. ".jpg"), which helps
                the tool guess the format
            executor: Executor to run commands with

        Returns:
            Image backed by a temporary copy of the data

        Raises:
            TypeError: If the data is not bytes-like
            InvalidInputError: If the data is not an image the tool can decode
        """
        if hasattr(stream, "read"):
            stream = stream.read()
        if not isinstance(stream, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Image data must be bytes, not {type(stream).__name__}"
            )

        tempfile = ManagedTempFile.create(bytes(stream), suffix=_normalize_ext(ext))
        image = cls(tempfile.path, tempfile, executor=executor)
        try:
            image.run_command("identify", image.path)
        except MiniMagickError:
            image.destroy()
            raise
        return image

    @classmethod
    def open(
        cls,
        file_or_url: Union[str, Path],
        ext: Optional[str] = None,
        executor: Optional[Executor] = None
    ) -> "Image":
        """Open a local file or URL as a temporary working copy.

        Args:
            file_or_url: Local path, or a URL (anything containing "://")
            ext: Extension to read the file as (guessed from the path if not
                provided)
            executor: Executor to run commands with

        Returns:
            Image backed by a temporary copy

        Raises:
            ImageFetchError: If a URL cannot be downloaded
            InvalidInputError: If the content is not a decodable image
        """
        source = str(file_or_url)
        if executor is None:
            executor = Executor()

        if "://" in source:
            if ext is None:
                ext = Path(urlparse(source).path).suffix
            data = _fetch(source, timeout=executor.settings.http_timeout)
            return cls.read(data, ext, executor=executor)

        if ext is None:
            ext = Path(source).suffix
        with open(source, "rb") as f:
            return cls.read(f, ext, executor=executor)

    # Instance Methods
    # ----------------

    def valid(self) -> bool:
        """Check that the tool can read and understand the file.

        Uses ``identify``. Note that a failing check releases the temporary
        file this image owns.
        """
        try:
            self.run_command("identify", self.path)
        except InvalidInputError:
            return False
        return True

    def __getitem__(self, value: str) -> Any:
        """Query the image with ``identify``.

        Examples:
            >>> image["format"]      # "TIFF"
            >>> image["height"]      # 41
            >>> image["width"]       # 50
            >>> image["dimensions"]  # [50, 41]
            >>> image["size"]        # 2050 (bytes, from the file system)
            >>> image["original_at"] # datetime from EXIF:DateTimeOriginal
            >>> image["EXIF:ExifVersion"]  # "0220"
            >>> image["%[colorspace]"]     # any other identify format string

        Args:
            value: Attribute name or identify format string

        Returns:
            str, int, list, datetime or None depending on the attribute
        """
        # Newlines keep animated images to the first frame's line
        key = str(value)
        if key == "format":
            return self._identify_line("%m")
        if key == "height":
            return int(self._identify_line("%h"))
        if key == "width":
            return int(self._identify_line("%w"))
        if key == "dimensions":
            return [int(v) for v in self._identify_line("%w %h").split()]
        if key == "size":
            # identify -format "%b" fails on animated gifs
            return os.path.getsize(self.path)
        if key == "original_at":
            return _parse_exif_time(self["EXIF:DateTimeOriginal"])
        if key.upper().startswith("EXIF:"):
            result = self.run_command(
                "identify", "-format", f'"%[{key}]"', self.path
            ).rstrip("\r\n")
            if "," in result:
                decoded = _read_character_data(result)
                if decoded is not None:
                    return decoded
            return result
        return self.run_command(
            "identify", "-format", f'"{key}"', self.path
        ).split("\n")[0]

    def mogrify(self, *args: Any) -> str:
        """Send raw arguments to ``mogrify``; the image path is appended.

        Returns:
            Output of the command
        """
        return self.run_command("mogrify", *args, self.path)

    def __lshift__(self, arg: Any) -> str:
        return self.mogrify(arg)

    def format(self, fmt: str, page: int = 0) -> None:
        """Change the image format, e.g. from "tiff" to "jpg".

        The working file is renamed to the new extension and the old file is
        deleted. For multi-frame images converted to a single-frame format,
        ``page`` selects which frame becomes the image; the other frame files
        are removed.

        Args:
            fmt: Target format ("jpg", "gif", "png", ...)
            page: Frame to keep for multi-frame sources

        Raises:
            MiniMagickError: If the converted file cannot be found
        """
        try:
            self.run_command("mogrify", "-format", fmt, self.path)

            old_path = self.path
            new_path = str(Path(old_path).with_suffix(f".{fmt}"))
            if new_path != old_path:
                if self._tempfile is not None:
                    self._tempfile.release()
                    self._tempfile = ManagedTempFile(new_path)
                else:
                    Path(old_path).unlink(missing_ok=True)
                self.path = new_path

            if not os.path.exists(self.path):
                target = Path(self.path)
                page_path = target.with_name(f"{target.stem}-{page}{target.suffix}")
                try:
                    shutil.copyfile(page_path, target)
                except OSError as e:
                    raise MiniMagickError(f"Unable to format to {fmt}; {e}") from e
        finally:
            self._remove_page_files(fmt)

    def collapse(self) -> str:
        """Collapse multi-frame images (e.g. animated gifs) to the first frame."""
        return self.run_command("mogrify", "-quality", "100", f"{self.path}[0]")

    def write(self, output_path: Union[str, Path]) -> None:
        """Copy the working file to ``output_path`` and verify the copy."""
        shutil.copyfile(self.path, output_path)
        self.run_command("identify", str(output_path))

    def to_blob(self) -> bytes:
        """Return the raw contents of the working file."""
        return Path(self.path).read_bytes()

    @contextmanager
    def combine_options(self) -> Iterator[CommandBuilder]:
        """Run several mogrify options as one command.

        The command runs when the block exits normally; an exception inside
        the block discards it.

        Examples:
            >>> with image.combine_options() as c:
            ...     c.draw("image Over 0,0 10,10 'overlay.png'")
            ...     c.thumbnail("300x500>")
            ...     c.background("white")

        Yields:
            Builder for the mogrify command
        """
        command = self.executor.command("mogrify")
        yield command
        command.push(self.path)
        self.run(command)

    def composite(
        self,
        other_image: "Image",
        output_extension: str = "jpg",
        configure: Optional[Callable[[CommandBuilder], Any]] = None
    ) -> "Image":
        """Composite ``other_image`` over this image into a new image.

        Args:
            other_image: Image placed over this one
            output_extension: Extension (and so format) of the result
            configure: Optional callable receiving the composite builder to
                add options (e.g. ``lambda c: c.gravity("center")``)

        Returns:
            New image owning its temporary output file
        """
        output = ManagedTempFile.create(suffix=_normalize_ext(output_extension))

        command = self.executor.command("composite")
        try:
            if configure is not None:
                configure(command)
            command.push(other_image.path)
            command.push(self.path)
            command.push(output.path)
            self.run(command)
        except Exception:
            output.release()
            raise

        return Image(output.path, output, executor=self.executor)

    def run_command(self, verb: str, *args: Any) -> str:
        return self.run(self.executor.command(verb, *args))

    def run(self, command: CommandBuilder) -> str:
        """Execute a command; the owned temporary file is released on failure."""
        return self.executor.execute(command, resource=self._tempfile)

    def destroy(self) -> None:
        """Release the temporary file this image owns. Safe to call twice."""
        if self._tempfile is None:
            return
        self._tempfile.release()
        self._tempfile = None

    def __getattr__(self, name: str) -> Callable[..., "Image"]:
        # Only reached for names not defined on the instance or class.
        if name.startswith("_") or name in ("path", "executor"):
            raise AttributeError(name)

        # Raises DispatchError for "format" and unrecognized names
        getattr(CommandBuilder("mogrify"), name)

        def apply(*values: Any) -> "Image":
            with self.combine_options() as command:
                getattr(command, name)(*values)
            return self

        apply.__name__ = name
        return apply

    def __enter__(self) -> "Image":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return f"<Image {self.path}>"

    def _identify_line(self, fmt: str) -> str:
        return self.run_command(
            "identify", "-format", _format_option(fmt), self.path
        ).split("\n")[0]

    def _remove_page_files(self, fmt: str) -> None:
        target = Path(self.path)
        pattern = f"{glob.escape(target.stem)}-[0-9]*.{fmt}"
        for page_file in target.parent.glob(pattern):
            logger.debug(f"Removing page file: {page_file}")
            page_file.unlink(missing_ok=True)


def _normalize_ext(ext: Optional[str]) -> str:
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def _format_option(fmt: str) -> str:
    """Quote an identify format string so each frame ends with a newline."""
    if os.name == "nt":
        return f'"{fmt}\\n"'
    # The shell collapses the doubled backslash inside double quotes
    return f'"{fmt}\\\\n"'


def _fetch(url: str, timeout: float) -> bytes:
    logger.info(f"Downloading image: {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise ImageFetchError(f"Timed out downloading {url} after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise ImageFetchError(f"Failed to download {url}: {e}") from e
    return response.content


def _read_character_data(list_of_characters: str) -> Optional[str]:
    """Decode a comma-separated list of character codes, e.g. "48, 50, 50, 48".

    Returns None when the list holds anything other than character codes.
    """
    chars: List[str] = list_of_characters.replace(" ", "").split(",")
    if not all(val.isdigit() for val in chars):
        return None
    return "".join(chr(int(val)) for val in chars)


def _parse_exif_time(value: str) -> Optional[datetime]:
    """Parse an EXIF timestamp such as "2005:02:23 23:17:24"."""
    try:
        return datetime(*(int(part) for part in re.split(r":|\s+", value.strip())))
    except (TypeError, ValueError):
        return None
