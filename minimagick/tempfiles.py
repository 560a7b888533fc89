"""Temporary working files for images."""

import logging
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TEMPFILE_PREFIX = "mini_magick"


class ManagedTempFile:
    """A temporary file on disk with an explicit, idempotent release.

    The file is written and closed on creation, so external tools can open
    it by path. ``release()`` deletes it; calling it again does nothing.

    Attributes:
        path: Location of the file on disk

    Examples:
        >>> with ManagedTempFile.create(b"...", suffix=".jpg") as tmp:
        ...     print(tmp.path)
    """

    def __init__(self, path: str) -> None:
        """Take ownership of an existing file.

        Args:
            path: File to delete on release
        """
        self._path = str(path)
        self._released = False

    @classmethod
    def create(cls, data: bytes = b"", suffix: Optional[str] = None) -> "ManagedTempFile":
        """Create a uniquely named file holding ``data``.

        Args:
            data: Bytes to write (binary-safe)
            suffix: Filename suffix, usually an extension such as ".jpg"

        Returns:
            ManagedTempFile owning the new file
        """
        with tempfile.NamedTemporaryFile(
            prefix=TEMPFILE_PREFIX,
            suffix=suffix or "",
            delete=False
        ) as f:
            f.write(data)
            path = f.name

        logger.debug(f"Created temporary file: {path} ({len(data)} bytes)")
        return cls(path)

    @property
    def path(self) -> str:
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Delete the file. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        Path(self._path).unlink(missing_ok=True)
        logger.debug(f"Removed temporary file: {self._path}")

    def __enter__(self) -> "ManagedTempFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = " released" if self._released else ""
        return f"<ManagedTempFile {self._path}{state}>"
