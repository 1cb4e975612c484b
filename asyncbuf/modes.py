"""Open and seek modes, version information and the package's error type."""

from __future__ import annotations

import enum
import os

VERSION = "39.3"
VERSION_NUMBER = 39
REVISION_NUMBER = 3

_BINARY = getattr(os, "O_BINARY", 0)


class AsyncIOError(OSError):
    """Raised when a buffered asynchronous file operation fails."""


class OpenMode(enum.IntEnum):
    """How a file is opened."""

    READ = 0
    """Read an existing file."""
    WRITE = 1
    """Create a new file, replacing an existing one."""
    APPEND = 2
    """Append to the end of an existing file, or create a new one."""

    @property
    def flags(self) -> int:
        """Flags for ``os.open`` that give this mode's semantics."""
        if self is OpenMode.READ:
            return os.O_RDONLY | _BINARY
        if self is OpenMode.WRITE:
            return os.O_WRONLY | os.O_CREAT | os.O_TRUNC | _BINARY
        return os.O_RDWR | os.O_CREAT | _BINARY

    @property
    def file_mode(self) -> str:
        """Mode string for ``open``/``os.fdopen`` matching :attr:`flags`."""
        if self is OpenMode.READ:
            return "rb"
        if self is OpenMode.WRITE:
            return "wb"
        return "r+b"


class SeekMode(enum.IntEnum):
    """What a seek position is relative to."""

    START = -1
    CURRENT = 0
    END = 1

    @property
    def whence(self) -> int:
        """The matching ``whence`` value for ``io`` seeks."""
        if self is SeekMode.START:
            return os.SEEK_SET
        if self is SeekMode.CURRENT:
            return os.SEEK_CUR
        return os.SEEK_END