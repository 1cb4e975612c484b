"""Double-buffered file I/O with background read-ahead and write-behind."""

__version__ = "39.3"

__all__ = ["modes", "packet", "buffered", "asyncfile"]