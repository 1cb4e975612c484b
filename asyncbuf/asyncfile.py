"""Seekable, line-aware buffered asynchronous files and the functions that open them."""

from __future__ import annotations

import errno
import io
import os

from .buffered import BufferedAsyncFile
from .modes import AsyncIOError, OpenMode, SeekMode

__all__ = ["AsyncFile", "open_async", "open_async_from_fh"]


def _truncate(target: int, block: int) -> int:
    """Round ``target`` toward zero to a multiple of ``block``."""
    rounded = (abs(target) // block) * block
    return rounded if target >= 0 else -rounded


class AsyncFile(BufferedAsyncFile):
    """A double-buffered file with seeking and line-oriented access."""

    def _fail(self, error: BaseException, message: str):
        self._record_failure(error)
        raise AsyncIOError(message) from error

    def _file_size(self) -> int:
        try:
            return os.fstat(self._handle.fileno()).st_size
        except (AttributeError, ValueError, OSError, io.UnsupportedOperation):
            pass
        try:
            here = self._handle.tell()
            end = self._handle.seek(0, os.SEEK_END)
            self._handle.seek(here, os.SEEK_SET)
            return end
        except (OSError, ValueError) as exc:
            self._fail(exc, f"cannot determine file size: {exc}")

    def seek(self, position, mode) -> int:
        """Move to ``position`` relative to ``mode`` and return the previous position."""
        mode = SeekMode(mode)
        self._check(self._read_mode)
        try:
            arrived = self._packet.wait()
        except AsyncIOError:
            if not self._seek_past_eof:
                raise
            # Resume after an earlier seek beyond the end of the file.
            arrived = self._packet.last_result
            self._packet.result = arrived
            self._bytes_left = self._last_bytes_left

        if self._read_mode:
            current = self._seek_read(position, mode, arrived)
        else:
            current = self._seek_write(position, mode)

        self._seek_past_eof = False
        return current

    def _seek_read(self, position: int, mode: SeekMode, arrived: int) -> int:
        try:
            file_pos = self._handle.tell()
        except (OSError, ValueError) as exc:
            self._fail(exc, f"cannot get file position: {exc}")

        current = file_pos - (self._bytes_left + arrived) + self._seek_offset

        if mode is SeekMode.CURRENT:
            target = current + position
        elif mode is SeekMode.START:
            target = position
        else:
            target = self._file_size() + position

        min_buf = current - self._pos
        max_buf = current + self._bytes_left + arrived
        diff = target - current

        if target < min_buf or target >= max_buf:
            if target >= max_buf and target > self._file_size():
                self._seek_past_eof = True
                error = AsyncIOError(errno.EINVAL, "seek past end of file")
                self._record_failure(error)
                raise error
            round_target = _truncate(target, self._block_size)
            try:
                self._handle.seek(round_target, os.SEEK_SET)
            except (OSError, ValueError) as exc:
                self._fail(exc, f"cannot seek: {exc}")
            self._packet.send(self._buffers[0])
            self._seek_offset = target - round_target
            self._bytes_left = 0
            self._current = 0
            self._pos = 0
        elif target < current or diff <= self._bytes_left:
            self._packet.requeue()
            self._bytes_left -= diff
            self._pos += diff
            if self._seek_past_eof:
                self._packet.result = self._packet.last_result
        else:
            self._packet.send(self._buffers[1 - self._current])
            diff -= self._bytes_left - self._seek_offset
            self._current = 1 - self._current
            self._pos = diff
            self._bytes_left = arrived - diff
            self._seek_offset = 0
        return current

    def _seek_write(self, position: int, mode: SeekMode) -> int:
        pending = self._buffer_size - self._bytes_left
        try:
            if pending > 0:
                remaining = memoryview(self._active[:pending])
                while remaining:
                    written = self._handle.write(remaining)
                    if not written:
                        raise AsyncIOError("the file accepted no data")
                    remaining = remaining[written:]
        except OSError as exc:
            self._fail(exc, f"cannot flush file: {exc}")
        try:
            current = self._handle.tell()
            self._handle.seek(position, mode.whence)
        except (OSError, ValueError) as exc:
            self._fail(exc, f"cannot seek: {exc}")
        self._bytes_left = self._buffer_size
        self._current = 0
        self._pos = 0
        return current

    def gets(self, size) -> bytes:
        """Read a line of at most ``size - 1`` bytes, newline included.

        Returns an empty bytes object at end of file.
        """
        self._check(True)
        limit = size - 1
        if limit <= 0:
            raise ValueError("size must be at least 2")
        out = bytearray()
        while True:
            if self._bytes_left:
                count = min(self._bytes_left, limit)
                chunk = bytes(self._active[self._pos : self._pos + count])
                newline = chunk.find(b"\n")
                take = newline + 1 if newline >= 0 else count
                out += chunk[:take]
                self._pos += take
                self._bytes_left -= take
                if take >= limit or newline >= 0:
                    break
                limit -= take
            byte = self.read(1)
            if not byte:
                break
            out += byte
            limit -= 1
            if byte == b"\n" or limit <= 0:
                break
        return bytes(out)

    def read_line(self, size) -> bytes:
        """Read a line into at most ``size - 1`` bytes.

        A line too long to fit is cut short, the rest of it is skipped, and
        the last byte kept is replaced by a newline.
        """
        line = self.gets(size)
        if not line or line.endswith(b"\n"):
            return line
        found = False
        while True:
            if self._bytes_left:
                chunk = bytes(self._active[self._pos : self._pos + self._bytes_left])
                newline = chunk.find(b"\n")
                take = newline + 1 if newline >= 0 else len(chunk)
                self._pos += take
                self._bytes_left -= take
                if newline >= 0:
                    found = True
                    break
            byte = self.read(1)
            if not byte:
                break
            if byte == b"\n":
                found = True
                break
        if found:
            line = line[:-1] + b"\n"
        return line

    def write_line(self, line) -> int:
        """Write ``line`` as given (no newline is added); ``str`` is UTF-8 encoded."""
        data = line.encode("utf-8") if isinstance(line, str) else bytes(line)
        data = data.split(b"\0", 1)[0]
        return self.write(data)


def open_async(file_name, mode, buffer_size) -> AsyncFile:
    """Open ``file_name`` in ``mode`` with ``buffer_size`` bytes of buffering."""
    mode = OpenMode(mode)
    try:
        fd = os.open(file_name, mode.flags, 0o666)
    except OSError as exc:
        raise AsyncIOError(exc.errno, exc.strerror, file_name) from exc
    handle = os.fdopen(fd, mode.file_mode, buffering=0)
    return AsyncFile(handle, mode, buffer_size, True)


def open_async_from_fh(handle, mode, buffer_size) -> AsyncFile:
    """Wrap an already open binary ``handle``; closing the result leaves it open."""
    return AsyncFile(handle, mode, buffer_size, False)