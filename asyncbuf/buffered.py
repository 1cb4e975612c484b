"""Double-buffered file access with background reads and writes."""

from __future__ import annotations

import io
import os

from .modes import AsyncIOError, OpenMode
from .packet import Packet, _write_all

_DEFAULT_BLOCK_SIZE = 512


def _device_block_size(handle) -> int:
    """Preferred block size of the device behind ``handle``, or 0."""
    try:
        status = os.fstat(handle.fileno())
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return 0
    return getattr(status, "st_blksize", 0) or 0


def _allocate_buffers(handle, buffer_size):
    """Return the buffer storage and block size for ``handle``."""
    block_size = _DEFAULT_BLOCK_SIZE
    step = block_size * 2
    device_block = _device_block_size(handle)
    if device_block:
        block_size = device_block
        step = block_size * 2
        buffer_size = -(-buffer_size // step) * step
    while True:
        if buffer_size // 2 < 1:
            raise ValueError("buffer size must be at least 2 bytes")
        try:
            return bytearray(buffer_size), block_size
        except MemoryError:
            if buffer_size > step:
                buffer_size -= step
            else:
                raise


class BufferedAsyncFile:
    """A file read or written through two buffers.

    While the caller works on one buffer, the other is filled from (or
    flushed to) the underlying handle on a background thread.
    """

    def __init__(self, handle, mode, buffer_size, close_handle):
        mode = OpenMode(mode)
        self._handle = handle
        self._close_handle = bool(close_handle)
        self._closed = True
        try:
            if mode is OpenMode.APPEND:
                try:
                    handle.seek(0, os.SEEK_END)
                except OSError as exc:
                    raise AsyncIOError(f"cannot seek to end of file: {exc}") from exc
            storage, block_size = _allocate_buffers(handle, buffer_size)
        except BaseException:
            if self._close_handle:
                handle.close()
            raise

        half = len(storage) // 2
        view = memoryview(storage)
        self._read_mode = mode is OpenMode.READ
        self._block_size = block_size
        self._buffer_size = half
        self._buffers = (view[:half], view[half : 2 * half])
        self._current = 0
        self._pos = 0
        self._seek_offset = 0
        self._seek_past_eof = False
        self._last_bytes_left = 0
        self._packet = Packet(handle, self._read_mode, half)
        self._closed = False

        if self._read_mode:
            # The offset points into the buffer not being filled, so that
            # a seek straight after opening needs no special case.
            self._bytes_left = 0
            self._packet.send(self._buffers[0])
        else:
            self._bytes_left = half

    @property
    def _active(self) -> memoryview:
        """The buffer the caller is currently reading from or writing to."""
        if self._read_mode:
            return self._buffers[1 - self._current]
        return self._buffers[self._current]

    def _check(self, reading: bool) -> None:
        if self._closed:
            raise AsyncIOError("I/O operation on closed file")
        if reading and not self._read_mode:
            raise AsyncIOError("file not open for reading")
        if not reading and self._read_mode:
            raise AsyncIOError("file not open for writing")

    def _take(self, count: int) -> bytes:
        data = bytes(self._active[self._pos : self._pos + count])
        self._pos += count
        self._bytes_left -= count
        return data

    def _record_failure(self, error) -> None:
        self._packet.record_failure(error)
        self._last_bytes_left = self._bytes_left
        self._bytes_left = 0

    def read(self, size) -> bytes:
        """Read up to ``size`` bytes; fewer only at end of file."""
        self._check(True)
        if size < 0:
            raise ValueError("size must not be negative")
        chunks = []
        while size > self._bytes_left:
            size -= self._bytes_left
            chunks.append(self._take(self._bytes_left))
            self._bytes_left = 0

            arrived = self._packet.wait()
            if arrived == 0:
                return b"".join(chunks)

            self._packet.send(self._buffers[1 - self._current])
            if self._seek_offset > arrived:
                self._seek_offset = arrived
            self._pos = self._seek_offset
            self._current = 1 - self._current
            self._bytes_left = arrived - self._seek_offset
            self._seek_offset = 0
        chunks.append(self._take(size))
        return b"".join(chunks)

    def write(self, data) -> int:
        """Write ``data`` and return the number of bytes taken."""
        self._check(False)
        view = memoryview(data).cast("B")
        total = 0
        while len(view) > self._bytes_left:
            if self._bytes_left:
                room = self._bytes_left
                self._active[self._pos : self._pos + room] = view[:room]
                view = view[room:]
                total += room
            self._packet.wait()
            self._packet.send(self._buffers[self._current])
            self._current = 1 - self._current
            self._pos = 0
            self._bytes_left = self._buffer_size
        count = len(view)
        self._active[self._pos : self._pos + count] = view
        self._pos += count
        self._bytes_left -= count
        return total + count

    def read_char(self) -> int:
        """Return the next byte as an integer, or -1 at end of file."""
        self._check(True)
        if self._bytes_left:
            value = self._active[self._pos]
            self._pos += 1
            self._bytes_left -= 1
            return value
        data = self.read(1)
        return data[0] if data else -1

    def write_char(self, ch) -> int:
        """Write one byte, given as an integer or a one-byte bytes object."""
        if isinstance(ch, int):
            value = ch
            if not 0 <= value <= 255:
                raise ValueError("byte value must be in range 0..255")
        else:
            data = bytes(ch)
            if len(data) != 1:
                raise ValueError("exactly one byte is required")
            value = data[0]
        self._check(False)
        if self._bytes_left:
            self._active[self._pos] = value
            self._pos += 1
            self._bytes_left -= 1
            return 1
        return self.write(bytes((value,)))

    def peek(self, size) -> bytes:
        """Return up to ``size`` upcoming bytes without consuming them.

        At most the rest of the current buffer is returned; an empty
        result means end of file.
        """
        self._check(True)
        if not self._bytes_left:
            if not self.read(1):
                return b""
            self._pos -= 1
            self._bytes_left += 1
        count = min(size, self._bytes_left)
        return bytes(self._active[self._pos : self._pos + count])

    def close(self) -> None:
        """Finish outstanding I/O, flush pending data and release the file."""
        if self._closed:
            return
        self._closed = True
        try:
            self._packet.wait()
            if not self._read_mode and self._buffer_size > self._bytes_left:
                pending = self._active[: self._buffer_size - self._bytes_left]
                try:
                    _write_all(self._handle, pending)
                    flush = getattr(self._handle, "flush", None)
                    if flush is not None:
                        flush()
                except OSError as exc:
                    raise AsyncIOError(f"cannot flush file: {exc}") from exc
        finally:
            if self._close_handle:
                self._handle.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()