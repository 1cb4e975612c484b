# asyncbuf

`asyncbuf` is a double-buffered file layer. Each open file holds two
buffers. In read mode the next buffer is filled on a background thread while
you consume the current one. In write mode a full buffer is handed to a
background thread to be written while you fill the other one.

"Async" here means background threads. The API is ordinary blocking calls
and is not built on `asyncio` coroutines.

## Installation

```
pip install asyncbuf
```

To run the test suite, install the `test` extra and run pytest:

```
pip install "asyncbuf[test]"
pytest
```

## Opening files

```python
from asyncbuf.asyncfile import open_async
from asyncbuf.modes import OpenMode

with open_async("data.txt", OpenMode.WRITE, 8192) as f:
    f.write_line("The quick brown fox jumps over the lazy dog\n")
    f.write_char(b"X")

with open_async("data.txt", OpenMode.READ, 8192) as f:
    print(f.read_line(256))   # b'The quick brown fox jumps over the lazy dog\n'
    print(f.read_char())      # 88
    print(f.read_char())      # -1 at end of file
```

`asyncbuf.modes.OpenMode` has three members:

- `OpenMode.READ` reads an existing file.
- `OpenMode.WRITE` creates a new file and replaces any existing one.
- `OpenMode.APPEND` opens an existing file, or creates it, and writes at its end.

Each mode also provides `flags`, the matching `os.open` flags, and
`file_mode`, the matching `open` mode string.

The buffer size you pass is split evenly between the two buffers. If the
operating system reports a preferred block size for the file, the size is
first rounded up to a multiple of twice that block size. A size that leaves
less than one byte per buffer raises `ValueError`.

`open_async_from_fh(handle, mode, buffer_size)` wraps a binary file object
that is already open. The wrapper does not own that object, so closing the
buffered file leaves it open for you to close. In `APPEND` mode the handle is
first moved to its end.

## Errors

Failures raise `asyncbuf.modes.AsyncIOError`, which is a subclass of
`OSError`. This covers a file that cannot be opened, a failed background
read or write, a read on a file opened for writing (and the other way
round), and any operation on a closed file. A failed background transfer
stays failed, and later operations on the same file raise again.

## Reading

- `read(size)` returns up to `size` bytes. The result is shorter only at end
  of file, where it is `b""`.
- `read_char()` returns the next byte as an `int`, or `-1` at end of file.
- `peek(size)` returns upcoming bytes without consuming them, at most the
  rest of the current buffer. The next `read` returns the same bytes. At end
  of file it returns `b""`.
- `gets(size)` reads one line, newline included, of at most `size - 1` bytes.
  At end of file it returns `b""`. A `size` below 2 raises `ValueError`.
- `read_line(size)` is like `gets`, but it handles lines that are too long
  differently. When a line does not fit, the rest of the line is skipped, and
  the last byte kept is replaced with a newline. The next call then starts on
  the following line.

## Writing

- `write(data)` copies `data` into the buffers and returns its length. Each
  full buffer is written in the background.
- `write_char(ch)` writes one byte, given as an `int` in 0..255 or as a
  one-byte `bytes` object. It returns the number of bytes written.
- `write_line(line)` writes `line` exactly as given. No newline is added. A
  `str` is encoded as UTF-8, and anything after a NUL byte is dropped.

`close()` waits for outstanding transfers and writes the last partial buffer.
Leaving a `with` block calls `close()` for you. Calling it twice does nothing
the second time.

## Seeking

```python
from asyncbuf.modes import SeekMode

with open_async("data.txt", OpenMode.READ, 8192) as f:
    f.seek(5, SeekMode.CURRENT)
    print(f.read(5))    # b'uick '
```

`seek(position, mode)` takes `SeekMode.START`, `SeekMode.CURRENT` or
`SeekMode.END` as its reference point. It returns the position the file had
before the seek.

In read mode, a target that is already in one of the buffers is served from
memory. Any other target restarts background reading at a block-aligned
offset. A target beyond the end of the file raises `AsyncIOError`. The file
stays usable, and a later seek to a valid position resumes reading.

In write mode, pending data is written out before the position moves.

## Lower-level pieces

- `asyncbuf.buffered.BufferedAsyncFile(handle, mode, buffer_size, close_handle)`
  implements the two-buffer read and write machinery. `AsyncFile` in
  `asyncbuf.asyncfile` extends it with seeking and line handling.
- `asyncbuf.packet.Packet` is a single background transfer. You `send` it a
  buffer, `wait` for its byte count, `requeue` it, or `record_failure` on it.
- `asyncbuf.modes` also defines `VERSION`, `VERSION_NUMBER` and
  `REVISION_NUMBER`.

## What it does not do

`asyncbuf` is a library only. It has no command-line tool. It works on one
file object at a time, and each file allows at most one background transfer
in flight.