import io

import pytest

from asyncbuf.buffered import BufferedAsyncFile
from asyncbuf.modes import AsyncIOError, OpenMode

TEST_BUFFER_SIZE = 8192

FOX = b"The quick brown fox jumps over the lazy dog\n"

EXPECTED_LINES = [
    "Line 1: The quick brown fox jumps over the lazy dog\n",
    "Line 2: Pack my box with five dozen liquor jugs\n",
    "Line 3: How vexingly quick daft zebras jump!\n",
    "Line 4: The five boxing wizards jump quickly\n",
    "Line 5: Sphinx of black quartz, judge my vow\n",
    "Line 6: Amazingly few discotheques provide jukeboxes\n",
    "Line 7: The quick onyx goblin jumps over the lazy dwarf\n",
    "Line 8: Pack my red box with five dozen quality jugs\n",
    "Line 9: How quickly daft jumping zebras vex!\n",
    "Line 10: Sphinx of black quartz, judge my vow\n",
    "Line 11: The five boxing wizards jump quickly\n",
    "Line 12: Amazingly few discotheques provide jukeboxes\n",
    "Line 13: Pack my box with five dozen liquor jugs\n",
    "Line 14: How vexingly quick daft zebras jump!\n",
    "Line 15: The quick brown fox jumps over the lazy dog\n",
    "Line 16: Special characters: éèêëàáâäùúûüçñÿœæ\n",
    "Line 17: Numbers and symbols: 12345 67890 !@#$%^&*() _+-=[]{}|;':\",./<>?\n",
    "Line 18: Mixed content: ABC123!@# 456DEF789\n",
    "Line 19: Empty line follows:\n",
    "\n",
    "Line 20: Line after empty line\n",
    "Line 21: Very long line that might span multiple buffers or require multiple "
    "async operations to complete properly in the double-buffered system\n",
    "Line 22: Final line with end-of-file marker ",
]


def open_file(path, mode, buffer_size=TEST_BUFFER_SIZE):
    handle = open(path, mode.file_mode)
    return BufferedAsyncFile(handle, mode, buffer_size, True)


class FailingHandle:
    def __init__(self):
        self.closed = False

    def readinto(self, buffer):
        raise OSError(5, "device failure")

    def write(self, data):
        raise OSError(5, "device failure")

    def close(self):
        self.closed = True


def test_write_then_read_back(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    with open_file(path, OpenMode.WRITE) as f:
        assert f.write(FOX) == len(FOX)
    assert path.read_bytes() == FOX
    with open_file(path, OpenMode.READ) as f:
        assert f.read(255) == FOX


def test_write_chars_then_read_chars(tmp_path):
    path = tmp_path / "asyncio_test2.dat"
    with open_file(path, OpenMode.WRITE) as f:
        assert f.write_char(ord("X")) == 1
        assert f.write_char(b"Y") == 1
        assert f.write_char(ord("Z")) == 1
    assert path.read_bytes() == b"XYZ"
    with open_file(path, OpenMode.READ) as f:
        assert f.read_char() == ord("X")
        assert f.read_char() == ord("Y")
        assert f.read_char() == ord("Z")
        assert f.read_char() == -1
        assert f.read_char() == -1


def test_peek_matches_following_read(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    path.write_bytes(FOX)
    with open_file(path, OpenMode.READ) as f:
        peeked = f.peek(5)
        read = f.read(5)
        assert peeked == read == b"The q"


def test_peek_at_end_of_file_is_empty():
    with BufferedAsyncFile(io.BytesIO(b""), OpenMode.READ, 64, False) as f:
        assert f.peek(5) == b""


def test_append_mode_extends_file(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    path.write_bytes(b"abc")
    with open_file(path, OpenMode.APPEND) as f:
        assert f.write(b"def") == 3
    assert path.read_bytes() == b"abcdef"


def test_open_existing_for_write_truncates(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    path.write_bytes(FOX)
    open_file(path, OpenMode.WRITE).close()
    assert path.read_bytes() == b""


def test_basic_file_read_in_chunks(tmp_path):
    content = "".join(EXPECTED_LINES).encode("utf-8")
    path = tmp_path / "test_data.txt"
    path.write_bytes(content)
    total = 0
    with open_file(path, OpenMode.READ) as f:
        while chunk := f.read(1024):
            total += len(chunk)
    assert total == len(content)
    with open_file(path, OpenMode.READ) as f:
        data = f.read(len(content))
    assert data == content
    assert data.decode("utf-8").splitlines(keepends=True) == EXPECTED_LINES


def test_file_copy_validation(tmp_path):
    content = "".join(EXPECTED_LINES).encode("utf-8") * 50
    source = tmp_path / "source.dat"
    target = tmp_path / "copy.dat"
    source.write_bytes(content)
    with open_file(source, OpenMode.READ) as src, open_file(target, OpenMode.WRITE) as dst:
        while chunk := src.read(1024):
            assert dst.write(chunk) == len(chunk)
    assert target.read_bytes() == content


@pytest.mark.parametrize("buffer_size", [2, 3, 16, 1000])
@pytest.mark.parametrize("chunk", [1, 7, 64, 5000])
def test_round_trip_through_small_buffers(buffer_size, chunk):
    data = bytes(range(256)) * 20
    sink = io.BytesIO()
    with BufferedAsyncFile(sink, OpenMode.WRITE, buffer_size, False) as f:
        for start in range(0, len(data), chunk):
            piece = data[start : start + chunk]
            assert f.write(piece) == len(piece)
    assert sink.getvalue() == data

    collected = []
    with BufferedAsyncFile(io.BytesIO(data), OpenMode.READ, buffer_size, False) as f:
        while piece := f.read(chunk):
            collected.append(piece)
    assert b"".join(collected) == data


def test_mixed_operations_across_buffer_boundaries():
    data = bytes(range(100))
    with BufferedAsyncFile(io.BytesIO(data), OpenMode.READ, 6, False) as f:
        result = bytearray()
        result += f.read(2)
        result.append(f.read_char())
        peeked = f.peek(10)
        assert len(peeked) >= 1
        assert data[len(result) :].startswith(peeked)
        result += f.read(9)
        while (value := f.read_char()) != -1:
            result.append(value)
            result += f.read(4)
    assert bytes(result) == data


def test_write_char_across_buffers():
    sink = io.BytesIO()
    text = b"abcdefghij"
    with BufferedAsyncFile(sink, OpenMode.WRITE, 2, False) as f:
        for value in text:
            assert f.write_char(value) == 1
    assert sink.getvalue() == text


def test_read_past_end_returns_what_is_there(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    path.write_bytes(FOX)
    with open_file(path, OpenMode.READ) as f:
        assert f.read(1000) == FOX
        assert f.read(10) == b""


def test_open_from_handle_leaves_handle_open(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    path.write_bytes(b"Test data for file handle operations"[:33])
    with open(path, "rb") as handle:
        f = BufferedAsyncFile(handle, OpenMode.READ, TEST_BUFFER_SIZE, False)
        assert f.read(5) == b"Test "
        f.close()
        assert handle.closed is False


def test_close_handle_true_closes_handle(tmp_path):
    path = tmp_path / "asyncio_test.dat"
    path.write_bytes(FOX)
    handle = open(path, "rb")
    BufferedAsyncFile(handle, OpenMode.READ, TEST_BUFFER_SIZE, True).close()
    assert handle.closed is True


def test_read_from_write_only_file_fails(tmp_path):
    with open_file(tmp_path / "w.dat", OpenMode.WRITE) as f:
        with pytest.raises(AsyncIOError):
            f.read(5)


def test_write_to_read_only_file_fails(tmp_path):
    path = tmp_path / "r.dat"
    path.write_bytes(FOX)
    with open_file(path, OpenMode.READ) as f:
        with pytest.raises(AsyncIOError):
            f.write(b"test")
    assert path.read_bytes() == FOX


def test_operations_after_close_fail(tmp_path):
    path = tmp_path / "r.dat"
    path.write_bytes(FOX)
    f = open_file(path, OpenMode.READ)
    f.close()
    f.close()
    with pytest.raises(AsyncIOError):
        f.read(1)
    with pytest.raises(AsyncIOError):
        f.read_char()


def test_too_small_buffer_is_rejected_and_handle_closed():
    handle = io.BytesIO(b"data")
    with pytest.raises(ValueError):
        BufferedAsyncFile(handle, OpenMode.READ, 1, True)
    assert handle.closed is True


def test_invalid_byte_for_write_char():
    with BufferedAsyncFile(io.BytesIO(), OpenMode.WRITE, 16, False) as f:
        with pytest.raises(ValueError):
            f.write_char(256)
        with pytest.raises(ValueError):
            f.write_char(b"ab")


def test_read_failure_is_sticky_and_handle_still_closed():
    handle = FailingHandle()
    f = BufferedAsyncFile(handle, OpenMode.READ, 16, True)
    with pytest.raises(AsyncIOError):
        f.read(4)
    with pytest.raises(AsyncIOError):
        f.read(4)
    with pytest.raises(AsyncIOError):
        f.close()
    assert handle.closed is True


def test_write_failure_is_reported():
    handle = FailingHandle()
    f = BufferedAsyncFile(handle, OpenMode.WRITE, 4, False)
    with pytest.raises(AsyncIOError):
        f.write(b"0123456789")
    with pytest.raises(AsyncIOError):
        f.close()