"""A single background transfer request between a file and one buffer."""

from __future__ import annotations

import threading

from .modes import AsyncIOError


def _write_all(handle, view) -> int:
    """Write the whole of ``view`` to ``handle`` and return its length."""
    view = memoryview(view)
    total = 0
    while total < len(view):
        written = handle.write(view[total:])
        if not written:
            raise AsyncIOError("the file accepted no data")
        total += written
    return total


class Packet:
    """One outstanding read or write on a background thread.

    ``result`` holds the byte count of the last finished request, or -1
    after a failure; ``error`` holds the exception behind a failure. A
    failure sticks: every later :meth:`wait` raises until the state is
    changed explicitly.
    """

    def __init__(self, handle, read_mode, buffer_size):
        self.handle = handle
        self.read_mode = bool(read_mode)
        self.buffer_size = buffer_size
        self.result = 0
        self.error: BaseException | None = None
        self.last_result = 0
        self.pending = False
        self._worker: threading.Thread | None = None
        self._outcome: int | BaseException = 0

    def send(self, buffer) -> None:
        """Start filling (read mode) or flushing (write mode) ``buffer``."""
        if self.pending and self._worker is not None:
            raise RuntimeError("a request is already in flight")
        view = memoryview(buffer)[: self.buffer_size]
        self._outcome = 0
        self._worker = threading.Thread(target=self._run, args=(view,), daemon=True)
        self.pending = True
        self._worker.start()

    def _run(self, view) -> None:
        try:
            if self.read_mode:
                self._outcome = self.handle.readinto(view) or 0
            else:
                self._outcome = _write_all(self.handle, view)
        except Exception as exc:  # handed to the waiting thread
            self._outcome = exc

    def wait(self) -> int:
        """Wait for the request and return its byte count.

        With nothing in flight, the previous request's outcome is returned
        again (0 if none was ever sent). Raises :class:`AsyncIOError` if the
        request, or an earlier one, failed.
        """
        if self.pending:
            if self._worker is not None:
                self._worker.join()
                self._worker = None
                outcome = self._outcome
                if isinstance(outcome, BaseException):
                    self.result = -1
                    self.error = outcome
                else:
                    self.result = outcome
            self.pending = False
        if self.result < 0:
            self._raise()
        return self.result

    def requeue(self) -> None:
        """Mark the last finished request as pending again, unchanged."""
        self.pending = True

    def record_failure(self, error) -> None:
        """Store a failure from a synchronous operation in the request state."""
        self.last_result = self.result
        self.result = -1
        self.error = error

    def _raise(self):
        error = self.error
        if isinstance(error, OSError) and error.errno is not None:
            raise AsyncIOError(error.errno, error.strerror) from error
        message = str(error) if error is not None else "request failed"
        raise AsyncIOError(message) from error