"""Append-only file of length-prefixed records."""

from __future__ import annotations

import os
import threading

LEN_WIDTH = 8
_BYTE_ORDER = "big"


class Store:
    """A file holding records, each preceded by its 8-byte big-endian length."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = os.fspath(path)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT | os.O_APPEND, 0o600)
        self._file = os.fdopen(fd, "a+b")
        self.size = os.fstat(fd).st_size
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.path

    def append(self, data: bytes) -> tuple[int, int]:
        """Append a record; return the bytes written and its position."""
        with self._lock:
            position = self.size
            self._file.write(len(data).to_bytes(LEN_WIDTH, _BYTE_ORDER))
            self._file.write(data)
            written = LEN_WIDTH + len(data)
            self.size += written
            return written, position

    def read(self, position: int) -> bytes:
        """Return the record stored at a position; raises EOFError past the end."""
        with self._lock:
            header = self._read_at(LEN_WIDTH, position)
            if len(header) < LEN_WIDTH:
                raise EOFError(f"no record at position {position}")
            length = int.from_bytes(header, _BYTE_ORDER)
            data = self._read_at(length, position + LEN_WIDTH)
            if len(data) < length:
                raise EOFError(f"truncated record at position {position}")
            return data

    def read_at(self, size: int, offset: int) -> bytes:
        """Return up to ``size`` raw bytes starting at ``offset``."""
        with self._lock:
            return self._read_at(size, offset)

    def _read_at(self, size: int, offset: int) -> bytes:
        self._file.flush()
        self._file.seek(offset)
        return self._file.read(size)

    def close(self) -> None:
        """Flush buffered writes and close the file."""
        with self._lock:
            if not self._file.closed:
                self._file.flush()
                self._file.close()