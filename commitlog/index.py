"""Memory-mapped index from relative record offsets to store positions."""

from __future__ import annotations

import mmap
import os
import struct

from .config import Config

OFF_WIDTH = 4
POS_WIDTH = 8
ENTRY_WIDTH = OFF_WIDTH + POS_WIDTH

_ENTRY = struct.Struct(">IQ")


class Index:
    """Fixed-width entries of (relative offset, store position)."""

    def __init__(self, path: str | os.PathLike, config: Config) -> None:
        self.path = os.fspath(path)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o600)
        self._file = os.fdopen(fd, "r+b")
        self.size = os.fstat(fd).st_size
        max_bytes = config.segment.max_index_bytes
        self._file.truncate(max_bytes)
        self._mmap: mmap.mmap | bytearray
        if max_bytes > 0:
            self._mmap = mmap.mmap(self._file.fileno(), max_bytes)
        else:
            self._mmap = bytearray()

    @property
    def name(self) -> str:
        return self.path

    def read(self, entry: int) -> tuple[int, int]:
        """Return (relative offset, position) of an entry; -1 means the last one.

        Raises EOFError when the entry does not exist.
        """
        if self.size == 0:
            raise EOFError("index is empty")
        if entry == -1:
            entry = self.size // ENTRY_WIDTH - 1
        elif entry < 0:
            raise EOFError(f"no index entry {entry}")
        start = entry * ENTRY_WIDTH
        end = start + ENTRY_WIDTH
        if self.size < end or len(self._mmap) < end:
            raise EOFError(f"no index entry {entry}")
        return _ENTRY.unpack_from(self._mmap, start)

    def write(self, offset: int, position: int) -> None:
        """Append an entry; raises EOFError when the index is full."""
        if self.is_maxed():
            raise EOFError("index is full")
        _ENTRY.pack_into(self._mmap, self.size, offset, position)
        self.size += ENTRY_WIDTH

    def is_maxed(self) -> bool:
        return len(self._mmap) < self.size + ENTRY_WIDTH

    def close(self) -> None:
        """Sync the mapping and shrink the file to the entries written."""
        if self._file.closed:
            return
        if isinstance(self._mmap, mmap.mmap):
            self._mmap.flush()
            self._mmap.close()
        self._file.flush()
        os.fsync(self._file.fileno())
        self._file.truncate(self.size)
        self._file.close()