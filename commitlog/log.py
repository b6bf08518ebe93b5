"""A commit log made of a sequence of segments on disk."""

from __future__ import annotations

import io
import os
import shutil
import threading
from typing import BinaryIO

from .api import OffsetOutOfRangeError, Record
from .config import Config
from .segment import Segment
from .store import Store


class _StoresReader(io.RawIOBase):
    """Reads the raw contents of several stores one after another."""

    def __init__(self, stores: list[Store]) -> None:
        super().__init__()
        self._stores = stores
        self._current = 0
        self._offset = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while self._current < len(self._stores):
            chunk = self._stores[self._current].read_at(len(buffer), self._offset)
            if chunk:
                size = len(chunk)
                buffer[:size] = chunk
                self._offset += size
                return size
            self._current += 1
            self._offset = 0
        return 0


class Log:
    """Records spread over segments in one directory, addressed by offset."""

    def __init__(self, directory: str | os.PathLike, config: Config | None = None) -> None:
        self.directory = os.fspath(directory)
        self.config = (config or Config()).with_defaults()
        self._lock = threading.RLock()
        self.segments: list[Segment] = []
        self.active_segment: Segment | None = None
        self._setup()

    def __enter__(self) -> "Log":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _setup(self) -> None:
        base_offsets = set()
        for name in os.listdir(self.directory):
            stem, _ = os.path.splitext(name)
            if stem.isdigit():
                base_offsets.add(int(stem))
        for base_offset in sorted(base_offsets):
            self._new_segment(base_offset)
        if not self.segments:
            self._new_segment(self.config.segment.initial_offset)

    def _new_segment(self, base_offset: int) -> None:
        segment = Segment(self.directory, base_offset, self.config)
        self.segments.append(segment)
        self.active_segment = segment

    def append(self, record: Record) -> int:
        """Append a record and return the offset it was given."""
        with self._lock:
            highest = self._highest_offset()
            if self.active_segment.is_maxed():
                self._new_segment(highest + 1)
            return self.active_segment.append(record)

    def read(self, offset: int) -> Record:
        """Return the record at an offset; raises OffsetOutOfRangeError if absent."""
        with self._lock:
            for segment in self.segments:
                if segment.base_offset <= offset < segment.next_offset:
                    return segment.read(offset)
        raise OffsetOutOfRangeError(offset)

    def close(self) -> None:
        with self._lock:
            for segment in self.segments:
                segment.close()

    def remove(self) -> None:
        """Close the log and delete its directory."""
        with self._lock:
            self.close()
            shutil.rmtree(self.directory, ignore_errors=True)

    def reset(self) -> None:
        """Delete every record and start again from the configured initial offset."""
        with self._lock:
            self.remove()
            os.makedirs(self.directory, exist_ok=True)
            self.segments = []
            self.active_segment = None
            self._setup()

    def lowest_offset(self) -> int:
        with self._lock:
            return self.segments[0].base_offset

    def highest_offset(self) -> int:
        with self._lock:
            return self._highest_offset()

    def _highest_offset(self) -> int:
        next_offset = self.segments[-1].next_offset
        return 0 if next_offset == 0 else next_offset - 1

    def truncate(self, lowest: int) -> None:
        """Remove every segment whose records all lie at or below ``lowest``."""
        with self._lock:
            kept = []
            for segment in self.segments:
                if segment.next_offset <= lowest + 1:
                    segment.remove()
                else:
                    kept.append(segment)
            self.segments = kept

    def reader(self) -> BinaryIO:
        """Return a binary stream over the raw contents of every segment's store."""
        with self._lock:
            stores = [segment.store for segment in self.segments]
        return io.BufferedReader(_StoresReader(stores))