"""A store and its index, covering a contiguous range of offsets."""

from __future__ import annotations

import os
from dataclasses import replace

from .api import Record, decode_record, encode_record
from .config import Config
from .index import Index
from .store import Store


class Segment:
    """Records from ``base_offset`` up to (not including) ``next_offset``."""

    def __init__(self, directory: str | os.PathLike, base_offset: int, config: Config) -> None:
        self.base_offset = base_offset
        self.config = config
        self.store = Store(os.path.join(directory, f"{base_offset}.store"))
        self.index = Index(os.path.join(directory, f"{base_offset}.index"), config)
        try:
            last, _ = self.index.read(-1)
        except EOFError:
            self.next_offset = base_offset
        else:
            self.next_offset = base_offset + last + 1

    def append(self, record: Record) -> int:
        """Store a record at the next offset and return that offset."""
        current = self.next_offset
        _, position = self.store.append(encode_record(replace(record, offset=current)))
        self.index.write(current - self.base_offset, position)
        self.next_offset += 1
        return current

    def read(self, offset: int) -> Record:
        """Return the record at an absolute offset; raises EOFError if absent."""
        if offset < self.base_offset:
            raise EOFError(f"offset {offset} precedes segment base {self.base_offset}")
        _, position = self.index.read(offset - self.base_offset)
        return decode_record(self.store.read(position))

    def is_maxed(self) -> bool:
        limits = self.config.segment
        return (
            self.store.size >= limits.max_store_bytes
            or self.index.size >= limits.max_index_bytes
            or self.index.is_maxed()
        )

    def remove(self) -> None:
        """Close the segment and delete its files."""
        self.close()
        os.remove(self.index.name)
        os.remove(self.store.name)

    def close(self) -> None:
        self.index.close()
        self.store.close()