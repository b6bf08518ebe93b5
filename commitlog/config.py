"""Configuration of log segments."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

DEFAULT_MAX_BYTES = 1024


@dataclass
class SegmentConfig:
    """Limits and the starting offset for segments."""

    max_store_bytes: int = 0
    max_index_bytes: int = 0
    initial_offset: int = 0


@dataclass
class Config:
    """Log configuration."""

    segment: SegmentConfig = field(default_factory=SegmentConfig)

    def with_defaults(self) -> "Config":
        """Return a copy whose unset size limits are filled with defaults."""
        segment = replace(
            self.segment,
            max_store_bytes=self.segment.max_store_bytes or DEFAULT_MAX_BYTES,
            max_index_bytes=self.segment.max_index_bytes or DEFAULT_MAX_BYTES,
        )
        return replace(self, segment=segment)