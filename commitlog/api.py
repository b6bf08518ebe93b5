"""Record types, status errors and the record wire format."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_UINT64_MASK = (1 << 64) - 1
_UINT32_MASK = (1 << 32) - 1

_FIELD_VALUE = 1
_FIELD_OFFSET = 2
_FIELD_TERM = 3
_FIELD_TYPE = 4

_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_BYTES = 2
_WIRE_FIXED32 = 5


@dataclass
class Record:
    """A single entry of the commit log."""

    value: bytes = b""
    offset: int = 0
    term: int = 0
    type: int = 0


@dataclass
class Server:
    """A member of the cluster as reported to clients."""

    id: str
    rpc_addr: str
    is_leader: bool = False


class StatusCode(enum.IntEnum):
    """Status codes carried by service errors."""

    OK = 0
    CANCELED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def label(self) -> str:
        """The code's name in camel case, e.g. ``OutOfRange``."""
        if self is StatusCode.OK:
            return "OK"
        return "".join(part.capitalize() for part in self.name.split("_"))


class StatusError(Exception):
    """An error carrying a status code and a description."""

    def __init__(self, code: StatusCode, message: str) -> None:
        self.code = StatusCode(code)
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"rpc error: code = {self.code.label} desc = {self.message}"


class OffsetOutOfRangeError(StatusError):
    """Raised when a requested offset lies outside the log."""

    locale = "en-US"

    def __init__(self, offset: int) -> None:
        self.offset = offset
        self.localized_message = (
            f"The requested offset is outside the log's range: {offset}"
        )
        super().__init__(StatusCode.OUT_OF_RANGE, f"offset out of range: {offset}")


def _write_varint(out: bytearray, number: int) -> None:
    number &= _UINT64_MASK
    while True:
        byte = number & 0x7F
        number >>= 7
        if number:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return


def _read_varint(data: memoryview, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        if shift >= 70:
            raise ValueError("varint too long")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result & _UINT64_MASK, pos
        shift += 7


def encode_record(record: Record) -> bytes:
    """Serialise a record; zero-valued fields are omitted."""
    out = bytearray()
    if record.value:
        _write_varint(out, (_FIELD_VALUE << 3) | _WIRE_BYTES)
        _write_varint(out, len(record.value))
        out += record.value
    for number, field_value in (
        (_FIELD_OFFSET, record.offset),
        (_FIELD_TERM, record.term),
        (_FIELD_TYPE, record.type),
    ):
        if field_value:
            _write_varint(out, (number << 3) | _WIRE_VARINT)
            _write_varint(out, field_value)
    return bytes(out)


def decode_record(data: bytes) -> Record:
    """Parse bytes produced by :func:`encode_record`; raises ValueError if malformed."""
    view = memoryview(bytes(data))
    record = Record()
    pos = 0
    while pos < len(view):
        key, pos = _read_varint(view, pos)
        number, wire = key >> 3, key & 7
        if wire == _WIRE_VARINT:
            number_value, pos = _read_varint(view, pos)
            if number == _FIELD_OFFSET:
                record.offset = number_value
            elif number == _FIELD_TERM:
                record.term = number_value
            elif number == _FIELD_TYPE:
                record.type = number_value & _UINT32_MASK
        elif wire == _WIRE_BYTES:
            length, pos = _read_varint(view, pos)
            end = pos + length
            if end > len(view):
                raise ValueError("truncated length-delimited field")
            if number == _FIELD_VALUE:
                record.value = bytes(view[pos:end])
            pos = end
        elif wire in (_WIRE_FIXED64, _WIRE_FIXED32):
            width = 8 if wire == _WIRE_FIXED64 else 4
            if pos + width > len(view):
                raise ValueError("truncated fixed-width field")
            pos += width
        else:
            raise ValueError(f"unsupported wire type {wire}")
    return record