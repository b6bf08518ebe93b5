import pytest

from commitlog.api import Record, encode_record
from commitlog.config import Config, SegmentConfig
from commitlog.index import ENTRY_WIDTH
from commitlog.segment import Segment
from commitlog.store import LEN_WIDTH


def test_segment(tmp_path):
    want = Record(value=b"hello world")
    config = Config(SegmentConfig(max_store_bytes=1024, max_index_bytes=ENTRY_WIDTH * 3))

    segment = Segment(tmp_path, 16, config)
    assert segment.next_offset == 16
    assert not segment.is_maxed()

    for i in range(3):
        off = segment.append(want)
        assert off == 16 + i
        got = segment.read(off)
        assert got.value == want.value
        assert got.offset == off

    with pytest.raises(EOFError):
        segment.append(want)

    # the index is full
    assert segment.is_maxed()
    segment.close()

    encoded = encode_record(Record(value=b"hello world", offset=16))
    config = Config(
        SegmentConfig(max_store_bytes=(len(encoded) + LEN_WIDTH) * 4, max_index_bytes=1024)
    )
    # rebuild from the existing files: the store is full
    segment = Segment(tmp_path, 16, config)
    assert segment.is_maxed()

    segment.remove()

    segment = Segment(tmp_path, 16, config)
    assert not segment.is_maxed()
    segment.close()


def test_reopen_recovers_next_offset(tmp_path):
    config = Config(SegmentConfig(max_store_bytes=1024, max_index_bytes=1024))
    segment = Segment(tmp_path, 0, config)
    segment.append(Record(value=b"first"))
    segment.append(Record(value=b"second"))
    segment.close()

    segment = Segment(tmp_path, 0, config)
    assert segment.next_offset == 2
    assert segment.read(1).value == b"second"
    segment.close()


def test_read_outside_segment_raises(tmp_path):
    config = Config(SegmentConfig(max_store_bytes=1024, max_index_bytes=1024))
    segment = Segment(tmp_path, 5, config)
    segment.append(Record(value=b"x"))
    with pytest.raises(EOFError):
        segment.read(6)
    with pytest.raises(EOFError):
        segment.read(4)
    segment.close()


def test_remove_deletes_files(tmp_path):
    config = Config(SegmentConfig(max_store_bytes=1024, max_index_bytes=1024))
    segment = Segment(tmp_path, 3, config)
    segment.append(Record(value=b"x"))
    segment.remove()
    assert list(tmp_path.iterdir()) == []


def test_append_does_not_change_caller_record(tmp_path):
    config = Config(SegmentConfig(max_store_bytes=1024, max_index_bytes=1024))
    segment = Segment(tmp_path, 9, config)
    record = Record(value=b"x")
    assert segment.append(record) == 9
    assert record.offset == 0
    segment.close()