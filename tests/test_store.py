import pytest

from commitlog.store import LEN_WIDTH, Store

WRITE = b"hello world"
WIDTH = len(WRITE) + LEN_WIDTH


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store_append_read_test"


def _append(store):
    for i in range(1, 4):
        n, pos = store.append(WRITE)
        assert pos + n == WIDTH * i


def _read(store):
    pos = 0
    for _ in range(3):
        assert store.read(pos) == WRITE
        pos += WIDTH


def _read_at(store):
    off = 0
    for _ in range(3):
        header = store.read_at(LEN_WIDTH, off)
        assert len(header) == LEN_WIDTH
        off += len(header)
        size = int.from_bytes(header, "big")
        body = store.read_at(size, off)
        assert body == WRITE
        assert len(body) == size
        off += len(body)


def test_store_append_read(store_path):
    store = Store(store_path)
    _append(store)
    _read(store)
    _read_at(store)
    store.close()

    reopened = Store(store_path)
    assert reopened.size == WIDTH * 3
    _read(reopened)
    reopened.close()


def test_read_past_end_raises(store_path):
    store = Store(store_path)
    store.append(WRITE)
    with pytest.raises(EOFError):
        store.read(WIDTH)
    store.close()


def test_close_flushes_to_disk(store_path):
    store = Store(store_path)
    store.append(WRITE)
    store.close()
    assert store_path.stat().st_size == WIDTH
    assert store.name == str(store_path)


def test_read_at_returns_short_at_end(store_path):
    store = Store(store_path)
    store.append(WRITE)
    assert store.read_at(100, LEN_WIDTH) == WRITE
    store.close()