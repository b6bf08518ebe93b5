import itertools
import threading

import pytest

from commitlog.api import OffsetOutOfRangeError, Record, Server, StatusCode, StatusError
from commitlog.auth import Authorizer
from commitlog.log import Log
from commitlog.server import LogService, subject_from_certificate

MODEL = """[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = r.sub == p.sub && r.obj == p.obj && r.act == p.act
"""

POLICY = "p, root, *, produce\np, root, *, consume\n"


@pytest.fixture
def service(tmp_path):
    model = tmp_path / "model.conf"
    model.write_text(MODEL)
    policy = tmp_path / "policy.csv"
    policy.write_text(POLICY)
    log_dir = tmp_path / "log"
    log_dir.mkdir()
    log = Log(log_dir)
    yield LogService(log, Authorizer(model, policy))
    log.close()


def test_produce_consume(service):
    offset = service.produce(Record(value=b"hello world"), "root")
    consumed = service.consume(offset, "root")
    assert consumed.value == b"hello world"
    assert consumed.offset == offset


def test_consume_past_boundary(service):
    offset = service.produce(Record(value=b"hello world"), "root")
    with pytest.raises(OffsetOutOfRangeError) as info:
        service.consume(offset + 1, "root")
    assert info.value.code == StatusCode.OUT_OF_RANGE


def test_produce_consume_stream(service):
    records = [Record(value=b"first message"), Record(value=b"second message")]
    assert list(service.produce_stream(records, "root")) == [0, 1]
    stop = threading.Event()
    got = list(itertools.islice(service.consume_stream(0, "root", stop), 2))
    stop.set()
    assert got == [
        Record(value=b"first message", offset=0),
        Record(value=b"second message", offset=1),
    ]


def test_unauthorized(service):
    with pytest.raises(StatusError) as produce_info:
        service.produce(Record(value=b"hello world"), "nobody")
    assert produce_info.value.code == StatusCode.PERMISSION_DENIED
    assert produce_info.value.message == "nobody not permitted to produce to *"
    with pytest.raises(StatusError) as consume_info:
        service.consume(0, "nobody")
    assert consume_info.value.code == StatusCode.PERMISSION_DENIED


def test_consume_stream_waits_for_new_records(service):
    stop = threading.Event()
    stream = service.consume_stream(0, "root", stop)
    timer = threading.Timer(0.05, service.produce, args=(Record(value=b"late"), "root"))
    timer.start()
    try:
        assert next(stream).value == b"late"
    finally:
        stop.set()
        timer.join()


def test_consume_stream_ends_when_stopped(service):
    service.produce(Record(value=b"one"), "root")
    stop = threading.Event()
    stop.set()
    assert list(service.consume_stream(0, "root", stop)) == []


def test_get_servers():
    servers = [Server("leader", "localhost:9001", True), Server("follower", "localhost:9002")]

    class _Lister:
        def get_servers(self):
            return servers

    assert LogService(get_serverer=_Lister()).get_servers() == servers


def test_get_servers_without_lister():
    with pytest.raises(StatusError) as info:
        LogService().get_servers()
    assert info.value.code == StatusCode.UNIMPLEMENTED


def test_subject_from_certificate():
    certificate = {
        "subject": ((("countryName", "US"),), (("commonName", "root"),)),
    }
    assert subject_from_certificate(certificate) == "root"
    assert subject_from_certificate(None) == ""
    assert subject_from_certificate({"subject": ((("countryName", "US"),),)}) == ""