import pytest

from commitlog.picker import NoSubConnAvailableError, Picker


class _SubConn:
    pass


def _setup():
    sub_conns = [_SubConn() for _ in range(3)]
    ready = {sc: {"is_leader": i == 0} for i, sc in enumerate(sub_conns)}
    picker = Picker()
    picker.build(ready)
    return picker, sub_conns


@pytest.mark.parametrize("method", ["/log.vX.Log/Produce", "/log.vX.Log/Consume"])
def test_no_sub_conn_available(method):
    with pytest.raises(NoSubConnAvailableError):
        Picker().pick(method)


def test_produces_to_leader():
    picker, sub_conns = _setup()
    for _ in range(5):
        assert picker.pick("/log.vX.Log/Produce") is sub_conns[0]


def test_consumes_from_followers():
    picker, sub_conns = _setup()
    for i in range(5):
        assert picker.pick("/log.vX.Log/Consume") is sub_conns[i % 2 + 1]


def test_build_returns_picker():
    picker = Picker()
    assert picker.build({}) is picker


def test_consume_goes_to_leader_without_followers():
    leader = _SubConn()
    picker = Picker().build({leader: {"is_leader": True}})
    assert picker.pick("/log.vX.Log/Consume") is leader


def test_other_method_with_followers_has_no_conn():
    picker, _ = _setup()
    with pytest.raises(NoSubConnAvailableError):
        picker.pick("/log.vX.Log/GetServers")