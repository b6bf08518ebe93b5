import pytest

from commitlog.api import StatusCode, StatusError
from commitlog.auth import Authorizer

MODEL = """\
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = r.sub == p.sub && r.obj == p.obj && r.act == p.act
"""

POLICY = """\
p, root, *, produce
p, root, *, consume
"""


@pytest.fixture
def files(tmp_path):
    model = tmp_path / "model.conf"
    policy = tmp_path / "policy.csv"
    model.write_text(MODEL)
    policy.write_text(POLICY)
    return model, policy


def test_root_may_produce_and_consume(files):
    authorizer = Authorizer(*files)
    assert authorizer.authorize("root", "*", "produce") is None
    assert authorizer.authorize("root", "*", "consume") is None


def test_nobody_is_denied(files):
    authorizer = Authorizer(*files)
    with pytest.raises(StatusError) as info:
        authorizer.authorize("nobody", "*", "produce")
    assert info.value.code is StatusCode.PERMISSION_DENIED
    assert info.value.message == "nobody not permitted to produce to *"


def test_unknown_action_is_denied(files):
    authorizer = Authorizer(*files)
    with pytest.raises(StatusError) as info:
        authorizer.authorize("root", "*", "delete")
    assert info.value.code is StatusCode.PERMISSION_DENIED


def test_object_must_match(files):
    authorizer = Authorizer(*files)
    with pytest.raises(StatusError):
        authorizer.authorize("root", "topic", "produce")


def test_unsupported_matcher_rejected(tmp_path, files):
    _, policy = files
    model = tmp_path / "other.conf"
    model.write_text(MODEL.replace("r.act == p.act", "keyMatch(r.act, p.act)"))
    with pytest.raises(ValueError):
        Authorizer(model, policy)


def test_missing_model_file(tmp_path, files):
    _, policy = files
    with pytest.raises(FileNotFoundError):
        Authorizer(tmp_path / "absent.conf", policy)