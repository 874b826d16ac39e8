import pytest

from obs_remote.core import OBSRemote
from tests.helpers import FakeTransport


@pytest.fixture
def make_remote():
    """Build an OBSRemote on FakeTransport; returns (remote, transports created so far)."""
    def _make(responder=None, fail_code=None, **kwargs):
        transports: list[FakeTransport] = []

        def factory(**handlers):
            t = FakeTransport(responder=responder, fail_code=fail_code, **handlers)
            transports.append(t)
            return t

        remote = OBSRemote(transport_factory=factory, **kwargs)
        return remote, transports
    return _make
