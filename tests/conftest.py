"""Shared fixtures: a fake control service and clients pointed at it."""
import pytest

from flocker_client.client import FlockerClient
from flocker_client.config import ClientConfig

CLIENT_IP = "127.0.0.1"
PRIMARY = "A-B-C-D"


def make_config(httpserver, **overrides) -> ClientConfig:
    settings = {
        "host": httpserver.host,
        "port": httpserver.port,
        "scheme": "http",
        "client_ip": CLIENT_IP,
        "poll_interval": 0.01,
        "poll_timeout": 2.0,
    }
    settings.update(overrides)
    return ClientConfig(**settings)


@pytest.fixture
def config(httpserver):
    return make_config(httpserver)


@pytest.fixture
def client(config):
    with FlockerClient(config) as client:
        yield client


@pytest.fixture
def expect_primary(httpserver):
    """Answer the node-state lookup with this client's node."""
    def _expect(host=CLIENT_IP, uuid=PRIMARY):
        httpserver.expect_ordered_request("/v1/state/nodes", method="GET").respond_with_json(
            [{"host": host, "uuid": uuid}]
        )
    return _expect
