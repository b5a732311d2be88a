"""Tests for URL construction and raw GET/POST."""
import pytest
import requests

from flocker_client.config import ClientConfig
from flocker_client.errors import ConfigurationError, TransportError
from flocker_client.transport import ControlServiceTransport, new_tls_session

from tests.conftest import make_config


def test_get_url():
    transport = ControlServiceTransport(ClientConfig(host="host", port=42))
    assert transport.get_url("test") == "https://host:42/v1/test"


def test_post_sends_json_payload(httpserver):
    httpserver.expect_request("/echo", method="POST", json={"test": "foobar"}).respond_with_data("", status=418)

    with ControlServiceTransport(make_config(httpserver)) as transport:
        response = transport.post(httpserver.url_for("/echo"), {"test": "foobar"})

    assert response.status_code == 418
    request, _ = httpserver.log[0]
    assert request.headers["Content-Type"] == "application/json"


def test_get_sends_no_body(httpserver):
    httpserver.expect_request("/status", method="GET").respond_with_data("teapot", status=418)

    with ControlServiceTransport(make_config(httpserver)) as transport:
        response = transport.get(httpserver.url_for("/status"))

    assert response.status_code == 418
    assert response.body == b"teapot"
    assert not response.ok
    request, _ = httpserver.log[0]
    assert request.get_data() == b""


def test_connection_failure_is_transport_error():
    # Nothing listens on port 1
    transport = ControlServiceTransport(ClientConfig(host="127.0.0.1", port=1, scheme="http", request_timeout=2))
    with pytest.raises(TransportError) as excinfo:
        transport.get(transport.get_url("state/nodes"))
    assert isinstance(excinfo.value.__cause__, requests.RequestException)


class TestTLSSession:
    @pytest.fixture
    def tls_files(self, tmp_path):
        paths = {}
        for name in ("cluster.crt", "node.crt", "node.key"):
            path = tmp_path / name
            path.write_text("-----BEGIN PLACEHOLDER-----\n")
            paths[name] = str(path)
        return paths

    def test_session_presents_client_certificate(self, tls_files):
        session = new_tls_session(tls_files["cluster.crt"], tls_files["node.key"], tls_files["node.crt"])
        assert session.cert == (tls_files["node.crt"], tls_files["node.key"])
        assert session.verify == tls_files["cluster.crt"]

    def test_transport_uses_tls_session_when_configured(self, tls_files):
        config = ClientConfig(
            host="control",
            ca_cert_path=tls_files["cluster.crt"],
            cert_path=tls_files["node.crt"],
            key_path=tls_files["node.key"],
        )
        transport = ControlServiceTransport(config)
        assert transport.session.verify == tls_files["cluster.crt"]

    def test_missing_key_file(self, tls_files, tmp_path):
        with pytest.raises(ConfigurationError):
            new_tls_session(tls_files["cluster.crt"], str(tmp_path / "missing.key"), tls_files["node.crt"])
