"""
Transport helper for the Flocker control service.

Owns URL construction and the mutual-TLS requests session. Every response body
is read in full and the connection released before the call returns, so
callers only ever see a status code and bytes. No retry or timeout policy
lives here beyond the per-request socket timeout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests

from flocker_client.config import ClientConfig
from flocker_client.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _require_file(path: str, label: str) -> str:
    if not Path(path).is_file():
        raise ConfigurationError(f"{label} not found: {path}")
    return path


def new_tls_session(ca_cert_path: str, key_path: str, cert_path: str) -> requests.Session:
    """Session that presents the client certificate and trusts only the cluster CA."""
    session = requests.Session()
    session.cert = (
        _require_file(cert_path, "Client certificate"),
        _require_file(key_path, "Client key"),
    )
    session.verify = _require_file(ca_cert_path, "CA certificate")
    return session


class ControlServiceTransport:
    """
    Raw GET/POST access to the control service.

    Usage:
        with ControlServiceTransport(config) as transport:
            response = transport.get(transport.get_url("state/nodes"))
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self.config = config
        if session is not None:
            self.session = session
        elif config.uses_client_certificate:
            self.session = new_tls_session(config.ca_cert_path, config.key_path, config.cert_path)
        else:
            self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def get_url(self, path: str) -> str:
        return f"{self.config.base_url}/{path}"

    def request(self, method: str, url: str, payload: Any = None) -> TransportResponse:
        # Only POST carries a body
        kwargs = {"json": payload} if method == "POST" else {}

        try:
            with self.session.request(method, url, timeout=self.config.request_timeout, **kwargs) as response:
                body = response.content
                status_code = response.status_code
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        logger.debug(f"{method} {url} -> {status_code} ({len(body)} bytes)")
        return TransportResponse(status_code=status_code, body=body)

    def get(self, url: str) -> TransportResponse:
        return self.request("GET", url)

    def post(self, url: str, payload: Any) -> TransportResponse:
        return self.request("POST", url, payload)

    def close(self):
        self.session.close()

    def __enter__(self) -> "ControlServiceTransport":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
