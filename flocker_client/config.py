"""
Client configuration.

Connection parameters and polling knobs live on an immutable ClientConfig so
that clients with different tuning can coexist in one process. Settings can
come from the environment, from the attributes an orchestrator attaches to a
volume, or from a Flocker agent.yml.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from flocker_client.errors import ConfigurationError
from flocker_client.models import DEFAULT_VOLUME_SIZE

logger = logging.getLogger(__name__)

DEFAULT_CONTROL_SERVICE_PORT = 4523
DEFAULT_SCHEME = "https"
DEFAULT_API_VERSION = "v1"
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_TIMEOUT = 120.0
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_AGENT_CONFIG = "/etc/flocker/agent.yml"

HOST_ATTRIBUTE = "CONTROL_SERVICE_HOST"
PORT_ATTRIBUTE = "CONTROL_SERVICE_PORT"

# Certificate names written next to agent.yml by `flocker-ca`
AGENT_CA_FILE = "cluster.crt"
AGENT_CERT_FILE = "node.crt"
AGENT_KEY_FILE = "node.key"


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _str_env(name: str) -> Optional[str]:
    raw = str(os.getenv(name, "")).strip()
    return raw or None


@dataclass(frozen=True)
class ClientConfig:
    host: str
    port: int = DEFAULT_CONTROL_SERVICE_PORT
    client_ip: Optional[str] = None
    scheme: str = DEFAULT_SCHEME
    version: str = DEFAULT_API_VERSION
    maximum_size: int = DEFAULT_VOLUME_SIZE
    ca_cert_path: Optional[str] = None
    cert_path: Optional[str] = None
    key_path: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = DEFAULT_POLL_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if not str(self.host or "").strip():
            raise ConfigurationError("host is required")
        if int(self.port) < 1 or int(self.port) > 65535:
            raise ConfigurationError("port must be in range 1..65535")
        if self.scheme not in {"http", "https"}:
            raise ConfigurationError(f"scheme must be http or https, got {self.scheme!r}")
        if self.maximum_size <= 0 or self.maximum_size % 1024 != 0:
            raise ConfigurationError("maximum_size must be a positive multiple of 1024")
        for field_name in ("poll_interval", "poll_timeout", "request_timeout"):
            if getattr(self, field_name) <= 0:
                raise ConfigurationError(f"{field_name} must be positive")

        tls_files = [self.ca_cert_path, self.cert_path, self.key_path]
        if any(tls_files) and not all(tls_files):
            raise ConfigurationError("ca_cert_path, cert_path and key_path must be given together")

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}/{self.version}"

    @property
    def node_address(self) -> str:
        """Address matched against node states to find this client's primary."""
        return self.client_ip or self.host

    @property
    def uses_client_certificate(self) -> bool:
        return bool(self.ca_cert_path and self.cert_path and self.key_path)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a config from FLOCKER_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        settings = {
            "host": _str_env("FLOCKER_CONTROL_SERVICE_HOST"),
            "port": _int_env("FLOCKER_CONTROL_SERVICE_PORT", DEFAULT_CONTROL_SERVICE_PORT),
            "client_ip": _str_env("FLOCKER_CLIENT_IP"),
            "scheme": _str_env("FLOCKER_CONTROL_SERVICE_SCHEME") or DEFAULT_SCHEME,
            "ca_cert_path": _str_env("FLOCKER_CA_FILE"),
            "cert_path": _str_env("FLOCKER_CERT_FILE"),
            "key_path": _str_env("FLOCKER_KEY_FILE"),
            "poll_interval": _float_env("FLOCKER_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            "poll_timeout": _float_env("FLOCKER_POLL_TIMEOUT", DEFAULT_POLL_TIMEOUT),
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        if not settings.get("host"):
            raise ConfigurationError("FLOCKER_CONTROL_SERVICE_HOST is not set")
        return cls(**settings)

    @classmethod
    def from_volume_attributes(cls, attributes: Mapping[str, str], **overrides: Any) -> "ClientConfig":
        """Build a config from the attributes an orchestrator attaches to a volume."""
        host = str(attributes.get(HOST_ATTRIBUTE, "") or "").strip()
        if not host:
            raise ConfigurationError(
                f"The volume config must have a key {HOST_ATTRIBUTE} defined in the OtherAttributes field"
            )
        raw_port = str(attributes.get(PORT_ATTRIBUTE, "") or "").strip()
        if not raw_port:
            raise ConfigurationError(
                f"The volume config must have a key {PORT_ATTRIBUTE} defined in the OtherAttributes field"
            )
        try:
            port = int(raw_port)
        except ValueError:
            raise ConfigurationError(f"{PORT_ATTRIBUTE} must be an integer, got {raw_port!r}")

        settings: dict = {"host": host, "port": port}
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**settings)

    @classmethod
    def from_agent_file(cls, path: str = DEFAULT_AGENT_CONFIG, **overrides: Any) -> "ClientConfig":
        """
        Build a config from a Flocker agent.yml.

        Only the control-service section is read. The node certificates are
        expected beside the file, as `flocker-ca` lays them out.
        """
        agent_path = Path(path)
        try:
            with open(agent_path, "r") as f:
                document = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigurationError(f"Agent config not found: {agent_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {agent_path}: {e}") from e

        control = document.get("control-service") if isinstance(document, dict) else None
        if not isinstance(control, dict) or not control.get("hostname"):
            raise ConfigurationError(f"{agent_path} has no control-service hostname")

        try:
            port = int(control.get("port", DEFAULT_CONTROL_SERVICE_PORT))
        except (TypeError, ValueError):
            raise ConfigurationError(f"{agent_path} has an invalid control-service port")

        cert_dir = agent_path.parent
        settings = {
            "host": str(control["hostname"]),
            "port": port,
            "ca_cert_path": str(cert_dir / AGENT_CA_FILE),
            "cert_path": str(cert_dir / AGENT_CERT_FILE),
            "key_path": str(cert_dir / AGENT_KEY_FILE),
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug(f"Loaded control service {settings['host']}:{settings['port']} from {agent_path}")
        return cls(**settings)
