"""
Flocker volume client.

Client for the Flocker control-service REST API used by volume-management
hosts to provision, look up and reassign datasets:
- identifiers: name -> dataset id derivation
- transport: mutual-TLS GET/POST against the control service
- state_reader: decoding and searching control-service list responses
- client: the provisioning protocol (create, poll, lookup, reassign)
"""

from flocker_client.client import FlockerClient
from flocker_client.config import ClientConfig
from flocker_client.errors import (
    ConfigurationError,
    ConfigurationNotFound,
    DecodeError,
    FlockerClientError,
    ProvisioningCancelled,
    StateNotFound,
    TransportError,
    UpdateFailed,
    VolumeAlreadyExists,
    VolumeCreationError,
    VolumeDoesNotExist,
    VolumeTimedOut,
)
from flocker_client.identifiers import dataset_id_from_name
from flocker_client.models import DEFAULT_VOLUME_SIZE, ProvisionOutcome, ProvisionResult

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ConfigurationError",
    "ConfigurationNotFound",
    "DEFAULT_VOLUME_SIZE",
    "DecodeError",
    "FlockerClient",
    "FlockerClientError",
    "ProvisionOutcome",
    "ProvisionResult",
    "ProvisioningCancelled",
    "StateNotFound",
    "TransportError",
    "UpdateFailed",
    "VolumeAlreadyExists",
    "VolumeCreationError",
    "VolumeDoesNotExist",
    "VolumeTimedOut",
    "dataset_id_from_name",
]
