"""
Error taxonomy for the Flocker volume client.

Semantic absence (ConfigurationNotFound, StateNotFound) is kept apart from
call failures (TransportError, DecodeError) so callers can tell "doesn't
exist" from "couldn't ask".
"""

from typing import Optional


class FlockerClientError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(FlockerClientError, ValueError):
    """Client settings are missing or invalid."""


class TransportError(FlockerClientError):
    """Network or TLS failure talking to the control service."""


class DecodeError(FlockerClientError):
    """A control-service response body could not be decoded."""


class ConfigurationNotFound(FlockerClientError):
    def __init__(self, message: str = "Configuration not found by Name"):
        super().__init__(message)


class StateNotFound(FlockerClientError):
    def __init__(self, message: str = "State not found by Dataset ID"):
        super().__init__(message)


class VolumeTimedOut(StateNotFound):
    """The dataset never materialized before the polling deadline."""

    def __init__(self, dataset_id: str, timeout: float):
        super().__init__(
            f"Dataset {dataset_id} was not ready after {timeout:g}s: State not found by Dataset ID"
        )
        self.dataset_id = dataset_id
        self.timeout = timeout


class VolumeAlreadyExists(FlockerClientError):
    def __init__(self, message: str = "The volume already exists"):
        super().__init__(message)


class VolumeDoesNotExist(FlockerClientError):
    def __init__(self, message: str = "The volume does not exist"):
        super().__init__(message)


class StatusCodeError(FlockerClientError):
    """An HTTP call came back with an unexpected status."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class VolumeCreationError(StatusCodeError):
    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(
            f"Expected: {{1,2}}xx creating the volume, got: {status_code}",
            status_code,
            body,
        )


class UpdateFailed(StatusCodeError):
    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(
            f"It was impossible to update the dataset (status {status_code})",
            status_code,
            body,
        )


class ProvisioningCancelled(FlockerClientError):
    def __init__(self, dataset_id: str):
        super().__init__(f"Provisioning of dataset {dataset_id} was cancelled")
        self.dataset_id = dataset_id
