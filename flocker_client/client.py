"""
Flocker volume client.

Provisions, locates and reassigns Flocker datasets on behalf of a
volume-management host. Dataset ids are derived from volume names, so the
same name always maps to the same dataset on the control service.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from flocker_client.config import ClientConfig
from flocker_client.errors import (
    ProvisioningCancelled,
    StateNotFound,
    UpdateFailed,
    VolumeAlreadyExists,
    VolumeCreationError,
    VolumeDoesNotExist,
    VolumeTimedOut,
)
from flocker_client.identifiers import dataset_id_from_name
from flocker_client.models import (
    CreateDatasetRequest,
    DatasetState,
    Metadata,
    ProvisionOutcome,
    ProvisionResult,
    UpdatePrimaryRequest,
)
from flocker_client.state_reader import (
    find_dataset_state,
    find_id_in_configurations_payload,
    find_uuid_in_nodes_payload,
)
from flocker_client.transport import ControlServiceTransport

logger = logging.getLogger(__name__)

NODES_STATE_PATH = "state/nodes"
DATASETS_STATE_PATH = "state/datasets"
DATASETS_CONFIGURATION_PATH = "configuration/datasets"

HTTP_CONFLICT = 409


class FlockerClient:
    """
    Client for the Flocker control service.

    Usage:
        config = ClientConfig.from_agent_file("/etc/flocker/agent.yml", client_ip="10.0.1.10")
        with FlockerClient(config) as client:
            path = client.create_volume("postgres-data")
            same_path = client.lookup_volume("postgres-data")
            client.update_dataset_primary("postgres-data", other_node_uuid)
    """

    def __init__(self, config: ClientConfig, transport: Optional[ControlServiceTransport] = None):
        self.config = config
        self.transport = transport or ControlServiceTransport(config)

    def close(self):
        self.transport.close()

    def __enter__(self) -> "FlockerClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ========================================================================
    # STATE QUERIES
    # ========================================================================

    def lookup_primary_uuid(self) -> str:
        """
        Return the UUID of the node this client runs on.

        Not cached: asking every time doubles as a health check of the
        control service.

        Raises:
            StateNotFound: no node reports the configured client address
        """
        response = self.transport.get(self.transport.get_url(NODES_STATE_PATH))
        primary = find_uuid_in_nodes_payload(response.body, self.config.node_address)
        logger.debug(f"Primary for {self.config.node_address} is {primary}")
        return primary

    def get_dataset_state(self, dataset_id: str) -> DatasetState:
        """
        Fetch the observed state of a dataset.

        Raises:
            StateNotFound: the dataset has not materialized (or never will)
        """
        response = self.transport.get(self.transport.get_url(DATASETS_STATE_PATH))
        return find_dataset_state(response.body, dataset_id)

    def query_dataset_id_from_name(self, name: str) -> str:
        """
        Find the dataset id registered under a name in the configuration.

        Raises:
            ConfigurationNotFound: no configured dataset carries that name
        """
        response = self.transport.get(self.transport.get_url(DATASETS_CONFIGURATION_PATH))
        return find_id_in_configurations_payload(response.body, name)

    # ========================================================================
    # PROVISIONING
    # ========================================================================

    def provision_volume(
        self,
        name: str,
        cancel_event: Optional[threading.Event] = None,
        exist_ok: bool = True,
    ) -> ProvisionResult:
        """
        Create a dataset for name and wait until it is mounted.

        Steps:
        1. Find this node's UUID (the dataset primary)
        2. POST the dataset configuration under the name-derived id
        3. On 409 the dataset already exists: return at once, no polling
        4. Otherwise poll the dataset state until it reports a path

        Args:
            name: Volume name; also stored as the dataset's metadata name
            cancel_event: Optional event; once set, polling stops at the next tick
            exist_ok: When False, an existing dataset raises VolumeAlreadyExists

        Returns:
            ProvisionResult with the mount path (CREATED) or the dataset id
            (ALREADY_EXISTED)

        Raises:
            StateNotFound: no node matches the client address
            VolumeAlreadyExists: the dataset exists and exist_ok is False
            VolumeCreationError: the control service rejected the dataset
            VolumeTimedOut: the dataset did not materialize within poll_timeout
            ProvisioningCancelled: cancel_event was set while polling
        """
        primary = self.lookup_primary_uuid()
        dataset_id = dataset_id_from_name(name)

        request = CreateDatasetRequest(
            primary=primary,
            dataset_id=dataset_id,
            maximum_size=self.config.maximum_size,
            metadata=Metadata(name=name),
        )
        logger.info(f"Creating dataset {dataset_id} ({name}) on primary {primary}")
        response = self.transport.post(
            self.transport.get_url(DATASETS_CONFIGURATION_PATH), request.to_payload()
        )

        if response.status_code == HTTP_CONFLICT:
            logger.info(f"Dataset {dataset_id} ({name}) already exists")
            if not exist_ok:
                raise VolumeAlreadyExists()
            return ProvisionResult(ProvisionOutcome.ALREADY_EXISTED, dataset_id, dataset_id)

        if response.status_code >= 300:
            logger.error(f"Creating dataset {dataset_id} failed: HTTP {response.status_code} {response.text}")
            raise VolumeCreationError(response.status_code, response.text)

        state = self._wait_for_dataset(dataset_id, cancel_event)
        logger.info(f"Dataset {dataset_id} ({name}) ready at {state.path}")
        return ProvisionResult(ProvisionOutcome.CREATED, dataset_id, state.path)

    def create_volume(self, name: str, cancel_event: Optional[threading.Event] = None) -> str:
        """
        Create a volume and return its mount path.

        When the volume already exists the dataset id is returned instead;
        use provision_volume() to tell the two cases apart.
        """
        return self.provision_volume(name, cancel_event).value

    def _wait_for_dataset(self, dataset_id: str, cancel_event: Optional[threading.Event]) -> DatasetState:
        # A single absolute deadline: ticks never push it back
        deadline = time.monotonic() + self.config.poll_timeout
        attempts = 0

        while True:
            attempts += 1
            try:
                state = self.get_dataset_state(dataset_id)
                if state.path:
                    return state
                last_error = StateNotFound(f"Dataset {dataset_id} has no mount path yet")
            except StateNotFound as e:
                last_error = e
            logger.debug(f"Dataset {dataset_id} not ready (attempt {attempts})")

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            interval = min(self.config.poll_interval, remaining)
            if cancel_event is not None:
                if cancel_event.wait(interval):
                    logger.warning(f"Provisioning of dataset {dataset_id} cancelled after {attempts} attempts")
                    raise ProvisioningCancelled(dataset_id)
            else:
                time.sleep(interval)

            # Deadline wins over a tick that lands late
            if time.monotonic() >= deadline:
                break

        logger.error(f"Dataset {dataset_id} not ready after {self.config.poll_timeout:g}s ({attempts} attempts)")
        raise VolumeTimedOut(dataset_id, self.config.poll_timeout) from last_error

    # ========================================================================
    # LOOKUP & REASSIGNMENT
    # ========================================================================

    def lookup_volume(self, name: str) -> Optional[str]:
        """
        Return the mount path of an existing volume.

        None means the dataset exists but is not mounted anywhere yet.

        Raises:
            VolumeDoesNotExist: the control service has no state for it
        """
        dataset_id = dataset_id_from_name(name)
        try:
            return self.get_dataset_state(dataset_id).path
        except StateNotFound as e:
            raise VolumeDoesNotExist() from e

    def update_dataset_primary(self, name: str, new_primary: str):
        """
        Move a volume to another node. Does not wait for the move to happen.

        Raises:
            UpdateFailed: the control service answered outside 2xx
        """
        dataset_id = dataset_id_from_name(name)
        url = self.transport.get_url(f"{DATASETS_CONFIGURATION_PATH}/{dataset_id}")
        response = self.transport.post(url, UpdatePrimaryRequest(primary=new_primary).to_payload())

        if not response.ok:
            logger.error(f"Moving dataset {dataset_id} to {new_primary} failed: HTTP {response.status_code}")
            raise UpdateFailed(response.status_code, response.text)
        logger.info(f"Dataset {dataset_id} ({name}) reassigned to {new_primary}")
