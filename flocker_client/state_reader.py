"""
Decoders for control-service list responses.

Each function takes a response body that has already been read in full,
decodes it once and searches it in list order.
"""

import logging
from typing import List, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from flocker_client.errors import ConfigurationNotFound, DecodeError, StateNotFound
from flocker_client.models import DatasetConfiguration, DatasetState, NodeState

logger = logging.getLogger(__name__)

Body = Union[bytes, str]
M = TypeVar("M", bound=BaseModel)

_adapters: dict = {}


def _decode_list(body: Body, model: Type[M]) -> List[M]:
    adapter = _adapters.get(model)
    if adapter is None:
        adapter = _adapters[model] = TypeAdapter(List[model])
    try:
        return adapter.validate_json(body)
    except ValidationError as e:
        logger.debug(f"Could not decode {model.__name__} list: {e}")
        raise DecodeError(f"Malformed {model.__name__} list: {e.error_count()} error(s)") from e


def find_id_in_configurations_payload(body: Body, name: str) -> str:
    """Dataset id of the first configuration whose metadata name matches."""
    for configuration in _decode_list(body, DatasetConfiguration):
        if configuration.name == name:
            return configuration.dataset_id
    raise ConfigurationNotFound()


def find_dataset_state(body: Body, dataset_id: str) -> DatasetState:
    for state in _decode_list(body, DatasetState):
        if state.dataset_id == dataset_id:
            return state
    raise StateNotFound()


def find_path_in_dataset_state_payload(body: Body, dataset_id: str) -> str:
    return find_dataset_state(body, dataset_id).path


def find_uuid_in_nodes_payload(body: Body, host: str) -> str:
    """UUID of the node whose host address equals host."""
    for node in _decode_list(body, NodeState):
        if node.host == host:
            return node.uuid
    raise StateNotFound()
