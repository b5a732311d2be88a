"""
Wire models for the Flocker control-service REST API.

All of these are transient values rebuilt from each response; nothing here is
cached between calls.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

# From the Flocker docker plugin adapter: 100 GiB, in bytes
DEFAULT_VOLUME_SIZE = 107374182400


class Metadata(BaseModel):
    name: Optional[str] = None


class NodeState(BaseModel):
    """A cluster node known to the control service at query time."""
    host: str
    uuid: str


class DatasetConfiguration(BaseModel):
    """Desired state of a dataset as registered with the control service."""
    primary: Optional[str] = None
    dataset_id: Optional[str] = None
    maximum_size: Optional[int] = None
    metadata: Optional[Metadata] = None

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name if self.metadata else None


class DatasetState(BaseModel):
    """Observed state of a dataset; only present once it has materialized."""
    dataset_id: str
    path: Optional[str] = None
    primary: Optional[str] = None
    maximum_size: Optional[int] = None


class CreateDatasetRequest(BaseModel):
    primary: str
    dataset_id: Optional[str] = None
    maximum_size: Optional[int] = Field(default=None, gt=0)
    metadata: Metadata = Field(default_factory=Metadata)

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class UpdatePrimaryRequest(BaseModel):
    primary: str = Field(min_length=1)

    def to_payload(self) -> dict:
        return self.model_dump()


class ProvisionOutcome(str, enum.Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"


@dataclass(frozen=True)
class ProvisionResult:
    """
    Result of a provisioning run.

    value is the mount path for CREATED and the dataset id for
    ALREADY_EXISTED; the control service reports no path on conflict.
    """
    outcome: ProvisionOutcome
    dataset_id: str
    value: str

    @property
    def created(self) -> bool:
        return self.outcome == ProvisionOutcome.CREATED
