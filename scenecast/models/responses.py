"""Read-only response models for the content server query surface.

Server documents are camelCase; these models expose snake_case attributes
and accept either spelling on input.  Unknown keys are ignored so newer
servers do not break older clients.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scenecast.models.auth import AuthLink, AuthLinkType
from scenecast.models.entity import EntityType

T = TypeVar("T")


class MissingSnapshotEntryError(LookupError):
    """Raised when a snapshot has no index for the requested entity kind."""


class WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Challenge(WireModel):
    challenge_text: str


class DeployResponse(WireModel):
    creation_timestamp: int


class EntityData(WireModel):
    pointer: str
    entity_id: str


class FailedDeployment(WireModel):
    """One deployment the server could not apply (diagnostics only)."""

    entity_type: EntityType
    entity_id: str
    reason: str
    error_description: str = ""
    failed_deployments_repo: str | None = None
    failure_timestamp: int | None = None


class ContentFileStatus(WireModel):
    id: str = Field(alias="cid")
    available: bool


class EntityInformation(WireModel):
    """Audit record for one deployed entity."""

    version: str
    local_timestamp: int
    auth_chain: list[AuthLink] = []
    overwritten_by: str | None = None
    is_denylisted: bool = False
    denylisted_content: list[str] = []

    @property
    def signer(self) -> str | None:
        for link in self.auth_chain:
            if link.type == AuthLinkType.SIGNER:
                return link.payload
        return None


class SnapshotEntry(WireModel):
    hash: str  # ContentId of the newline-delimited index
    last_included_deployment_timestamp: int = 0


class Snapshot(WireModel):
    """Server-published index of active entities, partitioned by kind."""

    hash: str | None = None
    last_included_deployment_timestamp: int = 0
    entities: dict[str, SnapshotEntry]  # keyed by EntityType value

    def entry_for(self, kind: EntityType) -> SnapshotEntry:
        try:
            return self.entities[kind.value]
        except KeyError:
            raise MissingSnapshotEntryError(
                f"Snapshot has no index for entity kind {kind.value!r}"
            ) from None


class EntitySnapshot(WireModel, Generic[T]):
    """One line of a snapshot index.  ``T`` is the pointer type."""

    entity_id: str
    entity_type: EntityType
    pointers: list[T]
    local_timestamp: int
    auth_chain: list[AuthLink] = []
    entity_timestamp: int | None = None


class SyncState(WireModel):
    last_sync_with_other_servers: int | None = None
    synchronization_state: str | None = None


class ContentServerStatus(WireModel):
    """Health and version information reported by ``/content/status``."""

    name: str | None = None
    version: str
    current_time: int
    last_immutable_time: int | None = None
    history_size: int | None = None
    synchronization_status: SyncState | dict[str, Any] | None = None
    commit_hash: str | None = None
    catalyst_version: str | None = None
    eth_network: str | None = None
