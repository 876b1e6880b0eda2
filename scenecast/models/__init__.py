"""scenecast data models — all Pydantic v2, all frozen (immutable)."""

from scenecast.models.auth import AuthChain, AuthLink, AuthLinkType
from scenecast.models.entity import (
    ContentFile,
    Entity,
    EntityRef,
    EntityType,
    Parcel,
    SceneFile,
    SceneMetadata,
)
from scenecast.models.envelopes import DeploymentEnvelope, FileData
from scenecast.models.responses import (
    Challenge,
    ContentFileStatus,
    ContentServerStatus,
    DeployResponse,
    EntityData,
    EntityInformation,
    EntitySnapshot,
    FailedDeployment,
    Snapshot,
    SnapshotEntry,
)

__all__ = [
    # entity
    "EntityType",
    "ContentFile",
    "Entity",
    "EntityRef",
    "Parcel",
    "SceneFile",
    "SceneMetadata",
    # auth
    "AuthLinkType",
    "AuthLink",
    "AuthChain",
    # envelopes
    "FileData",
    "DeploymentEnvelope",
    # responses
    "Challenge",
    "ContentFileStatus",
    "ContentServerStatus",
    "DeployResponse",
    "EntityData",
    "EntityInformation",
    "EntitySnapshot",
    "FailedDeployment",
    "Snapshot",
    "SnapshotEntry",
]
