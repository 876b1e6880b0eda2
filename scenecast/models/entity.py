"""Entity manifest models — the versioned, content-addressed deployable unit."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from scenecast.core.hasher import canonical_json_bytes

CURRENT_SCHEMA_VERSION = "v3"


class ManifestFormatError(ValueError):
    """Raised when manifest bytes do not parse as a well-formed entity."""


class EntityType(str, Enum):
    """All entity kinds a content server knows about."""

    PROFILE = "profile"
    SCENE = "scene"
    WEARABLE = "wearable"
    EMOTE = "emote"


class Parcel(BaseModel):
    """A grid cell, written on the wire as ``"x,y"``."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            parts = value.split(",")
            if len(parts) != 2:
                raise ValueError(f"parcel must look like 'x,y', got {value!r}")
            return {"x": parts[0].strip(), "y": parts[1].strip()}
        return value

    @classmethod
    def parse(cls, text: str) -> Parcel:
        return cls.model_validate(text)

    def __str__(self) -> str:
        return f"{self.x},{self.y}"


class SceneLayout(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    base: Parcel | None = None
    parcels: list[Parcel]


class SceneMetadata(BaseModel):
    """The part of a Scene's metadata that declares which parcels it owns.

    Everything else in the metadata document is carried through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    scene: SceneLayout

    @property
    def pointers(self) -> list[str]:
        return [str(parcel) for parcel in self.scene.parcels]


class ContentFile(BaseModel):
    """One published file: a relative path and the id of its bytes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file: str
    hash: str  # ContentId


class Entity(BaseModel):
    """A deployable manifest.

    ``id`` stays empty until the manifest has been hashed; it is the
    content id of the manifest's own serialization with ``id`` blank.
    Parsing is strict: unknown keys and duplicate content paths fail.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    id: str = ""
    version: str = CURRENT_SCHEMA_VERSION
    kind: EntityType = Field(alias="type")
    pointers: list[str]
    timestamp: int  # milliseconds since epoch
    content: list[ContentFile] = []
    metadata: dict[str, Any] | None = None

    @field_validator("content")
    @classmethod
    def _unique_paths(cls, content: list[ContentFile]) -> list[ContentFile]:
        seen: set[str] = set()
        for entry in content:
            if entry.file in seen:
                raise ValueError(f"duplicate content path: {entry.file}")
            seen.add(entry.file)
        return content

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Canonical serialization, as hashed and uploaded."""
        return canonical_json_bytes(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def from_bytes(cls, data: bytes | str) -> Entity:
        try:
            return cls.model_validate_json(data)
        except ValidationError as exc:
            raise ManifestFormatError(f"Malformed entity manifest: {exc}") from exc

    # ------------------------------------------------------------------
    # Scene helpers
    # ------------------------------------------------------------------

    def scene_parcels(self) -> list[str] | None:
        """Return the pointer list declared by Scene metadata, if any."""
        return declared_pointers(self.kind, self.metadata)

    def content_hash(self, path: str) -> str | None:
        for entry in self.content:
            if entry.file == path:
                return entry.hash
        return None


class SceneFile(Entity):
    """An active entity as reported by a content server."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


def declared_pointers(
    kind: EntityType, metadata: dict[str, Any] | None
) -> list[str] | None:
    """Extract the authoritative pointer list from Scene metadata.

    Returns ``None`` for non-scene kinds or metadata without a ``scene``
    block.  A ``scene`` block that is present but malformed is an error.
    """
    if kind != EntityType.SCENE or not metadata or "scene" not in metadata:
        return None
    try:
        return SceneMetadata.model_validate(metadata).pointers
    except ValidationError as exc:
        raise ManifestFormatError(f"Malformed scene metadata: {exc}") from exc


class EntityRef(BaseModel):
    """Identifies one entity on a server by kind and id."""

    model_config = ConfigDict(frozen=True)

    kind: EntityType
    id: str

    @classmethod
    def scene(cls, id: str) -> EntityRef:
        return cls(kind=EntityType.SCENE, id=id)

    @classmethod
    def profile(cls, id: str) -> EntityRef:
        return cls(kind=EntityType.PROFILE, id=id)

    @classmethod
    def wearable(cls, id: str) -> EntityRef:
        return cls(kind=EntityType.WEARABLE, id=id)

    @classmethod
    def emote(cls, id: str) -> EntityRef:
        return cls(kind=EntityType.EMOTE, id=id)

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.id}"
