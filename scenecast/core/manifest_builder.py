"""Manifest builder — turns local files into a content-addressed entity.

The manifest id is a fixed point: the manifest is serialized with ``id``
blank, hashed, and the hash becomes the id.  The builder does this in two
phases on frozen models and never re-hashes.

Files under transient build-output prefixes are regenerated by upstream
tooling on every build, so entries for them are never carried forward
from the previous deployment.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from scenecast.core.hasher import ContentId, identify
from scenecast.models.entity import (
    CURRENT_SCHEMA_VERSION,
    ContentFile,
    Entity,
    EntityType,
)
from scenecast.models.envelopes import OCTET_STREAM, PNG, FileData

logger = logging.getLogger(__name__)

DEFAULT_TRANSIENT_PREFIXES: tuple[str, ...] = ("./2dcl", "/2dcl", "2dcl")


class ManifestBuildError(RuntimeError):
    """Raised when a manifest cannot be serialized deterministically."""


def infer_mime_type(path: str) -> str:
    """``image/png`` for PNG files, generic binary for everything else."""
    return PNG if path.endswith(".png") else OCTET_STREAM


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


class ManifestBuilder:
    """Builds deployable manifests plus the payload for every file.

    Parameters
    ----------
    transient_prefixes:
        Path prefixes whose previous content entries are dropped.
    schema_version:
        Version tag written into every manifest.
    clock:
        Returns wall-clock milliseconds.  Injected by tests.
    """

    def __init__(
        self,
        transient_prefixes: Iterable[str] = DEFAULT_TRANSIENT_PREFIXES,
        *,
        schema_version: str = CURRENT_SCHEMA_VERSION,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._transient_prefixes = tuple(transient_prefixes)
        self._schema_version = schema_version
        self._clock = clock or _now_millis

    @property
    def transient_prefixes(self) -> tuple[str, ...]:
        return self._transient_prefixes

    def is_transient(self, path: str) -> bool:
        return path.startswith(self._transient_prefixes)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(
        self,
        previous: Entity | None,
        pointers: list[str],
        local_files: Mapping[str, bytes],
        *,
        kind: EntityType = EntityType.SCENE,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[list[FileData], ContentId]:
        """Build a manifest and stage every part for upload.

        Returns the staged files (local files first, manifest last) and
        the manifest's own content id.
        """
        content: dict[str, ContentFile] = {}
        if previous is not None:
            for entry in previous.content:
                if self.is_transient(entry.file):
                    logger.debug("Dropping transient content entry %s", entry.file)
                    continue
                content[entry.file] = entry

        files_data: list[FileData] = []
        for path in sorted(local_files):
            data = local_files[path]
            cid = identify(data)
            # Replacing keeps the carried entry's position stable
            content[path] = ContentFile(file=path, hash=cid)
            files_data.append(
                FileData(cid=cid, content=data, mime_type=infer_mime_type(path))
            )

        if metadata is None and previous is not None:
            metadata = previous.metadata

        draft = Entity(
            id="",
            version=self._schema_version,
            kind=kind,
            pointers=list(pointers),
            timestamp=self._clock(),
            content=list(content.values()),
            metadata=metadata,
        )

        try:
            manifest_bytes = draft.to_bytes()
        except (TypeError, ValueError) as exc:
            raise ManifestBuildError(f"Cannot serialize manifest: {exc}") from exc

        entity_id = identify(manifest_bytes)
        manifest = draft.model_copy(update={"id": entity_id})

        files_data.append(
            FileData(cid=manifest.id, content=manifest_bytes, mime_type=OCTET_STREAM)
        )

        logger.info(
            "Built %s manifest %s: %d content entries, %d new files, pointers=%s",
            kind.value,
            entity_id,
            len(manifest.content),
            len(local_files),
            manifest.pointers,
        )
        return files_data, entity_id
