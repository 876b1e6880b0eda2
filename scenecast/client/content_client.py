"""Content server client — the query surface plus the single write call.

Stateless: every method takes what it needs, opens one scoped connection
through its ``ContentServer`` and returns read-only models the caller
owns.  Read calls are idempotent and safe to retry; ``deploy`` is not.
No method retries on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from scenecast.client.server import ContentServer
from scenecast.models.entity import EntityRef, EntityType, SceneFile
from scenecast.models.envelopes import DeploymentEnvelope
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
)

logger = logging.getLogger(__name__)


def parse_snapshot_lines(text: str, pointer_type: Any = str) -> list[EntitySnapshot[Any]]:
    """Parse a newline-delimited snapshot index.

    Only lines whose first non-whitespace character is ``{`` are read.
    Malformed lines are skipped, not fatal: the index is large and
    append-only, and one bad line must not hide the rest.
    """
    model = EntitySnapshot[pointer_type]
    result: list[EntitySnapshot[Any]] = []
    skipped = 0
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.startswith("{"):
            continue
        try:
            result.append(model.model_validate_json(stripped))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed snapshot line(s)", skipped)
    return result


class ContentClient:
    """Talks to one content server.

    Parameters
    ----------
    server:
        Endpoint and timeout configuration for every call made by this
        client.
    """

    def __init__(self, server: ContentServer) -> None:
        self._server = server

    @property
    def server(self) -> ContentServer:
        return self._server

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def active_entities(self, content_id: str) -> list[str]:
        """Ids of the active entities referencing *content_id*."""
        return await self._server.get_model(
            f"/content/contents/{content_id}/active-entities", list[str]
        )

    async def content_file_exists(self, content_id: str) -> bool:
        """HEAD probe.  Any non-success status, including 404, means False.

        Transport failures still raise ``NetworkError``.
        """
        response = await self._server.request(
            "HEAD", f"/content/contents/{content_id}", raise_for_status=False
        )
        return response.is_success

    async def content_files_exist(
        self, content_ids: Sequence[str]
    ) -> list[ContentFileStatus]:
        """Bulk availability check.

        Results are not guaranteed to follow input order; match by ``id``.
        """
        if not content_ids:
            return []
        params = [("cid", cid) for cid in content_ids]
        return await self._server.get_model(
            "/content/available-content/", list[ContentFileStatus], params=params
        )

    async def entity_ids_by_hash(self, hash_id: str) -> list[str]:
        """Entity ids whose deployments referenced *hash_id*."""
        return await self._server.get_model(
            f"/content/contents/{hash_id}/entities", list[str]
        )

    async def download(self, content_id: str, destination: Path | str) -> Path:
        """Fetch raw bytes for *content_id* and write them to *destination*.

        Missing parent directories are created.  Local failures surface as
        ``OSError``; fetch failures as ``NetworkError``/``ServerError``.
        """
        data = await self._server.get_bytes(f"/content/contents/{content_id}")
        target = Path(destination)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Downloaded %s to %s (%d bytes)", content_id, target, len(data))
        return target

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    async def entities_by_urn(self, urn: str) -> list[EntityData]:
        """Active entities with at least one pointer under *urn*."""
        return await self._server.get_model(
            f"/content/entities/active/collections/{urn}", list[EntityData]
        )

    async def scene_entities_for_pointers(
        self, pointers: Sequence[str]
    ) -> list[SceneFile]:
        """Every active entity owning any of *pointers*."""
        return await self._server.post_model(
            "/content/entities/active",
            list[SceneFile],
            json={"pointers": list(pointers)},
        )

    async def entity_information(self, entity: EntityRef) -> EntityInformation:
        """Audit record (signer, timestamps, overwrite history) for *entity*."""
        return await self._server.get_model(
            f"/content/audit/{entity.kind.value}/{entity.id}", EntityInformation
        )

    async def failed_deployments(self) -> list[FailedDeployment]:
        return await self._server.get_model(
            "/content/failed-deployments", list[FailedDeployment]
        )

    async def deploy(self, envelope: DeploymentEnvelope) -> DeployResponse:
        """Submit a deployment.  Not idempotent; never retried here."""
        logger.info(
            "Deploying entity %s to %s (%d parts)",
            envelope.entity_id,
            self._server.base_url,
            len(envelope.files),
        )
        response = await self._server.post_model(
            "/content/entities",
            DeployResponse,
            data=envelope.form_fields(),
            files=envelope.form_files(),
        )
        logger.info(
            "Entity %s accepted at %d", envelope.entity_id, response.creation_timestamp
        )
        return response

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def snapshot(self) -> Snapshot:
        return await self._server.get_model("/content/snapshot", Snapshot)

    async def snapshot_entities(
        self,
        kind: EntityType,
        snapshot: Snapshot,
        pointer_type: Any = str,
    ) -> list[EntitySnapshot[Any]]:
        """Fetch and parse the snapshot index for *kind*.

        ``pointer_type`` selects how pointers are parsed, e.g. ``Parcel``
        for scenes.
        """
        entry = snapshot.entry_for(kind)
        raw = await self._server.get_bytes(f"/content/contents/{entry.hash}")
        entities = parse_snapshot_lines(raw.decode("utf-8", errors="replace"), pointer_type)
        logger.debug("Snapshot %s: %d %s entities", entry.hash, len(entities), kind.value)
        return entities

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    async def challenge(self) -> str:
        """Random text the server uses to recognize itself among peers."""
        result = await self._server.get_model("/content/challenge", Challenge)
        return result.challenge_text

    async def status(self) -> ContentServerStatus:
        return await self._server.get_model("/content/status", ContentServerStatus)
