"""Scene deployer — drives one deployment from local files to submission.

Typical flow::

    deployer = SceneDeployer(ContentClient(server))
    files, entity_id = await deployer.prepare(["0,0", "0,1"], local_files)
    chain = sign(entity_id)              # done by the caller's wallet
    await deployer.deploy(entity_id, files, chain)

``deploy`` re-reads the manifest out of the staged files, so a bundle
prepared earlier (or elsewhere) is validated the same way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from scenecast.client.content_client import ContentClient
from scenecast.core.auth_chain import encode_auth_chain
from scenecast.core.conflicts import PointerConflictValidator
from scenecast.core.envelope_builder import assemble
from scenecast.core.hasher import ContentId
from scenecast.core.manifest_builder import ManifestBuilder
from scenecast.models.auth import AuthChain
from scenecast.models.entity import Entity, EntityType, ManifestFormatError
from scenecast.models.envelopes import OCTET_STREAM, FileData
from scenecast.models.responses import DeployResponse

logger = logging.getLogger(__name__)


class MissingSceneEntityError(RuntimeError):
    """Raised when the staged files contain no manifest to validate."""


def find_entity(
    files: Iterable[FileData], entity_id: ContentId | None = None
) -> Entity | None:
    """Locate the manifest among staged parts.

    With *entity_id*, only the part filed under that id is considered and a
    malformed one raises ``ManifestFormatError``.  Without it, the first
    generic-binary part that parses as a manifest is returned.
    """
    if entity_id is not None:
        for file_data in files:
            if file_data.cid == entity_id:
                return Entity.from_bytes(file_data.content)
        return None

    for file_data in files:
        if file_data.mime_type != OCTET_STREAM:
            continue
        try:
            return Entity.from_bytes(file_data.content)
        except ManifestFormatError:
            continue
    return None


class SceneDeployer:
    """Builds, validates and submits deployments against one server.

    Parameters
    ----------
    client:
        The content client for the target server.
    builder:
        Manifest builder; a default one is created if omitted.
    validator:
        Pointer conflict validator; defaults to one backed by ``client``.
    """

    def __init__(
        self,
        client: ContentClient,
        *,
        builder: ManifestBuilder | None = None,
        validator: PointerConflictValidator | None = None,
    ) -> None:
        self._client = client
        self._builder = builder or ManifestBuilder()
        self._validator = validator or PointerConflictValidator(
            client.scene_entities_for_pointers
        )

    async def fetch_previous(self, pointers: Sequence[str]) -> Entity | None:
        """The single active entity owning exactly *pointers*, if any."""
        active = await self._client.scene_entities_for_pointers(pointers)
        if len(active) == 1 and set(active[0].pointers) == set(pointers):
            return active[0]
        logger.debug(
            "No previous entity to extend on %s (%d active)", list(pointers), len(active)
        )
        return None

    async def prepare(
        self,
        pointers: Sequence[str],
        local_files: Mapping[str, bytes],
        *,
        kind: EntityType = EntityType.SCENE,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[list[FileData], ContentId]:
        """Build on top of whatever currently owns *pointers*."""
        previous = await self.fetch_previous(pointers)
        return self._builder.build(
            previous, list(pointers), local_files, kind=kind, metadata=metadata
        )

    async def deploy(
        self,
        entity_id: ContentId,
        files: list[FileData],
        auth_chain: AuthChain,
    ) -> DeployResponse:
        """Validate ownership, package and submit.

        Raises
        ------
        MissingSceneEntityError
            If no part of *files* is filed under *entity_id*.
        ManifestFormatError
            If that part is not a well-formed manifest.
        InvalidPointersError
            If the pointers conflict with metadata or remote ownership.
        MissingAuthenticationError
            If *auth_chain* is empty.
        """
        entity = find_entity(files, entity_id)
        if entity is None:
            raise MissingSceneEntityError(
                f"No manifest part {entity_id} among {len(files)} staged file(s)"
            )

        await self._validator.validate(entity.pointers, entity.metadata, kind=entity.kind)

        auth_fields = encode_auth_chain(auth_chain)
        envelope = assemble(entity_id, auth_fields, files)
        return await self._client.deploy(envelope)
