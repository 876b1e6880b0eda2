"""Pointer ownership checks run before a deployment is submitted.

A deployment may take over pointers only when it claims exactly the set
an existing entity already owns (a redeploy), or when nobody owns any of
them.  Partial overlaps are rejected so one scene never silently clips
another.

The check is advisory: it runs at build time, not atomically with the
server's ``deploy``, and the server has the final say on races.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from scenecast.models.entity import EntityType, SceneFile, declared_pointers

logger = logging.getLogger(__name__)

RemoteLookup = Callable[[list[str]], Awaitable[list[SceneFile]]]


class InvalidPointersError(RuntimeError):
    """Raised when a deployment's pointers conflict with declared or remote ownership."""

    def __init__(self, found: Sequence[str], expected: Sequence[str]) -> None:
        self.found = list(found)
        self.expected = list(expected)
        super().__init__(
            f"Invalid pointers: found {self.found}, expected {self.expected}"
        )


class PointerConflictValidator:
    """Checks a candidate's pointers against its metadata and the server.

    Parameters
    ----------
    remote_lookup:
        Async callable returning every active entity on the given pointers,
        usually ``ContentClient.scene_entities_for_pointers``.
    """

    def __init__(self, remote_lookup: RemoteLookup) -> None:
        self._remote_lookup = remote_lookup

    async def validate(
        self,
        candidate_pointers: Sequence[str],
        candidate_metadata: dict[str, Any] | None,
        *,
        kind: EntityType = EntityType.SCENE,
    ) -> None:
        """Return silently when there is no conflict.

        Raises
        ------
        InvalidPointersError
            If the metadata declares a different pointer set, or the server
            reports more than one owner, or an owner of a different set.
        """
        candidate = list(candidate_pointers)
        candidate_set = set(candidate)

        declared = declared_pointers(kind, candidate_metadata)
        if declared is not None and set(declared) != candidate_set:
            raise InvalidPointersError(found=candidate, expected=declared)

        remote = await self._remote_lookup(candidate)
        if not remote:
            logger.debug("No active entities on %s; first deployment", candidate)
            return

        owners = {entity.id for entity in remote}
        remote_pointers = list(
            dict.fromkeys(p for entity in remote for p in entity.pointers)
        )
        if len(owners) > 1 or set(remote_pointers) != candidate_set:
            logger.warning(
                "Pointer conflict: %d active owner(s) on %s", len(owners), candidate
            )
            raise InvalidPointersError(found=remote_pointers, expected=candidate)

        logger.debug("Redeploy over entity %s on %s", remote[0].id, candidate)
