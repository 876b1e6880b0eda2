"""Envelope assembly — packages a deployment for submission.

Pure: no I/O happens here.  Parts are keyed by content id, so two files
with identical bytes collapse into a single uploaded part.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from scenecast.models.envelopes import DeploymentEnvelope, FileData

logger = logging.getLogger(__name__)


def assemble(
    entity_id: str,
    auth_fields: list[tuple[str, str]],
    files: Iterable[FileData],
) -> DeploymentEnvelope:
    """Build the envelope, keeping the first part for each content id."""
    unique: dict[str, FileData] = {}
    for file_data in files:
        if file_data.cid in unique:
            logger.debug("Skipping duplicate part %s", file_data.cid)
            continue
        unique[file_data.cid] = file_data

    return DeploymentEnvelope(
        entity_id=entity_id,
        auth_fields=list(auth_fields),
        files=list(unique.values()),
    )
