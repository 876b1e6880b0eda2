"""Deployment transport envelope models.

A deployment is submitted as one multipart body: an ``entityId`` text
part, the encoded auth chain fields, and one binary part per file named
by the file's own content id.  Each envelope is a frozen Pydantic model;
assembling it performs no I/O.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

OCTET_STREAM = "application/octet-stream"
PNG = "image/png"

# httpx multipart file tuple: (filename, content, content type)
FilePart = tuple[str, tuple[str, bytes, str]]


class FileData(BaseModel):
    """One part to upload, scoped to a single deployment attempt."""

    model_config = ConfigDict(frozen=True)

    cid: str  # ContentId of content
    content: bytes
    mime_type: str = OCTET_STREAM


class DeploymentEnvelope(BaseModel):
    """Everything the server needs to accept one deployment.

    ``files`` holds at most one part per content id; identical content
    uploads once.
    """

    model_config = ConfigDict(frozen=True)

    entity_id: str
    auth_fields: list[tuple[str, str]]
    files: list[FileData]

    def form_fields(self) -> dict[str, str]:
        """Text parts, in submission order."""
        fields = {"entityId": self.entity_id}
        fields.update(self.auth_fields)
        return fields

    def form_files(self) -> list[FilePart]:
        """Binary parts, each named and filed under its content id."""
        return [(f.cid, (f.cid, f.content, f.mime_type)) for f in self.files]

    @property
    def part_names(self) -> list[str]:
        return [*self.form_fields(), *(f.cid for f in self.files)]
