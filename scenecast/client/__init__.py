"""HTTP client for content servers.

Modules
-------
server
    ``ContentServer``: explicit endpoint/timeout configuration and the
    request layer that maps httpx failures onto typed errors.
content_client
    ``ContentClient``: the query surface (existence checks, snapshots,
    audit, downloads) and the single ``deploy`` write call.
errors
    ``NetworkError``, ``ServerError`` and ``SerializationError``.
"""

from scenecast.client.content_client import ContentClient
from scenecast.client.errors import (
    ContentClientError,
    NetworkError,
    SerializationError,
    ServerError,
)
from scenecast.client.server import ContentServer

__all__ = [
    "ContentClient",
    "ContentServer",
    "ContentClientError",
    "NetworkError",
    "ServerError",
    "SerializationError",
]
