"""scenecast: publish content-addressed scenes to content servers.

  - CIDv1 content addressing for files and self-hashed manifests
  - Pointer ownership checks before every deployment
  - Auth chain encoding and multipart deployment envelopes
  - Async content server client (httpx) for queries, snapshots and downloads
"""

__version__ = "0.1.0"
__description__ = "Deploy and query content-addressed scene entities"

from scenecast.client.content_client import ContentClient
from scenecast.client.server import ContentServer
from scenecast.core.deployer import SceneDeployer
from scenecast.core.hasher import identify
from scenecast.core.manifest_builder import ManifestBuilder

__all__ = [
    "ContentClient",
    "ContentServer",
    "ManifestBuilder",
    "SceneDeployer",
    "identify",
    "__version__",
]
