"""Runtime configuration — env-driven.

Reads from a .env file and SCENECAST_* environment variables.  Library
classes never read this module directly; the CLI turns it into explicit
``ContentServer`` and ``ManifestBuilder`` arguments.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ScenecastConfig(BaseSettings):
    """Configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SCENECAST_CONTENT_SERVER_URL=https://peer.example.org
        export SCENECAST_LOG_LEVEL=DEBUG

    Or via .env file::

        SCENECAST_ENVIRONMENT=production
        SCENECAST_REQUEST_TIMEOUT_SECONDS=60
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SCENECAST_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Content server
    content_server_url: str = "https://peer.decentraland.org"
    request_timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0

    # Manifest building
    schema_version: str = "v3"
    transient_prefixes: list[str] = ["./2dcl", "/2dcl", "2dcl"]

    # Local paths
    download_path: Path = Path("downloads")
    bundle_path: Path = Path(".scenecast/bundle")

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from scenecast.config import config`
config = ScenecastConfig()
