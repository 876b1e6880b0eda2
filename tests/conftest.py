"""Shared test fixtures for scenecast."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from scenecast.client.content_client import ContentClient
from scenecast.client.server import ContentServer
from scenecast.core.manifest_builder import ManifestBuilder
from scenecast.models.auth import AuthChain
from scenecast.models.entity import ContentFile, Entity, EntityType

SERVER_URL = "http://content.test"

FIXED_TIMESTAMP = 1_700_000_000_000


@pytest.fixture
def server_url() -> str:
    return SERVER_URL


@pytest.fixture
def content_server() -> ContentServer:
    """A content server target for respx-mocked tests."""
    return ContentServer(url=SERVER_URL, timeout_seconds=5.0)


@pytest.fixture
def client(content_server: ContentServer) -> ContentClient:
    return ContentClient(content_server)


@pytest.fixture
def builder() -> ManifestBuilder:
    """A ManifestBuilder with a frozen clock."""
    return ManifestBuilder(clock=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def auth_chain() -> AuthChain:
    return AuthChain.simple("0xsigner", "bafkreientity", "0xsignature")


def _scene_metadata(*parcels: str) -> dict[str, Any]:
    return {
        "display": {"title": "test scene"},
        "scene": {"base": parcels[0], "parcels": list(parcels)},
    }


@pytest.fixture
def make_scene_metadata() -> Callable[..., dict[str, Any]]:
    """Factory fixture: Scene metadata declaring the given parcels."""
    return _scene_metadata


# ---------------------------------------------------------------------------
# Entity factories shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_entity() -> Callable[..., Entity]:
    """Factory fixture: build a Scene Entity with sensible defaults."""

    def _factory(
        pointers: list[str] | None = None,
        content: list[tuple[str, str]] | None = None,
        **overrides: Any,
    ) -> Entity:
        pointers = pointers or ["0,0"]
        defaults: dict[str, Any] = {
            "id": "bafkreiprevious",
            "kind": EntityType.SCENE,
            "pointers": pointers,
            "timestamp": FIXED_TIMESTAMP - 1000,
            "content": [
                ContentFile(file=path, hash=cid)
                for path, cid in (content or [("scene.json", "bafkreiscene")])
            ],
            "metadata": _scene_metadata(*pointers),
        }
        defaults.update(overrides)
        return Entity(**defaults)

    return _factory


@pytest.fixture
def make_scene_file() -> Callable[..., dict[str, Any]]:
    """Factory fixture: the wire form of an active scene entity."""

    def _factory(
        entity_id: str = "bafkreiowner",
        pointers: list[str] | None = None,
        **overrides: Any,
    ) -> dict[str, Any]:
        pointers = pointers or ["0,0"]
        data: dict[str, Any] = {
            "version": "v3",
            "id": entity_id,
            "type": "scene",
            "pointers": pointers,
            "timestamp": FIXED_TIMESTAMP - 5000,
            "content": [{"file": "scene.json", "hash": "bafkreiscene"}],
            "metadata": _scene_metadata(*pointers),
        }
        data.update(overrides)
        return data

    return _factory

