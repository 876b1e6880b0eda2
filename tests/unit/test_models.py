"""Tests for Pydantic data models — validation, immutability, wire names."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from scenecast.models.auth import AuthChain, AuthLink, AuthLinkType, ephemeral_payload
from scenecast.models.entity import (
    ContentFile,
    Entity,
    EntityRef,
    EntityType,
    ManifestFormatError,
    Parcel,
    SceneFile,
)
from scenecast.models.responses import (
    ContentFileStatus,
    EntityInformation,
    MissingSnapshotEntryError,
    Snapshot,
)


class TestEntityType:
    def test_values(self):
        assert EntityType.PROFILE == "profile"
        assert EntityType.SCENE == "scene"
        assert EntityType.WEARABLE == "wearable"
        assert EntityType.EMOTE == "emote"

    def test_parses_from_wire_name(self):
        assert EntityType("wearable") is EntityType.WEARABLE


class TestEntityRef:
    def test_constructors(self):
        assert EntityRef.scene("id").kind == EntityType.SCENE
        assert EntityRef.profile("id").kind == EntityType.PROFILE
        assert EntityRef.wearable("id").kind == EntityType.WEARABLE
        assert EntityRef.emote("id").kind == EntityType.EMOTE

    def test_str(self):
        assert str(EntityRef.scene("abc")) == "scene/abc"


class TestParcel:
    def test_parse_and_render(self):
        parcel = Parcel.parse("-3, 12")
        assert (parcel.x, parcel.y) == (-3, 12)
        assert str(parcel) == "-3,12"

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            Parcel.parse("0,0,0")
        with pytest.raises(ValidationError):
            Parcel.parse("a,b")


class TestEntity:
    def test_wire_names(self, make_entity):
        entity = make_entity()
        data = entity.model_dump(mode="json", by_alias=True)
        assert data["type"] == "scene"
        assert data["content"] == [{"file": "scene.json", "hash": "bafkreiscene"}]
        assert "kind" not in data

    def test_frozen(self, make_entity):
        entity = make_entity()
        with pytest.raises(ValidationError):
            entity.id = "other"

    def test_round_trip(self, make_entity):
        entity = make_entity(pointers=["0,0", "0,1"])
        assert Entity.from_bytes(entity.to_bytes()) == entity

    def test_to_bytes_is_canonical(self, make_entity):
        raw = make_entity().to_bytes()
        assert b" " not in raw.replace(b"test scene", b"")
        assert raw.startswith(b'{"content":')

    def test_strict_parsing_rejects_unknown_keys(self, make_entity):
        data = make_entity().model_dump(mode="json", by_alias=True)
        data["surprise"] = True
        with pytest.raises(ValidationError):
            Entity.model_validate(data)

    def test_from_bytes_rejects_malformed(self):
        with pytest.raises(ManifestFormatError):
            Entity.from_bytes(b"not json at all")
        with pytest.raises(ManifestFormatError):
            Entity.from_bytes(b'{"type": "scene"}')

    def test_duplicate_paths_rejected(self):
        with pytest.raises(ValidationError, match="duplicate content path"):
            Entity(
                kind=EntityType.SCENE,
                pointers=["0,0"],
                timestamp=1,
                content=[
                    ContentFile(file="a.png", hash="x"),
                    ContentFile(file="a.png", hash="y"),
                ],
            )

    def test_scene_parcels_from_metadata(self, make_entity):
        entity = make_entity(pointers=["0,0", "1,0"])
        assert entity.scene_parcels() == ["0,0", "1,0"]

    def test_scene_parcels_absent_for_other_kinds(self, make_entity):
        entity = make_entity(kind=EntityType.WEARABLE)
        assert entity.scene_parcels() is None

    def test_scene_parcels_absent_without_scene_block(self, make_entity):
        assert make_entity(metadata={"display": {}}).scene_parcels() is None
        assert make_entity(metadata=None).scene_parcels() is None

    def test_malformed_scene_block(self, make_entity):
        entity = make_entity(metadata={"scene": {"parcels": ["nope"]}})
        with pytest.raises(ManifestFormatError):
            entity.scene_parcels()

    def test_content_hash(self, make_entity):
        entity = make_entity(content=[("a.png", "bafkreia")])
        assert entity.content_hash("a.png") == "bafkreia"
        assert entity.content_hash("missing") is None


class TestSceneFile:
    def test_ignores_unknown_server_keys(self, make_scene_file):
        doc = make_scene_file(extraServerField=1)
        scene = SceneFile.model_validate(doc)
        assert scene.id == "bafkreiowner"
        assert scene.kind == EntityType.SCENE


class TestAuthChain:
    def test_link_kinds_use_wire_names(self):
        assert AuthLinkType.SIGNER.value == "SIGNER"
        assert AuthLinkType.ECDSA_PERSONAL_EPHEMERAL.value == "ECDSA_EPHEMERAL"
        assert AuthLinkType.ECDSA_PERSONAL_SIGNED_ENTITY.value == "ECDSA_SIGNED_ENTITY"
        assert AuthLinkType.ECDSA_EIP_1654_EPHEMERAL.value == "ECDSA_EIP_1654_EPHEMERAL"
        assert (
            AuthLinkType.ECDSA_EIP_1654_SIGNED_ENTITY.value
            == "ECDSA_EIP_1654_SIGNED_ENTITY"
        )

    def test_simple_chain(self):
        chain = AuthChain.simple("0xabc", "bafkreientity", "0xsig")
        assert len(chain) == 2
        assert chain[0] == AuthLink.signer("0xabc")
        assert chain[1].type == AuthLinkType.ECDSA_PERSONAL_SIGNED_ENTITY
        assert chain[1].payload == "bafkreientity"
        assert chain.signer == "0xabc"

    def test_ephemeral_chain(self):
        expiration = datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        chain = AuthChain.ephemeral(
            "0xabc", "0xeph", expiration, "0xephsig", "bafkreientity", "0xentsig"
        )
        assert [link.type for link in chain] == [
            AuthLinkType.SIGNER,
            AuthLinkType.ECDSA_PERSONAL_EPHEMERAL,
            AuthLinkType.ECDSA_PERSONAL_SIGNED_ENTITY,
        ]
        assert chain[1].payload == ephemeral_payload("0xeph", expiration)

    def test_ephemeral_payload_text(self):
        expiration = datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert ephemeral_payload("0xeph", expiration) == (
            "Decentraland Login\n"
            "Ephemeral address: 0xeph\n"
            "Expiration: 2030-01-02T03:04:05.000Z"
        )

    def test_json_round_trip(self):
        chain = AuthChain.simple("0xabc", "bafkreientity", "0xsig")
        assert AuthChain.from_json(chain.to_json()) == chain

    def test_from_json_rejects_unknown_kind(self):
        with pytest.raises(ValidationError):
            AuthChain.from_json('[{"type": "RSA", "payload": "x", "signature": "y"}]')


class TestResponses:
    def test_content_file_status_reads_cid(self):
        status = ContentFileStatus.model_validate({"cid": "a-cid", "available": True})
        assert status.id == "a-cid"
        assert status == ContentFileStatus(id="a-cid", available=True)

    def test_entity_information_signer(self):
        info = EntityInformation.model_validate(
            {
                "version": "v3",
                "localTimestamp": 10,
                "authChain": [
                    {"type": "SIGNER", "payload": "0xowner", "signature": ""},
                    {"type": "ECDSA_SIGNED_ENTITY", "payload": "id", "signature": "s"},
                ],
            }
        )
        assert info.signer == "0xowner"
        assert info.overwritten_by is None

    def test_snapshot_entry_for_missing_kind(self):
        snapshot = Snapshot.model_validate(
            {"entities": {"scene": {"hash": "bafyscene"}}}
        )
        assert snapshot.entry_for(EntityType.SCENE).hash == "bafyscene"
        with pytest.raises(MissingSnapshotEntryError):
            snapshot.entry_for(EntityType.EMOTE)
