"""Authentication chain models.

An auth chain is an ordered proof of authorship attached to a deployment.
Each link is a tagged value: the ``type`` tag says how the payload was
produced upstream, while every variant shares the same two data fields
(``payload`` and ``signature``).  Signing itself happens outside this
package; chains arrive pre-built and are only validated, iterated and
serialized here.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter

EPHEMERAL_PAYLOAD_TITLE = "Decentraland Login"


class AuthLinkType(str, Enum):
    """The closed set of link kinds, valued by their wire names."""

    SIGNER = "SIGNER"
    ECDSA_PERSONAL_EPHEMERAL = "ECDSA_EPHEMERAL"
    ECDSA_PERSONAL_SIGNED_ENTITY = "ECDSA_SIGNED_ENTITY"
    ECDSA_EIP_1654_EPHEMERAL = "ECDSA_EIP_1654_EPHEMERAL"
    ECDSA_EIP_1654_SIGNED_ENTITY = "ECDSA_EIP_1654_SIGNED_ENTITY"


class AuthLink(BaseModel):
    """One link of an auth chain."""

    model_config = ConfigDict(frozen=True)

    type: AuthLinkType
    payload: str
    signature: str = ""

    @classmethod
    def signer(cls, address: str) -> AuthLink:
        return cls(type=AuthLinkType.SIGNER, payload=address)

    @classmethod
    def personal_ephemeral(cls, payload: str, signature: str) -> AuthLink:
        return cls(
            type=AuthLinkType.ECDSA_PERSONAL_EPHEMERAL,
            payload=payload,
            signature=signature,
        )

    @classmethod
    def personal_signed_entity(cls, entity_id: str, signature: str) -> AuthLink:
        return cls(
            type=AuthLinkType.ECDSA_PERSONAL_SIGNED_ENTITY,
            payload=entity_id,
            signature=signature,
        )

    @classmethod
    def eip_1654_ephemeral(cls, payload: str, signature: str) -> AuthLink:
        return cls(
            type=AuthLinkType.ECDSA_EIP_1654_EPHEMERAL,
            payload=payload,
            signature=signature,
        )

    @classmethod
    def eip_1654_signed_entity(cls, entity_id: str, signature: str) -> AuthLink:
        return cls(
            type=AuthLinkType.ECDSA_EIP_1654_SIGNED_ENTITY,
            payload=entity_id,
            signature=signature,
        )


_LINKS_ADAPTER = TypeAdapter(list[AuthLink])


def ephemeral_payload(ephemeral_address: str, expiration: datetime) -> str:
    """Format the text a wallet signs to authorize an ephemeral key."""
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    expires = (
        expiration.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
    return (
        f"{EPHEMERAL_PAYLOAD_TITLE}\n"
        f"Ephemeral address: {ephemeral_address}\n"
        f"Expiration: {expires}"
    )


class AuthChain(BaseModel):
    """An ordered sequence of auth links.

    Order is significant: a link's index is part of its wire encoding.
    """

    model_config = ConfigDict(frozen=True)

    links: list[AuthLink] = []

    def __iter__(self) -> Iterator[AuthLink]:  # type: ignore[override]
        return iter(self.links)

    def __len__(self) -> int:
        return len(self.links)

    def __getitem__(self, index: int) -> AuthLink:
        return self.links[index]

    @property
    def signer(self) -> str | None:
        """Address of the first SIGNER link, if present."""
        for link in self.links:
            if link.type == AuthLinkType.SIGNER:
                return link.payload
        return None

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def simple(cls, signer: str, entity_id: str, signature: str) -> AuthChain:
        """A chain where the signer's own key signed the entity id."""
        return cls(
            links=[
                AuthLink.signer(signer),
                AuthLink.personal_signed_entity(entity_id, signature),
            ]
        )

    @classmethod
    def ephemeral(
        cls,
        signer: str,
        ephemeral_address: str,
        expiration: datetime,
        ephemeral_signature: str,
        entity_id: str,
        entity_signature: str,
    ) -> AuthChain:
        """A chain where the signer delegated to a short-lived key."""
        return cls(
            links=[
                AuthLink.signer(signer),
                AuthLink.personal_ephemeral(
                    ephemeral_payload(ephemeral_address, expiration),
                    ephemeral_signature,
                ),
                AuthLink.personal_signed_entity(entity_id, entity_signature),
            ]
        )

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    @classmethod
    def from_json(cls, raw: bytes | str) -> AuthChain:
        """Parse the wire form: a JSON array of ``{type, payload, signature}``."""
        return cls(links=_LINKS_ADAPTER.validate_json(raw))

    @classmethod
    def from_links(cls, links: list[dict[str, Any]]) -> AuthChain:
        return cls(links=_LINKS_ADAPTER.validate_python(links))

    def to_json(self) -> bytes:
        return _LINKS_ADAPTER.dump_json(self.links)
