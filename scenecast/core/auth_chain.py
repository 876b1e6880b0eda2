"""Auth chain encoding for multipart deployment bodies.

Every link becomes three form fields keyed by its index::

    authChain[0][type]       = "SIGNER"
    authChain[0][payload]    = "0x..."
    authChain[0][signature]  = ""

All link kinds share the same two data fields, so the server contract
never depends on the variant.
"""

from __future__ import annotations

from scenecast.models.auth import AuthChain, AuthLink


class MissingAuthenticationError(ValueError):
    """Raised when a deployment carries an empty auth chain."""


def _field(index: int, name: str) -> str:
    return f"authChain[{index}][{name}]"


def encode_link(index: int, link: AuthLink) -> list[tuple[str, str]]:
    """Encode one link at position *index*."""
    return [
        (_field(index, "type"), link.type.value),
        (_field(index, "payload"), link.payload),
        (_field(index, "signature"), link.signature),
    ]


def encode_auth_chain(chain: AuthChain) -> list[tuple[str, str]]:
    """Encode a whole chain as ordered ``(field name, value)`` pairs.

    Raises
    ------
    MissingAuthenticationError
        If the chain has no links.
    """
    if len(chain) == 0:
        raise MissingAuthenticationError("Deployment requires a non-empty auth chain")

    fields: list[tuple[str, str]] = []
    for index, link in enumerate(chain):
        fields.extend(encode_link(index, link))
    return fields
