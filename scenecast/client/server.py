"""Content server endpoint configuration and request plumbing.

A ``ContentServer`` is an explicit value, not ambient state, so one
process can talk to several servers at once.  Each request opens its own
``httpx.AsyncClient`` scope, which closes on success, HTTP error and
transport failure alike.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from scenecast.client.errors import NetworkError, SerializationError, ServerError

if TYPE_CHECKING:
    from scenecast.config import ScenecastConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _response_text(response: httpx.Response) -> str:
    """Return response text without raising secondary decode errors."""
    try:
        return response.text
    except UnicodeDecodeError:
        return ""


class ContentServer(BaseModel):
    """Where and how to reach one content server.

    Parameters
    ----------
    url:
        Base URL, e.g. ``https://peer.decentraland.org``.  REST paths are
        appended verbatim.
    timeout_seconds:
        Overall per-request timeout.
    connect_timeout_seconds:
        Connection establishment timeout.
    transport:
        Optional httpx transport, for tests or custom networking.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str
    timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_config(
        cls, config: ScenecastConfig, url: str | None = None
    ) -> ContentServer:
        return cls(
            url=url or config.content_server_url,
            timeout_seconds=config.request_timeout_seconds,
            connect_timeout_seconds=config.connect_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(
                self.timeout_seconds, connect=self.connect_timeout_seconds
            ),
            transport=self.transport,
        )

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request and map failures to typed errors.

        The response body is fully read before the client scope closes.

        Raises
        ------
        NetworkError
            If no response was received.
        ServerError
            If ``raise_for_status`` and the status is not 2xx.
        """
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise NetworkError(
                f"HTTP request failed for {method} {url}: {exc}",
                method=method,
                url=url,
            ) from exc

        if raise_for_status and not response.is_success:
            body = _response_text(response)
            logger.debug("%s %s -> %d: %s", method, url, response.status_code, body)
            raise ServerError(
                f"HTTP {response.status_code} for {method} {url}",
                method=method,
                url=url,
                status_code=response.status_code,
                body=body,
            )
        return response

    async def get_bytes(self, path: str, **kwargs: Any) -> bytes:
        response = await self.request("GET", path, **kwargs)
        return response.content

    async def request_model(
        self, method: str, path: str, model: type[T] | Any, **kwargs: Any
    ) -> T:
        """Issue one request and validate the JSON body as *model*.

        *model* may be any type Pydantic can validate, e.g. ``list[str]``.

        Raises
        ------
        SerializationError
            If the body is not JSON or does not match *model*.
        """
        response = await self.request(method, path, **kwargs)
        try:
            return TypeAdapter(model).validate_json(response.content)
        except ValidationError as exc:
            url = str(response.request.url)
            raise SerializationError(
                f"Unexpected response body for {method} {url}: {exc}",
                method=method,
                url=url,
                body=_response_text(response),
            ) from exc

    async def get_model(self, path: str, model: type[T] | Any, **kwargs: Any) -> T:
        return await self.request_model("GET", path, model, **kwargs)

    async def post_model(self, path: str, model: type[T] | Any, **kwargs: Any) -> T:
        return await self.request_model("POST", path, model, **kwargs)
