"""Typed errors raised by the content server client."""

from __future__ import annotations


class ContentClientError(RuntimeError):
    """Base error for a failed content server call."""

    def __init__(self, message: str, *, method: str, url: str) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class NetworkError(ContentClientError):
    """The request never produced a response (connection, timeout, protocol)."""


class ServerError(ContentClientError):
    """The server answered with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int,
        body: str = "",
    ) -> None:
        super().__init__(message, method=method, url=url)
        self.status_code = status_code
        self.body = body


class SerializationError(ContentClientError):
    """A successful response body did not decode into the expected shape."""

    def __init__(
        self, message: str, *, method: str, url: str, body: str = ""
    ) -> None:
        super().__init__(message, method=method, url=url)
        self.body = body
