"""Single HTTP exchange against a resource address."""

import logging
import secrets
from typing import Any, Collection

import httpx

from .address import ResourceAddress
from .exceptions import (
    MalformedResponseError,
    NotFoundError,
    TransportError,
    UnexpectedStatusError,
)
from .log import get_logger

JSON_CONTENT_TYPE = "application/json"


class Connection:
    """Wraps one request/response exchange.

    Every exchange is independently authenticated: the ``Authorization``
    header comes from the address's auth context, never from client state.
    The body is read fully before returning.

    Args:
        client: The httpx client used as transport.
        address: Resource to request.
        logger: Logger for request traces.
    """

    def __init__(
        self,
        client: httpx.Client,
        address: ResourceAddress,
        logger: logging.Logger | None = None,
    ):
        self.address = address
        self._client = client
        self._logger = logger or get_logger()

    def headers(self) -> dict[str, str]:
        headers = {"Accept": JSON_CONTENT_TYPE, "Accept-Charset": "utf-8"}
        return self.address.auth.apply(headers)

    def execute(
        self,
        method: str,
        *,
        files: list[tuple[str, tuple[Any, ...]]] | None = None,
        expected: Collection[int] | None = None,
    ) -> httpx.Response:
        """Send the request and validate the status.

        Args:
            method: HTTP method.
            files: Ordered multipart parts in httpx ``files`` format. When
                given, even empty, the body is sent as ``multipart/form-data``.
            expected: Accepted status codes; any 2xx when None.

        Returns:
            The response, body already read.

        Raises:
            TransportError: The request could not be completed.
            NotFoundError: The server answered 404.
            UnexpectedStatusError: Any other status outside ``expected``.
        """
        url = self.address.url
        headers = self.headers()
        content = None
        if files is not None and not files:
            # httpx sends no body at all for an empty files list
            boundary = secrets.token_hex(16)
            headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"
            content = f"--{boundary}--\r\n".encode("ascii")
            files = None
        try:
            response = self._client.request(
                method, url, headers=headers, content=content, files=files
            )
        except httpx.HTTPError as e:
            self._logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e

        self._logger.debug("%s %s -> %d", method, url, response.status_code)

        if expected is None:
            accepted = response.is_success
        else:
            accepted = response.status_code in expected

        if not accepted:
            self._logger.warning(
                "unexpected response code for %s %s: %d",
                method,
                url,
                response.status_code,
            )
            error_class = (
                NotFoundError if response.status_code == 404 else UnexpectedStatusError
            )
            raise error_class(
                response.status_code, response.reason_phrase, response.text
            )

        return response

    def json(self, method: str = "GET", **kwargs: Any) -> Any:
        """Execute and decode the response body as JSON."""
        return self.decode(self.execute(method, **kwargs))

    def decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"response of {response.request.method} {self.address.url} is not JSON"
            ) from e

    def status(self, method: str) -> int:
        """Execute without status validation and return the status code."""
        return self.execute(method, expected=range(100, 600)).status_code
