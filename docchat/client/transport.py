"""HTTP transport between the session controller and the backend.

The controller only depends on the ``Transport`` protocol. ``HttpxTransport``
is the production implementation built on ``httpx.AsyncClient``.
"""

import json
import logging
from typing import Any, Protocol

import httpx

from docchat.client.codec import FILES_FIELD
from docchat.client.errors import TransportError
from docchat.models import EncodedRequest

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can deliver an encoded request and return parsed JSON."""

    async def send(self, request: EncodedRequest) -> Any: ...


def http_error_message(status_code: int, body: str | bytes | None) -> str:
    """Build the error text for a non-2xx response.

    The server's ``message`` field is appended when the body is a JSON
    object carrying one. An unparseable body falls back to the status line.
    """
    message = f"HTTP error, status: {status_code}"
    if not body:
        return message
    try:
        data = json.loads(body)
    except ValueError as e:
        logger.warning(f"Error parsing error response: {e}")
        return message
    if isinstance(data, dict) and data.get("message"):
        message += f"\n{data['message']}"
    return message


class HttpxTransport:
    """Transport that POSTs JSON or multipart forms with httpx.

    A fresh AsyncClient is opened per request, so the transport needs no
    lifecycle management by the page that owns it.

    Args:
        base_url: Backend base URL; normalized once here.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, e.g. ASGITransport in tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def send(self, request: EncodedRequest) -> Any:
        """POST the request and return the decoded JSON body.

        Raises:
            TransportError: On network failure, timeout, an unusable base
                URL, non-2xx status, or a success response that is not JSON.
        """
        url = self.url_for(request.path)
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            try:
                response = await self._post(client, url, request)
            except httpx.TimeoutException as e:
                raise TransportError(
                    f"Request timed out after {self._timeout:g}s"
                ) from e
            except httpx.RequestError as e:
                raise TransportError(f"Connection failed: {e}") from e
            except httpx.InvalidURL as e:
                raise TransportError(f"Invalid API URL: {e}") from e

        if not response.is_success:
            raise TransportError(
                http_error_message(response.status_code, response.content),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON in response from {request.path}",
                status_code=response.status_code,
            ) from e

    async def _post(
        self, client: httpx.AsyncClient, url: str, request: EncodedRequest
    ) -> httpx.Response:
        if request.is_multipart:
            files = [
                (FILES_FIELD, (f.filename, f.content, f.content_type))
                for f in request.files
            ]
            return await client.post(url, data=request.form_fields, files=files)
        return await client.post(
            url,
            content=request.json_body,
            headers={"Content-Type": "application/json"},
        )
