"""HTTP transport for XML-RPC requests."""

import logging
from typing import Optional, Protocol, runtime_checkable

import httpx

from nebterm import __version__
from nebterm.config import DEFAULT_TIMEOUT
from nebterm.errors import TransportError

logger = logging.getLogger(__name__)

MAX_BODY_IN_ERROR = 500


@runtime_checkable
class Transport(Protocol):
    """Sends an encoded request document and returns the response text."""

    async def send(self, endpoint: str, body: str) -> str: ...

    async def close(self) -> None: ...


class HttpTransport:
    """POSTs XML-RPC documents with httpx.

    Any network failure or non-2xx status is raised as TransportError with
    the response body truncated.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(
            headers={
                "Content-Type": "text/xml",
                "User-Agent": f"nebterm/{__version__}",
            },
            timeout=timeout,
        )

    async def send(self, endpoint: str, body: str) -> str:
        try:
            response = await self._client.post(
                endpoint,
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/xml"},
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request to {endpoint} timed out: {e}")
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error talking to {endpoint}: {e}")
            raise TransportError(f"Failed to send XML-RPC request: {e}") from e

        if not response.is_success:
            error_body = response.text[:MAX_BODY_IN_ERROR]
            logger.error(f"HTTP error: {response.status_code} - {error_body}")
            raise TransportError(
                f"HTTP request failed: {response.status_code} - {error_body}"
            )

        return response.text

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
