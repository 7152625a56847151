"""OpenNebula XML-RPC client.

One call is: prepend the session string, encode, send through the
transport, decode, then apply the remote API's envelope convention.
"""

import logging
from typing import Any, Iterable, Optional

from nebterm.client.auth import Credentials
from nebterm.client.envelope import interpret
from nebterm.client.transport import HttpTransport, Transport
from nebterm.config import request_timeout
from nebterm.documents.transcoder import Document
from nebterm.rpc.codec import decode_response, encode_call
from nebterm.rpc.values import ProtocolValue

logger = logging.getLogger(__name__)


class OneClient:
    """Authenticated XML-RPC client for a single endpoint."""

    def __init__(
        self,
        credentials: Credentials,
        transport: Optional[Transport] = None,
    ):
        self.credentials = credentials
        self.transport = transport or HttpTransport(timeout=request_timeout())

    @property
    def endpoint(self) -> str:
        return self.credentials.endpoint

    @property
    def username(self) -> str:
        return self.credentials.username

    async def call(self, method: str, params: Iterable[Any] = ()) -> Document:
        """Invoke `method` and return the interpreted response document.

        Raises:
            TransportError: Network or HTTP failure
            ProtocolError: Malformed XML-RPC response
            RemoteApiError: Fault or explicit failure from the remote API
        """
        full_params = [ProtocolValue.string(self.credentials.auth_string())]
        full_params.extend(ProtocolValue.from_python(p) for p in params)

        request = encode_call(method, full_params)
        logger.debug(f"XML-RPC call: {method} to {self.endpoint}")

        body = await self.transport.send(self.endpoint, request)
        response = decode_response(body)
        return interpret(response.unwrap())

    async def close(self) -> None:
        await self.transport.close()
