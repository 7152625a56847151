"""Error taxonomy shared by every layer.

Lower layers raise; the navigation engine and the CLI catch NebtermError at
their boundary and turn it into one user-facing message via format_error().
"""

from typing import Optional

MAX_ERROR_LENGTH = 100


class NebtermError(Exception):
    """Base class for all nebterm errors."""


class ConfigurationError(NebtermError):
    """Credentials or settings could not be resolved."""


class TransportError(NebtermError):
    """Network or HTTP failure while talking to the endpoint."""


class ProtocolError(NebtermError):
    """The XML-RPC response envelope is malformed."""


class RemoteApiError(NebtermError):
    """The remote API reported an explicit failure."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class DocumentError(NebtermError):
    """An embedded XML document could not be parsed."""


class RegistryError(NebtermError):
    """Resource-description documents are invalid or conflicting."""


class LocalDispatchError(NebtermError):
    """A call was rejected locally before reaching the transport."""


class MissingParameter(LocalDispatchError):
    def __init__(self, service: str, verb: str, name: str):
        super().__init__(f"Missing {service} {name} for '{verb}'")
        self.service = service
        self.verb = verb
        self.name = name


class UnknownOperation(LocalDispatchError):
    def __init__(self, service: str, verb: Optional[str] = None):
        if verb is None:
            message = f"Unknown service: {service}"
        else:
            message = f"Unknown {service} method: {verb}"
        super().__init__(message)
        self.service = service
        self.verb = verb


class UnknownResource(LocalDispatchError):
    def __init__(self, resource_id: str):
        super().__init__(f"Unknown resource: {resource_id}")
        self.resource_id = resource_id


def format_error(error: BaseException) -> str:
    """Rewrite an error into a short message suitable for the status line."""
    text = str(error)

    if "401" in text or "Authentication" in text:
        return "Authentication failed. Check ONE_AUTH credentials."
    if "Connection refused" in text:
        return "Connection refused. Check ONE_XMLRPC endpoint."
    if "timeout" in text.lower() or "timed out" in text.lower():
        return "Request timed out. Server may be unreachable."

    if len(text) > MAX_ERROR_LENGTH:
        return f"{text[:MAX_ERROR_LENGTH]}..."
    return text
