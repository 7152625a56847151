"""The remote API's success/data/code envelope.

Every OpenNebula call answers with an array `[success, data, code?]`:
- success false: `data` is an error message
- success true, `data` a string: `data` is an embedded XML document
- success true, `data` numeric: usually the id of an affected object
Anything else is converted to a generic document as-is.
"""

import logging

from nebterm.documents.transcoder import Document, transcode
from nebterm.errors import RemoteApiError
from nebterm.rpc.values import ProtocolValue, ValueKind

logger = logging.getLogger(__name__)


def interpret(value: ProtocolValue) -> Document:
    """Apply the envelope convention to a decoded response value.

    Raises:
        RemoteApiError: If the success flag is false
        DocumentError: If an embedded document is malformed
    """
    if not value.is_array or len(value.value) not in (2, 3):
        return to_document(value)

    flag, data = value.value[0], value.value[1]
    code = value.value[2].value if len(value.value) == 3 else None

    # Only an explicit boolean false is a failure
    success = flag.value if flag.kind == ValueKind.BOOLEAN else True

    if not success:
        message = data.value if data.kind == ValueKind.STRING else "Unknown error"
        raise RemoteApiError(f"OpenNebula API error: {message}", code=code)

    if data.kind == ValueKind.STRING:
        return transcode(data.value)
    if data.kind in (ValueKind.INT, ValueKind.DOUBLE):
        return data.value
    return to_document(data)


def to_document(value: ProtocolValue) -> Document:
    """Convert a value tree directly, without transcoding strings."""
    if value.kind == ValueKind.ARRAY:
        return [to_document(item) for item in value.value]
    if value.kind == ValueKind.STRUCT:
        return {name: to_document(member) for name, member in value.value}
    return value.value
