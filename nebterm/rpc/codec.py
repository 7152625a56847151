"""XML-RPC request encoder and response decoder.

The remote API speaks plain XML-RPC over HTTP:
- Requests are `methodCall` documents with ordered `params/param/value` nodes
- Responses are `methodResponse` documents holding either a single
  `params/param/value` or a `fault/value/struct`

Decoding is deliberately tolerant: a value without a type element is a
string, and numeric elements with unparsable text decode to zero.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Iterable

from nebterm.errors import ProtocolError, RemoteApiError
from nebterm.rpc.values import INT32_MAX, INT32_MIN, ProtocolValue, ValueKind

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0"?>'


@dataclass(frozen=True)
class RpcResponse:
    """Decoded response: either a success value or a fault value."""

    value: ProtocolValue
    is_fault: bool = False

    @property
    def fault_string(self) -> str:
        member = self.value.member("faultString")
        if member is not None:
            return str(member.value)
        return repr(self.value.to_python())

    @property
    def fault_code(self) -> Any:
        member = self.value.member("faultCode")
        return member.value if member is not None else None

    def unwrap(self) -> ProtocolValue:
        """Return the success value, raising RemoteApiError for a fault."""
        if self.is_fault:
            raise RemoteApiError(
                f"XML-RPC fault: {self.fault_string}", code=self.fault_code
            )
        return self.value


# =============================================================================
# Encoding
# =============================================================================


def encode_call(method: str, params: Iterable[Any]) -> str:
    """Build an XML-RPC `methodCall` document.

    Params may be ProtocolValue instances or plain Python data; they are
    written in the order given. Text content is escaped by the serializer.
    """
    root = ET.Element("methodCall")
    ET.SubElement(root, "methodName").text = method
    params_el = ET.SubElement(root, "params")
    for param in params:
        param_el = ET.SubElement(params_el, "param")
        _write_value(param_el, ProtocolValue.from_python(param))

    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def _write_value(parent: ET.Element, value: ProtocolValue) -> None:
    value_el = ET.SubElement(parent, "value")

    if value.kind == ValueKind.STRING:
        ET.SubElement(value_el, "string").text = value.value
    elif value.kind == ValueKind.INT:
        ET.SubElement(value_el, "int").text = str(value.value)
    elif value.kind == ValueKind.BOOLEAN:
        ET.SubElement(value_el, "boolean").text = "1" if value.value else "0"
    elif value.kind == ValueKind.DOUBLE:
        ET.SubElement(value_el, "double").text = repr(value.value)
    elif value.kind == ValueKind.ARRAY:
        data_el = ET.SubElement(ET.SubElement(value_el, "array"), "data")
        for item in value.value:
            _write_value(data_el, item)
    elif value.kind == ValueKind.STRUCT:
        struct_el = ET.SubElement(value_el, "struct")
        for name, member in value.value:
            member_el = ET.SubElement(struct_el, "member")
            ET.SubElement(member_el, "name").text = name
            _write_value(member_el, member)
    else:
        raise TypeError(f"Cannot encode value kind: {value.kind}")


# =============================================================================
# Decoding
# =============================================================================


def decode_response(text: str) -> RpcResponse:
    """Parse an XML-RPC response document.

    Returns the first value found in the first `fault` or `params` section.

    Raises:
        ProtocolError: If the XML is malformed or neither section holds a value
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ProtocolError(f"XML parsing error: {e}") from e

    for section in root.iter():
        if section.tag not in ("fault", "params"):
            continue
        value_el = section.find(".//value")
        if value_el is None:
            continue
        value = _parse_value(value_el)
        return RpcResponse(value=value, is_fault=section.tag == "fault")

    raise ProtocolError("Invalid XML-RPC response: no fault or params section")


def _parse_value(value_el: ET.Element) -> ProtocolValue:
    if len(value_el) == 0:
        # No type element means string
        return ProtocolValue.string(value_el.text or "")

    type_el = value_el[0]
    tag = type_el.tag
    text = type_el.text or ""

    if tag == "string":
        return ProtocolValue.string(text)
    if tag in ("int", "i4"):
        return ProtocolValue(ValueKind.INT, _parse_int(text))
    if tag == "boolean":
        flag = text.strip()
        return ProtocolValue.boolean(flag == "1" or flag.lower() == "true")
    if tag == "double":
        return ProtocolValue(ValueKind.DOUBLE, _parse_double(text))
    if tag == "array":
        container = type_el.find("data")
        if container is None:
            container = type_el
        return ProtocolValue.array(
            _parse_value(item) for item in container.findall("value")
        )
    if tag == "struct":
        members = []
        for member_el in type_el.findall("member"):
            name = member_el.findtext("name", default="")
            nested = member_el.find("value")
            if nested is None:
                members.append((name, ProtocolValue.string("")))
            else:
                members.append((name, _parse_value(nested)))
        return ProtocolValue.struct(members)

    # Unknown type tags fall back to their text content
    return ProtocolValue.string("".join(type_el.itertext()))


def _parse_int(text: str) -> int:
    try:
        number = int(text.strip())
    except ValueError:
        logger.warning(f"Non-numeric int value {text!r} decoded as 0")
        return 0
    if not INT32_MIN <= number <= INT32_MAX:
        logger.warning(f"Out-of-range int value {text!r} decoded as 0")
        return 0
    return number


def _parse_double(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        logger.warning(f"Non-numeric double value {text!r} decoded as 0.0")
        return 0.0
