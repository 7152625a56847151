"""Transcoder for the XML documents embedded in XML-RPC string payloads.

The remote system returns its native objects (VM, HOST_POOL, ...) as escaped
XML inside the `data` member of a response. This module turns such a payload
into a generic document tree made of plain Python values:

- str   an element holding only character data (trimmed)
- None  an element with no children and no text (`<DISK/>`)
- dict  an element with child elements, keyed by child tag
- list  repeated sibling tags, in document order

A field is single-valued until a second sibling with the same tag shows up,
at which point it becomes a list. Readers must tolerate both shapes; the
path extractor does.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Union

from nebterm.errors import DocumentError

logger = logging.getLogger(__name__)

Document = Union[str, int, float, bool, None, list, dict]


def transcode(text: str) -> Document:
    """Turn an embedded XML payload into a generic document.

    The root element becomes the single key of the returned mapping, so
    `<VM><ID>7</ID></VM>` yields `{"VM": {"ID": "7"}}`. Payloads that are not
    markup at all (e.g. a bare version string) are returned as text.

    Raises:
        DocumentError: If the payload looks like XML but cannot be parsed
    """
    stripped = text.strip()
    if not stripped:
        return {}
    if not stripped.startswith("<"):
        return stripped

    try:
        root = ET.fromstring(stripped)
    except ET.ParseError as e:
        raise DocumentError(f"XML parsing error: {e}") from e

    return {_local_name(root.tag): _convert(root)}


def _convert(element: ET.Element) -> Document:
    if len(element) == 0:
        text = (element.text or "").strip()
        return text if text else None

    result: dict[str, Any] = {}
    for child in element:
        tag = _local_name(child.tag)
        value = _convert(child)
        if tag not in result:
            result[tag] = value
        elif isinstance(result[tag], list):
            result[tag].append(value)
        else:
            result[tag] = [result[tag], value]
    return result


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]
