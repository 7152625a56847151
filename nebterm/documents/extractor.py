"""Dotted-path access over generic documents.

Paths are dot-separated member names, each optionally followed by a single
bracketed index: `TEMPLATE.DISK[0].SIZE`. Lookups never raise; anything
that cannot be reached renders as the MISSING sentinel.
"""

import logging
import re
from typing import Any, Optional

from nebterm.documents.transcoder import Document
from nebterm.errors import DocumentError

logger = logging.getLogger(__name__)

MISSING = "-"

_INDEXED_SEGMENT = re.compile(r"^(?P<key>[^\[\]]*)\[(?P<index>\d+)\]$")


class _NotFound:
    pass


_NOT_FOUND = _NotFound()


def extract(doc: Document, path: str) -> str:
    """Extract the value at `path` from `doc` as a display string.

    Terminal values render as:
    - text verbatim, numbers via str(), booleans as "true"/"false"
    - missing or null as "-"
    - an empty list as "-", a one-element list as its element,
      a longer list as "[n items]"
    - a mapping as "[object]"
    """
    current = _descend(doc, path)
    if current is _NOT_FOUND:
        return MISSING
    return _stringify(current)


def extract_items(doc: Document, path: str) -> list[Any]:
    """Pull the item list a pool response holds at `path`.

    A single item (the transcoder's single-sibling shape) is wrapped in a
    list; a missing or empty pool yields an empty list.

    Raises:
        DocumentError: If the path runs into text instead of an object
    """
    current: Any = doc
    for part in _segments(path):
        if current is None:
            return []
        if not isinstance(current, dict):
            raise DocumentError(f"Path '{path}' not found in response")
        if part not in current:
            logger.debug(f"Path '{path}' has no '{part}' member, treating as empty")
            return []
        current = current[part]

    if isinstance(current, list):
        return list(current)
    if current is None:
        return []
    return [current]


def _segments(path: str) -> list[str]:
    return [part for part in path.split(".") if part] if path else []


def _descend(doc: Any, path: str) -> Any:
    current = doc
    for part in _segments(path):
        key, index = _split_index(part)
        if not isinstance(current, dict) or key not in current:
            return _NOT_FOUND
        current = current[key]

        if index is None:
            continue
        if isinstance(current, list):
            if index >= len(current):
                return _NOT_FOUND
            current = current[index]
        # A lone sibling is addressable as [0]
        elif index != 0 or current is None:
            return _NOT_FOUND
    return current


def _split_index(part: str) -> tuple[str, Optional[int]]:
    match = _INDEXED_SEGMENT.match(part)
    if match is None:
        return part, None
    return match.group("key"), int(match.group("index"))


def _stringify(value: Any) -> str:
    if value is None:
        return MISSING
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        if not value:
            return MISSING
        if len(value) == 1:
            return _stringify(value[0])
        return f"[{len(value)} items]"
    return "[object]"
