"""Declarative resource registry.

This module provides:
- Pydantic schemas for resource-description documents
- The bundled YAML definitions (compute, storage, network, system)
- A registry that loads, merges and serves them
- Named column formatters for presentation
"""

from nebterm.resources.formatting import format_bytes, format_value
from nebterm.resources.registry import ResourceRegistry
from nebterm.resources.schemas import (
    ActionSpec,
    ColorEntry,
    ColumnSpec,
    ConfirmPolicy,
    ResourceDefinition,
    ResourceDocument,
    SubResourceLink,
)

__all__ = [
    "ActionSpec",
    "ColorEntry",
    "ColumnSpec",
    "ConfirmPolicy",
    "ResourceDefinition",
    "ResourceDocument",
    "ResourceRegistry",
    "SubResourceLink",
    "format_bytes",
    "format_value",
]
