"""Resource registry - loads and serves resource definitions from YAML files.

Every `*.yaml` file in the definitions directories is a resource-description
document with `color_maps` and `resources` mappings. Documents are merged in
directory order, then file-name order. Loading happens at most once, even
when first accessed from several threads; afterwards the registry is
read-only and can be shared freely.
"""

import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

import yaml
from pydantic import ValidationError

from nebterm.errors import RegistryError, UnknownResource
from nebterm.resources.schemas import (
    ColorEntry,
    ResourceDefinition,
    ResourceDocument,
    SubResourceLink,
)

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"


class ResourceRegistry:
    """Registry of resource definitions and named color maps.

    Duplicate resource ids across documents are resolved last-wins with a
    warning; pass strict=True to reject them instead.
    """

    def __init__(
        self,
        definitions_dirs: Optional[Iterable[Path]] = None,
        strict: bool = False,
    ):
        if definitions_dirs is None:
            definitions_dirs = [DEFINITIONS_DIR]
        self.definitions_dirs = [Path(d) for d in definitions_dirs]
        self.strict = strict
        self._resources: dict[str, ResourceDefinition] = {}
        self._color_maps: dict[str, list[ColorEntry]] = {}
        self._loaded = False
        self._lock = threading.Lock()

    def load(self) -> None:
        """Load all resource-description documents.

        Raises:
            RegistryError: If a document is malformed, or a resource id is
                defined twice in strict mode
        """
        if self._loaded:
            return

        with self._lock:
            if self._loaded:
                return

            resources: dict[str, ResourceDefinition] = {}
            color_maps: dict[str, list[ColorEntry]] = {}

            for directory in self.definitions_dirs:
                if not directory.exists():
                    logger.warning(f"Definitions directory not found: {directory}")
                    continue
                for yaml_file in sorted(directory.glob("*.yaml")):
                    document = self._load_document(yaml_file)
                    self._merge(document, yaml_file, resources, color_maps)

            self._resources = resources
            self._color_maps = color_maps
            self._loaded = True

        logger.info(
            f"Loaded {len(self._resources)} resources, "
            f"{len(self._color_maps)} color maps"
        )

    def _load_document(self, path: Path) -> ResourceDocument:
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            document = ResourceDocument.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise RegistryError(f"Failed to load {path}: {e}") from e
        logger.debug(
            f"Loaded {path.name}: {len(document.resources)} resources, "
            f"{len(document.color_maps)} color maps"
        )
        return document

    def _merge(
        self,
        document: ResourceDocument,
        source: Path,
        resources: dict[str, ResourceDefinition],
        color_maps: dict[str, list[ColorEntry]],
    ) -> None:
        for key, definition in document.resources.items():
            if key in resources:
                if self.strict:
                    raise RegistryError(
                        f"Duplicate resource '{key}' in {source}"
                    )
                logger.warning(f"Resource '{key}' redefined by {source}")
            resources[key] = definition
        color_maps.update(document.color_maps)

    # Lookup
    def get(self, resource_id: str) -> Optional[ResourceDefinition]:
        """Get a resource definition by id."""
        self.load()
        return self._resources.get(resource_id)

    def get_validated(self, resource_id: str) -> ResourceDefinition:
        """Get a resource definition by id, raising if not found."""
        definition = self.get(resource_id)
        if definition is None:
            raise UnknownResource(resource_id)
        return definition

    def all_keys(self) -> list[str]:
        """All resource ids, sorted (used for command suggestions)."""
        self.load()
        return sorted(self._resources.keys())

    def count(self) -> int:
        self.load()
        return len(self._resources)

    def sub_resource_link(
        self, parent_id: str, child_id: str
    ) -> Optional[SubResourceLink]:
        """The link from `parent_id` to `child_id`, if the parent declares one."""
        parent = self.get(parent_id)
        if parent is None:
            return None
        return parent.sub_resource(child_id)

    # Colors
    def color_map(self, name: str) -> Optional[list[ColorEntry]]:
        self.load()
        return self._color_maps.get(name)

    def color_for(self, map_name: str, value: str) -> Optional[tuple[int, int, int]]:
        """Color for a display value according to a named color map."""
        entries = self.color_map(map_name)
        if not entries:
            return None
        for entry in entries:
            if entry.value == value:
                return entry.color
        return None
