"""Pydantic schemas for resource-description documents.

A resource definition is everything the generic navigation engine needs to
list, drill into and act on one kind of remote object without any
per-resource code: which service verb lists it, where the items live in the
response, which fields identify them, how to show them, which child
resources hang off them and which actions they support.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ColorEntry(BaseModel):
    """One value-to-color pairing inside a named color map."""
    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Display value to match exactly")
    color: tuple[int, int, int] = Field(..., description="RGB triple")


class ColumnSpec(BaseModel):
    """A table column rendered from a path into each item."""
    model_config = ConfigDict(frozen=True)

    header: str
    path: str = Field(..., description="Dotted path into the item, e.g. 'TEMPLATE.MEMORY'")
    width: int = Field(10, ge=1)
    format: Optional[str] = Field(None, description="Formatter name, see formatting.py")
    color_map: Optional[str] = Field(None, description="Named color map for cell values")


class SubResourceLink(BaseModel):
    """A child resource reachable from a selected item of this resource."""
    model_config = ConfigDict(frozen=True)

    resource: str = Field(..., description="Child resource id (not validated at load time)")
    display_name: str = ""
    shortcut: str
    parent_id_field: str = Field(
        ...,
        description="Path read from the parent item to scope the child listing",
    )
    filter_param: str = Field(
        ...,
        description="Request parameter the parent id is sent as",
    )


class ConfirmPolicy(BaseModel):
    """How an action asks for confirmation."""
    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None
    default_yes: bool = False
    destructive: bool = False


class ActionSpec(BaseModel):
    """An operation that can be invoked on the selected item."""
    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str
    shortcut: Optional[str] = None
    verb: str = Field(..., description="Dispatcher verb on the resource's service")
    needs_confirm: bool = False
    confirm: Optional[ConfirmPolicy] = None

    def confirm_policy(self) -> Optional[ConfirmPolicy]:
        """Effective confirmation policy, if the action needs one."""
        if self.confirm is not None:
            return self.confirm
        if self.needs_confirm:
            return ConfirmPolicy(message=self.display_name)
        return None


class ResourceDefinition(BaseModel):
    """Declarative description of one resource type."""
    model_config = ConfigDict(frozen=True)

    display_name: str
    service: str = Field(..., description="Dispatcher service id, e.g. 'vm'")
    verb: str = Field("list", description="Dispatcher verb that lists the pool")
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Base request parameters merged into every fetch",
    )
    result_path: str = Field(
        ...,
        description="Dotted path to the item list, e.g. 'VM_POOL.VM'",
    )
    id_field: str = "ID"
    name_field: str = "NAME"
    is_global: bool = False
    columns: list[ColumnSpec] = Field(default_factory=list)
    sub_resources: list[SubResourceLink] = Field(default_factory=list)
    actions: list[ActionSpec] = Field(default_factory=list)
    detail_verb: Optional[str] = Field(
        None,
        description="Verb returning the full object for describe views",
    )

    def sub_resource(self, resource_id: str) -> Optional[SubResourceLink]:
        for link in self.sub_resources:
            if link.resource == resource_id:
                return link
        return None

    def action(self, key: str) -> Optional[ActionSpec]:
        for action in self.actions:
            if action.key == key:
                return action
        return None


class ResourceDocument(BaseModel):
    """Root of one resource-description YAML file."""

    color_maps: dict[str, list[ColorEntry]] = Field(default_factory=dict)
    resources: dict[str, ResourceDefinition] = Field(default_factory=dict)
