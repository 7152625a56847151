"""Navigation engine - the observable browsing state over registry resources.

The engine holds the current resource, its fetched items, the filtered view
and selection, the drill-down stack, pagination and any pending action.
Hosts (the CLI, or an interactive front end) call its operations and then
read its attributes to render.

Every remote failure is caught here and turned into `error_message` via
format_error(); operations never raise NebtermError to the host.
"""

import asyncio
import logging
from typing import Any, Optional

from nebterm.dispatch.dispatcher import ServiceDispatcher
from nebterm.documents.extractor import MISSING, extract
from nebterm.errors import NebtermError, UnknownResource, format_error
from nebterm.navigation.fetcher import fetch_page
from nebterm.navigation.schemas import (
    FetchState,
    NavigationFrame,
    PaginationCursor,
    PendingAction,
)
from nebterm.resources.registry import ResourceRegistry
from nebterm.resources.schemas import ActionSpec, ResourceDefinition

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "one-vms"
READONLY_WARNING = "Read-only mode: actions are disabled"


class NavigationEngine:
    """Fetch, hierarchy, filtering and pagination for one browsing session."""

    def __init__(
        self,
        registry: ResourceRegistry,
        dispatcher: ServiceDispatcher,
        initial_resource: str = DEFAULT_RESOURCE,
        readonly: bool = False,
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        self.readonly = readonly

        self.resource_id = initial_resource
        self.items: list[Any] = []
        self.visible_items: list[Any] = []
        self.selected = 0
        self.filter_text = ""
        self.frames: list[NavigationFrame] = []
        self.cursor = PaginationCursor()
        self.state = FetchState.IDLE
        self.error_message: Optional[str] = None
        self.warning_message: Optional[str] = None
        self.pending_action: Optional[PendingAction] = None

        self._lock = asyncio.Lock()

    # ==========================================================================
    # Current resource
    # ==========================================================================

    @property
    def definition(self) -> Optional[ResourceDefinition]:
        return self.registry.get(self.resource_id)

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def parent(self) -> Optional[NavigationFrame]:
        return self.frames[-1] if self.frames else None

    def hierarchy_filter(self) -> dict[str, Any]:
        """Request filter scoping the current resource to its parent item.

        Empty at top level, and also when the parent item has no value at
        the linking field, in which case the listing is unfiltered.
        """
        parent = self.parent
        if parent is None:
            return {}
        link = self.registry.sub_resource_link(parent.resource_id, self.resource_id)
        if link is None:
            return {}
        parent_id = extract(parent.item, link.parent_id_field)
        if parent_id == MISSING:
            logger.debug(
                f"Parent item has no {link.parent_id_field}, "
                f"fetching {self.resource_id} unfiltered"
            )
            return {}
        return {link.filter_param: parent_id}

    # ==========================================================================
    # Fetching
    # ==========================================================================

    async def fetch_page(self, token: Optional[str] = None) -> bool:
        """Fetch one page of the current resource. Returns True on success."""
        async with self._lock:
            return await self._fetch(token)

    async def _fetch(self, token: Optional[str]) -> bool:
        self.state = FetchState.LOADING
        self.error_message = None

        try:
            if self.definition is None:
                raise UnknownResource(self.resource_id)
            page = await fetch_page(
                self.registry,
                self.dispatcher,
                self.resource_id,
                self.hierarchy_filter(),
                token,
            )
        except NebtermError as e:
            logger.error(f"Fetching {self.resource_id} failed: {e}")
            self._clear_failed(format_error(e))
            return False

        previous = self.selected
        self.items = page.items
        self.cursor.next_token = page.next_token
        self.cursor.has_more = page.next_token is not None
        self.apply_filter()
        self.selected = previous if previous < len(self.visible_items) else 0
        self.state = FetchState.LOADED
        return True

    def _clear_failed(self, message: str) -> None:
        self.error_message = message
        self.items = []
        self.visible_items = []
        self.selected = 0
        self.cursor.reset()
        self.state = FetchState.ERRORED

    async def refresh(self) -> bool:
        token = self.cursor.token_stack[-1] if self.cursor.token_stack else None
        return await self.fetch_page(token)

    async def next_page(self) -> bool:
        if not self.cursor.has_more:
            return False
        token = self.cursor.next_token
        self.cursor.token_stack.append(token)
        self.cursor.page_number += 1
        return await self.fetch_page(token)

    async def prev_page(self) -> bool:
        if self.cursor.page_number <= 1:
            return False
        self.cursor.token_stack.pop()
        token = self.cursor.token_stack[-1] if self.cursor.token_stack else None
        self.cursor.page_number -= 1
        return await self.fetch_page(token)

    # ==========================================================================
    # Hierarchy
    # ==========================================================================

    def _reset_view(self) -> None:
        self.selected = 0
        self.filter_text = ""
        self.cursor.reset()

    def _label(self, item: Any, definition: ResourceDefinition) -> str:
        name = extract(item, definition.name_field)
        if name != MISSING and name:
            return name
        return extract(item, definition.id_field)

    async def drill_down(self, child_id: str) -> bool:
        """Open a child resource scoped to the selected item."""
        definition = self.definition
        item = self.selected_item()
        if definition is None or item is None:
            return False

        if definition.sub_resource(child_id) is None:
            self.error_message = f"{child_id} is not a sub-resource of {self.resource_id}"
            return False

        self.frames.append(
            NavigationFrame(
                resource_id=self.resource_id,
                item=item,
                label=self._label(item, definition),
            )
        )
        self.resource_id = child_id
        self._reset_view()
        await self.fetch_page(None)
        return True

    async def drill_up(self) -> bool:
        if not self.frames:
            return False
        frame = self.frames.pop()
        self.resource_id = frame.resource_id
        self._reset_view()
        await self.fetch_page(None)
        return True

    async def jump_to(self, resource_id: str) -> bool:
        """Switch to a top-level resource, dropping the whole hierarchy."""
        if self.registry.get(resource_id) is None:
            self.error_message = str(UnknownResource(resource_id))
            return False
        self.frames.clear()
        self.resource_id = resource_id
        self._reset_view()
        await self.fetch_page(None)
        return True

    async def open(self, resource_id: str) -> bool:
        """Drill down when `resource_id` is a child of the current resource, else jump."""
        definition = self.definition
        if (
            definition is not None
            and definition.sub_resource(resource_id) is not None
            and self.selected_item() is not None
        ):
            return await self.drill_down(resource_id)
        return await self.jump_to(resource_id)

    def breadcrumb(self) -> list[str]:
        path = [f"{frame.resource_id}:{frame.label}" for frame in self.frames]
        path.append(self.resource_id)
        return path

    # ==========================================================================
    # Filtering and selection
    # ==========================================================================

    def apply_filter(self) -> None:
        """Recompute the visible view and clamp the selection into it."""
        needle = self.filter_text.lower()
        definition = self.definition

        if not needle:
            self.visible_items = list(self.items)
        elif definition is None:
            self.visible_items = [i for i in self.items if needle in str(i).lower()]
        else:
            self.visible_items = [
                item for item in self.items
                if needle in extract(item, definition.name_field).lower()
                or needle in extract(item, definition.id_field).lower()
            ]

        if self.selected >= len(self.visible_items):
            self.selected = max(len(self.visible_items) - 1, 0)

    def set_filter(self, text: str) -> None:
        self.filter_text = text
        self.apply_filter()

    def clear_filter(self) -> None:
        self.set_filter("")

    def selected_item(self) -> Optional[Any]:
        if 0 <= self.selected < len(self.visible_items):
            return self.visible_items[self.selected]
        return None

    def select_next(self) -> None:
        if self.visible_items:
            self.selected = min(self.selected + 1, len(self.visible_items) - 1)

    def select_previous(self) -> None:
        self.selected = max(self.selected - 1, 0)

    def select_first(self) -> None:
        self.selected = 0

    def select_last(self) -> None:
        if self.visible_items:
            self.selected = len(self.visible_items) - 1

    def page_down(self, page_size: int) -> None:
        if self.visible_items:
            self.selected = min(self.selected + page_size, len(self.visible_items) - 1)

    def page_up(self, page_size: int) -> None:
        self.selected = max(self.selected - page_size, 0)

    async def describe_selected(self) -> Optional[Any]:
        """Full document for the selected item.

        Uses the resource's detail verb when it declares one, otherwise the
        item as listed.
        """
        definition = self.definition
        item = self.selected_item()
        if definition is None or item is None:
            return None
        if not definition.detail_verb:
            return item

        subject_id = extract(item, definition.id_field)
        try:
            async with self._lock:
                return await self.dispatcher.invoke(
                    definition.service, definition.detail_verb, {"id": subject_id}
                )
        except NebtermError as e:
            logger.error(f"Describe {self.resource_id}/{subject_id} failed: {e}")
            self.error_message = format_error(e)
            return None

    # ==========================================================================
    # Actions
    # ==========================================================================

    async def trigger_action(self, action_key: str) -> Optional[PendingAction]:
        """Start an action on the selected item.

        Returns the pending action when the action must be confirmed first;
        actions without a confirmation policy run immediately.
        """
        definition = self.definition
        item = self.selected_item()
        if definition is None or item is None:
            return None

        action = definition.action(action_key)
        if action is None:
            self.error_message = f"Unknown action: {action_key}"
            return None

        if self.readonly and action.verb != "get":
            logger.info(f"Blocked {action.key} on {self.resource_id} in read-only mode")
            self.warning_message = READONLY_WARNING
            return None

        subject_id = extract(item, definition.id_field)
        pending = self._pending_action(definition, action, item, subject_id)
        if pending is None:
            await self._execute(definition.service, action.verb, subject_id)
            return None

        self.pending_action = pending
        return pending

    def _pending_action(
        self,
        definition: ResourceDefinition,
        action: ActionSpec,
        item: Any,
        subject_id: str,
    ) -> Optional[PendingAction]:
        policy = action.confirm_policy()
        if policy is None:
            return None

        name = extract(item, definition.name_field)
        if name == MISSING or not name:
            name = subject_id
        message = policy.message or action.display_name

        return PendingAction(
            service=definition.service,
            verb=action.verb,
            subject_id=subject_id,
            message=f"{message} '{name}'?",
            destructive=policy.destructive,
            default_yes=policy.default_yes,
        )

    def toggle_confirmation(self) -> None:
        if self.pending_action is not None:
            self.pending_action.selected_yes = not self.pending_action.selected_yes

    async def confirm(self) -> bool:
        """Run the pending action if "yes" is selected; always clears it."""
        pending = self.pending_action
        self.pending_action = None
        if pending is None or not pending.selected_yes:
            return False
        return await self._execute(pending.service, pending.verb, pending.subject_id)

    def cancel(self) -> None:
        self.pending_action = None

    async def _execute(self, service: str, verb: str, subject_id: str) -> bool:
        logger.info(f"Executing {service}.{verb} on {subject_id}")
        try:
            async with self._lock:
                await self.dispatcher.invoke(service, verb, {"id": subject_id})
        except NebtermError as e:
            logger.error(f"{service}.{verb} on {subject_id} failed: {e}")
            self.error_message = format_error(e)
            return False

        await self.refresh()
        return True
