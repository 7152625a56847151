"""State objects owned by the navigation engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True)
class NavigationFrame:
    """One ancestor in the drill-down stack.

    `item` is the parent item that was selected when drilling down; the
    child listing reads its linking field from it.
    """
    resource_id: str
    item: Any
    label: str


@dataclass
class PaginationCursor:
    next_token: Optional[str] = None
    token_stack: list[Optional[str]] = field(default_factory=list)
    page_number: int = 1
    has_more: bool = False

    def reset(self) -> None:
        self.next_token = None
        self.token_stack.clear()
        self.page_number = 1
        self.has_more = False


@dataclass
class PendingAction:
    """An action waiting for the user to confirm or cancel."""
    service: str
    verb: str
    subject_id: str
    message: str
    destructive: bool = False
    default_yes: bool = False
    selected_yes: bool = field(init=False)

    def __post_init__(self):
        self.selected_yes = self.default_yes


@dataclass
class PageResult:
    items: list[Any]
    next_token: Optional[str] = None
