"""Navigation: fetching, hierarchy, filtering, pagination and actions."""

from nebterm.navigation.engine import NavigationEngine
from nebterm.navigation.fetcher import fetch_page
from nebterm.navigation.schemas import (
    FetchState,
    NavigationFrame,
    PageResult,
    PaginationCursor,
    PendingAction,
)

__all__ = [
    "FetchState",
    "NavigationEngine",
    "NavigationFrame",
    "PageResult",
    "PaginationCursor",
    "PendingAction",
    "fetch_page",
]
