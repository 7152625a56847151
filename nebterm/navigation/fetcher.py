"""Fetches one page of items for a resource."""

import logging
from typing import Any, Optional

from nebterm.dispatch.dispatcher import ServiceDispatcher
from nebterm.documents.extractor import extract_items
from nebterm.navigation.schemas import PageResult
from nebterm.resources.registry import ResourceRegistry

logger = logging.getLogger(__name__)


async def fetch_page(
    registry: ResourceRegistry,
    dispatcher: ServiceDispatcher,
    resource_id: str,
    filters: Optional[dict[str, Any]] = None,
    token: Optional[str] = None,
) -> PageResult:
    """Fetch the items of `resource_id`, scoped by `filters`.

    The remote API has no continuation tokens, so `token` is accepted for
    interface symmetry and the returned `next_token` is always None.

    Raises:
        UnknownResource: If the resource id is not registered
        NebtermError: Any dispatch, transport or remote failure
    """
    definition = registry.get_validated(resource_id)

    params: dict[str, Any] = dict(definition.params)
    if filters:
        params.update(filters)

    logger.debug(
        f"Fetching {resource_id} via {definition.service}.{definition.verb} "
        f"params={params} token={token}"
    )
    document = await dispatcher.invoke(definition.service, definition.verb, params)
    items = extract_items(document, definition.result_path)
    logger.info(f"Fetched {len(items)} items for {resource_id}")
    return PageResult(items=items, next_token=None)
