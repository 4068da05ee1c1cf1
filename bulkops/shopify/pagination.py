"""
Cursor pagination over Admin API connections.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .client import ShopifyClient, ShopifyClientError
from .executor import RateLimitedExecutor, Sleep
from .queries import TRANSLATABLE_RESOURCES_QUERY

logger = logging.getLogger(__name__)


class PaginationError(ShopifyClientError):
    """A page could not be fetched after all retries."""
    pass


async def fetch_all_nodes(
    client: ShopifyClient,
    executor: RateLimitedExecutor,
    query: str,
    connection: str,
    variables: Optional[Dict[str, Any]] = None,
    page_size: int = 250,
    max_retries: int = 6,
    page_delay: float = 0.005,
    throttled_delay: float = 2.0,
    node_filter: Optional[Callable[[Dict[str, Any]], bool]] = None,
    sleep: Sleep = asyncio.sleep,
) -> List[Dict[str, Any]]:
    """
    Fetch every node of a connection, one page at a time.

    Args:
        client: Shopify GraphQL client
        executor: Retry/throttle wrapper for each page request
        query: Query taking $first and $after
        connection: Top-level field holding `nodes` and `pageInfo`
        variables: Extra query variables
        page_size: Nodes per page (Shopify max is 250)
        max_retries: Retries per page
        page_delay: Pause between pages
        throttled_delay: Pause between pages when the last page saw throttling
        node_filter: Keep only nodes for which this returns True

    Returns:
        All (filtered) nodes in API order

    Raises:
        PaginationError: If a page fails after retries
    """
    kept: List[Dict[str, Any]] = []
    after: Optional[str] = None
    page = 0
    total_fetched = 0

    while True:
        page += 1
        page_vars = dict(variables or {})
        page_vars.update({"first": page_size, "after": after})

        outcome = await executor.execute(
            lambda: client.execute(query, page_vars),
            max_retries=max_retries,
            label=f"Page {page}",
        )
        if not outcome.success:
            raise PaginationError(f"Page {page} of {connection} failed: {outcome.error}")

        conn = outcome.data.get(connection) or {}
        nodes = conn.get("nodes") or []
        page_info = conn.get("pageInfo") or {}

        total_fetched += len(nodes)
        matched = [n for n in nodes if node_filter(n)] if node_filter else nodes
        kept.extend(matched)

        logger.info(
            f"Page {page}: fetched {len(nodes)} {connection}, "
            f"{len(matched)} kept ({total_fetched} total)"
        )

        after = page_info.get("endCursor") if page_info.get("hasNextPage") else None
        if not after:
            break

        await sleep(throttled_delay if outcome.throttled else page_delay)

    logger.info(f"Kept {len(kept)} of {total_fetched} {connection}")
    return kept


async def fetch_translatable_resources(
    client: ShopifyClient,
    executor: RateLimitedExecutor,
    resource_type: str,
    allowed_keys: Optional[Iterable[str]] = None,
    **kwargs: Any,
) -> List[Dict[str, Any]]:
    """
    Fetch translatable resources of one type, keeping only the allowed content keys.

    Resources left with no content after filtering are dropped.
    """
    allowed = set(allowed_keys) if allowed_keys else None
    nodes = await fetch_all_nodes(
        client,
        executor,
        TRANSLATABLE_RESOURCES_QUERY,
        "translatableResources",
        variables={"resourceType": resource_type},
        **kwargs,
    )

    resources = []
    for node in nodes:
        content = node.get("translatableContent") or []
        if allowed is not None:
            content = [c for c in content if c.get("key") in allowed]
        if content:
            resources.append({
                "resourceId": node["resourceId"],
                "translatableContent": content,
            })

    logger.info(f"{len(resources)} {resource_type} resources with translatable content")
    return resources
