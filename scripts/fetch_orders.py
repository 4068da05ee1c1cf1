#!/usr/bin/env python3
"""
Fetch all orders and keep those whose email belongs to a marketplace domain.

Example:
    python scripts/fetch_orders.py --output data/filtered-orders.json
    python scripts/fetch_orders.py --domain amazon --domain bol.com --output out.json
"""

import argparse
import asyncio
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulkops.dependencies import open_shop, setup_logging
from bulkops.errors import FatalError
from bulkops.processor.filters import DEFAULT_MARKETPLACE_DOMAINS, build_domain_pattern, order_email, matches_domain
from bulkops.processor.io import write_json
from bulkops.shopify import ShopifyClientError, fetch_all_nodes
from bulkops.shopify.queries import ORDERS_QUERY

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--shop", default=None)
    parser.add_argument("--domain", action="append", dest="domains",
                        help="Email domain fragment to match (repeatable, default: marketplace list)")
    parser.add_argument("--output", required=True)
    parser.add_argument("--max-retries", type=int, default=6)
    args = parser.parse_args()

    pattern = build_domain_pattern(args.domains or DEFAULT_MARKETPLACE_DOMAINS)
    logger.info("Fetching all orders...")

    async with open_shop(args.shop) as (client, executor):
        matched = await fetch_all_nodes(
            client, executor, ORDERS_QUERY, "orders",
            max_retries=args.max_retries,
            node_filter=lambda node: matches_domain(order_email(node), pattern),
        )

    write_json(args.output, matched)
    logger.info(f"Wrote {len(matched)} matching orders to {args.output}")


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except (ShopifyClientError, FatalError) as e:
        logger.error(str(e))
        sys.exit(1)
