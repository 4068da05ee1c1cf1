#!/usr/bin/env python3
"""
Fetch every product with the SKU of its first variant, for SKU-keyed jobs
such as add_product_tags.py.

Example:
    python scripts/fetch_product_skus.py --output data/product-variant-skus.json
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
from bulkops.processor.io import write_json
from bulkops.shopify import ShopifyClientError, fetch_all_nodes
from bulkops.shopify.queries import PRODUCT_SKUS_QUERY

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--shop", default=None)
    parser.add_argument("--output", required=True)
    args = parser.parse_args()

    async with open_shop(args.shop) as (client, executor):
        products = await fetch_all_nodes(client, executor, PRODUCT_SKUS_QUERY, "products")

    entries = []
    for product in products:
        variants = (product.get("variants") or {}).get("nodes") or []
        entries.append({
            "id": product["id"],
            "handle": product.get("handle"),
            "variantSkus": variants[0].get("sku") if variants else None,
        })

    write_json(args.output, entries)
    logger.info(f"Wrote {len(entries)} products to {args.output}")


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except (ShopifyClientError, FatalError) as e:
        logger.error(str(e))
        sys.exit(1)
