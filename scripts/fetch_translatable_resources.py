#!/usr/bin/env python3
"""
Fetch translatable resources of one type and store them as the lookup JSON
used by run_translations.py.

Example:
    python scripts/fetch_translatable_resources.py --type PRODUCT \
        --key title --key body_html --output data/product-translation-resources.json
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
from bulkops.shopify import ShopifyClientError, fetch_translatable_resources

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--shop", default=None)
    parser.add_argument("--type", default="PRODUCT", dest="resource_type",
                        help="TranslatableResourceType, e.g. PRODUCT, COLLECTION, ARTICLE, METAFIELD")
    parser.add_argument("--key", action="append", dest="keys",
                        help="Keep only these content keys (repeatable, default: all)")
    parser.add_argument("--output", required=True)
    parser.add_argument("--page-delay", type=float, default=1.0)
    args = parser.parse_args()

    logger.info(f"Fetching all {args.resource_type} translatable resources...")

    async with open_shop(args.shop) as (client, executor):
        resources = await fetch_translatable_resources(
            client, executor, args.resource_type,
            allowed_keys=args.keys, page_delay=args.page_delay,
        )

    write_json(args.output, resources)
    logger.info(f"Done! Wrote {len(resources)} resources to {args.output}")


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except (ShopifyClientError, FatalError) as e:
        logger.error(str(e))
        sys.exit(1)
