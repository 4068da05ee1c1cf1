#!/usr/bin/env python3
"""
Run an ad-hoc GraphQL query against a store and print the raw response.

Examples:
    python scripts/gql.py "query { shop { name } }"
    python scripts/gql.py --shop other.myshopify.com "query { shop { name } }"
    python scripts/gql.py 'query($id: ID!) { product(id: $id) { title } }' '{"id": "gid://shopify/Product/1"}'
    python scripts/gql.py --stores
"""

import argparse
import asyncio
import json
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulkops.config import settings
from bulkops.db import SessionDatabase
from bulkops.dependencies import open_shop, setup_logging
from bulkops.errors import FatalError
from bulkops.shopify import ShopifyClientError

logger = logging.getLogger(__name__)


async def list_stores() -> None:
    db = SessionDatabase(settings.database_path)
    try:
        await db.initialize()
        stores = await db.list_offline_shops()
    finally:
        await db.close()

    if not stores:
        print("No stores found. Install the app on a store first.")
        return
    print("Installed stores:")
    for shop in stores:
        print(f"  {shop}")


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--shop", default=None)
    parser.add_argument("--stores", action="store_true", help="List installed stores and exit")
    parser.add_argument("query", nargs="?")
    parser.add_argument("variables", nargs="?", help="Variables as a JSON object")
    args = parser.parse_args()

    if args.stores:
        await list_stores()
        return

    if not args.query:
        parser.error("a query is required unless --stores is given")

    variables = None
    if args.variables:
        try:
            variables = json.loads(args.variables)
        except json.JSONDecodeError:
            parser.error(f"Failed to parse variables JSON: {args.variables}")

    async with open_shop(args.shop) as (client, _):
        result = await client.execute(args.query, variables)

    print(json.dumps(result.model_dump(exclude_none=True), indent=2))


if __name__ == "__main__":
    setup_logging("WARNING")
    try:
        asyncio.run(main())
    except (ShopifyClientError, FatalError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
