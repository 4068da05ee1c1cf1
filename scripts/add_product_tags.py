#!/usr/bin/env python3
"""
Add tags to the products whose SKUs are listed in a CSV.

SKUs are mapped to product ids through the JSON written by
fetch_product_skus.py. Rows with no matching product are reported and skipped.

Example:
    python scripts/add_product_tags.py --input data/productDropshipment.csv \
        --skus data/product-variant-skus.json --tag dropshipment \
        --progress data/dropshipment-progress.json
"""

import argparse
import asyncio
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulkops.cli import add_runner_arguments, run_job, runner_config_from_args
from bulkops.dependencies import setup_logging
from bulkops.errors import FatalError
from bulkops.processor import ColumnMapping, identity_resources, tags_add_job
from bulkops.processor.io import read_csv_rows, read_json

logger = logging.getLogger(__name__)

# Placeholder used in the source sheet for products without an article number
EMPTY_SKU = "–"


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="CSV with a SKU column")
    parser.add_argument("--sku-column", default="Artikelnummer")
    parser.add_argument("--skus", required=True, help="JSON array of {id, variantSkus}")
    parser.add_argument("--tag", action="append", dest="tags", required=True, help="Tag to add (repeatable)")
    add_runner_arguments(parser, delay=0.5, concurrency=10)
    args = parser.parse_args()

    sku_to_product = {
        entry["variantSkus"]: entry["id"]
        for entry in read_json(args.skus)
        if entry.get("variantSkus")
    }

    tag_value = ",".join(args.tags)
    rows = []
    for row in read_csv_rows(args.input):
        sku = (row.get(args.sku_column) or "").strip()
        if sku and sku != EMPTY_SKU:
            rows.append({"sku": sku, "tags": tag_value})

    resources = {
        r.resource_id: r
        for r in identity_resources(sku_to_product.values(), "tags")
    }
    config = runner_config_from_args(
        args,
        label=f"Add tags {args.tags}",
        column_map=[ColumnMapping(column="tags", field_key="tags")],
        key_column="sku",
        key_map=sku_to_product,
    )
    await run_job(args.shop, tags_add_job(args.tags), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
