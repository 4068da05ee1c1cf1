#!/usr/bin/env python3
"""
Set the custom.feature_list metafield of products.

The input holds one JSON-array string of features per product. Products
whose value is empty or not a non-empty JSON array are skipped.

Example:
    python scripts/set_feature_lists.py --input data/features/en.json \
        --progress data/features/progress.json
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
from bulkops.processor import ColumnMapping, feature_list_job, identity_resources
from bulkops.processor.io import read_json
from bulkops.processor.jobs import parse_feature_list

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="JSON array of {GID, short_description}")
    parser.add_argument("--column", default="short_description", help="Field holding the feature array")
    add_runner_arguments(parser, delay=0.1, concurrency=5)
    args = parser.parse_args()

    products = [p for p in read_json(args.input) if p.get("GID")]
    rows = [p for p in products if parse_feature_list(p.get(args.column))]
    logger.info(f"Skipped (no feature data): {len(products) - len(rows)}")

    resources = {r.resource_id: r for r in identity_resources((p["GID"] for p in rows), "feature_list")}
    config = runner_config_from_args(
        args,
        label="Set product feature lists",
        column_map=[ColumnMapping(column=args.column, field_key="feature_list")],
    )
    await run_job(args.shop, feature_list_job(), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
