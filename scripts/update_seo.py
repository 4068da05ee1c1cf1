#!/usr/bin/env python3
"""
Update product SEO titles and descriptions from a JSON export.

Only non-empty values are sent; products with neither are skipped.

Example:
    python scripts/update_seo.py --input data/meta/en.json \
        --progress data/meta/seo-progress.json
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
from bulkops.processor import ColumnMapping, identity_resources, seo_update_job
from bulkops.processor.io import read_json

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="JSON array of {GID, metatitle, metadescription}")
    parser.add_argument("--title-column", default="metatitle")
    parser.add_argument("--description-column", default="metadescription")
    add_runner_arguments(parser, delay=0.1, concurrency=5)
    args = parser.parse_args()

    rows = [p for p in read_json(args.input) if p.get("GID")]
    resources = {
        r.resource_id: r
        for r in identity_resources((p["GID"] for p in rows), "seo_title", "seo_description")
    }
    config = runner_config_from_args(
        args,
        label="Update product SEO",
        column_map=[
            ColumnMapping(column=args.title_column, field_key="seo_title"),
            ColumnMapping(column=args.description_column, field_key="seo_description"),
        ],
    )
    await run_job(args.shop, seo_update_job(), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
