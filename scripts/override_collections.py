#!/usr/bin/env python3
"""
Overwrite collection titles, handles and descriptions with the values
from a JSON export (e.g. the EN collections), keeping handle redirects.

Plain-text descriptions are converted to HTML paragraphs.

Example:
    python scripts/override_collections.py --input data/collections/en.json \
        --progress data/collections/override-progress.json
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
from bulkops.processor import ColumnMapping, collection_override_job, identity_resources
from bulkops.processor.io import read_json

logger = logging.getLogger(__name__)

FIELDS = ("title", "handle", "description")


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="JSON array of {id, title, handle, description}")
    add_runner_arguments(parser, delay=0.2, concurrency=1)
    args = parser.parse_args()

    rows = [c for c in read_json(args.input) if c.get("id")]
    resources = {r.resource_id: r for r in identity_resources((c["id"] for c in rows), *FIELDS)}

    config = runner_config_from_args(
        args,
        label="Override collections",
        column_map=[ColumnMapping(column=f, field_key=f) for f in FIELDS],
        key_column="id",
    )
    await run_job(args.shop, collection_override_job(), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
