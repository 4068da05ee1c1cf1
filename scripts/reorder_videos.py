#!/usr/bin/env python3
"""
Move each product's external video to a fixed media position
(second place by default).

The input is a media export: a JSON array of
{id, media: [{id, mediaContentType, ...}]} in current media order.

Example:
    python scripts/reorder_videos.py --input data/videos/product-media.json \
        --progress data/videos/reorder-progress.json
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
from bulkops.processor import ColumnMapping, identity_resources, media_reorder_job
from bulkops.processor.io import read_json
from bulkops.processor.jobs import video_reorder_rows

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="Product media export JSON")
    parser.add_argument("--position", type=int, default=1, help="Zero-based target position")
    add_runner_arguments(parser, delay=0.4, concurrency=5)
    args = parser.parse_args()

    rows = video_reorder_rows(read_json(args.input), position=args.position)
    resources = {r.resource_id: r for r in identity_resources((row["id"] for row in rows), "media_id")}

    config = runner_config_from_args(
        args,
        label=f"Reorder videos to position {args.position}",
        column_map=[ColumnMapping(column="media_id", field_key="media_id")],
        key_column="id",
    )
    await run_job(args.shop, media_reorder_job(args.position), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
