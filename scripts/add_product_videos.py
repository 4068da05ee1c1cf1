#!/usr/bin/env python3
"""
Attach an external video (e.g. YouTube) to products.

Example:
    python scripts/add_product_videos.py --input data/videos/idToVideo.json \
        --progress data/videos/progress.json
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
from bulkops.processor import ColumnMapping, identity_resources, product_video_job
from bulkops.processor.io import read_json

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="JSON object mapping product GID to video URL")
    add_runner_arguments(parser, delay=0.3, concurrency=3)
    args = parser.parse_args()

    rows = [
        {"id": gid, "video_url": url}
        for gid, url in read_json(args.input).items()
        if gid and url
    ]
    resources = {r.resource_id: r for r in identity_resources((row["id"] for row in rows), "video_url")}

    config = runner_config_from_args(
        args,
        label="Add product videos",
        column_map=[ColumnMapping(column="video_url", field_key="video_url")],
        key_column="id",
    )
    await run_job(args.shop, product_video_job(), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
