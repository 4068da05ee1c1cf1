#!/usr/bin/env python3
"""
Overwrite product handles with the values from a JSON export
(e.g. the EN handles), keeping redirects from the old handles.

Example:
    python scripts/override_handles.py --input data/en.json \
        --progress data/handles-progress.json
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
from bulkops.processor import ColumnMapping, handle_override_job, identity_resources
from bulkops.processor.io import read_json

logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True, help="JSON array of {id, handle}")
    add_runner_arguments(parser, delay=0.2, concurrency=10)
    args = parser.parse_args()

    rows = [p for p in read_json(args.input) if p.get("id")]
    resources = {r.resource_id: r for r in identity_resources((p["id"] for p in rows), "handle")}

    config = runner_config_from_args(
        args,
        label="Override product handles",
        column_map=[ColumnMapping(column="handle", field_key="handle")],
        key_column="id",
    )
    await run_job(args.shop, handle_override_job(), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
