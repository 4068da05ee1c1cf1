#!/usr/bin/env python3
"""
Delete the customers or orders listed in a fetched JSON file
(see fetch_customers.py / fetch_orders.py).

Deletions are recorded in the progress ledger, so an interrupted run can be
restarted and skips everything already deleted.

Example:
    python scripts/delete_filtered.py --kind customers \
        --input data/filtered-customers.json --progress data/deleted-customers.json
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
from bulkops.processor import ColumnMapping, customer_delete_job, identity_resources, order_delete_job
from bulkops.processor.io import read_json

logger = logging.getLogger(__name__)

JOBS = {
    "customers": customer_delete_job,
    "orders": order_delete_job,
}


async def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--kind", choices=sorted(JOBS), required=True)
    parser.add_argument("--input", required=True, help="JSON array of nodes with an `id`")
    add_runner_arguments(parser, delay=0.1, concurrency=15, max_retries=3, adaptive_cooldown=True)
    args = parser.parse_args()

    nodes = read_json(args.input)
    rows = [{"id": node["id"]} for node in nodes if node.get("id")]
    resources = {r.resource_id: r for r in identity_resources((row["id"] for row in rows), "id")}

    config = runner_config_from_args(
        args,
        label=f"Delete {args.kind}",
        column_map=[ColumnMapping(column="id", field_key="id")],
        key_column="id",
    )
    await run_job(args.shop, JOBS[args.kind](), config, rows, resources, args.progress)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
