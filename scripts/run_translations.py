#!/usr/bin/env python3
"""
Register translations from per-locale CSV files.

Paths may contain `{locale}`, which is filled in for every --locale given.

Example:
    python scripts/run_translations.py --label "Product Meta" \
        --locale de --locale fr \
        --input data/meta/input/{locale}.csv \
        --resources data/meta/product-meta-translation-resources.json \
        --progress data/meta/output/{locale}/translated.json \
        --map metatitle=meta_title --map metadescription=meta_description
"""

import argparse
import asyncio
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulkops.cli import add_runner_arguments, parse_column_map, run_job, runner_config_from_args
from bulkops.dependencies import setup_logging
from bulkops.errors import FatalError
from bulkops.processor import translation_job
from bulkops.processor.io import load_resources, read_csv_rows

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--locale", action="append", required=True, help="Target locale (repeatable)")
    parser.add_argument("--input", required=True, help="Input CSV path")
    parser.add_argument("--resources", required=True, help="Translatable resources JSON path")
    parser.add_argument("--map", action="append", required=True, dest="column_map",
                        help="CSV column to translatable key, e.g. Title=title (repeatable)")
    parser.add_argument("--gid-column", default="GID", help="CSV column holding the resource GID")
    parser.add_argument("--label", default="Product", help="Name used in log output")
    add_runner_arguments(parser, delay=0.02, concurrency=1)
    return parser.parse_args()


async def main():
    args = parse_args()
    column_map = parse_column_map(args.column_map)
    resources = load_resources(args.resources)

    for locale in args.locale:
        logger.info(f"========== Starting locale: {locale} ==========")
        progress_path = args.progress.format(locale=locale)
        config = runner_config_from_args(
            args,
            label=f"{args.label} Translation Registration",
            locale=locale,
            column_map=column_map,
            key_column=args.gid_column,
        )
        rows = read_csv_rows(args.input.format(locale=locale))
        await run_job(args.shop, translation_job(), config, rows, resources, progress_path)


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except FatalError as e:
        logger.error(str(e))
        sys.exit(1)
