"""
Argument parsing and run helpers shared by the scripts.
"""

import argparse
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import settings
from .dependencies import open_shop
from .processor import (
    BatchRunner,
    ColumnMapping,
    MutationJob,
    ProgressLedger,
    RunnerConfig,
    RunSummary,
    TranslatableResource,
)

logger = logging.getLogger(__name__)


def parse_column_map(pairs: Sequence[str]) -> List[ColumnMapping]:
    """Parse `Column=field_key` pairs."""
    mappings = []
    for pair in pairs:
        column, sep, field_key = pair.partition("=")
        if not sep or not column or not field_key:
            raise argparse.ArgumentTypeError(
                f"Invalid column mapping '{pair}', expected Column=field_key"
            )
        mappings.append(ColumnMapping(column=column, field_key=field_key))
    return mappings


def add_runner_arguments(
    parser: argparse.ArgumentParser,
    delay: float = 0.2,
    concurrency: Optional[int] = None,
    max_retries: Optional[int] = None,
    adaptive_cooldown: bool = False,
) -> None:
    """Options common to every batch-mutation script."""
    parser.add_argument("--shop", default=None, help="Store domain (defaults to SHOPIFY_SHOP)")
    parser.add_argument("--progress", required=True, help="Progress ledger JSON path")
    parser.add_argument("--dry-run", action="store_true", help="Build work items but send nothing")
    parser.add_argument("--delay", type=float, default=delay, help="Seconds between batches")
    parser.add_argument(
        "--concurrency", type=int,
        default=concurrency or settings.default_concurrency,
        help="Mutations in flight per batch",
    )
    parser.add_argument(
        "--max-retries", type=int,
        default=settings.default_max_retries if max_retries is None else max_retries,
        help="Retries per mutation on transient errors and throttling",
    )
    parser.add_argument(
        "--adaptive-cooldown", action=argparse.BooleanOptionalAction, default=adaptive_cooldown,
        help="Size the post-throttle pause from the lowest observed budget",
    )


def runner_config_from_args(args: argparse.Namespace, **overrides: Any) -> RunnerConfig:
    values: Dict[str, Any] = {
        "dry_run": args.dry_run,
        "delay_seconds": args.delay,
        "concurrency": args.concurrency,
        "max_retries": args.max_retries,
        "adaptive_cooldown": args.adaptive_cooldown,
    }
    values.update(overrides)
    return RunnerConfig(**values)


async def run_job(
    shop: Optional[str],
    job: MutationJob,
    config: RunnerConfig,
    rows: Sequence[Mapping[str, Any]],
    resources: Mapping[str, TranslatableResource],
    progress_path: str,
) -> RunSummary:
    """Load the ledger, run the job against the shop, return the summary."""
    ledger = ProgressLedger.load(progress_path)
    logger.info(f"Parsed {len(rows)} rows, loaded {len(resources)} resources")

    async with open_shop(shop) as (client, executor):
        runner = BatchRunner(client, executor, job, config, progress_path)
        return await runner.run(rows, resources, ledger)
