"""
Checkpointed batch runner.

Turns input rows into work items, skips what the progress ledger already
records as done, and runs the rest through the executor in bounded batches,
flushing the ledger after every batch.
"""

import asyncio
import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ..errors import FatalError
from ..shopify import Outcome, RateLimitedExecutor, ShopifyClient
from ..shopify.executor import Sleep
from .jobs import MutationJob
from .ledger import ProgressLedger, sha256
from .models import (
    IdempotencyKey,
    PayloadField,
    RunnerConfig,
    RunSummary,
    TranslatableResource,
    WorkItem,
)

logger = logging.getLogger(__name__)


# Restore rate assumed when a throttle reading does not report one
FALLBACK_RESTORE_RATE = 50.0

Resources = Union[Mapping[str, TranslatableResource], Iterable[TranslatableResource]]


def _index_resources(resources: Resources) -> Mapping[str, TranslatableResource]:
    if isinstance(resources, Mapping):
        return resources
    return {r.resource_id: r for r in resources}


class BatchRunner:
    """Drives one MutationJob over a list of input rows."""

    def __init__(
        self,
        client: ShopifyClient,
        executor: RateLimitedExecutor,
        job: MutationJob,
        config: RunnerConfig,
        progress_path: str,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.executor = executor
        self.job = job
        self.config = config
        self.progress_path = progress_path
        self._sleep = sleep

    # ===== Build phase =====

    def resolve_resource_id(self, row: Mapping[str, Any]) -> Optional[str]:
        """Row key, passed through the remapping table when one is configured."""
        raw = str(row.get(self.config.key_column) or "").strip()
        if not raw:
            return None
        if self.config.key_map is not None:
            return self.config.key_map.get(raw)
        return raw

    def build_work_item(
        self,
        row: Mapping[str, Any],
        resource: TranslatableResource,
        ledger: ProgressLedger,
        row_number: int = 0,
    ) -> WorkItem:
        """
        Collect the row's fields that still need to be sent.

        Blank values, fields without a digest and fields already recorded as
        successful are left out.
        """
        prefix = f"[{row_number}] {resource.resource_id}"
        fields: List[PayloadField] = []

        for mapping in self.config.column_map:
            value = row.get(mapping.column)
            if value is None or str(value).strip() == "":
                continue
            value = str(value)

            digest = resource.find_digest(mapping.field_key, self.config.reference_locale)
            if not digest:
                logger.info(f'{prefix} - skipped key "{mapping.field_key}" (no digest)')
                continue

            value_hash = sha256(value)
            key = IdempotencyKey(
                resource.resource_id, self.config.locale, mapping.field_key,
                digest, value_hash,
            )
            if ledger.is_done(key):
                continue

            fields.append(PayloadField(
                key=mapping.field_key, value=value, digest=digest, value_hash=value_hash,
            ))

        return WorkItem(
            resource_id=resource.resource_id,
            locale=self.config.locale,
            fields=tuple(fields),
            row_number=row_number,
        )

    def build(
        self,
        rows: Sequence[Mapping[str, Any]],
        resources: Resources,
        ledger: ProgressLedger,
        summary: RunSummary,
    ) -> List[WorkItem]:
        """Build phase: no network calls, updates skip counters in `summary`."""
        lookup = _index_resources(resources)
        total = len(rows)
        queued: List[WorkItem] = []

        for i, row in enumerate(rows, start=1):
            resource_id = self.resolve_resource_id(row)
            resource = lookup.get(resource_id) if resource_id else None
            if resource is None:
                raw = row.get(self.config.key_column)
                logger.info(f"[{i}/{total}] {raw} - skipped (no matching resource)")
                summary.skipped_missing += 1
                continue

            item = self.build_work_item(row, resource, ledger, row_number=i)
            if not item.fields:
                logger.debug(f"[{i}/{total}] {resource_id} - skipped (already done)")
                summary.skipped_done += 1
                continue

            queued.append(item)

        return queued

    # ===== Execute phase =====

    async def _execute_item(self, item: WorkItem, total: int) -> Outcome:
        variables = self.job.build_variables(item)
        return await self.executor.execute(
            lambda: self.client.execute(self.job.mutation, variables),
            max_retries=self.config.max_retries,
            root_field=self.job.root_field,
            label=f"[{item.row_number}/{total}] {item.resource_id}",
            user_errors_key=self.job.user_errors_key,
        )

    def _record(self, ledger: ProgressLedger, item: WorkItem, outcome: Outcome) -> None:
        for field in item.fields:
            key = IdempotencyKey(
                item.resource_id, item.locale, field.key, field.digest, field.value_hash,
            )
            if outcome.success:
                ledger.record_success(key)
            else:
                ledger.record_failure(key, outcome.error or "Unknown error")

    def batch_cooldown(self, outcomes: Sequence[Outcome]) -> Optional[float]:
        """
        Pause to take before the next batch when the batch saw throttling.

        Returns:
            Seconds to wait, or None when the regular inter-batch delay applies
        """
        throttled = any(o.throttled for o in outcomes)

        if self.config.adaptive_cooldown:
            readings = [o.throttle for o in outcomes if o.throttle is not None]
            low = [
                r for r in readings
                if r.currently_available < (r.restore_rate or FALLBACK_RESTORE_RATE) * 2
            ]
            if low:
                lowest = min(low, key=lambda r: r.currently_available)
                restore = lowest.restore_rate or FALLBACK_RESTORE_RATE
                millis = math.ceil(
                    (restore * 2 - lowest.currently_available) * 1000 / restore
                )
                return millis / 1000

        if throttled:
            return self.config.throttle_cooldown
        return None

    def _log_outcome(self, item: WorkItem, outcome: Outcome, total: int) -> None:
        keys = ", ".join(item.field_keys)
        if outcome.success:
            logger.info(f"[{item.row_number}/{total}] OK {item.resource_id} ({keys})")
        else:
            logger.warning(
                f"[{item.row_number}/{total}] FAIL {item.resource_id} ({keys}) - {outcome.error}"
            )

        reading = outcome.throttle
        if reading is not None:
            cost = f"{reading.actual_cost:g}" if reading.actual_cost is not None else "?"
            logger.debug(
                f"  Throttle: {reading.currently_available:g}/{reading.maximum_available:g} "
                f"({reading.percent_available}%) | restore {reading.restore_rate:g}/s | cost {cost}"
            )

    async def run_batch(
        self,
        batch: Sequence[WorkItem],
        ledger: ProgressLedger,
        summary: RunSummary,
        total: int,
    ) -> List[Outcome]:
        """
        Run one batch concurrently, record every settled item, flush the ledger.

        A fatal error from any item is re-raised only after the other items
        of the batch have been recorded and flushed.
        """
        results = await asyncio.gather(
            *(self._execute_item(item, total) for item in batch),
            return_exceptions=True,
        )

        outcomes: List[Outcome] = []
        fatal: Optional[BaseException] = None

        for item, result in zip(batch, results):
            if isinstance(result, FatalError):
                logger.error(f"[{item.row_number}/{total}] {item.resource_id} - fatal: {result}")
                fatal = fatal or result
                continue
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(f"[{item.row_number}/{total}] {item.resource_id} - unexpected error: {result}")
                result = Outcome(success=False, error=f"Unexpected error: {result}")

            outcomes.append(result)
            self._log_outcome(item, result, total)
            self._record(ledger, item, result)

            if result.success:
                summary.succeeded += 1
            else:
                summary.failed += 1

        ledger.save(self.progress_path)

        if fatal is not None:
            raise fatal
        return outcomes

    async def run(
        self,
        rows: Sequence[Mapping[str, Any]],
        resources: Resources,
        ledger: ProgressLedger,
    ) -> RunSummary:
        """
        Run the job over all rows.

        Args:
            rows: Input rows (e.g. CSV records)
            resources: Lookup records, as a list or keyed by resource id
            ledger: Progress ledger loaded from `progress_path`

        Returns:
            RunSummary with the run's counts
        """
        config = self.config
        summary = RunSummary(total_rows=len(rows))

        logger.info(f"=== {config.label} ===")
        logger.info(
            f"Locale: {config.locale or '-'} | concurrency: {config.concurrency} | "
            f"max retries: {config.max_retries} | dry run: {config.dry_run}"
        )
        logger.info(f"Progress: {len(ledger.success_keys)} successful entries already recorded")

        queued = self.build(rows, resources, ledger, summary)
        total = len(rows)

        if config.dry_run:
            for item in queued:
                logger.info(
                    f"[{item.row_number}/{total}] {item.resource_id} - DRY RUN: would send "
                    f"{len(item.fields)} key(s): {', '.join(item.field_keys)}"
                )
            summary.would_send = len(queued)
            log_summary(summary, config.label, self.progress_path)
            return summary

        size = config.concurrency
        for start in range(0, len(queued), size):
            batch = queued[start:start + size]
            outcomes = await self.run_batch(batch, ledger, summary, total)

            if start + size >= len(queued):
                break

            cooldown = self.batch_cooldown(outcomes)
            if cooldown is not None:
                logger.info(f"  Throttling observed - backing off {cooldown:.1f}s")
                await self._sleep(cooldown)
            elif config.delay_seconds > 0:
                await self._sleep(config.delay_seconds)

        log_summary(summary, config.label, self.progress_path)
        return summary


def log_summary(summary: RunSummary, label: str, progress_path: str) -> None:
    logger.info(f"=== {label} summary ===")
    logger.info(f"Total rows:       {summary.total_rows}")
    logger.info(f"Succeeded:        {summary.succeeded}")
    logger.info(f"Skipped (done):   {summary.skipped_done}")
    logger.info(f"Skipped (no res): {summary.skipped_missing}")
    logger.info(f"Failed:           {summary.failed}")
    if summary.would_send:
        logger.info(f"Would send:       {summary.would_send}")
    logger.info(f"Progress saved:   {progress_path}")
