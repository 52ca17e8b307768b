"""
Batch orchestrator for icon fetching.

Enumerates every record in the data file, runs the single-item workflow
(resolve -> adopt name -> locate -> extract) through a bounded worker pool
with retries, and reconciles the data file once after the whole batch.

Per record: pending -> skipped | succeeded | failed. Item errors never
escape the item boundary; they are retried and then recorded as failures.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ..config import FetcherConfig
from ..core.cache import LookupCache
from ..core.data_file import DataSource, write_data_file
from ..core.executor import CommandExecutor
from ..core.extractor import IconExtractor
from ..core.locator import IconLocator
from ..core.pool import run_bounded
from ..core.reconciler import reconcile
from ..core.resolver import ApplicationResolver, should_adopt_name
from ..core.retry import RetryPolicy, with_retry
from ..errors import categorize_error
from ..models.records import (
    ApplicationRecord,
    BatchResult,
    Category,
    FailedItem,
    ItemOutcome,
    icon_file_name,
    remove_app_suffix,
    snapshot_categories,
)
from .progress import ProgressSnapshot, ProgressTracker

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Drive one icon-fetching run over a list of categories."""

    def __init__(
        self,
        config: FetcherConfig,
        resolver: Optional[ApplicationResolver] = None,
        locator: Optional[IconLocator] = None,
        extractor: Optional[IconExtractor] = None,
        executor: Optional[CommandExecutor] = None,
        cache: Optional[LookupCache] = None,
        on_progress: Optional[Callable[[ProgressSnapshot], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize orchestrator.

        Collaborators default to real implementations sharing one executor
        and one lookup cache; tests pass doubles instead.

        Args:
            config: Run configuration
            resolver: Application resolver
            locator: Icon locator
            extractor: Icon extractor
            executor: Command executor for default collaborators
            cache: Lookup cache for the default resolver
            on_progress: Callback for progress milestones
            sleep: Backoff delay function
        """
        self.config = config
        executor = executor or CommandExecutor(timeout=config.command_timeout)
        self.resolver = resolver or ApplicationResolver(executor, cache or LookupCache())
        self.locator = locator or IconLocator()
        self.extractor = extractor or IconExtractor(executor, config.min_icon_bytes)
        self.on_progress = on_progress
        self.retry_policy = RetryPolicy(
            attempts=config.retry_attempts,
            initial_delay=config.retry_delay,
            backoff_multiplier=config.backoff_multiplier,
        )
        self._sleep = sleep

    def has_valid_icon(self, record: ApplicationRecord) -> bool:
        return record.has_valid_icon(self.config.output_dir, self.config.min_icon_bytes)

    def enumerate(
        self, categories: Sequence[Category]
    ) -> Tuple[List[ApplicationRecord], List[ApplicationRecord]]:
        """Split records into (pending, skipped).

        Records without a name are ignored. In only-missing mode records
        that already have a valid icon are skipped here, before dispatch.
        """
        pending: List[ApplicationRecord] = []
        skipped: List[ApplicationRecord] = []

        for category in categories:
            for record in category.items:
                if not record.display_text.strip():
                    continue
                if self.config.only_missing_icons and self.has_valid_icon(record):
                    skipped.append(record)
                else:
                    pending.append(record)

        return pending, skipped

    async def process_app(self, record: ApplicationRecord) -> ItemOutcome:
        """Single-item workflow.

        The record is only mutated after every step succeeded, so a retry
        starts again from the original name.

        Raises:
            NotFoundError: The name did not resolve to a bundle
            ExtractionError: No valid icon could be produced
        """
        resolved = await self.resolver.resolve(record.display_text)
        outcome = ItemOutcome()

        new_name = record.display_text
        true_name = remove_app_suffix(resolved.true_name.strip())
        if true_name != record.display_text and should_adopt_name(true_name, self.config.max_name_length):
            logger.info(f'Using display name: "{record.display_text}" -> "{true_name}"')
            new_name = true_name
            outcome.name_updated = True

        new_icon = record.icon
        if not self.has_valid_icon(record):
            new_icon = icon_file_name(new_name)
            output_path = self.config.icon_path(new_icon)
            resource = self.locator.locate(resolved.path, remove_app_suffix(new_name))
            logger.debug(f"Extracting {resource} -> {output_path}")
            await self.extractor.extract(resource, output_path, self.config.icon_size, bundle_path=resolved.path)
            outcome.icon_updated = True

        record.display_text = new_name
        record.icon = new_icon
        return outcome

    async def run_batch(self, categories: Sequence[Category]) -> BatchResult:
        """Process every pending record; mutates records in place."""
        started = time.monotonic()
        pending, skipped = self.enumerate(categories)
        result = BatchResult(skipped=list(skipped))

        if not pending:
            logger.info("No applications need processing")
            result.elapsed = time.monotonic() - started
            return result

        tracker = ProgressTracker(len(pending), step=self.config.progress_step, on_milestone=self.on_progress)
        logger.info(
            f"Processing {len(pending)} applications "
            f"({len(skipped)} skipped, concurrency {self.config.concurrency})"
        )

        async def worker(record: ApplicationRecord) -> None:
            await self._run_item(record, result)
            tracker.advance()

        await run_bounded(pending, worker, self.config.concurrency)

        result.elapsed = time.monotonic() - started
        return result

    async def _run_item(self, record: ApplicationRecord, result: BatchResult) -> None:
        name = record.display_text
        try:
            outcome = await with_retry(
                lambda: self.process_app(record),
                self.retry_policy,
                description=f"Processing {name!r}",
                sleep=self._sleep,
            )
        except Exception as e:
            logger.debug(f"Giving up on {name!r}: {e}")
            result.failed.append(FailedItem(record=record, name=name, error=str(e), category=categorize_error(e)))
            return

        if outcome.updated:
            result.updated.append(record)
        else:
            result.unchanged.append(record)

    async def run(self, source: DataSource) -> BatchResult:
        """Run the batch, then reconcile and persist the data file once."""
        result = await self.run_batch(source.categories)

        if not result.updated:
            logger.info("No records changed, data file left untouched")
        else:
            patch = reconcile(source.text, source.original, source.categories)
            result.changed_field_count = patch.changed_field_count
            if patch.changed:
                write_data_file(source.path, patch.new_text, backup=self.config.backup)
                source.text = patch.new_text
                source.original = snapshot_categories(source.categories)
                logger.info(f"Saved {source.path} ({patch.changed_field_count} fields updated)")
            else:
                logger.info("Data file has no textual changes, skipping write")

        return result
