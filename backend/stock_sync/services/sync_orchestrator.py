"""
Sync orchestrator — full synchronization runs and incremental queue draining.

run_sync() collects every token of the local catalog, splits the tokens into
batches and either reconciles the single batch inline or queues all of them,
reconciles batch #1 inline and registers the recurring drain trigger.

drain_next_batch() is called on every drain tick and reconciles exactly one
queued batch. Failures are confined to the batch they happen in: the record
is marked error, its tokens count as errors and the next tick moves on.
Version: 1.0.0
"""
import logging
import uuid
from typing import Any, Dict, Optional

from stock_sync.core.config import Settings
from stock_sync.core.constants.sync import STATUS_COMPLETED, STATUS_ERROR, STATUS_PROCESSING
from stock_sync.db.queue_store import QueueStore
from stock_sync.schemas.sync import (
    BatchOutcome,
    BatchRecord,
    PriceContext,
    QueueCounts,
    SyncStatusResponse,
)
from stock_sync.services.batch_processor import BatchProcessor
from stock_sync.services.catalog_service import WooCommerceCatalog
from stock_sync.services.drain_scheduler import DrainScheduler
from stock_sync.services.entity_index import TokenIndex, build_token_index, resolve_tokens
from stock_sync.services.price_context_service import PriceContextService
from stock_sync.utils.batch_grouping import calculate_batch_groups

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    def __init__(
        self,
        settings: Settings,
        queue_store: QueueStore,
        catalog: WooCommerceCatalog,
        price_context_service: PriceContextService,
        processor: BatchProcessor,
        scheduler: DrainScheduler,
    ) -> None:
        self._settings = settings
        self._store = queue_store
        self._catalog = catalog
        self._price_context = price_context_service
        self._processor = processor
        self._scheduler = scheduler

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def run_sync(self) -> Dict[str, Any]:
        """
        Start a full synchronization run.

        Returns:
            dict: run summary with a status of skipped, empty, completed or queued
        """
        self._store.ensure_schema()

        if not self._settings.has_inventory_credentials:
            logger.error("Stock sync aborted: missing inventory access token or store uuid")
            return {"status": "skipped", "reason": "missing_configuration"}

        price_context = await self._price_context.fetch()

        entities = await self._catalog.enumerate_sellable_entities()
        tokens, index = build_token_index(entities)

        batches = calculate_batch_groups(tokens, self._settings.sync_batch_size)
        if not batches:
            logger.warning("Stock sync found no sellable entities in the catalog")
            return {"status": "empty", "tokens": 0, "batches": 0}

        total_batches = len(batches)
        logger.info("=" * 60)
        logger.info("Stock sync started")
        logger.info(f"   Entities: {len(entities)}  Tokens: {len(tokens)}")
        logger.info(f"   Batches: {total_batches} (size {self._settings.sync_batch_size})")
        logger.info("=" * 60)

        self._store.reset_counters()

        if total_batches == 1:
            try:
                outcome = await self._reconcile(batches[0], index, price_context)
            except Exception as exc:
                logger.exception("Inline batch failed unexpectedly")
                outcome = BatchOutcome.failed(len(batches[0]), str(exc) or type(exc).__name__)
            counters = self._store.accumulate_counters(*outcome.as_tuple())
            self._store.set_last_sync()
            logger.info(
                f"Stock sync completed inline: synced={counters.synced_count} "
                f"errors={counters.error_count} not_found={counters.not_found_count}"
            )
            return {
                "status": STATUS_COMPLETED if outcome.ok else STATUS_ERROR,
                "tokens": len(tokens),
                "batches": 1,
                "synced": outcome.synced,
                "errors": outcome.errors,
                "not_found": outcome.not_found,
            }

        self._store.delete_pending()
        run_id = str(uuid.uuid4())
        records = self._store.insert_batches([
            BatchRecord(
                run_id=run_id,
                batch_number=number,
                total_batches=total_batches,
                token_list=batch,
            )
            for number, batch in enumerate(batches, start=1)
        ])

        first = records[0]
        if self._store.claim(first.id):
            await self._drain_record(first, index=index, price_context=price_context)

        registered = False
        if not self._scheduler.is_registered():
            registered = self._scheduler.register_recurring(
                self._settings.sync_drain_interval_seconds
            )

        return {
            "status": "queued",
            "run_id": run_id,
            "tokens": len(tokens),
            "batches": total_batches,
            "pending": total_batches - 1,
            "drain_registered": registered or self._scheduler.is_registered(),
        }

    # ------------------------------------------------------------------
    # Drain tick
    # ------------------------------------------------------------------

    async def drain_next_batch(self) -> Dict[str, Any]:
        """
        Reconcile the oldest pending batch.

        Unregisters the drain trigger once nothing is pending. A claim lost
        to a concurrent tick moves on to the next pending record once.
        """
        record = self._store.next_pending()
        if record is None:
            self._scheduler.unregister()
            logger.info("Drain tick found no pending batches")
            return {"status": "idle"}

        if not self._store.claim(record.id):
            record = self._store.next_pending()
            if record is None or not self._store.claim(record.id):
                logger.info("Drain tick lost the claim race, leaving the queue to the other tick")
                return {"status": "contended"}

        outcome = await self._drain_record(record)

        remaining = self._store.count_pending()
        if remaining == 0:
            self._store.set_last_sync()
            logger.info("Drain complete: queue is empty")

        return {
            "status": STATUS_COMPLETED if outcome.ok else STATUS_ERROR,
            "batch_number": record.batch_number,
            "total_batches": record.total_batches,
            "synced": outcome.synced,
            "errors": outcome.errors,
            "not_found": outcome.not_found,
            "remaining": remaining,
        }

    async def _drain_record(
        self,
        record: BatchRecord,
        index: Optional[TokenIndex] = None,
        price_context: Optional[PriceContext] = None,
    ) -> BatchOutcome:
        """Reconcile a claimed record, then mark it and accumulate its outcome."""
        logger.info(
            f"Processing batch {record.batch_number}/{record.total_batches} "
            f"({len(record.token_list)} tokens, status {STATUS_PROCESSING})"
        )
        try:
            if index is None:
                index = await resolve_tokens(self._catalog, record.token_list)
            if price_context is None:
                price_context = await self._price_context.fetch()
            outcome = await self._reconcile(record.token_list, index, price_context)
        except Exception as exc:
            logger.exception(f"Batch {record.batch_number} failed unexpectedly")
            outcome = BatchOutcome.failed(len(record.token_list), str(exc) or type(exc).__name__)

        if outcome.ok:
            self._store.mark_status(record.id, STATUS_COMPLETED)
        else:
            self._store.mark_status(record.id, STATUS_ERROR, outcome.error_message)
        self._store.accumulate_counters(*outcome.as_tuple())
        return outcome

    async def _reconcile(self, tokens, index: TokenIndex, price_context: PriceContext) -> BatchOutcome:
        return await self._processor.process_batch(tokens, index, price_context)

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def is_drain_registered(self) -> bool:
        return self._scheduler.is_registered()

    def clear_queue(self) -> int:
        """Delete every pending batch; the next tick then unregisters itself."""
        deleted = self._store.delete_pending()
        logger.info(f"Queue cleared: {deleted} pending batches deleted")
        return deleted

    def get_status(self) -> SyncStatusResponse:
        counters = self._store.get_counters()
        queue = QueueCounts(**self._store.count_by_status())
        if queue.processing:
            logger.info(f"{queue.processing} batches in processing (in flight or stuck)")
        last_sync = counters.last_sync_timestamp
        return SyncStatusResponse(
            synced_count=counters.synced_count,
            error_count=counters.error_count,
            not_found_count=counters.not_found_count,
            last_sync_timestamp=last_sync.isoformat() if last_sync else None,
            queue=queue,
            drain_registered=self._scheduler.is_registered(),
            sync_enabled=self._settings.sync_enabled,
        )
