"""
Queue store for the batch synchronization queue and run statistics.

This module provides the durable state of a synchronization run:
- sync_batch_queue: one row per batch of tokens
- sync_run_stats: a single row of cumulative counters

All methods are synchronous to simplify Celery task code. Nothing about a
run survives in process memory between drain ticks; it all lives here.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from stock_sync.clients.supabase_client import SupabaseClient
from stock_sync.core.constants.sync import (
    BATCH_STATUSES,
    QUEUE_TABLE,
    STATS_ROW_ID,
    STATS_TABLE,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_PROCESSING,
)
from stock_sync.core.exceptions import ConfigurationError, QueueStoreError
from stock_sync.db.schema import SCHEMA_SQL
from stock_sync.schemas.sync import BatchRecord, RunCounters

logger = logging.getLogger(__name__)

# PostgreSQL "undefined_table"
_UNDEFINED_TABLE = "42P01"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueueStore:
    """
    Store for the batch queue and the cumulative run counters.

    Provides methods for:
    - Verifying the schema
    - Evicting stale pending batches and inserting a new run's batches
    - Claiming the next pending batch (compare-and-set soft lock)
    - Recording batch outcomes and accumulating counters
    """

    def __init__(self, supabase_client: SupabaseClient):
        """
        Initialize QueueStore.

        Args:
            supabase_client: SupabaseClient wrapper (its .client is the SDK client)
        """
        self._supabase_client = supabase_client
        self.table = QUEUE_TABLE
        self.stats_table = STATS_TABLE

    @property
    def client(self):
        return self._supabase_client.client

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except APIError as e:
            logger.error("supabase error action=%s detail=%s", action, str(e))
            raise QueueStoreError(f"Queue store {action} failed: {e}") from e

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def ensure_schema(self) -> None:
        """
        Verify both tables exist and the counters row is present.

        Idempotent. Raises ConfigurationError carrying the DDL when a table
        is missing, since PostgREST cannot create it.
        """
        for table in (self.table, self.stats_table):
            try:
                self.client.table(table).select("id").limit(1).execute()
            except APIError as e:
                if getattr(e, "code", None) == _UNDEFINED_TABLE or "does not exist" in str(e):
                    logger.error("queue table %s missing; apply stock_sync.db.schema.SCHEMA_SQL", table)
                    raise ConfigurationError(
                        f"Table {table} does not exist. Apply this schema:\n{SCHEMA_SQL}"
                    ) from e
                raise QueueStoreError(f"Queue store schema check on {table} failed: {e}") from e

        result = self._execute(
            self.client.table(self.stats_table).select("id").eq("id", STATS_ROW_ID),
            "stats lookup",
        )
        if not result.data:
            self._execute(
                self.client.table(self.stats_table).upsert({"id": STATS_ROW_ID}, on_conflict="id"),
                "stats provisioning",
            )
            logger.info("Provisioned run statistics row")

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def delete_pending(self) -> int:
        """
        Delete every batch still pending.

        Only pending rows go: processing/completed/error rows are history
        (or a concurrent run) and are never touched.

        Returns:
            int: Number of rows deleted
        """
        result = self._execute(
            self.client.table(self.table)
                .delete()
                .eq("status", STATUS_PENDING),
            "delete pending",
        )
        deleted = len(result.data or [])
        if deleted:
            logger.info(f"Deleted {deleted} stale pending batches")
        return deleted

    def insert_batches(self, records: List[BatchRecord]) -> List[BatchRecord]:
        """
        Insert a run's batch records, all pending.

        Args:
            records: Batch records; ids are assigned when missing

        Returns:
            list: The inserted records
        """
        if not records:
            return []

        now = _utcnow()
        rows: List[Dict[str, Any]] = []
        inserted: List[BatchRecord] = []
        for record in records:
            record = record.model_copy(update={
                "id": record.id or str(uuid.uuid4()),
                "status": STATUS_PENDING,
                "created_at": record.created_at or now,
                "processed_at": None,
                "error_message": None,
            })
            inserted.append(record)
            rows.append(record.model_dump(mode="json"))

        self._execute(self.client.table(self.table).insert(rows), "insert batches")
        logger.info(f"Queued {len(rows)} batches (run: {inserted[0].run_id})")
        return inserted

    def next_pending(self) -> Optional[BatchRecord]:
        """
        Get the pending batch with the lowest batch_number.

        Returns:
            BatchRecord or None: Next batch to drain
        """
        result = self._execute(
            self.client.table(self.table)
                .select("*")
                .eq("status", STATUS_PENDING)
                .order("batch_number")
                .order("created_at")
                .limit(1),
            "next pending",
        )
        return BatchRecord.model_validate(result.data[0]) if result.data else None

    def claim(self, batch_id: str) -> bool:
        """
        Atomically move a batch from pending to processing.

        The update is filtered on status=pending, so two overlapping drain
        ticks cannot both claim the same row.

        Returns:
            bool: True if this caller won the claim
        """
        result = self._execute(
            self.client.table(self.table)
                .update({"status": STATUS_PROCESSING})
                .eq("id", batch_id)
                .eq("status", STATUS_PENDING),
            "claim",
        )
        claimed = bool(result.data)
        if not claimed:
            logger.info(f"Batch {batch_id} already claimed by another tick")
        return claimed

    def mark_status(
        self,
        batch_id: str,
        status: str,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Update batch status.

        Args:
            batch_id: Batch identifier
            status: New status (pending, processing, completed, error)
            error_message: Optional error message for the error status
        """
        if status not in BATCH_STATUSES:
            raise ValueError(f"Unknown batch status: {status}")

        update_data: Dict[str, Any] = {"status": status}
        if error_message:
            update_data["error_message"] = error_message
        if status in (STATUS_COMPLETED, STATUS_ERROR):
            update_data["processed_at"] = _utcnow().isoformat()

        self._execute(
            self.client.table(self.table).update(update_data).eq("id", batch_id),
            "mark status",
        )
        logger.info(f"Updated batch {batch_id} status to {status}")

    def count_pending(self) -> int:
        return self.count_status(STATUS_PENDING)

    def count_status(self, status: str) -> int:
        result = self._execute(
            self.client.table(self.table)
                .select("id", count="exact")
                .eq("status", status),
            "count",
        )
        return result.count or 0

    def count_by_status(self) -> Dict[str, int]:
        """Row count for every batch status."""
        return {status: self.count_status(status) for status in BATCH_STATUSES}

    # ------------------------------------------------------------------
    # Run counters
    # ------------------------------------------------------------------

    def get_counters(self) -> RunCounters:
        result = self._execute(
            self.client.table(self.stats_table).select("*").eq("id", STATS_ROW_ID),
            "read counters",
        )
        if not result.data:
            return RunCounters()
        row = result.data[0]
        return RunCounters(
            synced_count=row.get("synced_count") or 0,
            error_count=row.get("error_count") or 0,
            not_found_count=row.get("not_found_count") or 0,
            last_sync_timestamp=row.get("last_sync_timestamp"),
        )

    def _write_counters(self, payload: Dict[str, Any]) -> None:
        payload = {"id": STATS_ROW_ID, "updated_at": _utcnow().isoformat(), **payload}
        self._execute(
            self.client.table(self.stats_table).upsert(payload, on_conflict="id"),
            "write counters",
        )

    def reset_counters(self) -> None:
        """Zero the three counters; last_sync_timestamp is left as is."""
        self._write_counters({"synced_count": 0, "error_count": 0, "not_found_count": 0})
        logger.info("Run counters reset")

    def accumulate_counters(self, synced: int = 0, errors: int = 0, not_found: int = 0) -> RunCounters:
        """
        Add a batch outcome to the cumulative counters.

        Note: This uses read-then-update which is not atomic against
        concurrent writers; at most one drain tick runs at a time.

        Returns:
            RunCounters: The counters after the update
        """
        current = self.get_counters()
        updated = current.model_copy(update={
            "synced_count": current.synced_count + synced,
            "error_count": current.error_count + errors,
            "not_found_count": current.not_found_count + not_found,
        })
        self._write_counters({
            "synced_count": updated.synced_count,
            "error_count": updated.error_count,
            "not_found_count": updated.not_found_count,
        })
        return updated

    def set_last_sync(self, timestamp: Optional[datetime] = None) -> datetime:
        timestamp = timestamp or _utcnow()
        self._write_counters({"last_sync_timestamp": timestamp.isoformat()})
        logger.info(f"Last sync timestamp set to {timestamp.isoformat()}")
        return timestamp
