"""
Sync constants — batch sizing, scheduler cadence, queue statuses.

Every tunable of the batch synchronization queue lives here.
Version: 1.0.0
"""

# Tokens per remote reconciliation call
DEFAULT_BATCH_SIZE: int = 500

# Seconds between drain ticks
DEFAULT_DRAIN_INTERVAL_SECONDS: int = 60

# Full synchronization cadence (minutes); anything below the minimum is rejected
DEFAULT_FULL_RUN_MINUTES: int = 720
MIN_FULL_RUN_MINUTES: int = 10

# Reconciliation payload scales with batch size
MIN_REMOTE_TIMEOUT_SECONDS: int = 60

# Computed prices below this are never written
MIN_PRICE: float = 0.01

# Synthetic token for entities without a native SKU: LOCAL-<entity id>
LOCAL_TOKEN_PREFIX: str = "LOCAL-"

# BatchRecord statuses
STATUS_PENDING: str = "pending"
STATUS_PROCESSING: str = "processing"
STATUS_COMPLETED: str = "completed"
STATUS_ERROR: str = "error"

BATCH_STATUSES: tuple = (STATUS_PENDING, STATUS_PROCESSING, STATUS_COMPLETED, STATUS_ERROR)

# Supabase tables
QUEUE_TABLE: str = "sync_batch_queue"
STATS_TABLE: str = "sync_run_stats"
STATS_ROW_ID: int = 1

# Redis key holding the drain trigger registration
DRAIN_REGISTRATION_KEY: str = "stock_sync:drain_registered"
