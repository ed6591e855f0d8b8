"""
Queue schema — DDL for the batch queue and run statistics tables.

PostgREST cannot execute DDL, so this is applied once through the Supabase
SQL editor (or psql). QueueStore.ensure_schema() verifies it is in place.
Version: 1.0.0
"""
from stock_sync.core.constants.sync import QUEUE_TABLE, STATS_ROW_ID, STATS_TABLE

SCHEMA_SQL = f"""
create table if not exists {QUEUE_TABLE} (
    id              uuid primary key,
    run_id          uuid,
    batch_number    integer not null check (batch_number >= 1),
    total_batches   integer not null check (total_batches >= 1),
    token_list      jsonb not null default '[]'::jsonb,
    status          text not null default 'pending'
                    check (status in ('pending', 'processing', 'completed', 'error')),
    created_at      timestamptz not null default now(),
    processed_at    timestamptz,
    error_message   text
);

create index if not exists ix_{QUEUE_TABLE}_status_batch_number
    on {QUEUE_TABLE} (status, batch_number);

create table if not exists {STATS_TABLE} (
    id                  integer primary key,
    synced_count        integer not null default 0,
    error_count         integer not null default 0,
    not_found_count     integer not null default 0,
    last_sync_timestamp timestamptz,
    updated_at          timestamptz not null default now()
);

insert into {STATS_TABLE} (id) values ({STATS_ROW_ID}) on conflict (id) do nothing;
"""
