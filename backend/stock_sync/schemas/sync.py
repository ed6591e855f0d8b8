"""
Sync schemas — queue records, run counters, price context and remote payloads.

Defines the data model of the batch synchronization queue and the
request/response models for the operator routes.
Version: 1.0.0
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from stock_sync.core.constants.sync import STATUS_PENDING


# ---------------------------------------------------------------------------
# Local catalog
# ---------------------------------------------------------------------------

class EntityRef(BaseModel):
    """A sellable entity of the local catalog (simple product or variation)."""
    entity_id: int
    parent_id: Optional[int] = None
    kind: Literal["standalone", "variant"] = "standalone"
    is_virtual: bool = False
    display_name: str = ""
    sku: str = ""


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------

class BatchRecord(BaseModel):
    """One durable unit of queued work: a bounded slice of tokens."""
    id: Optional[str] = None
    run_id: Optional[str] = None
    batch_number: int
    total_batches: int
    token_list: List[str]
    status: str = STATUS_PENDING
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    error_message: Optional[str] = None


class RunCounters(BaseModel):
    """Cumulative statistics of the current synchronization run."""
    synced_count: int = 0
    error_count: int = 0
    not_found_count: int = 0
    last_sync_timestamp: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

class TaxRate(BaseModel):
    """Tax record from the remote tax catalog; rate is a 0-100 percentage."""
    id: str = Field(validation_alias=AliasChoices("uuid", "id"))
    name: str = ""
    family: str = Field(default="", validation_alias=AliasChoices("type", "family"))
    code: str = ""
    rate: float = Field(default=0.0, validation_alias=AliasChoices("percentage", "rate"))


class PriceContext(BaseModel):
    """Read-only snapshot of everything needed to price remote items."""
    tax_rate_table: List[TaxRate] = Field(default_factory=list)
    currency_rate_table: Dict[str, float] = Field(default_factory=dict)
    base_currency_iso: str
    target_currency_iso: str
    store_default_tax_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Remote reconciliation payload
# ---------------------------------------------------------------------------

class ItemPrice(BaseModel):
    amount: float = Field(validation_alias=AliasChoices("amount", "retail_price"))
    source_currency: str = Field(
        validation_alias=AliasChoices("currency_code", "source_currency_code", "source_currency")
    )
    tax_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("tax_uuid", "tax_id"))


class InventoryItem(BaseModel):
    """One remote inventory record; a malformed price sub-object is dropped, not fatal."""
    token_list: List[str] = Field(validation_alias=AliasChoices("sku_list", "token_list"))
    stock_quantity: float = Field(validation_alias=AliasChoices("quantity", "stock_quantity"))
    price: Optional[ItemPrice] = None

    @field_validator("price", mode="before")
    @classmethod
    def _drop_malformed_price(cls, value):
        if value is None or isinstance(value, ItemPrice):
            return value
        try:
            return ItemPrice.model_validate(value)
        except ValidationError:
            return None


# ---------------------------------------------------------------------------
# Batch outcome
# ---------------------------------------------------------------------------

class BatchOutcome(BaseModel):
    """
    Result of reconciling one batch.

    error_message is set only for the error variant (remote call failed or
    the response was unusable); the whole batch is then counted as errored.
    """
    synced: int = 0
    errors: int = 0
    not_found: int = 0
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_message is None

    @classmethod
    def failed(cls, token_count: int, message: str) -> "BatchOutcome":
        return cls(synced=0, errors=token_count, not_found=0, error_message=message)

    def as_tuple(self) -> tuple[int, int, int]:
        return self.synced, self.errors, self.not_found


# ---------------------------------------------------------------------------
# Operator routes
# ---------------------------------------------------------------------------

class QueueCounts(BaseModel):
    pending: int = 0
    processing: int = 0
    completed: int = 0
    error: int = 0


class SyncStatusResponse(BaseModel):
    """Cumulative counters plus queue state."""
    synced_count: int
    error_count: int
    not_found_count: int
    last_sync_timestamp: Optional[str]
    queue: QueueCounts
    drain_registered: bool
    sync_enabled: bool


class SyncTriggerResponse(BaseModel):
    status: str
    task_id: Optional[str] = None
    message: str


class QueueClearResponse(BaseModel):
    deleted: int
    message: str
