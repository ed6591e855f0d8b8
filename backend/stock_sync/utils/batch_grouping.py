"""
Batch grouping — split the token list into fixed-size batches for the remote API.
Version: 1.0.0
"""
import logging
from typing import List, Sequence

from stock_sync.core.constants.sync import DEFAULT_BATCH_SIZE

logger = logging.getLogger("batch_grouping")


def calculate_batch_groups(
    tokens: Sequence[str], max_batch_size: int = DEFAULT_BATCH_SIZE,
) -> List[List[str]]:
    """Group tokens into ordered batches of max_batch_size; the last may be short."""
    if max_batch_size < 1:
        raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")
    batches = []
    current_batch = []
    for token in tokens:
        current_batch.append(token)
        if len(current_batch) >= max_batch_size:
            batches.append(current_batch)
            current_batch = []
    if current_batch:
        batches.append(current_batch)
    return batches
