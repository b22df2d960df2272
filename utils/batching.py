"""
Batch splitting utilities for parallel scanning.

Splits a stream sorted by collision into batches that never cut a collision
in two, so every batch can be scanned by an independent worker.
Uses 1-indexed batches, matching the CLI's --batch-index convention.
"""

import logging
from operator import attrgetter
from typing import Callable

from services.filtering.boundary import iter_groups

logger = logging.getLogger(__name__)


def get_batch_slice(items: list, batch_index: int, total_batches: int) -> list:
    """
    Extract the slice of items for a specific batch.

    Uses even distribution with the last batch absorbing remainder.
    Batch indices are 1-based.

    Args:
        items: Full list of items to split
        batch_index: This batch's index (1-based)
        total_batches: Total number of batches

    Returns:
        Slice of items for this batch
    """
    if not items:
        return []

    batch_index = int(batch_index)
    total_batches = int(total_batches)

    if batch_index < 1 or batch_index > total_batches:
        raise ValueError(f"batch_index must be 1..{total_batches}, got {batch_index}")

    total_items = len(items)
    items_per_batch = total_items // total_batches
    start_idx = (batch_index - 1) * items_per_batch

    if batch_index == total_batches:
        end_idx = total_items  # Last batch gets remainder
    else:
        end_idx = start_idx + items_per_batch

    logger.debug(
        f"Batch {batch_index}/{total_batches}: items[{start_idx}:{end_idx}] "
        f"({end_idx - start_idx} of {total_items})"
    )
    return items[start_idx:end_idx]


def split_at_group_boundaries(
    records: list,
    total_batches: int,
    key: Callable = attrgetter("group_key"),
    validate_order: bool = False,
) -> list[list]:
    """
    Split a sorted record stream into at most ``total_batches`` batches.

    Whole groups are distributed with ``get_batch_slice``; empty batches are
    dropped. Concatenating the batches gives back the input order.

    Args:
        records: Records sorted by group key
        total_batches: Requested number of batches
        key: Returns the group key of a record
        validate_order: Raise PreconditionViolation when a key reappears
            after its group was closed

    Returns:
        List of record batches in stream order
    """
    if total_batches <= 0:
        raise ValueError(f"total_batches must be positive, got {total_batches}")

    groups = [group for _key, group in iter_groups(records, key=key, validate_order=validate_order)]
    if not groups:
        return []

    n_batches = min(total_batches, len(groups))
    batches = []
    for batch_index in range(1, n_batches + 1):
        batch_groups = get_batch_slice(groups, batch_index, n_batches)
        batch = [record for group in batch_groups for record in group]
        if batch:
            batches.append(batch)

    logger.info(
        f"Split {len(records)} records in {len(groups)} groups into {len(batches)} batch(es)"
    )
    return batches
