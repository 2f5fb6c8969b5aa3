"""Mapping of absolute hourly buckets onto hour-of-week slots."""

from __future__ import annotations

from typing import Optional

from .domain_types import BucketSize, TimeBucket
from .errors import InputContractViolation

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7
HOURS_PER_WEEK = HOURS_PER_DAY * DAYS_PER_WEEK

# Hour index that lands on weekly slot 0 under the upstream epoch definition.
EPOCH_OFFSET_HOURS = 96


def weekly_slot(time_bucket: TimeBucket, *, record_index: Optional[int] = None) -> int:
    """Return the hour-of-week slot in [0, HOURS_PER_WEEK) for an hourly bucket."""
    if time_bucket.size is not BucketSize.HOURLY:
        raise InputContractViolation(
            f"Only hourly time buckets can be encoded, got {time_bucket.size.value!r}",
            record_index=record_index,
        )
    return (int(time_bucket.index) - EPOCH_OFFSET_HOURS) % HOURS_PER_WEEK


def hour_index_for_slot(slot: int, week: int = 0) -> int:
    """Inverse of ``weekly_slot``: an absolute hour index that falls on ``slot``."""
    if slot < 0 or slot >= HOURS_PER_WEEK:
        raise ValueError(f"Weekly slot must be in [0, {HOURS_PER_WEEK}), got {slot}")
    return EPOCH_OFFSET_HOURS + week * HOURS_PER_WEEK + slot
