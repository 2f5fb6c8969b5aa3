"""Per-segment destination dictionaries.

Each segment keeps the sorted set of next-segment ids it was observed turning
into, so entries can refer to their destination with a one-byte index.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .domain_types import Measurement
from .errors import CapacityExceeded, DefectError

MAX_DICTIONARY_SIZE = 255


def build_segment_dictionary(run: Sequence[Measurement]) -> Tuple[int, ...]:
    """Return the sorted, de-duplicated next segment ids of one segment run."""
    if not run:
        return ()
    next_ids = np.unique(
        np.fromiter((m.next_segment_id for m in run), dtype=np.int64, count=len(run))
    )
    if next_ids.size > MAX_DICTIONARY_SIZE:
        raise CapacityExceeded(
            f"{next_ids.size} distinct next segments exceed the limit of {MAX_DICTIONARY_SIZE}",
            segment_id=run[0].segment_id,
        )
    return tuple(int(next_id) for next_id in next_ids)


def destination_indices(
    dictionary: Sequence[int], run: Sequence[Measurement]
) -> List[int]:
    """Binary-search each record's next segment id in ``dictionary``."""
    if not run:
        return []
    keys = np.asarray(dictionary, dtype=np.int64)
    targets = np.fromiter((m.next_segment_id for m in run), dtype=np.int64, count=len(run))
    positions = np.searchsorted(keys, targets)
    # searchsorted returns an insertion point; anything not landing on an equal key is missing
    found = positions < keys.size
    found[found] = keys[positions[found]] == targets[found]
    if not found.all():
        missing = int(np.flatnonzero(~found)[0])
        raise DefectError(
            f"Next segment id {run[missing].next_segment_id} missing from its dictionary",
            segment_id=run[missing].segment_id,
        )
    return positions.tolist()
