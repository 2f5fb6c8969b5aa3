"""
Exception types raised while encoding segment histograms.

- InputContractViolation for records that break the input contract (mixed or
  unsupported vehicle types, non-hourly buckets, negative ids, unsorted input).
- CapacityExceeded for values that do not fit the wire format (segment ids past
  the addressing width, more than 255 destinations, oversized fields).
- DefectError for broken internal invariants; these indicate a bug, not bad input.

Every error aborts the whole encode. No partial buffer is produced.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "HistogramError",
    "InputContractViolation",
    "CapacityExceeded",
    "DefectError",
]


class HistogramError(Exception):
    """
    Base class for histogram encoding failures.

    Attributes:
        segment_id: Offending segment id, when known.
        record_index: Position of the offending record in the input, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        segment_id: Optional[int] = None,
        record_index: Optional[int] = None,
    ) -> None:
        self.segment_id = segment_id
        self.record_index = record_index
        details = []
        if segment_id is not None:
            details.append(f"segment_id={segment_id}")
        if record_index is not None:
            details.append(f"record_index={record_index}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class InputContractViolation(HistogramError, ValueError):
    """Input records violate the encoder's contract."""


class CapacityExceeded(HistogramError, ValueError):
    """A value does not fit the width reserved for it in the binary layout."""


class DefectError(HistogramError, RuntimeError):
    """An internal invariant was broken while encoding."""
