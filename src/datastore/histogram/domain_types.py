"""Core dataclasses shared across the histogram package."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Tuple


class VehicleType(IntEnum):
    """Category of traversal; the ordinal is written as a single byte."""

    AUTO = 0
    BUS = 1
    TRUCK = 2

    @classmethod
    def parse(cls, value: object) -> "VehicleType":
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        token = str(value or "").strip().upper()
        if not token:
            raise ValueError("Vehicle type cannot be empty")
        try:
            return cls[token]
        except KeyError as exc:
            raise ValueError(f"Unknown vehicle type {value!r}") from exc


class BucketSize(Enum):
    """Granularity of a time bucket."""

    HOURLY = "hourly"
    DAILY = "daily"

    @classmethod
    def parse(cls, value: object) -> "BucketSize":
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        for member in cls:
            if member.value == token:
                return member
        raise ValueError(f"Unknown time bucket size {value!r}")


@dataclass(frozen=True)
class TimeBucket:
    """Absolute time bucket; for HOURLY buckets ``index`` counts hours since the epoch."""

    size: BucketSize
    index: int


@dataclass(frozen=True)
class Measurement:
    """Single observation: ``count`` traversals of a segment towards ``next_segment_id``."""

    vehicle_type: VehicleType
    segment_id: int
    next_segment_id: int
    time_bucket: TimeBucket
    duration_bucket: int
    count: int


@dataclass(frozen=True)
class Entry:
    """Fixed-width histogram cell for one measurement."""

    weekly_slot: int
    destination_index: int
    duration_bucket: int
    count: int


@dataclass(frozen=True)
class SegmentHistogram:
    """Observations of one segment, with destinations compressed through ``dictionary``.

    ``segment_id`` is ``None`` only for the shared null segment, which stands for
    "never observed" and is distinct from a segment observed with zero counts.
    """

    segment_id: Optional[int]
    dictionary: Tuple[int, ...] = ()
    entries: Tuple[Entry, ...] = ()

    @property
    def is_null(self) -> bool:
        return self.segment_id is None

    def next_segment_id(self, entry: Entry) -> int:
        """Resolve an entry's destination index back to the next segment id."""
        return self.dictionary[entry.destination_index]


NULL_SEGMENT = SegmentHistogram(segment_id=None)


@dataclass(frozen=True)
class Histogram:
    """Dense per-segment histogram for a single vehicle type.

    ``segments[i]`` holds segment ``i``; ids without observations point at
    ``NULL_SEGMENT``.
    """

    vehicle_type: VehicleType
    segments: Tuple[SegmentHistogram, ...] = field(default_factory=tuple)

    @property
    def num_segments(self) -> int:
        return len(self.segments)

    @property
    def max_segment_id(self) -> int:
        return len(self.segments) - 1

    @property
    def populated_segments(self) -> int:
        return sum(1 for segment in self.segments if not segment.is_null)

    @property
    def num_entries(self) -> int:
        return sum(len(segment.entries) for segment in self.segments)

    def segment(self, segment_id: int) -> SegmentHistogram:
        if segment_id < 0 or segment_id >= len(self.segments):
            raise IndexError(f"Segment id {segment_id} outside 0..{self.max_segment_id}")
        return self.segments[segment_id]
