from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Tuple

import pytest
from flatbuffers import encode, number_types, packer
from flatbuffers.table import Table

from datastore.histogram import BucketSize, Measurement, TimeBucket, VehicleType
from datastore.histogram.time_slots import hour_index_for_slot


@dataclass
class DecodedSegment:
    table_pos: int
    segment_id: int
    next_segment_ids: List[int] = field(default_factory=list)
    entries: List[Tuple[int, int, int, int]] = field(default_factory=list)
    has_fields: bool = False


@dataclass
class DecodedHistogram:
    vehicle_type: int
    segments: List[DecodedSegment]


def _slot_offset(table: Table, slot: int) -> int:
    return table.Offset(4 + 2 * slot)


def _decode_segment(buf: bytearray, pos: int) -> DecodedSegment:
    table = Table(buf, pos)
    segment = DecodedSegment(table_pos=pos, segment_id=0)

    o = _slot_offset(table, 0)
    if o:
        segment.segment_id = table.Get(number_types.Uint64Flags, o + table.Pos)
        segment.has_fields = True

    o = _slot_offset(table, 1)
    if o:
        start = table.Vector(o)
        for j in range(table.VectorLen(o)):
            segment.next_segment_ids.append(table.Get(number_types.Uint32Flags, start + j * 4))
        segment.has_fields = True

    o = _slot_offset(table, 2)
    if o:
        start = table.Vector(o)
        for j in range(table.VectorLen(o)):
            x = start + j * 8
            segment.entries.append(
                (
                    table.Get(number_types.Uint16Flags, x),
                    table.Get(number_types.Uint8Flags, x + 2),
                    table.Get(number_types.Uint8Flags, x + 3),
                    table.Get(number_types.Uint32Flags, x + 4),
                )
            )
        segment.has_fields = True
    return segment


def read_histogram(data: bytes) -> DecodedHistogram:
    """Minimal reader for histogram.fbs buffers, used as a test oracle."""
    buf = bytearray(data)
    root = encode.Get(packer.uoffset, buf, 0)
    table = Table(buf, root)

    vehicle_type = 0
    o = _slot_offset(table, 0)
    if o:
        vehicle_type = table.Get(number_types.Int8Flags, o + table.Pos)

    segments: List[DecodedSegment] = []
    o = _slot_offset(table, 1)
    if o:
        start = table.Vector(o)
        for j in range(table.VectorLen(o)):
            segments.append(_decode_segment(buf, table.Indirect(start + j * 4)))
    return DecodedHistogram(vehicle_type=vehicle_type, segments=segments)


def make_measurement(
    segment_id: int,
    next_segment_id: int,
    hour_index: int = hour_index_for_slot(0),
    duration_bucket: int = 1,
    count: int = 1,
    vehicle_type: VehicleType = VehicleType.AUTO,
    bucket_size: BucketSize = BucketSize.HOURLY,
) -> Measurement:
    return Measurement(
        vehicle_type=vehicle_type,
        segment_id=segment_id,
        next_segment_id=next_segment_id,
        time_bucket=TimeBucket(size=bucket_size, index=hour_index),
        duration_bucket=duration_bucket,
        count=count,
    )


@pytest.fixture
def decode_histogram() -> Callable[[bytes], DecodedHistogram]:
    return read_histogram


@pytest.fixture
def measurement_factory() -> Callable[..., Measurement]:
    return make_measurement
