"""Write-side FlatBuffers helpers for the tables and structs in ``histogram.fbs``."""

from __future__ import annotations

import flatbuffers

# Field slots, in schema declaration order.
SEGMENT_SEGMENT_ID_SLOT = 0
SEGMENT_NEXT_SEGMENT_IDS_SLOT = 1
SEGMENT_ENTRIES_SLOT = 2
SEGMENT_NUM_FIELDS = 3

HISTOGRAM_VEHICLE_TYPE_SLOT = 0
HISTOGRAM_SEGMENTS_SLOT = 1
HISTOGRAM_NUM_FIELDS = 2

# Entry struct: ushort, ubyte, ubyte, uint.
ENTRY_SIZE = 8
ENTRY_ALIGNMENT = 4

UINT32_SIZE = 4
UOFFSET_SIZE = 4


def create_entry(
    builder: flatbuffers.Builder,
    epoch_hour: int,
    next_segment_idx: int,
    duration_bucket: int,
    count: int,
) -> int:
    """Prepend one inline Entry struct; fields go in reverse declaration order."""
    builder.Prep(ENTRY_ALIGNMENT, ENTRY_SIZE)
    builder.PrependUint32(count)
    builder.PrependUint8(duration_bucket)
    builder.PrependUint8(next_segment_idx)
    builder.PrependUint16(epoch_hour)
    return builder.Offset()


def segment_start(builder: flatbuffers.Builder) -> None:
    builder.StartObject(SEGMENT_NUM_FIELDS)


def segment_add_segment_id(builder: flatbuffers.Builder, segment_id: int) -> None:
    builder.PrependUint64Slot(SEGMENT_SEGMENT_ID_SLOT, segment_id, 0)


def segment_add_next_segment_ids(builder: flatbuffers.Builder, offset: int) -> None:
    builder.PrependUOffsetTRelativeSlot(SEGMENT_NEXT_SEGMENT_IDS_SLOT, offset, 0)


def segment_add_entries(builder: flatbuffers.Builder, offset: int) -> None:
    builder.PrependUOffsetTRelativeSlot(SEGMENT_ENTRIES_SLOT, offset, 0)


def segment_end(builder: flatbuffers.Builder) -> int:
    return builder.EndObject()


def histogram_start(builder: flatbuffers.Builder) -> None:
    builder.StartObject(HISTOGRAM_NUM_FIELDS)


def histogram_add_vehicle_type(builder: flatbuffers.Builder, vehicle_type: int) -> None:
    builder.PrependInt8Slot(HISTOGRAM_VEHICLE_TYPE_SLOT, vehicle_type, 0)


def histogram_add_segments(builder: flatbuffers.Builder, offset: int) -> None:
    builder.PrependUOffsetTRelativeSlot(HISTOGRAM_SEGMENTS_SLOT, offset, 0)


def histogram_end(builder: flatbuffers.Builder) -> int:
    return builder.EndObject()
