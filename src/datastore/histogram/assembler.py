"""Serialize an in-memory ``Histogram`` into a FlatBuffers buffer."""

from __future__ import annotations

import logging
from typing import Callable, Sequence, TypeVar

import flatbuffers

from . import flatbuffer_schema as schema
from .domain_types import Entry, Histogram, SegmentHistogram
from .errors import DefectError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistogramAssembler:
    """Writes a histogram into a single back-to-front FlatBuffers arena.

    The builder grows from the end of its buffer towards the front, so the item
    prepended last ends up first. ``_create_vector`` is the only place where
    vectors are written and it feeds items in reverse so the encoded vectors keep
    the logical order of their inputs.
    """

    def __init__(self, initial_size: int = 1024) -> None:
        self.initial_size = int(initial_size)

    def assemble(self, histogram: Histogram) -> bytes:
        builder = flatbuffers.Builder(self.initial_size)

        # Shared empty table that every unobserved segment id points at.
        schema.segment_start(builder)
        null_offset = schema.segment_end(builder)

        segment_offsets = []
        for segment in histogram.segments:
            if segment.is_null:
                segment_offsets.append(null_offset)
            else:
                segment_offsets.append(self._write_segment(builder, segment))

        segments_vector = self._create_vector(
            builder,
            segment_offsets,
            element_size=schema.UOFFSET_SIZE,
            alignment=schema.UOFFSET_SIZE,
            prepend=builder.PrependUOffsetTRelative,
        )

        schema.histogram_start(builder)
        schema.histogram_add_vehicle_type(builder, int(histogram.vehicle_type))
        schema.histogram_add_segments(builder, segments_vector)
        root = schema.histogram_end(builder)
        builder.Finish(root)

        buffer = bytes(builder.Output())
        logger.debug(
            "Assembled %s segments (%s populated) into %s bytes",
            histogram.num_segments,
            histogram.populated_segments,
            len(buffer),
        )
        return buffer

    # ------------------------------------------------------------------ tables
    def _write_segment(self, builder: flatbuffers.Builder, segment: SegmentHistogram) -> int:
        size = len(segment.dictionary)
        for entry in segment.entries:
            if entry.destination_index >= size:
                raise DefectError(
                    f"Entry destination index {entry.destination_index} outside a "
                    f"dictionary of {size}",
                    segment_id=segment.segment_id,
                )

        next_ids_vector = self._create_vector(
            builder,
            segment.dictionary,
            element_size=schema.UINT32_SIZE,
            alignment=schema.UINT32_SIZE,
            prepend=builder.PrependUint32,
        )

        def prepend_entry(entry: Entry) -> None:
            schema.create_entry(
                builder,
                entry.weekly_slot,
                entry.destination_index,
                entry.duration_bucket,
                entry.count,
            )

        entries_vector = self._create_vector(
            builder,
            segment.entries,
            element_size=schema.ENTRY_SIZE,
            alignment=schema.ENTRY_ALIGNMENT,
            prepend=prepend_entry,
        )

        schema.segment_start(builder)
        schema.segment_add_segment_id(builder, segment.segment_id)
        schema.segment_add_next_segment_ids(builder, next_ids_vector)
        schema.segment_add_entries(builder, entries_vector)
        return schema.segment_end(builder)

    # ----------------------------------------------------------------- vectors
    @staticmethod
    def _create_vector(
        builder: flatbuffers.Builder,
        items: Sequence[T],
        *,
        element_size: int,
        alignment: int,
        prepend: Callable[[T], object],
    ) -> int:
        builder.StartVector(element_size, len(items), alignment)
        for item in reversed(items):
            prepend(item)
        return builder.EndVector()


def assemble_histogram(histogram: Histogram, *, initial_size: int = 1024) -> bytes:
    """Convenience wrapper around ``HistogramAssembler.assemble``."""
    return HistogramAssembler(initial_size=initial_size).assemble(histogram)
