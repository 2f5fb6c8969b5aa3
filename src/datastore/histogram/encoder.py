"""Histogram encoding pipeline.

validate -> group -> dictionary-encode -> time-normalize -> gap-fill -> assemble.
Every stage raises immediately; nothing is emitted unless the whole batch encodes.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Iterator, Optional, Sequence

from .assembler import HistogramAssembler
from .dictionary import build_segment_dictionary, destination_indices
from .domain_types import Entry, Histogram, Measurement, SegmentHistogram, VehicleType
from .grouping import fill_segment_gaps, iter_segment_runs
from .time_slots import weekly_slot
from .validation import DEFAULT_VEHICLE_TYPES, validate_measurements

logger = logging.getLogger(__name__)


class HistogramEncoder:
    """Turns a sorted batch of measurements into a dense, randomly addressable histogram."""

    def __init__(
        self,
        *,
        supported_vehicle_types: AbstractSet[VehicleType] = DEFAULT_VEHICLE_TYPES,
        check_sorted: bool = True,
        assembler: Optional[HistogramAssembler] = None,
    ) -> None:
        self.supported_vehicle_types = frozenset(supported_vehicle_types)
        self.check_sorted = check_sorted
        self.assembler = assembler or HistogramAssembler()

    def build(self, measurements: Sequence[Measurement]) -> Optional[Histogram]:
        """Return the in-memory histogram, or ``None`` when there is nothing to encode."""
        if not measurements:
            logger.debug("No measurements supplied; nothing to encode")
            return None

        max_segment_id = validate_measurements(
            measurements,
            supported_vehicle_types=self.supported_vehicle_types,
            check_sorted=self.check_sorted,
        )
        segments = tuple(fill_segment_gaps(self._iter_populated(measurements), max_segment_id))
        histogram = Histogram(vehicle_type=measurements[0].vehicle_type, segments=segments)
        logger.debug(
            "Built histogram with %s segments (%s populated, %s entries)",
            histogram.num_segments,
            histogram.populated_segments,
            histogram.num_entries,
        )
        return histogram

    def encode(self, measurements: Sequence[Measurement]) -> Optional[bytes]:
        """Return the serialized histogram, or ``None`` for an empty batch."""
        histogram = self.build(measurements)
        if histogram is None:
            return None
        return self.assembler.assemble(histogram)

    # ---------------------------------------------------------------- internals
    def _iter_populated(self, measurements: Sequence[Measurement]) -> Iterator[SegmentHistogram]:
        record_index = 0
        for segment_id, run in iter_segment_runs(measurements):
            dictionary = build_segment_dictionary(run)
            indices = destination_indices(dictionary, run)
            entries = []
            for offset, (measurement, destination_index) in enumerate(zip(run, indices)):
                entries.append(
                    Entry(
                        weekly_slot=weekly_slot(
                            measurement.time_bucket, record_index=record_index + offset
                        ),
                        destination_index=destination_index,
                        duration_bucket=measurement.duration_bucket,
                        count=measurement.count,
                    )
                )
            record_index += len(run)
            logger.debug(
                "Segment %s: %s entries, %s next segments",
                segment_id,
                len(entries),
                len(dictionary),
            )
            yield SegmentHistogram(
                segment_id=segment_id, dictionary=dictionary, entries=tuple(entries)
            )


def build_histogram(
    measurements: Sequence[Measurement],
    *,
    supported_vehicle_types: AbstractSet[VehicleType] = DEFAULT_VEHICLE_TYPES,
    check_sorted: bool = True,
) -> Optional[Histogram]:
    encoder = HistogramEncoder(
        supported_vehicle_types=supported_vehicle_types, check_sorted=check_sorted
    )
    return encoder.build(measurements)


def encode_histogram(
    measurements: Sequence[Measurement],
    *,
    supported_vehicle_types: AbstractSet[VehicleType] = DEFAULT_VEHICLE_TYPES,
    check_sorted: bool = True,
) -> Optional[bytes]:
    """Encode a sorted measurement batch; ``None`` means there is nothing to write."""
    encoder = HistogramEncoder(
        supported_vehicle_types=supported_vehicle_types, check_sorted=check_sorted
    )
    return encoder.encode(measurements)
