"""Segment travel-time histogram encoder."""

from .assembler import HistogramAssembler, assemble_histogram
from .dictionary import MAX_DICTIONARY_SIZE, build_segment_dictionary, destination_indices
from .domain_types import (
    NULL_SEGMENT,
    BucketSize,
    Entry,
    Histogram,
    Measurement,
    SegmentHistogram,
    TimeBucket,
    VehicleType,
)
from .encoder import HistogramEncoder, build_histogram, encode_histogram
from .errors import CapacityExceeded, DefectError, HistogramError, InputContractViolation
from .grouping import fill_segment_gaps, iter_segment_runs
from .time_slots import EPOCH_OFFSET_HOURS, HOURS_PER_WEEK, hour_index_for_slot, weekly_slot
from .validation import MAX_SEGMENT_ID_EXCLUSIVE, validate_measurements

__all__ = [
    "BucketSize",
    "CapacityExceeded",
    "DefectError",
    "EPOCH_OFFSET_HOURS",
    "Entry",
    "HOURS_PER_WEEK",
    "Histogram",
    "HistogramAssembler",
    "HistogramEncoder",
    "HistogramError",
    "InputContractViolation",
    "MAX_DICTIONARY_SIZE",
    "MAX_SEGMENT_ID_EXCLUSIVE",
    "Measurement",
    "NULL_SEGMENT",
    "SegmentHistogram",
    "TimeBucket",
    "VehicleType",
    "assemble_histogram",
    "build_histogram",
    "build_segment_dictionary",
    "destination_indices",
    "encode_histogram",
    "fill_segment_gaps",
    "hour_index_for_slot",
    "iter_segment_runs",
    "validate_measurements",
    "weekly_slot",
]
