"""Segment run grouping and dense (gap-filled) segment arrays."""

from __future__ import annotations

from itertools import groupby
from operator import attrgetter
from typing import Iterable, Iterator, List, Tuple

from .domain_types import NULL_SEGMENT, Measurement, SegmentHistogram
from .errors import DefectError, InputContractViolation


def iter_segment_runs(
    measurements: Iterable[Measurement],
) -> Iterator[Tuple[int, List[Measurement]]]:
    """Yield ``(segment_id, run)`` for each maximal run of records sharing a segment id.

    The input is expected to be sorted by segment id; it is not re-sorted here.
    """
    for segment_id, run in groupby(measurements, key=attrgetter("segment_id")):
        yield segment_id, list(run)


def fill_segment_gaps(
    segments: Iterable[SegmentHistogram], max_segment_id: int
) -> Iterator[SegmentHistogram]:
    """Expand populated segments into a dense sequence covering ``0..max_segment_id``.

    Ids without a populated segment are filled with the shared ``NULL_SEGMENT``.
    """
    next_segment_id = 0
    for segment in segments:
        segment_id = segment.segment_id
        if segment_id is None:
            raise DefectError("Null segments cannot be passed as populated segments")
        if segment_id < next_segment_id:
            raise InputContractViolation(
                "Segments must arrive in strictly ascending id order", segment_id=segment_id
            )
        if segment_id > max_segment_id:
            raise DefectError(
                f"Segment id beyond the declared maximum {max_segment_id}",
                segment_id=segment_id,
            )
        while next_segment_id < segment_id:
            yield NULL_SEGMENT
            next_segment_id += 1
        yield segment
        next_segment_id = segment_id + 1

    while next_segment_id <= max_segment_id:
        yield NULL_SEGMENT
        next_segment_id += 1
