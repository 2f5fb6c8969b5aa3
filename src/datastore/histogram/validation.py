"""Input contract checks run before any histogram is built."""

from __future__ import annotations

import logging
from typing import AbstractSet, Sequence

from .domain_types import Measurement, VehicleType
from .errors import CapacityExceeded, InputContractViolation

logger = logging.getLogger(__name__)

# Segment ids double as dense array indices and must stay below the signed 32-bit limit.
MAX_SEGMENT_ID_EXCLUSIVE = 2**31 - 1
MAX_NEXT_SEGMENT_ID = 2**32 - 1
MAX_DURATION_BUCKET = 2**8 - 1
MAX_COUNT = 2**32 - 1

DEFAULT_VEHICLE_TYPES: AbstractSet[VehicleType] = frozenset({VehicleType.AUTO})


def validate_measurements(
    measurements: Sequence[Measurement],
    *,
    supported_vehicle_types: AbstractSet[VehicleType] = DEFAULT_VEHICLE_TYPES,
    check_sorted: bool = True,
) -> int:
    """
    Check the whole batch and return its maximum segment id.

    Args:
        measurements: Non-empty records sorted by (segment_id, next_segment_id).
        supported_vehicle_types: Vehicle types the histogram format accepts.
        check_sorted: Reject batches whose segment ids decrease. When disabled,
            sortedness is trusted and unsorted input produces split runs.
    Raises:
        InputContractViolation: mixed/unsupported vehicle types, negative ids or
            unsorted segment ids.
        CapacityExceeded: a segment id, next segment id, duration bucket or count
            does not fit its width in the binary layout.
    """
    if not measurements:
        raise InputContractViolation("Cannot validate an empty measurement batch")

    vehicle_type = measurements[0].vehicle_type
    if vehicle_type not in supported_vehicle_types:
        raise InputContractViolation(
            f"Unsupported vehicle type {vehicle_type.name}", record_index=0
        )

    max_segment_id = -1
    previous_segment_id = -1
    for index, measurement in enumerate(measurements):
        if measurement.vehicle_type != vehicle_type:
            raise InputContractViolation(
                "A histogram holds a single vehicle type; found "
                f"{measurement.vehicle_type.name} after {vehicle_type.name}",
                record_index=index,
            )
        segment_id = measurement.segment_id
        if segment_id < 0:
            raise InputContractViolation(
                "Segment ids must be non-negative", segment_id=segment_id, record_index=index
            )
        if segment_id >= MAX_SEGMENT_ID_EXCLUSIVE:
            raise CapacityExceeded(
                f"Segment id must be below {MAX_SEGMENT_ID_EXCLUSIVE}",
                segment_id=segment_id,
                record_index=index,
            )
        if check_sorted and segment_id < previous_segment_id:
            raise InputContractViolation(
                f"Measurements must be sorted by segment id; {segment_id} follows "
                f"{previous_segment_id}",
                segment_id=segment_id,
                record_index=index,
            )
        if measurement.next_segment_id < 0:
            raise InputContractViolation(
                "Next segment ids must be non-negative",
                segment_id=segment_id,
                record_index=index,
            )
        if measurement.next_segment_id > MAX_NEXT_SEGMENT_ID:
            raise CapacityExceeded(
                f"Next segment id {measurement.next_segment_id} does not fit 32 bits",
                segment_id=segment_id,
                record_index=index,
            )
        if not 0 <= measurement.duration_bucket <= MAX_DURATION_BUCKET:
            raise CapacityExceeded(
                f"Duration bucket {measurement.duration_bucket} does not fit one byte",
                segment_id=segment_id,
                record_index=index,
            )
        if not 0 <= measurement.count <= MAX_COUNT:
            raise CapacityExceeded(
                f"Count {measurement.count} does not fit 32 bits",
                segment_id=segment_id,
                record_index=index,
            )
        previous_segment_id = segment_id
        max_segment_id = max(max_segment_id, segment_id)

    logger.debug(
        "Validated %s measurements for %s (max segment id %s)",
        len(measurements),
        vehicle_type.name,
        max_segment_id,
    )
    return max_segment_id
