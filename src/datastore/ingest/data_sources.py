"""Streaming helpers for loading measurement CSVs."""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterator, List, Sequence

import pandas as pd

from datastore.histogram.domain_types import BucketSize, Measurement, TimeBucket, VehicleType

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS: Sequence[str] = [
    "segment_id",
    "next_segment_id",
    "time_bucket_index",
    "duration_bucket",
    "count",
]

OPTIONAL_COLUMN_DEFAULTS: Dict[str, str] = {
    "vehicle_type": "auto",
    "time_bucket_size": "hourly",
}

INTEGER_COLUMNS: Sequence[str] = REQUIRED_COLUMNS


def _determine_usecols(csv_path: str) -> List[str]:
    """Return the measurement columns present in the CSV, failing on missing required ones."""
    header_df = pd.read_csv(csv_path, nrows=0)
    available = set(header_df.columns)
    missing_required = [column for column in REQUIRED_COLUMNS if column not in available]
    if missing_required:
        missing_list = ", ".join(missing_required)
        raise ValueError(f"{csv_path} is missing required columns: {missing_list}")
    missing_optional = [column for column in OPTIONAL_COLUMN_DEFAULTS if column not in available]
    if missing_optional:
        logger.debug(
            "Optional columns %s missing in %s; using defaults.",
            ", ".join(missing_optional),
            os.path.basename(csv_path),
        )
    return [
        column
        for column in list(REQUIRED_COLUMNS) + list(OPTIONAL_COLUMN_DEFAULTS)
        if column in available
    ]


def _integer_column(chunk: pd.DataFrame, column: str) -> List[int]:
    """Parse a text column into exact Python ints, rejecting blanks and non-integral values."""
    values = chunk[column]
    if values.isna().any():
        raise ValueError(f"Measurement CSV contains empty values in column {column}")
    parsed: List[int] = []
    for value in values:
        try:
            parsed.append(int(value))
        except ValueError:
            raise ValueError(
                f"Measurement CSV column {column} holds non-integer value {value!r}"
            ) from None
    return parsed


def _chunk_to_measurements(chunk: pd.DataFrame) -> Iterator[Measurement]:
    for column, default in OPTIONAL_COLUMN_DEFAULTS.items():
        if column not in chunk.columns:
            chunk[column] = default
    # Integer columns are read as text and parsed exactly.
    integers = {column: _integer_column(chunk, column) for column in INTEGER_COLUMNS}
    vehicle_types = {value: VehicleType.parse(value) for value in chunk["vehicle_type"].unique()}
    bucket_sizes = {value: BucketSize.parse(value) for value in chunk["time_bucket_size"].unique()}
    rows = zip(
        chunk["vehicle_type"],
        integers["segment_id"],
        integers["next_segment_id"],
        chunk["time_bucket_size"],
        integers["time_bucket_index"],
        integers["duration_bucket"],
        integers["count"],
    )
    for vehicle_type, segment_id, next_segment_id, bucket_size, bucket_index, duration, count in rows:
        yield Measurement(
            vehicle_type=vehicle_types[vehicle_type],
            segment_id=segment_id,
            next_segment_id=next_segment_id,
            time_bucket=TimeBucket(size=bucket_sizes[bucket_size], index=bucket_index),
            duration_bucket=duration,
            count=count,
        )


def iter_measurements_csv(csv_path: str, *, chunksize: int = 250_000) -> Iterator[Measurement]:
    """Yield measurements in file order, reading the CSV in chunks."""
    usecols = _determine_usecols(csv_path)
    reader = pd.read_csv(
        csv_path,
        usecols=usecols,
        chunksize=chunksize,
        dtype={column: str for column in usecols},
    )
    with reader:
        for chunk in reader:
            yield from _chunk_to_measurements(chunk)


def load_measurements_csv(csv_path: str, *, chunksize: int = 250_000) -> List[Measurement]:
    measurements = list(iter_measurements_csv(csv_path, chunksize=chunksize))
    logger.debug("Loaded %s measurements from %s", len(measurements), csv_path)
    return measurements
