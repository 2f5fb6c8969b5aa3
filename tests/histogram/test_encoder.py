from __future__ import annotations

import random

import pytest

from datastore.histogram import (
    NULL_SEGMENT,
    BucketSize,
    CapacityExceeded,
    Histogram,
    HistogramEncoder,
    InputContractViolation,
    SegmentHistogram,
    VehicleType,
    assemble_histogram,
    build_histogram,
    encode_histogram,
    weekly_slot,
)
from datastore.histogram.domain_types import Entry


def _example_records(measurement_factory):
    return [
        measurement_factory(2, 5, hour_index=100, duration_bucket=1, count=3),
        measurement_factory(2, 7, hour_index=100, duration_bucket=2, count=1),
        measurement_factory(4, 5, hour_index=101, duration_bucket=1, count=9),
    ]


def test_example_histogram_layout(measurement_factory):
    histogram = build_histogram(_example_records(measurement_factory))

    assert histogram.vehicle_type is VehicleType.AUTO
    assert histogram.num_segments == 5
    assert histogram.populated_segments == 2
    assert histogram.num_entries == 3
    for segment_id in (0, 1, 3):
        assert histogram.segment(segment_id) is NULL_SEGMENT

    two = histogram.segment(2)
    assert two.segment_id == 2
    assert two.dictionary == (5, 7)
    assert [entry.destination_index for entry in two.entries] == [0, 1]
    assert two.entries[0] == Entry(weekly_slot=4, destination_index=0, duration_bucket=1, count=3)

    four = histogram.segment(4)
    assert four.dictionary == (5,)
    assert four.entries == (Entry(weekly_slot=5, destination_index=0, duration_bucket=1, count=9),)


def test_example_buffer_decodes(measurement_factory, decode_histogram):
    data = encode_histogram(_example_records(measurement_factory))
    assert isinstance(data, bytes)

    decoded = decode_histogram(data)
    assert decoded.vehicle_type == int(VehicleType.AUTO)
    assert len(decoded.segments) == 5

    null_positions = {decoded.segments[i].table_pos for i in (0, 1, 3)}
    assert len(null_positions) == 1
    assert not decoded.segments[0].has_fields

    two = decoded.segments[2]
    assert two.segment_id == 2
    assert two.next_segment_ids == [5, 7]
    assert two.entries == [(4, 0, 1, 3), (4, 1, 2, 1)]

    four = decoded.segments[4]
    assert four.segment_id == 4
    assert four.next_segment_ids == [5]
    assert four.entries == [(5, 0, 1, 9)]


def test_empty_input_produces_no_output():
    assert build_histogram([]) is None
    assert encode_histogram([]) is None


def test_single_segment_zero(measurement_factory, decode_histogram):
    decoded = decode_histogram(encode_histogram([measurement_factory(0, 3, count=0)]))
    assert len(decoded.segments) == 1
    segment = decoded.segments[0]
    # observed with zero traversals is still a real segment
    assert segment.has_fields
    assert segment.next_segment_ids == [3]
    assert segment.entries == [(0, 0, 1, 0)]


def test_round_trip_preserves_every_record(measurement_factory, decode_histogram):
    rng = random.Random(7)
    records = []
    for segment_id in sorted(rng.sample(range(200), 40)):
        next_ids = sorted(rng.choice(range(1000)) for _ in range(rng.randint(1, 12)))
        for next_id in next_ids:
            records.append(
                measurement_factory(
                    segment_id,
                    next_id,
                    hour_index=rng.randint(0, 500_000),
                    duration_bucket=rng.randint(0, 255),
                    count=rng.randint(0, 2**32 - 1),
                )
            )

    decoded = decode_histogram(encode_histogram(records))
    max_segment_id = records[-1].segment_id
    assert len(decoded.segments) == max_segment_id + 1

    observed = set()
    expected_by_segment = {}
    for record in records:
        observed.add(record.segment_id)
        expected_by_segment.setdefault(record.segment_id, []).append(
            (
                record.next_segment_id,
                weekly_slot(record.time_bucket),
                record.duration_bucket,
                record.count,
            )
        )

    for segment_id, segment in enumerate(decoded.segments):
        if segment_id not in observed:
            assert not segment.has_fields
            continue
        dictionary = segment.next_segment_ids
        assert all(a < b for a, b in zip(dictionary, dictionary[1:]))
        actual = [
            (dictionary[index], slot, duration, count)
            for slot, index, duration, count in segment.entries
        ]
        assert actual == expected_by_segment[segment_id]

    histogram = build_histogram(records)
    for segment_id in observed:
        segment = histogram.segment(segment_id)
        resolved = [
            (segment.next_segment_id(entry), entry.weekly_slot, entry.duration_bucket, entry.count)
            for entry in segment.entries
        ]
        assert resolved == expected_by_segment[segment_id]


def test_mixed_vehicle_types_raise(measurement_factory):
    records = [
        measurement_factory(0, 1),
        measurement_factory(1, 1, vehicle_type=VehicleType.BUS),
    ]
    with pytest.raises(InputContractViolation):
        encode_histogram(records)


def test_256_destinations_raise(measurement_factory):
    records = [measurement_factory(3, next_id) for next_id in range(256)]
    with pytest.raises(CapacityExceeded):
        encode_histogram(records)


def test_non_hourly_bucket_reports_record_index(measurement_factory):
    records = [
        measurement_factory(0, 1),
        measurement_factory(1, 1),
        measurement_factory(1, 2, bucket_size=BucketSize.DAILY),
    ]
    with pytest.raises(InputContractViolation) as excinfo:
        encode_histogram(records)
    assert excinfo.value.record_index == 2


def test_unsorted_input_fails_fast_even_when_trusted(measurement_factory):
    records = [measurement_factory(3, 1), measurement_factory(1, 1)]
    with pytest.raises(InputContractViolation):
        encode_histogram(records)
    with pytest.raises(InputContractViolation):
        encode_histogram(records, check_sorted=False)


def test_encoder_uses_configured_vehicle_types(measurement_factory, decode_histogram):
    encoder = HistogramEncoder(supported_vehicle_types={VehicleType.TRUCK})
    data = encoder.encode([measurement_factory(1, 2, vehicle_type=VehicleType.TRUCK)])
    assert decode_histogram(data).vehicle_type == int(VehicleType.TRUCK)


def test_assembler_keeps_entry_and_segment_order(decode_histogram):
    entries = tuple(
        Entry(weekly_slot=slot, destination_index=slot % 3, duration_bucket=slot, count=slot * 10)
        for slot in range(20)
    )
    segments = (
        SegmentHistogram(segment_id=0, dictionary=(10, 20, 30), entries=entries),
        NULL_SEGMENT,
        SegmentHistogram(segment_id=2, dictionary=(1, 2, 3), entries=entries[::-1]),
    )
    decoded = decode_histogram(assemble_histogram(Histogram(VehicleType.AUTO, segments)))
    assert [segment.segment_id for segment in decoded.segments] == [0, 0, 2]
    assert decoded.segments[0].entries == [
        (e.weekly_slot, e.destination_index, e.duration_bucket, e.count) for e in entries
    ]
    assert decoded.segments[2].entries == [
        (e.weekly_slot, e.destination_index, e.duration_bucket, e.count) for e in entries[::-1]
    ]
    assert not decoded.segments[1].has_fields
