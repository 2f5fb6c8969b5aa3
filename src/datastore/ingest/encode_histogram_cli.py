"""CLI entry point that encodes a sorted measurement CSV into a histogram file."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Iterable, List

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from datastore.histogram.domain_types import Measurement
from datastore.histogram.errors import HistogramError
from datastore.ingest.data_sources import iter_measurements_csv
from datastore.ingest.encoder_config import EncoderConfig
from datastore.ingest.file_sink import FlatBufferSink

logger = logging.getLogger(__name__)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--measurements-csv",
        required=True,
        help="CSV of measurements sorted by segment_id, then next_segment_id.",
    )
    parser.add_argument(
        "--output",
        required=True,
        help="Destination path for the encoded histogram.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional encoder configuration YAML.",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Rows per CSV chunk (overrides the config value).",
    )
    parser.add_argument(
        "--no-check-sorted",
        action="store_true",
        help="Trust the input ordering instead of checking it.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity for the CLI logger.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _load_config(args: argparse.Namespace) -> EncoderConfig:
    config = EncoderConfig.from_yaml(args.config) if args.config else EncoderConfig()
    overrides = config.to_mapping()
    if args.chunk_size is not None:
        overrides["chunk_size"] = args.chunk_size
    if args.no_check_sorted:
        overrides["check_sorted"] = False
    return EncoderConfig.from_mapping(overrides)


def _read_measurements(csv_path: str, chunk_size: int) -> List[Measurement]:
    progress_console = Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(bar_width=None),
        TextColumn("{task.completed:,} measurements", justify="right"),
        TimeElapsedColumn(),
        console=progress_console,
        transient=True,
        disable=not progress_console.is_terminal,
    )
    measurements: List[Measurement] = []
    with progress:
        task = progress.add_task("Reading measurements", total=None)
        for measurement in iter_measurements_csv(csv_path, chunksize=chunk_size):
            measurements.append(measurement)
            progress.advance(task, 1)
    return measurements


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = _load_config(args)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        logger.error("Invalid encoder configuration %s: %s", args.config, exc)
        return 1

    logger.info("Loading measurements from %s", args.measurements_csv)
    try:
        measurements = _read_measurements(args.measurements_csv, config.chunk_size)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to read %s: %s", args.measurements_csv, exc)
        return 1
    logger.info("Loaded %s measurements", len(measurements))

    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    sink = FlatBufferSink(open(args.output, "wb"), encoder=config.make_encoder())
    try:
        written = sink.write(measurements)
    except HistogramError as exc:
        logger.error("Failed to encode %s: %s", args.measurements_csv, exc)
        os.remove(args.output)
        return 1

    if written:
        logger.info("Histogram (%s bytes) written to %s", written, args.output)
    else:
        logger.info("No measurements found; wrote empty %s", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
