"""Caller-side plumbing around the histogram encoder: config, CSV source and sinks."""

from .data_sources import iter_measurements_csv, load_measurements_csv
from .encoder_config import EncoderConfig
from .file_sink import FileSink, FlatBufferSink

__all__ = [
    "EncoderConfig",
    "FileSink",
    "FlatBufferSink",
    "iter_measurements_csv",
    "load_measurements_csv",
]
