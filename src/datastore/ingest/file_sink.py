"""Sinks that persist a batch of measurements to a binary stream."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Sequence

from datastore.histogram.domain_types import Measurement
from datastore.histogram.encoder import HistogramEncoder

logger = logging.getLogger(__name__)


class FileSink(ABC):
    """Writes one batch of measurements and closes its output."""

    @abstractmethod
    def write(self, measurements: Sequence[Measurement]) -> int:
        """Persist ``measurements``; return the number of bytes written."""


class FlatBufferSink(FileSink):
    """Encodes measurements as a FlatBuffers histogram.

    The complete buffer is handed to the stream in a single write. Empty batches
    write nothing. The stream is closed in both cases, and also when encoding fails.
    """

    def __init__(self, output: BinaryIO, encoder: Optional[HistogramEncoder] = None) -> None:
        self.output = output
        self.encoder = encoder or HistogramEncoder()

    def write(self, measurements: Sequence[Measurement]) -> int:
        try:
            buffer = self.encoder.encode(measurements)
            if buffer is None:
                logger.info("No measurements to write; leaving output empty")
                return 0
            self.output.write(buffer)
            logger.debug("Wrote %s byte histogram", len(buffer))
            return len(buffer)
        finally:
            self.output.close()
