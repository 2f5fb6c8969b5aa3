from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Mapping

import yaml

from datastore.histogram.domain_types import VehicleType
from datastore.histogram.encoder import HistogramEncoder

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 250_000


@dataclass(frozen=True)
class EncoderConfig:
    """Encoder settings, usually loaded from a YAML file such as::

        supported_vehicle_types: [auto]
        check_sorted: true
        chunk_size: 250000
    """

    supported_vehicle_types: FrozenSet[VehicleType] = field(
        default_factory=lambda: frozenset({VehicleType.AUTO})
    )
    check_sorted: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if not self.supported_vehicle_types:
            raise ValueError("At least one supported vehicle type is required")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "EncoderConfig":
        if not isinstance(data, Mapping):
            raise TypeError("Encoder config must be a mapping at the top level")
        unknown = sorted(set(data) - {"supported_vehicle_types", "check_sorted", "chunk_size"})
        if unknown:
            logger.warning("Ignoring unknown encoder config keys: %s", ", ".join(unknown))

        raw_types = data.get("supported_vehicle_types", ["auto"])
        if isinstance(raw_types, str) or not isinstance(raw_types, (list, tuple)):
            raise TypeError("'supported_vehicle_types' must be a list of vehicle type names")
        vehicle_types = frozenset(VehicleType.parse(token) for token in raw_types)

        check_sorted = data.get("check_sorted", True)
        if not isinstance(check_sorted, bool):
            raise TypeError("'check_sorted' must be a boolean")

        chunk_size = data.get("chunk_size", DEFAULT_CHUNK_SIZE)
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int):
            raise TypeError("'chunk_size' must be an integer")

        return cls(
            supported_vehicle_types=vehicle_types,
            check_sorted=check_sorted,
            chunk_size=chunk_size,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EncoderConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Encoder config YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        return cls.from_mapping(data)

    def to_mapping(self) -> Dict[str, object]:
        return {
            "supported_vehicle_types": sorted(
                vehicle_type.name.lower() for vehicle_type in self.supported_vehicle_types
            ),
            "check_sorted": self.check_sorted,
            "chunk_size": self.chunk_size,
        }

    def to_yaml(self, path: str | Path) -> None:
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(self.to_mapping(), handle, sort_keys=True)

    def make_encoder(self) -> HistogramEncoder:
        return HistogramEncoder(
            supported_vehicle_types=self.supported_vehicle_types,
            check_sorted=self.check_sorted,
        )
