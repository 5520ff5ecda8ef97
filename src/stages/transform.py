"""Record transforms.

This module applies pure payload mappings between source and sink.
Transforms return fresh records and never mutate their input.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Protocol

from core.clock import WallClock
from core.errors import TransformError
from core.logging_config import get_logger
from core.types import Clock, Record

_LOGGER = get_logger(__name__)

PayloadMapper = Callable[[object], object]


class RecordTransform(Protocol):
    """Synchronous record-to-record mapping stage."""

    def transform(self, record: Record) -> Record:
        """Return the mapped record or raise TransformError."""


class MapTransform:
    """Transform applying a payload mapper and stamping transform time."""

    def __init__(
        self,
        mapper: PayloadMapper,
        clock: Clock | None = None,
        name: str | None = None,
    ) -> None:
        self._mapper = mapper
        self._clock = clock or WallClock()
        self.name = name or getattr(mapper, "__name__", "map")

    def transform(self, record: Record) -> Record:
        """Map one record into a new record.

        Args:
            record: Record handed over by the source.

        Returns:
            Copy of the record with mapped payload and ``transformed_at`` set.

        Raises:
            TransformError: If the mapper raises for this payload.
        """
        _LOGGER.info("transform_record_received", transform=self.name, record=record.to_dict())
        try:
            payload = self._mapper(record.payload)
        except TransformError:
            raise
        except Exception as error:
            raise TransformError(
                f"Transform '{self.name}' failed for record {record.sequence}: {error}"
            ) from error
        mapped = replace(
            record,
            payload=payload,
            transformed_at=max(self._clock(), record.created_at),
        )
        _LOGGER.info("transform_record_emitted", transform=self.name, record=mapped.to_dict())
        return mapped


def uppercase_payload(payload: object) -> str:
    """Uppercase a string payload.

    Raises:
        ValueError: If payload is not a string.
    """
    if not isinstance(payload, str):
        raise ValueError(f"malformed payload: expected str, got {type(payload).__name__}")
    return payload.upper()


def build_uppercase_transform(clock: Clock | None = None) -> MapTransform:
    """Build the default uppercasing transform."""
    return MapTransform(uppercase_payload, clock=clock, name="uppercase")
