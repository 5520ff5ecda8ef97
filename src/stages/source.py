"""Record sources for the pipeline.

This module produces records one at a time with simulated latency.
A source returns None once its backing sequence is exhausted.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import IO, Iterable, Protocol

from core.cancellation import CancellationToken
from core.clock import WallClock
from core.constants import DEFAULT_CHUNK_SIZE, DEFAULT_ITEM_DELAY_SECONDS
from core.errors import PipelineStateError, SourceError
from core.logging_config import get_logger
from core.types import Clock, Record

_LOGGER = get_logger(__name__)


class RecordSource(Protocol):
    """Pull-based producer of records."""

    cancellation: CancellationToken

    async def produce(self) -> Record | None:
        """Return the next record, or None at end of sequence."""

    def close(self) -> None:
        """Release resources held by the source."""


class ListSource:
    """Source backed by a fixed in-memory list of payloads."""

    def __init__(
        self,
        items: Iterable[object],
        delay_seconds: float = DEFAULT_ITEM_DELAY_SECONDS,
        clock: Clock | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._items = tuple(items)
        self._delay_seconds = delay_seconds
        self._clock = clock or WallClock()
        self.cancellation = cancellation or CancellationToken()
        self._cursor = 0
        self._ended = False

    @property
    def cursor(self) -> int:
        """Number of records handed off so far."""
        return self._cursor

    async def produce(self) -> Record | None:
        """Return the next record after the simulated delay.

        Returns:
            Next record, or None once every item was produced.

        Raises:
            PipelineStateError: If called again after end of sequence.
            PipelineCancelledError: If cancelled while suspended.
        """
        _ensure_not_ended(self._ended)
        if self._cursor >= len(self._items):
            self._ended = True
            return None
        await self.cancellation.sleep(self._delay_seconds)
        record = Record(
            sequence=self._cursor,
            payload=self._items[self._cursor],
            created_at=self._clock(),
        )
        _LOGGER.info("source_record_emitted", record=record.to_dict())
        self._cursor += 1
        return record

    def close(self) -> None:
        """Mark the source ended; no further records are produced."""
        self._ended = True


class FileChunkSource:
    """Source reading a UTF-8 text file in fixed-size character chunks."""

    def __init__(
        self,
        path: str | Path,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        delay_seconds: float = 0.0,
        clock: Clock | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise SourceError(f"Invalid chunk size {chunk_size}: expected a positive integer.")
        self._path = Path(path).expanduser()
        self._chunk_size = chunk_size
        self._delay_seconds = delay_seconds
        self._clock = clock or WallClock()
        self.cancellation = cancellation or CancellationToken()
        self._handle: IO[str] | None = None
        self._sequence = 0
        self._ended = False

    async def produce(self) -> Record | None:
        """Return the next chunk of the file as a record.

        Raises:
            SourceError: If the file cannot be opened or read.
            PipelineStateError: If called again after end of sequence.
        """
        _ensure_not_ended(self._ended)
        await self.cancellation.sleep(self._delay_seconds)
        chunk = await asyncio.to_thread(self._read_chunk)
        if not chunk:
            self.close()
            return None
        record = Record(sequence=self._sequence, payload=chunk, created_at=self._clock())
        _LOGGER.info("source_chunk_emitted", path=str(self._path), record=record.to_dict())
        self._sequence += 1
        return record

    def close(self) -> None:
        """Close the file handle and end the sequence."""
        self._ended = True
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _read_chunk(self) -> str:
        try:
            if self._handle is None:
                self._handle = self._path.open("r", encoding="utf-8")
            return self._handle.read(self._chunk_size)
        except (OSError, UnicodeDecodeError) as error:
            raise SourceError(
                f"Failed to read source file {self._path}: {error}. "
                "Provide an existing UTF-8 text file."
            ) from error


def _ensure_not_ended(ended: bool) -> None:
    if ended:
        raise PipelineStateError(
            "Source already signalled end of sequence; produce must not be called again."
        )
