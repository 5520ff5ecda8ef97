"""Terminal sinks for the pipeline.

This module performs the final effect for each record and acknowledges
it by returning normally. Failures surface as SinkError.
"""

from __future__ import annotations

import json
import sys
from typing import Protocol, TextIO

from core.constants import SINK_DISPLAY_PREFIX
from core.errors import SinkError
from core.types import Record


class RecordSink(Protocol):
    """Terminal consumer of records."""

    def consume(self, record: Record) -> None:
        """Perform the terminal effect or raise SinkError."""


class ConsoleSink:
    """Sink writing one display line per record to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def consume(self, record: Record) -> None:
        """Write the record display line and flush it.

        Raises:
            SinkError: If the stream write fails.
        """
        stream = self._stream or sys.stdout
        line = f"{SINK_DISPLAY_PREFIX} {json.dumps(record.to_dict(), default=str)}\n"
        try:
            stream.write(line)
            stream.flush()
        except (OSError, ValueError) as error:
            raise SinkError(
                f"Failed to display record {record.sequence}: {error}. "
                "Check that the output stream is open and writable."
            ) from error


class CollectingSink:
    """Sink keeping consumed records in delivery order."""

    def __init__(self) -> None:
        self.records: list[Record] = []

    def consume(self, record: Record) -> None:
        """Append the record."""
        self.records.append(record)

    @property
    def payloads(self) -> list[object]:
        """Payloads of consumed records in order."""
        return [record.payload for record in self.records]
