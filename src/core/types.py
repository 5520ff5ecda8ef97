"""Shared typed models.

This module defines the immutable record and result models passed
between sources, transforms, sinks, and the pipeline runner.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from core.errors import PipelineStageError

Clock = Callable[[], float]


class PipelineState(str, Enum):
    """Lifecycle state of one pipeline run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Record:
    """Unit of data flowing through the pipeline.

    Attributes:
        sequence: Zero-based position in the source's backing sequence.
        payload: Data item carried by the record.
        created_at: Epoch seconds when the source created the record.
        transformed_at: Epoch seconds when a transform produced the record.
    """

    sequence: int
    payload: object
    created_at: float
    transformed_at: float | None = None

    def to_dict(self) -> dict[str, object]:
        """Return an ordered mapping for traces and display."""
        fields: dict[str, object] = {
            "sequence": self.sequence,
            "payload": self.payload,
            "created_at": self.created_at,
        }
        if self.transformed_at is not None:
            fields["transformed_at"] = self.transformed_at
        return fields


@dataclass(frozen=True)
class PipelineResult:
    """Terminal outcome of a pipeline run.

    Attributes:
        state: Final state, either completed or failed.
        records_consumed: Number of records acknowledged by the sink.
        duration_seconds: Wall time spent in the run.
        error: First stage error when the run failed.
        failed_stage: Name of the stage that failed, if any.
    """

    state: PipelineState
    records_consumed: int
    duration_seconds: float
    error: PipelineStageError | None = None
    failed_stage: str | None = None

    @property
    def succeeded(self) -> bool:
        """Whether every produced record was consumed."""
        return self.state is PipelineState.COMPLETED

    def raise_for_failure(self) -> None:
        """Re-raise the carried stage error for failed runs."""
        if self.error is not None:
            raise self.error
