"""Rill exception hierarchy.

This module defines traceable pipeline errors with clear boundaries.
Each stage raises a specific error type so failures name their origin.
"""

from __future__ import annotations

from core.constants import SINK_STAGE, SOURCE_STAGE, TRANSFORM_STAGE


class RillError(Exception):
    """Base exception for all Rill failures."""


class RillConfigError(RillError):
    """Raised for invalid runtime configuration."""


class PipelineStateError(RillError):
    """Raised when a stage or runner is used outside its lifecycle."""


class PipelineCancelledError(RillError):
    """Raised when a cancellation token interrupts pipeline work."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Pipeline cancelled: {reason}")
        self.reason = reason


class PipelineStageError(RillError):
    """Base for failures raised by one pipeline stage."""

    stage = "unknown"


class SourceError(PipelineStageError):
    """Raised when the source cannot produce the next record."""

    stage = SOURCE_STAGE


class SourceTimeoutError(SourceError):
    """Raised when the source does not produce within its time budget."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            f"Source did not produce a record within {timeout_seconds}s. "
            "Increase RILL_PRODUCE_TIMEOUT_SECONDS or --timeout if the source is slow."
        )
        self.timeout_seconds = timeout_seconds


class TransformError(PipelineStageError):
    """Raised when the mapping step fails for a record."""

    stage = TRANSFORM_STAGE


class SinkError(PipelineStageError):
    """Raised when the terminal display effect fails."""

    stage = SINK_STAGE
