"""Public SDK surface for Rill.

This module provides a stable import path for library users.
It re-exports the runner, stages, and typed models.
"""

from __future__ import annotations

from core.cancellation import CancellationToken
from core.clock import WallClock
from core.config import RillConfig
from core.errors import (
    PipelineCancelledError,
    PipelineStageError,
    PipelineStateError,
    RillConfigError,
    RillError,
    SinkError,
    SourceError,
    SourceTimeoutError,
    TransformError,
)
from core.types import PipelineResult, PipelineState, Record
from pipeline.runner import PipelineRunner, run_file_pipeline, run_items_pipeline, run_pipeline
from stages.sink import CollectingSink, ConsoleSink
from stages.source import FileChunkSource, ListSource
from stages.transform import MapTransform, build_uppercase_transform, uppercase_payload

__all__ = [
    "CancellationToken",
    "CollectingSink",
    "ConsoleSink",
    "FileChunkSource",
    "ListSource",
    "MapTransform",
    "PipelineCancelledError",
    "PipelineResult",
    "PipelineRunner",
    "PipelineStageError",
    "PipelineState",
    "PipelineStateError",
    "Record",
    "RillConfig",
    "RillConfigError",
    "RillError",
    "SinkError",
    "SourceError",
    "SourceTimeoutError",
    "TransformError",
    "WallClock",
    "build_uppercase_transform",
    "run_file_pipeline",
    "run_items_pipeline",
    "run_pipeline",
    "uppercase_payload",
]
