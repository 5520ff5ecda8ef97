"""Pipeline runner with one-record-in-flight backpressure.

This module pulls records from a source, maps them through a transform,
and hands them to a sink. Each record finishes its journey before the
next one is requested, and the first stage error ends the run.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Iterable, TextIO

from core.config import RillConfig
from core.errors import (
    PipelineCancelledError,
    PipelineStageError,
    PipelineStateError,
    SinkError,
    SourceError,
    SourceTimeoutError,
    TransformError,
)
from core.logging_config import get_logger
from core.types import PipelineResult, PipelineState, Record
from stages.sink import ConsoleSink, RecordSink
from stages.source import FileChunkSource, ListSource, RecordSource
from stages.transform import RecordTransform, build_uppercase_transform

_LOGGER = get_logger(__name__)


class PipelineRunner:
    """Single-use runner for one source, transform, and sink."""

    def __init__(
        self,
        source: RecordSource,
        transform: RecordTransform,
        sink: RecordSink,
        produce_timeout_seconds: float | None = None,
    ) -> None:
        self._source = source
        self._transform = transform
        self._sink = sink
        self._produce_timeout_seconds = produce_timeout_seconds
        self._state = PipelineState.IDLE
        self._records_consumed = 0

    @property
    def state(self) -> PipelineState:
        """Current lifecycle state."""
        return self._state

    @property
    def records_consumed(self) -> int:
        """Number of records the sink has acknowledged."""
        return self._records_consumed

    def cancel(self, reason: str = "cancel requested") -> None:
        """Abort the run at the source's next suspension point."""
        self._source.cancellation.cancel(reason)

    async def run(self) -> PipelineResult:
        """Execute the pipeline until end of sequence or first failure.

        Returns:
            Completed or failed result; stage errors are carried, not raised.

        Raises:
            PipelineStateError: If the runner was already started.
        """
        if self._state is not PipelineState.IDLE:
            raise PipelineStateError(
                f"Pipeline runner is {self._state.value}; create a new runner to run again."
            )
        self._state = PipelineState.RUNNING
        started_at = time.monotonic()
        _LOGGER.info("pipeline_started", produce_timeout_seconds=self._produce_timeout_seconds)
        try:
            await self._drain()
        except PipelineStageError as error:
            return self._fail(error, started_at)
        finally:
            self._source.close()
        return self._complete(started_at)

    async def _drain(self) -> None:
        while True:
            record = await self._produce()
            if record is None:
                return
            mapped = self._apply_transform(record)
            self._deliver(mapped)
            self._records_consumed += 1

    async def _produce(self) -> Record | None:
        try:
            self._source.cancellation.raise_if_cancelled()
            return await self._produce_within_timeout()
        except PipelineStageError:
            raise
        except PipelineCancelledError as error:
            raise SourceError(f"Source aborted: {error.reason}.") from error
        except Exception as error:
            raise SourceError(f"Source failed to produce a record: {error}") from error

    async def _produce_within_timeout(self) -> Record | None:
        produce_task = asyncio.ensure_future(self._source.produce())
        try:
            done, _ = await asyncio.wait({produce_task}, timeout=self._produce_timeout_seconds)
        except asyncio.CancelledError:
            produce_task.cancel()
            raise
        if produce_task not in done:
            self._source.cancellation.cancel("produce timeout")
            produce_task.cancel()
            await asyncio.gather(produce_task, return_exceptions=True)
            raise SourceTimeoutError(self._produce_timeout_seconds or 0.0)
        return produce_task.result()

    def _apply_transform(self, record: Record) -> Record:
        try:
            return self._transform.transform(record)
        except TransformError:
            raise
        except Exception as error:
            raise TransformError(
                f"Transform failed for record {record.sequence}: {error}"
            ) from error

    def _deliver(self, record: Record) -> None:
        try:
            self._sink.consume(record)
        except SinkError:
            raise
        except Exception as error:
            raise SinkError(f"Sink failed for record {record.sequence}: {error}") from error

    def _complete(self, started_at: float) -> PipelineResult:
        self._state = PipelineState.COMPLETED
        result = PipelineResult(
            state=self._state,
            records_consumed=self._records_consumed,
            duration_seconds=round(time.monotonic() - started_at, 3),
        )
        _LOGGER.info(
            "pipeline_completed",
            records_consumed=result.records_consumed,
            duration_seconds=result.duration_seconds,
        )
        return result

    def _fail(self, error: PipelineStageError, started_at: float) -> PipelineResult:
        self._state = PipelineState.FAILED
        result = PipelineResult(
            state=self._state,
            records_consumed=self._records_consumed,
            duration_seconds=round(time.monotonic() - started_at, 3),
            error=error,
            failed_stage=error.stage,
        )
        _LOGGER.error(
            "pipeline_failed",
            stage=error.stage,
            error=str(error),
            records_consumed=result.records_consumed,
        )
        return result


async def run_pipeline(
    source: RecordSource,
    transform: RecordTransform,
    sink: RecordSink,
    produce_timeout_seconds: float | None = None,
) -> PipelineResult:
    """Run one pipeline to completion.

    Args:
        source: Record producer.
        transform: Record mapping stage.
        sink: Terminal consumer.
        produce_timeout_seconds: Optional upper bound for each produce call.

    Returns:
        Terminal pipeline result.
    """
    runner = PipelineRunner(source, transform, sink, produce_timeout_seconds)
    return await runner.run()


def run_items_pipeline(
    items: Iterable[object],
    config: RillConfig,
    stream: TextIO | None = None,
) -> PipelineResult:
    """Uppercase in-memory items and display them on a console sink."""
    source = ListSource(items, delay_seconds=config.item_delay_seconds)
    return asyncio.run(
        run_pipeline(
            source,
            build_uppercase_transform(),
            ConsoleSink(stream),
            config.produce_timeout_seconds,
        )
    )


def run_file_pipeline(
    path: str | Path,
    config: RillConfig,
    stream: TextIO | None = None,
) -> PipelineResult:
    """Uppercase a text file chunk by chunk and display each chunk."""
    source = FileChunkSource(
        path,
        chunk_size=config.chunk_size,
        delay_seconds=config.item_delay_seconds,
    )
    return asyncio.run(
        run_pipeline(
            source,
            build_uppercase_transform(),
            ConsoleSink(stream),
            config.produce_timeout_seconds,
        )
    )
