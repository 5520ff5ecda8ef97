"""Unit tests for the pipeline runner."""

from __future__ import annotations

import asyncio
import io
import time
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from core.errors import (
    PipelineCancelledError,
    PipelineStateError,
    SinkError,
    SourceError,
    SourceTimeoutError,
    TransformError,
)
from core.types import PipelineState
from pipeline.runner import PipelineRunner, run_pipeline
from stages.sink import CollectingSink, ConsoleSink
from stages.source import FileChunkSource, ListSource
from stages.transform import build_uppercase_transform
from tests.stage_doubles import RecordingSink, RecordingSource, StepClock


def _run(runner: PipelineRunner):
    return asyncio.run(runner.run())


def test_runner_consumes_every_record_in_order() -> None:
    """A successful run should consume all records in source order."""
    journal: list[str] = []
    sink = RecordingSink(journal)
    runner = PipelineRunner(
        RecordingSource(["a", "b", "c"], journal), build_uppercase_transform(), sink
    )

    result = _run(runner)

    assert sink.payloads == ["A", "B", "C"]
    assert result.state is PipelineState.COMPLETED and result.records_consumed == 3


def test_runner_keeps_one_record_in_flight() -> None:
    """Each record should reach the sink before the next produce call."""
    journal: list[str] = []
    runner = PipelineRunner(
        RecordingSource(["a", "b"], journal),
        build_uppercase_transform(),
        RecordingSink(journal),
    )

    _run(runner)

    assert journal == ["produce:a", "consume:A", "produce:b", "consume:B", "end"]


def test_runner_completes_empty_source_without_sink_calls() -> None:
    """An empty source should complete with zero consume calls."""
    journal: list[str] = []
    sink = RecordingSink(journal)

    result = _run(PipelineRunner(RecordingSource([], journal), build_uppercase_transform(), sink))

    assert result.succeeded and sink.payloads == [] and journal == ["end"]


def test_runner_fails_fast_on_transform_error() -> None:
    """A malformed item should stop the run before later items are produced."""
    journal: list[str] = []
    source = RecordingSource(["a", None, "c"], journal)
    sink = RecordingSink(journal)
    runner = PipelineRunner(source, build_uppercase_transform(), sink)

    result = _run(runner)

    assert sink.payloads == ["A"]
    assert result.state is PipelineState.FAILED and result.failed_stage == "transform"
    assert isinstance(result.error, TransformError)
    assert "produce:c" not in journal and source.produce_calls == 2


def test_runner_fails_fast_on_sink_error() -> None:
    """Unexpected sink exceptions should be wrapped and end the run."""
    journal: list[str] = []
    source = RecordingSource(["a", "b", "c"], journal)
    sink = RecordingSink(journal, fail_on="B")

    result = _run(PipelineRunner(source, build_uppercase_transform(), sink))

    assert isinstance(result.error, SinkError) and result.failed_stage == "sink"
    assert isinstance(result.error.__cause__, RuntimeError)
    assert result.records_consumed == 1 and source.produce_calls == 2


def test_runner_reports_console_write_failure() -> None:
    """A closed display stream should fail the run at the sink stage."""
    stream = io.StringIO()
    stream.close()
    source = ListSource(["a", "b"], delay_seconds=0.0)

    result = _run(PipelineRunner(source, build_uppercase_transform(), ConsoleSink(stream)))

    assert result.failed_stage == "sink" and source.cursor == 1


def test_runner_times_out_stuck_source() -> None:
    """A produce call exceeding the timeout should fail the run."""
    source = ListSource(["a"], delay_seconds=10.0)
    runner = PipelineRunner(
        source, build_uppercase_transform(), CollectingSink(), produce_timeout_seconds=0.05
    )

    result = _run(runner)

    assert isinstance(result.error, SourceTimeoutError)
    assert source.cancellation.cancelled and source.cursor == 0


def test_runner_cancel_aborts_suspended_source() -> None:
    """External cancel should end the run as a source failure."""

    async def scenario():
        source = ListSource(["a", "b"], delay_seconds=10.0)
        runner = PipelineRunner(source, build_uppercase_transform(), CollectingSink())
        task = asyncio.create_task(runner.run())
        await asyncio.sleep(0.01)
        runner.cancel("operator abort")
        return await task

    result = asyncio.run(scenario())

    assert isinstance(result.error, SourceError) and result.failed_stage == "source"
    assert isinstance(result.error.__cause__, PipelineCancelledError)


def test_runner_wraps_unexpected_source_exception() -> None:
    """Plain exceptions from produce should become source errors."""

    class BrokenSource(ListSource):
        async def produce(self):
            raise KeyError("cursor")

    result = _run(
        PipelineRunner(BrokenSource([]), build_uppercase_transform(), CollectingSink())
    )

    assert isinstance(result.error, SourceError)


def test_runner_closes_source_after_failure() -> None:
    """The source should be released when the run fails."""
    journal: list[str] = []
    source = RecordingSource([1], journal)

    _run(PipelineRunner(source, build_uppercase_transform(), RecordingSink(journal)))

    assert source.closed


def test_runner_cannot_run_twice() -> None:
    """A finished runner should refuse to start again."""
    runner = PipelineRunner(
        ListSource([], delay_seconds=0.0), build_uppercase_transform(), CollectingSink()
    )
    _run(runner)

    with pytest.raises(PipelineStateError):
        _run(runner)


def test_runner_logs_failure_event() -> None:
    """Failures should be logged once with the failing stage."""
    runner = PipelineRunner(
        ListSource([7], delay_seconds=0.0), build_uppercase_transform(), CollectingSink()
    )

    with capture_logs() as logs:
        _run(runner)

    failures = [entry for entry in logs if entry["event"] == "pipeline_failed"]
    assert len(failures) == 1 and failures[0]["stage"] == "transform"


def test_run_pipeline_stamps_ordered_timestamps() -> None:
    """Consumed records should carry transform times at or after creation."""
    sink = CollectingSink()
    clock = StepClock()
    source = ListSource(["x", "y"], delay_seconds=0.0, clock=clock)

    asyncio.run(run_pipeline(source, build_uppercase_transform(clock), sink))

    assert all(r.transformed_at >= r.created_at for r in sink.records)


def test_runner_fails_when_given_an_ended_source() -> None:
    """An exhausted source handed to a new runner should fail at the source stage."""
    source = ListSource(["a"], delay_seconds=0.0)
    _run(PipelineRunner(source, build_uppercase_transform(), CollectingSink()))
    runner = PipelineRunner(source, build_uppercase_transform(), CollectingSink())

    result = _run(runner)

    assert runner.state is PipelineState.FAILED and result.failed_stage == "source"
    assert isinstance(result.error, SourceError)
    assert isinstance(result.error.__cause__, PipelineStateError)


def test_runner_reports_source_timeout_error_as_plain_source_error() -> None:
    """A source's own TimeoutError is not the runner's produce deadline."""

    class UpstreamTimeoutSource(ListSource):
        async def produce(self):
            raise TimeoutError("upstream socket timed out")

    source = UpstreamTimeoutSource([])
    result = _run(PipelineRunner(source, build_uppercase_transform(), CollectingSink()))

    assert type(result.error) is SourceError
    assert "upstream socket timed out" in str(result.error)
    assert source.cancellation.cancelled is False


def test_runner_timeout_bounds_slow_file_read(tmp_path: Path) -> None:
    """The produce deadline should also cover a blocking file read."""

    class SlowReadSource(FileChunkSource):
        def _read_chunk(self) -> str:
            time.sleep(0.3)
            return "late"

    source = SlowReadSource(tmp_path / "unused.txt")
    runner = PipelineRunner(
        source, build_uppercase_transform(), CollectingSink(), produce_timeout_seconds=0.05
    )

    result = _run(runner)

    assert isinstance(result.error, SourceTimeoutError) and result.records_consumed == 0
