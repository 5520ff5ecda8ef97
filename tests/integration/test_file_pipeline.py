"""Integration test for streaming a text file end to end."""

from __future__ import annotations

import asyncio
import math

from pipeline.runner import run_pipeline
from stages.sink import CollectingSink
from stages.source import FileChunkSource
from stages.transform import build_uppercase_transform
from tests.fixture_paths import fixture_path


def test_file_pipeline_uppercases_every_chunk_in_order() -> None:
    """Chunks should reassemble into the uppercased file contents."""
    path = fixture_path("data.txt")
    text = path.read_text(encoding="utf-8")
    sink = CollectingSink()

    result = asyncio.run(
        run_pipeline(FileChunkSource(path, chunk_size=50), build_uppercase_transform(), sink)
    )

    assert result.succeeded
    assert result.records_consumed == math.ceil(len(text) / 50)
    assert "".join(sink.payloads) == text.upper()
    assert [record.sequence for record in sink.records] == list(range(result.records_consumed))
