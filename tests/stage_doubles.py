"""Recording stage doubles shared by runner tests."""

from __future__ import annotations

from core.cancellation import CancellationToken
from core.types import Record
from stages.source import ListSource


class StepClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: float = 1000.0) -> None:
        self._now = start

    def __call__(self) -> float:
        self._now += 1.0
        return self._now


class RecordingSource:
    """List source that logs each produce call into a shared journal."""

    def __init__(self, items: list[object], journal: list[str]) -> None:
        self._inner = ListSource(items, delay_seconds=0.0, clock=StepClock())
        self._journal = journal
        self.cancellation: CancellationToken = self._inner.cancellation
        self.produce_calls = 0
        self.closed = False

    async def produce(self) -> Record | None:
        self.produce_calls += 1
        record = await self._inner.produce()
        self._journal.append("end" if record is None else f"produce:{record.payload}")
        return record

    def close(self) -> None:
        self.closed = True
        self._inner.close()


class RecordingSink:
    """Sink that logs each consumed payload into a shared journal."""

    def __init__(self, journal: list[str], fail_on: object | None = None) -> None:
        self._journal = journal
        self._fail_on = fail_on
        self.payloads: list[object] = []

    def consume(self, record: Record) -> None:
        if record.payload == self._fail_on:
            raise RuntimeError(f"display rejected {record.payload!r}")
        self._journal.append(f"consume:{record.payload}")
        self.payloads.append(record.payload)
