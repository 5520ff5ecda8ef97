"""Unit tests for cooperative cancellation."""

from __future__ import annotations

import asyncio

import pytest

from core.cancellation import CancellationToken
from core.errors import PipelineCancelledError


def test_sleep_returns_after_delay() -> None:
    """An uncancelled token should simply wait out the delay."""
    token = CancellationToken()

    asyncio.run(token.sleep(0.01))

    assert token.cancelled is False


def test_sleep_raises_when_already_cancelled() -> None:
    """Sleeping on a cancelled token should raise immediately."""
    token = CancellationToken()
    token.cancel("stop")

    with pytest.raises(PipelineCancelledError, match="stop"):
        asyncio.run(token.sleep(10))


def test_cancel_interrupts_pending_sleep() -> None:
    """Cancelling mid-sleep should wake the sleeper with an error."""

    async def scenario() -> None:
        token = CancellationToken()
        sleeper = asyncio.create_task(token.sleep(10))
        await asyncio.sleep(0.01)
        token.cancel("operator abort")
        await sleeper

    with pytest.raises(PipelineCancelledError, match="operator abort"):
        asyncio.run(scenario())


def test_cancel_keeps_first_reason() -> None:
    """Repeated cancel calls should not overwrite the reason."""
    token = CancellationToken()

    token.cancel("first")
    token.cancel("second")

    assert token.reason == "first"
