"""Cooperative cancellation for suspended pipeline work.

This module lets the runner abort a stuck source without relying on
task cancellation semantics inside stage code.
"""

from __future__ import annotations

import asyncio

from core.errors import PipelineCancelledError


class CancellationToken:
    """One-shot cancellation signal shared by runner and source."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Whether cancel has been requested."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Reason given to the first cancel call."""
        return self._reason

    def cancel(self, reason: str = "cancel requested") -> None:
        """Request cancellation; later calls keep the first reason."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise if cancellation was requested.

        Raises:
            PipelineCancelledError: If the token is cancelled.
        """
        if self._event.is_set():
            raise PipelineCancelledError(self._reason or "cancel requested")

    async def sleep(self, seconds: float) -> None:
        """Suspend for ``seconds`` unless cancelled first.

        Args:
            seconds: Delay duration; non-positive values only yield once.

        Raises:
            PipelineCancelledError: If the token is cancelled before or
                during the delay.
        """
        self.raise_if_cancelled()
        if seconds <= 0:
            await asyncio.sleep(0)
        else:
            try:
                await asyncio.wait_for(self._event.wait(), timeout=seconds)
            except asyncio.TimeoutError:
                return
        self.raise_if_cancelled()
