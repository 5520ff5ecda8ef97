"""Host clock used to stamp records."""

from __future__ import annotations

import time


class WallClock:
    """Epoch-seconds clock whose readings never decrease.

    System wall time can step backwards (NTP adjustments); readings are
    clamped to the previous value so record timestamps stay ordered.
    """

    def __init__(self) -> None:
        self._last_reading = 0.0

    def __call__(self) -> float:
        reading = max(time.time(), self._last_reading)
        self._last_reading = reading
        return reading
