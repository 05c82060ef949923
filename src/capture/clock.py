# src/capture/clock.py
"""Session-relative game clock producing hhmmss event timestamps."""

from __future__ import annotations

import math
import time
from typing import Callable


class SessionClock:
    """
    Monotonic clock anchored at session start.

    hhmmss() renders elapsed time as zero-padded hours (mod 24),
    minutes and seconds, flooring fractional seconds.
    """

    def __init__(self, time_fn: Callable[[], float] = time.monotonic) -> None:
        self._time_fn = time_fn
        self._started_at = time_fn()

    def reset(self) -> None:
        self._started_at = self._time_fn()

    def elapsed(self) -> float:
        return max(0.0, self._time_fn() - self._started_at)

    def hhmmss(self) -> str:
        total = int(math.floor(self.elapsed()))
        hours = (total // 3600) % 24
        minutes = (total % 3600) // 60
        seconds = total % 60
        return f"{hours:02d}{minutes:02d}{seconds:02d}"
