

from __future__ import annotations

import logging
import math


log = logging.getLogger(__name__)


class FallSpeedController:
    """Logic tick interval as a step function of play time.

    Once per window the interval shrinks by `factor` (floored at `end_ms`)
    while acceleration is enabled, and snaps back to `start_ms` otherwise.
    """

    def __init__(self, start_ms: int = 300, end_ms: int = 150, factor: float = 0.95, window_ms: int = 300_000) -> None:
        self.start_ms = int(start_ms)
        self.end_ms = int(end_ms)
        self.factor = float(factor)
        self.window_ms = int(window_ms)
        self.interval_ms = self.start_ms

    def reset(self) -> int:
        self.interval_ms = self.start_ms
        return self.interval_ms

    def recompute(self, accelerate: bool) -> int:
        if not accelerate:
            return self.reset()
        previous = self.interval_ms
        self.interval_ms = max(self.end_ms, math.floor(self.interval_ms * self.factor))
        if self.interval_ms != previous:
            log.debug("fall interval %d ms -> %d ms", previous, self.interval_ms)
        return self.interval_ms
