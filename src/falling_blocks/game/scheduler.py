

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class ScheduledTask:
    callback: Callable[[], object]
    interval_ms: float
    elapsed_ms: float = 0.0


class Scheduler:
    """Periodic tasks driven by elapsed time.

    Tasks are identified by the opaque handle returned from `add`, never by
    callback equality, so the same callback can be scheduled twice and
    removing an unknown handle is a no-op.
    """

    def __init__(self) -> None:
        self._tasks: Dict[int, ScheduledTask] = {}
        self._handles = itertools.count(1)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, handle: object) -> bool:
        return handle in self._tasks

    def add(self, callback: Callable[[], object], interval_ms: float) -> int:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        handle = next(self._handles)
        self._tasks[handle] = ScheduledTask(callback, float(interval_ms))
        return handle

    def remove(self, handle: int) -> bool:
        return self._tasks.pop(handle, None) is not None

    def clear(self) -> None:
        self._tasks.clear()

    def interval(self, handle: int) -> float:
        return self._tasks[handle].interval_ms

    def set_interval(self, handle: int, interval_ms: float) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._tasks[handle].interval_ms = float(interval_ms)

    def advance(self, elapsed_ms: float) -> int:
        """Move time forward and run every task that came due; returns the run count."""
        fired = 0
        for handle in list(self._tasks):
            task = self._tasks.get(handle)
            if task is None:
                continue
            task.elapsed_ms += elapsed_ms
            # Callbacks may remove tasks or change intervals
            while handle in self._tasks and task.elapsed_ms >= task.interval_ms:
                task.elapsed_ms -= task.interval_ms
                task.callback()
                fired += 1
        return fired
