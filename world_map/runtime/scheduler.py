# world_map/runtime/scheduler.py

"""
================================================================================
FRAME SCHEDULER
================================================================================
Per-frame callbacks for animations such as pan momentum.

Data Contract:
---------------
- schedule(callback) -> ScheduledTask: the callback runs once per tick()
  until it returns False or its task is cancelled.
- tick() runs every live task exactly once and drops finished ones.
- A task cancelled while another task is running is never called again.
================================================================================
"""
import logging
from typing import Callable


class ScheduledTask:
    """Handle for a repeating per-frame callback."""

    def __init__(self, callback: Callable[[], bool]):
        self.callback = callback
        self.cancelled = False
        self.finished = False

    @property
    def is_active(self) -> bool:
        return not (self.cancelled or self.finished)

    def cancel(self):
        self.cancelled = True

    def run(self) -> bool:
        if not self.is_active:
            return False
        if not self.callback():
            self.finished = True
        return self.is_active


class FrameScheduler:
    """Runs scheduled tasks once per frame from the main loop."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._tasks = []

    def schedule(self, callback: Callable[[], bool]) -> ScheduledTask:
        task = ScheduledTask(callback)
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if task.is_active)

    def tick(self) -> int:
        """Runs every active task once. Returns how many are still active."""
        for task in list(self._tasks):
            task.run()
        self._tasks = [task for task in self._tasks if task.is_active]
        return len(self._tasks)

    def cancel_all(self):
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
