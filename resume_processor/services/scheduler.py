"""
Deferred execution of embedding pipeline steps.

Every scheduled unit of work is a :class:`StepTicket`. The pipeline schedules
at most one ticket per resume at a time, so whichever scheduler delivers the
tickets never runs two steps of the same resume concurrently.
"""
import heapq
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from django.conf import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepTicket:
    resume_id: str
    position: int
    chunk_index: int


class CeleryScheduler:
    """Hands tickets to the Celery worker with a countdown."""

    def schedule(self, delay: float, ticket: StepTicket) -> None:
        from ..tasks import process_resume_step

        process_resume_step.apply_async(
            args=(str(ticket.resume_id), ticket.position, ticket.chunk_index),
            countdown=delay,
        )


class InlineScheduler:
    """
    Single-threaded work queue ordered by due time.

    The clock is virtual: :meth:`run` jumps straight to the next due ticket
    unless a ``sleep`` function is given, in which case it waits in real time.
    """

    def __init__(self, sleep: Optional[Callable[[float], None]] = None):
        self.clock = 0.0
        self.history: List[Tuple[float, StepTicket]] = []
        self._sleep = sleep
        self._queue = []
        self._counter = itertools.count()

    def __len__(self):
        return len(self._queue)

    def schedule(self, delay: float, ticket: StepTicket) -> None:
        heapq.heappush(self._queue, (self.clock + delay, next(self._counter), ticket))
        self.history.append((delay, ticket))

    def clear(self) -> None:
        self._queue.clear()
        self.history.clear()
        self.clock = 0.0

    def run(self, step: Callable[[StepTicket], object], max_steps: Optional[int] = None) -> int:
        """Deliver due tickets to ``step`` until the queue is empty. Returns the number run."""
        executed = 0
        while self._queue and (max_steps is None or executed < max_steps):
            due, _, ticket = heapq.heappop(self._queue)
            if due > self.clock:
                if self._sleep is not None:
                    self._sleep(due - self.clock)
                self.clock = due
            step(ticket)
            executed += 1
        return executed


def get_scheduler():
    """
    Scheduler for steps started by a request.

    Inline mode hands out a throwaway queue: the checkpoint row is the durable
    record of pending work, and `recover_resume_pipelines --drain` runs it.
    """
    if settings.RESUME_PIPELINE_SCHEDULER == 'celery':
        return CeleryScheduler()
    return InlineScheduler()


def real_time_scheduler() -> InlineScheduler:
    return InlineScheduler(sleep=time.sleep)
