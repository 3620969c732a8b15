from __future__ import annotations

import heapq
import itertools
import logging
from typing import Any

from simlite.errors import EmptySchedule, InvariantViolation, MalformedYieldError
from simlite.event_sink import EventSink
from simlite.events import TraceKind
from simlite.models import NORMAL, Event, EventKind, Process, ProcessState, Timeout, check_delay
from simlite.routines import Terminal, as_routine

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Virtual clock plus the ordered queue of pending events.

    Ordering (deterministic):
    - Earlier fire time first
    - If equal, lower priority value first
    - If still equal, earlier insertion first

    Resumption is synchronous and depth-first: when an event completes, each
    waiter is advanced in registration order, and a waiter that completes as
    a result resumes its own waiters before the next sibling runs.
    """

    def __init__(self, initial_time: float = 0, event_sink: EventSink | None = None):
        self._now = initial_time
        self._queue: list[tuple[float, int, int, Event]] = []
        self._seq = itertools.count()
        self._eids = itertools.count(1)
        self.event_sink = event_sink

    @property
    def now(self) -> float:
        return self._now

    def __len__(self) -> int:
        return len(self._queue)

    def next_eid(self) -> int:
        return next(self._eids)

    def emit(self, kind: TraceKind, event: Event | None = None, **data: Any) -> None:
        if self.event_sink is not None:
            self.event_sink.emit(kind, time=self._now, event=event.label if event is not None else None, **data)

    # ----------------------------
    # Factories
    # ----------------------------

    def timeout(self, delay: float, value: Any = None) -> Timeout:
        event = Timeout(self, delay=delay, value=value)
        self.schedule(event, NORMAL, delay)
        return event

    def process(self, routine: object, name: str | None = None) -> Process:
        proc = Process(self, name=name, routine=as_routine(routine))
        self.schedule(proc)
        return proc

    # ----------------------------
    # Queue
    # ----------------------------

    def schedule(self, event: Event, priority: int = NORMAL, delay: float = 0) -> None:
        """Queue `event` to fire at now + delay."""
        check_delay(delay)
        if event.scheduler is not self:
            raise InvariantViolation(f"{event.label} belongs to a different scheduler")
        if event.scheduled or event.triggered:
            raise InvariantViolation(f"{event.label} is already scheduled or fired")

        fire_time = self._now + delay
        event.scheduled = True
        heapq.heappush(self._queue, (fire_time, priority, next(self._seq), event))
        logger.debug("schedule %s at t=%s priority=%s", event.label, fire_time, priority)
        self.emit(TraceKind.SCHEDULED, event, fire_time=fire_time, priority=priority)

    def peek(self) -> float | None:
        """Fire time of the next queued event, or None when the queue is empty."""
        return self._queue[0][0] if self._queue else None

    def step(self) -> None:
        if not self._queue:
            raise EmptySchedule("no events are scheduled")

        fire_time, priority, _, event = heapq.heappop(self._queue)
        if fire_time < self._now:
            raise InvariantViolation(
                f"popped {event.label} for t={fire_time} but the clock is already at t={self._now}"
            )
        self._now = fire_time

        logger.debug("fire %s at t=%s", event.label, fire_time)
        self.emit(TraceKind.FIRED, event, priority=priority)
        self._fire(event)

    def run(self) -> None:
        while self._queue:
            self.step()

    # ----------------------------
    # Resumption
    # ----------------------------

    def resume(self, proc: Process, value: Any = None) -> None:
        """Advance `proc` one step, then resume everything its completion wakes."""
        if proc.state is ProcessState.WAITING:
            raise InvariantViolation(f"{proc.label} is waiting on {proc.target.label}; it resumes when that fires")
        self._cascade([(proc, value)])

    def _fire(self, event: Event) -> None:
        if event.triggered:
            raise InvariantViolation(f"{event.label} fired twice")
        if event.kind is EventKind.PROCESS:
            if event.state is not ProcessState.PENDING:  # type: ignore[attr-defined]
                raise InvariantViolation(f"{event.label} was started before its scheduled start")
            self.resume(event, None)  # type: ignore[arg-type]
        else:
            # timeouts and released requests have no computation of their own
            pending: list[tuple[Process, Any]] = []
            self._complete(event, event.value, pending)
            self._cascade(pending)

    def _cascade(self, pending: list[tuple[Process, Any]]) -> None:
        # Explicit stack instead of recursion so long waiter chains cannot
        # exhaust the interpreter stack. Waiters are pushed in reverse, so
        # popping yields registration order and a completed waiter's own
        # waiters run before its next sibling (depth-first).
        while pending:
            proc, value = pending.pop()
            result = self._advance(proc, value)
            if result is not None:
                self._complete(proc, result.value, pending)

    def _advance(self, proc: Process, value: Any) -> Terminal | None:
        """
        Drive `proc` until it suspends on an unfired event or terminates.

        Returns the Terminal step when the routine finished, else None.
        """
        if proc.state is ProcessState.FINISHED:
            raise InvariantViolation(f"{proc.label} resumed after it finished")

        while True:
            proc.state = ProcessState.RUNNING
            proc.target = None
            step = proc.routine.advance(value)

            if isinstance(step, Terminal):
                proc.state = ProcessState.FINISHED
                logger.debug("%s finished at t=%s", proc.label, self._now)
                self.emit(TraceKind.FINISHED, proc)
                return step

            target = step.event
            if not isinstance(target, Event):
                raise MalformedYieldError(
                    f"{proc.label} yielded {target!r}; processes may only yield events"
                )
            if target.scheduler is not self:
                raise MalformedYieldError(f"{proc.label} yielded {target.label} from a different scheduler")
            if target is proc:
                raise MalformedYieldError(f"{proc.label} cannot wait on itself")

            if target.triggered:
                value = target.value
                continue

            target.waiters.append(proc)
            proc.state = ProcessState.WAITING
            proc.target = target
            self.emit(TraceKind.SUSPENDED, proc, waiting_on=target.label)
            return None

    def _complete(self, event: Event, value: Any, pending: list[tuple[Process, Any]]) -> None:
        event.triggered = True
        event.value = value
        waiters, event.waiters = event.waiters, []
        pending.extend((proc, value) for proc in reversed(waiters))
