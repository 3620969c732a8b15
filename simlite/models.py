from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from simlite.routines import Routine

if TYPE_CHECKING:
    from simlite.engine import Scheduler
    from simlite.resources import Resource

# Lower value fires first among events sharing a fire time.
URGENT = 0
NORMAL = 1


class EventKind(str, Enum):
    TIMEOUT = "timeout"
    PROCESS = "process"
    REQUEST = "request"


class ProcessState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    WAITING = "WAITING"
    FINISHED = "FINISHED"


def check_delay(delay: float) -> None:
    """Delays must be finite and >= 0."""
    if not isinstance(delay, (int, float)) or isinstance(delay, bool):
        raise TypeError(f"delay must be a number (got {delay!r})")
    if not math.isfinite(delay) or delay < 0:
        raise ValueError(f"delay must be a finite number >= 0 (got {delay!r})")


@dataclass(eq=False, slots=True)
class Event:
    """
    A point in simulated time plus the processes waiting for it.

    Events never schedule themselves; the Scheduler factories (or a Resource
    on release) hand them to Scheduler.schedule() explicitly. Variants only
    carry data. What happens when an event fires is decided by the
    scheduler, keyed on `kind`.

    eq=False: events compare by identity.
    """

    kind: ClassVar[EventKind]

    scheduler: Scheduler
    name: str = "event"
    delay: float = 0
    value: Any = None
    eid: int = field(init=False, default=0)
    waiters: list[Process] = field(init=False, default_factory=list)
    # scheduled: currently (or once) in the queue; triggered: has fired
    scheduled: bool = field(init=False, default=False)
    triggered: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.eid = self.scheduler.next_eid()

    @property
    def label(self) -> str:
        return f"{self.name}#{self.eid}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label} triggered={self.triggered}>"


@dataclass(eq=False, slots=True)
class Timeout(Event):
    kind: ClassVar[EventKind] = EventKind.TIMEOUT

    name: str = "timeout"

    def __post_init__(self) -> None:
        check_delay(self.delay)
        Event.__post_init__(self)


@dataclass(eq=False, slots=True)
class Process(Event):
    """An event that completes when its routine reaches Terminal."""

    kind: ClassVar[EventKind] = EventKind.PROCESS

    name: str | None = None  # type: ignore[assignment]
    routine: Routine | None = None
    state: ProcessState = field(init=False, default=ProcessState.PENDING)
    # the event this process is suspended on, while WAITING
    target: Event | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.routine, Routine):
            raise TypeError(f"Process needs a Routine (got {type(self.routine).__name__})")
        if self.name is None:
            self.name = self.routine.name
        Event.__post_init__(self)

    @property
    def is_alive(self) -> bool:
        return self.state is not ProcessState.FINISHED

    def resume(self, value: Any = None) -> None:
        """Advance the routine one step (and cascade if it finishes)."""
        self.scheduler.resume(self, value)

    def __repr__(self) -> str:
        if self.state is ProcessState.WAITING and self.target is not None:
            return f"<Process {self.label} WAITING on {self.target.label}>"
        return f"<Process {self.label} {self.state.value}>"


@dataclass(eq=False, slots=True)
class Request(Event):
    """A claim on a Resource. Fires only after the resource releases it."""

    kind: ClassVar[EventKind] = EventKind.REQUEST

    resource: Resource | None = None

    def __post_init__(self) -> None:
        if self.resource is None:
            raise TypeError("Request needs a resource")
        self.name = f"request:{self.resource.name}"
        self.value = self
        Event.__post_init__(self)

    def release(self) -> None:
        self.resource.release(self)
