"""
simlite: a discrete-event simulator on a virtual clock.

Core modules:
- engine: Scheduler (clock, ordered queue, process resumption)
- resources: Resource and its pending Requests
- models: event variants (Timeout, Process, Request)
- routines: the step protocol processes are driven through
- event_sink / events: optional structured trace of what the engine did
"""
from simlite.engine import Scheduler
from simlite.errors import (
    EmptySchedule,
    InvariantViolation,
    MalformedYieldError,
    NotFoundError,
    SimulationError,
)
from simlite.models import NORMAL, URGENT
from simlite.resources import Resource

__all__ = [
    "Scheduler",
    "Resource",
    "SimulationError",
    "MalformedYieldError",
    "InvariantViolation",
    "NotFoundError",
    "EmptySchedule",
    "NORMAL",
    "URGENT",
]
