from __future__ import annotations


class SimulationError(RuntimeError):
    """Base class for errors raised by the simulation engine."""


class MalformedYieldError(SimulationError, TypeError):
    """Raised when a process routine yields something it cannot wait on."""


class InvariantViolation(SimulationError):
    """
    Raised when the engine detects an internal consistency failure.

    Continuing would break the ordering guarantees, so the enclosing
    step()/run() is aborted.
    """


class NotFoundError(InvariantViolation, LookupError):
    """Raised when a Request is released but is not pending on its resource."""


class EmptySchedule(SimulationError):
    """Raised by step() when no events are queued."""
