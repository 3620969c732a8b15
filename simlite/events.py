from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TraceKind(str, Enum):
    """
    Vocabulary of facts the scheduler reports to an event sink.
    Keep this small; it describes the engine, not user models.
    """

    SCHEDULED = "SCHEDULED"
    FIRED = "FIRED"
    SUSPENDED = "SUSPENDED"
    FINISHED = "FINISHED"
    REQUESTED = "REQUESTED"
    RELEASED = "RELEASED"


@dataclass(frozen=True, slots=True)
class TraceRecord:
    """
    A structured, orderable fact emitted by the scheduler (optionally).

    seq is owned by the sink; time is the simulated clock when it was emitted.
    """

    seq: int
    time: float
    kind: TraceKind
    event: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
