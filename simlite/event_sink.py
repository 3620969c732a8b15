from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from simlite.events import TraceKind, TraceRecord


class EventSink(ABC):
    """
    Consumer of structured trace records.
    The scheduler must be able to run with event_sink=None (no records).
    """

    @abstractmethod
    def emit(self, kind: TraceKind, *, time: float, event: str | None = None, **data: Any) -> None: ...


@dataclass
class InMemoryEventSink(EventSink):
    """
    Simple sink for tests/demos.
    Owns seq numbering so the scheduler carries no trace state.
    """

    records: list[TraceRecord] = field(default_factory=list)
    _seq: int = field(default=0, init=False)

    def emit(self, kind: TraceKind, *, time: float, event: str | None = None, **data: Any) -> None:
        self._seq += 1
        self.records.append(
            TraceRecord(
                seq=self._seq,
                time=time,
                kind=kind,
                event=event,
                data=dict(data),
            )
        )

    def of_kind(self, kind: TraceKind) -> list[TraceRecord]:
        return [r for r in self.records if r.kind == kind]
