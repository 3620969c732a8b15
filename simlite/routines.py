from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generator, Union

if TYPE_CHECKING:
    from simlite.models import Event


@dataclass(frozen=True, slots=True)
class Yielded:
    """The routine suspended and wants to wait on `event`."""

    event: Any


@dataclass(frozen=True, slots=True)
class Terminal:
    """The routine has no more steps; `value` is its final result."""

    value: Any = None


Step = Union[Yielded, Terminal]


class Routine(ABC):
    """
    Trampoline protocol a Process is driven through.

    Each call to advance() performs one logical step and reports either
    Yielded(event) or Terminal(value). `value` is the value of the event
    that woke the routine (None on the first call).
    """

    @abstractmethod
    def advance(self, value: Any = None) -> Step: ...

    @property
    def name(self) -> str:
        return type(self).__name__


class GeneratorRoutine(Routine):
    """Adapts a generator: each `yield` is a suspension, `return x` is Terminal(x)."""

    def __init__(self, gen: Generator[Event, Any, Any]):
        self._gen = gen

    @property
    def name(self) -> str:
        return getattr(self._gen, "__name__", "process")

    def advance(self, value: Any = None) -> Step:
        try:
            item = self._gen.send(value)
        except StopIteration as stop:
            return Terminal(stop.value)
        return Yielded(item)


def as_routine(obj: object) -> Routine:
    if isinstance(obj, Routine):
        return obj
    if hasattr(obj, "send") and hasattr(obj, "throw"):
        return GeneratorRoutine(obj)  # type: ignore[arg-type]
    raise TypeError(
        f"process routine must be a generator or a Routine, got {type(obj).__name__}"
    )
