from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from simlite.engine import Scheduler
from simlite.errors import NotFoundError
from simlite.models import Process
from simlite.resources import Resource
from simlite.routines import Routine, Step, Terminal, Yielded
from simlite.stream_io import Scenario, ScenarioStep


class ScriptRoutine(Routine):
    """
    Drives a process from declarative scenario steps.

    "release" steps run inline; advance() keeps going until it reaches a
    step that suspends (timeout/request) or runs out of steps.
    """

    def __init__(self, name: str, steps: list[ScenarioStep], scheduler: Scheduler, resources: dict[str, Resource]):
        self._name = name
        self._steps = list(steps)
        self._cursor = 0
        self._scheduler = scheduler
        self._resources = resources

    @property
    def name(self) -> str:
        return self._name

    @property
    def remaining(self) -> int:
        return len(self._steps) - self._cursor

    def advance(self, value: Any = None) -> Step:
        while self._cursor < len(self._steps):
            step = self._steps[self._cursor]
            self._cursor += 1

            if step.action == "timeout":
                return Yielded(self._scheduler.timeout(step.arg))
            if step.action == "request":
                return Yielded(self._resources[step.arg].request())

            # release: oldest pending claim first
            resource = self._resources[step.arg]
            if not resource.pending:
                raise NotFoundError(
                    f"{self._name}: nothing pending on resource {resource.name!r} at t={self._scheduler.now}"
                )
            resource.release(resource.pending[0])

        return Terminal(None)


@dataclass(frozen=True)
class BuiltScenario:
    resources: dict[str, Resource]
    processes: list[Process]


def build_scenario(scenario: Scenario, scheduler: Scheduler) -> BuiltScenario:
    """Create the scenario's resources, then start its processes in file order."""
    resources = {
        r.name: Resource(scheduler, capacity=r.capacity, name=r.name)
        for r in scenario.resources
    }
    processes = [
        scheduler.process(ScriptRoutine(p.name, p.steps, scheduler, resources))
        for p in scenario.processes
    ]
    return BuiltScenario(resources=resources, processes=processes)
