from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from simlite.events import TraceKind, TraceRecord


class InputFormatError(ValueError):
    """Raised when a scenario file or trace stream fails validation."""


STEP_ACTIONS = ("timeout", "request", "release")


@dataclass(frozen=True)
class ScenarioStep:
    action: str  # "timeout" | "request" | "release"
    # timeout: delay (number); request/release: resource name
    arg: Any


@dataclass(frozen=True)
class ScenarioResource:
    name: str
    capacity: int = 1


@dataclass(frozen=True)
class ScenarioProcess:
    name: str
    steps: list[ScenarioStep]


@dataclass(frozen=True)
class Scenario:
    resources: list[ScenarioResource]
    processes: list[ScenarioProcess]


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise InputFormatError(f"file not found: {path}")
    if not path.is_file():
        raise InputFormatError(f"not a file: {path}")

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InputFormatError(
            f"invalid JSON: {e.msg} (line {e.lineno}, col {e.colno})"
        ) from e


def load_scenario(path: Path) -> Scenario:
    """Load and validate a scenario file.

    Format:
      {
        "resources": [{"name": "desk", "capacity": 1}],
        "processes": [
          {"name": "alice", "steps": [{"request": "desk"}, {"timeout": 3}]},
          {"name": "clerk", "steps": [{"timeout": 2}, {"release": "desk"}]}
        ]
      }

    "resources" is optional. Every step has exactly one key:
      - timeout: non-negative number, the process waits that long
      - request: resource name, the process waits until the claim is released
      - release: resource name, releases the oldest pending claim (no wait)
    """
    return parse_scenario(_read_json(path))


def parse_scenario(raw: object) -> Scenario:
    if not isinstance(raw, dict):
        raise InputFormatError("root must be a JSON object")

    resources_raw = raw.get("resources", [])
    processes_raw = raw.get("processes")

    if not isinstance(resources_raw, list):
        raise InputFormatError("resources must be an array")
    resources: list[ScenarioResource] = []
    seen: set[str] = set()
    for i, item in enumerate(resources_raw):
        res = _parse_resource(item, label=f"resources[{i}]")
        if res.name in seen:
            raise InputFormatError(f"duplicate resource name {res.name!r}")
        seen.add(res.name)
        resources.append(res)

    if not isinstance(processes_raw, list) or not processes_raw:
        raise InputFormatError("processes must be a non-empty array")
    processes: list[ScenarioProcess] = []
    seen_procs: set[str] = set()
    for i, item in enumerate(processes_raw):
        proc = _parse_process(item, label=f"processes[{i}]", resource_names=seen)
        if proc.name in seen_procs:
            raise InputFormatError(f"duplicate process name {proc.name!r}")
        seen_procs.add(proc.name)
        processes.append(proc)

    return Scenario(resources=resources, processes=processes)


def _parse_resource(raw: object, *, label: str) -> ScenarioResource:
    if not isinstance(raw, dict):
        raise InputFormatError(f"{label} must be an object")
    name = raw.get("name")
    capacity = raw.get("capacity", 1)
    if not isinstance(name, str) or not name.strip():
        raise InputFormatError(f"{label}.name must be a non-empty string")
    if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
        raise InputFormatError(f"{label}.capacity must be an int >= 1")
    return ScenarioResource(name=name, capacity=capacity)


def _parse_process(raw: object, *, label: str, resource_names: set[str]) -> ScenarioProcess:
    if not isinstance(raw, dict):
        raise InputFormatError(f"{label} must be an object")
    name = raw.get("name")
    steps_raw = raw.get("steps")
    if not isinstance(name, str) or not name.strip():
        raise InputFormatError(f"{label}.name must be a non-empty string")
    if not isinstance(steps_raw, list):
        raise InputFormatError(f"{label}.steps must be an array")

    steps: list[ScenarioStep] = []
    for j, step_raw in enumerate(steps_raw):
        step_label = f"{label}.steps[{j}]"
        if not isinstance(step_raw, dict) or len(step_raw) != 1:
            raise InputFormatError(
                f"{step_label} must be an object with exactly one of: {', '.join(STEP_ACTIONS)}"
            )
        (action, arg), = step_raw.items()
        if action not in STEP_ACTIONS:
            raise InputFormatError(
                f"{step_label} has unknown action {action!r}; expected one of: {', '.join(STEP_ACTIONS)}"
            )
        if action == "timeout":
            if not isinstance(arg, (int, float)) or isinstance(arg, bool) or not math.isfinite(arg) or arg < 0:
                raise InputFormatError(f"{step_label}.timeout must be a finite number >= 0")
        elif not isinstance(arg, str) or arg not in resource_names:
            raise InputFormatError(f"{step_label}.{action} references unknown resource {arg!r}")
        steps.append(ScenarioStep(action=action, arg=arg))

    return ScenarioProcess(name=name, steps=steps)


def load_trace(path: Path) -> list[TraceRecord]:
    """Load and validate an ordered trace stream from JSON."""
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise InputFormatError("root must be a JSON array of trace records")

    records: list[TraceRecord] = []
    last_seq: int | None = None
    last_time: float | None = None

    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InputFormatError(f"record[{i}] must be an object")

        seq = item.get("seq")
        time = item.get("time")
        kind = item.get("kind")
        event = item.get("event", None)
        data = item.get("data", {})

        if not isinstance(seq, int) or isinstance(seq, bool) or seq < 1:
            raise InputFormatError(f"record[{i}].seq must be an int >= 1")
        if not isinstance(time, (int, float)) or isinstance(time, bool) or not math.isfinite(time):
            raise InputFormatError(f"record[{i}].time must be a finite number")
        if not isinstance(kind, str):
            raise InputFormatError(f"record[{i}].kind must be a string")
        if event is not None and not isinstance(event, str):
            raise InputFormatError(f"record[{i}].event must be a string or null")
        if not isinstance(data, dict):
            raise InputFormatError(f"record[{i}].data must be an object")

        try:
            trace_kind = TraceKind(kind)
        except ValueError as e:
            raise InputFormatError(f"record[{i}].kind is not a valid TraceKind: {kind!r}") from e

        if last_seq is not None and seq <= last_seq:
            raise InputFormatError(
                f"records must be strictly increasing by seq; record[{i}] has seq={seq} after {last_seq}"
            )
        if last_time is not None and time < last_time:
            raise InputFormatError(
                f"simulated time must not decrease; record[{i}] has time={time} after {last_time}"
            )
        last_seq = seq
        last_time = time

        records.append(TraceRecord(seq=seq, time=time, kind=trace_kind, event=event, data=data))

    return records


def dump_trace(records: list[TraceRecord]) -> list[dict[str, Any]]:
    """Return a JSON-serializable trace stream."""
    out: list[dict[str, Any]] = []
    for r in records:
        d = asdict(r)
        d["kind"] = str(r.kind.value)
        out.append(d)
    return out
