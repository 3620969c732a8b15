from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from simlite.events import TraceKind, TraceRecord


@dataclass(frozen=True, slots=True)
class TimeFrame:
    """
    All trace records emitted while the clock read `time`.

    Frames follow the order of the stream; the clock never moves backwards,
    so each simulated instant yields at most one frame.
    """
    time: float
    records: tuple[TraceRecord, ...]

    def fired(self) -> list[str]:
        return [r.event for r in self.records if r.kind == TraceKind.FIRED and r.event is not None]


def group_records_by_time(records: Iterable[TraceRecord]) -> list[TimeFrame]:
    frames: list[TimeFrame] = []
    current: list[TraceRecord] = []
    time: float | None = None

    for r in records:
        if time is not None and r.time != time:
            frames.append(TimeFrame(time=time, records=tuple(current)))
            current = []
        time = r.time
        current.append(r)

    if current and time is not None:
        frames.append(TimeFrame(time=time, records=tuple(current)))
    return frames


def _fmt_time(t: float) -> str:
    # 5.0 -> "5", 2.5 -> "2.5"
    if isinstance(t, float) and t.is_integer():
        return str(int(t))
    return str(t)


def _detail(r: TraceRecord) -> str:
    d = r.data
    if r.kind == TraceKind.SCHEDULED:
        return f"for t={_fmt_time(d.get('fire_time', r.time))} priority={d.get('priority')}"
    if r.kind == TraceKind.SUSPENDED:
        return f"waiting on {d.get('waiting_on')}"
    if r.kind in (TraceKind.REQUESTED, TraceKind.RELEASED):
        return f"resource={d.get('resource')} pending={d.get('pending')}"
    return ""


def render_text_report(records: Iterable[TraceRecord], *, include_scheduled: bool = False) -> str:
    frames = group_records_by_time(records)

    out: list[str] = []
    if not frames:
        out.append("(No trace records.)")
        return "\n".join(out) + "\n"

    for frame in frames:
        rows = [
            r for r in frame.records
            if include_scheduled or r.kind != TraceKind.SCHEDULED
        ]
        if not rows:
            continue
        out.append(f"t={_fmt_time(frame.time)}")

        width = max(len(r.kind.value) for r in rows)
        for r in rows:
            line = f"  {r.kind.value.ljust(width)} {r.event or '-'}"
            detail = _detail(r)
            if detail:
                line += f"  ({detail})"
            out.append(line)
        out.append("")

    return "\n".join(out).rstrip() + "\n"
