from simlite.__main__ import _demo_scenario
from simlite.engine import Scheduler
from simlite.event_sink import InMemoryEventSink
from simlite.events import TraceKind, TraceRecord
from simlite.reporting import group_records_by_time, render_text_report
from simlite.scenario import build_scenario


def _demo_records() -> list[TraceRecord]:
    sink = InMemoryEventSink()
    sched = Scheduler(event_sink=sink)
    build_scenario(_demo_scenario(), sched)
    sched.run()
    return sink.records


def test_records_group_into_one_frame_per_instant():
    frames = group_records_by_time(_demo_records())

    assert [f.time for f in frames] == [0, 2, 4, 5]
    assert [label.split("#")[0] for label in frames[0].fired()] == ["alice", "bob", "clerk"]
    assert [label.split("#")[0] for label in frames[1].fired()] == ["timeout", "request:desk"]
    assert [label.split("#")[0] for label in frames[3].fired()] == ["timeout", "timeout"]


def test_text_report_lists_instants_and_hides_scheduling_by_default():
    report = render_text_report(_demo_records())
    lines = report.splitlines()

    assert lines[0] == "t=0"
    assert "SCHEDULED" not in report
    assert any("RELEASED" in line and "resource=desk pending=1" in line for line in lines)

    verbose = render_text_report(_demo_records(), include_scheduled=True)
    assert "SCHEDULED" in verbose
    assert "for t=5 priority=1" in verbose


def test_empty_trace_report():
    assert render_text_report([]) == "(No trace records.)\n"


def test_fractional_times_are_printed_as_is():
    records = [TraceRecord(seq=1, time=2.5, kind=TraceKind.FIRED, event="timeout#1")]
    assert render_text_report(records).splitlines()[0] == "t=2.5"
