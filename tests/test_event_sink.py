from simlite.engine import Scheduler
from simlite.event_sink import InMemoryEventSink
from simlite.events import TraceKind
from simlite.resources import Resource


def test_trace_of_two_timeout_process():
    """
    Asserts causality ordering of the trace (not formatting):
      SCHEDULED(process) -> FIRED(process) -> SCHEDULED(timeout) -> SUSPENDED ...
      ... and FINISHED only after the last timeout fires at t=8.
    """
    sink = InMemoryEventSink()
    sched = Scheduler(event_sink=sink)

    def a():
        yield sched.timeout(5)
        yield sched.timeout(3)

    sched.process(a())
    sched.run()

    assert [r.kind for r in sink.records] == [
        TraceKind.SCHEDULED,
        TraceKind.FIRED,
        TraceKind.SCHEDULED,
        TraceKind.SUSPENDED,
        TraceKind.FIRED,
        TraceKind.SCHEDULED,
        TraceKind.SUSPENDED,
        TraceKind.FIRED,
        TraceKind.FINISHED,
    ]
    assert [r.time for r in sink.records] == [0, 0, 0, 0, 5, 5, 5, 8, 8]
    assert [r.seq for r in sink.records] == list(range(1, 10))

    suspended = sink.of_kind(TraceKind.SUSPENDED)
    assert suspended[0].event == "a#1"
    assert suspended[0].data["waiting_on"] == "timeout#2"
    assert sink.of_kind(TraceKind.SCHEDULED)[1].data == {"fire_time": 5, "priority": 1}


def test_resource_requests_and_releases_are_traced():
    sink = InMemoryEventSink()
    sched = Scheduler(event_sink=sink)
    res = Resource(sched, name="desk")

    req = res.request()
    res.release(req)

    kinds = [r.kind for r in sink.records]
    assert kinds == [TraceKind.REQUESTED, TraceKind.RELEASED, TraceKind.SCHEDULED]
    assert sink.records[0].data == {"resource": "desk", "pending": 1}
    assert sink.records[1].data == {"resource": "desk", "pending": 0}
    assert sink.records[2].data["priority"] == 0


def test_scheduler_without_sink_emits_nothing():
    sched = Scheduler()
    sched.timeout(1)
    sched.run()
    assert sched.event_sink is None
