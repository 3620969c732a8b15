from __future__ import annotations

from simlite.engine import Scheduler
from simlite.event_sink import InMemoryEventSink
from simlite.reporting import render_text_report
from simlite.resources import Resource


def main() -> None:
    sink = InMemoryEventSink()
    env = Scheduler(event_sink=sink)
    pump = Resource(env, capacity=1, name="pump")

    def car(name, fill_time):
        req = pump.request()
        yield req
        yield env.timeout(fill_time)
        return name

    def attendant():
        # waves one car through every 3 time units while any are queued
        while pump.pending:
            pump.release(pump.pending[0])
            yield env.timeout(3)

    cars = [env.process(car(n, t), name=n) for n, t in [("red", 2), ("blue", 5), ("green", 1)]]
    env.process(attendant())
    env.run()

    print(render_text_report(sink.records, include_scheduled=True))
    for c in cars:
        print(f"{c.label:<10s} done={not c.is_alive} value={c.value!r}")
    print(f"Clock: t={env.now}")


if __name__ == "__main__":
    main()
