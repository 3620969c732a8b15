from __future__ import annotations

import pytest

from simlite.engine import Scheduler
from simlite.errors import InvariantViolation, NotFoundError
from simlite.resources import Resource


def test_request_is_pending_and_not_scheduled():
    sched = Scheduler()
    res = Resource(sched, name="desk")

    req = res.request()

    assert res.pending == (req,)
    assert sched.peek() is None
    assert not req.triggered


def test_requests_beyond_capacity_do_not_block():
    """capacity is declared only: a capacity-1 resource hands out three live claims."""
    sched = Scheduler()
    res = Resource(sched, capacity=1)
    served: list[tuple[str, float]] = []

    def customer(name):
        req = res.request()
        res.release(req)
        yield req
        served.append((name, sched.now))

    for name in ("a", "b", "c"):
        sched.process(customer(name))
    sched.run()

    assert served == [("a", 0), ("b", 0), ("c", 0)]


def test_outstanding_requests_can_exceed_capacity():
    sched = Scheduler()
    res = Resource(sched, capacity=2)

    reqs = [res.request() for _ in range(5)]

    assert len(res.pending) == 5
    assert res.pending == tuple(reqs)


def test_process_waits_until_request_is_released():
    sched = Scheduler()
    res = Resource(sched, name="desk")
    served: list[float] = []

    def customer():
        req = res.request()
        got = yield req
        assert got is req
        served.append(sched.now)

    def clerk():
        yield sched.timeout(4)
        res.release(res.pending[0])

    sched.process(customer())
    sched.process(clerk())
    sched.run()

    assert served == [4]
    assert res.pending == ()


def test_release_twice_raises_not_found():
    sched = Scheduler()
    res = Resource(sched)
    req = res.request()

    res.release(req)
    with pytest.raises(NotFoundError):
        res.release(req)


def test_request_release_twice_raises_not_found():
    sched = Scheduler()
    res = Resource(sched)
    req = res.request()

    req.release()
    with pytest.raises(NotFoundError):
        req.release()


def test_release_on_wrong_resource_raises_not_found():
    sched = Scheduler()
    desk = Resource(sched, name="desk")
    phone = Resource(sched, name="phone")
    req = desk.request()

    with pytest.raises(NotFoundError):
        phone.release(req)
    assert desk.pending == (req,)


def test_not_found_is_an_invariant_violation_and_lookup_error():
    sched = Scheduler()
    res = Resource(sched)
    req = res.request()
    req.release()

    with pytest.raises(InvariantViolation):
        req.release()
    with pytest.raises(LookupError):
        res.release(req)


def test_sequential_releases_at_same_instant_fire_in_release_order():
    sched = Scheduler()
    res = Resource(sched, name="desk")
    served: list[str] = []

    def customer(name):
        yield res.request()
        served.append(name)

    def controller(swap):
        yield sched.timeout(2)
        first, second = res.pending
        if swap:
            first, second = second, first
        res.release(first)
        second.release()

    sched.process(customer("a"))
    sched.process(customer("b"))
    sched.process(controller(swap=False))
    sched.run()
    assert served == ["a", "b"]

    sched = Scheduler()
    res = Resource(sched, name="desk")
    served.clear()
    sched.process(customer("a"))
    sched.process(customer("b"))
    sched.process(controller(swap=True))
    sched.run()
    assert served == ["b", "a"]


def test_released_request_fires_before_normal_events_at_same_instant():
    sched = Scheduler()
    res = Resource(sched)
    log: list[str] = []

    def customer():
        yield res.request()
        log.append("request")

    def controller():
        yield sched.timeout(2)
        res.release(res.pending[0])

    def sleeper():
        # queued for t=2 after the controller's timeout
        yield sched.timeout(2)
        log.append("timeout")

    sched.process(customer())
    sched.process(controller())
    sched.process(sleeper())
    sched.run()

    assert log == ["request", "timeout"]
    assert sched.now == 2


def test_released_request_fires_at_current_clock():
    sched = Scheduler()
    res = Resource(sched)
    req = res.request()

    sched.timeout(3)
    sched.step()
    assert sched.now == 3

    res.release(req)
    assert sched.peek() == 3
    sched.run()
    assert req.triggered
    assert sched.now == 3


@pytest.mark.parametrize("capacity", [0, -1, 1.5, True])
def test_capacity_must_be_positive_int(capacity):
    with pytest.raises(ValueError):
        Resource(Scheduler(), capacity=capacity)
