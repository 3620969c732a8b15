from __future__ import annotations

import logging

from simlite.engine import Scheduler
from simlite.errors import NotFoundError
from simlite.events import TraceKind
from simlite.models import URGENT, Request

logger = logging.getLogger(__name__)


class Resource:
    """
    A shared resource (machine, clerk, connection...) handing out Requests.

    capacity is declared but not consulted: request() never blocks, however
    many Requests are outstanding. A Request fires only once it is released,
    at the instant of release and ahead of other events due at that instant.
    """

    def __init__(self, scheduler: Scheduler, capacity: int = 1, name: str | None = None):
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
            raise ValueError(f"capacity must be a positive int (got {capacity!r})")
        self.scheduler = scheduler
        self.capacity = capacity
        self.name = name or "resource"
        self._pending: list[Request] = []

    @property
    def pending(self) -> tuple[Request, ...]:
        """Outstanding requests, oldest first."""
        return tuple(self._pending)

    def __repr__(self) -> str:
        return f"<Resource {self.name} capacity={self.capacity} pending={len(self._pending)}>"

    def request(self) -> Request:
        req = Request(self.scheduler, resource=self)
        self._pending.append(req)
        logger.debug("%s requested (%d pending)", req.label, len(self._pending))
        self.scheduler.emit(TraceKind.REQUESTED, req, resource=self.name, pending=len(self._pending))
        return req

    def release(self, req: Request) -> None:
        # identity match: two requests are never interchangeable
        for i, candidate in enumerate(self._pending):
            if candidate is req:
                del self._pending[i]
                break
        else:
            raise NotFoundError(f"{req.label} is not pending on resource {self.name!r}")

        logger.debug("%s released at t=%s", req.label, self.scheduler.now)
        self.scheduler.emit(TraceKind.RELEASED, req, resource=self.name, pending=len(self._pending))
        self.scheduler.schedule(req, URGENT)
