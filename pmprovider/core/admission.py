"""
Admission Gate
==============

Bounds how many long-running Proxmox operations (VM create/update/delete)
are in flight at once.  Backed by the session state's single lock and its
capacity condition.

Usage::

    with state.gate.slot():
        client.post(f"/nodes/{node}/qemu", vmid=vmid, ...)

Every successful :meth:`AdmissionGate.acquire` must be paired with exactly
one :meth:`AdmissionGate.release`, on every exit path.  A caller that skips
the release leaks one unit of capacity for the rest of the process; that is
a caller bug, not something the gate detects.  Waiters are woken in no
particular order and there is no timeout.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

from .logger import get_logger

if TYPE_CHECKING:
    from .session import SessionState

logger = get_logger("admission")


class AdmissionGate:
    """Counting gate admitting at most ``max_concurrent`` operations."""

    def __init__(self, state: "SessionState") -> None:
        self._state = state

    def acquire(self) -> None:
        """Block the calling thread until a slot is free, then take it."""
        state = self._state
        with state._capacity:
            while state._in_flight >= state.max_concurrent:
                state._capacity.wait()
            state._in_flight += 1
            in_flight = state._in_flight
        logger.debug("Admission slot acquired (%d/%d in flight)", in_flight, state.max_concurrent)

    def release(self) -> None:
        """Give back a slot and wake one waiter."""
        state = self._state
        with state._capacity:
            if state._in_flight <= 0:
                raise RuntimeError("release() called without a matching acquire()")
            state._in_flight -= 1
            in_flight = state._in_flight
            state._capacity.notify()
        logger.debug("Admission slot released (%d/%d in flight)", in_flight, state.max_concurrent)

    @contextmanager
    def slot(self) -> Iterator[None]:
        """Hold one slot for the duration of the block, released on any exit."""
        self.acquire()
        try:
            yield
        finally:
            self.release()
