"""
VMID Allocator
==============

Hands out VMIDs that are strictly increasing for this process by asking
Proxmox for the first free id above the last one handed out.

The whole query-then-update sequence runs under the session lock, so two
threads never query with the same floor.  Calls are serialized, not run
under the admission gate.  A failed query leaves the watermark alone and
is not retried here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..connectors.proxmox_rest import ProxmoxAPIError
from .errors import AllocationError
from .logger import get_logger

if TYPE_CHECKING:
    from .session import SessionState

logger = get_logger("allocator")


class VmidAllocator:

    def __init__(self, state: "SessionState") -> None:
        self._state = state

    def next_id(self) -> int:
        """Allocate the next VMID.

        Raises:
            AllocationError: if the remote query fails or answers with an id
                not above the current watermark.
        """
        state = self._state
        with state._lock:
            floor = state._last_allocated_id + 1
            try:
                vmid = state.client.get_next_id(floor)
            except ProxmoxAPIError as exc:
                raise AllocationError(
                    f"Next VMID query failed (floor {floor}): {exc}", floor
                ) from exc
            if vmid < floor:
                raise AllocationError(
                    f"Proxmox returned VMID {vmid} below floor {floor}", floor
                )
            state._last_allocated_id = vmid
        logger.debug("Allocated VMID %d (floor %d)", vmid, floor)
        return vmid
