"""
Provider Session State
======================

One :class:`SessionState` per provider process, built by :func:`configure`
after a successful login and passed explicitly to whatever drives resource
operations.  It owns the authenticated API client, the concurrency ceiling,
the in-flight count and the VMID watermark.

``in_flight`` and ``last_allocated_id`` are only mutated by the admission
gate and the allocator, always under the single lock below.  The client is
never replaced after construction.
"""

from __future__ import annotations

import threading
from typing import Any, Optional

import requests

from ..connectors.proxmox_rest import ProxmoxAPIError, ProxmoxRestClient
from .admission import AdmissionGate
from .allocator import VmidAllocator
from .config import DEFAULT_PARALLEL, ProviderSettings
from .errors import AllocationError, AuthenticationError
from .logger import get_logger

logger = get_logger("session")

# Watermark before the first successful allocation.
UNKNOWN_VMID = -1

__all__ = [
    'AllocationError', 'AuthenticationError', 'SessionState', 'UNKNOWN_VMID', 'configure',
]


class SessionState:
    """Shared provider state with one lock and one capacity condition."""

    def __init__(self, client: Any, max_concurrent: int = DEFAULT_PARALLEL) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._client = client
        self._max_concurrent = max_concurrent
        self._in_flight = 0
        self._last_allocated_id = UNKNOWN_VMID
        self._lock = threading.Lock()
        self._capacity = threading.Condition(self._lock)
        self.gate = AdmissionGate(self)
        self.allocator = VmidAllocator(self)

    @property
    def client(self) -> Any:
        return self._client

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def last_allocated_id(self) -> int:
        with self._lock:
            return self._last_allocated_id

    def __repr__(self) -> str:
        return (
            f"SessionState(max_concurrent={self._max_concurrent}, "
            f"in_flight={self.in_flight}, last_allocated_id={self.last_allocated_id})"
        )


def configure(
    settings: ProviderSettings,
    *,
    session: Optional[requests.Session] = None,
) -> SessionState:
    """
    Log in to Proxmox and build the process's session state.

    Args:
        settings: Resolved provider settings.
        session: Optional ``requests.Session`` for the API client.

    Returns:
        SessionState with nothing in flight and an unknown watermark.

    Raises:
        AuthenticationError: if login fails.  Nothing is retried.
    """
    logger.info(
        "Configuring provider for %s (parallel=%d, tls_insecure=%s)",
        settings.api_url, settings.parallel, settings.tls_insecure,
    )
    client = ProxmoxRestClient(
        settings.api_url,
        tls_insecure=settings.tls_insecure,
        session=session,
    )
    try:
        client.login(settings.user, settings.password)
    except ProxmoxAPIError as exc:
        client.close()
        raise AuthenticationError(f"Login to {settings.api_url} as {settings.user} failed: {exc}") from exc
    return SessionState(client, settings.parallel)
