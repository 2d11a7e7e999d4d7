"""
Resource Locator
================

Durable handle for a provisioned resource, persisted by the caller and used
to find the resource again on later runs.

Canonical form is ``<node>/<kind>/<vmid>``, e.g. ``pve1/qemu/100``::

    loc = decode_locator("pve1/qemu/100")
    assert loc == ResourceLocator("pve1", "qemu", 100)
    assert str(loc) == "pve1/qemu/100"
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import LocatorParseError

_LOCATOR_RE = re.compile(r"([^/]+)/([^/]+)/(\d+)", re.ASCII)


@dataclass(frozen=True, slots=True)
class ResourceLocator:
    """(node, kind, vmid) triple identifying one resource."""
    node: str       # e.g. "pve1"
    kind: str       # e.g. "qemu"
    vmid: int

    def __str__(self) -> str:
        return encode_locator(self.node, self.kind, self.vmid)

    @classmethod
    def parse(cls, text: str) -> "ResourceLocator":
        return decode_locator(text)


def encode_locator(node: str, kind: str, vmid: int) -> str:
    """Render a locator string.

    ``node`` and ``kind`` must not contain ``/``; that is the caller's
    responsibility and is not checked here.
    """
    return f"{node}/{kind}/{vmid}"


def decode_locator(text: str) -> ResourceLocator:
    """Parse ``<node>/<kind>/<vmid>`` into a :class:`ResourceLocator`.

    Raises:
        LocatorParseError: if ``text`` is not exactly three ``/``-separated
            segments with a non-negative integer last.
    """
    if not isinstance(text, str):
        raise LocatorParseError(str(text))
    m = _LOCATOR_RE.fullmatch(text)
    if not m:
        raise LocatorParseError(text)
    return ResourceLocator(node=m.group(1), kind=m.group(2), vmid=int(m.group(3)))
