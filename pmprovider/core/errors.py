"""Error taxonomy for the provider coordination core."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for errors raised by pmprovider."""


class ConfigurationError(ProviderError):
    """Raised when provider settings are missing or invalid."""


class AuthenticationError(ProviderError):
    """Raised when login to the Proxmox API fails.

    Fatal to provider configuration: no session state is produced and no
    retry is attempted.
    """


class AllocationError(ProviderError):
    """Raised when the remote next-VMID query fails.

    The allocator watermark is left untouched, so retrying is safe.
    """

    def __init__(self, message: str, floor: int) -> None:
        super().__init__(message)
        self.floor = floor


class LocatorParseError(ProviderError, ValueError):
    """Raised when a resource locator string is malformed."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Invalid resource id: {text!r}")
        self.text = text
